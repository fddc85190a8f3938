"""Internal constants shared across the library."""

DEFAULT_ADB_PATH = "adb"
DEFAULT_PORT = 5555
DEFAULT_INTERFACE = "wlan0"
DEFAULT_INTERVAL = 5.0
DEFAULT_MAX_RESETS = 3
ADDRESS_FILENAME = "ip.txt"

# adb prints this on stderr whenever a command has to spawn the server first.
BENIGN_STDERR = "daemon started successfully"

CONNECT_SUCCESS_PHRASE = "connected to"

# ------------------------------------------------------------------
# User-facing messages
# ------------------------------------------------------------------

MSG_UNPLUG = "Please unplug the device from the computer"
MSG_MULTIPLE = "Error: multiple devices detected"
MSG_NO_ADDRESS = "Could not get IP address, please connect the device to the computer"
MSG_DISCONNECT_CABLE = "Please disconnect the device from the computer"
