"""pyquestlink - keep a headset connected to adb over the network."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyquestlink")
except PackageNotFoundError:
    __version__ = "0+local"
from pyquestlink._runner import AdbRunner, CommandRunner
from pyquestlink.config import QuestLinkConfig
from pyquestlink.driver import ConnectionDriver
from pyquestlink.engine import CycleOutcome, CycleResult, ReconciliationEngine
from pyquestlink.exceptions import (
    AmbiguousState,
    CommandTimeoutError,
    ConnectFailure,
    NoAddressAvailable,
    QuestLinkConfigError,
    QuestLinkError,
    TransportFailure,
)
from pyquestlink.models import DeviceRecord, DeviceState
from pyquestlink.store import AddressStore, FileAddressStore, MemoryAddressStore
from pyquestlink.supervisor import LoopSupervisor

__all__ = [
    "__version__",
    "AddressStore",
    "AdbRunner",
    "AmbiguousState",
    "CommandRunner",
    "CommandTimeoutError",
    "ConnectFailure",
    "ConnectionDriver",
    "CycleOutcome",
    "CycleResult",
    "DeviceRecord",
    "DeviceState",
    "FileAddressStore",
    "LoopSupervisor",
    "MemoryAddressStore",
    "NoAddressAvailable",
    "QuestLinkConfig",
    "QuestLinkConfigError",
    "QuestLinkError",
    "ReconciliationEngine",
    "TransportFailure",
]
