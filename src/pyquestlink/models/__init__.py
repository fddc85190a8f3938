"""Data models for pyquestlink."""

from pyquestlink.models.device import DeviceRecord, DeviceState, parse_device_list

__all__ = [
    "DeviceRecord",
    "DeviceState",
    "parse_device_list",
]
