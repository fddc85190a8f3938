"""Device records parsed from ``adb devices`` output."""

from __future__ import annotations

import logging
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator

from pyquestlink._runner import clean_output

_logger = logging.getLogger(__name__)


class DeviceState(StrEnum):
    """Connection state tag reported by adb.

    Values adb reports that have no mapped member resolve to ``UNKNOWN``;
    the raw tag stays available on :attr:`DeviceRecord.state`.
    """

    ONLINE = "device"
    OFFLINE = "offline"
    UNAUTHORIZED = "unauthorized"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> DeviceState:
        return cls.UNKNOWN


class DeviceRecord(BaseModel):
    """One line of the device inventory.

    Rebuilt on every reconciliation cycle and never persisted.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    serial: str
    state: str = ""

    @field_validator("serial")
    @classmethod
    def _require_serial(cls, value: str) -> str:
        if not value:
            raise ValueError("serial must be non-empty")
        return value

    @property
    def status(self) -> DeviceState:
        return DeviceState(self.state)

    @property
    def is_offline(self) -> bool:
        return self.status is DeviceState.OFFLINE

    def is_network(self, port_suffix: str) -> bool:
        """Whether the identifier is a ``host:port`` network address."""
        return self.serial.endswith(port_suffix)


def parse_device_list(output: str) -> list[DeviceRecord]:
    """Parse ``adb devices`` output.

    The first line is the ``List of devices attached`` header. Lines that
    do not carry a tab-separated state are dropped.
    """
    devices: list[DeviceRecord] = []
    for line in clean_output(output).split("\n")[1:]:
        serial, sep, state = line.partition("\t")
        if not sep or not serial.strip():
            if line.strip():
                _logger.debug("Skipping malformed device line %r", line)
            continue
        devices.append(DeviceRecord(serial=serial, state=state))
    return devices
