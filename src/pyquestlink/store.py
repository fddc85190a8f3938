"""Durable storage for the last known device address."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from pyquestlink._runner import clean_output

_logger = logging.getLogger(__name__)


class AddressStore(Protocol):
    """Holds at most one cached network address."""

    def load(self) -> str | None:
        ...

    def save(self, address: str) -> None:
        ...


class FileAddressStore:
    """Keep the address in a single text file.

    The file holds the bare host portion; carriage returns and
    surrounding whitespace are ignored when reading.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> str | None:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        address = clean_output(text)
        return address or None

    def save(self, address: str) -> None:
        _logger.debug("Saving device IP %s to %s", address, self._path)
        self._path.write_text(address, encoding="utf-8")


class MemoryAddressStore:
    """In-process store for runs that should not touch the filesystem."""

    def __init__(self, address: str | None = None) -> None:
        self.address = address
        self.writes: list[str] = []

    def load(self) -> str | None:
        return self.address

    def save(self, address: str) -> None:
        self.address = address
        self.writes.append(address)
