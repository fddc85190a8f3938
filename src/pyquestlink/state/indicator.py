"""Connected-address indicator."""

from __future__ import annotations

import logging
from collections.abc import Callable

_logger = logging.getLogger(__name__)


class ConnectionIndicator:
    """The address the engine believes it is connected to.

    Only transitions between "nothing" and "something" are announced:
    ``None -> addr`` emits ``Connected to addr`` and ``addr -> None``
    emits ``Disconnected from addr``. Address-to-address and
    ``None -> None`` updates are silent.
    """

    def __init__(
        self,
        notify: Callable[[str], None],
        address: str | None = None,
    ) -> None:
        self._notify = notify
        self._address = address

    @property
    def address(self) -> str | None:
        return self._address

    def set(self, address: str | None) -> None:
        previous = self._address
        if previous and not address:
            self._notify(f"Disconnected from {previous}")
        elif not previous and address:
            self._notify(f"Connected to {address}")
        self._address = address or None

    def clear(self) -> None:
        self.set(None)
