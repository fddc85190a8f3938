"""Custom exception hierarchy for pyquestlink."""

from __future__ import annotations

from collections.abc import Sequence


class QuestLinkError(Exception):
    """Base exception for all pyquestlink errors."""


class QuestLinkConfigError(QuestLinkError):
    """Invalid or missing configuration."""


class TransportFailure(QuestLinkError):
    """The device-management tool failed or wrote an unrecognized diagnostic."""

    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str] = (),
        stderr: str = "",
    ) -> None:
        self.command = tuple(command)
        self.stderr = stderr
        super().__init__(message)


class CommandTimeoutError(TransportFailure):
    """The tool did not exit within ``command_timeout`` and was killed."""


class ConnectFailure(QuestLinkError):
    """A connect attempt was not confirmed for the requested address."""

    def __init__(self, message: str, *, address: str) -> None:
        self.address = address
        super().__init__(message)


class AmbiguousState(QuestLinkError):
    """More than one candidate device remained after the cycle guards.

    The engine reports this as a cycle outcome rather than raising it;
    see :meth:`pyquestlink.engine.CycleResult.raise_for_outcome`.
    """


class NoAddressAvailable(QuestLinkError):
    """No device attached and no cached address to reconnect to."""
