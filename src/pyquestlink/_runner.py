"""Process execution for the device-management tool."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Protocol

from pyquestlink._constants import BENIGN_STDERR
from pyquestlink.exceptions import CommandTimeoutError, TransportFailure

_logger = logging.getLogger(__name__)


class CommandRunner(Protocol):
    """Structural runner interface used by the connection driver.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`AdbRunner`) concrete.
    """

    async def run(self, *args: str) -> str:
        ...


def clean_output(text: str) -> str:
    """Strip carriage returns and surrounding whitespace."""
    return text.replace("\r", "").strip()


def check_stderr(stderr: str, command: Sequence[str]) -> None:
    """Raise :class:`TransportFailure` unless *stderr* is empty or benign."""
    if not stderr:
        return
    if BENIGN_STDERR in stderr.lower():
        _logger.debug("Ignoring benign stderr from %s: %s", command[0] if command else "?", stderr.strip())
        return
    raise TransportFailure(
        f"Stderr: {stderr.strip()}",
        command=command,
        stderr=stderr,
    )


class AdbRunner:
    """Run ``adb`` subcommands and return their stdout.

    A non-zero exit status is a failure. Output on stderr is a failure
    unless it is the benign daemon startup notice.
    """

    def __init__(self, adb_path: str = "adb", *, timeout: float | None = None) -> None:
        self._adb_path = adb_path
        self._timeout = timeout

    async def run(self, *args: str) -> str:
        command = (self._adb_path, *args)
        _logger.debug("exec %s", " ".join(command))
        try:
            proc = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise TransportFailure(
                f"Could not run {self._adb_path}: {exc}",
                command=command,
            ) from exc

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), self._timeout)
        except TimeoutError as exc:
            proc.kill()
            await proc.wait()
            raise CommandTimeoutError(
                f"{' '.join(command)} timed out after {self._timeout}s",
                command=command,
            ) from exc

        stderr_text = stderr.decode("utf-8", errors="replace")
        if proc.returncode:
            raise TransportFailure(
                f"{' '.join(command)} exited with status {proc.returncode}: {stderr_text.strip()}",
                command=command,
                stderr=stderr_text,
            )
        check_stderr(stderr_text, command)
        return stdout.decode("utf-8", errors="replace")
