"""Line-based interactive prompt.

Runs alongside the supervisor on the same event loop. stdin is read on a
daemon thread, so a pending prompt never holds up a reconciliation cycle
or process exit.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import sys
import threading
from collections.abc import Callable
from typing import TextIO

from pyquestlink._runner import CommandRunner, clean_output
from pyquestlink.exceptions import TransportFailure

_logger = logging.getLogger(__name__)

HELP: dict[str, str] = {
    "debug": "Toggle debug printing",
    "adb": "Run adb commands",
}

PACKAGE_LOGGER = "pyquestlink"


def toggle_debug(logger_name: str = PACKAGE_LOGGER) -> bool:
    """Flip the package logger between DEBUG and INFO; return the new state."""
    logger = logging.getLogger(logger_name)
    enabled = logger.getEffectiveLevel() > logging.DEBUG
    logger.setLevel(logging.DEBUG if enabled else logging.INFO)
    return enabled


class Console:
    """Dispatch ``help``, ``debug`` and ``adb <args>`` commands."""

    def __init__(
        self,
        runner: CommandRunner,
        *,
        stdin: TextIO | None = None,
        write: Callable[[str], None] = print,
    ) -> None:
        self._runner = runner
        self._stdin = stdin if stdin is not None else sys.stdin
        self._write = write

    async def handle(self, line: str) -> None:
        args = clean_output(line).split()
        if not args:
            return
        cmd = args[0].lower()

        if cmd == "help":
            self._write("\n".join(f"  {name} - {text}" for name, text in HELP.items()))
        elif cmd == "debug":
            enabled = toggle_debug()
            self._write(f"{'Enabled' if enabled else 'Disabled'} debug printing")
        elif cmd == "adb":
            try:
                out = await self._runner.run(*args[1:])
            except TransportFailure as exc:
                self._write(str(exc))
            else:
                self._write(out)
        else:
            _logger.debug("Ignoring unknown command %r", cmd)

    def _read_lines(self, loop: asyncio.AbstractEventLoop, queue: asyncio.Queue[str | None]) -> None:
        # Runs on the reader thread; the loop may already be closed at exit.
        with contextlib.suppress(RuntimeError):
            for line in iter(self._stdin.readline, ""):
                loop.call_soon_threadsafe(queue.put_nowait, line)
            loop.call_soon_threadsafe(queue.put_nowait, None)

    async def run(self) -> None:
        """Read commands until end of input."""
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue[str | None] = asyncio.Queue()
        reader = threading.Thread(
            target=self._read_lines,
            args=(loop, queue),
            name="pyquestlink-console",
            daemon=True,
        )
        reader.start()
        while True:
            line = await queue.get()
            if line is None:
                _logger.debug("Console input closed")
                return
            await self.handle(line)
