"""Fixed-interval scheduling of reconciliation cycles."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Protocol

from pyquestlink._constants import DEFAULT_INTERVAL
from pyquestlink.engine import CycleResult

_logger = logging.getLogger(__name__)


class CycleRunner(Protocol):
    async def run_cycle(self) -> CycleResult:
        ...


class LoopSupervisor:
    """Run one cycle at a time, pausing *interval* seconds between them.

    The pause is measured from the end of a cycle, so a slow cycle pushes
    the next one back instead of overlapping it. Exceptions escaping a
    cycle are logged and the loop carries on.
    """

    def __init__(self, engine: CycleRunner, *, interval: float = DEFAULT_INTERVAL) -> None:
        self._engine = engine
        self._interval = interval
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self.cycles = 0
        self.last_result: CycleResult | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run(self) -> None:
        self._stop_event.clear()
        while not self._stop_event.is_set():
            try:
                self.last_result = await self._engine.run_cycle()
            except Exception:
                _logger.error("Reconciliation cycle failed", exc_info=True)
            self.cycles += 1
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(self._stop_event.wait(), self._interval)

    def start(self) -> asyncio.Task[None]:
        """Schedule :meth:`run` on the running loop."""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run(), name="pyquestlink-supervisor")
        return self._task

    async def stop(self) -> None:
        """Ask the loop to exit after the in-flight cycle and wait for it."""
        self._stop_event.set()
        task = self._task
        self._task = None
        if task is not None:
            await task
