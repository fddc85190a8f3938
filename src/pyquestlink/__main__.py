"""Command-line entry point: ``python -m pyquestlink``."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from pyquestlink._runner import AdbRunner
from pyquestlink.config import QuestLinkConfig
from pyquestlink.console import PACKAGE_LOGGER, Console
from pyquestlink.driver import ConnectionDriver
from pyquestlink.engine import ReconciliationEngine
from pyquestlink.exceptions import QuestLinkConfigError, QuestLinkError
from pyquestlink.store import FileAddressStore
from pyquestlink.supervisor import LoopSupervisor

_logger = logging.getLogger(PACKAGE_LOGGER)


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="pyquestlink",
        description="Keep a headset connected to adb over Wi-Fi.",
    )
    parser.add_argument("--adb", dest="adb_path", help="adb executable (default: adb on PATH)")
    parser.add_argument("--interval", type=float, help="Seconds between checks (default: 5)")
    parser.add_argument("--address-file", type=Path, help="File caching the device address")
    parser.add_argument("--command-timeout", type=float, help="Seconds before an adb command is killed")
    parser.add_argument("--max-resets", type=int, help="adb server resets allowed per check")
    parser.add_argument("--debug", action="store_true", default=None, help="Enable debug logging")
    parser.add_argument("--once", action="store_true", help="Run a single check and exit")
    return parser.parse_args(argv)


def _build(config: QuestLinkConfig) -> tuple[AdbRunner, ReconciliationEngine]:
    runner = AdbRunner(config.adb_path, timeout=config.command_timeout)
    driver = ConnectionDriver(runner, port=config.port, interface=config.interface)
    engine = ReconciliationEngine(
        driver,
        FileAddressStore(config.address_file),
        max_resets=config.max_resets,
    )
    return runner, engine


async def _run_once(engine: ReconciliationEngine) -> int:
    try:
        result = await engine.run_cycle()
    except QuestLinkError as exc:
        _logger.error("Check failed: %s", exc)
        return 1
    return 0 if result.ok else 1


async def _run_forever(config: QuestLinkConfig) -> int:
    runner, engine = _build(config)
    supervisor = LoopSupervisor(engine, interval=config.interval)
    console = Console(runner)

    task = supervisor.start()
    try:
        await console.run()
        _logger.debug("Console input closed, reconciliation continues")
        await task
    finally:
        await supervisor.stop()
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    try:
        config = QuestLinkConfig.from_env(
            adb_path=args.adb_path,
            interval=args.interval,
            address_file=args.address_file,
            command_timeout=args.command_timeout,
            max_resets=args.max_resets,
            debug=args.debug,
        )
    except QuestLinkConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    logging.basicConfig(level=logging.WARNING, format="%(message)s")
    logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG if config.debug else logging.INFO)

    if args.once:
        _, engine = _build(config)
        return asyncio.run(_run_once(engine))

    with contextlib.suppress(KeyboardInterrupt):
        return asyncio.run(_run_forever(config))
    return 0


if __name__ == "__main__":
    sys.exit(main())
