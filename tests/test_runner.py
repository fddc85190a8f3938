from __future__ import annotations

import asyncio

import pytest

from pyquestlink._runner import AdbRunner, check_stderr, clean_output
from pyquestlink.exceptions import CommandTimeoutError, TransportFailure


class _FakeProcess:
    def __init__(self, stdout: bytes = b"", stderr: bytes = b"", returncode: int = 0, delay: float = 0.0) -> None:
        self._stdout = stdout
        self._stderr = stderr
        self._delay = delay
        self.returncode = returncode
        self.killed = False

    async def communicate(self) -> tuple[bytes, bytes]:
        if self._delay:
            await asyncio.sleep(self._delay)
        return self._stdout, self._stderr

    def kill(self) -> None:
        self.killed = True

    async def wait(self) -> int:
        return self.returncode


def _patch_exec(monkeypatch: pytest.MonkeyPatch, process: _FakeProcess, calls: list[tuple[str, ...]]) -> None:
    async def _fake_exec(*args: str, **_kwargs: object) -> _FakeProcess:
        calls.append(args)
        return process

    monkeypatch.setattr(asyncio, "create_subprocess_exec", _fake_exec)


def test_clean_output_strips_carriage_returns() -> None:
    assert clean_output("  abc\r\ndef\r\n ") == "abc\ndef"


def test_check_stderr_accepts_empty_and_benign() -> None:
    check_stderr("", ("adb", "devices"))
    check_stderr("* daemon not running; starting now at tcp:5037\n* Daemon started successfully\n", ("adb", "devices"))


def test_check_stderr_rejects_other_output() -> None:
    with pytest.raises(TransportFailure) as exc_info:
        check_stderr("error: no devices/emulators found\n", ("adb", "tcpip", "5555"))

    assert exc_info.value.command == ("adb", "tcpip", "5555")
    assert "no devices" in exc_info.value.stderr


@pytest.mark.asyncio
async def test_run_returns_stdout(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[str, ...]] = []
    _patch_exec(monkeypatch, _FakeProcess(stdout=b"List of devices attached\n"), calls)

    out = await AdbRunner("/opt/adb").run("devices")

    assert out == "List of devices attached\n"
    assert calls == [("/opt/adb", "devices")]


@pytest.mark.asyncio
async def test_run_tolerates_daemon_startup_notice(monkeypatch: pytest.MonkeyPatch) -> None:
    process = _FakeProcess(stdout=b"ok", stderr=b"* daemon started successfully\n")
    _patch_exec(monkeypatch, process, [])

    assert await AdbRunner().run("devices") == "ok"


@pytest.mark.asyncio
async def test_run_raises_on_stderr(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_exec(monkeypatch, _FakeProcess(stderr=b"error: device offline\n"), [])

    with pytest.raises(TransportFailure, match="device offline"):
        await AdbRunner().run("shell", "true")


@pytest.mark.asyncio
async def test_run_raises_on_nonzero_exit(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_exec(monkeypatch, _FakeProcess(stdout=b"failed to connect", returncode=1), [])

    with pytest.raises(TransportFailure, match="status 1"):
        await AdbRunner().run("connect", "10.0.0.5:5555")


@pytest.mark.asyncio
async def test_run_wraps_missing_executable(monkeypatch: pytest.MonkeyPatch) -> None:
    async def _missing(*_args: str, **_kwargs: object) -> _FakeProcess:
        raise FileNotFoundError(2, "No such file or directory")

    monkeypatch.setattr(asyncio, "create_subprocess_exec", _missing)

    with pytest.raises(TransportFailure, match="Could not run adb"):
        await AdbRunner().run("devices")


@pytest.mark.asyncio
async def test_run_kills_process_on_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    process = _FakeProcess(stdout=b"late", delay=5.0)
    _patch_exec(monkeypatch, process, [])

    with pytest.raises(CommandTimeoutError):
        await AdbRunner(timeout=0.01).run("shell", "sleep", "10")

    assert process.killed
