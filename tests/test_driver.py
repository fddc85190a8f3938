from __future__ import annotations

import pytest

from pyquestlink.driver import ConnectionDriver, is_connect_success, parse_wlan_address
from pyquestlink.exceptions import ConnectFailure, TransportFailure


class _RecordingRunner:
    def __init__(self, output: str = "", error: Exception | None = None) -> None:
        self._output = output
        self._error = error
        self.calls: list[tuple[str, ...]] = []

    async def run(self, *args: str) -> str:
        self.calls.append(args)
        if self._error is not None:
            raise self._error
        return self._output


# ------------------------------------------------------------------
# Output parsing
# ------------------------------------------------------------------


def test_parse_wlan_address_reads_second_line() -> None:
    output = (
        "32: wlan0: <BROADCAST,MULTICAST,UP,LOWER_UP> mtu 1500 qdisc mq state UP\r\n"
        "    inet 10.0.0.5/24 brd 10.0.0.255 scope global wlan0\r\n"
        "       valid_lft forever preferred_lft forever\r\n"
    )
    assert parse_wlan_address(output) == "10.0.0.5"


@pytest.mark.parametrize(
    "output",
    [
        "",
        "Device \"wlan0\" does not exist.",
        "32: wlan0: <NO-CARRIER> mtu 1500\n    inet",
        "32: wlan0: <UP>\n    link/ether 00:11:22:33:44:55",
    ],
)
def test_parse_wlan_address_rejects_missing_address(output: str) -> None:
    with pytest.raises(TransportFailure):
        parse_wlan_address(output)


@pytest.mark.parametrize(
    ("output", "address", "expected"),
    [
        ("connected to 10.0.0.5:5555", "10.0.0.5", True),
        ("Connected To 10.0.0.5:5555\r\n", "10.0.0.5", True),
        ("connected to 10.0.0.5", "10.0.0.5", True),
        ("connected to 10.0.0.50:5555", "10.0.0.5", False),
        ("connected to 10.0.0.5", "10.0.0.50", False),
        ("already connected to 10.0.0.5:5555", "10.0.0.5", False),
        ("failed to connect to '10.0.0.5:5555': Connection refused", "10.0.0.5", False),
        ("cannot connect to 10.0.0.5:5555: No route to host", "10.0.0.5", False),
        ("", "10.0.0.5", False),
    ],
)
def test_is_connect_success(output: str, address: str, expected: bool) -> None:
    assert is_connect_success(output, address) is expected


# ------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_commands_issued_for_each_operation() -> None:
    runner = _RecordingRunner()
    driver = ConnectionDriver(runner, port=5556, interface="wlan1")

    await driver.enable_network_mode()
    await driver.disconnect_all()
    await driver.reset_daemon()

    assert runner.calls == [("tcpip", "5556"), ("disconnect",), ("kill-server",)]
    assert driver.port_suffix == ":5556"


@pytest.mark.asyncio
async def test_query_network_address_uses_interface() -> None:
    runner = _RecordingRunner("1: wlan1: <UP>\n    inet 192.168.4.7/24 scope global wlan1\n")
    driver = ConnectionDriver(runner, interface="wlan1")

    assert await driver.query_network_address() == "192.168.4.7"
    assert runner.calls == [("shell", "ip", "-f", "inet", "addr", "show", "wlan1")]


@pytest.mark.asyncio
async def test_list_devices_parses_output() -> None:
    runner = _RecordingRunner("List of devices attached\n1WMHH8123\tdevice\n10.0.0.5:5555\toffline\n\n")
    driver = ConnectionDriver(runner)

    devices = await driver.list_devices()

    assert [(d.serial, d.state) for d in devices] == [("1WMHH8123", "device"), ("10.0.0.5:5555", "offline")]
    assert runner.calls == [("devices",)]


@pytest.mark.asyncio
async def test_connect_success() -> None:
    runner = _RecordingRunner("connected to 10.0.0.5:5555\n")
    driver = ConnectionDriver(runner)

    await driver.connect("10.0.0.5")

    assert runner.calls == [("connect", "10.0.0.5:5555")]


@pytest.mark.asyncio
async def test_connect_unconfirmed_raises_connect_failure() -> None:
    driver = ConnectionDriver(_RecordingRunner("failed to connect to '10.0.0.5:5555': Connection refused"))

    with pytest.raises(ConnectFailure) as exc_info:
        await driver.connect("10.0.0.5")

    assert exc_info.value.address == "10.0.0.5"


@pytest.mark.asyncio
async def test_connect_transport_error_becomes_connect_failure() -> None:
    driver = ConnectionDriver(_RecordingRunner(error=TransportFailure("Stderr: boom")))

    with pytest.raises(ConnectFailure) as exc_info:
        await driver.connect("10.0.0.5")

    assert isinstance(exc_info.value.__cause__, TransportFailure)
