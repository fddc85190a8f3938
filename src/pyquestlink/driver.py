"""Primitive adb transport operations.

Each method wraps exactly one tool invocation. Methods that fail raise
:class:`~pyquestlink.exceptions.TransportFailure` (or
:class:`~pyquestlink.exceptions.ConnectFailure` for :meth:`connect`);
deciding what a failure means is left to the engine.
"""

from __future__ import annotations

import logging
import re

from pyquestlink._constants import CONNECT_SUCCESS_PHRASE, DEFAULT_INTERFACE, DEFAULT_PORT
from pyquestlink._runner import CommandRunner, clean_output
from pyquestlink.exceptions import ConnectFailure, TransportFailure
from pyquestlink.models.device import DeviceRecord, parse_device_list

_logger = logging.getLogger(__name__)

_IPV4_RE = re.compile(r"^\d{1,3}(?:\.\d{1,3}){3}$")


def parse_wlan_address(output: str) -> str:
    """Extract the IPv4 address from ``ip -f inet addr show <iface>``.

    The address is the second token of the second line, e.g.
    ``inet 192.168.1.23/24 brd ...``.
    """
    lines = clean_output(output).split("\n")
    if len(lines) < 2:
        raise TransportFailure(f"No inet address in interface output: {output.strip()!r}")
    tokens = lines[1].split()
    if len(tokens) < 2:
        raise TransportFailure(f"Unexpected interface output: {lines[1]!r}")
    address = tokens[1].split("/")[0]
    if not _IPV4_RE.match(address):
        raise TransportFailure(f"Not an IPv4 address: {address!r}")
    return address


def is_connect_success(output: str, address: str) -> bool:
    """Whether *output* confirms a connection to exactly *address*.

    The cleaned output must start with ``connected to <address>`` and the
    address must end there (end of text, ``:port`` or whitespace), so a
    request for ``10.0.0.5`` is not satisfied by ``10.0.0.50``.
    """
    text = clean_output(output).lower()
    expected = f"{CONNECT_SUCCESS_PHRASE} {address.lower()}"
    if not text.startswith(expected):
        return False
    rest = text[len(expected) :]
    return not rest or rest[0] == ":" or rest[0].isspace()


class ConnectionDriver:
    """adb commands needed to keep one device on the network."""

    def __init__(
        self,
        runner: CommandRunner,
        *,
        port: int = DEFAULT_PORT,
        interface: str = DEFAULT_INTERFACE,
    ) -> None:
        self._runner = runner
        self._port = port
        self._interface = interface

    @property
    def port_suffix(self) -> str:
        return f":{self._port}"

    async def list_devices(self) -> list[DeviceRecord]:
        out = await self._runner.run("devices")
        return parse_device_list(out)

    async def enable_network_mode(self) -> None:
        """Switch the wired device to listen on the network port."""
        await self._runner.run("tcpip", str(self._port))

    async def query_network_address(self) -> str:
        out = await self._runner.run("shell", "ip", "-f", "inet", "addr", "show", self._interface)
        return parse_wlan_address(out)

    async def connect(self, address: str) -> None:
        target = f"{address}:{self._port}"
        try:
            out = await self._runner.run("connect", target)
        except TransportFailure as exc:
            raise ConnectFailure(f"Failed to connect to {address}: {exc}", address=address) from exc
        if not is_connect_success(out, address):
            _logger.debug("Unconfirmed connect response for %s: %r", target, out.strip())
            raise ConnectFailure(f"Failed to connect to {address}", address=address)

    async def disconnect_all(self) -> None:
        await self._runner.run("disconnect")

    async def reset_daemon(self) -> None:
        await self._runner.run("kill-server")
