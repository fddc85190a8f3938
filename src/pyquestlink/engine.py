"""Connection reconciliation.

One call to :meth:`ReconciliationEngine.run_cycle` inspects the visible
devices and moves the headset one step closer to a working network
connection:

1. take the inventory, dropping stale network entries when anything
   reports ``offline``;
2. classify identifiers as network-attached (``host:port``) or wired,
   collapsing duplicate network identities;
3. run the guards, which abort the cycle with a user instruction when
   more than one device is visible;
4. verify a lone network device, resetting the adb daemon and starting
   over when it does not answer;
5. otherwise switch a lone wired device to network mode (or fall back
   to the cached address) and connect to it.

Guard aborts and failed connects are ordinary outcomes reported through
:class:`CycleResult`. Transport failures outside the best-effort cleanup
calls propagate to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Literal, NamedTuple

from pydantic import BaseModel, ConfigDict

from pyquestlink._constants import (
    DEFAULT_MAX_RESETS,
    MSG_DISCONNECT_CABLE,
    MSG_MULTIPLE,
    MSG_NO_ADDRESS,
    MSG_UNPLUG,
)
from pyquestlink.driver import ConnectionDriver
from pyquestlink.exceptions import (
    AmbiguousState,
    ConnectFailure,
    NoAddressAvailable,
    TransportFailure,
)
from pyquestlink.models.device import DeviceRecord
from pyquestlink.state.indicator import ConnectionIndicator
from pyquestlink.store import AddressStore

_logger = logging.getLogger(__name__)

FailurePolicy = Literal["log", "raise"]


class CycleOutcome(StrEnum):
    UNPLUG_REQUIRED = "unplug_required"
    MULTIPLE_DEVICES = "multiple_devices"
    VERIFIED = "verified"
    CONNECTED = "connected"
    CONNECT_FAILED = "connect_failed"
    NO_ADDRESS = "no_address"


class CycleResult(BaseModel):
    """How a reconciliation cycle ended."""

    model_config = ConfigDict(frozen=True)

    outcome: CycleOutcome
    address: str | None = None
    resets: int = 0
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome in (CycleOutcome.VERIFIED, CycleOutcome.CONNECTED)

    def raise_for_outcome(self) -> None:
        """Raise the matching :mod:`pyquestlink.exceptions` error for a non-ok outcome."""
        message = self.message or self.outcome.value
        if self.outcome in (CycleOutcome.UNPLUG_REQUIRED, CycleOutcome.MULTIPLE_DEVICES):
            raise AmbiguousState(message)
        if self.outcome is CycleOutcome.NO_ADDRESS:
            raise NoAddressAvailable(message)
        if self.outcome is CycleOutcome.CONNECT_FAILED:
            raise ConnectFailure(message, address=self.address or "")


@dataclass
class Inventory:
    """Device identifiers split by transport for a single cycle."""

    network: list[str] = field(default_factory=list)
    wired: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.network) + len(self.wired)


def classify(devices: Sequence[DeviceRecord], port_suffix: str) -> Inventory:
    inventory = Inventory()
    for device in devices:
        if device.is_network(port_suffix):
            inventory.network.append(device.serial)
        else:
            inventory.wired.append(device.serial)
    return inventory


class GuardAbort(NamedTuple):
    outcome: CycleOutcome
    message: str


Guard = Callable[[Inventory], GuardAbort | None]


def physical_conflict_guard(inventory: Inventory) -> GuardAbort | None:
    """A cable is plugged in while another identity is also visible."""
    if inventory.total > 1 and inventory.wired:
        return GuardAbort(CycleOutcome.UNPLUG_REQUIRED, MSG_UNPLUG)
    return None


def residual_ambiguity_guard(inventory: Inventory) -> GuardAbort | None:
    if inventory.total > 1:
        return GuardAbort(CycleOutcome.MULTIPLE_DEVICES, MSG_MULTIPLE)
    return None


GUARDS: tuple[Guard, ...] = (physical_conflict_guard, residual_ambiguity_guard)


class ReconciliationEngine:
    """Keep a single device connected over the network.

    Parameters
    ----------
    driver : ConnectionDriver
        adb operations.
    store : AddressStore
        Cached address, read when no device is visible.
    max_resets : int
        Daemon resets allowed per cycle while verifying a network device
        that does not answer. The failure after the last reset propagates.
    connected_address : str or None
        Initial value of the connected-address indicator.
    on_message : callable, optional
        Receives every user-facing message in addition to the log.
    """

    def __init__(
        self,
        driver: ConnectionDriver,
        store: AddressStore,
        *,
        max_resets: int = DEFAULT_MAX_RESETS,
        connected_address: str | None = None,
        on_message: Callable[[str], None] | None = None,
    ) -> None:
        self._driver = driver
        self._store = store
        self._max_resets = max_resets
        self._on_message = on_message
        self._indicator = ConnectionIndicator(self._emit, connected_address)

    @property
    def connected_address(self) -> str | None:
        return self._indicator.address

    def _emit(self, message: str) -> None:
        _logger.info("%s", message)
        if self._on_message is not None:
            try:
                self._on_message(message)
            except Exception:
                _logger.debug("on_message callback failed", exc_info=True)

    # ------------------------------------------------------------------
    # Driver calls with indicator side effects
    # ------------------------------------------------------------------

    async def _disconnect_all(self, *, on_failure: FailurePolicy) -> None:
        # Cleared up front: the intent is an unconditional reset.
        self._indicator.clear()
        try:
            await self._driver.disconnect_all()
        except TransportFailure:
            if on_failure == "raise":
                raise
            _logger.debug("Disconnect-all failed, continuing", exc_info=True)

    async def _reset_daemon(self, *, on_failure: FailurePolicy) -> None:
        self._indicator.clear()
        try:
            await self._driver.reset_daemon()
        except TransportFailure:
            if on_failure == "raise":
                raise
            _logger.debug("Daemon reset failed, continuing", exc_info=True)

    # ------------------------------------------------------------------
    # Cycle
    # ------------------------------------------------------------------

    async def take_inventory(self) -> Inventory:
        """List devices, clean up after offline entries and classify."""
        suffix = self._driver.port_suffix
        devices = await self._driver.list_devices()
        _logger.debug("Devices: %s", [(d.serial, d.state) for d in devices])

        if any(d.is_offline for d in devices):
            _logger.debug("Detected offline devices, disconnecting all")
            await self._disconnect_all(on_failure="log")
            devices = [d for d in devices if not d.is_network(suffix)]

        inventory = classify(devices, suffix)

        if len(inventory.network) > 1:
            _logger.debug("Multiple network devices found, disconnecting all")
            await self._disconnect_all(on_failure="log")
            inventory = Inventory(wired=inventory.wired)

        return inventory

    async def run_cycle(self) -> CycleResult:
        _logger.debug("Checking status")
        resets = 0
        while True:
            inventory = await self.take_inventory()

            for guard in GUARDS:
                abort = guard(inventory)
                if abort is not None:
                    self._emit(abort.message)
                    return CycleResult(outcome=abort.outcome, resets=resets, message=abort.message)

            if len(inventory.network) != 1:
                return await self._connect(inventory, resets)

            _logger.debug("Detected network device %s, verifying connection", inventory.network[0])
            try:
                address = await self._driver.query_network_address()
            except TransportFailure:
                if resets >= self._max_resets:
                    _logger.debug("Verification failed after %d resets", resets)
                    raise
                _logger.debug("Bad connection, resetting adb", exc_info=True)
                await self._reset_daemon(on_failure="raise")
                resets += 1
                continue

            _logger.debug("Connection verified")
            if address != self._indicator.address:
                self._store.save(address)
                self._indicator.set(address)
            return CycleResult(outcome=CycleOutcome.VERIFIED, address=address, resets=resets)

    async def _connect(self, inventory: Inventory, resets: int) -> CycleResult:
        address: str | None
        if inventory.wired:
            _logger.debug("Detected wired device %s", inventory.wired[0])
            address = await self._driver.query_network_address()
            _logger.debug("Saving device IP: %s", address)
            self._store.save(address)
            await self._driver.enable_network_mode()
        else:
            address = self._store.load()

        if address is None:
            self._emit(MSG_NO_ADDRESS)
            return CycleResult(outcome=CycleOutcome.NO_ADDRESS, resets=resets, message=MSG_NO_ADDRESS)

        self._emit(f"Connecting to {address}...")
        try:
            await self._driver.connect(address)
        except ConnectFailure as exc:
            _logger.debug("Connect failed: %s", exc)
            message = f"Failed to connect to {address}"
            self._emit(message)
            return CycleResult(
                outcome=CycleOutcome.CONNECT_FAILED,
                address=address,
                resets=resets,
                message=message,
            )

        self._indicator.set(address)
        if inventory.wired:
            self._emit(MSG_DISCONNECT_CABLE)
        return CycleResult(outcome=CycleOutcome.CONNECTED, address=address, resets=resets)
