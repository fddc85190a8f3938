"""Client configuration for pyquestlink."""

from __future__ import annotations

import dataclasses
import os
import sys
from pathlib import Path
from typing import Any

from pyquestlink._constants import (
    ADDRESS_FILENAME,
    DEFAULT_ADB_PATH,
    DEFAULT_INTERFACE,
    DEFAULT_INTERVAL,
    DEFAULT_MAX_RESETS,
    DEFAULT_PORT,
)
from pyquestlink.exceptions import QuestLinkConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def default_address_file() -> Path:
    """Location of the cached address file.

    Frozen (packaged) builds keep it next to the executable, source
    checkouts keep it in the working directory.
    """
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent / ADDRESS_FILENAME
    return Path.cwd() / ADDRESS_FILENAME


@dataclasses.dataclass(frozen=True)
class QuestLinkConfig:
    """Runtime configuration.

    Parameters
    ----------
    adb_path : str
        Executable used for every device-management command.
    port : int
        TCP port the device listens on once switched to network mode.
    interface : str
        Wireless interface queried for the device's IPv4 address.
    interval : float
        Seconds between the end of one reconciliation cycle and the
        start of the next.
    max_resets : int
        Daemon resets allowed per cycle while verifying a stale network
        device before the failure is handed to the supervisor.
    command_timeout : float or None
        Seconds to wait for a single tool invocation. ``None`` waits
        indefinitely.
    address_file : Path
        File holding the cached device address.
    debug : bool
        Start with debug logging enabled.
    """

    adb_path: str = DEFAULT_ADB_PATH
    port: int = DEFAULT_PORT
    interface: str = DEFAULT_INTERFACE
    interval: float = DEFAULT_INTERVAL
    max_resets: int = DEFAULT_MAX_RESETS
    command_timeout: float | None = None
    address_file: Path = dataclasses.field(default_factory=default_address_file)
    debug: bool = False

    def __post_init__(self) -> None:
        if not 0 < self.port < 65536:
            raise QuestLinkConfigError(f"port must be between 1 and 65535, got {self.port}")
        if self.interval <= 0:
            raise QuestLinkConfigError(f"interval must be positive, got {self.interval}")
        if self.max_resets < 1:
            raise QuestLinkConfigError(f"max_resets must be at least 1, got {self.max_resets}")
        if self.command_timeout is not None and self.command_timeout <= 0:
            raise QuestLinkConfigError(f"command_timeout must be positive, got {self.command_timeout}")
        if not self.adb_path.strip():
            raise QuestLinkConfigError("adb_path must be non-empty")

    @classmethod
    def from_env(cls, **overrides: Any) -> QuestLinkConfig:
        """Create configuration from ``QUESTLINK_*`` environment variables.

        Explicit keyword arguments override environment values. Overrides
        passed as ``None`` are ignored so unset command-line options fall
        through to the environment.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        for env_key, field_name in (
            ("QUESTLINK_ADB_PATH", "adb_path"),
            ("QUESTLINK_INTERFACE", "interface"),
        ):
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        try:
            port_env = env.get("QUESTLINK_PORT")
            if port_env is not None:
                config_kwargs["port"] = int(port_env)

            interval_env = env.get("QUESTLINK_INTERVAL")
            if interval_env is not None:
                config_kwargs["interval"] = float(interval_env)

            resets_env = env.get("QUESTLINK_MAX_RESETS")
            if resets_env is not None:
                config_kwargs["max_resets"] = int(resets_env)

            timeout_env = env.get("QUESTLINK_COMMAND_TIMEOUT")
            if timeout_env is not None and timeout_env.strip():
                config_kwargs["command_timeout"] = float(timeout_env)
        except ValueError as exc:
            raise QuestLinkConfigError(f"Invalid numeric environment value: {exc}") from exc

        file_env = env.get("QUESTLINK_ADDRESS_FILE")
        if file_env:
            config_kwargs["address_file"] = Path(file_env)

        config_kwargs["debug"] = _env_bool(env.get("QUESTLINK_DEBUG"), False)

        config_kwargs.update({k: v for k, v in overrides.items() if v is not None})
        if isinstance(config_kwargs.get("address_file"), str):
            config_kwargs["address_file"] = Path(config_kwargs["address_file"])

        return cls(**config_kwargs)
