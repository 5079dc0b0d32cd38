"""XDG settings loading."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Literal, cast

from pydantic import BaseModel, ConfigDict, Field, field_validator

if sys.version_info >= (3, 11):
    import tomllib
else:  # pragma: no cover
    import tomli as tomllib

DEFAULT_CONFIG_PATH = Path("~/.config/cmdlaunch/config.toml").expanduser()
DEFAULT_COMMANDS_FILE = ".config"
DEFAULT_OUTPUT_CAPACITY = 20
DEFAULT_CHANNEL_CAPACITY = 256
DEFAULT_POLL_INTERVAL_MS = 100
DEFAULT_SHUTDOWN_TIMEOUT_SECONDS = 2.0
DEFAULT_STDERR_MODE: Literal["discard", "merge"] = "discard"
COMMANDS_FILE_ENV = "CMDLAUNCH_COMMANDS"

_VALID_STDERR_MODES = {"discard", "merge"}


class LauncherConfig(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    commands_file: str = DEFAULT_COMMANDS_FILE
    output_capacity: int = Field(default=DEFAULT_OUTPUT_CAPACITY, ge=1, le=1000)
    channel_capacity: int = Field(default=DEFAULT_CHANNEL_CAPACITY, ge=1, le=10000)
    poll_interval_ms: int = Field(default=DEFAULT_POLL_INTERVAL_MS, ge=10, le=1000)
    shutdown_timeout_seconds: float = Field(default=DEFAULT_SHUTDOWN_TIMEOUT_SECONDS, ge=0.1, le=30.0)
    stderr_mode: Literal["discard", "merge"] = DEFAULT_STDERR_MODE

    @field_validator("commands_file")
    @classmethod
    def _validate_commands_file(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Commands file path cannot be empty")
        return value.strip()

    @field_validator("stderr_mode")
    @classmethod
    def _validate_stderr_mode(cls, value: str) -> str:
        if value not in _VALID_STDERR_MODES:
            raise ValueError(f"Invalid stderr mode: {value}")
        return value

    @property
    def poll_interval_seconds(self) -> float:
        return self.poll_interval_ms / 1000.0


def get_config_path(path: str | Path | None = None) -> Path:
    if path is None:
        return DEFAULT_CONFIG_PATH
    return Path(path).expanduser()


def _int_in_range(value: object, low: int, high: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and low <= value <= high


def _sanitize(raw: dict[str, object]) -> LauncherConfig:
    cfg = LauncherConfig()

    commands_file = raw.get("commands_file", cfg.commands_file)
    if isinstance(commands_file, str) and commands_file.strip():
        cfg.commands_file = commands_file

    output_capacity = raw.get("output_capacity", cfg.output_capacity)
    if _int_in_range(output_capacity, 1, 1000):
        cfg.output_capacity = cast(int, output_capacity)

    channel_capacity = raw.get("channel_capacity", cfg.channel_capacity)
    if _int_in_range(channel_capacity, 1, 10000):
        cfg.channel_capacity = cast(int, channel_capacity)

    poll_interval_ms = raw.get("poll_interval_ms", cfg.poll_interval_ms)
    if _int_in_range(poll_interval_ms, 10, 1000):
        cfg.poll_interval_ms = cast(int, poll_interval_ms)

    shutdown_timeout = raw.get("shutdown_timeout_seconds", cfg.shutdown_timeout_seconds)
    if (
        isinstance(shutdown_timeout, (int, float))
        and not isinstance(shutdown_timeout, bool)
        and 0.1 <= shutdown_timeout <= 30.0
    ):
        cfg.shutdown_timeout_seconds = float(shutdown_timeout)

    stderr_mode = raw.get("stderr_mode", cfg.stderr_mode)
    if isinstance(stderr_mode, str) and stderr_mode in _VALID_STDERR_MODES:
        cfg.stderr_mode = cast(Literal["discard", "merge"], stderr_mode)

    env_commands = os.getenv(COMMANDS_FILE_ENV, "").strip()
    if env_commands:
        cfg.commands_file = env_commands

    return cfg


def load_config(path: str | Path | None = None) -> LauncherConfig:
    resolved = get_config_path(path)
    if not resolved.exists():
        return _sanitize({})
    try:
        with resolved.open("rb") as handle:
            raw = tomllib.load(handle)
    except (tomllib.TOMLDecodeError, OSError):
        return _sanitize({})
    if not isinstance(raw, dict):
        return _sanitize({})
    return _sanitize(raw)
