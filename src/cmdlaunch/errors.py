"""Launcher error model and exit code contract."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    INVALID_ARGS = 2
    CONFIG_ERROR = 3
    RUNTIME_ERROR = 4
    SPAWN_ERROR = 5
    STREAM_ERROR = 6
    TERMINAL_ERROR = 7


@dataclass
class LauncherError(Exception):
    message: str
    code: ExitCode = ExitCode.RUNTIME_ERROR
    hint: str = ""

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message} Hint: {self.hint}"
        return self.message


@dataclass
class ConfigError(LauncherError):
    code: ExitCode = ExitCode.CONFIG_ERROR


@dataclass
class SpawnError(LauncherError):
    code: ExitCode = ExitCode.SPAWN_ERROR


@dataclass
class StreamError(LauncherError):
    code: ExitCode = ExitCode.STREAM_ERROR


@dataclass
class RenderError(LauncherError):
    code: ExitCode = ExitCode.TERMINAL_ERROR


def user_facing_error(message: str, *, hint: str = "") -> str:
    if hint:
        return f"Error: {message}. Next step: {hint}"
    return f"Error: {message}."
