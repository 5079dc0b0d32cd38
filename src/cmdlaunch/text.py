"""Text helpers for terminal-safe output and log lines."""

from __future__ import annotations

import re
import shlex

DEFAULT_LOG_TRUNCATE_LIMIT = 700

ANSI_ESCAPE_PATTERN = re.compile(r"\x1b(?:\[[0-?]*[ -/]*[@-~]|\][^\x07\x1b]*(?:\x07|\x1b\\)|[@-Z\\-_])")
_CONTROL_PATTERN = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")


def truncate_text(value: str, limit: int = DEFAULT_LOG_TRUNCATE_LIMIT) -> str:
    """Truncate text to the specified limit with ellipsis."""
    value = value.strip()
    if len(value) <= limit:
        return value
    return value[: max(0, limit - 3)] + "..."


def decode_output_line(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace").rstrip("\r\n")


def sanitize_output_line(value: str) -> str:
    """Drop escape sequences and control bytes that would corrupt a curses row."""
    if not value:
        return ""
    cleaned = ANSI_ESCAPE_PATTERN.sub("", value)
    # Carriage-return progress bars: keep what the terminal would end up showing.
    if "\r" in cleaned:
        cleaned = cleaned.rsplit("\r", 1)[-1]
    cleaned = cleaned.expandtabs(4)
    return _CONTROL_PATTERN.sub("", cleaned)


def command_for_log(args: list[str]) -> str:
    """Return a shell-safe command string bounded for logging."""
    if not args:
        return ""
    return truncate_text(" ".join(shlex.quote(part) for part in args))
