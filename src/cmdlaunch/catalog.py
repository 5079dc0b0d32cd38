"""Command catalog parsed from a plain-text commands file."""

from __future__ import annotations

import logging as py_logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path

from cmdlaunch.errors import ConfigError

logger = py_logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandSpec:
    program: str
    arguments: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.program:
            raise ValueError("CommandSpec.program cannot be empty")

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.arguments]

    @property
    def display(self) -> str:
        return " ".join(self.argv)


def parse_command_line(line: str) -> CommandSpec | None:
    """Split one line on whitespace runs; blank lines yield ``None``."""
    tokens = line.split()
    if not tokens:
        return None
    return CommandSpec(program=tokens[0], arguments=tuple(tokens[1:]))


class CommandCatalog(Sequence[CommandSpec]):
    """Read-only, source-ordered list of commands."""

    def __init__(self, commands: Sequence[CommandSpec] = ()) -> None:
        self._commands: tuple[CommandSpec, ...] = tuple(commands)

    def __getitem__(self, index: int) -> CommandSpec:  # type: ignore[override]
        return self._commands[index]

    def __len__(self) -> int:
        return len(self._commands)

    def __iter__(self) -> Iterator[CommandSpec]:
        return iter(self._commands)

    def __repr__(self) -> str:
        return f"CommandCatalog({list(self._commands)!r})"

    def display_lines(self) -> list[str]:
        return [spec.display for spec in self._commands]

    @classmethod
    def parse(cls, text: str) -> CommandCatalog:
        commands: list[CommandSpec] = []
        for line in text.splitlines():
            spec = parse_command_line(line)
            if spec is not None:
                commands.append(spec)
        return cls(commands)

    @classmethod
    def load(cls, source: str | Path) -> CommandCatalog:
        path = Path(source).expanduser()
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ConfigError(
                f"Commands file not found: {path}",
                hint="Create the file with one command per line or pass --commands.",
            ) from exc
        except UnicodeDecodeError as exc:
            raise ConfigError(
                f"Commands file is not valid UTF-8: {path}",
                hint="Save the commands file as UTF-8 text.",
            ) from exc
        except OSError as exc:
            raise ConfigError(
                f"Commands file could not be read: {path}",
                hint=exc.strerror or "Check the file permissions.",
            ) from exc
        catalog = cls.parse(text)
        logger.info("catalog-loaded path=%s commands=%s", path, len(catalog))
        return catalog