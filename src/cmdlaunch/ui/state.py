"""UI state primitives owned by the controller loop."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum, IntFlag

DEFAULT_OUTPUT_CAPACITY = 20


class RunState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    QUITTING = "quitting"


class Layout(str, Enum):
    LIST = "list"
    OUTPUT = "output"


class KeyCode(str, Enum):
    UP = "up"
    DOWN = "down"
    ENTER = "enter"
    CHAR = "char"
    RESIZE = "resize"
    OTHER = "other"


class Modifiers(IntFlag):
    NONE = 0
    CONTROL = 1


@dataclass(frozen=True)
class KeyEvent:
    code: KeyCode
    char: str = ""
    modifiers: Modifiers = Modifiers.NONE

    @property
    def is_quit(self) -> bool:
        return (
            self.code == KeyCode.CHAR
            and Modifiers.CONTROL in self.modifiers
            and self.char.lower() in {"q", "c"}
        )


@dataclass
class SelectionCursor:
    """Index into a catalog of ``size`` rows; ``None`` only when empty."""

    size: int
    index: int | None = None

    def __post_init__(self) -> None:
        if self.size < 0:
            raise ValueError(f"Cursor size cannot be negative: {self.size}")
        if self.size == 0:
            self.index = None
        elif self.index is None:
            self.index = 0
        else:
            self.index = min(max(self.index, 0), self.size - 1)

    def move_next(self) -> int | None:
        if self.index is not None:
            self.index = min(self.index + 1, self.size - 1)
        return self.index

    def move_previous(self) -> int | None:
        if self.index is not None:
            self.index = max(self.index - 1, 0)
        return self.index


class OutputBuffer:
    """Tail window of output lines; the oldest line is evicted at capacity."""

    def __init__(self, capacity: int = DEFAULT_OUTPUT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"Output capacity must be positive: {capacity}")
        self._lines: deque[str] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._lines.maxlen or 0

    def push(self, line: str) -> None:
        self._lines.append(line)

    def extend(self, lines: Iterable[str]) -> None:
        self._lines.extend(lines)

    def clear(self) -> None:
        self._lines.clear()

    def lines(self) -> list[str]:
        return list(self._lines)

    def __len__(self) -> int:
        return len(self._lines)


@dataclass(frozen=True)
class FrameModel:
    """Everything the view needs to draw one frame."""

    layout: Layout
    commands: tuple[str, ...] = ()
    selected: int | None = None
    output: tuple[str, ...] = ()
    command: str = ""
    status: str = ""
