"""Curses drawing of controller frames."""

from __future__ import annotations

import curses
import locale
from contextlib import suppress
from dataclasses import astuple, dataclass
from typing import Any

from cmdlaunch.text import sanitize_output_line
from cmdlaunch.ui.state import FrameModel, Layout

APP_TITLE = "cmdlaunch"
OUTPUT_TITLE = "Process Output"
SELECTION_MARKER = "> "
DISMISS_HINT = " any key: back to list "


@dataclass(frozen=True)
class Glyphs:
    top_left: str
    top_right: str
    bottom_left: str
    bottom_right: str
    horizontal: str
    vertical: str
    up: str
    down: str


UNICODE_GLYPHS = Glyphs("┏", "┓", "┗", "┛", "━", "┃", "↑", "↓")
ASCII_GLYPHS = Glyphs("+", "+", "+", "+", "-", "|", "^", "v")


def key_help(glyphs: Glyphs = UNICODE_GLYPHS) -> tuple[tuple[str, str], ...]:
    return (
        (glyphs.up, "Up"),
        (glyphs.down, "Down"),
        ("Enter", "Run"),
        ("Ctrl+Q/C", "Quit"),
    )


KEY_HELP = key_help()


def screen_encoding(screen: Any) -> str:
    return getattr(screen, "encoding", None) or locale.getpreferredencoding(False)


def glyphs_for(screen: Any) -> Glyphs:
    """Box and arrow glyphs the screen encoding can carry, ASCII otherwise."""
    try:
        "".join(astuple(UNICODE_GLYPHS)).encode(screen_encoding(screen))
    except (UnicodeEncodeError, LookupError):
        return ASCII_GLYPHS
    return UNICODE_GLYPHS


def put_text(screen: Any, y: int, x: int, text: str, attr: int = curses.A_NORMAL) -> None:
    """Write ``text`` clipped to the screen; out-of-range cells are skipped."""
    height, width = screen.getmaxyx()
    if y < 0 or y >= height or x < 0 or x >= width:
        return
    clipped = text[: width - x]
    if not clipped:
        return
    try:
        screen.addstr(y, x, clipped, attr)
    except UnicodeEncodeError:
        encoding = screen_encoding(screen)
        with suppress(curses.error):
            screen.addstr(y, x, clipped.encode(encoding, "replace").decode(encoding), attr)
    except curses.error:
        # Writing the bottom-right cell moves the cursor off-screen and raises.
        pass


def draw_box(
    screen: Any,
    y: int,
    x: int,
    height: int,
    width: int,
    title: str = "",
    glyphs: Glyphs = UNICODE_GLYPHS,
) -> None:
    if height < 2 or width < 2:
        return
    inner = width - 2
    put_text(screen, y, x, glyphs.top_left + glyphs.horizontal * inner + glyphs.top_right)
    for row in range(y + 1, y + height - 1):
        put_text(screen, row, x, glyphs.vertical)
        put_text(screen, row, x + width - 1, glyphs.vertical)
    put_text(screen, y + height - 1, x, glyphs.bottom_left + glyphs.horizontal * inner + glyphs.bottom_right)
    if title and inner > 2:
        put_text(screen, y, x + 2, f" {title} "[:inner - 1], curses.A_BOLD)


def visible_window(selected: int | None, count: int, rows: int) -> int:
    """First list index to draw so ``selected`` stays within ``rows`` rows."""
    if rows <= 0 or count <= rows or selected is None:
        return 0
    return min(max(selected - rows + 1, 0), count - rows)


def key_help_segments(glyphs: Glyphs = UNICODE_GLYPHS) -> list[tuple[str, bool]]:
    segments: list[tuple[str, bool]] = []
    for key, description in key_help(glyphs):
        segments.append((f" {key} ", True))
        segments.append((f" {description} ", False))
    return segments


def render_key_help(screen: Any, y: int, width: int, glyphs: Glyphs = UNICODE_GLYPHS) -> None:
    segments = key_help_segments(glyphs)
    total = sum(len(text) for text, _ in segments)
    x = max((width - total) // 2, 0)
    for text, is_key in segments:
        put_text(screen, y, x, text, curses.A_REVERSE if is_key else curses.A_NORMAL)
        x += len(text)


def render_list(screen: Any, frame: FrameModel) -> None:
    height, width = screen.getmaxyx()
    glyphs = glyphs_for(screen)
    # Title strip is reserved; only the app name is shown there.
    put_text(screen, 0, 0, APP_TITLE, curses.A_DIM)
    list_height = height - 2
    draw_box(screen, 1, 0, list_height, width, glyphs=glyphs)
    rows = list_height - 2
    start = visible_window(frame.selected, len(frame.commands), rows)
    inner = max(width - 2, 0)
    for offset, command in enumerate(frame.commands[start : start + max(rows, 0)]):
        index = start + offset
        if index == frame.selected:
            text = f"{SELECTION_MARKER}{command}"
            put_text(screen, 2 + offset, 1, text[:inner], curses.A_BOLD | curses.A_REVERSE)
        else:
            text = " " * len(SELECTION_MARKER) + command
            put_text(screen, 2 + offset, 1, text[:inner])
    render_key_help(screen, height - 1, width, glyphs)


def output_title(frame: FrameModel) -> str:
    parts = [OUTPUT_TITLE]
    if frame.status:
        parts.append(f"[{frame.status}]")
    if frame.command:
        parts.append(frame.command)
    return " ".join(parts)


def render_output(screen: Any, frame: FrameModel) -> None:
    height, width = screen.getmaxyx()
    draw_box(screen, 0, 0, height, width, output_title(frame), glyphs=glyphs_for(screen))
    rows = height - 2
    if rows <= 0:
        return
    for offset, line in enumerate(frame.output[-rows:]):
        put_text(screen, 1 + offset, 1, sanitize_output_line(line)[: max(width - 2, 0)])
    if frame.status and frame.status != "running":
        put_text(screen, height - 1, max(width - len(DISMISS_HINT) - 2, 1), DISMISS_HINT, curses.A_DIM)


def render_frame(screen: Any, frame: FrameModel) -> None:
    if frame.layout == Layout.OUTPUT:
        render_output(screen, frame)
    else:
        render_list(screen, frame)
