"""Curses terminal backend: raw mode, buffered redraws, key decoding."""

from __future__ import annotations

import curses
import locale
import logging as py_logging
from collections.abc import Callable
from contextlib import suppress
from typing import Any

from cmdlaunch.errors import RenderError
from cmdlaunch.ui.state import KeyCode, KeyEvent, Modifiers

logger = py_logging.getLogger(__name__)

_ENTER_CHARS = {"\n", "\r"}


def decode_key(value: int | str) -> KeyEvent:
    """Map a ``get_wch`` result to a launcher key event."""
    if isinstance(value, int):
        if value == curses.KEY_UP:
            return KeyEvent(KeyCode.UP)
        if value == curses.KEY_DOWN:
            return KeyEvent(KeyCode.DOWN)
        if value == curses.KEY_ENTER:
            return KeyEvent(KeyCode.ENTER)
        if value == curses.KEY_RESIZE:
            return KeyEvent(KeyCode.RESIZE)
        return KeyEvent(KeyCode.OTHER)

    if value in _ENTER_CHARS:
        return KeyEvent(KeyCode.ENTER)
    if len(value) == 1 and 0 < ord(value) < 32:
        # Raw mode delivers Ctrl+<letter> as the ASCII control byte.
        return KeyEvent(KeyCode.CHAR, char=chr(ord(value) + 96), modifiers=Modifiers.CONTROL)
    if len(value) == 1 and value.isprintable():
        return KeyEvent(KeyCode.CHAR, char=value)
    return KeyEvent(KeyCode.OTHER)


class CursesTerminal:
    """Scoped curses session; the terminal is restored on every exit path."""

    def __init__(self) -> None:
        self._screen: Any | None = None

    def __enter__(self) -> CursesTerminal:
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.restore()

    def open(self) -> None:
        with suppress(locale.Error):
            locale.setlocale(locale.LC_ALL, "")
        try:
            screen = curses.initscr()
            self._screen = screen
            curses.raw()
            curses.noecho()
            screen.keypad(True)
        except curses.error as exc:
            self.restore()
            raise RenderError(
                "Terminal could not be initialized",
                hint=str(exc) or "Run cmdlaunch from an interactive terminal.",
            ) from exc
        with suppress(curses.error):
            curses.curs_set(0)
        logger.debug("terminal-event step=open")

    def restore(self) -> None:
        screen = self._screen
        if screen is None:
            return
        self._screen = None
        with suppress(curses.error):
            screen.keypad(False)
        with suppress(curses.error):
            curses.noraw()
        with suppress(curses.error):
            curses.echo()
        with suppress(curses.error):
            curses.curs_set(1)
        with suppress(curses.error):
            curses.endwin()
        logger.debug("terminal-event step=restore")

    def _require_screen(self) -> Any:
        if self._screen is None:
            raise RenderError("Terminal is not active", hint="Open the terminal before drawing.")
        return self._screen

    def draw(self, render: Callable[[Any], None]) -> None:
        screen = self._require_screen()
        try:
            screen.erase()
            render(screen)
            screen.noutrefresh()
            curses.doupdate()
        except curses.error as exc:
            raise RenderError("Terminal redraw failed", hint=str(exc) or "Resize the terminal and retry.") from exc

    def read_key(self, timeout: float | None) -> KeyEvent | None:
        screen = self._require_screen()
        screen.timeout(-1 if timeout is None else max(int(timeout * 1000), 0))
        try:
            value = screen.get_wch()
        except curses.error:
            # No input before the timeout.
            return None
        return decode_key(value)
