"""Launcher terminal UI."""

from .controller import AppController
from .state import FrameModel, KeyCode, KeyEvent, Layout, Modifiers, OutputBuffer, RunState, SelectionCursor

__all__ = [
    "AppController",
    "FrameModel",
    "KeyCode",
    "KeyEvent",
    "Layout",
    "Modifiers",
    "OutputBuffer",
    "RunState",
    "SelectionCursor",
]
