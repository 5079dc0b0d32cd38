"""Launcher state machine and frame loop."""

from __future__ import annotations

import logging as py_logging
from collections.abc import Callable
from typing import Any, Protocol

from cmdlaunch.catalog import CommandCatalog, CommandSpec
from cmdlaunch.errors import SpawnError
from cmdlaunch.runner.process import RunningProcess, RunOutcome
from cmdlaunch.ui.state import (
    DEFAULT_OUTPUT_CAPACITY,
    FrameModel,
    KeyCode,
    KeyEvent,
    Layout,
    OutputBuffer,
    RunState,
    SelectionCursor,
)

logger = py_logging.getLogger(__name__)

Renderer = Callable[[Any, FrameModel], None]


class Runner(Protocol):
    def spawn(self, spec: CommandSpec) -> RunningProcess: ...


class TerminalBackend(Protocol):
    def draw(self, render: Callable[[Any], None]) -> None: ...

    def read_key(self, timeout: float | None) -> KeyEvent | None: ...


class AppController:
    def __init__(
        self,
        catalog: CommandCatalog,
        *,
        runner: Runner,
        output_capacity: int = DEFAULT_OUTPUT_CAPACITY,
        poll_interval_seconds: float = 0.1,
        shutdown_timeout_seconds: float = 2.0,
    ) -> None:
        self.catalog = catalog
        self.cursor = SelectionCursor(len(catalog))
        self.state = RunState.IDLE
        self.output = OutputBuffer(output_capacity)
        self.last_outcome: RunOutcome | None = None
        self.poll_interval_seconds = poll_interval_seconds
        self.shutdown_timeout_seconds = shutdown_timeout_seconds
        self._runner = runner
        self._active: RunningProcess | None = None

    @property
    def active(self) -> RunningProcess | None:
        return self._active

    @property
    def layout(self) -> Layout:
        if self.state == RunState.RUNNING or self.last_outcome is not None:
            return Layout.OUTPUT
        return Layout.LIST

    @property
    def input_timeout(self) -> float | None:
        """Idle blocks on input; a live run keeps the loop polling."""
        if self.state == RunState.RUNNING:
            return self.poll_interval_seconds
        return None

    def frame(self) -> FrameModel:
        if self.layout == Layout.LIST:
            return FrameModel(
                layout=Layout.LIST,
                commands=tuple(self.catalog.display_lines()),
                selected=self.cursor.index,
            )
        if self._active is not None:
            command = self._active.spec.display
            status = "running"
        elif self.last_outcome is not None:
            command = self.last_outcome.command
            status = self.last_outcome.status_label
        else:
            command, status = "", ""
        return FrameModel(
            layout=Layout.OUTPUT,
            output=tuple(self.output.lines()),
            command=command,
            status=status,
        )

    def pump(self) -> int:
        """Move queued output into the buffer and settle a finished run."""
        if self._active is None:
            return 0
        lines = self._active.drain()
        self.output.extend(lines)
        if self._active.finished:
            self._complete_run()
        return len(lines)

    def handle_key(self, event: KeyEvent) -> None:
        if event.is_quit:
            if self.state == RunState.RUNNING:
                self._abandon_run()
            self.state = RunState.QUITTING
            logger.info("app-event step=quit")
            return

        if self.state == RunState.RUNNING:
            logger.debug("app-event step=ignored-key state=running key=%s", event.code.value)
            return
        if self.state != RunState.IDLE or event.code == KeyCode.RESIZE:
            return

        if self.last_outcome is not None:
            # Any key closes the finished run; only navigation also applies.
            self.last_outcome = None
            self.output.clear()
            if event.code not in (KeyCode.UP, KeyCode.DOWN):
                return

        if event.code == KeyCode.DOWN:
            self.cursor.move_next()
        elif event.code == KeyCode.UP:
            self.cursor.move_previous()
        elif event.code == KeyCode.ENTER:
            self.launch_selected()

    def launch_selected(self) -> bool:
        index = self.cursor.index
        if index is None or self.state != RunState.IDLE:
            return False
        spec = self.catalog[index]
        self.state = RunState.RUNNING
        self.output.clear()
        self.last_outcome = None
        try:
            self._active = self._runner.spawn(spec)
        except SpawnError as exc:
            logger.warning("app-event step=spawn-failed command=%s error=%s", spec.display, exc)
            self.output.push(exc.message)
            if exc.hint:
                self.output.push(exc.hint)
            self.last_outcome = RunOutcome(command=spec.display, error=exc.message)
            self.state = RunState.IDLE
            return False
        logger.info("app-event step=run-start index=%s command=%s", index, spec.display)
        return True

    def shutdown(self) -> None:
        if self._active is not None:
            self._abandon_run()

    def run(self, terminal: TerminalBackend, render: Renderer) -> None:
        try:
            while self.state != RunState.QUITTING:
                self.pump()
                frame = self.frame()
                terminal.draw(lambda screen: render(screen, frame))
                event = terminal.read_key(self.input_timeout)
                if event is not None:
                    self.handle_key(event)
        finally:
            self.shutdown()

    def _complete_run(self) -> None:
        active = self._active
        if active is None:
            return
        self.output.extend(active.drain())
        active.release(self.shutdown_timeout_seconds)
        self.last_outcome = active.outcome()
        if active.stream_error is not None:
            self.output.push(str(active.stream_error))
        self._active = None
        self.state = RunState.IDLE
        logger.info(
            "app-event step=run-complete command=%s status=%s",
            self.last_outcome.command,
            self.last_outcome.status_label,
        )

    def _abandon_run(self) -> None:
        active = self._active
        if active is None:
            return
        active.stop(self.shutdown_timeout_seconds)
        self.output.extend(active.drain())
        self.last_outcome = active.outcome()
        self._active = None
        self.state = RunState.IDLE
        logger.info("app-event step=run-abandoned command=%s", active.spec.display)
