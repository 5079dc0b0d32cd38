from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from cmdlaunch.catalog import CommandCatalog, CommandSpec
from cmdlaunch.errors import SpawnError
from cmdlaunch.runner import RunOutcome
from cmdlaunch.ui import AppController, FrameModel, KeyCode, KeyEvent, Layout, Modifiers, RunState

UP = KeyEvent(KeyCode.UP)
DOWN = KeyEvent(KeyCode.DOWN)
ENTER = KeyEvent(KeyCode.ENTER)
CTRL_Q = KeyEvent(KeyCode.CHAR, char="q", modifiers=Modifiers.CONTROL)
CTRL_C = KeyEvent(KeyCode.CHAR, char="c", modifiers=Modifiers.CONTROL)


class _FakeRun:
    def __init__(self, spec: CommandSpec, batches: list[list[str]] | None = None) -> None:
        self.spec = spec
        self.batches = list(batches or [])
        self.returncode: int | None = None
        self.stream_error = None
        self.stopped = False
        self.released = False

    def drain(self) -> list[str]:
        if not self.batches:
            return []
        return self.batches.pop(0)

    @property
    def finished(self) -> bool:
        return self.returncode is not None and not self.batches

    def outcome(self) -> RunOutcome:
        return RunOutcome(command=self.spec.display, returncode=self.returncode)

    def stop(self, timeout: float = 2.0) -> None:
        self.stopped = True
        if self.returncode is None:
            self.returncode = -15

    def release(self, timeout: float = 2.0) -> bool:
        self.released = True
        return True


class _FakeRunner:
    def __init__(self, batches: list[list[str]] | None = None, *, error: SpawnError | None = None) -> None:
        self.batches = batches
        self.error = error
        self.spawned: list[_FakeRun] = []

    def spawn(self, spec: CommandSpec) -> _FakeRun:
        if self.error is not None:
            raise self.error
        run = _FakeRun(spec, self.batches)
        self.spawned.append(run)
        return run


class _FakeTerminal:
    def __init__(self, keys: list[KeyEvent | None], on_read: Callable[[], None] | None = None) -> None:
        self.keys = list(keys)
        self.on_read = on_read
        self.timeouts: list[float | None] = []
        self.draws = 0

    def draw(self, render: Callable[[Any], None]) -> None:
        self.draws += 1
        render(object())

    def read_key(self, timeout: float | None) -> KeyEvent | None:
        self.timeouts.append(timeout)
        if self.on_read is not None:
            self.on_read()
        if not self.keys:
            return CTRL_Q
        return self.keys.pop(0)


def _catalog(*lines: str) -> CommandCatalog:
    return CommandCatalog.parse("\n".join(lines))


def _controller(catalog: CommandCatalog, runner: _FakeRunner | None = None, **kwargs: Any) -> AppController:
    return AppController(catalog, runner=runner or _FakeRunner(), **kwargs)


def test_initial_state_selects_first_command() -> None:
    controller = _controller(_catalog("echo a", "echo b"))

    assert controller.state == RunState.IDLE
    assert controller.cursor.index == 0
    assert controller.layout == Layout.LIST
    assert controller.input_timeout is None


def test_navigation_clamps_at_both_ends() -> None:
    controller = _controller(_catalog("a", "b", "c"))

    for _ in range(5):
        controller.handle_key(DOWN)
    assert controller.cursor.index == 2

    for _ in range(5):
        controller.handle_key(UP)
    assert controller.cursor.index == 0


def test_empty_catalog_ignores_enter_and_navigation() -> None:
    runner = _FakeRunner()
    controller = _controller(CommandCatalog(), runner)

    for event in (DOWN, ENTER, UP, ENTER):
        controller.handle_key(event)

    assert controller.state == RunState.IDLE
    assert controller.cursor.index is None
    assert runner.spawned == []
    assert controller.frame() == FrameModel(layout=Layout.LIST)


def test_enter_launches_selected_command() -> None:
    runner = _FakeRunner()
    controller = _controller(_catalog("echo a", "echo b"), runner, poll_interval_seconds=0.05)

    controller.handle_key(DOWN)
    controller.handle_key(ENTER)

    assert controller.state == RunState.RUNNING
    assert runner.spawned[0].spec == CommandSpec("echo", ("b",))
    assert controller.layout == Layout.OUTPUT
    assert controller.input_timeout == 0.05
    frame = controller.frame()
    assert frame.status == "running"
    assert frame.command == "echo b"


def test_enter_while_running_is_ignored() -> None:
    runner = _FakeRunner()
    controller = _controller(_catalog("echo a", "echo b"), runner)

    controller.handle_key(ENTER)
    controller.handle_key(DOWN)
    controller.handle_key(ENTER)

    assert len(runner.spawned) == 1
    assert controller.cursor.index == 0
    assert controller.state == RunState.RUNNING


def test_pump_buffers_lines_in_arrival_order() -> None:
    runner = _FakeRunner([["A"], [], ["B", "C"]])
    controller = _controller(_catalog("demo"), runner)
    controller.handle_key(ENTER)

    for _ in range(3):
        controller.pump()

    assert controller.output.lines() == ["A", "B", "C"]


def test_pump_applies_fifo_eviction() -> None:
    lines = [f"L{index}" for index in range(1, 26)]
    runner = _FakeRunner([lines[:10], lines[10:]])
    controller = _controller(_catalog("demo"), runner)
    controller.handle_key(ENTER)

    controller.pump()
    controller.pump()

    assert controller.output.lines() == lines[5:]
    assert len(controller.output) == 20


def test_completion_returns_to_idle_and_keeps_last_output() -> None:
    runner = _FakeRunner([["done"]])
    controller = _controller(_catalog("echo a", "echo b"), runner)
    controller.handle_key(ENTER)
    runner.spawned[0].returncode = 0

    controller.pump()

    assert controller.state == RunState.IDLE
    assert controller.active is None
    assert runner.spawned[0].released is True
    assert controller.layout == Layout.OUTPUT
    frame = controller.frame()
    assert frame.output == ("done",)
    assert frame.status == "exit 0"

    controller.handle_key(DOWN)
    assert controller.layout == Layout.LIST
    assert controller.cursor.index == 1
    assert len(controller.output) == 0


def test_enter_after_run_only_returns_to_list() -> None:
    runner = _FakeRunner()
    controller = _controller(_catalog("echo a", "echo b"), runner)
    controller.handle_key(ENTER)
    runner.spawned[0].returncode = 0
    controller.pump()

    controller.handle_key(ENTER)

    assert controller.layout == Layout.LIST
    assert controller.state == RunState.IDLE
    assert len(runner.spawned) == 1


def test_navigation_after_run_dismisses_and_moves_cursor() -> None:
    runner = _FakeRunner()
    controller = _controller(_catalog("a", "b", "c"), runner)
    controller.handle_key(DOWN)
    controller.handle_key(ENTER)
    runner.spawned[0].returncode = 0
    controller.pump()

    controller.handle_key(UP)

    assert controller.layout == Layout.LIST
    assert controller.cursor.index == 0


def test_resize_does_not_dismiss_last_output() -> None:
    runner = _FakeRunner()
    controller = _controller(_catalog("echo a"), runner)
    controller.handle_key(ENTER)
    runner.spawned[0].returncode = 0
    controller.pump()

    controller.handle_key(KeyEvent(KeyCode.RESIZE))

    assert controller.layout == Layout.OUTPUT


def test_spawn_failure_returns_to_idle_with_message() -> None:
    runner = _FakeRunner(error=SpawnError("Program not found: nope", hint="Check PATH."))
    catalog = _catalog("echo a", "nope --flag")
    controller = _controller(catalog, runner)
    controller.handle_key(DOWN)

    launched = controller.launch_selected()

    assert launched is False
    assert controller.state == RunState.IDLE
    assert controller.cursor.index == 1
    assert len(controller.catalog) == 2
    assert controller.output.lines() == ["Program not found: nope", "Check PATH."]
    assert controller.last_outcome is not None
    assert controller.frame().status == "failed to start"


def test_quit_from_idle() -> None:
    controller = _controller(_catalog("echo a"))

    controller.handle_key(CTRL_C)

    assert controller.state == RunState.QUITTING


def test_quit_while_running_stops_child() -> None:
    runner = _FakeRunner()
    controller = _controller(_catalog("sleep 60"), runner)
    controller.handle_key(ENTER)

    controller.handle_key(CTRL_Q)

    assert controller.state == RunState.QUITTING
    assert runner.spawned[0].stopped is True
    assert controller.active is None


def test_plain_q_does_not_quit() -> None:
    controller = _controller(_catalog("echo a"))

    controller.handle_key(KeyEvent(KeyCode.CHAR, char="q"))

    assert controller.state == RunState.IDLE


def test_run_loop_draws_each_iteration_and_exits_on_quit() -> None:
    runner = _FakeRunner()
    controller = _controller(_catalog("echo a", "echo b"), runner)
    frames: list[FrameModel] = []
    terminal = _FakeTerminal([DOWN, UP, CTRL_Q])

    controller.run(terminal, lambda _screen, frame: frames.append(frame))

    assert controller.state == RunState.QUITTING
    assert terminal.draws == 3
    assert [frame.selected for frame in frames] == [0, 1, 0]
    assert terminal.timeouts == [None, None, None]


def test_run_loop_polls_while_running_and_quits_without_waiting_for_child() -> None:
    runner = _FakeRunner([["tick"], ["tick"]])
    controller = _controller(_catalog("yes"), runner, poll_interval_seconds=0.01)
    terminal = _FakeTerminal([ENTER, None, None, CTRL_Q])
    frames: list[FrameModel] = []

    controller.run(terminal, lambda _screen, frame: frames.append(frame))

    run = runner.spawned[0]
    assert run.stopped is True
    assert controller.state == RunState.QUITTING
    assert terminal.timeouts == [None, 0.01, 0.01, 0.01]
    assert frames[-1].output == ("tick", "tick")


def test_run_loop_shuts_down_active_run_on_error() -> None:
    runner = _FakeRunner()
    controller = _controller(_catalog("yes"), runner)

    class _ExplodingTerminal(_FakeTerminal):
        def draw(self, render: Callable[[Any], None]) -> None:
            if controller.state == RunState.RUNNING:
                raise RuntimeError("terminal gone")
            super().draw(render)

    terminal = _ExplodingTerminal([ENTER])
    with pytest.raises(RuntimeError):
        controller.run(terminal, lambda _screen, _frame: None)

    assert runner.spawned[0].stopped is True
    assert controller.active is None
