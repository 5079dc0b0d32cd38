"""Terminal UI launch wiring."""

from __future__ import annotations

import logging as py_logging
from collections.abc import Callable
from contextlib import AbstractContextManager

from cmdlaunch.catalog import CommandCatalog
from cmdlaunch.config import LauncherConfig
from cmdlaunch.errors import ExitCode
from cmdlaunch.runner.process import ProcessRunner
from cmdlaunch.ui.controller import AppController, Runner, TerminalBackend
from cmdlaunch.ui.terminal import CursesTerminal
from cmdlaunch.ui.view import render_frame

logger = py_logging.getLogger(__name__)

TerminalFactory = Callable[[], AbstractContextManager[TerminalBackend]]


def build_controller(
    config: LauncherConfig,
    catalog: CommandCatalog,
    *,
    runner: Runner | None = None,
) -> AppController:
    resolved_runner = runner or ProcessRunner(
        channel_capacity=config.channel_capacity,
        stderr_mode=config.stderr_mode,
        exit_grace_seconds=config.shutdown_timeout_seconds,
    )
    return AppController(
        catalog,
        runner=resolved_runner,
        output_capacity=config.output_capacity,
        poll_interval_seconds=config.poll_interval_seconds,
        shutdown_timeout_seconds=config.shutdown_timeout_seconds,
    )


def launch_app(
    config: LauncherConfig,
    catalog: CommandCatalog,
    *,
    terminal_factory: TerminalFactory = CursesTerminal,
    runner: Runner | None = None,
) -> int:
    """Run the launcher until the user quits."""
    controller = build_controller(config, catalog, runner=runner)
    logger.info("app-event step=start commands=%s", len(catalog))
    with terminal_factory() as terminal:
        controller.run(terminal, render_frame)
    logger.info("app-event step=exit")
    return int(ExitCode.SUCCESS)
