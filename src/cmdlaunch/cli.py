"""Public CLI contract and entrypoint."""

from __future__ import annotations

import argparse
import logging as py_logging
import sys
from collections.abc import Callable, Sequence
from pathlib import Path

from .catalog import CommandCatalog
from .config import LauncherConfig, load_config
from .errors import ExitCode, LauncherError, user_facing_error
from .logging import configure_logging, default_log_path

_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARN", "ERROR")

TuiLauncher = Callable[[LauncherConfig, CommandCatalog], int | None]


def _log_level_type(value: str) -> str:
    normalized = value.upper()
    if normalized == "WARNING":
        normalized = "WARN"
    if normalized not in _VALID_LOG_LEVELS:
        accepted = ", ".join(_VALID_LOG_LEVELS)
        raise argparse.ArgumentTypeError(f"--log-level must be one of: {accepted}")
    return normalized


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cmdlaunch",
        description="Pick a command from a list and watch its output live.",
    )
    parser.add_argument(
        "--commands",
        type=Path,
        default=None,
        help="Commands file, one command per line (default: .config)",
    )
    parser.add_argument("--config", type=Path, default=None, help="Settings TOML file")
    parser.add_argument(
        "--list",
        action="store_true",
        help="Print the loaded commands and exit without opening the UI",
    )
    parser.add_argument("--log-level", type=_log_level_type, default="INFO")
    parser.add_argument("--log-file", type=Path, default=None)
    return parser


def launch_tui(config: LauncherConfig, catalog: CommandCatalog) -> int:
    from cmdlaunch.ui.app import launch_app

    return launch_app(config, catalog)


def format_catalog(catalog: CommandCatalog) -> str:
    width = len(str(len(catalog)))
    return "\n".join(f"{index:>{width}}  {command}" for index, command in enumerate(catalog.display_lines(), 1))


def resolve_commands_path(namespace: argparse.Namespace, config: LauncherConfig) -> Path:
    if namespace.commands is not None:
        return namespace.commands.expanduser()
    return Path(config.commands_file).expanduser()


def main(
    argv: Sequence[str] | None = None,
    *,
    tui_launcher: TuiLauncher | None = None,
) -> int:
    log_path = default_log_path()
    logger = configure_logging(log_file=log_path)
    parser = build_parser()
    try:
        namespace = parser.parse_args(argv)
    except SystemExit as exc:
        if exc.code not in (None, 0):
            logger.warning("Argument parsing failed with exit code %s", exc.code)
        return int(exc.code or 0)

    if namespace.log_file is not None:
        log_path = namespace.log_file.expanduser()
    logger = configure_logging(level=namespace.log_level, log_file=log_path)

    try:
        config = load_config(namespace.config)
        commands_path = resolve_commands_path(namespace, config)
        catalog = CommandCatalog.load(commands_path)

        if namespace.list:
            logger.debug("Listing %s commands", len(catalog))
            if len(catalog):
                print(format_catalog(catalog))
            return int(ExitCode.SUCCESS)

        launcher = tui_launcher or launch_tui
        logger.debug("Starting TUI flow commands=%s", commands_path)
        # The curses screen owns the terminal from here on.
        logger = configure_logging(level=namespace.log_level, log_file=log_path, console=False)
        try:
            result = launcher(config, catalog)
        finally:
            logger = configure_logging(level=namespace.log_level, log_file=log_path)
        if isinstance(result, int):
            return result
        return int(ExitCode.SUCCESS)
    except LauncherError as exc:
        logger.error(
            "Handled LauncherError (code=%s): %s",
            int(exc.code),
            exc.message,
            exc_info=logger.isEnabledFor(py_logging.DEBUG),
        )
        print(user_facing_error(exc.message, hint=exc.hint), file=sys.stderr)
        return int(exc.code)
    except Exception:
        logger.exception("Unhandled exception in CLI entrypoint")
        try:
            hint = f"Inspect logs: {log_path}"
            print(user_facing_error("Unexpected runtime failure", hint=hint), file=sys.stderr)
        except Exception:
            pass
        return int(ExitCode.RUNTIME_ERROR)


def run(argv: Sequence[str] | None = None) -> int:
    return main(argv)
