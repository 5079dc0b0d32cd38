"""Child process spawn and stdout streaming."""

from __future__ import annotations

import logging as py_logging
import subprocess
import threading
import time
from collections.abc import Callable
from contextlib import suppress
from dataclasses import dataclass
from typing import IO, Literal, Protocol

from cmdlaunch.catalog import CommandSpec
from cmdlaunch.errors import SpawnError, StreamError
from cmdlaunch.runner.channel import LineChannel
from cmdlaunch.text import command_for_log, decode_output_line

logger = py_logging.getLogger(__name__)

StderrMode = Literal["discard", "merge"]


class ChildProcess(Protocol):
    pid: int
    stdout: IO[bytes] | None

    def poll(self) -> int | None: ...

    def wait(self, timeout: float | None = None) -> int: ...

    def terminate(self) -> None: ...

    def kill(self) -> None: ...


PopenFactory = Callable[..., ChildProcess]


@dataclass(frozen=True)
class RunOutcome:
    command: str
    returncode: int | None = None
    error: str = ""

    @property
    def status_label(self) -> str:
        if self.error:
            return "failed to start"
        if self.returncode is None:
            return "stopped"
        return f"exit {self.returncode}"


class RunningProcess:
    """One spawned child plus the daemon thread forwarding its stdout."""

    def __init__(
        self,
        spec: CommandSpec,
        process: ChildProcess,
        channel: LineChannel,
        *,
        exit_grace_seconds: float = 2.0,
    ) -> None:
        self.spec = spec
        self.channel = channel
        self.exit_grace_seconds = exit_grace_seconds
        self.stream_error: StreamError | None = None
        self._process = process
        self._cancel = threading.Event()
        self._exited_at: float | None = None
        self._reader = threading.Thread(
            target=self._forward_stdout,
            name=f"cmdlaunch-reader-{process.pid}",
            daemon=True,
        )

    @property
    def pid(self) -> int:
        return self._process.pid

    def start(self) -> RunningProcess:
        self._reader.start()
        return self

    def _forward_stdout(self) -> None:
        stream = self._process.stdout
        try:
            if stream is None:
                return
            for raw in iter(stream.readline, b""):
                if not self.channel.put(decode_output_line(raw), cancelled=self._cancel):
                    break
        except (OSError, ValueError) as exc:
            self.stream_error = StreamError(
                f"Output stream failed for pid {self.pid}",
                hint=str(exc) or "The pipe closed unexpectedly.",
            )
            logger.warning("run-event step=stream-error pid=%s error=%s", self.pid, exc)
        finally:
            if stream is not None:
                with suppress(OSError, ValueError):
                    stream.close()
            self.channel.close()
            logger.debug("run-event step=reader-done pid=%s", self.pid)

    def drain(self) -> list[str]:
        return self.channel.drain()

    def poll(self) -> int | None:
        return self._process.poll()

    @property
    def finished(self) -> bool:
        """True once the child exited and its output is settled.

        Output is settled when every forwarded line was drained, or when the
        pipe is still open ``exit_grace_seconds`` after the exit was first
        seen (a background descendant inherited stdout).
        """
        if self.poll() is None:
            return False
        if self.channel.exhausted:
            return True
        if self.channel.closed:
            return False
        if self._exited_at is None:
            self._exited_at = time.monotonic()
        return time.monotonic() - self._exited_at >= self.exit_grace_seconds

    def outcome(self) -> RunOutcome:
        return RunOutcome(command=self.spec.display, returncode=self.poll())

    def stop(self, timeout: float = 2.0) -> None:
        """Terminate the child if still alive and join the reader, both bounded."""
        self._cancel.set()
        if self._process.poll() is None:
            logger.info("run-event step=terminate pid=%s", self.pid)
            with suppress(OSError):
                self._process.terminate()
            try:
                self._process.wait(timeout=timeout)
            except subprocess.TimeoutExpired:
                logger.warning("run-event step=kill pid=%s", self.pid)
                with suppress(OSError):
                    self._process.kill()
                with suppress(subprocess.TimeoutExpired):
                    self._process.wait(timeout=timeout)
        self.join(timeout)

    def release(self, timeout: float = 2.0) -> bool:
        """Join a reader that hit EOF, or detach one whose pipe is still held."""
        if self.channel.closed:
            return self.join(timeout)
        self._cancel.set()
        logger.info("run-event step=reader-released pid=%s", self.pid)
        return False

    def join(self, timeout: float = 2.0) -> bool:
        if self._reader.is_alive() and self._reader is not threading.current_thread():
            self._reader.join(timeout)
        alive = self._reader.is_alive()
        if alive:
            logger.warning("run-event step=reader-detached pid=%s", self.pid)
        return not alive


class ProcessRunner:
    def __init__(
        self,
        *,
        channel_capacity: int = 256,
        stderr_mode: StderrMode = "discard",
        exit_grace_seconds: float = 2.0,
        popen: PopenFactory | None = None,
    ) -> None:
        self.channel_capacity = channel_capacity
        self.stderr_mode = stderr_mode
        self.exit_grace_seconds = exit_grace_seconds
        self._popen: PopenFactory = popen or subprocess.Popen

    def spawn(self, spec: CommandSpec) -> RunningProcess:
        argv = spec.argv
        stderr = subprocess.STDOUT if self.stderr_mode == "merge" else subprocess.DEVNULL
        logger.info("run-event step=spawn command=%s", command_for_log(argv))
        try:
            process = self._popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=stderr,
                shell=False,
            )
        except FileNotFoundError as exc:
            raise SpawnError(
                f"Program not found: {spec.program}",
                hint="Check the command name or PATH.",
            ) from exc
        except PermissionError as exc:
            raise SpawnError(
                f"Permission denied: {spec.program}",
                hint="Make sure the program is executable.",
            ) from exc
        except (OSError, ValueError) as exc:
            raise SpawnError(
                f"Failed to start: {spec.program}",
                hint=str(exc) or "Inspect the command and retry.",
            ) from exc
        logger.debug("run-event step=spawned pid=%s", process.pid)
        return RunningProcess(
            spec,
            process,
            LineChannel(self.channel_capacity),
            exit_grace_seconds=self.exit_grace_seconds,
        ).start()
