"""Process execution and output streaming."""

from .channel import LineChannel
from .process import ProcessRunner, RunningProcess, RunOutcome

__all__ = [
    "LineChannel",
    "ProcessRunner",
    "RunningProcess",
    "RunOutcome",
]
