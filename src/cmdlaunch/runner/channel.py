"""Bounded single-producer/single-consumer line channel."""

from __future__ import annotations

import queue
import threading

PUT_RETRY_SECONDS = 0.05


class LineChannel:
    """FIFO of output lines between a reader thread and the UI loop.

    The producer blocks while the channel is full, waking every
    ``PUT_RETRY_SECONDS`` to check its cancel event. The consumer only ever
    takes what is already queued.
    """

    def __init__(self, capacity: int = 256) -> None:
        if capacity < 1:
            raise ValueError(f"Channel capacity must be positive: {capacity}")
        self.capacity = capacity
        self._queue: queue.Queue[str] = queue.Queue(maxsize=capacity)
        self._closed = threading.Event()

    def put(self, line: str, *, cancelled: threading.Event | None = None) -> bool:
        """Queue ``line``; returns False if cancelled or closed before it fit."""
        while not self._closed.is_set():
            if cancelled is not None and cancelled.is_set():
                return False
            try:
                self._queue.put(line, timeout=PUT_RETRY_SECONDS)
            except queue.Full:
                continue
            return True
        return False

    def drain(self, max_items: int | None = None) -> list[str]:
        limit = self.capacity if max_items is None else max_items
        lines: list[str] = []
        while len(lines) < limit:
            try:
                lines.append(self._queue.get_nowait())
            except queue.Empty:
                break
        return lines

    def close(self) -> None:
        self._closed.set()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    @property
    def exhausted(self) -> bool:
        # closed is checked first: every put happens-before close.
        return self._closed.is_set() and self._queue.empty()

    def __len__(self) -> int:
        return self._queue.qsize()
