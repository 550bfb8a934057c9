"""Bounded multi-producer / single-consumer channel for log events.

Full-bus policy: a producer waits at most ``put_timeout`` seconds for room,
then the event is dropped and counted in ``dropped``. The consumer reports
the counter, so a drop is never silent. A closed bus rejects publishes
immediately and is drained, so no producer can stay blocked on it; an event
that slips in after the drain is neither counted nor delivered.
"""

from __future__ import annotations

import math
import queue
import threading

from .events import LogEvent

BUS_CAPACITY = 256
PUT_TIMEOUT = 0.1


class EventBus:
    def __init__(self, capacity: int = BUS_CAPACITY, put_timeout: float = PUT_TIMEOUT):
        if capacity <= 0:
            raise ValueError(f"bus capacity must be positive, got {capacity}")
        if not math.isfinite(put_timeout):
            raise ValueError(f"put timeout must be finite, got {put_timeout}")
        self.capacity = capacity
        self.put_timeout = put_timeout
        self._q: queue.Queue[LogEvent] = queue.Queue(maxsize=capacity)
        self._closed = threading.Event()
        self._lock = threading.Lock()
        self.published = 0
        self.dropped = 0

    def __len__(self) -> int:
        return self._q.qsize()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def publish(self, event: LogEvent) -> bool:
        if self._closed.is_set():
            return False
        try:
            if self.put_timeout > 0:
                self._q.put(event, timeout=self.put_timeout)
            else:
                self._q.put_nowait(event)
        except queue.Full:
            with self._lock:
                self.dropped += 1
            return False
        with self._lock:
            # a producer woken by close() may land one event after the drain
            if self._closed.is_set():
                return False
            self.published += 1
        return True

    def next_event(self, timeout: float | None = None) -> LogEvent | None:
        """Next event in arrival order, or None on timeout or once closed."""
        if self._closed.is_set():
            return None
        try:
            if timeout is not None and timeout <= 0:
                return self._q.get_nowait()
            return self._q.get(timeout=timeout)
        except queue.Empty:
            return None

    def close(self) -> int:
        with self._lock:
            self._closed.set()
        discarded = 0
        while True:
            try:
                self._q.get_nowait()
            except queue.Empty:
                return discarded
            discarded += 1
