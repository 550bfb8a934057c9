"""The single consumer: owns the state, races input, timer and bus."""

from __future__ import annotations

import queue
import threading
import time
from typing import Any, Callable

from .bus import EventBus
from .clipboard import copy_to_clipboard
from .diag import DiagLog
from .events import Diag, Notice, Quit, Tick, Yank
from .render import render
from .state import DashboardState

TICK_INTERVAL = 1.0
POLL_INTERVAL = 0.05
MAX_BATCH = 200


class EventLoop:
    """Apply events to ``state`` one at a time and draw a frame after each batch.

    ``source.poll()`` must not block and returns key/resize events;
    ``sink.draw(frame)`` receives every rendered frame. Clipboard copies run
    on worker threads; their results come back through ``_copies``.
    """

    def __init__(
        self,
        state: DashboardState,
        bus: EventBus,
        source: Any,
        sink: Any,
        diag: DiagLog | None = None,
        copier: Callable[[str], tuple[bool, str]] = copy_to_clipboard,
        tick_interval: float = TICK_INTERVAL,
        poll_interval: float = POLL_INTERVAL,
        monotonic: Callable[[], float] = time.monotonic,
        wall: Callable[[], float] = time.time,
    ):
        self.state = state
        self.bus = bus
        self.source = source
        self.sink = sink
        self.diag = diag or DiagLog()
        self.copier = copier
        self.tick_interval = tick_interval
        self.poll_interval = poll_interval
        self.monotonic = monotonic
        self.wall = wall
        self.running = False
        self._dirty = True
        self._dropped_seen = 0
        self._copies: queue.Queue[tuple[bool, str, int]] = queue.Queue()

    def dispatch(self, event: Any):
        self._dirty = True
        for cmd in self.state.ingest(event):
            if isinstance(cmd, Quit):
                self.running = False
            elif isinstance(cmd, Yank):
                threading.Thread(target=self._copy, args=(cmd,), name="clipboard",
                                 daemon=True).start()
            elif isinstance(cmd, Diag):
                self.diag.emit(cmd.level, cmd.message, cmd.data, source="state")

    def _copy(self, cmd: Yank):
        ok, msg = self.copier(cmd.text)
        self._copies.put((ok, msg, cmd.lines))

    def _collect_copies(self):
        while True:
            try:
                ok, msg, lines = self._copies.get_nowait()
            except queue.Empty:
                return
            if ok:
                msg = f"{msg} ({lines} lines)"
            self.diag.emit("info" if ok else "warn", msg, {"lines": lines},
                           source="clipboard")
            self.dispatch(Notice(msg, error=not ok))

    def _check_drops(self):
        dropped = self.bus.dropped
        if dropped > self._dropped_seen:
            self.diag.emit("warn", "Bus dropped events",
                           {"dropped": dropped - self._dropped_seen, "total": dropped},
                           source="bus")
            self._dropped_seen = dropped

    def _drain(self, timeout: float) -> int:
        batch = 0
        event = self.bus.next_event(timeout)
        while event is not None:
            self.dispatch(event)
            batch += 1
            if batch >= MAX_BATCH or not self.running:
                break
            event = self.bus.next_event(0)
        return batch

    def step(self, next_tick: float) -> float:
        """One iteration; returns the deadline of the following tick."""
        for event in self.source.poll():
            self.dispatch(event)
            if not self.running:
                return next_tick
        self._collect_copies()

        now = self.monotonic()
        if now >= next_tick:
            self.dispatch(Tick(self.wall()))
            self._check_drops()
            next_tick += self.tick_interval
            if next_tick <= now:
                next_tick = now + self.tick_interval

        timeout = max(0.0, min(self.poll_interval, next_tick - self.monotonic()))
        self._drain(timeout)

        if self._dirty and self.running:
            self.sink.draw(render(self.state))
            self._dirty = False
        return next_tick

    def run(self) -> int:
        self.running = True
        self.diag.emit("info", "Event loop started",
                       {"instances": len(self.state.instances)}, source="loop")
        self.sink.draw(render(self.state))
        self._dirty = False
        next_tick = self.monotonic() + self.tick_interval
        try:
            while self.running:
                next_tick = self.step(next_tick)
        finally:
            self.running = False
            discarded = self.bus.close()
            self._check_drops()
            self.diag.emit("info", "Event loop stopped",
                           {"applied": self.state.applied, "discarded": discarded},
                           source="loop")
        return 0
