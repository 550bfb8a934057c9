"""Dashboard state and its single reducer entry point.

``DashboardState`` is owned by the event loop thread. Producers never touch
it; everything arrives through :meth:`DashboardState.ingest`, one event at a
time, and side effects leave as commands for the loop to execute.
"""

from __future__ import annotations

import random
import re
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

from .events import Diag, KeyEvent, LogEvent, Notice, Quit, ResizeEvent, Tick, Yank
from .keys import LineInput
from .simulator import draw_metrics

LOG_CAPACITY = 100
MESSAGE_TICKS = 3
DEFAULT_COUNT_RANGE = (10, 30)

SUMMARY = "summary"
DETAIL = "detail"

_ID_RE = re.compile(r"[+-]?[0-9]+")


@dataclass
class Instance:
    id: int
    tps: int = 0
    pending: int = 0
    log: deque[str] = field(default_factory=lambda: deque(maxlen=LOG_CAPACITY))


def resolve_instance_count(requested: int | None, rng: random.Random) -> int:
    if not requested or requested <= 0:
        return rng.randrange(*DEFAULT_COUNT_RANGE)
    return requested


def build_instances(count: int, rng: random.Random) -> list[Instance]:
    instances = []
    for i in range(count):
        tps, pending = draw_metrics(rng)
        instances.append(Instance(i, tps, pending))
    return instances


def parse_instance_id(raw: str) -> int | None:
    raw = raw.strip()
    if not _ID_RE.fullmatch(raw):
        return None
    return int(raw)


class DashboardState:
    def __init__(
        self,
        instances: list[Instance],
        clock: Callable[[], float] = time.time,
        rows: int = 24,
        cols: int = 80,
    ):
        self.instances = instances
        self.clock = clock
        self.view = SUMMARY
        self.active_id = 0
        self.input = LineInput()
        self.error_message = ""
        self.error_ticks = 0
        self.notice = ""
        self.notice_ticks = 0
        self.rows = rows
        self.cols = cols
        self.now = clock()

        # counters for diagnostics and the run summary
        self.applied = 0
        self.ignored = 0
        self.lines_received = 0

    @property
    def input_buffer(self) -> str:
        return self.input.value

    def avg_tps(self) -> int:
        if not self.instances:
            return 0
        return sum(inst.tps for inst in self.instances) // len(self.instances)

    # -- reducer --------------------------------------------------------------

    def ingest(self, event: Any) -> list[Any]:
        self.applied += 1

        if isinstance(event, Tick):
            self.now = event.at
            if self.error_ticks > 0:
                self.error_ticks -= 1
                if self.error_ticks == 0:
                    self.error_message = ""
            if self.notice_ticks > 0:
                self.notice_ticks -= 1
                if self.notice_ticks == 0:
                    self.notice = ""
            return []

        if isinstance(event, LogEvent):
            return self._on_log(event)

        if isinstance(event, KeyEvent):
            return self._on_key(event.key)

        if isinstance(event, ResizeEvent):
            self.rows = event.rows
            self.cols = event.cols
            return []

        if isinstance(event, Notice):
            if event.error:
                self._flash_error(event.text)
            else:
                self.notice = event.text
                self.notice_ticks = MESSAGE_TICKS
            return []

        self.ignored += 1
        return [Diag("warn", "Unhandled event", {"type": type(event).__name__})]

    def _on_log(self, event: LogEvent) -> list[Any]:
        if not 0 <= event.instance_id < len(self.instances):
            self.ignored += 1
            return [Diag("warn", "Log event for unknown instance",
                         {"instanceId": event.instance_id})]
        inst = self.instances[event.instance_id]
        stamp = datetime.fromtimestamp(self.clock()).strftime("%H:%M:%S ")
        inst.log.append(stamp + event.text)
        if event.tps is not None:
            inst.tps = event.tps
        if event.pending is not None:
            inst.pending = event.pending
        self.lines_received += 1
        return []

    def _on_key(self, key: str) -> list[Any]:
        if key == "q":
            return [Quit()]

        if key == "esc":
            if self.view == DETAIL:
                self.view = SUMMARY
                self.error_message = ""
                self.error_ticks = 0
                self.notice = ""
                self.notice_ticks = 0
            return []

        if self.view == DETAIL:
            if key == "y":
                return self._yank()
            return []

        submitted = self.input.handle(key)
        if submitted is None:
            return []

        self.input.clear()
        iid = parse_instance_id(submitted)
        if iid is None or not 0 <= iid < len(self.instances):
            self._flash_error("invalid ID")
            return [Diag("info", "Invalid instance id", {"input": submitted})]

        self.view = DETAIL
        self.active_id = iid
        self.error_message = ""
        self.error_ticks = 0
        return [Diag("debug", "Instance selected", {"instanceId": iid})]

    def _yank(self) -> list[Any]:
        log = self.instances[self.active_id].log
        if not log:
            self._flash_error("nothing to copy")
            return []
        return [Yank("\n".join(log), len(log))]

    def _flash_error(self, message: str):
        self.error_message = message
        self.error_ticks = MESSAGE_TICKS
