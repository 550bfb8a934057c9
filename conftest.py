"""Shared fixtures: fixed clock, state factory, recording sink, scripted input."""

from __future__ import annotations

from datetime import datetime

import pytest

from instmon.state import DashboardState, Instance

FIXED_TS = datetime(2024, 5, 1, 12, 30, 45).timestamp()


class RecordingSink:
    def __init__(self):
        self.frames = []

    def draw(self, frame):
        self.frames.append(frame)

    @property
    def last(self):
        return self.frames[-1]


class ScriptedInput:
    """Hands out one batch of events per poll; ``then`` decides what follows."""

    def __init__(self, batches=(), then=None):
        self.batches = list(batches)
        self.then = then
        self.polls = 0

    def poll(self):
        self.polls += 1
        if self.batches:
            return self.batches.pop(0)
        if self.then is not None:
            return self.then()
        return []


@pytest.fixture
def make_state():
    def factory(n: int = 3, rows: int = 40, cols: int = 80) -> DashboardState:
        instances = [Instance(i, tps=10 + i, pending=i) for i in range(n)]
        return DashboardState(instances, clock=lambda: FIXED_TS, rows=rows, cols=cols)

    return factory


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()
