"""Events consumed by the dashboard reducer and the commands it hands back."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Tick:
    at: float


@dataclass(frozen=True)
class LogEvent:
    instance_id: int
    text: str
    tps: int | None = None
    pending: int | None = None


@dataclass(frozen=True)
class KeyEvent:
    key: str


@dataclass(frozen=True)
class ResizeEvent:
    rows: int
    cols: int


@dataclass(frozen=True)
class Notice:
    """Transient status fed back into the reducer (e.g. clipboard result)."""

    text: str
    error: bool = False


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class Yank:
    text: str
    lines: int = 0


@dataclass(frozen=True)
class Diag:
    level: str
    message: str
    data: dict[str, Any] = field(default_factory=dict)
