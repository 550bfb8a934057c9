"""Diagnostic log: NDJSON entries plus human-readable formatting.

Entry shape::

    {"timestamp": <epoch ms>, "level": "info", "source": "loop",
     "message": "Bus dropped events", "data": {"dropped": 3}}
"""

from __future__ import annotations

import json
import time
from collections import deque
from datetime import datetime
from typing import IO, Any

from rich.markup import escape

LEVELS = ("debug", "info", "warn", "error")

LEVEL_STYLE: dict[str, str] = {
    "debug": "dim",
    "info": "green",
    "warn": "yellow",
    "error": "red",
}

SOURCE_STYLE: dict[str, str] = {
    "main": "white",
    "loop": "magenta",
    "state": "cyan",
    "bus": "blue",
    "clipboard": "dim",
}

ERROR_TRUNCATE_LIMIT = 500
DEFAULT_TRUNCATE_LIMIT = 200
MAX_RECENT = 50


class DiagLog:
    def __init__(self, path: str | None = None, debug: bool = False):
        self.path = path
        self.debug = debug
        self.counts: dict[str, int] = {lvl: 0 for lvl in LEVELS}
        self.recent: deque[dict[str, Any]] = deque(maxlen=MAX_RECENT)
        self._fh: IO[str] | None = open(path, "a", encoding="utf-8") if path else None

    def emit(self, level: str, message: str, data: dict[str, Any] | None = None,
             source: str = "main"):
        if level == "debug" and not self.debug:
            return
        entry = {
            "timestamp": int(time.time() * 1000),
            "level": level,
            "source": source,
            "message": message,
            "data": data or {},
        }
        self.counts[level] = self.counts.get(level, 0) + 1
        if level in ("warn", "error"):
            self.recent.append(entry)
        if self._fh is not None:
            self._fh.write(json.dumps(entry) + "\n")
            self._fh.flush()

    def close(self):
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

def format_ts(epoch_ms: int) -> str:
    return datetime.fromtimestamp(epoch_ms / 1000).strftime("%H:%M:%S")


def format_data(data: dict[str, Any], level: str = "info") -> str:
    if not data:
        return ""
    limit = ERROR_TRUNCATE_LIMIT if level in ("error", "warn") else DEFAULT_TRUNCATE_LIMIT
    parts: list[str] = []
    for k, v in data.items():
        if isinstance(v, float):
            v = f"{v:.2f}"
        elif isinstance(v, str) and len(v) > limit:
            v = v[:limit] + "…"
        parts.append(f"{k}={v}")
    return " ".join(parts)


def format_line(entry: dict[str, Any]) -> str:
    """Render one entry as rich markup."""
    ts = format_ts(entry.get("timestamp", 0))
    level: str = entry.get("level", "info")
    source: str = entry.get("source", "?")
    msg: str = entry.get("message", "")

    lstyle = LEVEL_STYLE.get(level, "white")
    sstyle = SOURCE_STYLE.get(source, "white")
    parts = [
        f"[dim]{ts}[/]",
        f"[{lstyle}]{level.upper():5s}[/]",
        f"[{sstyle}]{escape(source):9s}[/]",
        f"[bold]{escape(msg)}[/]",
    ]
    data_str = format_data(entry.get("data", {}), level)
    if data_str:
        parts.append(f"[dim]{escape(data_str)}[/]")
    return " ".join(parts)


def format_run_summary(stats: dict[str, Any], elapsed: int, diag: DiagLog) -> str:
    lines: list[str] = ["[bold bright_cyan]Instance Monitor Session Complete[/]"]

    m, s = divmod(elapsed, 60)
    h, m = divmod(m, 60)
    time_str = f"{h}h {m:02d}m {s:02d}s" if h else f"{m}m {s:02d}s"
    lines.append(f"  [dim]Duration[/]    {time_str}")
    lines.append(f"  [dim]Instances[/]   {stats['instances']}")
    lines.append(f"  [dim]Events[/]      {stats['applied']:,} applied  "
                 f"[dim]{stats['lines']:,} log lines[/]")

    dropped = stats["dropped"]
    ignored = stats["ignored"]
    lines.append(f"  [dim]Dropped[/]     " + (f"[bright_red]{dropped}[/]" if dropped else "0"))
    lines.append(f"  [dim]Ignored[/]     " + (f"[yellow]{ignored}[/]" if ignored else "0"))

    warns, errors = diag.counts.get("warn", 0), diag.counts.get("error", 0)
    lines.append(f"  [dim]Diagnostics[/] "
                 + (f"[yellow]{warns} warn[/]" if warns else "0 warn") + "  "
                 + (f"[red]{errors} error[/]" if errors else "0 error"))

    if diag.path:
        lines.append(f"  [dim]Log[/]         [underline dim]{escape(diag.path)}[/]")

    if diag.recent:
        lines.append("  [dim]Recent warnings[/]")
        for entry in list(diag.recent)[-5:]:
            lines.append(f"    {format_line(entry)}")
    return "\n".join(lines)
