"""Pure frame rendering.

A frame is a tuple of lines, each line a tuple of ``(text, role)`` segments.
Roles name what a segment is (``header``, ``error``, ``placeholder`` ...);
the sink decides how each role looks, so nothing here imports a terminal
library.
"""

from __future__ import annotations

from dataclasses import dataclass

from .state import DETAIL, DashboardState

RESERVED_ROWS = 8
DETAIL_LINES = 20
PLACEHOLDER = "type number and Enter"
CURSOR = "_"

Segment = tuple[str, str]
Line = tuple[Segment, ...]


@dataclass(frozen=True)
class Frame:
    lines: tuple[Line, ...]

    @property
    def text(self) -> str:
        return "\n".join("".join(t for t, _ in line) for line in self.lines)


def _line(text: str, role: str) -> Line:
    return ((text, role),)


BLANK: Line = _line("", "blank")


def visible_rows(state: DashboardState) -> int:
    rows = state.rows - RESERVED_ROWS
    if state.error_message:
        rows -= 1
    return max(0, rows)


def render_summary(state: DashboardState) -> Frame:
    n = len(state.instances)
    lines: list[Line] = [
        _line(f"{n} instances live · {state.avg_tps()} TPS avg", "header"),
        BLANK,
        _line("  ID   TPS   Pending", "columns"),
    ]

    # window always starts at instance 0
    shown = min(n, visible_rows(state))
    for inst in state.instances[:shown]:
        lines.append(_line(f"{inst.id:3d} {inst.tps:5d} {inst.pending:8d}", "row"))
    if shown < n:
        lines.append(_line(f"  ... {n - shown} more instances ...", "more"))

    lines.append(BLANK)
    buf = state.input_buffer
    if buf:
        lines.append((("Select instance > ", "prompt"), (buf + CURSOR, "input")))
    else:
        lines.append((("Select instance > ", "prompt"), (PLACEHOLDER, "placeholder")))

    if state.error_message:
        lines.append(_line(state.error_message, "error"))
    return Frame(tuple(lines))


def render_detail(state: DashboardState) -> Frame:
    inst = state.instances[state.active_id]
    lines: list[Line] = [
        _line(f"Logs - instance {inst.id}   (ESC to back, y to copy)", "header"),
        BLANK,
    ]
    tail = list(inst.log)[-DETAIL_LINES:]
    lines.extend(_line(entry, "log") for entry in tail)

    if state.error_message:
        lines.extend((BLANK, _line(state.error_message, "error")))
    elif state.notice:
        lines.extend((BLANK, _line(state.notice, "notice")))
    return Frame(tuple(lines))


def render(state: DashboardState) -> Frame:
    if state.view == DETAIL:
        return render_detail(state)
    return render_summary(state)
