#!/usr/bin/env python3
"""
Instance Monitor -- Rich Terminal UI
====================================
Live TPS / pending metrics for a fleet of simulated instances, with a
drill-down log view per instance.

Usage:
    python dashboard.py                         # random fleet of 10-29 instances
    python dashboard.py --instances 50          # fixed fleet size
    python dashboard.py --seed 7 --log-file run.ndjson
Controls:
    0-9 + Enter                                 # open an instance's log
    Esc                                         # back to the summary table
    y                                           # copy the open log to the clipboard
    q                                           # quit
"""

from __future__ import annotations

import argparse
import math
import os
import random
import select
import sys
import termios
import threading
import time
import tty
from typing import Any

from rich.console import Console
from rich.live import Live
from rich.text import Text

from instmon.bus import BUS_CAPACITY, PUT_TIMEOUT, EventBus
from instmon.diag import DiagLog, format_run_summary
from instmon.events import KeyEvent, ResizeEvent
from instmon.loop import EventLoop
from instmon.render import Frame
from instmon.simulator import start_simulators
from instmon.state import DashboardState, build_instances, resolve_instance_count


# ---------------------------------------------------------------------------
# Theme
# ---------------------------------------------------------------------------

THEME: dict[str, str] = {
    "header": "bold underline",
    "columns": "bold",
    "more": "dim",
    "placeholder": "dim",
    "input": "bright_white",
    "error": "color(196)",
    "notice": "bright_green",
}


def frame_to_text(frame: Frame) -> Text:
    txt = Text()
    for i, line in enumerate(frame.lines):
        if i:
            txt.append("\n")
        for segment, role in line:
            txt.append(segment, style=THEME.get(role, ""))
    return txt


class LiveSink:
    def __init__(self, live: Live):
        self.live = live

    def draw(self, frame: Frame):
        self.live.update(frame_to_text(frame))


# ---------------------------------------------------------------------------
# Input controls
# ---------------------------------------------------------------------------

_ARROWS = {b"A": "up", b"B": "down", b"C": "right", b"D": "left"}


class KeyPoller:
    def __init__(self):
        self.fd: int | None = None
        self._old: Any = None

    def __enter__(self):
        self.fd = sys.stdin.fileno()
        self._old = termios.tcgetattr(self.fd)
        tty.setcbreak(self.fd)
        return self

    def __exit__(self, exc_type, exc, tb):
        if self.fd is not None and self._old is not None:
            termios.tcsetattr(self.fd, termios.TCSADRAIN, self._old)

    def poll(self) -> str:
        if self.fd is None:
            return ""
        ready, _, _ = select.select([self.fd], [], [], 0)
        if not ready:
            return ""
        raw = os.read(self.fd, 1)
        if not raw:
            return ""
        if raw == b"\x1b":
            seq = b""
            deadline = time.time() + 0.02
            while time.time() < deadline:
                rdy, _, _ = select.select([self.fd], [], [], 0.005)
                if not rdy:
                    break
                chunk = os.read(self.fd, 1)
                if not chunk:
                    break
                seq += chunk
            if seq.startswith(b"[") and seq[-1:] in _ARROWS:
                return _ARROWS[seq[-1:]]
            return "esc"
        if raw in (b"\r", b"\n"):
            return "enter"
        if raw in (b"\x7f", b"\x08"):
            return "backspace"
        if raw == b"\t":
            return "tab"
        if raw[0] < 0x20:
            return f"ctrl+{chr(raw[0] + 0x60)}"
        return raw.decode("utf-8", errors="ignore") or "unknown"


class TerminalInput:
    """Key presses plus resize detection, polled by the event loop."""

    def __init__(self, poller: KeyPoller, console: Console):
        self.poller = poller
        self.console = console
        self._size: tuple[int, int] | None = None

    def poll(self) -> list[Any]:
        events: list[Any] = []
        size = self.console.size
        if (size.height, size.width) != self._size:
            self._size = (size.height, size.width)
            events.append(ResizeEvent(size.height, size.width))
        key = self.poller.poll()
        while key:
            events.append(KeyEvent(key))
            key = self.poller.poll()
        return events


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def _bounded_int(value: str, minimum: int) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}")
    if n < minimum:
        raise argparse.ArgumentTypeError(f"must be >= {minimum}, got {n}")
    return n


def non_negative_int(value: str) -> int:
    return _bounded_int(value, 0)


def positive_int(value: str) -> int:
    return _bounded_int(value, 1)


def timeout_seconds(value: str) -> float:
    try:
        t = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}")
    if not math.isfinite(t) or t < 0:
        raise argparse.ArgumentTypeError(f"must be a finite number >= 0, got {value}")
    return t


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Instance Monitor Rich Terminal Dashboard")
    ap.add_argument("--instances", type=non_negative_int, default=0,
                    help="Simulated instances (default: random 10-29)")
    ap.add_argument("--hz", type=positive_int, default=4, help="Refresh rate Hz (default 4)")
    ap.add_argument("--bus-capacity", type=positive_int, default=BUS_CAPACITY,
                    help=f"Event bus capacity (default {BUS_CAPACITY})")
    ap.add_argument("--put-timeout", type=timeout_seconds, default=PUT_TIMEOUT,
                    help="Seconds a producer waits on a full bus before dropping")
    ap.add_argument("--seed", type=int, default=None, help="Seed for the simulation")
    ap.add_argument("--log-file", default=None, help="Write NDJSON diagnostics here")
    ap.add_argument("--debug", action="store_true", help="Record debug diagnostics")
    return ap.parse_args(argv)


def run(args: argparse.Namespace) -> int:
    console = Console()
    err_console = Console(stderr=True)
    if not console.is_terminal or not sys.stdin.isatty():
        err_console.print("[bold red]error:[/] terminal not available")
        return 1

    try:
        diag = DiagLog(args.log_file, debug=args.debug)
    except OSError as exc:
        err_console.print(f"[bold red]error:[/] cannot open log file: {exc}")
        return 1

    rng = random.Random(args.seed)
    count = resolve_instance_count(args.instances, rng)
    state = DashboardState(build_instances(count, rng))
    bus = EventBus(args.bus_capacity, args.put_timeout)
    stop = threading.Event()

    diag.emit("info", "Starting", {"instances": count, "busCapacity": args.bus_capacity,
                                   "seed": args.seed})
    start_simulators(count, bus, rng, stop)
    start = time.time()
    code = 0

    try:
        with KeyPoller() as key_poller:
            with Live(console=console, refresh_per_second=args.hz, screen=True) as live:
                loop = EventLoop(state, bus, TerminalInput(key_poller, console),
                                 LiveSink(live), diag)
                code = loop.run()
    except KeyboardInterrupt:
        pass
    except (OSError, termios.error) as exc:
        diag.emit("error", "Terminal failure", {"error": str(exc)})
        err_console.print(f"[bold red]error:[/] terminal failure: {exc}")
        code = 1
    finally:
        stop.set()
        bus.close()

    diag.emit("info", "Stopped", {"exitCode": code})
    stats = {
        "instances": count,
        "applied": state.applied,
        "lines": state.lines_received,
        "dropped": bus.dropped,
        "ignored": state.ignored,
    }
    (console if code == 0 else err_console).print(
        format_run_summary(stats, int(time.time() - start), diag))
    diag.close()
    return code


def main():
    sys.exit(run(parse_args()))


if __name__ == "__main__":
    main()
