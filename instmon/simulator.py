"""Synthetic instance activity: one producer thread per monitored instance."""

from __future__ import annotations

import random
import threading

from .bus import EventBus
from .events import LogEvent

DELAY_MS = (400, 800)
TPS_RANGE = (10, 60)
PENDING_RANGE = (0, 20)

_LETTERS = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"

_SAMPLES = (
    "Getting latest blockhash...",
    "Got blockhash: {}",
    "→ Transaction: {}… to {}…",
    "Batch sent: {}/{} successful",
)


def rand_seq(rng: random.Random, n: int) -> str:
    return "".join(rng.choice(_LETTERS) for _ in range(n))


def draw_delay(rng: random.Random) -> float:
    """Seconds to wait before the next line, in [0.4, 0.8)."""
    return rng.randrange(DELAY_MS[0], DELAY_MS[1]) / 1000.0


def draw_metrics(rng: random.Random) -> tuple[int, int]:
    return rng.randrange(*TPS_RANGE), rng.randrange(*PENDING_RANGE)


def compose_line(instance_id: int, rng: random.Random) -> str:
    n = rng.randrange(len(_SAMPLES))
    if n == 1:
        body = _SAMPLES[n].format(rand_seq(rng, 6))
    elif n == 2:
        body = _SAMPLES[n].format(rand_seq(rng, 7), rand_seq(rng, 5))
    elif n == 3:
        body = _SAMPLES[n].format(30, 30)
    else:
        body = _SAMPLES[n]
    return f"[Instance {instance_id}] {body}"


def run_simulator(
    instance_id: int,
    bus: EventBus,
    rng: random.Random,
    stop: threading.Event,
):
    """Emit one LogEvent per cycle until ``stop`` is set or the bus closes."""
    while not bus.closed:
        if stop.wait(draw_delay(rng)):
            return
        tps, pending = draw_metrics(rng)
        bus.publish(LogEvent(instance_id, compose_line(instance_id, rng), tps, pending))


def start_simulators(
    count: int,
    bus: EventBus,
    rng: random.Random,
    stop: threading.Event,
) -> list[threading.Thread]:
    threads: list[threading.Thread] = []
    for i in range(count):
        thr = threading.Thread(
            target=run_simulator,
            args=(i, bus, random.Random(rng.getrandbits(64)), stop),
            name=f"sim-{i}",
            daemon=True,
        )
        thr.start()
        threads.append(thr)
    return threads
