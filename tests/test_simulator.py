import random
import re
import threading

from instmon.bus import EventBus
from instmon.simulator import (
    compose_line,
    draw_delay,
    rand_seq,
    run_simulator,
    start_simulators,
)

LINE_PATTERNS = [
    re.compile(r"^\[Instance 4\] Getting latest blockhash\.\.\.$"),
    re.compile(r"^\[Instance 4\] Got blockhash: [1-9A-HJ-NP-Za-km-z]{6}$"),
    re.compile(r"^\[Instance 4\] → Transaction: [1-9A-HJ-NP-Za-km-z]{7}… to [1-9A-HJ-NP-Za-km-z]{5}…$"),
    re.compile(r"^\[Instance 4\] Batch sent: 30/30 successful$"),
]


def test_compose_line_uses_all_templates():
    rng = random.Random(11)
    hits = [0] * len(LINE_PATTERNS)
    for _ in range(400):
        line = compose_line(4, rng)
        matched = [i for i, pat in enumerate(LINE_PATTERNS) if pat.match(line)]
        assert len(matched) == 1, line
        hits[matched[0]] += 1
    assert all(h > 0 for h in hits)


def test_rand_seq_alphabet_skips_ambiguous_chars():
    s = rand_seq(random.Random(5), 500)
    assert len(s) == 500
    assert not set(s) & set("0OIl")


def test_simulator_publishes_metrics_until_stopped():
    bus = EventBus(capacity=64)
    stop = threading.Event()
    thr = threading.Thread(target=run_simulator, args=(2, bus, random.Random(1), stop))
    thr.start()
    first = bus.next_event(3.0)
    stop.set()
    thr.join(3.0)
    assert not thr.is_alive()
    assert first.instance_id == 2
    assert first.text.startswith("[Instance 2] ")
    assert 10 <= first.tps < 60
    assert 0 <= first.pending < 20


def test_simulator_exits_when_bus_closed():
    bus = EventBus(capacity=1, put_timeout=0)
    bus.close()
    thr = threading.Thread(target=run_simulator,
                           args=(0, bus, random.Random(1), threading.Event()))
    thr.start()
    thr.join(1.0)
    assert not thr.is_alive()


def test_start_simulators_one_thread_per_instance():
    bus = EventBus(capacity=256)
    stop = threading.Event()
    threads = start_simulators(5, bus, random.Random(9), stop)
    try:
        assert [t.name for t in threads] == [f"sim-{i}" for i in range(5)]
        assert all(t.daemon for t in threads)
        ids = set()
        while len(ids) < 5:
            ev = bus.next_event(3.0)
            assert ev is not None
            ids.add(ev.instance_id)
        assert ids == set(range(5))
    finally:
        stop.set()
        for t in threads:
            t.join(3.0)


class CountingStop:
    """Stands in for the stop event: records each wait, stops after ``cycles``."""

    def __init__(self, cycles):
        self.cycles = cycles
        self.delays = []

    def wait(self, timeout):
        self.delays.append(timeout)
        return len(self.delays) > self.cycles


def test_delay_between_lines_is_400_to_800_ms():
    rng = random.Random(3)
    delays = [draw_delay(rng) for _ in range(2000)]
    assert all(0.4 <= d < 0.8 for d in delays)
    assert min(delays) < 0.45 and max(delays) > 0.75


def test_simulator_waits_a_drawn_delay_before_each_line():
    bus = EventBus(capacity=64)
    stop = CountingStop(cycles=20)
    run_simulator(1, bus, random.Random(8), stop)
    assert len(stop.delays) == 21
    assert all(0.4 <= d < 0.8 for d in stop.delays)
    assert bus.published == 20
