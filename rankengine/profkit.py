# rankengine/profkit.py: opt-in counters and section timings for the ranking pipelines
# PROFKIT=1 turns collection on; with it off, tick() and timeit() do nothing.

import os
import time
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass

ENABLED = os.getenv("PROFKIT", "0") == "1"


@dataclass
class SectionStats:
    calls: int = 0
    total_ms: float = 0.0
    max_ms: float = 0.0

    def add(self, ms: float) -> None:
        self.calls += 1
        self.total_ms += ms
        self.max_ms = max(self.max_ms, ms)

    @property
    def avg_ms(self) -> float:
        return self.total_ms / self.calls if self.calls else 0.0


COUNTERS = defaultdict(float)         # event name -> count
SECTIONS = defaultdict(SectionStats)  # section name -> wall-time stats


def tick(name: str, n: float = 1.0):
    if ENABLED:
        COUNTERS[name] += n


@contextmanager
def timeit(name: str):
    """Time the enclosed block into SECTIONS[name]; still records on exceptions."""
    if not ENABLED:
        yield
        return
    t0 = time.perf_counter()
    try:
        yield
    finally:
        SECTIONS[name].add((time.perf_counter() - t0) * 1000.0)


def reset():
    COUNTERS.clear()
    SECTIONS.clear()


def report(prefix: str = "[profkit]") -> None:
    """Print sections (calls / total / avg / max) then counters, sorted by name."""
    if not ENABLED:
        return
    for name in sorted(SECTIONS):
        s = SECTIONS[name]
        print(f"{prefix} {name:<24} calls={s.calls:<6} total={s.total_ms:10.2f}ms "
              f"avg={s.avg_ms:8.3f}ms max={s.max_ms:8.3f}ms")
    for name in sorted(COUNTERS):
        print(f"{prefix} {name:<24} {COUNTERS[name]:10.0f}")
