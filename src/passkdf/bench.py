"""
bench.py - Measure what the fixed KDF parameters cost on this machine.

Responsibilities:
- Time hash_secret and compare for each algorithm
- Return results in structured dicts for printing
"""

from __future__ import annotations

import statistics
import time
from typing import Any, Callable, Dict, Iterable, List

from . import hashing
from . import registry


BENCH_SECRET = b"correct horse battery staple"


def _time_ms(fn: Callable[[], Any], rounds: int) -> float:
    timings = []
    for _ in range(rounds):
        t0 = time.perf_counter()
        fn()
        t1 = time.perf_counter()
        timings.append((t1 - t0) * 1000.0)
    return float(statistics.median(timings))


def bench_algorithm(name: str, rounds: int = 5) -> Dict[str, Any]:
    """Median hash and compare time for one algorithm."""
    spec = registry.resolve(name)
    if rounds < 1:
        raise ValueError("rounds must be at least 1")

    stored = hashing.hash_secret(BENCH_SECRET, spec.algorithm)
    hash_ms = _time_ms(lambda: hashing.hash_secret(BENCH_SECRET, spec.algorithm), rounds)
    compare_ms = _time_ms(lambda: hashing.compare(stored, BENCH_SECRET), rounds)
    return {
        "algorithm": spec.name,
        "rounds": rounds,
        "hash_median_ms": hash_ms,
        "compare_median_ms": compare_ms,
    }


def bench_all(names: Iterable[str], rounds: int = 5) -> List[Dict[str, Any]]:
    return [bench_algorithm(name, rounds=rounds) for name in names]
