"""Pytest configuration ensuring the package is importable during tests."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Tests live inside the package directory, so the repository root (which
# contains the ``dynhist`` package) might not be on ``sys.path`` when the
# project is not installed.  Add it explicitly so ``from dynhist import
# Collector`` works either way.
ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def _check_invariants(collector, limit: int) -> None:
    buckets = collector.buckets
    assert len(buckets) <= limit
    assert sum(b.count for b in buckets) == collector.count
    # Bounds sum(|x|), the scale of the summation-order error.
    scale = max(1.0, sum(b.count * max(abs(b.min), abs(b.max)) for b in buckets))
    assert abs(sum(b.sum for b in buckets) - collector.sum) <= 1e-9 * scale
    for b in buckets:
        assert b.min <= b.max
    for left, right in zip(buckets, buckets[1:]):
        assert left.min < right.min
        assert left.max <= right.min
    if buckets:
        assert buckets[0].min == collector.min
        assert buckets[-1].max == collector.max


@pytest.fixture(scope="session")
def check_invariants():
    """Structural invariants every mutating call must keep."""
    return _check_invariants
