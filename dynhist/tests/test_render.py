"""Tests for the text table produced by :func:`dynhist.render.render_table`."""
from __future__ import annotations

import math

from dynhist import Bucket, Collector
from dynhist.render import render_table


def _lines(text: str) -> list[str]:
    assert text.endswith("\n")
    return text[:-1].split("\n")


def test_render_counts_and_percentages() -> None:
    c = Collector(buckets_limit=10)
    c.extend([1.0, 2.0, 2.0, 3.0])

    assert _lines(str(c)) == [
        "[ min  max] cnt total% (4 events)",
        "[1.00 1.00] 1 25.00% " + "." * 25,
        "[2.00 2.00] 2 50.00% " + "." * 50,
        "[3.00 3.00] 1 25.00% " + "." * 25,
    ]


def test_render_with_sum_column() -> None:
    c = Collector(buckets_limit=10, print_sum=True)
    c.extend([1.0, 2.0, 2.0, 3.0])

    assert _lines(c.render()) == [
        "[ min  max] cnt total%  sum (4 events)",
        "[1.00 1.00] 1 25.00% 1.00 " + "." * 25,
        "[2.00 2.00] 2 50.00% 4.00 " + "." * 50,
        "[3.00 3.00] 1 25.00% 3.00 " + "." * 25,
    ]
    # Explicit argument overrides the configured option.
    assert "sum" not in _lines(c.render(print_sum=False))[0]


def test_render_pads_small_percentages() -> None:
    c = Collector(buckets_limit=10)
    c.extend([0.0] * 19 + [1.0])

    lines = _lines(str(c))
    assert lines[0] == "[ min  max] cnt total% (20 events)"
    assert lines[1] == "[0.00 0.00] 19 95.00% " + "." * 95
    assert lines[2] == "[1.00 1.00]  1  5.00% ....."


def test_render_infinite_upper_bound_uses_last_min_width() -> None:
    c = Collector()
    c.load_snapshot([0.0, 1000.0, math.inf], [3, 1])

    assert _lines(str(c)) == [
        "[    min     max] cnt total% (4 events)",
        "[   0.00 1000.00] 3 75.00% " + "." * 75,
        "[1000.00     inf] 1 25.00% " + "." * 25,
    ]


def test_render_zero_total_count() -> None:
    c = Collector()
    c.load_snapshot([0.0, 1.0, 2.0], [0, 0])

    assert _lines(str(c)) == [
        "[ min  max] cnt total% (0 events)",
        "[0.00 1.00] 0  0.00%",
        "[1.00 2.00] 0  0.00%",
    ]


def test_render_empty() -> None:
    c = Collector()
    assert c.render() == ""
    assert render_table([], Bucket()) == ""


def test_render_does_not_mutate() -> None:
    c = Collector(buckets_limit=3)
    c.extend([5.0, 1.0, 3.0, 4.0])
    before = (c.buckets, c.count, c.sum, c.min, c.max)
    str(c)
    c.render(print_sum=True)
    assert (c.buckets, c.count, c.sum, c.min, c.max) == before
