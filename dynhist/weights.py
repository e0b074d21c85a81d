"""Merge weight policies for :class:`dynhist.Collector`.

A weight function scores a pair of adjacent buckets; when the collector runs
over its bucket limit the pair with the lowest score is merged.  Every policy
receives the two buckets and a ``total`` bucket carrying the collector-wide
``min``/``max``/``count``/``sum`` so it can normalise against the observed
range.

Policies:
  - :class:`AvgWidth` (default): keeps buckets at roughly equal width, a good
    fit for normally or uniformly distributed data.
  - :class:`LatencyWidth`: narrow buckets near the minimum, wide buckets for
    larger values (latency-like, right-skewed data).
  - :class:`ExpWidth`: tunable exponential growth of bucket widths.

Degenerate inputs (zero normalisation span, ``NaN`` or overflow) score
``math.inf`` so the pair is only merged when nothing else is available.
"""
from __future__ import annotations

import abc
import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .dynhist import Bucket


def _ratio(numerator: float, denominator: float) -> float:
    if denominator == 0.0:
        return math.inf
    score = numerator / denominator
    if math.isnan(score):
        return math.inf
    return score


class WeightFunction(abc.ABC):
    """Scoring strategy for adjacent bucket pairs; lower scores merge first."""

    @abc.abstractmethod
    def weight(self, b1: "Bucket", b2: "Bucket", total: "Bucket") -> float:
        """Return the merge score of ``b1`` followed by ``b2``."""

    def __call__(self, b1: "Bucket", b2: "Bucket", total: "Bucket") -> float:
        return self.weight(b1, b2, total)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class AvgWidth(WeightFunction):
    """Width of the merged bucket: ``b2.max - b1.min``."""

    def weight(self, b1: "Bucket", b2: "Bucket", total: "Bucket") -> float:
        span = b2.max - b1.min
        if math.isnan(span):
            return math.inf
        return span


class LatencyWidth(WeightFunction):
    """Merged width relative to the distance from the global minimum."""

    def weight(self, b1: "Bucket", b2: "Bucket", total: "Bucket") -> float:
        return _ratio(b2.max - b1.min, b2.max - total.min)


class ExpWidth(WeightFunction):
    """
    Exponentially growing bucket widths.

    ``(b2.max - b1.min) ** sum_width_pow / (b2.max - total.min) ** spacing_pow``

    For exponentially distributed data ``ExpWidth(1.2, 1.0)`` is a good start.
    Increase ``sum_width_pow`` to widen buckets for lower values, increase
    ``spacing_pow`` to widen buckets for higher values.
    """

    __slots__ = ("sum_width_pow", "spacing_pow")

    def __init__(self, sum_width_pow: float = 1.2, spacing_pow: float = 1.0):
        for name, value in (("sum_width_pow", sum_width_pow), ("spacing_pow", spacing_pow)):
            v = float(value)
            if math.isnan(v) or math.isinf(v) or v < 0.0:
                raise ValueError(f"{name} must be finite and >= 0")
        self.sum_width_pow = float(sum_width_pow)
        self.spacing_pow = float(spacing_pow)

    def weight(self, b1: "Bucket", b2: "Bucket", total: "Bucket") -> float:
        span = b2.max - b1.min
        spacing = b2.max - total.min
        if math.isnan(span) or math.isnan(spacing):
            return math.inf
        # Negative spans only follow a NaN first observation; fractional
        # powers of them are complex.
        if span < 0.0 or spacing < 0.0:
            return math.inf
        try:
            return _ratio(span ** self.sum_width_pow, spacing ** self.spacing_pow)
        except OverflowError:
            return math.inf

    def __repr__(self) -> str:
        return f"ExpWidth({self.sum_width_pow!r}, {self.spacing_pow!r})"


__all__ = ["WeightFunction", "AvgWidth", "LatencyWidth", "ExpWidth"]
