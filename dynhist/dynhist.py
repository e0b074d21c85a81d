# Dynamic histogram collector (Python)
# Bounded-memory streaming histogram with:
# - At most ``buckets_limit`` contiguous, non-overlapping value buckets
# - Online insertion (range extension or bucket split, sort order preserved)
# - Pluggable adjacent-pair merge policy (see dynhist.weights)
# - Percentile and cumulative-sum estimates from per-bucket aggregates
# - One lock per collector guarding all state
# Python 3.9+

from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass, replace
from typing import Callable, Iterable, List, Optional, Tuple, Union

from .render import render_table
from .weights import AvgWidth, WeightFunction

logger = logging.getLogger(__name__)


@dataclass
class Bucket:
    """Closed value interval ``[min, max]`` with observation count and sum."""

    min: float = 0.0
    max: float = 0.0
    count: int = 0
    sum: float = 0.0

    @property
    def width(self) -> float:
        return self.max - self.min


WeightCallable = Callable[[Bucket, Bucket, Bucket], float]


def _as_count(value: object) -> int:
    try:
        count = int(value)  # type: ignore[call-overload]
    except (OverflowError, TypeError) as exc:
        raise ValueError(f"count must be an integer, got {value!r}") from exc
    if count != value:
        raise ValueError(f"count must be an integer, got {value!r}")
    return count


class Collector:
    """
    Dynamic histogram: groups and counts values using a bounded set of buckets.

    Strategy (high level):
      - The first value creates a singleton bucket ``[v, v]``.
      - Values outside the observed range prepend/append a singleton bucket;
        values inside an existing bucket increment it; values falling into a
        gap between buckets get a new singleton bucket at that position.
      - Whenever the bucket count exceeds ``buckets_limit`` the adjacent pair
        with the lowest weight (as scored by ``weight_func``) is merged.
        Leftmost pair wins ties.

    Every insertion adds at most one bucket, so a single merge restores the
    limit and each call costs O(buckets_limit).

    Configuration (set before concurrent use):
      buckets_limit: hard cap on the number of buckets; values < 1 mean
          "unset" and are replaced by :attr:`DEFAULT_BUCKETS_LIMIT` on the
          first insertion.
      weight_func: merge policy, :class:`~dynhist.weights.AvgWidth` if None.
          Any callable ``(b1, b2, total) -> float`` is accepted.
      print_sum: include a per-bucket sum column when rendering.
      keep_raw_values: record every observed value (unbounded memory).

    Public API:
      add(v), extend(vs), percentile(p), percentile_sum(p),
      load_snapshot(boundaries, counts), render(), buckets, count, sum,
      min, max, raw_values
    """

    # ---------------------------- Tunable constants ----------------------------
    DEFAULT_BUCKETS_LIMIT: int = 20

    __slots__ = (
        "_lock",
        "_buckets_limit",
        "_weight_func",
        "_buckets",
        "_min",
        "_max",
        "_count",
        "_sum",
        "_raw_values",
        "print_sum",
    )

    def __init__(
        self,
        buckets_limit: int = 0,
        weight_func: Optional[Union[WeightFunction, WeightCallable]] = None,
        print_sum: bool = False,
        keep_raw_values: bool = False,
    ):
        if weight_func is not None and not callable(weight_func):
            raise TypeError("weight_func must be callable")
        self._lock = threading.Lock()
        self._buckets_limit = int(buckets_limit)
        self._weight_func = weight_func
        self._buckets: List[Bucket] = []
        self._min = 0.0
        self._max = 0.0
        self._count = 0
        self._sum = 0.0
        self._raw_values: Optional[List[float]] = [] if keep_raw_values else None
        self.print_sum = bool(print_sum)

    # ------------------------------- Public API --------------------------------
    def add(self, v: float) -> None:
        """Collect a value."""
        with self._lock:
            self._insert(float(v))
            if len(self._buckets) > self._buckets_limit:
                self._merge_lowest_weight_pair()

    def extend(self, vs: Iterable[float]) -> None:
        for v in vs:
            self.add(v)

    def percentile(self, percent: float) -> float:
        """Upper boundary of the bucket holding the ``percent``-th percentile."""
        with self._lock:
            target = self._target_count(percent)
            running = 0
            for b in self._buckets:
                running += b.count
                if running >= target:
                    return b.max
            return self._max

    def percentile_sum(self, percent: float) -> float:
        """
        Approximate sum of the values up to the ``percent``-th percentile.

        Whole buckets are accumulated until the running count reaches the
        target, so the estimate is only as fine as the bucket layout.
        """
        with self._lock:
            target = self._target_count(percent)
            running = 0
            acc = 0.0
            for b in self._buckets:
                running += b.count
                acc += b.sum
                if running >= target:
                    return acc
            return self._sum

    def load_snapshot(self, boundaries: Iterable[float], counts: Iterable[int]) -> None:
        """
        Replace all state with an externally bucketed histogram.

        ``boundaries`` holds ``n + 1`` ascending edges and ``counts`` the ``n``
        observation counts, bucket ``i`` spanning ``[boundaries[i],
        boundaries[i + 1]]``.  Bucket sums are approximated as
        ``count * upper``; an infinite upper edge contributes nothing.
        """
        edges = [float(x) for x in boundaries]
        cnts = [_as_count(c) for c in counts]
        if not edges:
            raise ValueError("boundaries must not be empty")
        if len(cnts) != len(edges) - 1:
            raise ValueError(
                f"expected {len(edges) - 1} counts for {len(edges)} boundaries, got {len(cnts)}"
            )
        if any(hi < lo for lo, hi in zip(edges, edges[1:])):
            raise ValueError("boundaries must be ascending")
        if any(c < 0 for c in cnts):
            raise ValueError("counts must be >= 0")

        buckets: List[Bucket] = []
        total_sum = 0.0
        for lo, hi, c in zip(edges, edges[1:], cnts):
            b = Bucket(min=lo, max=hi, count=c)
            if c != 0 and not math.isinf(hi):
                b.sum = c * hi
                total_sum += b.sum
            buckets.append(b)

        with self._lock:
            self._buckets = buckets
            self._buckets_limit = max(len(buckets), 1)
            self._min = edges[0]
            self._max = edges[-1]
            self._count = sum(cnts)
            self._sum = total_sum
            self._apply_defaults()
        logger.debug("loaded snapshot with %d buckets, %d events", len(buckets), sum(cnts))

    def render(self, print_sum: Optional[bool] = None) -> str:
        """Render buckets as a fixed-width text table."""
        with_sum = self.print_sum if print_sum is None else print_sum
        with self._lock:
            return render_table(self._buckets, self._total(), print_sum=with_sum)

    def __str__(self) -> str:
        return self.render()

    def __len__(self) -> int:
        with self._lock:
            return len(self._buckets)

    # ------------------------------- Accessors ---------------------------------
    @property
    def buckets(self) -> Tuple[Bucket, ...]:
        with self._lock:
            return tuple(replace(b) for b in self._buckets)

    @property
    def buckets_limit(self) -> int:
        with self._lock:
            return self._buckets_limit

    @property
    def weight_func(self) -> Optional[Union[WeightFunction, WeightCallable]]:
        return self._weight_func

    @property
    def count(self) -> int:
        with self._lock:
            return self._count

    @property
    def sum(self) -> float:
        with self._lock:
            return self._sum

    @property
    def min(self) -> float:
        with self._lock:
            return self._min

    @property
    def max(self) -> float:
        with self._lock:
            return self._max

    @property
    def raw_values(self) -> Optional[List[float]]:
        """Copy of every observed value, or None when raw values are not kept."""
        with self._lock:
            return None if self._raw_values is None else list(self._raw_values)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(buckets_limit={self._buckets_limit}, "
            f"weight_func={self._weight_func!r}, buckets={len(self._buckets)}, "
            f"count={self._count})"
        )

    # ------------------------------- Internals ---------------------------------
    def _total(self) -> Bucket:
        return Bucket(min=self._min, max=self._max, count=self._count, sum=self._sum)

    def _apply_defaults(self) -> None:
        if self._buckets_limit < 1:
            logger.debug("buckets_limit unset, using %d", self.DEFAULT_BUCKETS_LIMIT)
            self._buckets_limit = self.DEFAULT_BUCKETS_LIMIT
        if self._weight_func is None:
            self._weight_func = AvgWidth()

    def _insert(self, v: float) -> None:
        if self._raw_values is not None:
            self._raw_values.append(v)
        self._count += 1
        self._sum += v

        buckets = self._buckets
        if not buckets:
            self._apply_defaults()
            buckets.append(Bucket(min=v, max=v, count=1, sum=v))
            self._min = v
            self._max = v
            return

        if v < self._min:
            buckets.insert(0, Bucket(min=v, max=v, count=1, sum=v))
            self._min = v
            return

        if v > self._max:
            buckets.append(Bucket(min=v, max=v, count=1, sum=v))
            self._max = v
            return

        #  [1 3] [4 4] 5 [7 9]
        for i, b in enumerate(buckets):
            if v >= b.min:
                if v <= b.max:
                    b.count += 1
                    b.sum += v
                    return
            else:
                buckets.insert(i, Bucket(min=v, max=v, count=1, sum=v))
                return

    def _merge_lowest_weight_pair(self) -> None:
        buckets = self._buckets
        weight_func = self._weight_func
        total = self._total()

        merge_point = 0
        min_weight = math.inf
        for i in range(1, len(buckets)):
            weight = weight_func(buckets[i - 1], buckets[i], total)
            if math.isnan(weight):
                weight = math.inf
            if merge_point == 0 or weight < min_weight:
                merge_point = i
                min_weight = weight

        b1 = buckets[merge_point - 1]
        b2 = buckets[merge_point]
        buckets[merge_point - 1 : merge_point + 1] = [
            Bucket(min=b1.min, max=b2.max, count=b1.count + b2.count, sum=b1.sum + b2.sum)
        ]

    def _target_count(self, percent: float) -> int:
        p = float(percent)
        if math.isnan(p) or not (0.0 <= p <= 100.0):
            raise ValueError("percent must be in [0,100]")
        return int(p * self._count / 100)
