"""dynhist package public API."""
from ._metadata import __version__
from .dynhist import Bucket, Collector
from .weights import AvgWidth, ExpWidth, LatencyWidth, WeightFunction

DEFAULT_BUCKETS_LIMIT = Collector.DEFAULT_BUCKETS_LIMIT

__all__ = [
    "Bucket",
    "Collector",
    "WeightFunction",
    "AvgWidth",
    "LatencyWidth",
    "ExpWidth",
    "DEFAULT_BUCKETS_LIMIT",
    "__version__",
]
