"""Count the distribution of values read from standard input, one per line."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional, Sequence, TextIO

from ._metadata import PROJECT_METADATA, __version__
from .dynhist import Collector
from .weights import ExpWidth

logger = logging.getLogger(__name__)

REPORT_PERCENTILES = (99.9, 99.0, 90.0, 75.0, 50.0)


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="dynhist", description=__doc__)
    parser.add_argument("--buckets", type=int, default=10, help="Number of buckets")
    parser.add_argument("--version", action="store_true", help="Print version and exit")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def _is_int(value: float) -> bool:
    try:
        return value == float(int(value))
    except (OverflowError, ValueError):
        return False


def collect(lines: TextIO, buckets: int) -> Collector:
    hist = Collector(buckets_limit=buckets, weight_func=ExpWidth(1.2, 1.0), print_sum=True)
    skipped = 0
    for line in lines:
        text = line.strip()
        try:
            value = float(text)
        except ValueError:
            skipped += 1
            logger.debug("skipping unparsable line %r", text)
            continue
        hist.add(value)
    if skipped:
        logger.debug("skipped %d lines", skipped)
    return hist


def report(hist: Collector) -> List[str]:
    lines: List[str] = []
    for p in REPORT_PERCENTILES:
        percentile = hist.percentile(p)
        fmt = ".0f" if _is_int(percentile) else ".2f"
        lines.append(
            f"{p:.1f}% < {percentile:{fmt}}, sum < {hist.percentile_sum(p):{fmt}}"
        )
    lines.append("")
    lines.append(hist.render())
    return lines


def main(
    argv: Optional[Sequence[str]] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
) -> int:
    args = _parse_args(argv)
    out = stdout if stdout is not None else sys.stdout

    if args.version:
        print(f"{PROJECT_METADATA['name']} {__version__}", file=out)
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    hist = collect(stdin if stdin is not None else sys.stdin, args.buckets)
    logger.info("collected %d values into %d buckets", hist.count, len(hist))
    for line in report(hist):
        print(line, file=out)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
