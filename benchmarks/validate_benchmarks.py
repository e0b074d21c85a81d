#!/usr/bin/env python3
"""Validate benchmark outputs against regression thresholds.

This script is intended to run in CI after ``benchmarks/bench_dynhist.py``. It
reads CSV outputs from ``bench_out`` (or a supplied directory) and enforces
conservative performance and accuracy targets so regressions surface early.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Dict, List, Tuple

import pandas as pd


# Percentile error as a fraction of the observed value range.  With at least
# ten buckets an estimate is off by at most one bucket width.
RANGE_ERROR_MAX = 0.25
# Every insertion scans and may re-weigh up to buckets_limit + 1 buckets in
# pure Python, so the floor is set for the largest benchmarked limit.
THROUGHPUT_MIN_UPS = 5_000
LATENCY_P95_MAX_US = 1_000.0


def _load_csv(path: Path) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(f"Expected benchmark artifact missing: {path}")
    return pd.read_csv(path)


def _check_accuracy(df: pd.DataFrame) -> Tuple[bool, Dict[str, float]]:
    worst = df.groupby(["policy"])["range_error"].max().to_dict()
    overall = float(df["range_error"].max()) if not df.empty else 0.0
    ok = overall <= RANGE_ERROR_MAX
    worst.setdefault("overall", overall)
    return ok, worst


def _check_throughput(df: pd.DataFrame) -> Tuple[bool, Dict[str, float]]:
    if df.empty:
        return True, {}
    per_limit = df.groupby(["buckets_limit"])["updates_per_sec"].min().to_dict()
    minimum = min(per_limit.values())
    return minimum >= THROUGHPUT_MIN_UPS, {str(k): v for k, v in per_limit.items()}


def _check_latency(df: pd.DataFrame) -> Tuple[bool, float]:
    if df.empty:
        return True, 0.0
    p95 = float(df["latency_us"].quantile(0.95))
    return p95 <= LATENCY_P95_MAX_US, p95


def _summarise(results: Dict[str, Dict[str, object]]) -> str:
    lines: List[str] = ["# Benchmark validation summary", ""]
    lines.append("| Check | Threshold | Observed | Status |")
    lines.append("| --- | --- | --- | --- |")
    for name, payload in results.items():
        status = "PASS" if payload["ok"] else "FAIL"
        lines.append(f"| {name} | {payload['threshold']} | {payload['observed']} | {status} |")
    lines.append("")
    lines.append("```json")
    lines.append(json.dumps(results, indent=2, sort_keys=True))
    lines.append("```")
    return "\n".join(lines)


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("outdir", nargs="?", default="bench_out", help="Directory containing benchmark CSVs")
    parser.add_argument("--summary", default="bench_summary.md", help="Filename for the generated markdown summary")
    args = parser.parse_args()

    outdir = Path(args.outdir)
    accuracy = _load_csv(outdir / "accuracy.csv")
    throughput = _load_csv(outdir / "update_throughput.csv")
    latency = _load_csv(outdir / "query_latency.csv")

    summary: Dict[str, Dict[str, object]] = {}

    accuracy_ok, accuracy_obs = _check_accuracy(accuracy)
    summary["Percentile range error"] = {
        "threshold": f"<= {RANGE_ERROR_MAX}",
        "observed": {policy: round(value, 6) for policy, value in accuracy_obs.items()},
        "ok": accuracy_ok,
    }

    throughput_ok, throughput_obs = _check_throughput(throughput)
    summary["Update throughput"] = {
        "threshold": f">= {THROUGHPUT_MIN_UPS} updates/sec",
        "observed": {limit: round(value, 2) for limit, value in throughput_obs.items()},
        "ok": throughput_ok,
    }

    latency_ok, latency_obs = _check_latency(latency)
    summary["Query latency p95"] = {
        "threshold": f"<= {LATENCY_P95_MAX_US} µs",
        "observed": round(latency_obs, 2),
        "ok": latency_ok,
    }

    summary_path = outdir / args.summary
    summary_path.write_text(_summarise(summary), encoding="utf-8")

    print(summary_path.read_text(encoding="utf-8"))

    if not all(item["ok"] for item in summary.values()):
        raise SystemExit("Benchmark regression detected; see summary above.")


if __name__ == "__main__":
    main()
