#!/usr/bin/env python3
"""Benchmark runner for the local dynhist collector."""

from __future__ import annotations

import argparse
import hashlib
import math
import time
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Sequence

import numpy as np
import pandas as pd

from dynhist import AvgWidth, Collector, ExpWidth, LatencyWidth, WeightFunction


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--outdir", default="bench_out", help="Directory for benchmark CSV outputs")
    parser.add_argument("--seed", type=int, default=42, help="Base RNG seed for reproducibility")
    parser.add_argument("--Ns", nargs="+", default=["1e4", "1e5"], help="Population sizes to benchmark")
    parser.add_argument("--limits", nargs="+", default=["10", "20", "50"], help="Bucket limits to benchmark")
    parser.add_argument(
        "--distributions",
        nargs="+",
        default=["uniform", "normal", "exponential", "pareto", "bimodal"],
        help="Synthetic data distributions to sample",
    )
    parser.add_argument(
        "--policies",
        nargs="+",
        default=sorted(POLICIES),
        help="Merge weight policies to benchmark",
    )
    parser.add_argument(
        "--ps",
        nargs="+",
        default=["1", "5", "10", "25", "50", "75", "90", "95", "99"],
        help="Percentiles (0-100) to evaluate",
    )
    return parser.parse_args()


def _to_int_list(values: Iterable[str]) -> List[int]:
    return [int(float(v)) for v in values]


def _to_float_list(values: Iterable[str]) -> List[float]:
    return [float(v) for v in values]


def _hash_seed(seed: int, *parts: object) -> int:
    material = "::".join(str(p) for p in (seed,) + parts)
    digest = hashlib.sha256(material.encode("utf-8")).hexdigest()
    return int(digest[:16], 16)


def _uniform(rng: np.random.Generator, size: int) -> np.ndarray:
    return rng.uniform(0.0, 1.0, size)


def _normal(rng: np.random.Generator, size: int) -> np.ndarray:
    return rng.normal(0.0, 1.0, size)


def _exponential(rng: np.random.Generator, size: int) -> np.ndarray:
    return rng.exponential(scale=1.0, size=size)


def _pareto(rng: np.random.Generator, size: int) -> np.ndarray:
    return rng.pareto(a=1.5, size=size)


def _bimodal(rng: np.random.Generator, size: int) -> np.ndarray:
    left = size // 2
    right = size - left
    first = rng.normal(-2.0, 1.0, left)
    second = rng.normal(2.0, 0.5, right)
    data = np.concatenate([first, second]) if size else np.empty(0, dtype=float)
    rng.shuffle(data)
    return data


DATA_GENERATORS: Dict[str, Callable[[np.random.Generator, int], np.ndarray]] = {
    "uniform": _uniform,
    "normal": _normal,
    "exponential": _exponential,
    "pareto": _pareto,
    "bimodal": _bimodal,
}

POLICIES: Dict[str, Callable[[], WeightFunction]] = {
    "avg": AvgWidth,
    "latency": LatencyWidth,
    "exp": lambda: ExpWidth(1.2, 1.0),
}


def _validate_choices(kind: str, names: Sequence[str], known: Iterable[str]) -> None:
    unknown = sorted(set(names) - set(known))
    if unknown:
        raise ValueError(f"Unknown {kind} requested: {', '.join(unknown)}")


def main() -> None:
    args = _parse_args()

    Ns = _to_int_list(args.Ns)
    limits = _to_int_list(args.limits)
    ps = _to_float_list(args.ps)
    _validate_choices("distributions", args.distributions, DATA_GENERATORS)
    _validate_choices("policies", args.policies, POLICIES)

    outdir = Path(args.outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    accuracy_records: List[Dict[str, object]] = []
    throughput_records: List[Dict[str, object]] = []
    latency_records: List[Dict[str, object]] = []

    for dist in args.distributions:
        for N in Ns:
            combo_seed = _hash_seed(args.seed, dist, N)
            data_rng = np.random.default_rng(combo_seed)
            data = DATA_GENERATORS[dist](data_rng, N).astype(float, copy=False)
            if data.size != N:
                data = np.resize(data, N)

            # The collector answers with the bucket holding the floor(p * N / 100)-th
            # value; the inverted CDF method is the closest NumPy equivalent.
            exact_map = dict(zip(ps, np.percentile(data, ps, method="inverted_cdf")))
            data_range = float(data.max() - data.min()) if N else 0.0

            for policy in args.policies:
                for limit in limits:
                    collector = Collector(buckets_limit=limit, weight_func=POLICIES[policy]())
                    start = time.perf_counter()
                    for value in data:
                        collector.add(float(value))
                    update_elapsed = time.perf_counter() - start
                    updates_per_sec = (N / update_elapsed) if update_elapsed > 0 else math.inf

                    throughput_records.append(
                        {
                            "distribution": dist,
                            "N": int(N),
                            "policy": policy,
                            "buckets_limit": int(limit),
                            "update_time_s": update_elapsed,
                            "updates_per_sec": updates_per_sec,
                        }
                    )

                    for p in ps:
                        p_start = time.perf_counter()
                        approx = collector.percentile(p)
                        p_elapsed = time.perf_counter() - p_start
                        latency_records.append(
                            {
                                "distribution": dist,
                                "N": int(N),
                                "policy": policy,
                                "buckets_limit": int(limit),
                                "p": p,
                                "latency_us": p_elapsed * 1e6,
                            }
                        )
                        abs_error = abs(approx - float(exact_map[p]))
                        accuracy_records.append(
                            {
                                "distribution": dist,
                                "N": int(N),
                                "policy": policy,
                                "buckets_limit": int(limit),
                                "p": p,
                                "estimate": approx,
                                "exact": float(exact_map[p]),
                                "abs_error": abs_error,
                                "range_error": abs_error / data_range if data_range > 0 else 0.0,
                            }
                        )

    accuracy_path = outdir / "accuracy.csv"
    throughput_path = outdir / "update_throughput.csv"
    latency_path = outdir / "query_latency.csv"

    pd.DataFrame.from_records(accuracy_records).to_csv(accuracy_path, index=False)
    pd.DataFrame.from_records(throughput_records).to_csv(throughput_path, index=False)
    pd.DataFrame.from_records(latency_records).to_csv(latency_path, index=False)

    print("Benchmark artifacts written to:")
    print(f"  {accuracy_path}")
    print(f"  {throughput_path}")
    print(f"  {latency_path}")


if __name__ == "__main__":
    main()
