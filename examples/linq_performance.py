"""
LINQ-like API Performance Measurement Examples

Run:
  python examples/linq_performance.py --size 100000 --runs 5 --out examples/benchmark_results_linq.json

This script benchmarks a few representative LINQ-like queries:
- Filter + take (streaming, stops early)
- Filter + order_by + take (buffered pagination)
- Where + count
- Between filter
- Partial match

It compares execution over:
- Plain Python list source (from_collection(list))
- A re-iterable generator-backed source
"""

from __future__ import annotations

import argparse
import json
import os
import random
import statistics
import sys
import time
from typing import Any, Dict, List

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from proto_query import from_collection, F


class GeneratedRows:
    """Re-iterable source that yields rows lazily from a backing list."""

    def __init__(self, rows: List[Dict[str, Any]]):
        self.rows = rows

    def __iter__(self):
        for row in self.rows:
            yield row


def gen_users(n: int) -> List[Dict[str, Any]]:
    random.seed(42)
    countries = ["ES", "AR", "US", "BR", "FR"]
    statuses = ["active", "inactive"]
    rows: List[Dict[str, Any]] = []
    for i in range(1, n + 1):
        rows.append({
            "id": i,
            "first_name": f"Name{i}",
            "last_name": f"Surname{i}",
            "age": random.randint(10, 80),
            "country": random.choice(countries),
            "status": random.choice(statuses),
            "email": f"user{i}@example.com",
            "last_login": random.randint(0, 10000),
            "score": random.random(),
        })
    return rows


def time_query(fn, runs: int) -> Dict[str, float]:
    durations: List[float] = []
    for _ in range(runs):
        t0 = time.perf_counter()
        fn()
        t1 = time.perf_counter()
        durations.append((t1 - t0) * 1000.0)  # ms
    avg = sum(durations) / len(durations)
    p50 = statistics.median(durations)
    p95 = statistics.quantiles(durations, n=20)[18] if len(durations) >= 20 else max(durations)
    std = statistics.pstdev(durations) if len(durations) > 1 else 0.0
    qps = 1000.0 / avg if avg > 0 else 0.0
    return {"avg_ms": avg, "p50_ms": p50, "p95_ms": p95, "std_ms": std, "qps": qps}


def build_pipelines(source) -> Dict[str, Any]:
    adults = (F.age >= 18) & F.country.in_(["ES", "AR"])
    head = from_collection(source).where(adults).select(F.id).take(50)
    page = (
        from_collection(source)
        .where(adults)
        .select({"id": F["id"], "last_login": F.last_login,
                 "name": lambda u: u["first_name"] + " " + u["last_name"]})
        .order_by_descending(F.last_login)
        .take(50)
    )
    count_active = from_collection(source).where(F.status == "active")
    between = from_collection(source).where(F.age.between(30, 50))
    matched = from_collection(source).match({"country": "ES", "status": "active"})

    return {
        "filter_take": lambda: head.to_list(),
        "filter_order_take": lambda: page.to_list(),
        "count_active": lambda: count_active.count(),
        "between": lambda: between.count(),
        "match": lambda: matched.count(),
    }


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--size", type=int, default=50000, help="Number of rows to generate")
    parser.add_argument("--runs", type=int, default=5, help="Repetitions per query")
    parser.add_argument("--out", type=str, default="", help="Optional JSON output path")
    args = parser.parse_args()

    users = gen_users(args.size)
    pipelines = {
        "list": build_pipelines(users),
        "generated": build_pipelines(GeneratedRows(users)),
    }

    results = {
        "config": {"size": args.size, "runs": args.runs},
        "list": {},
        "generated": {},
    }

    for mode in ("list", "generated"):
        for label, fn in pipelines[mode].items():
            stats = time_query(fn, args.runs)
            results[mode][label] = stats
            print(f"{mode}:{label} -> avg={stats['avg_ms']:.3f} ms, p50={stats['p50_ms']:.3f} ms, p95={stats['p95_ms']:.3f} ms, qps={stats['qps']:.1f}")

    if args.out:
        with open(args.out, "w", encoding="utf-8") as f:
            json.dump(results, f, indent=2)
        print(f"Saved results to {args.out}")


if __name__ == "__main__":
    main()
