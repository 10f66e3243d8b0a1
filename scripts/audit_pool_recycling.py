#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
from pathlib import Path
import sys
import tracemalloc
from typing import Any

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from pool_core.config import PoolConfig
from stack_pool.arena import StackPool


def _churn(pool: StackPool, stacks: int, depth: int, iterations: int, mode: str):
    heads = [pool.new_stack() for _ in range(stacks)]
    for it in range(iterations):
        for k in range(stacks):
            for d in range(depth):
                heads[k] = pool.push((it, k, d), heads[k])
        if mode == "pop":
            for k in range(stacks):
                while not pool.is_empty(heads[k]):
                    heads[k] = pool.pop(heads[k])
        else:
            for k in range(stacks):
                heads[k] = pool.free_stack(heads[k])
    return heads


def _serialize_stat(stat: tracemalloc.StatisticDiff) -> dict[str, Any]:
    return {
        "traceback": [str(line) for line in stat.traceback.format()],
        "size_diff_bytes": int(stat.size_diff),
        "count_diff": int(stat.count_diff),
    }


def _run_recycling_audit(
    mode: str, stacks: int, depth: int, iterations: int, warmup: int, top: int
):
    pool = StackPool(cfg=PoolConfig(guards=False))
    if warmup:
        _churn(pool, stacks, depth, warmup, mode)
    capacity_start = pool.capacity()
    nodes_start = pool.node_count()

    tracemalloc.start()
    snapshot_start = tracemalloc.take_snapshot()
    _churn(pool, stacks, depth, iterations, mode)
    snapshot_end = tracemalloc.take_snapshot()
    tracemalloc.stop()

    stats = snapshot_end.compare_to(snapshot_start, "lineno")
    total_growth = sum(stat.size_diff for stat in stats)
    report = {
        "mode": mode,
        "stacks": stacks,
        "depth": depth,
        "iterations": iterations,
        "warmup": warmup,
        "capacity_start": capacity_start,
        "capacity_end": pool.capacity(),
        "nodes_start": nodes_start,
        "nodes_end": pool.node_count(),
        "free_end": pool.free_count(),
        "growth_bytes": int(total_growth),
        "growth_mb": float(total_growth) / (1024 * 1024),
        "top_deltas": [_serialize_stat(stat) for stat in stats[:top]],
    }
    return report


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Check that stack pool churn recycles nodes instead of growing."
    )
    parser.add_argument(
        "--mode",
        choices=("pop", "free"),
        default="free",
        help="How stacks are emptied each iteration (default: free).",
    )
    parser.add_argument(
        "--stacks",
        type=int,
        default=8,
        help="Independent stacks sharing the pool (default: 8).",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=64,
        help="Pushes per stack per iteration (default: 64).",
    )
    parser.add_argument(
        "--iterations",
        type=int,
        default=10,
        help="Iterations to measure (default: 10).",
    )
    parser.add_argument(
        "--warmup",
        type=int,
        default=1,
        help="Warmup iterations before sampling (default: 1).",
    )
    parser.add_argument(
        "--top",
        type=int,
        default=10,
        help="Top allocation deltas to report (default: 10).",
    )
    parser.add_argument(
        "--max-growth-mb",
        type=float,
        default=None,
        help="Fail when growth exceeds this MB (default: no threshold).",
    )
    parser.add_argument(
        "--json-out",
        type=Path,
        help="Write JSON report to this path (default: stdout).",
    )
    args = parser.parse_args()

    if min(args.stacks, args.depth, args.iterations, args.warmup) < 0:
        print("stacks, depth, iterations and warmup must be non-negative", file=sys.stderr)
        return 2
    if args.max_growth_mb is not None and args.max_growth_mb < 0:
        print("max-growth-mb must be non-negative", file=sys.stderr)
        return 2

    report = _run_recycling_audit(
        args.mode, args.stacks, args.depth, args.iterations, args.warmup, args.top
    )
    payload = json.dumps(report, indent=2, sort_keys=True)
    if args.json_out is None:
        print(payload)
    else:
        args.json_out.parent.mkdir(parents=True, exist_ok=True)
        args.json_out.write_text(payload, encoding="utf-8")
        print(f"audit_pool_recycling: wrote {args.json_out}")

    if args.warmup and report["capacity_end"] != report["capacity_start"]:
        print("audit_pool_recycling: FAIL (capacity grew after warmup)")
        return 1
    if args.max_growth_mb is not None:
        if report["growth_mb"] > args.max_growth_mb:
            print("audit_pool_recycling: FAIL (growth exceeded)")
            return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
