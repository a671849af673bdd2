"""Benchmark: cross-branch checkpoint restore latency: p50/p99.

Builds two deep sibling branches, each ending in a checkpoint, and measures
the per-call latency of hopping between them.
"""
from __future__ import annotations

import json
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from branching_undo.history.actions import UndoAction
from branching_undo.history.manager import UndoManager
from branching_undo.persistence.session_store import NullSessionStore

_WARMUP: int = 20
_ITERATIONS: int = 1_000
_BRANCH_DEPTH: int = 25


def _noop() -> None:
    return None


def _build_branches(manager: UndoManager) -> tuple[str, str]:
    manager.push(UndoAction(apply=_noop, revert=_noop, description="base"))
    for i in range(_BRANCH_DEPTH):
        manager.push(UndoAction(apply=_noop, revert=_noop, description=f"left {i}"))
    left = manager.create_checkpoint("left")
    for _ in range(_BRANCH_DEPTH + 1):
        manager.undo()
    for i in range(_BRANCH_DEPTH):
        manager.push(UndoAction(apply=_noop, revert=_noop, description=f"right {i}"))
    right = manager.create_checkpoint("right")
    return left, right


def bench_restore_latency() -> dict[str, object]:
    """Benchmark UndoManager.restore_to_checkpoint() per-call latency.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms, p50_latency_ms, p99_latency_ms, memory_peak_mb.
    """
    manager = UndoManager(max_nodes=1_000, store=NullSessionStore())
    left, right = _build_branches(manager)
    targets = (left, right)

    for i in range(_WARMUP):
        manager.restore_to_checkpoint(targets[i % 2])

    latencies_ms: list[float] = []
    for i in range(_ITERATIONS):
        t0 = time.perf_counter()
        manager.restore_to_checkpoint(targets[i % 2])
        latencies_ms.append((time.perf_counter() - t0) * 1000)

    sorted_lats = sorted(latencies_ms)
    n = len(sorted_lats)
    total = sum(latencies_ms) / 1000

    result: dict[str, object] = {
        "operation": "checkpoint_restore_latency",
        "iterations": _ITERATIONS,
        "total_seconds": round(total, 4),
        "ops_per_second": round(_ITERATIONS / total, 1),
        "avg_latency_ms": round(sum(latencies_ms) / n, 4),
        "p50_latency_ms": round(sorted_lats[n // 2], 4),
        "p99_latency_ms": round(sorted_lats[min(int(n * 0.99), n - 1)], 4),
        "memory_peak_mb": 0.0,
    }
    print(
        f"[bench_restore_latency] {result['operation']}: "
        f"p99={result['p99_latency_ms']:.4f}ms  "
        f"mean={result['avg_latency_ms']:.4f}ms"
    )
    return result


def run_benchmark() -> dict[str, object]:
    """Entry point returning the benchmark result dict."""
    return bench_restore_latency()


if __name__ == "__main__":
    result = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "restore_latency_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(result, fh, indent=2)
    print(f"Results saved to {output_path}")
