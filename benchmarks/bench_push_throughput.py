"""Benchmark: push throughput with pruning and abandoned branches.

Simulates an editing session that keeps undoing and re-editing, so every
push creates a new sibling branch and pruning runs on almost every insert.
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

_ITERATIONS: int = 5_000
_MAX_NODES: int = 100


def _noop() -> None:
    return None


def bench_push_throughput() -> dict[str, object]:
    """Benchmark UndoManager.push() with branching and pruning.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms, final_node_count, memory_peak_mb.
    """
    manager = UndoManager(max_nodes=_MAX_NODES, store=NullSessionStore())

    start = time.perf_counter()
    for i in range(_ITERATIONS):
        manager.push(UndoAction(apply=_noop, revert=_noop, description=f"edit {i}"))
        if i % 3 == 2:
            manager.undo()
    total = time.perf_counter() - start

    result: dict[str, object] = {
        "operation": "push_throughput",
        "iterations": _ITERATIONS,
        "total_seconds": round(total, 4),
        "ops_per_second": round(_ITERATIONS / total, 1),
        "avg_latency_ms": round(total / _ITERATIONS * 1000, 4),
        "final_node_count": manager.node_count,
        "memory_peak_mb": 0.0,
    }
    print(
        f"[bench_push_throughput] {result['operation']}: "
        f"{result['ops_per_second']:,.0f} ops/sec  "
        f"avg {result['avg_latency_ms']:.4f} ms  "
        f"nodes={result['final_node_count']}"
    )
    return result


def run_benchmark() -> dict[str, object]:
    """Entry point returning the benchmark result dict."""
    return bench_push_throughput()


if __name__ == "__main__":
    result = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "push_throughput_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(result, fh, indent=2)
    print(f"Results saved to {output_path}")
