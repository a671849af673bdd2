"""Benchmark: Memory usage of a long branching session.

Uses tracemalloc to confirm that pruning keeps memory flat while a session
records many more actions than the node ceiling.
"""
from __future__ import annotations

import json
import sys
import time
import tracemalloc
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from branching_undo.history.actions import UndoAction
from branching_undo.history.manager import UndoManager
from branching_undo.persistence.session_store import NullSessionStore

_ITERATIONS: int = 10_000
_MAX_NODES: int = 100


def _noop() -> None:
    return None


def bench_session_memory_usage() -> dict[str, object]:
    """Benchmark memory usage across a long session with frequent undo.

    Returns
    -------
    dict with keys: operation, iterations, peak_memory_kb, current_memory_kb,
    ops_per_second, avg_latency_ms, final_node_count, memory_peak_mb.
    """
    tracemalloc.start()
    manager = UndoManager(max_nodes=_MAX_NODES, store=NullSessionStore())

    manager.push(UndoAction(apply=_noop, revert=_noop, description="base"))

    start = time.perf_counter()
    for i in range(_ITERATIONS):
        manager.push(UndoAction(apply=_noop, revert=_noop, description=f"edit {i}"))
        manager.undo()
    total = time.perf_counter() - start

    current, peak = tracemalloc.get_traced_memory()
    tracemalloc.stop()

    result: dict[str, object] = {
        "operation": "session_memory_usage",
        "iterations": _ITERATIONS,
        "total_seconds": round(total, 4),
        "ops_per_second": round(_ITERATIONS / total, 1),
        "avg_latency_ms": round(total / _ITERATIONS * 1000, 4),
        "peak_memory_kb": round(peak / 1024, 2),
        "current_memory_kb": round(current / 1024, 2),
        "final_node_count": manager.node_count,
        "memory_peak_mb": round(peak / (1024 * 1024), 4),
    }
    print(
        f"[bench_memory_usage] {result['operation']}: "
        f"peak={result['peak_memory_kb']:.1f}KB  "
        f"nodes={result['final_node_count']}"
    )
    return result


def run_benchmark() -> dict[str, object]:
    """Entry point returning the benchmark result dict."""
    return bench_session_memory_usage()


if __name__ == "__main__":
    result = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "memory_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(result, fh, indent=2)
    print(f"Results saved to {output_path}")
