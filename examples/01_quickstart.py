#!/usr/bin/env python3
"""Example: Quickstart (branching-undo)

Minimal working example: record edits, undo, make a new edit on a branch,
and redo into the newest branch.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install branching-undo
"""
from __future__ import annotations

import branching_undo as bu


def main() -> None:
    print(f"branching-undo version: {bu.__version__}")

    shapes: list[str] = []
    manager = bu.UndoManager()

    def add(shape: str) -> None:
        shapes.append(shape)
        manager.push(
            bu.UndoAction(
                apply=lambda: shapes.append(shape),
                revert=shapes.pop,
                description=f"add {shape}",
                action_type="add_shape",
            )
        )

    # Step 1: Record two edits
    add("rect")
    add("circle")
    print(f"After two edits: {shapes}")

    # Step 2: Undo, then edit again -> the circle lives on as a sibling branch
    manager.undo()
    add("triangle")
    print(f"After undo + new edit: {shapes}")
    print(f"Branch tips: {[n.description for n in manager.list_branches()]}")

    # Step 3: Undo and redo -> redo follows the newest branch
    manager.undo()
    manager.redo()
    print(f"After undo + redo: {shapes}")

    # Step 4: History, most recent first
    for node in manager.get_history():
        print(f"  - {node.description}")


if __name__ == "__main__":
    main()
