#!/usr/bin/env python3
"""Example: Checkpoints, grouping and listeners (branching-undo)

Shows a grouped multi-step edit, a named checkpoint, and restoring that
checkpoint from a different branch while a listener reports each change.

Usage:
    python examples/02_checkpoints_and_groups.py
"""
from __future__ import annotations

import branching_undo as bu


def main() -> None:
    text: list[str] = []
    triggers = bu.ShortcutTriggers()
    manager = bu.UndoManager(max_nodes=50, triggers=triggers)
    manager.subscribe(
        lambda snap: print(f"  [listener] undo={snap.can_undo} redo={snap.can_redo} depth={len(snap.history)}")
    )

    def type_word(word: str) -> None:
        text.append(word)
        manager.push(bu.UndoAction(apply=lambda: text.append(word), revert=text.pop, description=word))

    print("Typing a greeting as one undoable unit:")
    with manager.group("greeting"):
        type_word("hello")
        type_word("world")

    print("Saving a checkpoint:")
    draft = manager.create_checkpoint("draft")

    print("Editing further:")
    type_word("again")
    print(f"Text: {' '.join(text)}")

    print("Undo via the keyboard shortcut signal:")
    triggers.emit(bu.UNDO_REQUESTED)
    triggers.emit(bu.UNDO_REQUESTED)
    type_word("there")
    print(f"Text on a new branch: {' '.join(text)}")

    print("Restoring the draft checkpoint:")
    manager.restore_to_checkpoint(draft)
    print(f"Text: {' '.join(text)}")
    print(f"Stats: {manager.stats()}")
    manager.close()


if __name__ == "__main__":
    main()
