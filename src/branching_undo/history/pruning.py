"""Bounded memory for long editing sessions.

:class:`PruningPolicy` trims the history tree back to a node ceiling after
insertions.  Two kinds of node are never removed:

- the active path (current node up to its root), and
- checkpoints, together with their ancestor chains so they stay restorable.

Everything else is removed oldest first by action timestamp (insertion order
breaks ties).  A node is only removed once it is a leaf, so no surviving node
is left without a parent.  If the protected set alone exceeds the ceiling the
tree is left above it.
"""
from __future__ import annotations

import datetime
import heapq
import logging

from branching_undo.history.navigator import ancestors
from branching_undo.history.tree import HistoryTree, UndoNode

logger = logging.getLogger(__name__)

DEFAULT_MAX_NODES = 100


class PruningPolicy:
    """Removes unprotected nodes once the tree exceeds *max_nodes*.

    Parameters
    ----------
    max_nodes:
        Node ceiling (default: 100).  Must be at least 1.
    """

    def __init__(self, max_nodes: int = DEFAULT_MAX_NODES) -> None:
        if max_nodes < 1:
            raise ValueError(f"max_nodes must be >= 1, got {max_nodes}")
        self._max_nodes = max_nodes

    @property
    def max_nodes(self) -> int:
        return self._max_nodes

    def protected_ids(self, tree: HistoryTree) -> set[str]:
        """Ids that pruning must keep."""
        protected = set(ancestors(tree, tree.current_id))
        for checkpoint in tree.checkpoints():
            protected.update(ancestors(tree, checkpoint.node_id))
        return protected

    def prune(self, tree: HistoryTree) -> list[str]:
        """Trim *tree* toward the ceiling.

        Returns
        -------
        list[str]
            Ids of the removed nodes, in removal order.
        """
        if len(tree) <= self._max_nodes:
            return []

        protected = self.protected_ids(tree)
        heap: list[tuple[datetime.datetime, int, str]] = [
            _order_key(node)
            for node in tree.nodes()
            if node.node_id not in protected and node.is_leaf
        ]
        heapq.heapify(heap)

        removed: list[str] = []
        while len(tree) > self._max_nodes and heap:
            _, _, node_id = heapq.heappop(heap)
            node = tree.remove(node_id)
            removed.append(node_id)
            parent = tree.get(node.parent_id)
            if parent is not None and parent.is_leaf and parent.node_id not in protected:
                heapq.heappush(heap, _order_key(parent))

        if len(tree) > self._max_nodes:
            logger.debug(
                "Protected nodes keep history at %d nodes (ceiling %d)",
                len(tree),
                self._max_nodes,
            )
        if removed:
            logger.debug("Pruned %d node(s) from history", len(removed))
        return removed


def _order_key(node: UndoNode) -> tuple[datetime.datetime, int, str]:
    return (node.action.created_at, node.sequence, node.node_id)


__all__ = [
    "DEFAULT_MAX_NODES",
    "PruningPolicy",
]
