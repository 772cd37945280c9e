"""
Slot storage for grid nodes addressed by generational handles.

Freeing a slot bumps its generation, so a handle kept across a detach can never
silently resolve to whatever node reuses the slot later.
"""

from __future__ import annotations

import logging
from typing import Generic, Iterator, TypeVar

from grid_types import GridNode, NodeId, StaleNodeError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class NodeArena(Generic[T]):
    """
    Owns every node of a grid.

    Usage:
        arena = NodeArena[int]()
        node_id = arena.alloc(5)
        arena[node_id].right = other_id
        arena.free(node_id)
        arena[node_id]  # raises StaleNodeError
    """

    def __init__(self) -> None:
        self._nodes: list[GridNode[T] | None] = []
        self._generations: list[int] = []
        self._free_slots: list[int] = []

    def alloc(self, value: T) -> NodeId:
        """Store a new unlinked node and return its handle."""
        node = GridNode(value)
        if self._free_slots:
            slot = self._free_slots.pop()
            self._nodes[slot] = node
            logger.debug("alloc: reusing slot %d at generation %d", slot, self._generations[slot])
        else:
            slot = len(self._nodes)
            self._nodes.append(node)
            self._generations.append(0)
        return NodeId(slot, self._generations[slot])

    def free(self, node_id: NodeId) -> T:
        """Release a node's slot and return the value it held."""
        node = self[node_id]
        self._nodes[node_id.slot] = None
        self._generations[node_id.slot] += 1
        self._free_slots.append(node_id.slot)
        return node.value

    def is_live(self, node_id: NodeId) -> bool:
        return (
            0 <= node_id.slot < len(self._nodes)
            and self._nodes[node_id.slot] is not None
            and self._generations[node_id.slot] == node_id.generation
        )

    def __getitem__(self, node_id: NodeId) -> GridNode[T]:
        if not 0 <= node_id.slot < len(self._nodes):
            raise StaleNodeError(f"Node {node_id} was never allocated", node_id)

        node = self._nodes[node_id.slot]
        current = self._generations[node_id.slot]
        if node is None or current != node_id.generation:
            raise StaleNodeError(
                f"Stale node handle {node_id}\n"
                f"  Slot {node_id.slot} is at generation {current}"
                f" ({'free' if node is None else 'reused'})",
                node_id,
            )
        return node

    def __contains__(self, node_id: object) -> bool:
        return isinstance(node_id, NodeId) and self.is_live(node_id)

    def __len__(self) -> int:
        """Number of live nodes."""
        return len(self._nodes) - len(self._free_slots)

    def __iter__(self) -> Iterator[NodeId]:
        """Iterate handles of all live nodes in slot order."""
        for slot, node in enumerate(self._nodes):
            if node is not None:
                yield NodeId(slot, self._generations[slot])

    def clear(self) -> None:
        """Free every live node."""
        for node_id in list(self):
            self.free(node_id)
