"""
Shared type definitions for the nodemap system.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class Direction(Enum):
    """Outgoing link direction of a node."""

    RIGHT = "right"  # Next node in the same row (increasing col)
    DOWN = "down"  # Node directly below (increasing row)


# =============================================================================
# Node Types
# =============================================================================


@dataclass(frozen=True)
class NodeId:
    """Generational handle to a node slot in a NodeArena."""

    slot: int
    generation: int

    def __str__(self) -> str:
        return f"#{self.slot}.{self.generation}"


Link = NodeId | None


@dataclass
class GridNode(Generic[T]):
    """A linked cell holding a value plus its right and down links."""

    value: T
    right: Link = None
    down: Link = None

    def link(self, direction: Direction) -> Link:
        match direction:
            case Direction.RIGHT:
                return self.right
            case Direction.DOWN:
                return self.down


@dataclass(frozen=True)
class CellPosition:
    """A position within a grid."""

    row: int
    col: int


@dataclass(frozen=True)
class GridOptions:
    """Options governing grid behavior."""

    verify_after_edit: bool = False  # Run check_invariants() after every mutation
    none_marker: str = "none"  # Shown by deep_print for absent links


# =============================================================================
# Errors
# =============================================================================


class NodeMapError(Exception):
    """Base exception for all grid errors."""


class EmptyContainerError(NodeMapError, IndexError):
    """Raised when an operation needs at least one element and the grid has none."""


class OutOfBoundsError(NodeMapError, IndexError):
    """Raised when a row or column index does not name an existing node."""

    def __init__(self, message: str, row: int | None = None, col: int | None = None):
        super().__init__(message)
        self.row = row
        self.col = col


class InvariantViolationError(NodeMapError, ValueError):
    """Raised when an operation would leave the grid in an invalid shape."""


class InternalInconsistencyError(NodeMapError, RuntimeError):
    """Raised when the link structure contradicts its own invariants."""


class StaleNodeError(InternalInconsistencyError):
    """Raised when a handle refers to a slot that has since been freed or reused."""

    def __init__(self, message: str, node_id: NodeId):
        super().__init__(message)
        self.node_id = node_id
