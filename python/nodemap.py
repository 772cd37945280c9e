"""
Jagged two-dimensional linked grid.

Every node links right to its row neighbor and down to the node in the same
column of the next row. Rows may differ in length: the left edge always hangs
off the spine of row-start nodes below head, the right edge is irregular.
Positional edits repair both link dimensions locally instead of rebuilding.
"""

from __future__ import annotations

import logging
from typing import Any, Generic, Iterable, Iterator, TypeVar

from grid_types import (
    CellPosition,
    Direction,
    EmptyContainerError,
    GridNode,
    GridOptions,
    InternalInconsistencyError,
    InvariantViolationError,
    Link,
    NodeId,
    OutOfBoundsError,
    StaleNodeError,
)
from node_arena import NodeArena

logger = logging.getLogger(__name__)

T = TypeVar("T")

_NO_VALUE: Any = object()


class JaggedGrid(Generic[T]):
    """
    A matrix-like container whose rows may have different lengths.

    Column alignment: a node at (row, col) links down to the node at
    (row + 1, col) when that row is long enough, and has no down link otherwise.

    Nodes live in a NodeArena and are addressed by generational NodeId
    handles. Handles returned by push/add/insert stay valid until the node is
    detached; using one afterwards raises StaleNodeError.

    Usage:
        grid = JaggedGrid[int]()
        grid.push(1)
        grid.add(0, 2)
        grid.push(3)
        grid.insert(1, 0, 4)
        print(grid)  # 1 2 / 4 3
    """

    def __init__(self, head_value: T = _NO_VALUE, options: GridOptions | None = None) -> None:
        self.options = options if options is not None else GridOptions()
        self._arena: NodeArena[T] = NodeArena()
        self.head: Link = None
        if head_value is not _NO_VALUE:
            self.head = self._arena.alloc(head_value)

    @classmethod
    def from_rows(cls, rows: Iterable[Iterable[T]], options: GridOptions | None = None) -> JaggedGrid[T]:
        """Build a grid row by row. Every row must hold at least one value."""
        grid: JaggedGrid[T] = cls(options=options)
        for row_idx, row in enumerate(rows):
            values = list(row)
            if not values:
                raise InvariantViolationError(
                    f"Row {row_idx} is empty\n"
                    f"  Every row of a grid needs at least one element"
                )
            grid.push(values[0])
            for value in values[1:]:
                grid.add(row_idx, value)
        return grid

    # =========================================================================
    # Walking
    # =========================================================================

    def _walk(self, start: Link, direction: Direction) -> Iterator[NodeId]:
        current = start
        while current is not None:
            yield current
            current = self._arena[current].link(direction)

    def _row(self, row: int) -> list[NodeId]:
        return list(self._walk(self.get_first(row), Direction.RIGHT))

    def _row_snapshot(self, row: int) -> list[NodeId]:
        """Handles of a row in column order, or [] if there is no such row."""
        if row < 0:
            return []
        for index, start in enumerate(self._walk(self.head, Direction.DOWN)):
            if index == row:
                return list(self._walk(start, Direction.RIGHT))
        return []

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def height(self) -> int:
        return sum(1 for _ in self._walk(self.head, Direction.DOWN))

    @property
    def size(self) -> int:
        return sum(
            sum(1 for _ in self._walk(start, Direction.RIGHT))
            for start in self._walk(self.head, Direction.DOWN)
        )

    def get_first(self, row: int) -> NodeId:
        """Leftmost node of a row."""
        if row >= 0:
            for index, node_id in enumerate(self._walk(self.head, Direction.DOWN)):
                if index == row:
                    return node_id
        raise OutOfBoundsError(
            f"Row {row} is out of bounds\n"
            f"  Grid height: {self.height}",
            row=row,
        )

    def get_last(self, row: int) -> NodeId:
        """Rightmost node of a row."""
        last = self.get_first(row)
        for last in self._walk(last, Direction.RIGHT):
            pass
        return last

    def get_bottom(self) -> NodeId | None:
        """Leftmost node of the last row, or None if the grid is empty."""
        bottom = None
        for bottom in self._walk(self.head, Direction.DOWN):
            pass
        return bottom

    def get(self, row: int, col: int) -> NodeId:
        first = self.get_first(row)
        if col >= 0:
            for index, node_id in enumerate(self._walk(first, Direction.RIGHT)):
                if index == col:
                    return node_id
        raise OutOfBoundsError(
            f"Column {col} is out of bounds on row {row}\n"
            f"  Row length: {self.row_length(row)}",
            row=row,
            col=col,
        )

    def node(self, node_id: NodeId) -> GridNode[T]:
        return self._arena[node_id]

    def value(self, node_id: NodeId) -> T:
        return self._arena[node_id].value

    def row_length(self, row: int) -> int:
        return len(self._row(row))

    def row_values(self, row: int) -> list[T]:
        return [self._arena[node_id].value for node_id in self._row(row)]

    def rows(self) -> Iterator[list[T]]:
        """Lazily yield each row as a list of values, top to bottom."""
        for start in self._walk(self.head, Direction.DOWN):
            yield [self._arena[node_id].value for node_id in self._walk(start, Direction.RIGHT)]

    def positions(self) -> Iterator[tuple[CellPosition, T]]:
        """Lazily yield (position, value) for every node in row-major order."""
        for row_idx, start in enumerate(self._walk(self.head, Direction.DOWN)):
            for col_idx, node_id in enumerate(self._walk(start, Direction.RIGHT)):
                yield CellPosition(row_idx, col_idx), self._arena[node_id].value

    def find(self, value: T) -> CellPosition | None:
        """Position of the first node (row-major) whose value equals value."""
        for pos, candidate in self.positions():
            if candidate == value:
                return pos
        return None

    def __iter__(self) -> Iterator[list[T]]:
        return self.rows()

    def __len__(self) -> int:
        return self.size

    def __contains__(self, value: object) -> bool:
        return any(candidate == value for _, candidate in self.positions())

    def __str__(self) -> str:
        return "\n".join(" ".join(str(value) for value in row) for row in self.rows())

    def __repr__(self) -> str:
        return f"JaggedGrid({list(self.rows())!r})"

    def deep_print(self) -> str:
        """
        Verbose rendering listing every node with its right and down neighbors.

        Absent links are shown with options.none_marker.
        """
        lines: list[str] = []
        for row_idx, start in enumerate(self._walk(self.head, Direction.DOWN)):
            lines.append(f"Row {row_idx}:")
            for col_idx, node_id in enumerate(self._walk(start, Direction.RIGHT)):
                node = self._arena[node_id]
                lines.append(
                    f"  [{row_idx}, {col_idx}] {node.value}"
                    f"  right: {self._describe(node.right)}"
                    f"  down: {self._describe(node.down)}"
                )
        return "\n".join(lines)

    def _describe(self, link: Link) -> str:
        match link:
            case None:
                return self.options.none_marker
            case NodeId():
                return str(self._arena[link].value)

    # =========================================================================
    # Append Operations
    # =========================================================================

    def push(self, val: T) -> NodeId:
        """Append a new one-element row below the bottom-left node."""
        new_id = self._arena.alloc(val)
        match self.get_bottom():
            case None:
                self.head = new_id
            case bottom:
                self._arena[bottom].down = new_id
        self._after_edit("push", self.height - 1, 0)
        return new_id

    def pop(self) -> list[T]:
        """
        Remove the entire last row.

        Every down link of the row above is cleared, however wide the removed
        row was.

        Returns:
            The values of the removed row, leftmost first

        Raises:
            EmptyContainerError: If the grid has no rows
        """
        spine = list(self._walk(self.head, Direction.DOWN))
        if not spine:
            raise EmptyContainerError("Cannot pop from an empty grid")

        bottom = list(self._walk(spine[-1], Direction.RIGHT))
        if len(spine) == 1:
            self.head = None
        else:
            for node_id in self._walk(spine[-2], Direction.RIGHT):
                self._arena[node_id].down = None

        values = [self._arena.free(node_id) for node_id in bottom]
        self._after_edit("pop", len(spine) - 1)
        return values

    def add(self, row: int, val: T) -> NodeId:
        """
        Append a value at the right end of a row.

        On an empty grid, add(0, val) creates the head node.

        Raises:
            OutOfBoundsError: If the row does not exist
        """
        if row == 0 and self.head is None:
            self.head = self._arena.alloc(val)
            self._after_edit("add", 0, 0)
            return self.head

        nodes = self._row(row)
        new_id = self._splice(row, len(nodes), val, nodes)
        self._after_edit("add", row, len(nodes))
        return new_id

    def remove(self, row: int) -> T:
        """
        Detach the rightmost element of a row and return its value.

        Raises:
            EmptyContainerError: If the grid has no rows
            OutOfBoundsError: If the row does not exist
            InvariantViolationError: If the row holds a single element
        """
        if self.head is None:
            raise EmptyContainerError("Cannot remove from an empty grid")

        nodes = self._row(row)
        if len(nodes) == 1:
            raise InvariantViolationError(
                f"Cannot remove the last element of row {row}\n"
                f"  Rows cannot become empty; use pop() to drop the whole bottom row"
            )
        value = self._unsplice(row, len(nodes) - 1, nodes)
        self._after_edit("remove", row, len(nodes) - 1)
        return value

    # =========================================================================
    # Positional Edits
    # =========================================================================

    def insert(self, row: int, col: int, val: T) -> NodeId:
        """
        Insert a value so it becomes column col of row.

        Nodes previously at column >= col shift one column right. On an empty
        grid only insert(0, 0, val) is valid and creates the head node.

        Raises:
            OutOfBoundsError: If the row does not exist, col is not in [0, len(row)],
                or col is past the end of the row above
        """
        if self.head is None:
            if (row, col) != (0, 0):
                raise OutOfBoundsError(
                    f"Cannot insert at ({row}, {col}) in an empty grid\n"
                    f"  Only (0, 0) is valid",
                    row=row,
                    col=col,
                )
            self.head = self._arena.alloc(val)
            self._after_edit("insert", 0, 0)
            return self.head

        nodes = self._row(row)
        if not 0 <= col <= len(nodes):
            raise OutOfBoundsError(
                f"Cannot insert at column {col} of row {row}\n"
                f"  Row length: {len(nodes)}\n"
                f"  Valid columns: 0 to {len(nodes)}",
                row=row,
                col=col,
            )
        above_length = self.row_length(row - 1) if row > 0 else len(nodes)
        if col > above_length:
            raise OutOfBoundsError(
                f"Cannot insert at column {col} of row {row}\n"
                f"  Row above length: {above_length}\n"
                f"  Columns past the end of the row above have no node to link down from",
                row=row,
                col=col,
            )
        new_id = self._splice(row, col, val, nodes)
        self._after_edit("insert", row, col)
        return new_id

    def delete(self, row: int, col: int) -> T:
        """
        Remove the node at (row, col) and return its value.

        Nodes previously at column > col shift one column left. Deleting the
        only node of a single-row grid leaves the grid empty.

        Raises:
            EmptyContainerError: If the grid has no rows
            OutOfBoundsError: If (row, col) does not name a node
            InvariantViolationError: If the row would become empty while other rows exist
        """
        if self.head is None:
            raise EmptyContainerError("Cannot delete from an empty grid")

        nodes = self._row(row)
        if not 0 <= col < len(nodes):
            raise OutOfBoundsError(
                f"Column {col} is out of bounds on row {row}\n"
                f"  Row length: {len(nodes)}",
                row=row,
                col=col,
            )
        if len(nodes) == 1 and self.height > 1:
            raise InvariantViolationError(
                f"Cannot delete the last element of row {row}\n"
                f"  Grid height: {self.height}\n"
                f"  Rows cannot become empty; use pop() to drop the whole bottom row"
            )
        value = self._unsplice(row, col, nodes)
        self._after_edit("delete", row, col)
        return value

    def clear(self) -> None:
        """Detach every node."""
        self._arena.clear()
        self.head = None
        self._after_edit("clear")

    # =========================================================================
    # Link Repair
    # =========================================================================

    def _splice(self, row: int, col: int, val: T, nodes: list[NodeId]) -> NodeId:
        above = self._row_snapshot(row - 1)
        below = self._row_snapshot(row + 1)
        new_id = self._arena.alloc(val)
        self._relink(row, col, above, nodes[:col] + [new_id] + nodes[col:], below)
        return new_id

    def _unsplice(self, row: int, col: int, nodes: list[NodeId]) -> T:
        above = self._row_snapshot(row - 1)
        below = self._row_snapshot(row + 1)
        self._relink(row, col, above, nodes[:col] + nodes[col + 1:], below)
        return self._arena.free(nodes[col])

    def _relink(
        self,
        row: int,
        col: int,
        above: list[NodeId],
        edited: list[NodeId],
        below: list[NodeId],
    ) -> None:
        """
        Restore both link dimensions after an edit at column col of row.

        above and below are the neighboring rows as they were before the edit;
        edited is the edited row in its new column order. Every link that
        targets or leaves a column left of col is unaffected by the edit.

        Three regions are repaired:
        1. The row chain of the edited row from col - 1 onward.
        2. The row above: each node at column >= col now targets whichever node
           occupies its column in the edited row. Reading targets from the
           snapshot rather than from neighboring down links means no link is
           read after it has been overwritten.
        3. The edited row's own down links at column >= col, since the row
           below did not shift. This is each node's old down moved one column
           right (insert) or left (delete).
        """
        for index in range(max(col - 1, 0), len(edited)):
            self._arena[edited[index]].right = edited[index + 1] if index + 1 < len(edited) else None

        if row == 0:
            self.head = edited[0] if edited else None

        for index in range(col, len(above)):
            self._arena[above[index]].down = edited[index] if index < len(edited) else None

        for index in range(col, len(edited)):
            self._arena[edited[index]].down = below[index] if index < len(below) else None

    # =========================================================================
    # Verification
    # =========================================================================

    def _after_edit(self, operation: str, row: int | None = None, col: int | None = None) -> None:
        if logger.isEnabledFor(logging.DEBUG):
            if col is not None:
                logger.debug("%s: row=%d col=%d height=%d", operation, row, col, self.height)
            elif row is not None:
                logger.debug("%s: row=%d height=%d", operation, row, self.height)
            else:
                logger.debug("%s: height=%d", operation, self.height)
        if self.options.verify_after_edit:
            self.check_invariants()

    def check_invariants(self) -> None:
        """
        Verify the full link structure.

        Checks that no node is reachable twice, that every down link obeys
        column alignment, that every reachable handle is live and that the
        arena holds no detached nodes.

        Raises:
            InternalInconsistencyError: Describing every violation found
        """
        limit = len(self._arena)
        problems: list[str] = []

        def bounded(start: Link, direction: Direction) -> list[NodeId]:
            walked: list[NodeId] = []
            for node_id in self._walk(start, direction):
                if node_id not in self._arena:
                    raise StaleNodeError(f"Link to stale node {node_id}", node_id)
                if len(walked) >= limit:
                    problems.append(f"Cycle following {direction.value} links from {start}")
                    break
                walked.append(node_id)
            return walked

        rows = [bounded(start, Direction.RIGHT) for start in bounded(self.head, Direction.DOWN)]

        seen: set[NodeId] = set()
        for row_idx, nodes in enumerate(rows):
            below = rows[row_idx + 1] if row_idx + 1 < len(rows) else []
            for col_idx, node_id in enumerate(nodes):
                if node_id in seen:
                    problems.append(f"Node {node_id} reached twice (again at [{row_idx}, {col_idx}])")
                seen.add(node_id)

                expected = below[col_idx] if col_idx < len(below) else None
                actual = self._arena[node_id].down
                if actual != expected:
                    problems.append(
                        f"[{row_idx}, {col_idx}] links down to {actual}, expected {expected}"
                    )

        if len(seen) != len(self._arena):
            problems.append(
                f"Arena holds {len(self._arena)} live nodes but {len(seen)} are reachable"
            )

        if problems:
            message = "Grid invariants violated:\n" + "\n".join(f"  {p}" for p in problems)
            logger.error(message)
            raise InternalInconsistencyError(message)
