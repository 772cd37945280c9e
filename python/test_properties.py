"""
Property tests for the jagged grid: generated edit sequences checked against a
list-of-lists model, round-trips and append/insert equivalence.
"""

import pytest
from hypothesis import assume, given, settings, strategies as st
from hypothesis.stateful import RuleBasedStateMachine, invariant, rule

from grid_types import (
    EmptyContainerError,
    GridOptions,
    InvariantViolationError,
    NodeId,
    NodeMapError,
    OutOfBoundsError,
)
from nodemap import JaggedGrid

Shape = dict[tuple[int, int], tuple[object, tuple[int, int] | None, tuple[int, int] | None]]

values = st.integers(min_value=-1000, max_value=1000)
grid_rows = st.lists(values, min_size=1, max_size=6)
layouts = st.lists(grid_rows, max_size=5)
nonempty_layouts = st.lists(grid_rows, min_size=1, max_size=5)


def link_table(grid: JaggedGrid) -> dict[NodeId, tuple[NodeId | None, NodeId | None]]:
    """Map every node handle to its (right, down) links."""
    table = {}
    for row in range(grid.height):
        for col in range(grid.row_length(row)):
            node_id = grid.get(row, col)
            node = grid.node(node_id)
            table[node_id] = (node.right, node.down)
    return table


def shape(grid: JaggedGrid) -> Shape:
    """Handle-independent structure: (value, right position, down position) per position."""
    position_of = {}
    for row in range(grid.height):
        for col in range(grid.row_length(row)):
            position_of[grid.get(row, col)] = (row, col)

    result: Shape = {}
    for node_id, (row, col) in position_of.items():
        node = grid.node(node_id)
        result[(row, col)] = (
            node.value,
            None if node.right is None else position_of[node.right],
            None if node.down is None else position_of[node.down],
        )
    return result


def insert_limit(rows: list[list[int]], row: int) -> int:
    """Largest column insert accepts on row: its length, capped by the row above."""
    if row == 0:
        return len(rows[0])
    return min(len(rows[row]), len(rows[row - 1]))


# =============================================================================
# Model-Based Edit Sequences
# =============================================================================


def apply_to_model(model: list[list[int]], op: tuple) -> tuple[type[NodeMapError] | None, object]:
    """Apply op to the model; return (expected error type, expected result)."""
    name, *args = op
    if name == "push":
        model.append([args[0]])
        return None, None
    if name == "pop":
        if not model:
            return EmptyContainerError, None
        return None, model.pop()
    if name == "add":
        row, value = args
        if not model and row == 0:
            model.append([value])
            return None, None
        if not 0 <= row < len(model):
            return OutOfBoundsError, None
        model[row].append(value)
        return None, None
    if name == "remove":
        (row,) = args
        if not model:
            return EmptyContainerError, None
        if not 0 <= row < len(model):
            return OutOfBoundsError, None
        if len(model[row]) == 1:
            return InvariantViolationError, None
        return None, model[row].pop()
    if name == "insert":
        row, col, value = args
        if not model:
            if (row, col) != (0, 0):
                return OutOfBoundsError, None
            model.append([value])
            return None, None
        if not 0 <= row < len(model) or not 0 <= col <= insert_limit(model, row):
            return OutOfBoundsError, None
        model[row].insert(col, value)
        return None, None
    if name == "delete":
        row, col = args
        if not model:
            return EmptyContainerError, None
        if not 0 <= row < len(model) or not 0 <= col < len(model[row]):
            return OutOfBoundsError, None
        if len(model[row]) == 1 and len(model) > 1:
            return InvariantViolationError, None
        value = model[row].pop(col)
        if not model[row]:
            model.pop(row)
        return None, value
    raise ValueError(f"Unknown op: {name}")


def apply_to_grid(grid: JaggedGrid, op: tuple) -> object:
    name, *args = op
    result = getattr(grid, name)(*args)
    if name in ("push", "add", "insert"):
        return None
    return result


class GridMachine(RuleBasedStateMachine):
    """Drives a verified grid and a list-of-lists model through the same edits."""

    def __init__(self) -> None:
        super().__init__()
        self.grid: JaggedGrid[int] = JaggedGrid(options=GridOptions(verify_after_edit=True))
        self.model: list[list[int]] = []

    def check_edit(self, op: tuple) -> None:
        before = [list(row) for row in self.model]
        expected_error, expected_result = apply_to_model(self.model, op)
        if expected_error is not None:
            with pytest.raises(expected_error):
                apply_to_grid(self.grid, op)
            # Failed edits leave the grid untouched
            assert self.model == before
        else:
            assert apply_to_grid(self.grid, op) == expected_result

    def draw_row(self, data) -> int:
        # Includes one index on each side of the valid range
        return data.draw(st.integers(min_value=-1, max_value=len(self.model)), label="row")

    def length_of(self, row: int) -> int:
        return len(self.model[row]) if 0 <= row < len(self.model) else 0

    @rule(value=values)
    def push(self, value: int) -> None:
        self.check_edit(("push", value))

    @rule()
    def pop(self) -> None:
        self.check_edit(("pop",))

    @rule(data=st.data(), value=values)
    def add(self, data, value: int) -> None:
        self.check_edit(("add", self.draw_row(data), value))

    @rule(data=st.data())
    def remove(self, data) -> None:
        self.check_edit(("remove", self.draw_row(data)))

    @rule(data=st.data(), value=values)
    def insert(self, data, value: int) -> None:
        row = self.draw_row(data)
        col = data.draw(st.integers(min_value=-1, max_value=self.length_of(row) + 1), label="col")
        self.check_edit(("insert", row, col, value))

    @rule(data=st.data())
    def delete(self, data) -> None:
        row = self.draw_row(data)
        col = data.draw(st.integers(min_value=-1, max_value=self.length_of(row)), label="col")
        self.check_edit(("delete", row, col))

    @rule()
    def clear(self) -> None:
        self.grid.clear()
        self.model.clear()

    @invariant()
    def matches_model(self) -> None:
        assert list(self.grid.rows()) == self.model
        assert self.grid.height == len(self.model)
        assert self.grid.size == sum(len(row) for row in self.model)
        self.grid.check_invariants()


TestGridEdits = GridMachine.TestCase
TestGridEdits.settings = settings(max_examples=60, stateful_step_count=60, deadline=None)


# =============================================================================
# Construction, Round-Trips and Equivalences
# =============================================================================


class TestFromRows:
    """from_rows builds exactly the given layout with aligned down links."""

    @given(rows=layouts)
    def test_layout_is_preserved(self, rows: list[list[int]]) -> None:
        grid = JaggedGrid.from_rows(rows)
        assert list(grid.rows()) == rows
        assert grid.size == sum(len(row) for row in rows)
        grid.check_invariants()


class TestRoundTrip:
    """insert followed by delete at the same position restores every link."""

    @given(rows=nonempty_layouts, data=st.data())
    def test_insert_then_delete(self, rows: list[list[int]], data) -> None:
        row = data.draw(st.integers(min_value=0, max_value=len(rows) - 1), label="row")
        col = data.draw(st.integers(min_value=0, max_value=insert_limit(rows, row)), label="col")
        grid = JaggedGrid.from_rows(rows)
        links_before = link_table(grid)

        new_id = grid.insert(row, col, 99)
        grid.check_invariants()
        assert grid.get(row, col) == new_id
        assert grid.delete(row, col) == 99

        assert grid.size == sum(len(r) for r in rows)
        assert grid.height == len(rows)
        assert link_table(grid) == links_before

    @given(rows=nonempty_layouts, data=st.data())
    def test_insert_past_row_above_changes_nothing(self, rows: list[list[int]], data) -> None:
        """Rejected inserts past the row above leave every link in place."""
        overhangs = [r for r in range(1, len(rows)) if len(rows[r]) > len(rows[r - 1])]
        assume(overhangs)
        row = data.draw(st.sampled_from(overhangs), label="row")
        col = data.draw(
            st.integers(min_value=len(rows[row - 1]) + 1, max_value=len(rows[row])), label="col"
        )
        grid = JaggedGrid.from_rows(rows)
        links_before = link_table(grid)

        with pytest.raises(OutOfBoundsError, match="Row above length"):
            grid.insert(row, col, 99)
        assert link_table(grid) == links_before


class TestAddInsertEquivalence:
    """add(r, v) builds the same structure as insert(r, len(row r), v)."""

    @given(rows=nonempty_layouts, data=st.data())
    def test_add_matches_insert_at_end(self, rows: list[list[int]], data) -> None:
        # insert only reaches the end of rows no longer than the row above
        candidates = [r for r in range(len(rows)) if insert_limit(rows, r) == len(rows[r])]
        row = data.draw(st.sampled_from(candidates), label="row")
        added = JaggedGrid.from_rows(rows)
        inserted = JaggedGrid.from_rows(rows)

        added.add(row, 99)
        inserted.insert(row, len(rows[row]), 99)

        assert shape(added) == shape(inserted)

    @given(rows=nonempty_layouts, data=st.data())
    def test_add_extends_past_row_above(self, rows: list[list[int]], data) -> None:
        """add is not bounded by the row above, so rows can keep growing."""
        row = data.draw(st.integers(min_value=0, max_value=len(rows) - 1), label="row")
        grid = JaggedGrid.from_rows(rows)
        for value in range(3):
            grid.add(row, value)
        assert grid.row_values(row) == rows[row] + [0, 1, 2]
        grid.check_invariants()

    @given(rows=nonempty_layouts, data=st.data())
    def test_remove_matches_delete_at_end(self, rows: list[list[int]], data) -> None:
        candidates = [r for r in range(len(rows)) if len(rows[r]) >= 2]
        assume(candidates)
        row = data.draw(st.sampled_from(candidates), label="row")
        removed = JaggedGrid.from_rows(rows)
        deleted = JaggedGrid.from_rows(rows)

        assert removed.remove(row) == deleted.delete(row, len(rows[row]) - 1)
        assert shape(removed) == shape(deleted)


class TestMonotonicity:
    """push and pop change height and size by exactly one row."""

    @given(rows=layouts, value=values)
    def test_push_then_pop(self, rows: list[list[int]], value: int) -> None:
        grid = JaggedGrid.from_rows(rows)
        height, size = grid.height, grid.size

        grid.push(value)
        assert (grid.height, grid.size) == (height + 1, size + 1)

        assert grid.pop() == [value]
        assert (grid.height, grid.size) == (height, size)
        grid.check_invariants()
