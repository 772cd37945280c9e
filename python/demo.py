"""
Demonstration script for the nodemap jagged grid.
"""

import logging
import sys

from ascii_render import render_links, render_rows, render_store_flow
from grid_parser import parse_grids
from grid_types import GridOptions, InvariantViolationError, NodeMapError
from nodemap import JaggedGrid


def demo() -> None:
    """Walk through every grid operation, printing the grid after each step."""
    grid: JaggedGrid[int] = JaggedGrid(options=GridOptions(verify_after_edit=True))

    print("=" * 40)
    print("push 0, push 1, pop, push 2:")
    print("=" * 40)
    grid.push(0)
    grid.push(1)
    print(f"popped: {grid.pop()}")
    grid.push(2)
    print(grid)
    print()

    print("=" * 40)
    print("add(0, 2), add(1, 3), remove(1):")
    print("=" * 40)
    grid.add(0, 2)
    grid.add(1, 3)
    print(render_links(grid))
    print(f"removed: {grid.remove(1)}")
    print(render_links(grid))
    print()

    print("=" * 40)
    print("insert(0, 0, 4), delete(0, 0):")
    print("=" * 40)
    grid.insert(0, 0, 4)
    print(render_links(grid))
    print(f"deleted: {grid.delete(0, 0)}")
    print(grid)
    print()
    print(grid.deep_print())
    print()


def demo_jagged() -> None:
    """Insert and delete in the middle of a jagged grid."""
    store = parse_grids(
        {
            "before": "1 2 3|4 5|6 7 8 9",
            "after": "1 2 3|4 5|6 7 8 9",
        }
    )
    after = store["after"]
    after.insert(1, 1, 0)
    after.delete(2, 0)

    print("=" * 40)
    print("insert(1, 1, 0) then delete(2, 0):")
    print("=" * 40)
    print(render_store_flow(store))
    print(render_rows(after))
    print()
    print(render_links(after))
    print()


def demo_errors() -> None:
    """Show the errors raised for invalid edits."""
    grid: JaggedGrid[int] = JaggedGrid(1)

    print("=" * 40)
    print("Errors:")
    print("=" * 40)
    attempts = [
        ("remove(0)", lambda: grid.remove(0)),
        ("get(0, 4)", lambda: grid.get(0, 4)),
        ("insert(3, 0, 7)", lambda: grid.insert(3, 0, 7)),
        ("push(2)", lambda: grid.push(2)),
        ("add(1, 3)", lambda: grid.add(1, 3)),
        ("insert(1, 2, 7)", lambda: grid.insert(1, 2, 7)),
        ("pop()", grid.pop),
        ("pop()", grid.pop),
        ("pop()", grid.pop),
    ]
    for label, attempt in attempts:
        try:
            result = attempt()
            print(f"{label}: ok -> {result}")
        except InvariantViolationError as e:
            print(f"{label}: invariant violation: {e}")
        except NodeMapError as e:
            print(f"{label}: {type(e).__name__}: {e}")
    print()


if __name__ == "__main__":
    level = logging.DEBUG if "-v" in sys.argv[1:] else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    demo()
    demo_jagged()
    demo_errors()
