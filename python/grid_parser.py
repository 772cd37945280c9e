"""
Grid parsing utilities for nodemap.

Provides two parsing formats:
1. Standard format with space-separated cells
2. Concise format with single-character cells

Rows may have different lengths; neither format pads short rows.
"""

from __future__ import annotations

from grid_types import GridOptions
from nodemap import JaggedGrid

__all__ = ["parse_cell", "parse_grid", "parse_grids", "parse_grid_concise"]

GridStore = dict[str, JaggedGrid]


def parse_cell(cell_str: str) -> int | str:
    """Integers (with optional leading '-') become int, anything else stays str."""
    digits = cell_str[1:] if cell_str.startswith("-") else cell_str
    if digits.isdecimal():
        return int(cell_str)
    return cell_str


def parse_grid(definition: str, options: GridOptions | None = None) -> JaggedGrid:
    """
    Parse a single grid from a compact string format.

    Format:
    - Rows separated by |
    - Cells separated by single spaces
    - Integer cells ("1", "-12") become int values, other cells stay strings
    - Every row must contain at least one cell

    Example:
        "1 2 3|4 5|x"
        Creates a grid with rows [1, 2, 3], [4, 5], ["x"]

    Args:
        definition: The grid definition
        options: Options for the created grid

    Returns:
        The parsed JaggedGrid

    Raises:
        ValueError: If a row is empty or contains an empty cell
    """
    row_strings = definition.strip().split("|")
    rows: list[list[int | str]] = []

    for row_idx, row_str in enumerate(row_strings):
        row_str = row_str.strip()
        if not row_str:
            raise ValueError(
                f"Empty row in grid definition\n"
                f"  Row {row_idx} of \"{definition}\"\n"
                f"  Every row must contain at least one cell"
            )

        cells: list[int | str] = []
        for col_idx, cell_str in enumerate(row_str.split(" ")):
            if not cell_str:
                raise ValueError(
                    f"Empty cell in grid definition\n"
                    f"  Row {row_idx}: \"{row_str}\"\n"
                    f"  Position: column {col_idx}\n"
                    f"  Cells must be separated by exactly one space"
                )
            cells.append(parse_cell(cell_str))
        rows.append(cells)

    return JaggedGrid.from_rows(rows, options=options)


def parse_grids(definitions: dict[str, str], options: GridOptions | None = None) -> GridStore:
    """
    Parse several named grids.

    Example:
        {
            "main": "1 2 3|4 5",
            "tall": "1|2|3"
        }

    Args:
        definitions: Dict mapping grid name to string definition
        options: Options shared by every created grid

    Returns:
        Dict mapping grid name to parsed JaggedGrid
    """
    store: GridStore = {}
    for grid_id, definition in definitions.items():
        try:
            store[grid_id] = parse_grid(definition, options)
        except ValueError as e:
            raise ValueError(f"In grid '{grid_id}': {e}") from e
    return store


def parse_grid_concise(definition: str, options: GridOptions | None = None) -> JaggedGrid:
    """
    Parse a grid where every character is one cell.

    Format:
    - Rows separated by |
    - Digits become int values, letters stay single-character strings
    - Whitespace is not allowed inside a row

    Example:
        "123|45|a"
        Creates a grid with rows [1, 2, 3], [4, 5], ["a"]

    Raises:
        ValueError: If a row is empty or contains an invalid character
    """
    rows: list[list[int | str]] = []

    for row_idx, row_str in enumerate(definition.strip().split("|")):
        if not row_str:
            raise ValueError(
                f"Empty row in grid definition\n"
                f"  Row {row_idx} of \"{definition}\"\n"
                f"  Every row must contain at least one cell"
            )

        cells: list[int | str] = []
        for col_idx, char in enumerate(row_str):
            if char.isdecimal():
                cells.append(int(char))
            elif char.isalpha():
                cells.append(char)
            else:
                raise ValueError(
                    f"Invalid character '{char}' in grid definition\n"
                    f"  Row {row_idx}, column {col_idx}\n"
                    f"  Valid characters: digits (0-9), letters (a-zA-Z)"
                )
        rows.append(cells)

    return JaggedGrid.from_rows(rows, options=options)
