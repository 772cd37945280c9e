"""
ASCII rendering for nodemap grids.

Provides three rendering approaches:
1. Row rendering - values laid out in aligned columns
2. Link rendering - values joined by the right/down links actually stored
3. Boxed flow rendering - several grids side by side in colored frames
"""

from __future__ import annotations

import logging
from typing import Callable

from simple_chalk import chalk  # type: ignore[import-untyped]

from grid_types import CellPosition
from nodemap import JaggedGrid

logger = logging.getLogger(__name__)

Colorize = Callable[[str], str]

_PALETTE: list[Colorize] = [
    chalk.red,
    chalk.green,
    chalk.yellow,
    chalk.blue,
    chalk.magenta,
    chalk.cyan,
    chalk.redBright,
    chalk.greenBright,
    chalk.yellowBright,
    chalk.blueBright,
]


def _plain(s: str) -> str:
    return s


def cell_width_for(grid: JaggedGrid) -> int:
    """Width of the widest value in the grid (at least 1)."""
    return max((len(str(value)) for _, value in grid.positions()), default=1)


def _box_width(grid: JaggedGrid, title: str, cell_width: int) -> tuple[int, int]:
    """Effective cell width and total frame width of a boxed grid."""
    cell_width = max(cell_width, cell_width_for(grid))
    cols = max((grid.row_length(row) for row in range(grid.height)), default=0)
    return cell_width, max(cols * cell_width, len(title) + 2) + 2


# =============================================================================
# Row Rendering
# =============================================================================


def render_rows(grid: JaggedGrid) -> str:
    """Render each row on its own line with values right-aligned in columns."""
    width = cell_width_for(grid)
    return "\n".join(
        " ".join(str(value).rjust(width) for value in row)
        for row in grid.rows()
    )


# =============================================================================
# Link Rendering
# =============================================================================


def render_links(grid: JaggedGrid) -> str:
    """
    Draw the grid from its stored links.

    A '─' joins a node to its right link and a '│' hangs below a node that has
    a down link, so a broken link shows up as a missing connector:

        1 ─ 2 ─ 3
        │   │
        4 ─ 5

    Returns:
        The diagram, or an empty string for an empty grid
    """
    width = cell_width_for(grid)
    lines: list[str] = []

    row_idx = 0
    while row_idx < grid.height:
        value_parts: list[str] = []
        down_parts: list[str] = []
        for col_idx in range(grid.row_length(row_idx)):
            node = grid.node(grid.get(row_idx, col_idx))
            value_parts.append(str(node.value).center(width))
            if node.right is not None:
                value_parts.append(" ─ ")

            down_parts.append(("│" if node.down is not None else " ").center(width))
            down_parts.append("   ")

        lines.append("".join(value_parts).rstrip())
        if row_idx + 1 < grid.height:
            lines.append("".join(down_parts).rstrip())
        row_idx += 1

    return "\n".join(lines)


# =============================================================================
# Boxed Rendering
# =============================================================================


def render_grid_box(
    grid: JaggedGrid,
    title: str = "",
    cell_width: int = 3,
    highlight_pos: CellPosition | None = None,
    colorize: Colorize | None = None,
) -> list[str]:
    """
    Render a single grid inside a frame.

    Short rows leave their missing cells blank so the jagged right edge stays
    visible.

    Args:
        grid: The grid to render
        title: Optional title centered in the top border
        cell_width: Minimum characters per cell (default 3); widened to fit
            the widest value
        highlight_pos: Optional position to highlight
        colorize: Optional colorizer for the frame

    Returns:
        List of strings representing the rendered grid lines
    """
    if colorize is None:
        colorize = _plain

    rows = list(grid.rows())
    cell_width, grid_width = _box_width(grid, title, cell_width)

    lines: list[str] = []

    # Top border with title
    label = f" {title} " if title else ""
    title_start = (grid_width - len(label)) // 2
    lines.append(
        colorize(
            "┌"
            + "─" * (title_start - 1)
            + label
            + "─" * (grid_width - title_start - len(label) - 1)
            + "┐"
        )
    )

    for r_idx, row in enumerate(rows):
        line_parts = [colorize("│")]

        for c_idx, value in enumerate(row):
            content = str(value).center(cell_width)
            is_highlighted = (
                highlight_pos is not None
                and highlight_pos.row == r_idx
                and highlight_pos.col == c_idx
            )
            if is_highlighted:
                content = chalk.bgWhite.black(content)
            line_parts.append(content)

        # Pad to the frame width
        padding = grid_width - 2 - len(row) * cell_width
        line_parts.append(" " * padding)
        line_parts.append(colorize("│"))
        lines.append("".join(line_parts))

    # Bottom border
    lines.append(colorize("└" + "─" * (grid_width - 2) + "┘"))

    return lines


def render_store_flow(
    store: dict[str, JaggedGrid],
    terminal_width: int = 120,
    cell_width: int = 3,
) -> str:
    """
    Render all grids in flow layout (multiple grids per row).

    Args:
        store: Dict mapping grid name to grid
        terminal_width: Maximum width for layout (default 120)
        cell_width: Minimum characters per cell (default 3)

    Returns:
        Rendered ASCII string with all grids in flow layout
    """
    grid_ids = sorted(store.keys())

    rendered_grids: dict[str, list[str]] = {}
    grid_widths: dict[str, int] = {}

    for i, grid_id in enumerate(grid_ids):
        grid = store[grid_id]
        rendered_grids[grid_id] = render_grid_box(
            grid, grid_id, cell_width, colorize=_PALETTE[i % len(_PALETTE)]
        )
        # Visible width, ignoring ANSI codes
        _, grid_widths[grid_id] = _box_width(grid, grid_id, cell_width)

    output_lines: list[str] = []
    grid_spacing = 2  # spaces between grids

    current_row_grids: list[str] = []
    current_row_width = 0

    for grid_id in grid_ids:
        needed_width = grid_widths[grid_id]
        if current_row_grids:
            needed_width += grid_spacing

        if current_row_grids and current_row_width + needed_width > terminal_width:
            _flush_grid_row(current_row_grids, rendered_grids, grid_widths, output_lines, grid_spacing)
            current_row_grids = []
            current_row_width = 0
            needed_width = grid_widths[grid_id]

        current_row_grids.append(grid_id)
        current_row_width += needed_width

    if current_row_grids:
        _flush_grid_row(current_row_grids, rendered_grids, grid_widths, output_lines, grid_spacing)

    logger.debug("render_store_flow: %d grids in %d lines", len(grid_ids), len(output_lines))
    return "\n".join(output_lines)


def _flush_grid_row(
    row_grid_ids: list[str],
    rendered_grids: dict[str, list[str]],
    grid_widths: dict[str, int],
    output_lines: list[str],
    grid_spacing: int,
) -> None:
    """Helper to flush a row of grids to output_lines."""
    row_grids = [rendered_grids[gid] for gid in row_grid_ids]
    max_height = max(len(g) for g in row_grids)

    for line_idx in range(max_height):
        line_parts = []
        for grid_id, grid_lines in zip(row_grid_ids, row_grids):
            if line_idx < len(grid_lines):
                line_parts.append(grid_lines[line_idx])
            else:
                line_parts.append(" " * grid_widths[grid_id])
        output_lines.append((" " * grid_spacing).join(line_parts))

    # Add spacing between rows
    output_lines.append("")
