"""
Interactive demo for nodemap edits.
Display a grid with a cursor and edit it with keyboard commands.
"""

import logging
import sys

import readchar
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from ascii_render import render_grid_box, render_links
from grid_parser import parse_grid
from grid_types import CellPosition, GridOptions, NodeMapError
from nodemap import JaggedGrid


class InteractiveDemo:
    """Interactive editor for a jagged grid."""

    def __init__(self, grid: JaggedGrid) -> None:
        self.grid = grid
        self.original_rows = [list(row) for row in grid.rows()]
        self.cursor = CellPosition(0, 0)
        self.next_value = 10
        self.console = Console()
        self.status_message = "Ready"

    def clamp_cursor(self) -> None:
        """Keep the cursor on an existing cell (or at (0, 0) when empty)."""
        if self.grid.height == 0:
            self.cursor = CellPosition(0, 0)
            return
        row = min(max(self.cursor.row, 0), self.grid.height - 1)
        col = min(max(self.cursor.col, 0), self.grid.row_length(row) - 1)
        self.cursor = CellPosition(row, col)

    def generate_display(self) -> Panel:
        """Generate the current display with grid and status."""
        status = Text()
        status.append("Cursor: ", style="bold")
        status.append(f"[{self.cursor.row}, {self.cursor.col}]")
        status.append("   Height: ", style="bold")
        status.append(str(self.grid.height))
        status.append("   Size: ", style="bold")
        status.append(f"{self.grid.size}\n\n")

        # Convert ANSI-colored grid text to Rich Text properly
        box = "\n".join(render_grid_box(self.grid, "grid", highlight_pos=self.cursor))
        status.append(Text.from_ansi(box))
        status.append("\n\n")
        status.append(render_links(self.grid))
        status.append("\n\n")

        status.append("Keys:\n", style="bold cyan")
        status.append("  W/A/S/D - Move cursor\n")
        status.append("  I - Insert before cursor    X - Delete at cursor\n")
        status.append("  + - Add to end of row       - - Remove from end of row\n")
        status.append("  P - Push new row            O - Pop last row\n")
        status.append("  R - Reset to original grid\n")
        status.append("  Q - Quit\n\n")

        # Status line at the bottom
        status.append("─" * 40 + "\n", style="dim")
        status.append("Status: ", style="bold")
        status.append(self.status_message)

        return Panel(status, title="Nodemap Interactive Demo", border_style="green", width=80)

    def move(self, d_row: int, d_col: int) -> None:
        self.cursor = CellPosition(self.cursor.row + d_row, self.cursor.col + d_col)
        self.clamp_cursor()
        self.status_message = f"Moved to [{self.cursor.row}, {self.cursor.col}]"

    def attempt_edit(self, key: str) -> None:
        """Apply the edit bound to key at the cursor."""
        row, col = self.cursor.row, self.cursor.col
        value = self.next_value
        try:
            if key == "i":
                self.grid.insert(row, col, value)
                self.status_message = f"✓ Inserted {value} at [{row}, {col}]"
            elif key == "x":
                removed = self.grid.delete(row, col)
                self.status_message = f"✓ Deleted {removed} from [{row}, {col}]"
            elif key == "+":
                self.grid.add(row, value)
                self.status_message = f"✓ Added {value} to row {row}"
            elif key == "-":
                removed = self.grid.remove(row)
                self.status_message = f"✓ Removed {removed} from row {row}"
            elif key == "p":
                self.grid.push(value)
                self.status_message = f"✓ Pushed row [{value}]"
            elif key == "o":
                popped = self.grid.pop()
                self.status_message = f"✓ Popped row {popped}"
        except NodeMapError as e:
            first_line = str(e).splitlines()[0]
            self.status_message = f"✗ {type(e).__name__}: {first_line}"
            return

        if key in ("i", "+", "p"):
            self.next_value += 1
        self.clamp_cursor()

    def reset_grid(self) -> None:
        """Reset the grid to its original state."""
        self.grid = JaggedGrid.from_rows(self.original_rows, options=self.grid.options)
        self.clamp_cursor()
        self.status_message = "Grid reset to original state"

    def run(self) -> None:
        """Run the interactive demo."""
        with Live(self.generate_display(), console=self.console, refresh_per_second=4) as live:
            try:
                while True:
                    live.update(self.generate_display())

                    key = readchar.readkey().lower()

                    if key == "q":
                        self.status_message = "Quitting..."
                        live.update(self.generate_display())
                        break
                    elif key == "r":
                        self.reset_grid()
                    elif key == "w":
                        self.move(-1, 0)
                    elif key == "s":
                        self.move(1, 0)
                    elif key == "a":
                        self.move(0, -1)
                    elif key == "d":
                        self.move(0, 1)
                    elif key in ("i", "x", "+", "-", "p", "o"):
                        self.attempt_edit(key)
                    else:
                        self.status_message = f"Unknown key: {repr(key)}"

            except KeyboardInterrupt:
                self.status_message = "Interrupted by user"
                live.update(self.generate_display())


LAYOUTS = dict(
    jagged="1 2 3|4 5|6 7 8 9",
    square="1 2 3|4 5 6|7 8 9",
    tall="1|2|3|4",
)


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "sublime":
        # Running from IDE - just render the initial state
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s: %(message)s")

        grid = parse_grid(LAYOUTS["jagged"])
        print("\n".join(render_grid_box(grid, "jagged", highlight_pos=CellPosition(1, 1))))
        print(render_links(grid))
    else:
        grid = parse_grid(
            LAYOUTS[sys.argv[1] if len(sys.argv) > 1 else "jagged"],
            options=GridOptions(verify_after_edit=True),
        )
        InteractiveDemo(grid).run()
