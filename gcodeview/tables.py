"""Table models holding the G-code program listing and the height map grid."""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ItemState(IntEnum):
    """Progress of a command through the send queue."""

    IN_QUEUE = 0
    SENT = 1
    PROCESSED = 2
    SKIPPED = 3


_STATE_TEXT = {
    ItemState.IN_QUEUE: "In queue",
    ItemState.SENT: "Sent",
    ItemState.PROCESSED: "Processed",
    ItemState.SKIPPED: "Skipped",
}

_HEADERS = ("#", "Command", "State", "Response", "Line", "Args")


@dataclass
class GCodeItem:
    """One row of the program table."""

    command: str = ""
    state: int = ItemState.IN_QUEUE
    response: str = ""
    line: int = 0
    args: list[str] = field(default_factory=list)


class GCodeTableModel:
    """Rows of G-code commands with their send state and controller response.

    The last row is the editable blank line for new input, so its number and
    state are shown empty.
    """

    def __init__(self) -> None:
        self.items: list[GCodeItem] = []
        self.headers: list[str] = list(_HEADERS)

    def _valid(self, row: int, column: int) -> bool:
        return 0 <= row < len(self.items) and 0 <= column < self.column_count()

    def data(self, row: int, column: int) -> Any:
        """Display value of a cell, or None outside the table."""
        if not self._valid(row, column):
            return None
        item = self.items[row]
        is_last = row == self.row_count() - 1
        if column == 0:
            return "" if is_last else str(row + 1)
        if column == 1:
            return item.command
        if column == 2:
            if is_last:
                return ""
            return _STATE_TEXT.get(item.state, "Unknown")
        if column == 3:
            return item.response
        if column == 4:
            return item.line
        return list(item.args)

    def set_data(self, row: int, column: int, value: Any) -> bool:
        """Edit a cell; the number column is read-only."""
        if not self._valid(row, column) or column == 0:
            return False
        item = self.items[row]
        if column == 1:
            item.command = str(value)
        elif column == 2:
            state = int(value)
            item.state = ItemState(state) if state in ItemState._value2member_map_ else state
        elif column == 3:
            item.response = str(value)
        elif column == 4:
            item.line = int(value)
        else:
            item.args = list(value)
        return True

    def insert_row(self, row: int) -> bool:
        """Insert a blank item; fails when the position is past the end."""
        if row < 0 or row > self.row_count():
            return False
        self.items.insert(row, GCodeItem())
        return True

    def remove_row(self, row: int) -> bool:
        """Remove one row."""
        if not 0 <= row < len(self.items):
            raise IndexError(f"row {row} out of range")
        del self.items[row]
        return True

    def remove_rows(self, row: int, count: int) -> bool:
        """Remove ``count`` rows starting at ``row``."""
        if row < 0 or count < 0 or row + count > len(self.items):
            raise IndexError(f"rows {row}..{row + count - 1} out of range")
        del self.items[row:row + count]
        return True

    def clear(self) -> None:
        self.items.clear()

    def row_count(self) -> int:
        return len(self.items)

    def column_count(self) -> int:
        return len(_HEADERS)

    def header_data(self, section: int, horizontal: bool) -> str:
        """Column title, or the one-based row number for vertical headers."""
        if horizontal:
            return self.headers[section]
        return str(section + 1)

    def is_editable(self, column: int) -> bool:
        """Only the command column can be edited."""
        return column == 1


class HeightMapTableModel:
    """Grid of probed heights.

    Displayed rows run in reverse storage order so the first grid row is at
    the bottom, as on the machine.
    """

    def __init__(self) -> None:
        self._data: list[list[float]] = [[]]
        self.user_input_listeners: list[Callable[[], None]] = []

    def resize(self, cols: int, rows: int) -> None:
        """Replace the grid by ``rows`` x ``cols`` unknown (NaN) heights."""
        self._data = [[math.nan] * cols for _ in range(rows)]

    def _in_range(self, row: int, column: int) -> bool:
        return 0 <= row < len(self._data) and 0 <= column < self.column_count()

    def display(self, row: int, column: int) -> str | None:
        """Height shown at a displayed cell, with three decimals."""
        if not self._in_range(row, column):
            return None
        return f"{self._data[len(self._data) - 1 - row][column]:.3f}"

    def value(self, row: int, column: int) -> float | None:
        """Stored height at a grid cell, in storage order."""
        if not self._in_range(row, column):
            return None
        return self._data[row][column]

    def set_value(self, row: int, column: int, value: float, user_input: bool) -> bool:
        """Set a height; user input addresses displayed rows and notifies listeners."""
        target = len(self._data) - 1 - row if user_input else row
        if not 0 <= target < len(self._data) or not 0 <= column < len(self._data[target]):
            raise IndexError(f"cell ({row}, {column}) out of range")
        self._data[target][column] = float(value)
        if user_input:
            for listener in self.user_input_listeners:
                listener()
        return True

    def insert_row(self, row: int) -> bool:
        """Insert an empty row."""
        self._data.insert(row, [])
        return True

    def remove_row(self, row: int) -> bool:
        if not 0 <= row < len(self._data):
            raise IndexError(f"row {row} out of range")
        del self._data[row]
        return True

    def clear(self) -> None:
        self._data.clear()

    def row_count(self) -> int:
        return len(self._data)

    def column_count(self) -> int:
        """Width of the first row."""
        return len(self._data[0]) if self._data else 0

    def header_data(self, section: int) -> str:
        return str(section + 1)