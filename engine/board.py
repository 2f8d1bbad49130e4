"""
Shape Drop board implementation with a 7x6 grid and gravity drops.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np


class Cell(Enum):
    """Cell values stored in the grid."""
    EMPTY = 0
    PLAYER_A = 1
    PLAYER_B = 2


@dataclass(frozen=True)
class Position:
    """A board coordinate. ``x`` is the column, ``y`` the row (0 = top)."""
    x: int
    y: int


def marker_for_player(player_index: int) -> int:
    """Grid marker used for the player at ``player_index`` (0 or 1)."""
    return player_index + 1


class Board:
    """
    Shape Drop game board.

    The grid is indexed ``[y, x]`` where:
    - 0 represents an empty cell
    - 1-2 represent the two players

    Pieces are only ever added by ``drop_piece``, so cells never revert to empty.
    """

    WIDTH = 7
    HEIGHT = 6

    def __init__(self):
        self.grid = np.zeros((self.HEIGHT, self.WIDTH), dtype=int)

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> 'Board':
        """
        Build a board from a list of rows, top row first.

        Args:
            rows: HEIGHT rows of WIDTH cell values

        Returns:
            New board holding a copy of the values
        """
        grid = np.array(rows, dtype=int)
        if grid.shape != (cls.HEIGHT, cls.WIDTH):
            raise ValueError(f"Board rows must have shape {(cls.HEIGHT, cls.WIDTH)}, got {grid.shape}")
        board = cls()
        board.grid = grid
        return board

    def is_valid_position(self, pos: Position) -> bool:
        """Check if position is within board bounds."""
        return 0 <= pos.x < self.WIDTH and 0 <= pos.y < self.HEIGHT

    def get_cell(self, pos: Position) -> int:
        """Get the value at a position, -1 when off the board."""
        if not self.is_valid_position(pos):
            return -1
        return int(self.grid[pos.y, pos.x])

    def is_column_full(self, column: int) -> bool:
        """A column is full once its top cell is occupied."""
        return self.grid[0, column] != Cell.EMPTY.value

    def legal_columns(self) -> List[int]:
        """Columns whose top cell is still empty."""
        return [col for col in range(self.WIDTH) if not self.is_column_full(col)]

    def drop_row(self, column: int) -> Optional[int]:
        """Row a piece dropped into ``column`` would settle on, or None when full."""
        for row in range(self.HEIGHT - 1, -1, -1):
            if self.grid[row, column] == Cell.EMPTY.value:
                return row
        return None

    def drop_piece(self, column: int, marker: int) -> Optional[Position]:
        """
        Drop a piece into a column.

        Scans bottom-up for the lowest empty row and fills it.

        Returns the settled position, or None if the column is full.
        """
        row = self.drop_row(column)
        if row is None:
            return None
        self.grid[row, column] = marker
        return Position(column, row)

    def is_top_row_full(self) -> bool:
        """With gravity, a full top row means the whole board is full."""
        return bool(np.all(self.grid[0] != Cell.EMPTY.value))

    def piece_count(self) -> int:
        return int(np.count_nonzero(self.grid))

    def to_rows(self) -> Tuple[Tuple[int, ...], ...]:
        """Immutable copy of the grid, top row first."""
        return tuple(tuple(int(v) for v in row) for row in self.grid)

    def copy(self) -> 'Board':
        """Create an independent copy of the board."""
        new_board = Board()
        new_board.grid = self.grid.copy()
        return new_board

    def __eq__(self, other):
        if not isinstance(other, Board):
            return NotImplemented
        return bool(np.array_equal(self.grid, other.grid))
