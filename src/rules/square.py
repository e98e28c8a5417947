"""
A square on the board

(placed in its own module as multiple other modules need to import it)

NOTE: Rows count from the top of the board. Row 0 is the 8th rank (black's back rank), row 7 is the 1st rank (white's back rank).
Columns count from the a-file (col 0) to the h-file (col 7).
"""

from __future__ import annotations

from dataclasses import dataclass

# Chess board is always 8x8: (rows, columns)
BOARD_DIMENSIONS = (8, 8)
FILE_NAMES = "abcdefgh"

# (delta_row, delta_col)
Vector = tuple[int, int]

STRAIGHT_DIRECTIONS: tuple[Vector, ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))
DIAGONAL_DIRECTIONS: tuple[Vector, ...] = ((-1, -1), (-1, 1), (1, -1), (1, 1))
KNIGHT_DELTAS: tuple[Vector, ...] = (
    (-2, -1),
    (-2, 1),
    (-1, -2),
    (-1, 2),
    (1, -2),
    (1, 2),
    (2, -1),
    (2, 1),
)
KING_DELTAS: tuple[Vector, ...] = (
    (-1, -1),
    (-1, 0),
    (-1, 1),
    (0, -1),
    (0, 1),
    (1, -1),
    (1, 0),
    (1, 1),
)


@dataclass(frozen=True)
class Square:
    row: int
    col: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a8' gets converted to (0, 0) and 'h1' to (7, 7)"""
        col = ord(sq[0]) - ord("a")
        row = BOARD_DIMENSIONS[0] - int(sq[1])
        return cls(row, col)

    def to_algebraic(self) -> str:
        return f"{self.file_name}{self.rank}"

    @property
    def file_name(self) -> str:
        return FILE_NAMES[self.col]

    @property
    def rank(self) -> int:
        return BOARD_DIMENSIONS[0] - self.row

    def is_within_bounds(self) -> bool:
        return (0 <= self.row < BOARD_DIMENSIONS[0]) and (
            0 <= self.col < BOARD_DIMENSIONS[1]
        )

    def offset(self, delta: Vector) -> Square:
        """The square reached by stepping along the vector. Might be off the board: check with `is_within_bounds()`"""
        d_row, d_col = delta
        return Square(self.row + d_row, self.col + d_col)
