"""The Game board: a fixed 8x8 grid of squares that are either empty or hold a single piece."""

from copy import deepcopy
from dataclasses import dataclass
from typing import Iterable, Optional, Self

from src.rules.pieces import Color, Piece, PieceType
from src.rules.square import BOARD_DIMENSIONS, Square

STARTING_POSITION_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"

Grid = list[list[Optional[Piece]]]


def _empty_grid() -> Grid:
    num_rows, num_cols = BOARD_DIMENSIONS
    return [[None] * num_cols for _ in range(num_rows)]


@dataclass
class Board:
    grid: Grid

    @classmethod
    def empty(cls) -> Self:
        return cls(_empty_grid())

    @classmethod
    def starting_position(cls) -> Self:
        return cls.from_fen(STARTING_POSITION_FEN)

    @classmethod
    def from_fen(cls, fen_str: str) -> Self:
        """Construct a board using a given FEN string.

        That is, we supply the first part of the FEN string that denotes the board position
        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * black pieces are on the 8th rank (row 0), starting with rook on a8, knight on b8, etc.
        * pawns cover 7th rank entirely
        * ranks 6 through 3 have 8 consecutive empty squares
        * rank 2 are the white pawns (capital letters)
        * 1st rank (row 7) are the white pieces.

        NOTE: FEN is read top to bottom, which is exactly the order of the rows.
        """
        grid = _empty_grid()
        for row, fen_one_rank in enumerate(fen_str.split("/")):
            col = 0
            for character in fen_one_rank:
                if character.isalpha():
                    # simple case: a letter directly denotes the piece that should be created
                    grid[row][col] = Piece.from_fen(character)
                    col += 1
                else:
                    # A number denotes the amount of empty squares after each other
                    col += int(character)
        return cls(grid)

    def to_fen(self) -> str:
        """Ranks are separated by slashes in FEN string."""
        return "/".join(self._row_to_fen(row) for row in range(BOARD_DIMENSIONS[0]))

    def _row_to_fen(self, row: int) -> str:
        """FEN string of a single rank"""
        fen_characters: list[str] = []
        empty_count = 0
        for piece in self.grid[row]:
            if piece is not None:
                if empty_count > 0:
                    fen_characters.append(str(empty_count))
                    empty_count = 0
                fen_characters.append(piece.to_fen())
            else:
                empty_count += 1

        # if the entire rank is empty, then we still place this number in the string
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    def copy(self) -> Self:
        """Scratch copy: changes made to the copy never reach this board."""
        return deepcopy(self)

    def piece(self, square: Square) -> Optional[Piece]:
        return self.grid[square.row][square.col]

    def is_empty(self, square: Square) -> bool:
        return self.piece(square) is None

    def is_any_occupied(self, squares: Iterable[Square]) -> bool:
        return any(not self.is_empty(square) for square in squares)

    def place_piece(self, piece: Piece, square: Square) -> None:
        self.grid[square.row][square.col] = piece

    def remove_piece(self, square: Square) -> Optional[Piece]:
        """Empty the square and return whatever was standing there"""
        piece = self.piece(square)
        self.grid[square.row][square.col] = None
        return piece

    def move_piece(self, from_square: Square, to_square: Square) -> Optional[Piece]:
        """Update the position on the board. Returns the piece that got captured (if any)."""
        piece_that_moved = self.remove_piece(from_square)
        captured = self.remove_piece(to_square)
        if piece_that_moved is not None:
            self.place_piece(piece_that_moved, to_square)
        return captured

    def squares(self) -> list[Square]:
        """All squares, row by row (a8 first, h1 last)"""
        num_rows, num_cols = BOARD_DIMENSIONS
        return [Square(row, col) for row in range(num_rows) for col in range(num_cols)]

    def pieces_of(self, color: Color) -> list[tuple[Square, Piece]]:
        """find all pieces of a given color (and where they stand)"""
        found: list[tuple[Square, Piece]] = []
        for square in self.squares():
            piece = self.piece(square)
            if piece is not None and piece.color == color:
                found.append((square, piece))
        return found

    def locate_king(self, color: Color) -> Optional[Square]:
        """Linear scan. None if the king is missing (only happens for broken / simulated positions)"""
        king = Piece(PieceType.KING, color)
        return next(
            (square for square in self.squares() if self.piece(square) == king), None
        )

    def count_material(self) -> dict[Color, int]:
        """Tally the points of material each player has on the board"""
        return {
            color: sum(piece.points for _, piece in self.pieces_of(color))
            for color in Color
        }
