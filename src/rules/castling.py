"""Helpers for implementing Castling rules. Need to be imported by multiple sources"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Self

from src.rules.pieces import Color
from src.rules.square import Square


class CastlingDirection(Enum):
    """The four castling directions. Values represent their encodings in FEN string."""

    WHITE_KING_SIDE = "K"
    WHITE_QUEEN_SIDE = "Q"
    BLACK_KING_SIDE = "k"
    BLACK_QUEEN_SIDE = "q"

    @property
    def color(self) -> Color:
        return Color.WHITE if self.value.isupper() else Color.BLACK

    @property
    def is_king_side(self) -> bool:
        return self.value.lower() == "k"


CASTLING_ORDER: tuple[CastlingDirection, ...] = (
    CastlingDirection.WHITE_KING_SIDE,
    CastlingDirection.WHITE_QUEEN_SIDE,
    CastlingDirection.BLACK_KING_SIDE,
    CastlingDirection.BLACK_QUEEN_SIDE,
)


@dataclass(frozen=True)
class CastlingSquares:
    """
    Store the squares where king/rook start from/end up in by castling.
    """

    king_from: Square
    king_to: Square
    rook_from: Square
    rook_to: Square

    @classmethod
    def from_algebraic(cls, k_from: str, k_to: str, r_from: str, r_to: str) -> Self:
        """Convenience method: to make mapping shown below (from CastlingDirection) more readable"""
        king_from = Square.from_algebraic(k_from)
        king_to = Square.from_algebraic(k_to)
        rook_from = Square.from_algebraic(r_from)
        rook_to = Square.from_algebraic(r_to)
        return cls(king_from, king_to, rook_from, rook_to)

    @property
    def between(self) -> list[Square]:
        """The squares strictly between king and rook. All of them must be empty to castle."""
        return squares_between_on_row(self.king_from, self.rook_from)

    @property
    def king_path(self) -> list[Square]:
        """The squares the king crosses and lands on (transit + destination). None of them may be attacked."""
        return squares_between_on_row(self.king_from, self.king_to) + [self.king_to]


def squares_between_on_row(from_square: Square, to_square: Square) -> list[Square]:
    """
    Find the squares in between the two squares specified that are on the same row (rank)
    """
    if from_square.row != to_square.row:
        raise ValueError(
            f"squares_between_on_row requires both squares to lie on the same row. \n from: {from_square}\n to:{to_square}"
        )

    step = 1 if to_square.col > from_square.col else -1
    return [
        Square(from_square.row, col)
        for col in range(from_square.col + step, to_square.col, step)
    ]


# The moves (in classical chess) made when castling
CASTLING_RULES: dict[CastlingDirection, CastlingSquares] = {
    CastlingDirection.WHITE_KING_SIDE: CastlingSquares.from_algebraic(
        "e1", "g1", "h1", "f1"
    ),
    CastlingDirection.WHITE_QUEEN_SIDE: CastlingSquares.from_algebraic(
        "e1", "c1", "a1", "d1"
    ),
    CastlingDirection.BLACK_KING_SIDE: CastlingSquares.from_algebraic(
        "e8", "g8", "h8", "f8"
    ),
    CastlingDirection.BLACK_QUEEN_SIDE: CastlingSquares.from_algebraic(
        "e8", "c8", "a8", "d8"
    ),
}


def castling_directions(color: Color) -> list[CastlingDirection]:
    return [direction for direction in CASTLING_ORDER if direction.color == color]


def castling_direction_of(
    color: Color, from_square: Square, to_square: Square
) -> Optional[CastlingDirection]:
    """Which castle (if any) a king move of this color between these squares represents"""
    for direction in castling_directions(color):
        rule = CASTLING_RULES[direction]
        if rule.king_from == from_square and rule.king_to == to_square:
            return direction
    return None


@dataclass(frozen=True)
class SideCastlingRights:
    king_side: bool = True
    queen_side: bool = True


@dataclass(frozen=True)
class CastlingRights:
    """
    Castling rights of both players.
    ----

    Immutable: revoking returns a new value. There is no way to give a right back once it is gone.
    """

    white: SideCastlingRights = field(default_factory=SideCastlingRights)
    black: SideCastlingRights = field(default_factory=SideCastlingRights)

    @classmethod
    def full(cls) -> Self:
        return cls()

    @classmethod
    def none(cls) -> Self:
        no_rights = SideCastlingRights(king_side=False, queen_side=False)
        return cls(white=no_rights, black=no_rights)

    @classmethod
    def from_fen(cls, castle_fen: str) -> Self:
        """parse the part of the FEN string that encodes castling rights"""
        return cls(
            white=SideCastlingRights(
                king_side="K" in castle_fen, queen_side="Q" in castle_fen
            ),
            black=SideCastlingRights(
                king_side="k" in castle_fen, queen_side="q" in castle_fen
            ),
        )

    def to_fen(self) -> str:
        """create the part of the FEN string that encodes castling rights"""
        castling_chars = "".join(
            [direction.value for direction in CASTLING_ORDER if self.has_right(direction)]
        )
        return castling_chars or "-"

    def for_color(self, color: Color) -> SideCastlingRights:
        return self.white if color == Color.WHITE else self.black

    def has_right(self, direction: CastlingDirection) -> bool:
        side = self.for_color(direction.color)
        return side.king_side if direction.is_king_side else side.queen_side

    def has_any(self, color: Color) -> bool:
        side = self.for_color(color)
        return side.king_side or side.queen_side

    def revoke(self, *directions: CastlingDirection) -> CastlingRights:
        rights = self
        for direction in directions:
            side = rights.for_color(direction.color)
            if direction.is_king_side:
                side = replace(side, king_side=False)
            else:
                side = replace(side, queen_side=False)

            if direction.color == Color.WHITE:
                rights = replace(rights, white=side)
            else:
                rights = replace(rights, black=side)
        return rights

    def after_move(self, from_square: Square, to_square: Square) -> CastlingRights:
        """
        Rights left after a move between the two squares.
        ----

        A right is lost for good as soon as its king or rook leaves its home square
        (king moves, castles, rook moves) or something lands on it (the rook gets captured at home).
        """
        touched = {from_square, to_square}
        lost = [
            direction
            for direction in CASTLING_ORDER
            if self.has_right(direction)
            and (
                CASTLING_RULES[direction].king_from in touched
                or CASTLING_RULES[direction].rook_from in touched
            )
        ]
        return self.revoke(*lost)
