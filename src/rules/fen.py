"""
FEN (Forsyth-Edwards Notation): everything needed to restart a game from a position, in one line of text.

<placement> <side to move> <castling rights> <en passant target> <half move clock> <full move number>

ex) the standard starting position:
rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1

This is also the exact string the move oracle gets to see.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Self

from src.core.exceptions import InvalidFENError
from src.rules.castling import CASTLING_ORDER, CastlingRights
from src.rules.pieces import FEN_TO_PIECE, Color
from src.rules.square import BOARD_DIMENSIONS, FILE_NAMES, Square

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

COLOR_CODES: dict[str, Color] = {"w": Color.WHITE, "b": Color.BLACK}
NO_VALUE = "-"


# --- VALIDATION OF THE SEPARATE FIELDS ---
def is_valid_position(position: str) -> bool:
    """
    Eight ranks separated by slashes, each one adding up to exactly eight squares (pieces + runs of empty squares).
    A playable position also holds exactly one king of each color.
    """
    num_rows, num_cols = BOARD_DIMENSIONS
    ranks = position.split("/")
    if len(ranks) != num_rows:
        return False
    if not all(_rank_width(rank) == num_cols for rank in ranks):
        return False
    return position.count("K") == 1 and position.count("k") == 1


def _rank_width(rank: str) -> Optional[int]:
    """Number of squares a rank describes, None if it holds anything but piece letters and digits"""
    width = 0
    for character in rank:
        if character.isdigit():
            width += int(character)
        elif character.lower() in FEN_TO_PIECE:
            width += 1
        else:
            return None
    return width


def is_valid_color_code(color: str) -> bool:
    return color in COLOR_CODES


def is_valid_castling_rights(castling: str) -> bool:
    """Either '-', or a subset of KQkq written in that order (no repeats)"""
    if castling == NO_VALUE:
        return True
    canonical = "".join(direction.value for direction in CASTLING_ORDER)
    remaining = iter(canonical)
    # every character must be found further along the canonical order than the previous one
    return bool(castling) and all(char in remaining for char in castling)


def is_valid_en_passant(en_passant: str) -> bool:
    return en_passant == NO_VALUE or is_valid_square(en_passant)


def is_valid_square(square: str) -> bool:
    """A file letter followed by a rank digit, e.g. 'e3'"""
    num_rows, _ = BOARD_DIMENSIONS
    if len(square) != 2:
        return False
    file_char, rank_char = square
    return (
        file_char in FILE_NAMES
        and rank_char.isdigit()
        and 1 <= int(rank_char) <= num_rows
    )


def is_valid_move_counter(counter: str) -> bool:
    return counter.isdigit()


# One check per space separated field, in FEN order
FIELD_VALIDATORS: tuple[Callable[[str], bool], ...] = (
    is_valid_position,
    is_valid_color_code,
    is_valid_castling_rights,
    is_valid_en_passant,
    is_valid_move_counter,
    is_valid_move_counter,
)


def is_valid_fen(fen: str) -> bool:
    """Six space separated fields, each of them valid on its own"""
    fields = fen.split(" ")
    if len(fields) != len(FIELD_VALIDATORS):
        return False
    return all(validate(value) for validate, value in zip(FIELD_VALIDATORS, fields))


@dataclass
class FENState:
    """
    The game state that lives outside the board placement.
    ----

    * position: the placement field, as understood by Board.from_fen
    * color_to_move: 'w' / 'b'
    * castling_rights: 'KQkq' style (capitals for white), '-' once all are gone
    * en_passant_square: the square skipped by a double pawn push on the previous move, '-' otherwise
    * half_move_clock: moves since the last pawn move or capture
    * num_turns: starts at 1, goes up after every move by black
    """

    position: str
    color_to_move: Color
    castling_rights: CastlingRights
    en_passant_square: Optional[Square]
    half_move_clock: int
    num_turns: int

    @classmethod
    def from_fen(cls, fen: str) -> Self:
        if not is_valid_fen(fen):
            raise InvalidFENError(f"Cannot interpret supplied string as FEN: {fen}")

        position, color, castling, en_passant, half_moves, turns = fen.split(" ")
        return cls(
            position=position,
            color_to_move=COLOR_CODES[color],
            castling_rights=CastlingRights.from_fen(castling),
            en_passant_square=(
                Square.from_algebraic(en_passant) if en_passant != NO_VALUE else None
            ),
            half_move_clock=int(half_moves),
            num_turns=int(turns),
        )

    def to_fen(self) -> str:
        color = next(code for code, c in COLOR_CODES.items() if c == self.color_to_move)
        en_passant = (
            self.en_passant_square.to_algebraic()
            if self.en_passant_square is not None
            else NO_VALUE
        )
        fields = [
            self.position,
            color,
            self.castling_rights.to_fen(),
            en_passant,
            str(self.half_move_clock),
            str(self.num_turns),
        ]
        return " ".join(fields)

    @classmethod
    def starting_position(cls) -> Self:
        return cls.from_fen(STARTING_FEN)

    def reset_half_move_counter(self) -> None:
        self.half_move_clock = 0

    def increment_half_move_counter(self) -> None:
        self.half_move_clock += 1

    def increment_full_move_counter(self) -> None:
        self.num_turns += 1
