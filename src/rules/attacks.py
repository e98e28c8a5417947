"""
Attack detection
----

Answers _"Is this square attacked by a piece of the given color?"_ by pattern matching from the square outwards.

NOTE: Must not import move generation or legality/check logic: castling and check detection both call into this module.
"""

from typing import Callable, Optional, Protocol

from src.rules.pieces import Color, Piece, PieceType
from src.rules.square import (
    DIAGONAL_DIRECTIONS,
    KING_DELTAS,
    KNIGHT_DELTAS,
    STRAIGHT_DIRECTIONS,
    Square,
    Vector,
)


class Board(Protocol):
    """Just the parts the attack rules need"""

    def piece(self, square: Square) -> Optional[Piece]: ...


def single_step_attack(
    square: Square,
    by_color: Color,
    by_piece_types: frozenset[PieceType],
    board: Board,
    deltas: tuple[Vector, ...],
) -> bool:
    """
    For pawns, kings, and knights that just move a single step along a direction.
    Hence, they also can only attack along a single step.

    ---
    Returns TRUE if one of the squares a step away holds a piece of the given color and of one of the given types.
    Off-board squares are skipped.
    """
    for delta in deltas:
        target_square = square.offset(delta)
        if not target_square.is_within_bounds():
            continue

        piece_found = board.piece(target_square)
        if (
            piece_found is not None
            and piece_found.color == by_color
            and piece_found.type in by_piece_types
        ):
            return True

    return False


def raycasting_attack(
    square: Square,
    by_color: Color,
    by_piece_types: frozenset[PieceType],
    board: Board,
    directions: tuple[Vector, ...],
) -> bool:
    """
    Raycasting algorithm for attacks.
    ---

    Walk from the square along each direction until we hit another piece or the edge of the board.
    Only the first piece found along a ray can be attacking: any piece (friend or foe) blocks the rest of the ray.

    ---
    Returns TRUE if the first piece found is of the given color and allowed to move along the ray (one of the given types).
    """
    for delta in directions:
        target_square = square.offset(delta)
        while target_square.is_within_bounds():
            piece_found = board.piece(target_square)
            if piece_found is not None:
                if (piece_found.color == by_color) and (
                    piece_found.type in by_piece_types
                ):
                    return True
                break
            target_square = target_square.offset(delta)
    return False


def is_attacked_by_pawn(square: Square, by_color: Color, board: Board) -> bool:
    """
    Pawns take diagonally
    ----

    NOTE: Pawn moves are not symmetric. To check IF a white pawn could take on your square -->
    Must look one rank DOWN the board (one row further from row 0), as white pawns move UP the board.

    Hence, vectors point exactly opposite to the pawn's own forward direction.
    """
    behind = -by_color.forward
    inverse_pawn_take_deltas: tuple[Vector, ...] = ((behind, -1), (behind, 1))
    return single_step_attack(
        square, by_color, frozenset({PieceType.PAWN}), board, inverse_pawn_take_deltas
    )


def is_attacked_by_knight(square: Square, by_color: Color, board: Board) -> bool:
    """Knights always move such that |delta_row| + |delta_col| = 3 (and they jump)"""
    return single_step_attack(
        square, by_color, frozenset({PieceType.KNIGHT}), board, KNIGHT_DELTAS
    )


def is_attacked_by_king(square: Square, by_color: Color, board: Board) -> bool:
    """
    The king attacks all adjacent squares.

    NOTE: Needed so a square next to the enemy king counts as attacked (two kings can never stand next to each other).
    """
    return single_step_attack(
        square, by_color, frozenset({PieceType.KING}), board, KING_DELTAS
    )


def is_attacked_on_straights(square: Square, by_color: Color, board: Board) -> bool:
    """Rooks and queens attack along ranks and files"""
    return raycasting_attack(
        square,
        by_color,
        frozenset({PieceType.ROOK, PieceType.QUEEN}),
        board,
        STRAIGHT_DIRECTIONS,
    )


def is_attacked_on_diagonals(square: Square, by_color: Color, board: Board) -> bool:
    """Bishops and queens attack along diagonals"""
    return raycasting_attack(
        square,
        by_color,
        frozenset({PieceType.BISHOP, PieceType.QUEEN}),
        board,
        DIAGONAL_DIRECTIONS,
    )


# --- STRATEGY PATTERN: ATTACKING RULES ---
IsAttackedFn = Callable[[Square, Color, Board], bool]
ATTACK_RULES: tuple[IsAttackedFn, ...] = (
    is_attacked_by_pawn,
    is_attacked_by_knight,
    is_attacked_by_king,
    is_attacked_on_straights,
    is_attacked_on_diagonals,
)


def is_attacked(square: Square, by_color: Color, board: Board) -> bool:
    """Is the square attacked by any piece of `by_color`? Stops at the first rule that finds an attacker."""
    return any(rule(square, by_color, board) for rule in ATTACK_RULES)


def is_any_attacked(squares: list[Square], by_color: Color, board: Board) -> bool:
    return any(is_attacked(square, by_color, board) for square in squares)
