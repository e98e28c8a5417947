"""
Legality filter
----

A pseudo-legal move is legal if, after making it, your own king is not attacked.
Every candidate is tried out on its own scratch copy of the board, so one simulation can never leak into the next.
"""

from typing import Optional

from src.rules.board import Board
from src.rules.castling import CASTLING_RULES, CastlingRights, castling_direction_of
from src.rules.check import is_in_check
from src.rules.moves import (
    PROMOTION_OPTIONS,
    Move,
    is_promotion_square,
    pseudo_legal_moves,
)
from src.rules.pieces import Color, Piece, PieceType
from src.rules.square import Square


def is_en_passant_capture(
    piece: Piece,
    from_square: Square,
    to_square: Square,
    en_passant_target: Optional[Square],
) -> bool:
    """A pawn moving diagonally onto the en passant target"""
    return (
        piece.type == PieceType.PAWN
        and en_passant_target is not None
        and to_square == en_passant_target
        and from_square.col != to_square.col
    )


def en_passant_capture_square(from_square: Square, to_square: Square) -> Square:
    """The pawn taken en passant stands on the target's file, on the row the capturing pawn started from"""
    return Square(from_square.row, to_square.col)


def is_castling_move(piece: Piece, from_square: Square, to_square: Square) -> bool:
    return (
        piece.type == PieceType.KING
        and castling_direction_of(piece.color, from_square, to_square) is not None
    )


def simulate_move(
    piece: Piece,
    from_square: Square,
    to_square: Square,
    board: Board,
    en_passant_target: Optional[Square] = None,
    promotion: Optional[PieceType] = None,
) -> Board:
    """
    Apply the move to a copy of the board and return the copy.
    ----

    Besides moving the piece itself:
    1. En passant: remove the pawn that got taken (it is not standing on the target square)
    2. Castling: move the rook along with the king
    3. Promotion: replace the pawn by the chosen piece

    The board passed in is left untouched.
    """
    scratch = board.copy()

    if is_en_passant_capture(piece, from_square, to_square, en_passant_target):
        scratch.remove_piece(en_passant_capture_square(from_square, to_square))

    castling_direction = (
        castling_direction_of(piece.color, from_square, to_square)
        if piece.type == PieceType.KING
        else None
    )
    if castling_direction is not None:
        rule = CASTLING_RULES[castling_direction]
        scratch.move_piece(rule.rook_from, rule.rook_to)

    scratch.remove_piece(from_square)
    landing_piece = piece.promoted(promotion) if promotion is not None else piece
    scratch.place_piece(landing_piece, to_square)
    return scratch


def legal_moves(
    piece: Optional[Piece],
    from_square: Square,
    board: Board,
    en_passant_target: Optional[Square] = None,
    castling_rights: Optional[CastlingRights] = None,
) -> list[Square]:
    """
    Destination squares the piece may legally move to.
    ----

    plan:
    1. generate the pseudo-legal candidates
    2. make every candidate move on a copy of the board
    3. keep it only if your own king is not in check on that copy

    The order of the candidates is preserved.
    """
    if piece is None:
        return []

    candidates = pseudo_legal_moves(
        piece, from_square, board, en_passant_target, castling_rights
    )
    return [
        to_square
        for to_square in candidates
        if not is_in_check(
            piece.color,
            simulate_move(piece, from_square, to_square, board, en_passant_target),
        )
    ]


def is_legal_move(
    move: Move,
    color: Color,
    board: Board,
    en_passant_target: Optional[Square] = None,
    castling_rights: Optional[CastlingRights] = None,
) -> bool:
    """
    Validate a fully specified move for the player with the `color` pieces.

    The origin must hold one of your own pieces, the destination must be a legal one,
    and a promotion piece is given exactly when a pawn reaches the last rank.
    """
    piece = board.piece(move.from_square)
    if piece is None or piece.color != color:
        return False

    if move.to_square not in legal_moves(
        piece, move.from_square, board, en_passant_target, castling_rights
    ):
        return False

    if is_promotion_square(piece, move.to_square):
        return move.promotion in PROMOTION_OPTIONS
    return move.promotion is None


def all_legal_moves(
    color: Color,
    board: Board,
    en_passant_target: Optional[Square] = None,
    castling_rights: Optional[CastlingRights] = None,
) -> list[Move]:
    """
    List of legal moves for the player with the 'color' pieces
    ----

    Pawn moves to the final rank get expanded: one move for every choice of piece type to promote into.
    """
    moves: list[Move] = []
    for from_square, piece in board.pieces_of(color):
        for to_square in legal_moves(
            piece, from_square, board, en_passant_target, castling_rights
        ):
            if is_promotion_square(piece, to_square):
                moves.extend(
                    Move(from_square, to_square, promotion=piece_type)
                    for piece_type in PROMOTION_OPTIONS
                )
            else:
                moves.append(Move(from_square, to_square))
    return moves
