"""Has the game ended? Classify the position for the side that is about to move."""

from enum import Enum, auto
from typing import Optional

from src.rules.board import Board
from src.rules.castling import CastlingRights
from src.rules.check import is_in_check
from src.rules.legality import legal_moves
from src.rules.pieces import Color
from src.rules.square import Square


class GameStatus(Enum):
    IN_PROGRESS = auto()
    CHECKMATE = auto()
    STALEMATE = auto()


def has_legal_move(
    color: Color,
    board: Board,
    en_passant_target: Optional[Square] = None,
    castling_rights: Optional[CastlingRights] = None,
) -> bool:
    """Stops at the first piece that can move"""
    return any(
        legal_moves(piece, square, board, en_passant_target, castling_rights)
        for square, piece in board.pieces_of(color)
    )


def game_status(
    board: Board,
    side_to_move: Color,
    en_passant_target: Optional[Square] = None,
    castling_rights: Optional[CastlingRights] = None,
) -> GameStatus:
    """
    Checkmate: you are in check and no move gets you out of it.
    Stalemate: you are not in check, but have no legal move either.

    NOTE: pass the en passant target / castling rights that apply to `side_to_move` (i.e. the ones AFTER the last move).
    Stale values can turn a position with a single en passant escape into a false checkmate.
    """
    if has_legal_move(side_to_move, board, en_passant_target, castling_rights):
        return GameStatus.IN_PROGRESS

    if is_in_check(side_to_move, board):
        return GameStatus.CHECKMATE
    return GameStatus.STALEMATE
