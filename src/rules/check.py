"""Is the king of a given color in check?"""

from src.rules.attacks import is_attacked
from src.rules.board import Board
from src.rules.pieces import Color


def is_in_check(color: Color, board: Board) -> bool:
    """
    Locate the king and ask the attack rules whether the opponent attacks its square.

    NOTE: A missing king counts as being in check. That position is already lost / invalid
    (e.g. a simulated move that captured the king), so it must never be reported as safe.
    """
    king_square = board.locate_king(color)
    if king_square is None:
        return True
    return is_attacked(king_square, color.opponent, board)
