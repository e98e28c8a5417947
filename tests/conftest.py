"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Callable

import pytest

from src.rules.board import Board
from src.rules.pieces import Piece
from src.rules.square import Square

EMPTY_FEN = "/".join(["8"] * 8)

# {square name: FEN character}, e.g. {"e1": "K", "e8": "k"}
PiecePlacement = dict[str, str]


@pytest.fixture
def board_with() -> Callable[[PiecePlacement], Board]:
    """Call the inner function with the pieces to place on an otherwise empty board"""

    def _create_board(placement: PiecePlacement) -> Board:
        board = Board.from_fen(EMPTY_FEN)
        for square_name, fen_char in placement.items():
            board.place_piece(Piece.from_fen(fen_char), Square.from_algebraic(square_name))
        return board

    return _create_board


@pytest.fixture
def starting_board() -> Board:
    return Board.starting_position()


@pytest.fixture
def castling_board(board_with: Callable[[PiecePlacement], Board]) -> Board:
    """Create a board with only the Kings and the Rooks. Ready to perform any castling move (if allowed)."""
    return board_with(
        {"e1": "K", "a1": "R", "h1": "R", "e8": "k", "a8": "r", "h8": "r"}
    )


@pytest.fixture
def kings_only_board(board_with: Callable[[PiecePlacement], Board]) -> Board:
    """
    Create a board with only kings on their canonical starting squares.
    Because making a move involves inferring if a king is under attack, moves cannot played on a board without one of the kings.
    """
    return board_with({"e1": "K", "e8": "k"})
