"""Unit tests for /src/rules/status.py"""

import pytest

from src.rules.board import Board
from src.rules.fen import FENState
from src.rules.pieces import Color
from src.rules.square import Square
from src.rules.status import GameStatus, game_status, has_legal_move


def status_of(fen: str) -> GameStatus:
    state = FENState.from_fen(fen)
    return game_status(
        Board.from_fen(state.position),
        state.color_to_move,
        state.en_passant_square,
        state.castling_rights,
    )


@pytest.mark.parametrize(
    "fen, expected",
    [
        (
            "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1",
            GameStatus.IN_PROGRESS,
        ),
        # fool's mate
        (
            "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3",
            GameStatus.CHECKMATE,
        ),
        # back rank mate
        ("6k1/5ppp/8/8/8/8/8/R5K1 b - - 0 1", GameStatus.IN_PROGRESS),
        ("R5k1/5ppp/8/8/8/8/8/6K1 b - - 0 1", GameStatus.CHECKMATE),
        # in check, but the king can walk away
        ("R3k3/8/8/8/8/8/8/4K3 b - - 0 1", GameStatus.IN_PROGRESS),
        ("k7/8/1Q6/8/8/8/8/7K b - - 0 1", GameStatus.STALEMATE),
        ("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1", GameStatus.STALEMATE),
    ],
)
def test_game_status(fen: str, expected: GameStatus) -> None:
    assert status_of(fen) == expected


def test_en_passant_can_be_the_only_escape() -> None:
    """
    The black pawn that just arrived on d5 checks the white king, which has nowhere to go.
    Only taking it en passant saves white.
    """
    position = "7k/8/2p5/3pPP2/3PKP2/3PPP2/8/8"
    board = Board.from_fen(position)
    assert game_status(board, Color.WHITE, Square.from_algebraic("d6")) == GameStatus.IN_PROGRESS
    assert game_status(board, Color.WHITE, None) == GameStatus.CHECKMATE


def test_has_legal_move(starting_board: Board) -> None:
    assert has_legal_move(Color.WHITE, starting_board)
    assert not has_legal_move(Color.BLACK, Board.from_fen("k7/8/1Q6/8/8/8/8/7K"))


def test_bare_kings_keep_playing(kings_only_board: Board) -> None:
    """No draw rules: two lone kings are simply still in progress"""
    assert game_status(kings_only_board, Color.WHITE) == GameStatus.IN_PROGRESS
    assert kings_only_board.count_material() == {Color.WHITE: 0, Color.BLACK: 0}
