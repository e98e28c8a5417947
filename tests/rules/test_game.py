"""Unit tests for /src/rules/game.py"""

import logging
from typing import Optional

import pytest

from src.core.exceptions import (
    GameStateError,
    IllegalMoveError,
    IllegalOracleMoveError,
    InvalidFENError,
    NotYourTurnError,
)
from src.core.models import GameModel
from src.rules.fen import STARTING_FEN
from src.rules.game import Game, Status
from src.rules.pieces import Color, Piece, PieceType
from src.rules.square import Square

WHITE_PLAYER = "Alice"
BLACK_PLAYER = "Bob"

FOOLS_MATE_FEN = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"
CASTLING_FEN = "r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1"
PROMOTION_FEN = "8/P7/8/8/8/8/8/2k4K w - - 0 1"


class FakeOracle:
    """Always proposes the same answer, and remembers which positions it was shown."""

    def __init__(self, proposal: Optional[str]) -> None:
        self.proposal = proposal
        self.positions: list[str] = []

    def propose_move(self, fen: str) -> Optional[str]:
        self.positions.append(fen)
        return self.proposal


def started_game(fen: Optional[str] = None) -> Game:
    """Alice plays white, Bob plays black"""
    game = Game.new_game(WHITE_PLAYER, "white", starting_fen=fen)
    game.register_player(BLACK_PLAYER)
    return game


def play(game: Game, *moves_uci: str) -> list[str]:
    """Alternate moves between the players, starting with whoever is to move"""
    san: list[str] = []
    for move_uci in moves_uci:
        player = game.players[game.state.color_to_move]
        san.append(game.make_move(move_uci, player))
    return san


# -- CREATION LOGIC --
def test_new_game_waits_for_second_player() -> None:
    game = Game.new_game(BLACK_PLAYER, "black")
    assert game.status == Status.WAITING_FOR_PLAYERS
    assert game.players == {Color.BLACK: BLACK_PLAYER}
    assert game.state.to_fen() == STARTING_FEN

    game.register_player(WHITE_PLAYER)
    assert game.status == Status.IN_PROGRESS
    assert game.players == {Color.BLACK: BLACK_PLAYER, Color.WHITE: WHITE_PLAYER}


def test_new_game_invalid_color() -> None:
    with pytest.raises(GameStateError):
        Game.new_game(WHITE_PLAYER, "purple")


def test_new_game_invalid_fen() -> None:
    with pytest.raises(InvalidFENError):
        Game.new_game(WHITE_PLAYER, "white", starting_fen="not a fen")


def test_game_is_full_after_two_players() -> None:
    game = started_game()
    with pytest.raises(GameStateError):
        game.register_player("Carol")


def test_game_can_start_in_a_finished_position() -> None:
    game = started_game(FOOLS_MATE_FEN)
    assert game.status == Status.CHECKMATE
    assert game.winner == BLACK_PLAYER


def test_game_creation_from_model_roundtrip() -> None:
    fen = "r3k2r/pppq1ppp/2npbn2/4p3/2B1P3/2NP1N2/PPP2PPP/R1BQ1RK1 b kq - 3 9"
    model = GameModel(
        current_fen=fen,
        history_fen=[STARTING_FEN],
        moves_uci=["e2e4"],
        registered_players={"white": WHITE_PLAYER, "black": BLACK_PLAYER},
        status="in_progress",
        moves_san=["e4"],
        captured_pieces={"white": ["p"], "black": []},
    )
    game = Game.from_model(model)
    assert game.status == Status.IN_PROGRESS
    assert game.captured[Color.WHITE] == [Piece(PieceType.PAWN, Color.BLACK)]
    assert game.to_model() == model


def test_from_model_accepts_status_with_spaces() -> None:
    model = GameModel(STARTING_FEN, [], [], {"white": WHITE_PLAYER}, "waiting for players")
    assert Game.from_model(model).status == Status.WAITING_FOR_PLAYERS


def test_from_model_invalid_status() -> None:
    model = GameModel(STARTING_FEN, [], [], {"white": WHITE_PLAYER}, "paused")
    with pytest.raises(GameStateError):
        Game.from_model(model)


# -- TURN ORDER / GAME STATE --
def test_cannot_move_before_the_game_starts() -> None:
    game = Game.new_game(WHITE_PLAYER, "white")
    with pytest.raises(GameStateError):
        game.make_move("e2e4", WHITE_PLAYER)


def test_not_your_turn() -> None:
    game = started_game()
    with pytest.raises(NotYourTurnError):
        game.make_move("e7e5", BLACK_PLAYER)
    with pytest.raises(NotYourTurnError):
        game.legal_moves(BLACK_PLAYER)


def test_cannot_move_opponents_piece() -> None:
    game = started_game()
    with pytest.raises(IllegalMoveError):
        game.make_move("e7e5", WHITE_PLAYER)


def test_illegal_move_leaves_game_untouched() -> None:
    game = started_game()
    with pytest.raises(IllegalMoveError):
        game.make_move("e2e5", WHITE_PLAYER)
    assert game.state.to_fen() == STARTING_FEN
    assert game.history == []
    assert game.moves == []


# -- LEGAL MOVES --
def test_legal_moves_at_the_start() -> None:
    moves = started_game().legal_moves(WHITE_PLAYER)
    assert len(moves) == 20
    assert "e2e4" in moves and "g1f3" in moves


def test_legal_destinations() -> None:
    game = started_game()
    assert set(game.legal_destinations(WHITE_PLAYER, "g1")) == {"f3", "h3"}
    assert game.legal_destinations(WHITE_PLAYER, "e4") == []
    # black's pieces do not belong to the player to move
    assert game.legal_destinations(WHITE_PLAYER, "e7") == []


# -- MAKING MOVES --
def test_first_move_updates_state() -> None:
    game = started_game()
    san = game.make_move("e2e4", WHITE_PLAYER)

    assert san == "e4"
    assert game.history == [STARTING_FEN]
    assert game.state.to_fen() == (
        "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"
    )
    assert game.to_model().moves_uci == ["e2e4"]


def test_move_counters() -> None:
    game = started_game()
    play(game, "g1f3", "b8c6")
    assert (game.state.half_move_clock, game.state.num_turns) == (2, 2)
    play(game, "e2e4")
    assert game.state.half_move_clock == 0


def test_fools_mate() -> None:
    game = started_game()
    san = play(game, "f2f3", "e7e5", "g2g4", "d8h4")

    assert san == ["f3", "e5", "g4", "Qh4#"]
    assert game.notation == san
    assert game.status == Status.CHECKMATE
    assert game.is_check
    assert game.winner == BLACK_PLAYER
    assert game.state.to_fen() == FOOLS_MATE_FEN

    with pytest.raises(GameStateError):
        game.make_move("a2a3", WHITE_PLAYER)


def test_stalemate() -> None:
    game = started_game("k7/8/8/1Q6/8/8/8/7K w - - 0 1")
    assert game.make_move("b5b6", WHITE_PLAYER) == "Qb6"
    assert game.status == Status.STALEMATE
    assert game.winner is None


def test_capture_gets_recorded() -> None:
    game = started_game()
    san = play(game, "e2e4", "d7d5", "e4d5")
    assert san[-1] == "exd5"
    assert game.captured[Color.WHITE] == [Piece(PieceType.PAWN, Color.BLACK)]
    assert game.to_model().captured_pieces == {"white": ["p"], "black": []}
    assert game.material == {"white": 39, "black": 38}


def test_en_passant() -> None:
    game = started_game("4k3/8/8/8/4p3/8/3P4/4K3 w - - 0 1")
    play(game, "d2d4")
    assert game.state.en_passant_square == Square.from_algebraic("d3")

    assert game.make_move("e4d3", BLACK_PLAYER) == "exd3"
    assert game.board.is_empty(Square.from_algebraic("d4"))
    assert game.captured[Color.BLACK] == [Piece(PieceType.PAWN, Color.WHITE)]
    assert game.state.en_passant_square is None


def test_en_passant_expires_after_one_move() -> None:
    game = started_game("4k3/8/8/8/4p3/8/3P4/4K3 w - - 0 1")
    play(game, "d2d4", "e8d8", "e1f1")
    with pytest.raises(IllegalMoveError):
        game.make_move("e4d3", BLACK_PLAYER)


def test_castling() -> None:
    game = started_game(CASTLING_FEN)
    assert game.make_move("e1g1", WHITE_PLAYER) == "O-O"
    assert game.board.piece(Square.from_algebraic("f1")) == Piece(PieceType.ROOK, Color.WHITE)
    assert game.state.castling_rights.to_fen() == "kq"

    assert game.make_move("e8c8", BLACK_PLAYER) == "O-O-O"
    assert game.state.castling_rights.to_fen() == "-"


def test_capturing_a_rook_revokes_its_right() -> None:
    game = started_game(CASTLING_FEN)
    assert game.make_move("a1a8", WHITE_PLAYER) == "Rxa8+"
    assert game.is_check
    assert game.state.castling_rights.to_fen() == "Kk"


def test_castling_rights_never_come_back() -> None:
    game = started_game(CASTLING_FEN)
    play(game, "a1a2")
    assert game.state.castling_rights.to_fen() == "Kkq"
    # the rooks walk back home: still no rights on the queen side (white) or king side (black)
    play(game, "h8h5", "a2a1", "h5h8")
    assert game.state.castling_rights.to_fen() == "Kq"
    assert game.state.color_to_move == Color.WHITE
    with pytest.raises(IllegalMoveError):
        game.make_move("e1c1", WHITE_PLAYER)


def test_promotion_requires_a_piece() -> None:
    game = started_game(PROMOTION_FEN)
    with pytest.raises(IllegalMoveError):
        game.make_move("a7a8", WHITE_PLAYER)

    assert game.make_move("a7a8n", WHITE_PLAYER) == "a8=N"
    assert game.board.piece(Square.from_algebraic("a8")) == Piece(PieceType.KNIGHT, Color.WHITE)
    assert game.to_model().moves_uci == ["a7a8n"]


# -- MOVE ORACLE --
def test_oracle_move() -> None:
    game = started_game()
    oracle = FakeOracle("e2e4")
    assert game.play_oracle_move(oracle) == "e4"
    assert oracle.positions == [STARTING_FEN]
    assert game.state.color_to_move == Color.BLACK


def test_oracle_without_a_move() -> None:
    game = started_game()
    assert game.play_oracle_move(FakeOracle(None)) is None
    assert game.status == Status.IN_PROGRESS
    assert game.moves == []


def test_oracle_promotes_to_queen_by_default() -> None:
    game = started_game(PROMOTION_FEN)
    assert game.play_oracle_move(FakeOracle("a7a8")) == "a8=Q"
    assert game.board.piece(Square.from_algebraic("a8")) == Piece(PieceType.QUEEN, Color.WHITE)


@pytest.mark.parametrize("proposal", ["e2e5", "e7e5", "garbage"])
def test_illegal_oracle_move_aborts_the_game(
    proposal: str, caplog: pytest.LogCaptureFixture
) -> None:
    game = started_game()
    with caplog.at_level(logging.ERROR, logger="src.rules.game"):
        with pytest.raises(IllegalOracleMoveError):
            game.play_oracle_move(FakeOracle(proposal))

    assert game.status == Status.ABORTED
    assert game.state.to_fen() == STARTING_FEN
    assert game.moves == []
    assert "halted" in caplog.text

    with pytest.raises(GameStateError):
        game.make_move("e2e4", WHITE_PLAYER)


def test_oracle_needs_a_running_game() -> None:
    game = Game.new_game(WHITE_PLAYER, "white")
    with pytest.raises(GameStateError):
        game.play_oracle_move(FakeOracle("e2e4"))


def test_oracle_suggestion_leaves_the_game_untouched() -> None:
    game = started_game()
    oracle = FakeOracle("g1f3")
    assert game.suggest_oracle_move(oracle) == "g1f3"
    assert oracle.positions == [STARTING_FEN]
    assert game.state.to_fen() == STARTING_FEN
    assert game.moves == []
    assert game.status == Status.IN_PROGRESS


def test_oracle_suggestion_promotes_to_queen_by_default() -> None:
    game = started_game(PROMOTION_FEN)
    assert game.suggest_oracle_move(FakeOracle("a7a8")) == "a7a8q"
    assert game.board.piece(Square.from_algebraic("a7")) == Piece(PieceType.PAWN, Color.WHITE)


def test_oracle_suggestion_without_a_move() -> None:
    game = started_game()
    assert game.suggest_oracle_move(FakeOracle("no_move")) is None


@pytest.mark.parametrize("proposal", ["e2e5", "garbage"])
def test_illegal_oracle_suggestion_keeps_the_game_running(
    proposal: str, caplog: pytest.LogCaptureFixture
) -> None:
    game = started_game()
    with caplog.at_level(logging.ERROR, logger="src.rules.game"):
        with pytest.raises(IllegalOracleMoveError):
            game.suggest_oracle_move(FakeOracle(proposal))

    assert game.status == Status.IN_PROGRESS
    assert "Discarded" in caplog.text
    game.make_move("e2e4", WHITE_PLAYER)


# -- RESIGNATION --
@pytest.mark.parametrize(
    "resigning_player, winner",
    [(WHITE_PLAYER, BLACK_PLAYER), (BLACK_PLAYER, WHITE_PLAYER)],
)
def test_resign(resigning_player: str, winner: str) -> None:
    # white is to move: black may resign out of turn
    game = started_game()
    game.resign(resigning_player)
    assert game.status == Status.RESIGNED
    assert game.winner == winner

    with pytest.raises(GameStateError):
        game.make_move("e2e4", WHITE_PLAYER)
    with pytest.raises(GameStateError):
        game.resign(winner)


def test_resign_survives_model_roundtrip() -> None:
    game = started_game()
    play(game, "e2e4")
    game.resign(WHITE_PLAYER)

    model = game.to_model()
    assert model.status == "resigned"
    assert model.resigned_by == "white"

    restored = Game.from_model(model)
    assert restored.status == Status.RESIGNED
    assert restored.winner == BLACK_PLAYER


def test_only_players_can_resign() -> None:
    game = started_game()
    with pytest.raises(GameStateError):
        game.resign("Eve")
    assert game.status == Status.IN_PROGRESS


def test_cannot_resign_before_the_game_starts() -> None:
    game = Game.new_game(WHITE_PLAYER, "white")
    with pytest.raises(GameStateError):
        game.resign(WHITE_PLAYER)


def test_new_game_needs_both_kings() -> None:
    with pytest.raises(InvalidFENError):
        Game.new_game(WHITE_PLAYER, "white", starting_fen="8/8/8/8/8/8/8/8 w - - 0 1")
