"""
The Game class will be the entrypoint into the domain layer for the service layer.
It owns the one mutable copy of the position and applies moves to it, using the (pure) rules from the other modules:
legal move generation, check detection, game status and notation.
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Self

from src.core.exceptions import (
    GameStateError,
    IllegalMoveError,
    IllegalOracleMoveError,
    NotYourTurnError,
)
from src.core.models import GameModel
from src.rules.board import Board
from src.rules.check import is_in_check
from src.rules.fen import FENState
from src.rules.legality import (
    all_legal_moves,
    en_passant_capture_square,
    is_castling_move,
    is_en_passant_capture,
    is_legal_move,
    legal_moves,
    simulate_move,
)
from src.rules.moves import DEFAULT_PROMOTION, Move, is_promotion_square
from src.rules.notation import encode
from src.rules.oracle import MoveOracle, parse_oracle_move
from src.rules.pieces import Color, Piece, PieceType
from src.rules.square import Square
from src.rules.status import GameStatus, game_status

_LOGGER = logging.getLogger(__name__)

AVAILABLE_COLOR_NAMES = [color.name for color in Color]


class Status(Enum):
    WAITING_FOR_PLAYERS = auto()
    IN_PROGRESS = auto()
    CHECKMATE = auto()
    STALEMATE = auto()
    ABORTED = auto()
    RESIGNED = auto()


# Game status of the position --> status of the game session
TERMINAL_STATUS: dict[GameStatus, Status] = {
    GameStatus.CHECKMATE: Status.CHECKMATE,
    GameStatus.STALEMATE: Status.STALEMATE,
}


@dataclass(frozen=True)
class AcceptedMove:
    """Snapshot of the moving pieces, taken before the board gets updated."""

    move: Move
    moving_piece: Piece
    captured_piece: Optional[Piece]
    is_castling: bool
    is_en_passant: bool

    @classmethod
    def from_move_and_board(
        cls, move: Move, board: Board, en_passant_target: Optional[Square]
    ) -> Self:
        moving_piece = board.piece(move.from_square)
        # for the type checker: only called for moves that passed validation
        assert moving_piece is not None

        is_en_passant = is_en_passant_capture(
            moving_piece, move.from_square, move.to_square, en_passant_target
        )
        captured_square = (
            en_passant_capture_square(move.from_square, move.to_square)
            if is_en_passant
            else move.to_square
        )
        return cls(
            move=move,
            moving_piece=moving_piece,
            captured_piece=board.piece(captured_square),
            is_castling=is_castling_move(
                moving_piece, move.from_square, move.to_square
            ),
            is_en_passant=is_en_passant,
        )


@dataclass
class Game:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    board: Board
    moves: list[Move]
    history: list[str]  # list of FEN strings (position before each move)
    notation: list[str]  # the moves in standard algebraic notation
    captured: dict[Color, list[Piece]]  # pieces taken BY the player of that color
    state: FENState
    players: dict[Color, str]
    status: Status
    resigned_by: Optional[Color] = None

    @classmethod
    def from_model(cls, model: GameModel) -> Self:
        """Define how to construct a Game from the information the Service layer actually has"""

        # Validation
        status_name = model.status.replace(" ", "_").upper()
        if status_name not in Status.__members__:
            raise GameStateError(
                f"Invalid status code: {model.status!r}. \nPick one from {','.join([status.name.lower() for status in Status])}"
            )

        state = FENState.from_fen(model.current_fen)
        board = Board.from_fen(state.position)
        moves = [Move.from_uci(uci) for uci in model.moves_uci]
        players = {
            color: model.registered_players[color.name.lower()]
            for color in Color
            if color.name.lower() in model.registered_players
        }
        captured = {
            color: [
                Piece.from_fen(char)
                for char in model.captured_pieces.get(color.name.lower(), [])
            ]
            for color in Color
        }
        return cls(
            board=board,
            moves=moves,
            history=list(model.history_fen),
            notation=list(model.moves_san),
            captured=captured,
            state=state,
            players=players,
            status=Status[status_name],
            resigned_by=(
                Color[model.resigned_by.upper()] if model.resigned_by else None
            ),
        )

    def to_model(self) -> GameModel:
        """Encode back into a format the Service layer uses"""

        return GameModel(
            current_fen=self.state.to_fen(),
            history_fen=list(self.history),
            moves_uci=[move.to_uci() for move in self.moves],
            registered_players={
                color.name.lower(): name for color, name in self.players.items()
            },
            status=self.status.name.lower(),
            moves_san=list(self.notation),
            captured_pieces={
                color.name.lower(): [piece.to_fen() for piece in pieces]
                for color, pieces in self.captured.items()
            },
            resigned_by=(
                self.resigned_by.name.lower() if self.resigned_by is not None else None
            ),
        )

    @classmethod
    def new_game(
        cls, player: str, color: str, starting_fen: Optional[str] = None
    ) -> Self:
        """To start a new game with the player using the pieces with the indicated color."""

        if color.upper() not in AVAILABLE_COLOR_NAMES:
            raise GameStateError(
                f"Cannot create new game. Color {color} not in {','.join([c.lower() for c in AVAILABLE_COLOR_NAMES])}."
            )

        state = (
            FENState.from_fen(starting_fen)
            if starting_fen
            else FENState.starting_position()
        )
        board = Board.from_fen(state.position)
        player_color = Color[color.upper()]
        return cls(
            board=board,
            moves=[],
            history=[],
            notation=[],
            captured={Color.WHITE: [], Color.BLACK: []},
            state=state,
            players={player_color: player},
            status=Status.WAITING_FOR_PLAYERS,
        )

    @property
    def winner(self) -> Optional[str]:
        """
        * checkmate: the player to move just got mated, so the opponent wins.
        * resignation: the opponent of whoever resigned wins.
        Any other status has no winner (yet).
        """
        if self.status == Status.CHECKMATE:
            return self.players.get(self.state.color_to_move.opponent)
        if self.status == Status.RESIGNED and self.resigned_by is not None:
            return self.players.get(self.resigned_by.opponent)
        return None

    @property
    def is_check(self) -> bool:
        """Is the player to move currently in check?"""
        return is_in_check(self.state.color_to_move, self.board)

    @property
    def material(self) -> dict[str, int]:
        """Points of material left on the board per color (keyed by color name, like the transport model)"""
        return {
            color.name.lower(): points
            for color, points in self.board.count_material().items()
        }

    def register_player(self, player: str) -> None:
        """Registering the 2nd player to an open game"""
        if self.status != Status.WAITING_FOR_PLAYERS:
            raise GameStateError(
                f"Cannot join this game. Game is not accepting new players. status: {self.status}"
            )

        opponent_color = next(iter(self.players))
        self.players[opponent_color.opponent] = player
        self._change_status(Status.IN_PROGRESS)

        # A game can be started from a position that is already over.
        self._update_game_status()

    def legal_moves(self, player: str) -> list[str]:
        """
        Service will request the set of legal moves.
        ----

        ----
        1. Check if it is your turn
        2. Yes? Generate legal moves and return a list of moves in coordinate notation.
        """
        self._assert_in_progress()
        self._assert_your_turn(player)

        return [
            move.to_uci()
            for move in all_legal_moves(
                self.state.color_to_move,
                self.board,
                self.state.en_passant_square,
                self.state.castling_rights,
            )
        ]

    def legal_destinations(self, player: str, square: str) -> list[str]:
        """
        Where can the piece on the given square go? (what the UI highlights once a piece is selected)

        An empty square, or one holding an opponent's piece, simply has no destinations.
        """
        self._assert_in_progress()
        self._assert_your_turn(player)

        from_square = Square.from_algebraic(square)
        piece = self.board.piece(from_square)
        if piece is None or piece.color != self.state.color_to_move:
            return []

        return [
            to_square.to_algebraic()
            for to_square in legal_moves(
                piece,
                from_square,
                self.board,
                self.state.en_passant_square,
                self.state.castling_rights,
            )
        ]

    def make_move(self, move_uci: str, player: str) -> str:
        """
        Attempt to make a move
        -----

        1. check the game is in progress and it is your turn
        2. check the move is legal (a pawn reaching the last rank must say what it promotes into)
        3. apply the move (see `_apply_move`)

        Returns the move in standard algebraic notation.
        """
        self._assert_in_progress()
        self._assert_your_turn(player)

        new_move = Move.from_uci(move_uci)
        if not self._is_legal(new_move):
            raise IllegalMoveError(f"Move not allowed: {move_uci}")

        return self._apply_move(new_move)

    def play_oracle_move(self, oracle: MoveOracle) -> Optional[str]:
        """
        Let the external engine move for the player to move.
        -----

        The engine's proposal is checked against our own legal moves before it touches the board.
        An illegal (or unreadable) proposal halts the game: status becomes ABORTED and IllegalOracleMoveError is raised.

        Returns the move in standard algebraic notation, or None if the engine had no move to offer.
        """
        self._assert_in_progress()

        try:
            move = self._ask_oracle(oracle)
        except IllegalOracleMoveError as err:
            raise self._halt(err) from err

        if move is None:
            return None
        return self._apply_move(move)

    def suggest_oracle_move(self, oracle: MoveOracle) -> Optional[str]:
        """
        A hint: what the engine would play for the player to move, in coordinate notation.

        Nothing gets played. A bad suggestion raises IllegalOracleMoveError, but leaves the game running.
        """
        self._assert_in_progress()

        try:
            move = self._ask_oracle(oracle)
        except IllegalOracleMoveError as err:
            _LOGGER.error("Discarded engine suggestion: %s", err)
            raise

        return move.to_uci() if move is not None else None

    def resign(self, player: str) -> None:
        """Either player may give up at any time (no need to wait for your turn). The opponent wins."""
        self._assert_in_progress()

        resigning_color = next(
            (color for color, name in self.players.items() if name == player), None
        )
        if resigning_color is None:
            raise GameStateError(f"{player} is not playing in this game.")

        self.resigned_by = resigning_color
        self._change_status(Status.RESIGNED)
        _LOGGER.info("Game over: %s resigned", resigning_color.name.lower())

    # -- PRIVATE HELPERS ---
    def _get_turn_player(self) -> Optional[str]:
        return self.players.get(self.state.color_to_move)

    def _assert_in_progress(self) -> None:
        if self.status != Status.IN_PROGRESS:
            raise GameStateError(f"Game is not in progress. status: {self.status}")

    def _assert_your_turn(self, player: str) -> None:
        """You must wait for your turn before calculating legal moves / making a move."""
        player_to_move = self._get_turn_player()
        if player != player_to_move:
            raise NotYourTurnError(
                f"It is not your turn. Waiting for player {player_to_move} to make a move first."
            )

    def _is_legal(self, move: Move) -> bool:
        return is_legal_move(
            move,
            self.state.color_to_move,
            self.board,
            self.state.en_passant_square,
            self.state.castling_rights,
        )

    def _resolve_promotion(self, move: Move) -> Move:
        """An engine cannot pick from a dialog: a pawn reaching the last rank without a choice becomes a queen."""
        piece = self.board.piece(move.from_square)
        if (
            piece is not None
            and move.promotion is None
            and is_promotion_square(piece, move.to_square)
        ):
            return Move(move.from_square, move.to_square, promotion=DEFAULT_PROMOTION)
        return move

    def _ask_oracle(self, oracle: MoveOracle) -> Optional[Move]:
        """
        Get the engine's proposal for the current position, fully validated.
        None if the engine had nothing to offer. Raises IllegalOracleMoveError for a malformed or illegal proposal.
        """
        fen = self.state.to_fen()
        proposal = oracle.propose_move(fen)
        try:
            move = parse_oracle_move(proposal)
        except IllegalOracleMoveError as err:
            raise IllegalOracleMoveError(f"{err} (position: {fen})") from err

        if move is None:
            _LOGGER.warning("Oracle has no move for position %s", fen)
            return None

        move = self._resolve_promotion(move)
        if not self._is_legal(move):
            raise IllegalOracleMoveError(
                f"Oracle proposed an illegal move: {proposal!r} (position: {fen})"
            )
        return move

    def _halt(self, err: IllegalOracleMoveError) -> IllegalOracleMoveError:
        """Halt the game (the move never gets applied) and hand back the error to raise."""
        _LOGGER.error("Game halted: %s", err)
        self._change_status(Status.ABORTED)
        return IllegalOracleMoveError(str(err))

    def _apply_move(self, move: Move) -> str:
        """
        Update everything that changes with a (validated) move
        -----

        1. snapshot what moves / gets captured
        2. store the FEN before the move in the history
        3. update the board (castling moves the rook too, en passant removes the pawn beside, promotion swaps the piece)
        4. update the FEN state (castling rights, en passant square, move counters, color to move)
        5. update the move lists and captured pieces
        6. encode the move in algebraic notation: capture, check and checkmate are determined (in that order) from the new position
        7. update game status (if needed)
        """
        accepted_move = AcceptedMove.from_move_and_board(
            move, self.board, self.state.en_passant_square
        )
        player_color = accepted_move.moving_piece.color

        self.history.append(self.state.to_fen())

        self.board = simulate_move(
            accepted_move.moving_piece,
            move.from_square,
            move.to_square,
            self.board,
            self.state.en_passant_square,
            move.promotion,
        )

        self._update_fen_state(accepted_move)

        self.moves.append(move)
        if accepted_move.captured_piece is not None:
            self.captured[player_color].append(accepted_move.captured_piece)

        opponent_color = player_color.opponent
        is_capture = accepted_move.captured_piece is not None
        is_check = is_in_check(opponent_color, self.board)
        status = game_status(
            self.board,
            opponent_color,
            self.state.en_passant_square,
            self.state.castling_rights,
        )
        is_checkmate = status == GameStatus.CHECKMATE
        san = encode(
            accepted_move.moving_piece,
            move.from_square,
            move.to_square,
            is_capture=is_capture,
            is_check=is_check,
            is_checkmate=is_checkmate,
            is_castling=accepted_move.is_castling,
            promotion=move.promotion,
        )
        self.notation.append(san)
        _LOGGER.debug(
            "%s played %s (%s)", player_color.name.lower(), san, move.to_uci()
        )

        self._update_game_status(status)
        return san

    def _update_fen_state(self, accepted_move: AcceptedMove) -> None:
        """Create/update the FEN state to reflect state after move.
        NOTE this is performed AFTER the board has been updated
        """
        move = accepted_move.move
        player_color = accepted_move.moving_piece.color

        self.state.position = self.board.to_fen()

        # rights are lost for good once king / rook leave (or get captured on) their home squares
        self.state.castling_rights = self.state.castling_rights.after_move(
            move.from_square, move.to_square
        )

        # the en passant square only lives for a single move: always overwrite it
        self.state.en_passant_square = self._determine_en_passant_square(
            accepted_move
        )

        if self._is_half_move(accepted_move):
            self.state.increment_half_move_counter()
        else:
            self.state.reset_half_move_counter()

        if player_color == Color.BLACK:
            self.state.increment_full_move_counter()

        self.state.color_to_move = player_color.opponent

    def _update_game_status(self, status: Optional[GameStatus] = None) -> None:
        """Performs checks to see if game has ended and changes status accordingly.

        NOTE the FEN state has already been updated. At this point the player to move is the opponent of the player that just moved.
        """
        if status is None:
            status = game_status(
                self.board,
                self.state.color_to_move,
                self.state.en_passant_square,
                self.state.castling_rights,
            )

        if status in TERMINAL_STATUS:
            self._change_status(TERMINAL_STATUS[status])
            _LOGGER.info("Game over: %s", status.name.lower())

    def _change_status(self, new_status: Status) -> None:
        self.status = new_status

    # --- EN PASSANT RULE HELPERS ----
    def _determine_en_passant_square(
        self, accepted_move: AcceptedMove
    ) -> Optional[Square]:
        """The possible en passant square for the next turn: the square a pawn skipped with its double push."""
        move = accepted_move.move
        rows_moved = abs(move.from_square.row - move.to_square.row)
        if self._is_pawn_move(accepted_move) and rows_moved == 2:
            return Square(
                row=(move.from_square.row + move.to_square.row) // 2,
                col=move.from_square.col,
            )
        return None

    # --- HALF MOVE CLOCK HELPERS ---
    def _is_half_move(self, move: AcceptedMove) -> bool:
        return (not self._is_pawn_move(move)) and (move.captured_piece is None)

    def _is_pawn_move(self, move: AcceptedMove) -> bool:
        return move.moving_piece.type == PieceType.PAWN
