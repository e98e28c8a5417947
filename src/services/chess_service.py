"""
Service layer: turns API requests into Game operations and keeps the repository up to date.

Every request follows the same round trip: load the stored GameModel, rebuild the Game from it,
act on the Game, store the Game's new model and answer with a GameResponse.
"""

import logging
from typing import Optional
from uuid import UUID

from src.api.models import (
    CreateGameRequest,
    DeleteGameRequest,
    EngineMoveRequest,
    EngineSuggestionResponse,
    GameResponse,
    GetGameRequest,
    JoinGameRequest,
    LegalMovesRequest,
    LegalMovesResponse,
    MoveRequest,
    ResignRequest,
)
from src.core.exceptions import GameStateError, IllegalOracleMoveError, RepositoryError
from src.core.models import GameModel
from src.core.shared_types import Color, Status
from src.db.repository import GameRepository
from src.rules.game import Game
from src.rules.moves import build_uci
from src.rules.oracle import MoveOracle

_LOGGER = logging.getLogger(__name__)


class ChessService:
    """Glue between the API boundary, the Game and the storage boundary."""

    def __init__(
        self, repository: GameRepository, oracle: Optional[MoveOracle] = None
    ) -> None:
        self.repo = repository
        self.oracle = oracle

    # -- API routes logic ---
    def create_new_game(self, request: CreateGameRequest) -> GameResponse:
        """Open a game for the requesting player (optionally from a custom position)."""
        game = Game.new_game(
            player=request.player_name,
            color=request.color,
            starting_fen=request.starting_fen,
        )
        stored_model, game_id = self.repo.create_game(game.to_model())
        _LOGGER.info("Created game %s for %s", game_id, request.player_name)
        return self._create_game_response(game_id, stored_model)

    def join_game(self, request: JoinGameRequest) -> GameResponse:
        """Seat the second player: the game starts."""
        game = self._load_game(request.game_id)
        game.register_player(request.player_name)
        return self._store_game(request.game_id, game)

    def get_game_state(self, request: GetGameRequest) -> GameResponse:
        """
        Read-only snapshot of a game.
        ----
        The frontend polls this to find out when it is its turn.
        """
        return self._create_game_response(
            request.game_id, self._fetch_game(request.game_id)
        )

    def legal_moves(self, request: LegalMovesRequest) -> LegalMovesResponse:
        """Legal moves of the whole army (coordinate notation), or the destinations of the piece on the requested square."""
        game = self._load_game(request.game_id)

        if request.square is None:
            moves = game.legal_moves(request.player_name)
        else:
            moves = game.legal_destinations(request.player_name, request.square)

        player_color = next(
            color
            for color, name in game.players.items()
            if name == request.player_name
        )
        return LegalMovesResponse(
            game_id=request.game_id,
            player_name=request.player_name,
            color=Color(player_color.name.lower()),
            legal_moves=moves,
        )

    def make_move(self, request: MoveRequest) -> GameResponse:
        """A player's move attempt. Nothing gets stored when the move is refused."""
        move_uci = build_uci(
            from_square_alg=request.from_square,
            to_square_alg=request.to_square,
            promotion=request.promote_to,
        )
        game = self._load_game(request.game_id)
        game.make_move(move_uci, request.player_name)
        return self._store_game(request.game_id, game)

    def play_engine_move(self, request: EngineMoveRequest) -> GameResponse:
        """
        Let the engine move for the side to move.
        ----

        An illegal proposal halts the game: the aborted game still gets stored before the error propagates.
        """
        if self.oracle is None:
            raise GameStateError("No engine configured for this service.")

        game = self._load_game(request.game_id)
        try:
            game.play_oracle_move(self.oracle)
        except IllegalOracleMoveError:
            self.repo.update_game(request.game_id, game.to_model())
            raise
        return self._store_game(request.game_id, game)

    def suggest_engine_move(self, request: EngineMoveRequest) -> EngineSuggestionResponse:
        """Ask the engine for a hint. The stored game stays exactly as it is."""
        if self.oracle is None:
            raise GameStateError("No engine configured for this service.")

        game = self._load_game(request.game_id)
        return EngineSuggestionResponse(
            game_id=request.game_id,
            suggested_move=game.suggest_oracle_move(self.oracle),
        )

    def resign(self, request: ResignRequest) -> GameResponse:
        """The requesting player gives up."""
        game = self._load_game(request.game_id)
        game.resign(request.player_name)
        return self._store_game(request.game_id, game)

    def delete_game(self, request: DeleteGameRequest) -> None:
        self.repo.delete_game(request.game_id)

    # -- Internal helpers --
    def _fetch_game(self, game_id: UUID) -> GameModel:
        game_model = self.repo.get_game(game_id)
        if game_model is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        return game_model

    def _load_game(self, game_id: UUID) -> Game:
        return Game.from_model(self._fetch_game(game_id))

    def _store_game(self, game_id: UUID, game: Game) -> GameResponse:
        model = game.to_model()
        self.repo.update_game(game_id, model)
        return self._create_game_response(game_id, model)

    def _create_game_response(self, game_id: UUID, model: GameModel) -> GameResponse:
        """GameModel --> GameResponse. Check flag, winner and material need the rebuilt Game."""

        # Until the first move, the history is empty and the current position is the starting one.
        starting_fen = model.history_fen[0] if model.history_fen else model.current_fen
        game = Game.from_model(model)
        return GameResponse(
            game_id=game_id,
            players=model.registered_players,
            fen_state=model.current_fen,
            starting_state=starting_fen,
            status=Status(model.status.replace("_", " ")),
            is_check=game.is_check,
            winner=game.winner,
            move_history=model.moves_san,
            moves_uci=model.moves_uci,
            captured_pieces=model.captured_pieces,
            material=game.material,
        )
