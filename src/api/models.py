"""
UI boundary: pydantic models for what comes in (requests) and what goes out (responses).

Validation here only concerns the shape of the data. Whether a move is legal is for the Game to decide.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from src.core.exceptions import InvalidRequestError
from src.core.shared_types import PROMOTION_CHOICES, Color, PieceType, Status
from src.rules.fen import is_valid_fen, is_valid_square

PieceColor = str
PlayerName = str
FENCharacter = str


# --- REQUEST MODELS ---
class CreateGameRequest(BaseModel):
    player_name: str
    color: Color
    starting_fen: Optional[str] = None

    @field_validator("starting_fen")
    @classmethod
    def validate_starting_fen(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value

        fen = value.strip()
        if not is_valid_fen(fen):
            raise InvalidRequestError(f"Not a valid FEN: {fen!r}")
        return fen


class JoinGameRequest(BaseModel):
    game_id: UUID
    player_name: str


class LegalMovesRequest(BaseModel):
    """Without a square: all legal moves of the player. With a square: where the piece on that square can go."""

    game_id: UUID
    player_name: str
    square: Optional[str] = None

    @field_validator("square")
    @classmethod
    def validate_square(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not is_valid_square(value):
            raise InvalidRequestError(
                f"Cannot interpret square: {value!r} as a valid square name."
            )
        return value


class MoveRequest(BaseModel):
    game_id: UUID
    player_name: str
    from_square: str
    to_square: str
    promote_to: Optional[PieceType] = None

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        if not is_valid_square(value):
            raise InvalidRequestError(
                f"Cannot interpret {value!r} as a valid square name."
            )
        return value

    @field_validator("promote_to")
    @classmethod
    def validate_promotion(cls, value: Optional[PieceType]) -> Optional[PieceType]:
        if value is not None and value not in PROMOTION_CHOICES:
            raise InvalidRequestError(
                f"A pawn cannot promote into a {value}. Pick one from {','.join(PROMOTION_CHOICES)}"
            )
        return value


class EngineMoveRequest(BaseModel):
    """Ask the engine to play the move for the side to move."""

    game_id: UUID


class ResignRequest(BaseModel):
    """The named player gives up: the opponent wins."""

    game_id: UUID
    player_name: str


class GetGameRequest(BaseModel):
    game_id: UUID


class DeleteGameRequest(BaseModel):
    game_id: UUID


# --- RESPONSE MODELS ---
class GameResponse(BaseModel):
    game_id: UUID
    players: dict[PieceColor, PlayerName]
    fen_state: str
    starting_state: str
    status: Status
    is_check: bool
    winner: Optional[PlayerName]
    move_history: list[str]
    moves_uci: list[str]
    captured_pieces: dict[PieceColor, list[FENCharacter]]
    material: dict[PieceColor, int]


class LegalMovesResponse(BaseModel):
    game_id: UUID
    player_name: str
    color: Color
    legal_moves: list[str]


class EngineSuggestionResponse(BaseModel):
    """What the engine would play (coordinate notation), None if it has no move"""

    game_id: UUID
    suggested_move: Optional[str]
