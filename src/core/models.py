"""
Boundary layer data model(s).

These objects can be used to communicate with the Service.
Hence, both the API layer (higher) and domain/storage layers (lower) will use model(s) defined here to send to/receive from the Service
(Decouples the data model specific to the storage layer, API layer, or domain layer from the information needed to send across boundaries)
"""

from dataclasses import dataclass, field
from typing import Optional

# Type aliases to make GameModel easier to read
PieceColor = str
PlayerName = str
FENCharacter = str


@dataclass
class GameModel:
    """Transport-safe representation of a chess game used between API, Service, storage, and Game layers."""

    current_fen: str
    history_fen: list[str]
    moves_uci: list[str]
    registered_players: dict[PieceColor, PlayerName]
    status: str
    moves_san: list[str] = field(default_factory=list)
    captured_pieces: dict[PieceColor, list[FENCharacter]] = field(
        default_factory=dict
    )
    resigned_by: Optional[PieceColor] = None
