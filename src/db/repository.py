"""
The storage boundary.

The service only knows this Protocol: where (and how) a GameModel ends up is up to whoever implements it.
"""

from typing import Protocol
from uuid import UUID

from src.core.models import GameModel


class GameRepository(Protocol):
    def get_game(self, game_id: UUID) -> GameModel | None:
        """None if no game is stored under this ID."""
        ...

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        """Store a new game. Returns what got stored, and the ID it got stored under."""
        ...

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        """Overwrite the stored game. None if no game is stored under this ID."""
        ...

    def delete_game(self, game_id: UUID) -> GameModel | None:
        """Remove the stored game (if any) and return it."""
        ...
