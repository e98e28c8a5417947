"""Custom exceptions shared by the domain, service and API layers."""


class GameError(Exception):
    """Base class for everything that can go wrong while playing a game."""


class InvalidFENError(GameError):
    """The supplied string cannot be interpreted as a FEN."""


class GameStateError(GameError):
    """The requested action does not fit the current state of the game (not started, already finished, etc.)"""


class NotYourTurnError(GameError):
    """A player tried to act while it is the opponent's turn."""


class IllegalMoveError(GameError):
    """The move is not in the set of legal moves of the current position."""


class IllegalOracleMoveError(IllegalMoveError):
    """
    The external move oracle proposed a move that is malformed or illegal.

    Fatal for the game session: the game is halted and the move never reaches the board.
    """


class InvalidRequestError(GameError, ValueError):
    """Request data that failed validation at the API boundary.

    NOTE: also a ValueError, so pydantic turns it into a regular validation error.
    """


class RepositoryError(GameError):
    """Could not find / store a record."""
