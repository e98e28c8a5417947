"""
Contract with the external move oracle (the engine that proposes moves for the computer player).

The engine is a black box: it receives the position as FEN and answers with a move in coordinate notation.
Nothing it answers is trusted: the Game validates every proposal against its own legal moves.
"""

import re
from typing import Optional, Protocol

from src.core.exceptions import IllegalOracleMoveError
from src.rules.moves import Move

# What an engine answers when it has no move to offer
NO_MOVE = "no_move"

# from square + to square + optional promotion letter, e.g. e2e4, e7e8q
COORDINATE_MOVE_PATTERN = re.compile(r"^[a-h][1-8][a-h][1-8][nbrqNBRQ]?$")


class MoveOracle(Protocol):
    """Anything that can propose a move for a position"""

    def propose_move(self, fen: str) -> Optional[str]:
        """Return a move like 'e2e4' / 'e7e8q', or None / 'no_move' if there is none."""
        ...


def parse_oracle_move(proposal: Optional[str]) -> Optional[Move]:
    """
    Turn the oracle's answer into a Move.

    None means the oracle had nothing to offer. An answer that is not a coordinate move at all is fatal.
    """
    if proposal is None:
        return None

    proposal = proposal.strip()
    if proposal == NO_MOVE:
        return None

    if not COORDINATE_MOVE_PATTERN.match(proposal):
        raise IllegalOracleMoveError(
            f"Oracle answered with something that is not a move: {proposal!r}"
        )
    return Move.from_uci(proposal)
