"""
Geometry/Base movement rules

Key idea: Use strategy pattern to define pseudo-legal destination squares for each piece type.

Pseudo-legal means: the piece's own movement pattern + occupancy of the board.
Whether the move leaves your own king in check is decided later (see legality.py).
"""

from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Self

from src.rules.attacks import is_any_attacked, is_attacked
from src.rules.castling import (
    CASTLING_RULES,
    CastlingRights,
    castling_directions,
)
from src.rules.pieces import (
    FEN_TO_PIECE,
    PAWN_START_ROW,
    PIECE_TO_FEN,
    PROMOTION_ROW,
    Color,
    Piece,
    PieceType,
)
from src.rules.square import (
    DIAGONAL_DIRECTIONS,
    KING_DELTAS,
    KNIGHT_DELTAS,
    STRAIGHT_DIRECTIONS,
    Square,
    Vector,
)


class Board(Protocol):
    """Just the parts the movement strategies need"""

    def piece(self, square: Square) -> Optional[Piece]: ...
    def is_empty(self, square: Square) -> bool: ...
    def is_any_occupied(self, squares: list[Square]) -> bool: ...


# -- PAWN PROMOTION --
PROMOTION_OPTIONS: list[PieceType] = [
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.ROOK,
    PieceType.QUEEN,
]

# Used for move sources that cannot ask which piece to promote into (the engine)
DEFAULT_PROMOTION = PieceType.QUEEN


@dataclass(frozen=True)
class Move:
    """basic definition of a move to be made"""

    from_square: Square
    to_square: Square
    promotion: Optional[PieceType] = None

    @classmethod
    def from_uci(cls, uci: str) -> Self:
        """
        Coordinate notation (as used by UCI engines):
        ---

        examples:
        * "e2e4": move the piece that was on e2 to e4
        * "e7e8q" : (pawn) moves from e7 to e8 and promotes to a queen (the q)
        * "e1g1": the king castles king side

        NOTE: Nothing is validated here beyond the shape of the string. Legality depends on the position.
        """
        from_sq = Square.from_algebraic(uci[:2])
        to_sq = Square.from_algebraic(uci[2:4])
        promotion = FEN_TO_PIECE[uci[4].lower()] if len(uci) == 5 else None
        return cls(from_sq, to_sq, promotion)

    def to_uci(self) -> str:
        """Convert into coordinate notation"""
        piece_char = PIECE_TO_FEN[self.promotion] if self.promotion else ""
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}{piece_char}"


def build_uci(
    from_square_alg: str, to_square_alg: str, promotion: Optional[str] = None
) -> str:
    """Glue the separate parts of a move request together into coordinate notation"""
    promotion_char = PIECE_TO_FEN[PieceType[promotion.upper()]] if promotion else ""
    return f"{from_square_alg}{to_square_alg}{promotion_char}"


def is_promotion_square(piece: Piece, square: Square) -> bool:
    """check if the piece is a pawn and the square is on the far side of the board for that pawn"""
    return piece.type == PieceType.PAWN and square.row == PROMOTION_ROW[piece.color]


# --- MOVEMENT RULES ---
def raycasting_move(
    square: Square, color: Color, board: Board, directions: tuple[Vector, ...]
) -> list[Square]:
    """
    Raycasting algorithm
    -----

    ---
    The main trick we use to check the 'line of sight of a piece'.
    We define move directions and move along them until we hit another piece or
    the edge of the board.
    """
    targets: list[Square] = []
    for delta in directions:
        target_square = square.offset(delta)
        while target_square.is_within_bounds():
            piece_found = board.piece(target_square)
            if piece_found is not None:
                # only need to add the first occupied square found if it is the opponent's: then it can be captured.
                if piece_found.color != color:
                    targets.append(target_square)
                break

            targets.append(target_square)
            target_square = target_square.offset(delta)
    return targets


def single_step_move(
    square: Square, color: Color, board: Board, deltas: tuple[Vector, ...]
) -> list[Square]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that just move a single step along a direction"""
    targets: list[Square] = []
    for delta in deltas:
        target_square = square.offset(delta)
        if not target_square.is_within_bounds():
            continue

        piece_found = board.piece(target_square)
        if piece_found is None or piece_found.color != color:
            targets.append(target_square)

    return targets


def candidate_pawn_moves(
    piece: Piece,
    square: Square,
    board: Board,
    en_passant_target: Optional[Square],
    castling_rights: CastlingRights,
) -> list[Square]:
    """
    A pawn:
    - moves by a single square forward (onto an empty square).
    - It can move by two in their first move (so when on their starting row), if both squares are empty
    - takes diagonally
    - takes en passant: diagonally onto the (empty) en passant target, capturing the pawn standing beside it.
    """
    forward = piece.color.forward
    targets: list[Square] = []

    # Pawn pushes
    one_step = square.offset((forward, 0))
    if one_step.is_within_bounds() and board.is_empty(one_step):
        targets.append(one_step)
        two_steps = square.offset((2 * forward, 0))
        if square.row == PAWN_START_ROW[piece.color] and board.is_empty(two_steps):
            targets.append(two_steps)

    # pawns take diagonally:
    for d_col in (-1, 1):
        target_square = square.offset((forward, d_col))
        if not target_square.is_within_bounds():
            continue

        piece_found = board.piece(target_square)
        if piece_found is not None and piece_found.color != piece.color:
            targets.append(target_square)
        elif target_square == en_passant_target and _is_en_passant_victim(
            piece, Square(square.row, target_square.col), board
        ):
            targets.append(target_square)
    return targets


def _is_en_passant_victim(piece: Piece, square: Square, board: Board) -> bool:
    """The pawn that just pushed two squares stands next to the capturing pawn (same row as the capturing pawn)"""
    return board.piece(square) == Piece(PieceType.PAWN, piece.color.opponent)


def candidate_knight_moves(
    piece: Piece,
    square: Square,
    board: Board,
    en_passant_target: Optional[Square],
    castling_rights: CastlingRights,
) -> list[Square]:
    """Knights always move such that |delta_row| + |delta_col| = 3"""
    return single_step_move(square, piece.color, board, KNIGHT_DELTAS)


def candidate_bishop_moves(
    piece: Piece,
    square: Square,
    board: Board,
    en_passant_target: Optional[Square],
    castling_rights: CastlingRights,
) -> list[Square]:
    """Bishops move diagonally: |delta_row| = |delta_col|"""
    return raycasting_move(square, piece.color, board, DIAGONAL_DIRECTIONS)


def candidate_rook_moves(
    piece: Piece,
    square: Square,
    board: Board,
    en_passant_target: Optional[Square],
    castling_rights: CastlingRights,
) -> list[Square]:
    """Rooks move either horizontally or vertically"""
    return raycasting_move(square, piece.color, board, STRAIGHT_DIRECTIONS)


def candidate_queen_moves(
    piece: Piece,
    square: Square,
    board: Board,
    en_passant_target: Optional[Square],
    castling_rights: CastlingRights,
) -> list[Square]:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    horizontal_and_vertical_moves = raycasting_move(
        square, piece.color, board, STRAIGHT_DIRECTIONS
    )
    diagonal_moves = raycasting_move(square, piece.color, board, DIAGONAL_DIRECTIONS)
    return horizontal_and_vertical_moves + diagonal_moves


def candidate_king_moves(
    piece: Piece,
    square: Square,
    board: Board,
    en_passant_target: Optional[Square],
    castling_rights: CastlingRights,
) -> list[Square]:
    """
    The king can move by a single square at the time.

    Castling is modelled as a special king move: two squares towards the rook.
    (moving the rook along is up to whoever applies the move to the board)
    """
    targets = single_step_move(square, piece.color, board, KING_DELTAS)
    targets.extend(candidate_castling_moves(piece, square, board, castling_rights))
    return targets


def candidate_castling_moves(
    piece: Piece, square: Square, board: Board, castling_rights: CastlingRights
) -> list[Square]:
    """
    Find the castling moves for the king standing on the given square
    ---

    **you are allowed to castle if**

    * Castling rights are not yet revoked (and king + rook still stand at home).
    * All squares in between king and rook are empty.
    * You are not currently in check (you cannot castle out of check).
    * The king does not pass through or land on a square that is under attack.
    """
    if not castling_rights.has_any(piece.color):
        return []

    opponent_color = piece.color.opponent
    own_rook = Piece(PieceType.ROOK, piece.color)
    targets: list[Square] = []
    for direction in castling_directions(piece.color):
        rule = CASTLING_RULES[direction]
        if not castling_rights.has_right(direction):
            continue

        if square != rule.king_from or board.piece(rule.rook_from) != own_rook:
            continue

        if board.is_any_occupied(rule.between):
            continue

        # Cannot castle out of a check.
        if is_attacked(square, opponent_color, board):
            return []

        if is_any_attacked(rule.king_path, opponent_color, board):
            continue

        targets.append(rule.king_to)
    return targets


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[
    [Piece, Square, Board, Optional[Square], CastlingRights], list[Square]
]
MOVEMENT_RULES: dict[PieceType, CandidateMovesFn] = {
    PieceType.PAWN: candidate_pawn_moves,
    PieceType.KNIGHT: candidate_knight_moves,
    PieceType.BISHOP: candidate_bishop_moves,
    PieceType.ROOK: candidate_rook_moves,
    PieceType.QUEEN: candidate_queen_moves,
    PieceType.KING: candidate_king_moves,
}


def pseudo_legal_moves(
    piece: Optional[Piece],
    from_square: Square,
    board: Board,
    en_passant_target: Optional[Square] = None,
    castling_rights: Optional[CastlingRights] = None,
) -> list[Square]:
    """
    Destination squares for the piece, following its movement pattern only.
    ----

    Does NOT check whether the mover's own king ends up in check.
    Querying an empty square (no piece) simply gives no moves.
    """
    if piece is None:
        return []

    rights = castling_rights if castling_rights is not None else CastlingRights.none()
    movement_rule = MOVEMENT_RULES[piece.type]
    return movement_rule(piece, from_square, board, en_passant_target, rights)
