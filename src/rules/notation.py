"""
Standard algebraic notation (SAN) of a move that has been made.

Pure formatting: all flags (capture, check, checkmate, castling) are computed by the caller from the position after the move.
"""

from typing import Optional

from src.rules.pieces import PIECE_TO_FEN, Piece, PieceType
from src.rules.square import Square

KING_SIDE_CASTLE = "O-O"
QUEEN_SIDE_CASTLE = "O-O-O"


def encode(
    piece: Piece,
    from_square: Square,
    to_square: Square,
    is_capture: bool = False,
    is_check: bool = False,
    is_checkmate: bool = False,
    is_castling: bool = False,
    promotion: Optional[PieceType] = None,
) -> str:
    """
    examples: "Nf3", "exd5", "Qxf7#", "e8=Q+", "O-O-O"

    * castling: O-O when the king moves towards the h-file, O-O-O towards the a-file.
    * pieces other than pawns start with their letter.
    * pawn captures start with the file the pawn came from.
    * captures put an 'x' before the destination square.
    * promotion adds '=' and the letter of the new piece.
    * checkmate ends in '#', a plain check in '+'.
    """
    if is_castling:
        notation = (
            KING_SIDE_CASTLE if to_square.col > from_square.col else QUEEN_SIDE_CASTLE
        )
    else:
        notation = _encode_regular_move(
            piece, from_square, to_square, is_capture, promotion
        )

    if is_checkmate:
        return f"{notation}#"
    if is_check:
        return f"{notation}+"
    return notation


def _encode_regular_move(
    piece: Piece,
    from_square: Square,
    to_square: Square,
    is_capture: bool,
    promotion: Optional[PieceType],
) -> str:
    is_pawn = piece.type == PieceType.PAWN
    parts: list[str] = []
    if not is_pawn:
        parts.append(piece.letter)

    if is_capture:
        if is_pawn:
            parts.append(from_square.file_name)
        parts.append("x")

    parts.append(to_square.to_algebraic())

    if promotion is not None:
        parts.append(f"={PIECE_TO_FEN[promotion].upper()}")
    return "".join(parts)
