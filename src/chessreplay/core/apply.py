"""Move application onto a :class:`Board`.

No legality checks happen here: the move list is trusted to be legal.
Only structural problems (unknown move types, impossible promotions) are
rejected, with :class:`ContractViolation`.
"""

from __future__ import annotations

from chessreplay.core.board import Board
from chessreplay.core.move import (
    PROMOTION_TYPES,
    CastleMove,
    EnPassantMove,
    Move,
    NormalMove,
)
from chessreplay.core.piece import PieceType
from chessreplay.core.types import Square, file_of, make_square, rank_of
from chessreplay.errors import ContractViolation


def en_passant_capture_square(move: EnPassantMove) -> Square:
    """Square of the pawn taken en passant.

    It sits beside the capturing pawn: destination file, source rank.
    """
    return make_square(file_of(move.to_sq), rank_of(move.from_sq))


def apply_move(board: Board, move: Move) -> None:
    """Mutate *board* in place by playing *move*."""
    match move:
        case NormalMove(from_sq=from_sq, to_sq=to_sq, promotion=promotion):
            _apply_normal(board, from_sq, to_sq, promotion)
        case CastleMove():
            board.move_piece(move.king_sq, move.king_to)
            board.move_piece(move.rook_sq, move.rook_to)
        case EnPassantMove(from_sq=from_sq, to_sq=to_sq):
            board.move_piece(from_sq, to_sq)
            board.remove(en_passant_capture_square(move))
        case _:
            raise ContractViolation(f"Unexpected move type: {move!r}")


def _apply_normal(
    board: Board,
    from_sq: Square,
    to_sq: Square,
    promotion: PieceType | None,
) -> None:
    if promotion is None:
        board.move_piece(from_sq, to_sq)
        return

    if promotion not in PROMOTION_TYPES:
        raise ContractViolation(f"Invalid promotion piece: {promotion!r}")
    piece = board[from_sq]
    if piece is None:
        raise ContractViolation("Promotion from an empty square has no colour")
    board.move_piece(from_sq, to_sq)
    board[to_sq] = piece.promoted(PieceType(promotion))
