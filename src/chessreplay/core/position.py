"""Position: board plus the game-state fields a FEN string carries."""

from __future__ import annotations

from enum import IntFlag

from chessreplay.core.apply import apply_move
from chessreplay.core.board import Board
from chessreplay.core.move import CastleMove, EnPassantMove, Move, NormalMove
from chessreplay.core.piece import Color, Piece, PieceType
from chessreplay.core.types import Square, file_of, make_square, rank_of


class CastlingRights(IntFlag):
    """Castling still available, one bit per king/rook pair (FEN ``KQkq``)."""

    NONE = 0
    WHITE_KINGSIDE = 1
    WHITE_QUEENSIDE = 2
    BLACK_KINGSIDE = 4
    BLACK_QUEENSIDE = 8

    WHITE_BOTH = 3
    BLACK_BOTH = 12
    ALL = 15


_ROOK_CORNERS: dict[Square, CastlingRights] = {
    make_square(0, 0): CastlingRights.WHITE_QUEENSIDE,
    make_square(7, 0): CastlingRights.WHITE_KINGSIDE,
    make_square(0, 7): CastlingRights.BLACK_QUEENSIDE,
    make_square(7, 7): CastlingRights.BLACK_KINGSIDE,
}

_COLOR_RIGHTS: dict[Color, CastlingRights] = {
    Color.WHITE: CastlingRights.WHITE_BOTH,
    Color.BLACK: CastlingRights.BLACK_BOTH,
}


class Position:
    """Board + side to move + castling + en passant + clocks.

    Moves only go forward through :meth:`play`; stepping back is done by
    replaying from a start position.
    """

    __slots__ = (
        "board",
        "side_to_move",
        "castling",
        "en_passant",
        "halfmove_clock",
        "fullmove_number",
    )

    def __init__(
        self,
        board: Board | None = None,
        side_to_move: Color = Color.WHITE,
        castling: CastlingRights = CastlingRights.ALL,
        en_passant: Square | None = None,
        halfmove_clock: int = 0,
        fullmove_number: int = 1,
    ) -> None:
        self.board = board if board is not None else Board.initial()
        self.side_to_move = side_to_move
        self.castling = castling
        self.en_passant = en_passant
        self.halfmove_clock = halfmove_clock
        self.fullmove_number = fullmove_number

    @classmethod
    def initial(cls) -> Position:
        return cls()

    # ── Move application ─────────────────────────────────────────────────

    def play(self, move: Move) -> None:
        """Apply *move* to the board and advance the FEN metadata."""
        mover, is_capture = self._describe(move)
        apply_move(self.board, move)

        self.en_passant = self._next_en_passant(move, mover)
        self._update_castling(move, mover)

        is_pawn_move = mover is not None and mover.piece_type == PieceType.PAWN
        if is_pawn_move or is_capture:
            self.halfmove_clock = 0
        else:
            self.halfmove_clock += 1

        if self.side_to_move == Color.BLACK:
            self.fullmove_number += 1
        self.side_to_move = self.side_to_move.opposite

    def _describe(self, move: Move) -> tuple[Piece | None, bool]:
        """Moving piece and whether the move captures, read before applying."""
        match move:
            case CastleMove():
                return self.board[move.king_sq], False
            case EnPassantMove():
                return self.board[move.from_sq], True
            case NormalMove():
                return self.board[move.from_sq], self.board[move.to_sq] is not None
        # Unknown types are rejected by apply_move.
        return None, False

    @staticmethod
    def _next_en_passant(move: Move, mover: Piece | None) -> Square | None:
        if not isinstance(move, NormalMove) or mover is None:
            return None
        if mover.piece_type != PieceType.PAWN:
            return None
        if abs(rank_of(move.to_sq) - rank_of(move.from_sq)) != 2:
            return None
        return make_square(
            file_of(move.from_sq),
            (rank_of(move.from_sq) + rank_of(move.to_sq)) // 2,
        )

    def _update_castling(self, move: Move, mover: Piece | None) -> None:
        rights = self.castling
        if mover is not None and mover.piece_type == PieceType.KING:
            rights &= ~_COLOR_RIGHTS[mover.color]

        match move:
            case CastleMove():
                touched: tuple[Square, ...] = (move.king_sq, move.rook_sq)
            case NormalMove() | EnPassantMove():
                touched = (move.from_sq, move.to_sq)
            case _:
                touched = ()
        for sq in touched:
            if sq in _ROOK_CORNERS:
                rights &= ~_ROOK_CORNERS[sq]
        self.castling = rights

    # ── Utilities ────────────────────────────────────────────────────────

    def copy(self) -> Position:
        return Position(
            board=self.board.copy(),
            side_to_move=self.side_to_move,
            castling=self.castling,
            en_passant=self.en_passant,
            halfmove_clock=self.halfmove_clock,
            fullmove_number=self.fullmove_number,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Position):
            return NotImplemented
        return (
            self.board == other.board
            and self.side_to_move == other.side_to_move
            and self.castling == other.castling
            and self.en_passant == other.en_passant
            and self.halfmove_clock == other.halfmove_clock
            and self.fullmove_number == other.fullmove_number
        )
