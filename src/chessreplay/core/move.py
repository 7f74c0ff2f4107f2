"""Move value objects.

A move is one of three closed variants.  Code that consumes moves matches
on the concrete type instead of dispatching through methods.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias

from chessreplay.core.piece import PieceType
from chessreplay.core.types import Square, file_of, is_valid_square, square_name
from chessreplay.errors import ContractViolation

_PROMO_CHARS: dict[PieceType, str] = {
    PieceType.KNIGHT: "n",
    PieceType.BISHOP: "b",
    PieceType.ROOK: "r",
    PieceType.QUEEN: "q",
}

PROMOTION_TYPES = frozenset(_PROMO_CHARS)


def _check_squares(*squares: object) -> None:
    for sq in squares:
        if not is_valid_square(sq):
            raise ContractViolation(f"Square out of range: {sq!r}")


@dataclass(frozen=True, slots=True)
class NormalMove:
    """Quiet move or capture, optionally promoting."""

    from_sq: Square
    to_sq: Square
    promotion: PieceType | None = None

    def __post_init__(self) -> None:
        _check_squares(self.from_sq, self.to_sq)

    def __str__(self) -> str:
        base = f"{square_name(self.from_sq)}{square_name(self.to_sq)}"
        if self.promotion is not None:
            base += _PROMO_CHARS.get(self.promotion, "")
        return base


@dataclass(frozen=True, slots=True)
class CastleMove:
    """Castling, identified by the king and the rook it castles with."""

    king_sq: Square
    rook_sq: Square

    def __post_init__(self) -> None:
        _check_squares(self.king_sq, self.rook_sq)

    @property
    def is_kingside(self) -> bool:
        return file_of(self.rook_sq) > file_of(self.king_sq)

    @property
    def king_to(self) -> Square:
        return self.king_sq - file_of(self.king_sq) + (6 if self.is_kingside else 2)

    @property
    def rook_to(self) -> Square:
        return self.king_sq - file_of(self.king_sq) + (5 if self.is_kingside else 3)

    def __str__(self) -> str:
        return f"{square_name(self.king_sq)}{square_name(self.king_to)}"


@dataclass(frozen=True, slots=True)
class EnPassantMove:
    """Pawn capturing en passant."""

    from_sq: Square
    to_sq: Square

    def __post_init__(self) -> None:
        _check_squares(self.from_sq, self.to_sq)

    def __str__(self) -> str:
        return f"{square_name(self.from_sq)}{square_name(self.to_sq)}"


Move: TypeAlias = NormalMove | CastleMove | EnPassantMove
