"""Piece value object and the colour / kind enumerations it is built from.

An empty square is represented by ``None`` rather than a "no piece" value,
so a piece always has both a kind and a colour.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class Color(IntEnum):
    WHITE = 0
    BLACK = 1

    @property
    def opposite(self) -> Color:
        return Color.BLACK if self is Color.WHITE else Color.WHITE

    def __str__(self) -> str:
        return "white" if self is Color.WHITE else "black"


class PieceType(IntEnum):
    """Piece kinds; the value indexes the FEN letter table below."""

    PAWN = 1
    KNIGHT = 2
    BISHOP = 3
    ROOK = 4
    QUEEN = 5
    KING = 6


# Lowercase FEN letter per kind; white pieces use the uppercase form.
_LETTERS = "pnbrqk"


@dataclass(frozen=True, slots=True)
class Piece:
    """Immutable chess piece."""

    color: Color
    piece_type: PieceType

    def __str__(self) -> str:
        """FEN character (uppercase = white, lowercase = black)."""
        letter = _LETTERS[self.piece_type - 1]
        return letter.upper() if self.color == Color.WHITE else letter

    @classmethod
    def from_char(cls, char: str) -> Piece:
        """Create piece from FEN character, e.g. 'N' → white knight."""
        index = _LETTERS.find(char.lower()) if len(char) == 1 else -1
        if index < 0:
            raise ValueError(f"Invalid piece character: {char!r}")
        color = Color.WHITE if char.isupper() else Color.BLACK
        return cls(color, PieceType(index + 1))

    def promoted(self, piece_type: PieceType) -> Piece:
        """Same colour, new kind."""
        return Piece(self.color, piece_type)
