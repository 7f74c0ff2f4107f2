"""Board - piece placement on a fixed 8x8 grid."""

from __future__ import annotations

from collections.abc import Iterator

from chessreplay.core.piece import Color, Piece, PieceType
from chessreplay.core.types import Square, file_of, make_square, rank_of

_SIZE = 8

_BACK_RANK = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)


def _cell(sq: Square) -> tuple[int, int]:
    """Grid (row, col) for a square; row 0 is rank 8."""
    return _SIZE - 1 - rank_of(sq), file_of(sq)


class Board:
    """Mutable 8x8 grid, row-major, row 0 = rank 8 through row 7 = rank 1.

    The grid shape never changes: mutation only swaps cell contents.
    """

    __slots__ = ("_grid",)

    def __init__(self) -> None:
        self._grid: list[list[Piece | None]] = [
            [None] * _SIZE for _ in range(_SIZE)
        ]

    # -- Element access -----------------------------------------------------

    def __getitem__(self, sq: Square) -> Piece | None:
        row, col = _cell(sq)
        return self._grid[row][col]

    def __setitem__(self, sq: Square, piece: Piece | None) -> None:
        row, col = _cell(sq)
        self._grid[row][col] = piece

    def is_empty(self, sq: Square) -> bool:
        return self[sq] is None

    def rows(self) -> tuple[tuple[Piece | None, ...], ...]:
        """Snapshot of the grid in storage order (rank 8 first)."""
        return tuple(tuple(row) for row in self._grid)

    def __iter__(self) -> Iterator[tuple[Square, Piece]]:
        """Occupied squares as ``(square, piece)`` pairs."""
        for sq in range(64):
            piece = self[sq]
            if piece is not None:
                yield sq, piece

    # -- Mutation primitives ------------------------------------------------

    def move_piece(self, from_sq: Square, to_sq: Square) -> None:
        """Relocate whatever sits on *from_sq*; the source becomes empty."""
        piece = self[from_sq]
        self[from_sq] = None
        self[to_sq] = piece

    def remove(self, sq: Square) -> Piece | None:
        """Empty *sq* and return the piece that was there."""
        piece = self[sq]
        self[sq] = None
        return piece

    def copy(self) -> Board:
        b = Board()
        b._grid = [row.copy() for row in self._grid]
        return b

    def clear(self) -> None:
        for row in self._grid:
            row[:] = [None] * _SIZE

    # -- Query helpers ------------------------------------------------------

    def pieces(self, color: Color, piece_type: PieceType) -> list[Square]:
        """Squares occupied by *color*'s *piece_type*."""
        target = Piece(color, piece_type)
        return [sq for sq, piece in self if piece == target]

    # -- Factory ------------------------------------------------------------

    @classmethod
    def initial(cls) -> Board:
        """Standard starting position."""
        b = cls()
        for f, pt in enumerate(_BACK_RANK):
            b[make_square(f, 0)] = Piece(Color.WHITE, pt)
            b[make_square(f, 1)] = Piece(Color.WHITE, PieceType.PAWN)
            b[make_square(f, 6)] = Piece(Color.BLACK, PieceType.PAWN)
            b[make_square(f, 7)] = Piece(Color.BLACK, pt)
        return b

    # -- Dunder helpers -----------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._grid == other._grid

    def __repr__(self) -> str:
        rows: list[str] = []
        for row_idx, row in enumerate(self._grid):
            cells = " ".join(str(p) if p else "." for p in row)
            rows.append(f"{_SIZE - row_idx} {cells}")
        rows.append("  a b c d e f g h")
        return "\n".join(rows)
