"""FEN parsing and serialization."""

from __future__ import annotations

from collections.abc import Sequence
from itertools import groupby

from chessreplay.core.board import Board
from chessreplay.core.move import Move
from chessreplay.core.piece import Color, Piece
from chessreplay.core.position import CastlingRights, Position
from chessreplay.core.types import Square, make_square, parse_square, rank_of, square_name

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

_CASTLING_CHARS: tuple[tuple[str, CastlingRights], ...] = (
    ("K", CastlingRights.WHITE_KINGSIDE),
    ("Q", CastlingRights.WHITE_QUEENSIDE),
    ("k", CastlingRights.BLACK_KINGSIDE),
    ("q", CastlingRights.BLACK_QUEENSIDE),
)

_SIDES = {"w": Color.WHITE, "b": Color.BLACK}


def _expand_row(row_text: str, fen: str) -> list[Piece | None]:
    """One placement row as eight cells, file a first."""
    cells: list[Piece | None] = []
    for ch in row_text:
        if ch in "12345678":
            cells.extend([None] * int(ch))
        elif ch.isdigit():
            raise ValueError(f"Invalid FEN digit {ch!r}: {fen!r}")
        else:
            cells.append(Piece.from_char(ch))
        if len(cells) > 8:
            break
    if len(cells) != 8:
        raise ValueError(f"Invalid FEN rank width: {fen!r}")
    return cells


def _parse_placement(placement: str, fen: str) -> Board:
    rows = placement.split("/")
    if len(rows) != 8:
        raise ValueError(f"Invalid FEN board (must contain 8 ranks): {fen!r}")
    board = Board()
    for row_idx, row_text in enumerate(rows):
        for file, piece in enumerate(_expand_row(row_text, fen)):
            board[make_square(file, 7 - row_idx)] = piece
    return board


def position_from_fen(fen: str) -> Position:
    """Parse a FEN string into a :class:`Position`."""
    parts = fen.split()
    if not (4 <= len(parts) <= 6):
        raise ValueError(f"Invalid FEN (need 4-6 fields): {fen!r}")

    placement, side_part, castling_part, ep_part = parts[:4]
    board = _parse_placement(placement, fen)

    side = _SIDES.get(side_part)
    if side is None:
        raise ValueError(f"Invalid FEN side-to-move field: {side_part!r}")

    castling = CastlingRights.NONE
    if castling_part != "-":
        rights = dict(_CASTLING_CHARS)
        seen: set[str] = set()
        for ch in castling_part:
            right = rights.get(ch)
            if right is None or ch in seen:
                raise ValueError(f"Invalid FEN castling field: {castling_part!r}")
            seen.add(ch)
            castling |= right

    ep: Square | None = None
    if ep_part != "-":
        ep = parse_square(ep_part)
        expected_ep_rank = 5 if side == Color.WHITE else 2
        if rank_of(ep) != expected_ep_rank:
            raise ValueError(f"Invalid FEN en-passant square: {ep_part!r}")

    halfmove = int(parts[4]) if len(parts) > 4 else 0
    if halfmove < 0:
        raise ValueError(f"Invalid FEN halfmove clock: {parts[4]!r}")
    fullmove = int(parts[5]) if len(parts) > 5 else 1
    if fullmove < 1:
        raise ValueError(f"Invalid FEN fullmove number: {parts[5]!r}")

    return Position(board, side, castling, ep, halfmove, fullmove)


def _collapse_row(cells: Sequence[Piece | None]) -> str:
    """FEN text for one grid row; runs of empty cells become digits."""
    out: list[str] = []
    for is_empty, run in groupby(cells, key=lambda cell: cell is None):
        if is_empty:
            out.append(str(len(list(run))))
        else:
            out.extend(str(piece) for piece in run)
    return "".join(out)


def position_to_fen(pos: Position) -> str:
    """Serialise a :class:`Position` to the six-field FEN format."""
    board_str = "/".join(_collapse_row(row) for row in pos.board.rows())
    side_str = "w" if pos.side_to_move == Color.WHITE else "b"
    castling_str = "".join(ch for ch, right in _CASTLING_CHARS if pos.castling & right)
    ep_str = square_name(pos.en_passant) if pos.en_passant is not None else "-"
    return (
        f"{board_str} {side_str} {castling_str or '-'} {ep_str} "
        f"{pos.halfmove_clock} {pos.fullmove_number}"
    )


def replay_position(
    moves: Sequence[Move],
    ply: int,
    start_fen: str = STARTING_FEN,
) -> Position:
    """Position after playing ``moves[:ply]`` from *start_fen*."""
    if not (0 <= ply <= len(moves)):
        raise ValueError(f"Ply {ply} outside 0..{len(moves)}")
    pos = position_from_fen(start_fen)
    for move in moves[:ply]:
        pos.play(move)
    return pos


def position_at(
    moves: Sequence[Move],
    ply: int,
    start_fen: str = STARTING_FEN,
) -> str:
    """FEN after ``moves[:ply]``.

    Pure: builds its own board, so a live replay is never touched.
    """
    return position_to_fen(replay_position(moves, ply, start_fen))
