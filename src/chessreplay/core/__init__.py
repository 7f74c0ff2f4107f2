"""Core domain layer: board model, moves and notation.

Quick start::

    from chessreplay.core import load_pgn, position_at

    record = load_pgn("1. e4 e5 2. Nf3 *")
    print(position_at(record.moves, 1))
"""

from chessreplay.core.apply import apply_move, en_passant_capture_square
from chessreplay.core.board import Board
from chessreplay.core.move import CastleMove, EnPassantMove, Move, NormalMove
from chessreplay.core.notation import (
    STARTING_FEN,
    GameRecord,
    load_pgn,
    load_pgn_file,
    position_at,
    position_from_fen,
    position_to_fen,
)
from chessreplay.core.piece import Color, Piece, PieceType
from chessreplay.core.position import CastlingRights, Position
from chessreplay.core.types import (
    Square,
    file_of,
    make_square,
    parse_square,
    rank_of,
    square_name,
)

__all__ = [
    # Enums
    "CastlingRights",
    "Color",
    "PieceType",
    # Types / helpers
    "Square",
    "file_of",
    "make_square",
    "parse_square",
    "rank_of",
    "square_name",
    # Domain objects
    "Board",
    "CastleMove",
    "EnPassantMove",
    "Move",
    "NormalMove",
    "Piece",
    "Position",
    "apply_move",
    "en_passant_capture_square",
    # Notation
    "STARTING_FEN",
    "GameRecord",
    "load_pgn",
    "load_pgn_file",
    "position_at",
    "position_from_fen",
    "position_to_fen",
]
