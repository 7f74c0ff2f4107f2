"""Notation package: FEN serialization and PGN loading."""

from chessreplay.core.notation.fen import (
    STARTING_FEN,
    position_at,
    position_from_fen,
    position_to_fen,
    replay_position,
)
from chessreplay.core.notation.models import GameRecord
from chessreplay.core.notation.pgn import convert_move, load_pgn, load_pgn_file

__all__ = [
    "STARTING_FEN",
    "GameRecord",
    "convert_move",
    "load_pgn",
    "load_pgn_file",
    "position_at",
    "position_from_fen",
    "position_to_fen",
    "replay_position",
]
