"""PGN loading through python-chess.

python-chess tokenizes the movetext and resolves SAN; this module only
converts its output into :class:`GameRecord` and the local move types.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path

import chess
import chess.pgn

from chessreplay.core.move import CastleMove, EnPassantMove, Move, NormalMove
from chessreplay.core.notation.fen import STARTING_FEN
from chessreplay.core.notation.models import GameRecord
from chessreplay.core.piece import PieceType
from chessreplay.core.types import make_square, rank_of
from chessreplay.errors import PgnLoadError

_LOGGER = logging.getLogger(__name__)

_PROMOTIONS: dict[chess.PieceType, PieceType] = {
    chess.KNIGHT: PieceType.KNIGHT,
    chess.BISHOP: PieceType.BISHOP,
    chess.ROOK: PieceType.ROOK,
    chess.QUEEN: PieceType.QUEEN,
}


def convert_move(board: chess.Board, move: chess.Move) -> Move:
    """Translate a python-chess move played from *board*."""
    if board.is_castling(move):
        rook_file = 7 if board.is_kingside_castling(move) else 0
        rook_sq = make_square(rook_file, rank_of(move.from_square))
        return CastleMove(move.from_square, rook_sq)
    if board.is_en_passant(move):
        return EnPassantMove(move.from_square, move.to_square)
    promotion = _PROMOTIONS[move.promotion] if move.promotion else None
    return NormalMove(move.from_square, move.to_square, promotion)


def load_pgn(pgn_text: str) -> GameRecord:
    """Parse the first game in *pgn_text* (mainline only)."""
    try:
        game = chess.pgn.read_game(io.StringIO(pgn_text))
    except ValueError as exc:
        raise PgnLoadError(f"PGN load failed: {exc}") from exc

    if game is None:
        raise PgnLoadError("PGN load failed: no game found")
    if game.errors:
        raise PgnLoadError(f"PGN load failed: {game.errors[0]}") from game.errors[0]

    try:
        board = game.board()
    except ValueError as exc:
        raise PgnLoadError(f"PGN load failed: {exc}") from exc
    start_fen = board.fen() if "FEN" in game.headers else STARTING_FEN

    moves: list[Move] = []
    sans: list[str] = []
    comments: list[str] = []
    for node in game.mainline():
        sans.append(board.san(node.move))
        moves.append(convert_move(board, node.move))
        comments.append(" ".join(node.comment.split()))
        board.push(node.move)

    record = GameRecord(
        moves=tuple(moves),
        sans=tuple(sans),
        headers=tuple(game.headers.items()),
        start_fen=start_fen,
        result_token=game.headers.get("Result", "*"),
        comments=tuple(comments),
    )
    _LOGGER.debug("Loaded PGN game with %d plies", len(record))
    return record


def load_pgn_file(file_path: Path) -> GameRecord:
    """Load the first game stored in a PGN file."""
    return load_pgn(file_path.read_text(encoding="utf-8"))
