"""Move-replay state machine: step through a recorded game ply by ply."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from chessreplay.core.board import Board
from chessreplay.core.piece import Color
from chessreplay.core.move import Move
from chessreplay.core.notation import (
    STARTING_FEN,
    GameRecord,
    load_pgn,
    position_from_fen,
    position_to_fen,
)
from chessreplay.core.position import Position

_LOGGER = logging.getLogger(__name__)


class GameReplay:
    """Holds an immutable move list and the position at the current ply.

    The board always equals "moves ``[0, current_ply)`` applied to the start
    position".  Stepping back rebuilds from the start instead of undoing,
    so no reversal data is stored per move.
    """

    __slots__ = ("_record", "_position", "_current_ply")

    def __init__(self, record: GameRecord | Iterable[Move] | None = None) -> None:
        if record is None:
            record = GameRecord(moves=())
        elif not isinstance(record, GameRecord):
            record = GameRecord(moves=tuple(record))
        self._record = record
        self._position = position_from_fen(record.start_fen)
        self._current_ply = 0

    @classmethod
    def from_pgn(cls, pgn_text: str) -> GameReplay:
        """Build a replay from PGN text; raises :class:`PgnLoadError`."""
        return cls(load_pgn(pgn_text))

    # ── Navigation ───────────────────────────────────────────────────────

    def next(self) -> bool:
        """Play the next move. Returns False at the last ply."""
        if self._current_ply >= self.total_plies:
            return False
        self._position.play(self._record.moves[self._current_ply])
        self._current_ply += 1
        return True

    def previous(self) -> bool:
        """Step back one ply. Returns False at the start."""
        if self._current_ply == 0:
            return False
        self._rebuild(self._current_ply - 1)
        _LOGGER.debug("Stepped back to ply %d", self._current_ply)
        return True

    def reset(self) -> None:
        """Return to the start position."""
        self._rebuild(0)

    def go_to_end(self) -> None:
        """Jump to the final ply."""
        self.reset()
        for _ in range(self.total_plies):
            self.next()

    def go_to(self, ply: int) -> None:
        """Jump to an arbitrary ply in ``[0, total_plies]``."""
        if not (0 <= ply <= self.total_plies):
            raise ValueError(f"Ply {ply} outside 0..{self.total_plies}")
        self._rebuild(ply)

    def _rebuild(self, ply: int) -> None:
        self._position = position_from_fen(self._record.start_fen)
        self._current_ply = 0
        for _ in range(ply):
            self.next()

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def record(self) -> GameRecord:
        return self._record

    @property
    def moves(self) -> tuple[Move, ...]:
        return self._record.moves

    @property
    def headers(self) -> tuple[tuple[str, str], ...]:
        return self._record.headers

    @property
    def start_fen(self) -> str:
        return self._record.start_fen

    @property
    def current_ply(self) -> int:
        return self._current_ply

    @property
    def total_plies(self) -> int:
        return len(self._record.moves)

    @property
    def board(self) -> Board:
        return self._position.board

    @property
    def position(self) -> Position:
        return self._position

    @property
    def is_white_to_move(self) -> bool:
        return self._position.side_to_move == Color.WHITE

    @property
    def at_start(self) -> bool:
        return self._current_ply == 0

    @property
    def at_end(self) -> bool:
        return self._current_ply == self.total_plies

    @property
    def last_move(self) -> Move | None:
        """Move that produced the current position, if any."""
        if self._current_ply == 0:
            return None
        return self._record.moves[self._current_ply - 1]

    @property
    def last_san(self) -> str | None:
        if self._current_ply == 0 or not self._record.sans:
            return None
        return self._record.sans[self._current_ply - 1]

    def fen(self) -> str:
        """FEN of the current ply."""
        return position_to_fen(self._position)

    def __repr__(self) -> str:
        text = f"GameReplay(ply={self._current_ply}/{self.total_plies}"
        if self._record.start_fen != STARTING_FEN:
            text += f", start_fen={self._record.start_fen!r}"
        return text + ")"
