"""Shared engine search models."""

from __future__ import annotations

from dataclasses import dataclass

from chessreplay.core.types import Square, square_name

MATE_SCORE = 1000

BestMove = tuple[Square, Square]


@dataclass(slots=True, frozen=True)
class SearchLimits:
    """How long a single search runs.

    ``depth`` wins over ``movetime_ms``; with neither set the engine
    settings' default depth is used.
    """

    depth: int | None = None
    movetime_ms: int | None = None

    def __post_init__(self) -> None:
        if self.depth is not None and self.depth < 1:
            raise ValueError("Search depth must be >= 1")
        if self.movetime_ms is not None and self.movetime_ms < 1:
            raise ValueError("Search movetime must be >= 1 ms")


@dataclass(slots=True, frozen=True)
class EngineUpdate:
    """One analysis event.

    ``evaluation`` is in centipawns from White's point of view; forced
    mates are reported as ``±MATE_SCORE``.
    """

    best_move: BestMove | None = None
    evaluation: int | None = None
    depth: int | None = None
    is_final: bool = False

    @property
    def best_move_uci(self) -> str | None:
        if self.best_move is None:
            return None
        from_sq, to_sq = self.best_move
        return square_name(from_sq) + square_name(to_sq)

    @property
    def is_mate(self) -> bool:
        return self.evaluation is not None and abs(self.evaluation) >= MATE_SCORE
