"""Shared notation-layer data models."""

from __future__ import annotations

from dataclasses import dataclass

from chessreplay.core.move import Move
from chessreplay.core.notation.fen import STARTING_FEN


@dataclass(frozen=True, slots=True)
class GameRecord:
    """A parsed game: mainline moves in ply order plus header pairs."""

    moves: tuple[Move, ...]
    sans: tuple[str, ...] = ()
    headers: tuple[tuple[str, str], ...] = ()
    start_fen: str = STARTING_FEN
    result_token: str = "*"
    comments: tuple[str, ...] = ()

    def header(self, key: str, default: str | None = None) -> str | None:
        """First value stored under *key*."""
        for name, value in self.headers:
            if name == key:
                return value
        return default

    def __len__(self) -> int:
        return len(self.moves)
