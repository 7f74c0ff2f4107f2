"""Replay analysis service: ties a :class:`GameReplay` to an engine."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from chessreplay.core.notation import position_to_fen, replay_position
from chessreplay.engine.search import EngineUpdate, SearchLimits
from chessreplay.engine.session import SearchSession
from chessreplay.game.replay import GameReplay

_LOGGER = logging.getLogger(__name__)


class AnalysisEngine(Protocol):
    """Subset of :class:`EngineProcess` used by :class:`ReplayAnalyzer`."""

    def analyse(self, fen: str, limits: SearchLimits | None = None) -> SearchSession: ...

    def cancel_search(self) -> None: ...

    @property
    def latest_update(self) -> EngineUpdate | None: ...


class ReplayAnalyzer:
    """Navigates a replay and analyses the displayed position on demand.

    Moving to another ply cancels whatever search was running, so updates
    on a session's channel always describe the position it was started for.
    """

    __slots__ = ("_engine", "_replay", "_session", "_on_ply_changed")

    def __init__(
        self,
        engine: AnalysisEngine,
        replay: GameReplay | None = None,
        *,
        on_ply_changed: Callable[[int], None] | None = None,
    ) -> None:
        self._engine = engine
        self._replay = replay or GameReplay()
        self._session: SearchSession | None = None
        self._on_ply_changed = on_ply_changed

    @property
    def replay(self) -> GameReplay:
        return self._replay

    @property
    def session(self) -> SearchSession | None:
        return self._session

    @property
    def latest_update(self) -> EngineUpdate | None:
        return self._engine.latest_update

    # ── Loading ──────────────────────────────────────────────────────────

    def load_pgn(self, pgn_text: str) -> GameReplay:
        """Replace the current game; raises :class:`PgnLoadError`."""
        replay = GameReplay.from_pgn(pgn_text)
        self.cancel()
        self._replay = replay
        _LOGGER.info("Loaded game with %d plies", replay.total_plies)
        self._notify_ply()
        return replay

    # ── Navigation ───────────────────────────────────────────────────────

    def next(self) -> bool:
        return self._navigate(self._replay.next)

    def previous(self) -> bool:
        return self._navigate(self._replay.previous)

    def reset(self) -> None:
        self._jump(self._replay.reset)

    def go_to_end(self) -> None:
        self._jump(self._replay.go_to_end)

    def go_to(self, ply: int) -> None:
        self._jump(lambda: self._replay.go_to(ply))

    def _navigate(self, step: Callable[[], bool]) -> bool:
        if not step():
            return False
        self.cancel()
        self._notify_ply()
        return True

    def _jump(self, action: Callable[[], None]) -> None:
        before = self._replay.current_ply
        action()
        if self._replay.current_ply != before:
            self.cancel()
            self._notify_ply()

    def _notify_ply(self) -> None:
        if self._on_ply_changed is not None:
            self._on_ply_changed(self._replay.current_ply)

    # ── Analysis ─────────────────────────────────────────────────────────

    def analyse_current(self, limits: SearchLimits | None = None) -> SearchSession:
        """Start analysing the position currently shown."""
        return self._start(self._replay.fen(), limits)

    def analyse_ply(self, ply: int, limits: SearchLimits | None = None) -> SearchSession:
        """Analyse any ply without moving the displayed replay."""
        position = replay_position(self._replay.moves, ply, self._replay.start_fen)
        _LOGGER.debug("Analysing ply %d (%s to move)", ply, position.side_to_move)
        return self._start(position_to_fen(position), limits)

    def _start(self, fen: str, limits: SearchLimits | None) -> SearchSession:
        self._session = self._engine.analyse(fen, limits)
        return self._session

    def cancel(self) -> None:
        """Cancel the running search, if any."""
        if self._session is None:
            return
        self._engine.cancel_search()
        self._session = None
