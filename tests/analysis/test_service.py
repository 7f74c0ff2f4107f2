"""Tests for the replay analysis service."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from chessreplay.analysis import ReplayAnalyzer
from chessreplay.core.notation import STARTING_FEN
from chessreplay.engine.process import EngineProcess
from chessreplay.engine.search import EngineUpdate, SearchLimits
from chessreplay.errors import PgnLoadError
from chessreplay.game import GameReplay

PGN = "1. e4 e5 2. Nf3 Nc6 *"
AFTER_E4 = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"


class _StubSession:
    def __init__(self, fen: str) -> None:
        self.fen = fen


class _StubEngine:
    def __init__(self) -> None:
        self.analysed: list[tuple[str, SearchLimits | None]] = []
        self.cancels = 0
        self.latest_update: EngineUpdate | None = None

    def analyse(self, fen: str, limits: SearchLimits | None = None) -> _StubSession:
        self.analysed.append((fen, limits))
        return _StubSession(fen)

    def cancel_search(self) -> None:
        self.cancels += 1


@pytest.fixture
def engine() -> _StubEngine:
    return _StubEngine()


@pytest.fixture
def analyzer(engine: _StubEngine) -> ReplayAnalyzer:
    return ReplayAnalyzer(engine, GameReplay.from_pgn(PGN))  # type: ignore[arg-type]


class TestNavigation:
    def test_next_cancels_running_search(self, analyzer: ReplayAnalyzer, engine: _StubEngine) -> None:
        analyzer.analyse_current()
        assert analyzer.next()
        assert engine.cancels == 1
        assert analyzer.session is None
        assert analyzer.replay.current_ply == 1

    def test_noop_navigation_keeps_search(self, analyzer: ReplayAnalyzer, engine: _StubEngine) -> None:
        analyzer.analyse_current()
        assert not analyzer.previous()
        analyzer.reset()
        assert engine.cancels == 0
        assert analyzer.session is not None

    def test_ply_callback(self, engine: _StubEngine) -> None:
        seen: list[int] = []
        analyzer = ReplayAnalyzer(
            engine,  # type: ignore[arg-type]
            GameReplay.from_pgn(PGN),
            on_ply_changed=seen.append,
        )
        analyzer.next()
        analyzer.go_to_end()
        analyzer.go_to(4)
        analyzer.previous()
        analyzer.reset()
        assert seen == [1, 4, 3, 0]

    def test_load_pgn_replaces_game(self, analyzer: ReplayAnalyzer, engine: _StubEngine) -> None:
        analyzer.go_to_end()
        analyzer.analyse_current()
        replay = analyzer.load_pgn("1. d4 *")
        assert analyzer.replay is replay
        assert replay.total_plies == 1
        assert engine.cancels == 1

    def test_load_invalid_pgn_keeps_game(self, analyzer: ReplayAnalyzer) -> None:
        with pytest.raises(PgnLoadError):
            analyzer.load_pgn("1. e5 *")
        assert analyzer.replay.total_plies == 4


class TestAnalysis:
    def test_analyse_current_uses_displayed_fen(
        self, analyzer: ReplayAnalyzer, engine: _StubEngine
    ) -> None:
        analyzer.next()
        limits = SearchLimits(depth=8)
        analyzer.analyse_current(limits)
        assert engine.analysed == [(AFTER_E4, limits)]

    def test_analyse_ply_does_not_move_replay(
        self, analyzer: ReplayAnalyzer, engine: _StubEngine
    ) -> None:
        analyzer.analyse_ply(1)
        assert analyzer.replay.current_ply == 0
        assert engine.analysed[0][0] == AFTER_E4
        analyzer.analyse_ply(0)
        assert engine.analysed[1][0] == STARTING_FEN

    def test_analyse_ply_out_of_range(self, analyzer: ReplayAnalyzer) -> None:
        with pytest.raises(ValueError):
            analyzer.analyse_ply(5)

    def test_latest_update_from_engine(self, analyzer: ReplayAnalyzer, engine: _StubEngine) -> None:
        assert analyzer.latest_update is None
        engine.latest_update = EngineUpdate(evaluation=15, depth=3)
        assert analyzer.latest_update == engine.latest_update


class TestWithEngineProcess:
    def test_analyse_after_navigation(self, engine_factory: Callable[..., EngineProcess]) -> None:
        analyzer = ReplayAnalyzer(engine_factory("normal"), GameReplay.from_pgn(PGN))
        analyzer.next()
        session = analyzer.analyse_current(SearchLimits(depth=2))
        updates = list(session.channel)
        assert updates[-1].is_final
        # Black to move after 1. e4: scores are flipped to White's view.
        assert updates[-1].evaluation == -20
        assert analyzer.latest_update == updates[-1]
