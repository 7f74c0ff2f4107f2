"""Tests for the move-replay state machine."""

from __future__ import annotations

import pytest

from chessreplay.core.board import Board
from chessreplay.core.move import CastleMove, EnPassantMove, NormalMove
from chessreplay.core.notation import STARTING_FEN, position_at
from chessreplay.core.types import parse_square
from chessreplay.errors import PgnLoadError
from chessreplay.game import GameReplay

PGN = "1. e4 e5 2. Nf3 Nc6 3. Bb5 a6 4. Bxc6 dxc6 *"


@pytest.fixture
def replay() -> GameReplay:
    return GameReplay.from_pgn(PGN)


class TestNavigation:
    def test_starts_at_ply_zero(self, replay: GameReplay) -> None:
        assert replay.current_ply == 0
        assert replay.total_plies == 8
        assert replay.at_start
        assert replay.fen() == STARTING_FEN
        assert replay.last_move is None
        assert replay.last_san is None

    def test_next_advances(self, replay: GameReplay) -> None:
        assert replay.next()
        assert replay.current_ply == 1
        assert not replay.is_white_to_move
        assert replay.last_san == "e4"
        assert replay.last_move == NormalMove(parse_square("e2"), parse_square("e4"))

    def test_next_at_end_is_noop(self, replay: GameReplay) -> None:
        replay.go_to_end()
        fen = replay.fen()
        assert not replay.next()
        assert replay.current_ply == 8
        assert replay.fen() == fen

    def test_previous_at_start_is_noop(self, replay: GameReplay) -> None:
        assert not replay.previous()
        assert replay.current_ply == 0
        assert replay.fen() == STARTING_FEN

    def test_next_then_previous_restores_board(self, replay: GameReplay) -> None:
        for ply in range(replay.total_plies):
            before = replay.fen()
            board_before = replay.board.copy()
            assert replay.next()
            assert replay.previous()
            assert replay.fen() == before
            assert replay.board == board_before
            assert replay.current_ply == ply
            replay.next()

    def test_board_matches_position_at(self, replay: GameReplay) -> None:
        for ply in range(replay.total_plies + 1):
            replay.go_to(ply)
            assert replay.fen() == position_at(replay.moves, ply)

    def test_reset_and_go_to_end(self, replay: GameReplay) -> None:
        replay.go_to_end()
        assert replay.at_end
        assert replay.last_san == "dxc6"
        replay.reset()
        assert replay.at_start
        assert replay.fen() == STARTING_FEN

    @pytest.mark.parametrize("ply", [-1, 9])
    def test_go_to_out_of_range(self, replay: GameReplay, ply: int) -> None:
        with pytest.raises(ValueError):
            replay.go_to(ply)
        assert replay.current_ply == 0


class TestConstruction:
    def test_empty_replay(self) -> None:
        replay = GameReplay()
        assert replay.total_plies == 0
        assert not replay.next()
        assert not replay.previous()
        assert replay.at_start and replay.at_end

    def test_from_move_list(self) -> None:
        replay = GameReplay([NormalMove(parse_square("d2"), parse_square("d4"))])
        replay.next()
        assert replay.fen().split()[0] == "rnbqkbnr/pppppppp/8/8/3P4/8/PPP1PPPP/RNBQKBNR"
        assert replay.last_san is None

    def test_custom_start_fen(self) -> None:
        replay = GameReplay.from_pgn(
            '[FEN "4k3/8/8/8/8/8/4P3/4K3 w - - 0 1"]\n[SetUp "1"]\n\n1. e4 Kd7 *\n'
        )
        replay.go_to_end()
        replay.previous()
        assert replay.fen() == "4k3/8/8/8/4P3/8/8/4K3 b - e3 0 1"
        assert "start_fen" in repr(replay)

    def test_headers(self) -> None:
        replay = GameReplay.from_pgn('[White "Carol"]\n\n1. e4 *')
        assert ("White", "Carol") in replay.headers

    def test_invalid_pgn(self) -> None:
        with pytest.raises(PgnLoadError):
            GameReplay.from_pgn("1. Ke3 *")


class TestSymmetry:
    # En passant (3. exf6), promotion (5. gxh8=Q) and castling on both sides.
    SPECIAL_MOVES_PGN = (
        "1. e4 d5 2. e5 f5 3. exf6 Nc6 4. fxg7 Nf6 5. gxh8=Q Bg4 "
        "6. Nf3 e6 7. Be2 Qd7 8. O-O O-O-O *"
    )

    def test_all_forward_then_all_back_restores_initial_board(self) -> None:
        replay = GameReplay.from_pgn(self.SPECIAL_MOVES_PGN)
        kinds = {type(move) for move in replay.moves}
        assert kinds == {NormalMove, CastleMove, EnPassantMove}
        assert any(
            isinstance(move, NormalMove) and move.promotion is not None
            for move in replay.moves
        )

        for _ in range(replay.total_plies):
            assert replay.next()
        assert replay.at_end
        assert replay.board != Board.initial()

        for _ in range(replay.total_plies):
            assert replay.previous()
        assert replay.at_start
        assert replay.board == Board.initial()
        assert replay.fen() == STARTING_FEN

    def test_final_position(self) -> None:
        replay = GameReplay.from_pgn(self.SPECIAL_MOVES_PGN)
        replay.go_to_end()
        assert replay.fen() == (
            "2kr1b1Q/pppq3p/2n1pn2/3p4/6b1/5N2/PPPPBPPP/RNBQ1RK1 w - - 4 9"
        )
