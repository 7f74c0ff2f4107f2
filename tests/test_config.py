"""Tests for engine settings."""

from __future__ import annotations

import pytest

from chessreplay.config import EngineSettings


class TestEngineSettings:
    def test_defaults(self) -> None:
        settings = EngineSettings()
        assert settings.command() == ["stockfish"]
        assert settings.handshake_options() == [("Threads", "4"), ("Hash", "128"), ("MultiPV", "1")]

    def test_command_with_args(self) -> None:
        settings = EngineSettings(engine_path="/usr/bin/engine", engine_args=["--uci"])
        assert settings.engine_args == ("--uci",)
        assert settings.command() == ["/usr/bin/engine", "--uci"]

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"engine_path": ""},
            {"threads": 0},
            {"hash_mb": 0},
            {"multipv": 0},
            {"default_depth": 0},
            {"poll_interval_ms": 0},
            {"handshake_timeout_ms": -1},
            {"search_timeout_ms": -1},
        ],
    )
    def test_invalid(self, kwargs: dict[str, object]) -> None:
        with pytest.raises(ValueError):
            EngineSettings(**kwargs)  # type: ignore[arg-type]
