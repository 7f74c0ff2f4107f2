"""Tests for the Qt analysis relay."""

from __future__ import annotations

import pytest
from PyQt6.QtTest import QSignalSpy

from chessreplay.engine.channel import UpdateChannel
from chessreplay.engine.qt_bridge import AnalysisRelay
from chessreplay.engine.search import EngineUpdate


@pytest.mark.usefixtures("qapp")
class TestAnalysisRelay:
    def test_emits_updates_then_finished(self) -> None:
        relay = AnalysisRelay()
        updates = QSignalSpy(relay.update_ready)
        finals = QSignalSpy(relay.final_ready)
        finished = QSignalSpy(relay.relay_finished)

        channel = UpdateChannel()
        channel.publish(EngineUpdate(evaluation=10, depth=1))
        channel.publish(EngineUpdate(evaluation=20, depth=2, is_final=True))
        channel.finish()
        relay.relay(channel)

        assert len(updates) == 2
        assert updates[0][0].depth == 1
        assert len(finals) == 1
        assert finals[0][0].is_final
        assert len(finished) == 1

    def test_invalid_channel_reports_error(self) -> None:
        relay = AnalysisRelay()
        errors = QSignalSpy(relay.relay_error)
        finished = QSignalSpy(relay.relay_finished)

        relay.relay("not a channel")

        assert len(errors) == 1
        assert "invalid update channel" in errors[0][0]
        assert len(finished) == 0
