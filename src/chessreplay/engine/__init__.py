"""Engine package: UCI process supervisor, streaming searches and Qt bridge."""

from chessreplay.engine.channel import UpdateChannel
from chessreplay.engine.process import EngineProcess
from chessreplay.engine.search import MATE_SCORE, EngineUpdate, SearchLimits
from chessreplay.engine.session import SearchSession

__all__ = [
    "MATE_SCORE",
    "EngineProcess",
    "EngineUpdate",
    "SearchLimits",
    "SearchSession",
    "UpdateChannel",
]
