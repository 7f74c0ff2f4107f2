"""Replay analysis APIs."""

from chessreplay.analysis.service import AnalysisEngine, ReplayAnalyzer

__all__ = ["AnalysisEngine", "ReplayAnalyzer"]
