"""UCI wire format: outgoing command builders and output-line parsers.

Parsers raise :class:`ParseWarning` for lines that look like the expected
kind but cannot be decoded; callers skip such lines.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from chessreplay.core.types import parse_square
from chessreplay.engine.search import MATE_SCORE, BestMove, EngineUpdate, SearchLimits
from chessreplay.errors import ParseWarning

_LOGGER = logging.getLogger(__name__)

NO_MOVE = "(none)"


# ── Commands ─────────────────────────────────────────────────────────────────


def position_command(fen: str | None) -> str:
    if fen is None:
        return "position startpos"
    return f"position fen {fen}"


def setoption_command(name: str, value: object) -> str:
    return f"setoption name {name} value {value}"


def go_command(limits: SearchLimits, default_depth: int) -> str:
    if limits.depth is not None:
        return f"go depth {limits.depth}"
    if limits.movetime_ms is not None:
        return f"go movetime {limits.movetime_ms}"
    return f"go depth {default_depth}"


# ── Parsing ──────────────────────────────────────────────────────────────────


@dataclass(slots=True, frozen=True)
class InfoLine:
    """Decoded progress line."""

    depth: int
    evaluation: int
    best_move: BestMove


def parse_uci_move(text: str) -> BestMove:
    """``e2e4`` / ``e7e8q`` → ``(from_sq, to_sq)``."""
    if len(text) not in (4, 5):
        raise ParseWarning(f"Invalid UCI move: {text!r}")
    try:
        return parse_square(text[0:2]), parse_square(text[2:4])
    except ValueError:
        raise ParseWarning(f"Invalid UCI move: {text!r}") from None


def is_progress_line(line: str) -> bool:
    """Whether *line* carries depth, score and principal variation."""
    tokens = line.split()
    return (
        bool(tokens)
        and tokens[0] == "info"
        and "depth" in tokens
        and "score" in tokens
        and "pv" in tokens
    )


def is_bestmove_line(line: str) -> bool:
    return line.split(maxsplit=1)[:1] == ["bestmove"]


def _token_after(tokens: list[str], marker: str, line: str) -> str:
    try:
        return tokens[tokens.index(marker) + 1]
    except (ValueError, IndexError):
        raise ParseWarning(f"Missing {marker!r} value in: {line!r}") from None


def _to_int(text: str, line: str) -> int:
    try:
        return int(text)
    except ValueError:
        raise ParseWarning(f"Not an integer {text!r} in: {line!r}") from None


def white_relative(score: int, is_white_move: bool) -> int:
    """Engine scores are relative to the side to move; flip for Black."""
    return score if is_white_move else -score


def parse_score(tokens: list[str], line: str, is_white_move: bool) -> int:
    kind = _token_after(tokens, "score", line)
    value = _to_int(_token_after(tokens, kind, line), line)
    if kind == "cp":
        return white_relative(value, is_white_move)
    if kind == "mate":
        # "mate 0" means the side to move is already mated.
        mate = MATE_SCORE if value > 0 else -MATE_SCORE
        return white_relative(mate, is_white_move)
    raise ParseWarning(f"Unknown score kind {kind!r} in: {line!r}")


def parse_info_line(line: str, is_white_move: bool) -> InfoLine:
    """Decode an ``info depth … score … pv …`` line."""
    tokens = line.split()
    depth = _to_int(_token_after(tokens, "depth", line), line)
    evaluation = parse_score(tokens, line, is_white_move)
    best_move = parse_uci_move(_token_after(tokens, "pv", line))
    return InfoLine(depth=depth, evaluation=evaluation, best_move=best_move)


def parse_bestmove_line(line: str) -> BestMove | None:
    """Decode ``bestmove <move> [ponder …]``; ``(none)`` gives None."""
    tokens = line.split()
    if len(tokens) < 2 or tokens[0] != "bestmove":
        raise ParseWarning(f"Invalid bestmove line: {line!r}")
    if tokens[1] == NO_MOVE:
        return None
    return parse_uci_move(tokens[1])


def summarize_search(lines: Iterable[str], is_white_move: bool) -> EngineUpdate:
    """Final update built from the complete output of one search."""
    best_move: BestMove | None = None
    evaluation: int | None = None
    depth: int | None = None
    for line in lines:
        tokens = line.split()
        try:
            if is_bestmove_line(line):
                best_move = parse_bestmove_line(line)
            elif tokens[:1] == ["info"] and "score" in tokens:
                evaluation = parse_score(tokens, line, is_white_move)
                if "depth" in tokens:
                    depth = _to_int(_token_after(tokens, "depth", line), line)
        except ParseWarning as exc:
            _LOGGER.debug("Skipping engine line: %s", exc)
    return EngineUpdate(
        best_move=best_move,
        evaluation=evaluation,
        depth=depth,
        is_final=True,
    )
