"""Exception taxonomy shared by the replay core and the engine layer."""

from __future__ import annotations


class ChessReplayError(Exception):
    """Base class for all package errors."""


class ContractViolation(ChessReplayError, ValueError):
    """A structurally invalid move reached the board layer.

    Moves come from the PGN adapter and are trusted to be well formed, so
    this signals a programming error rather than bad user input.
    """


class PgnLoadError(ChessReplayError):
    """The PGN text held no game or could not be parsed."""


class ParseWarning(ChessReplayError, ValueError):
    """An engine output line did not match the expected pattern."""


class ReceiverGone(ChessReplayError):
    """The consumer closed its end of an update channel."""


class EngineError(ChessReplayError):
    """Base class for engine process failures."""


class ProcessSpawnError(EngineError):
    """The engine executable could not be started."""


class EngineIOError(EngineError):
    """The engine pipe is closed or the process has exited."""


class ProtocolTimeout(EngineError):
    """The engine did not answer with *token* within *timeout_ms*."""

    def __init__(self, token: str, timeout_ms: int) -> None:
        super().__init__(f"Timeout waiting for {token!r} after {timeout_ms} ms")
        self.token = token
        self.timeout_ms = timeout_ms
