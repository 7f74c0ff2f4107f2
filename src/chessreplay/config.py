"""Engine settings."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class EngineSettings:
    """All tunables of the engine supervisor and its searches."""

    # Process
    engine_path: str = "stockfish"
    engine_args: tuple[str, ...] = ()
    debug: bool = False

    # UCI options sent during the handshake
    threads: int = 4
    hash_mb: int = 128
    multipv: int = 1

    # Searching
    default_depth: int = 16
    poll_interval_ms: int = 100

    # Timeouts
    handshake_timeout_ms: int = 5000
    search_timeout_ms: int = 30000  # used when a search has no movetime
    timeout_grace_ms: int = 5000
    stop_timeout_ms: int = 2000
    shutdown_timeout_ms: int = 2000

    def __post_init__(self) -> None:
        if not self.engine_path:
            raise ValueError("engine_path must not be empty")
        self.engine_args = tuple(self.engine_args)
        for name in ("threads", "hash_mb", "multipv", "default_depth", "poll_interval_ms"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1")
        for name in (
            "handshake_timeout_ms",
            "search_timeout_ms",
            "timeout_grace_ms",
            "stop_timeout_ms",
            "shutdown_timeout_ms",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")

    def command(self) -> list[str]:
        """argv used to launch the engine."""
        return [self.engine_path, *self.engine_args]

    def handshake_options(self) -> list[tuple[str, str]]:
        """UCI options applied right after ``uciok``."""
        return [
            ("Threads", str(self.threads)),
            ("Hash", str(self.hash_mb)),
            ("MultiPV", str(self.multipv)),
        ]
