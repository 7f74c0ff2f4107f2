"""UCI engine process supervisor.

Owns one engine subprocess: serialized writes to its stdin, a reader
thread that fans every stdout line out to the response buffer and to any
subscribed search sessions, the startup handshake and a scoped shutdown.
"""

from __future__ import annotations

import logging
import queue
import subprocess
import threading
import time
from types import TracebackType

from chessreplay.config import EngineSettings
from chessreplay.core.piece import Color
from chessreplay.core.notation import position_from_fen
from chessreplay.engine import protocol
from chessreplay.engine.search import EngineUpdate, SearchLimits
from chessreplay.engine.session import SearchSession
from chessreplay.errors import EngineIOError, ProcessSpawnError, ProtocolTimeout

_LOGGER = logging.getLogger(__name__)

LineChannel = queue.Queue[str | None]


class _ResponseBuffer:
    """Ordered engine output awaiting a synchronous reader.

    Lines are handed out at most once: a successful wait drains the whole
    buffer.
    """

    __slots__ = ("_lines", "_cond", "_closed")

    def __init__(self) -> None:
        self._lines: list[str] = []
        self._cond = threading.Condition()
        self._closed = False

    def append(self, line: str) -> None:
        with self._cond:
            self._lines.append(line)
            self._cond.notify_all()

    def clear(self) -> None:
        with self._cond:
            self._lines.clear()

    def reset(self) -> None:
        with self._cond:
            self._lines.clear()
            self._closed = False

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def wait_for(self, token: str, timeout_s: float) -> list[str] | None:
        """Drain and return the buffer once a line contains *token*.

        Returns None on timeout or when the output closed without a match.
        """
        deadline = time.monotonic() + timeout_s
        with self._cond:
            while True:
                # Rescan everything: a clear() may have replaced what we saw.
                if any(token in line for line in self._lines):
                    lines, self._lines = self._lines, []
                    return lines
                remaining = deadline - time.monotonic()
                if remaining <= 0 or self._closed:
                    return None
                self._cond.wait(remaining)


class EngineProcess:
    """Supervisor for a long-lived UCI analysis engine.

    Usage::

        with EngineProcess(EngineSettings(engine_path="stockfish")) as engine:
            session = engine.analyse(fen, SearchLimits(depth=18))
            for update in session.channel:
                ...
    """

    __slots__ = (
        "_settings",
        "_process",
        "_writer_lock",
        "_responses",
        "_subscribers",
        "_subscribers_lock",
        "_reader_thread",
        "_running",
        "_session_lock",
        "_active_session",
    )

    def __init__(self, settings: EngineSettings | None = None) -> None:
        self._settings = settings or EngineSettings()
        self._process: subprocess.Popen[str] | None = None
        self._writer_lock = threading.Lock()
        self._responses = _ResponseBuffer()
        self._subscribers: list[LineChannel] = []
        self._subscribers_lock = threading.Lock()
        self._reader_thread: threading.Thread | None = None
        self._running = threading.Event()
        self._session_lock = threading.Lock()
        self._active_session: SearchSession | None = None

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    @property
    def is_running(self) -> bool:
        return self._process is not None and self._process.poll() is None

    # ── Lifecycle ────────────────────────────────────────────────────────

    def start(self) -> None:
        """Spawn the engine and complete the UCI handshake."""
        if self._process is not None:
            return

        command = self._settings.command()
        try:
            self._process = subprocess.Popen(
                command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=None,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
            )
        except OSError as exc:
            raise ProcessSpawnError(f"Cannot start engine {command[0]!r}: {exc}") from exc

        self._responses.reset()
        self._running.set()
        self._reader_thread = threading.Thread(
            target=self._read_output,
            name="engine-reader",
            daemon=True,
        )
        self._reader_thread.start()

        try:
            self._handshake()
        except BaseException:
            self.shutdown()
            raise
        _LOGGER.info("Engine %s ready (pid %s)", command[0], self._process.pid)

    def _handshake(self) -> None:
        timeout_ms = self._settings.handshake_timeout_ms
        self.send_command("uci")
        self.wait_for_response("uciok", timeout_ms)
        for name, value in self._settings.handshake_options():
            self.set_option(name, value)

        self.send_command("ucinewgame")
        self.send_command("isready")
        self.wait_for_response("readyok", timeout_ms)

        self.send_command(protocol.position_command(None))
        self.send_command("isready")
        self.wait_for_response("readyok", timeout_ms)

    def shutdown(self) -> None:
        """Stop searching, send ``quit``, join the reader, kill if needed."""
        process = self._process
        if process is None:
            return
        grace_s = self._settings.shutdown_timeout_ms / 1000

        session, self._active_session = self._active_session, None
        if session is not None:
            session.cancel()
            session.join(grace_s)

        self._running.clear()
        try:
            self.send_command("quit")
        except EngineIOError as exc:
            _LOGGER.debug("Engine quit not delivered: %s", exc)
        with self._writer_lock:
            if process.stdin is not None:
                try:
                    process.stdin.close()
                except OSError as exc:
                    _LOGGER.debug("Engine stdin close failed: %s", exc)

        reader = self._reader_thread
        if reader is not None:
            reader.join(grace_s)

        try:
            process.wait(timeout=grace_s)
        except subprocess.TimeoutExpired:
            _LOGGER.warning("Engine did not exit after quit; killing pid %s", process.pid)
            process.kill()
            process.wait()

        if reader is not None and reader.is_alive():
            reader.join(grace_s)
        if process.stdout is not None:
            process.stdout.close()

        self._process = None
        self._reader_thread = None
        _LOGGER.info("Engine stopped (exit code %s)", process.returncode)

    def __enter__(self) -> EngineProcess:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.shutdown()

    # ── Output plumbing ──────────────────────────────────────────────────

    def _read_output(self) -> None:
        process = self._process
        assert process is not None and process.stdout is not None
        debug = self._settings.debug
        try:
            for raw in process.stdout:
                line = raw.rstrip()
                if not line:
                    continue
                if not line.startswith("info"):
                    _LOGGER.info("Engine output: %s", line)
                elif debug:
                    _LOGGER.debug("Engine output: %s", line)

                with self._subscribers_lock:
                    streaming = bool(self._subscribers)
                    for channel in self._subscribers:
                        channel.put(line)
                # Progress of a streamed search is not kept for synchronous
                # waiters, so a long search cannot grow the buffer.
                if not (streaming and line.startswith("info")):
                    self._responses.append(line)

                if not self._running.is_set():
                    break
        except (OSError, ValueError) as exc:
            _LOGGER.debug("Engine output closed: %s", exc)
        finally:
            self._responses.close()
            with self._subscribers_lock:
                for channel in self._subscribers:
                    channel.put(None)

    def subscribe(self) -> LineChannel:
        """New channel receiving every subsequent output line.

        ``None`` is delivered once the engine output ends.
        """
        channel: LineChannel = queue.Queue()
        with self._subscribers_lock:
            self._subscribers.append(channel)
            if self._responses.closed:
                channel.put(None)
        return channel

    def unsubscribe(self, channel: LineChannel) -> None:
        with self._subscribers_lock:
            if channel in self._subscribers:
                self._subscribers.remove(channel)

    def clear_output(self) -> None:
        """Forget buffered lines nobody has waited for yet."""
        self._responses.clear()

    # ── Commands ─────────────────────────────────────────────────────────

    def send_command(self, command: str) -> None:
        """Write one line to the engine and flush it."""
        process = self._process
        if process is None or process.stdin is None:
            raise EngineIOError("Engine process is not running")
        with self._writer_lock:
            try:
                process.stdin.write(command + "\n")
                process.stdin.flush()
            except (OSError, ValueError) as exc:
                raise EngineIOError(f"Cannot send {command!r} to engine: {exc}") from exc
        _LOGGER.debug("Engine input: %s", command)

    def wait_for_response(self, token: str, timeout_ms: int) -> list[str]:
        """Block until an output line contains *token*.

        Returns every line buffered so far and empties the buffer.
        """
        lines = self._responses.wait_for(token, timeout_ms / 1000)
        if lines is not None:
            return lines
        if self._responses.closed:
            raise EngineIOError(f"Engine exited while waiting for {token!r}")
        raise ProtocolTimeout(token, timeout_ms)

    def set_position(self, fen: str | None) -> None:
        """``position fen …`` (or ``startpos`` for None)."""
        self.send_command(protocol.position_command(fen))

    def set_option(self, name: str, value: object) -> None:
        self.send_command(protocol.setoption_command(name, value))

    # ── Searching ────────────────────────────────────────────────────────

    def start_search(
        self,
        limits: SearchLimits | None = None,
        *,
        is_white_move: bool = True,
    ) -> SearchSession:
        """Start a streaming search on the current engine position."""
        return self._begin_session(limits or SearchLimits(), is_white_move, fen=None)

    def analyse(self, fen: str, limits: SearchLimits | None = None) -> SearchSession:
        """Set *fen* and start a streaming search on it."""
        is_white_move = position_from_fen(fen).side_to_move == Color.WHITE
        return self._begin_session(limits or SearchLimits(), is_white_move, fen=fen)

    def _begin_session(
        self,
        limits: SearchLimits,
        is_white_move: bool,
        *,
        fen: str | None,
    ) -> SearchSession:
        with self._session_lock:
            self._retire_active_session()
            if fen is not None:
                self.set_position(fen)
            session = SearchSession(self, limits, is_white_move=is_white_move)
            session.start()
            self._active_session = session
        return session

    def find_best_move(
        self,
        limits: SearchLimits | None = None,
        *,
        is_white_move: bool = True,
    ) -> EngineUpdate:
        """Blocking search on the current position; returns the final update."""
        limits = limits or SearchLimits()
        budget_ms = (
            limits.movetime_ms or self._settings.search_timeout_ms
        ) + self._settings.timeout_grace_ms

        with self._session_lock:
            self._retire_active_session()
            self.clear_output()
            self.send_command(protocol.go_command(limits, self._settings.default_depth))
            try:
                lines = self.wait_for_response("bestmove", budget_ms)
            except ProtocolTimeout:
                self._stop_and_settle()
                raise
        return protocol.summarize_search(lines, is_white_move)

    def cancel_search(self) -> None:
        """Cancel the active streaming search, if any."""
        session = self._active_session
        if session is not None:
            session.cancel()

    @property
    def active_session(self) -> SearchSession | None:
        return self._active_session

    @property
    def latest_update(self) -> EngineUpdate | None:
        """Most recent update of the active session; may lag the channel."""
        session = self._active_session
        return None if session is None else session.latest

    def _retire_active_session(self) -> None:
        """Stop the previous session so only one polling task is alive."""
        previous, self._active_session = self._active_session, None
        if previous is None:
            return
        previous.cancel()
        if not previous.join(self._settings.stop_timeout_ms / 1000):
            _LOGGER.warning("Previous search session did not stop in time")
        if not previous.saw_bestmove:
            # Swallow the aborted search's bestmove before the next "go".
            self._settle()

    def _stop_and_settle(self) -> None:
        try:
            self.send_command("stop")
        except EngineIOError as exc:
            _LOGGER.warning("Cannot stop engine search: %s", exc)
            return
        self._settle()

    def _settle(self) -> None:
        try:
            self.wait_for_response("bestmove", self._settings.stop_timeout_ms)
        except (ProtocolTimeout, EngineIOError) as exc:
            _LOGGER.warning("No bestmove after stop: %s", exc)
