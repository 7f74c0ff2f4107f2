"""Streaming search session: one cancellable engine search in the background."""

from __future__ import annotations

import logging
import queue
import threading
from typing import TYPE_CHECKING

from chessreplay.engine import protocol
from chessreplay.engine.channel import UpdateChannel
from chessreplay.engine.search import BestMove, EngineUpdate, SearchLimits
from chessreplay.errors import EngineIOError, ParseWarning, ReceiverGone

if TYPE_CHECKING:
    from chessreplay.engine.process import EngineProcess, LineChannel

_LOGGER = logging.getLogger(__name__)


class SearchSession:
    """Runs ``go`` once and streams progress as :class:`EngineUpdate` events.

    Zero or more intermediate updates are followed by exactly one final
    update, unless the session is cancelled, the receiver closes the
    channel, or the engine exits.  The channel is finished in every case.
    """

    __slots__ = (
        "_engine",
        "_limits",
        "_is_white_move",
        "_channel",
        "_poll_interval_s",
        "_cancel_event",
        "_thread",
        "_lines",
        "_snapshot_lock",
        "_latest",
        "_last_move",
        "_last_evaluation",
        "_last_depth",
        "_saw_bestmove",
    )

    def __init__(
        self,
        engine: EngineProcess,
        limits: SearchLimits,
        *,
        is_white_move: bool,
        channel: UpdateChannel | None = None,
    ) -> None:
        self._engine = engine
        self._limits = limits
        self._is_white_move = is_white_move
        self._channel = channel or UpdateChannel()
        self._poll_interval_s = engine.settings.poll_interval_ms / 1000
        self._cancel_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._lines: LineChannel | None = None
        self._snapshot_lock = threading.Lock()
        self._latest: EngineUpdate | None = None
        self._last_move: BestMove | None = None
        self._last_evaluation: int | None = None
        self._last_depth: int | None = None
        self._saw_bestmove = False

    # ── Public API ───────────────────────────────────────────────────────

    @property
    def channel(self) -> UpdateChannel:
        return self._channel

    @property
    def limits(self) -> SearchLimits:
        return self._limits

    @property
    def is_white_move(self) -> bool:
        return self._is_white_move

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def saw_bestmove(self) -> bool:
        """Whether the engine reported the end of this search."""
        return self._saw_bestmove

    @property
    def latest(self) -> EngineUpdate | None:
        with self._snapshot_lock:
            return self._latest

    def start(self) -> UpdateChannel:
        """Issue ``go`` and start polling in a background thread."""
        if self._thread is not None:
            raise RuntimeError("Search session already started")

        self._engine.clear_output()
        self._last_move = None
        self._last_evaluation = None
        self._last_depth = None

        lines = self._engine.subscribe()
        go = protocol.go_command(self._limits, self._engine.settings.default_depth)
        try:
            self._engine.send_command(go)
        except EngineIOError:
            self._engine.unsubscribe(lines)
            self._channel.finish()
            raise
        self._lines = lines
        self._thread = threading.Thread(
            target=self._run,
            name="engine-search",
            daemon=True,
        )
        self._thread.start()
        return self._channel

    def cancel(self) -> None:
        """Ask the session to stop; does not wait for it."""
        if self._cancel_event.is_set():
            return
        self._cancel_event.set()
        if self._saw_bestmove:
            return
        try:
            self._engine.send_command("stop")
        except EngineIOError as exc:
            _LOGGER.warning("Cannot send stop to engine: %s", exc)

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the polling thread; True once it has exited."""
        thread = self._thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    # ── Worker ───────────────────────────────────────────────────────────

    def _run(self) -> None:
        assert self._lines is not None
        try:
            self._poll(self._lines)
        except ReceiverGone:
            _LOGGER.debug("Update receiver closed; ending search early")
        finally:
            self._engine.unsubscribe(self._lines)
            self._channel.finish()

    def _poll(self, lines: LineChannel) -> None:
        while not self._cancel_event.is_set():
            try:
                batch = [lines.get(timeout=self._poll_interval_s)]
            except queue.Empty:
                continue
            batch.extend(_drain(lines))

            for line in batch:
                if self._cancel_event.is_set():
                    return
                if line is None:
                    _LOGGER.warning("Engine output ended during search")
                    return
                update = self._handle_line(line)
                if update is None:
                    continue
                if self._cancel_event.is_set():
                    return
                self._channel.publish(update)
                if update.is_final:
                    return

    def _handle_line(self, line: str) -> EngineUpdate | None:
        if protocol.is_bestmove_line(line):
            self._saw_bestmove = True
            try:
                best_move = protocol.parse_bestmove_line(line)
            except ParseWarning as exc:
                _LOGGER.warning("Unreadable engine result: %s", exc)
                best_move = None
            return self._record(
                EngineUpdate(
                    best_move=best_move,
                    evaluation=self._last_evaluation,
                    depth=self._last_depth,
                    is_final=True,
                )
            )

        if not protocol.is_progress_line(line):
            return None
        try:
            info = protocol.parse_info_line(line, self._is_white_move)
        except ParseWarning as exc:
            _LOGGER.debug("Skipping engine line: %s", exc)
            return None

        if (
            info.best_move == self._last_move
            and info.evaluation == self._last_evaluation
            and info.depth == self._last_depth
        ):
            return None
        return self._record(
            EngineUpdate(
                best_move=info.best_move,
                evaluation=info.evaluation,
                depth=info.depth,
            )
        )

    def _record(self, update: EngineUpdate) -> EngineUpdate:
        self._last_move = update.best_move
        self._last_evaluation = update.evaluation
        self._last_depth = update.depth
        with self._snapshot_lock:
            self._latest = update
        return update


def _drain(lines: LineChannel) -> list[str | None]:
    drained: list[str | None] = []
    while True:
        try:
            drained.append(lines.get_nowait())
        except queue.Empty:
            return drained
