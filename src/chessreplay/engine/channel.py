"""One-way channel carrying :class:`EngineUpdate` events to a consumer."""

from __future__ import annotations

import queue
import threading
from collections.abc import Iterator

from chessreplay.engine.search import EngineUpdate
from chessreplay.errors import ReceiverGone

_END = object()


class UpdateChannel:
    """Unbounded thread-safe queue with explicit ends.

    The sender calls :meth:`publish` and finally :meth:`finish`; the
    receiver reads with :meth:`get` or by iterating, and may :meth:`close`
    its end at any time, after which publishing raises :class:`ReceiverGone`.
    """

    __slots__ = ("_queue", "_closed", "_finished")

    def __init__(self) -> None:
        self._queue: queue.Queue[object] = queue.Queue()
        self._closed = threading.Event()
        self._finished = threading.Event()

    # ── Sender side ──────────────────────────────────────────────────────

    def publish(self, update: EngineUpdate) -> None:
        if self._closed.is_set():
            raise ReceiverGone("Update receiver was closed")
        if self._finished.is_set():
            raise RuntimeError("Cannot publish on a finished channel")
        self._queue.put(update)

    def finish(self) -> None:
        """Mark the sender as done; idempotent."""
        if self._finished.is_set():
            return
        self._finished.set()
        self._queue.put(_END)

    @property
    def finished(self) -> bool:
        return self._finished.is_set()

    # ── Receiver side ────────────────────────────────────────────────────

    def get(self, timeout: float | None = None) -> EngineUpdate | None:
        """Next update, or None once the sender has finished.

        Raises :class:`queue.Empty` if *timeout* elapses first.
        """
        item = self._queue.get(timeout=timeout)
        if item is _END:
            # Leave the marker for other readers / later calls.
            self._queue.put(_END)
            return None
        assert isinstance(item, EngineUpdate)
        return item

    def drain(self) -> list[EngineUpdate]:
        """All updates currently queued, without blocking."""
        updates: list[EngineUpdate] = []
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return updates
            if item is _END:
                self._queue.put(_END)
                return updates
            assert isinstance(item, EngineUpdate)
            updates.append(item)

    def __iter__(self) -> Iterator[EngineUpdate]:
        while True:
            update = self.get()
            if update is None:
                return
            yield update

    def close(self) -> None:
        """Drop the receiving end; the sender stops on its next publish."""
        self._closed.set()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()
