"""Qt bridge that forwards search updates as signals.

Move an :class:`AnalysisRelay` to a ``QThread`` and invoke :meth:`relay`
with a session's channel; widgets connected to :attr:`update_ready` then
receive updates through queued connections on their own thread.
"""

from __future__ import annotations

from PyQt6.QtCore import QObject, pyqtSignal, pyqtSlot

from chessreplay.engine.channel import UpdateChannel
from chessreplay.engine.search import EngineUpdate


class AnalysisRelay(QObject):
    """Thread-affine worker draining one update channel at a time."""

    update_ready = pyqtSignal(object)  # EngineUpdate
    final_ready = pyqtSignal(object)  # EngineUpdate with is_final set
    relay_finished = pyqtSignal()
    relay_error = pyqtSignal(str)

    @pyqtSlot(object)
    def relay(self, channel_obj: object) -> None:
        """Emit every update from *channel_obj* until its sender finishes."""
        if not isinstance(channel_obj, UpdateChannel):
            self.relay_error.emit("Relay received an invalid update channel")
            return

        for update in channel_obj:
            if not isinstance(update, EngineUpdate):
                continue
            self.update_ready.emit(update)
            if update.is_final:
                self.final_ready.emit(update)
        self.relay_finished.emit()
