"""Scripted UCI engine used by the engine tests.

Modes (first argument):
    normal  answers the handshake; ``go`` prints depth 1..N then bestmove
    slow    like normal but one depth every 50 ms until ``stop``
    mute    never answers anything
    nomove  every search ends with ``bestmove (none)``
    crash   exits right after ``uciok``
"""

from __future__ import annotations

import sys
import threading
import time

MOVES = ("e2e4", "d2d4", "g1f3")


def _say(text: str) -> None:
    sys.stdout.write(text + "\n")
    sys.stdout.flush()


class _Search:
    def __init__(self, mode: str, depth: int) -> None:
        self._mode = mode
        self._depth = depth
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        self._thread.join()

    def _run(self) -> None:
        if self._mode == "nomove":
            _say("info depth 0 score mate 0")
            _say("bestmove (none)")
            return

        best = MOVES[0]
        depth = 0
        while not self._stop.is_set():
            depth += 1
            best = MOVES[min(depth - 1, len(MOVES) - 1)]
            _say(f"info depth {depth} seldepth {depth} multipv 1 score cp {10 * depth} nodes 100 pv {best} e7e5")
            # Same line twice: the session must not publish duplicates.
            _say(f"info depth {depth} seldepth {depth} multipv 1 score cp {10 * depth} nodes 100 pv {best} e7e5")
            if self._mode == "slow":
                self._stop.wait(0.05)
            elif depth >= self._depth:
                break
        _say(f"bestmove {best} ponder e7e5")


def main() -> int:
    mode = sys.argv[1] if len(sys.argv) > 1 else "normal"
    search: _Search | None = None
    for raw in sys.stdin:
        command = raw.strip()
        if mode == "mute":
            if command == "quit":
                return 0
            continue
        if command == "uci":
            _say("id name FakeEngine")
            _say("uciok")
            if mode == "crash":
                return 3
        elif command == "isready":
            _say("readyok")
        elif command.startswith("go"):
            if search is not None:
                search.stop()
            parts = command.split()
            depth = int(parts[2]) if len(parts) > 2 and parts[1] == "depth" else 3
            search = _Search(mode, depth)
        elif command == "stop":
            if search is not None:
                search.stop()
                search = None
        elif command == "quit":
            break
    if search is not None:
        search.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
