"""Game replay layer."""

from chessreplay.game.replay import GameReplay

__all__ = ["GameReplay"]
