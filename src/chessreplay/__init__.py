"""chessreplay: step through recorded chess games with live engine analysis."""

__version__ = "0.1.0"
