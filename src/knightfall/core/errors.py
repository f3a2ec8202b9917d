"""Exceptions raised at the boundary of the chess core.

Search code never raises these; terminal game states are reported as
result values instead.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from knightfall.core.move import Move


class ChessError(Exception):
    """Base class for recoverable chess-domain errors."""


class FenError(ChessError, ValueError):
    """A FEN string could not be parsed into a position."""

    def __init__(self, message: str, fen: str) -> None:
        super().__init__(f"{message}: {fen!r}")
        self.fen = fen


class IllegalMoveError(ChessError, ValueError):
    """A move that is not legal in the given position was requested."""

    def __init__(self, move: Move | str, fen: str) -> None:
        super().__init__(f"Illegal move {move} in position {fen!r}")
        self.move = move
        self.fen = fen
