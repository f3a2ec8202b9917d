"""Notation package: FEN and UCI move text."""

from knightfall.core.notation.fen import STARTING_FEN, position_from_fen, position_to_fen
from knightfall.core.notation.uci import parse_uci_move

__all__ = [
    "STARTING_FEN",
    "parse_uci_move",
    "position_from_fen",
    "position_to_fen",
]
