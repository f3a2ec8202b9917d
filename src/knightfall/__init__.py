"""knightfall: a chess position search engine.

    from knightfall import SearchBudget, best_move, position_from_fen, STARTING_FEN

    pos = position_from_fen(STARTING_FEN)
    move = best_move(pos, pos.side_to_move, SearchBudget(max_depth=3))
"""

from knightfall.api import (
    STARTING_FEN,
    apply_move,
    best_move,
    evaluate,
    legal_moves,
    parse_uci_move,
    position_from_fen,
    position_to_fen,
    search,
)
from knightfall.core import Color, FenError, IllegalMoveError, Move, Position
from knightfall.engine import SearchBudget, SearchOutcome, SearchResult

__version__ = "0.1.0"

__all__ = [
    "Color",
    "FenError",
    "IllegalMoveError",
    "Move",
    "Position",
    "STARTING_FEN",
    "SearchBudget",
    "SearchOutcome",
    "SearchResult",
    "apply_move",
    "best_move",
    "evaluate",
    "legal_moves",
    "parse_uci_move",
    "position_from_fen",
    "position_to_fen",
    "search",
]
