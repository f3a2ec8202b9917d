"""Engine boundary used by the interaction layer.

These functions are all an outer GUI, input handler or history manager
needs: legal moves for highlighting, move application, a live evaluation,
FEN export and the computer's best move.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from knightfall.core.errors import IllegalMoveError
from knightfall.core.move_generator import MoveGenerator
from knightfall.core.notation import (
    STARTING_FEN,
    parse_uci_move,
    position_from_fen,
    position_to_fen,
)
from knightfall.engine.controller import SearchController
from knightfall.engine.evaluation import evaluate
from knightfall.engine.search import SearchBudget, SearchResult

if TYPE_CHECKING:
    from knightfall.core.enums import Color
    from knightfall.core.move import Move
    from knightfall.core.position import Position
    from knightfall.core.types import Square

__all__ = [
    "STARTING_FEN",
    "apply_move",
    "best_move",
    "evaluate",
    "legal_moves",
    "parse_uci_move",
    "position_from_fen",
    "position_to_fen",
    "resolve_move",
    "search",
]


def legal_moves(position: Position, origin: Square | None = None) -> list[Move]:
    """Legal moves in *position*, optionally only those starting on *origin* (0..63)."""
    gen = MoveGenerator(position)
    if origin is None:
        return gen.generate_legal_moves()
    return gen.generate_legal_moves_from(origin)


def resolve_move(position: Position, move: Move) -> Move:
    """Return the generated legal move matching *move*, or raise :class:`IllegalMoveError`.

    Matching uses the squares and the promotion piece only, so a move built
    by hand without its castle or en-passant flag still resolves.
    """
    for legal in MoveGenerator(position).generate_legal_moves_from(move.from_sq):
        if legal.to_sq == move.to_sq and legal.promotion == move.promotion:
            return legal
    raise IllegalMoveError(move, position_to_fen(position))


def apply_move(position: Position, move: Move) -> Position:
    """Position after the legal *move*; *position* itself is left unchanged."""
    return position.play(resolve_move(position, move))


def search(position: Position, budget: SearchBudget | None = None) -> SearchResult:
    """Full search result (move, score, depth, terminal outcome)."""
    return SearchController().search(position, budget or SearchBudget())


def best_move(
    position: Position,
    side_to_move: Color,
    budget: SearchBudget | None = None,
) -> Move | None:
    """The engine's move for *side_to_move*, or ``None`` on checkmate or stalemate."""
    return SearchController().best_move(position, side_to_move, budget)
