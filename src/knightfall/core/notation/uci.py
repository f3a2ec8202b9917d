"""Long-algebraic (UCI) move text, resolved against a position."""

from __future__ import annotations

from typing import TYPE_CHECKING

from knightfall.core.enums import PieceType
from knightfall.core.errors import IllegalMoveError
from knightfall.core.move_generator import MoveGenerator
from knightfall.core.notation.fen import position_to_fen
from knightfall.core.types import parse_square

if TYPE_CHECKING:
    from knightfall.core.move import Move
    from knightfall.core.position import Position

_PROMOTIONS: dict[str, PieceType] = {
    "q": PieceType.QUEEN,
    "r": PieceType.ROOK,
    "b": PieceType.BISHOP,
    "n": PieceType.KNIGHT,
}


def parse_uci_move(position: Position, text: str) -> Move:
    """Resolve *text* such as ``e2e4`` or ``e7e8q`` to the matching legal move.

    The returned move carries the generator's flags (castle, en passant,
    capture), so callers never have to reconstruct them.
    """
    text = text.strip().lower()
    if len(text) not in (4, 5):
        raise ValueError(f"Invalid UCI move: {text!r}")
    from_sq = parse_square(text[:2])
    to_sq = parse_square(text[2:4])
    promotion: PieceType | None = None
    if len(text) == 5:
        promotion = _PROMOTIONS.get(text[4])
        if promotion is None:
            raise ValueError(f"Invalid promotion piece in UCI move: {text!r}")

    for move in MoveGenerator(position).generate_legal_moves_from(from_sq):
        if move.to_sq == to_sq and move.promotion == promotion:
            return move
    raise IllegalMoveError(text, position_to_fen(position))
