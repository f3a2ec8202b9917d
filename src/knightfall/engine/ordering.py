"""Cheap move ordering: promotions, then captures by MVV-LVA, then quiet moves."""

from __future__ import annotations

from typing import TYPE_CHECKING

from knightfall.core.enums import PieceType
from knightfall.engine.evaluation import PIECE_VALUES, piece_square_bonus

if TYPE_CHECKING:
    from knightfall.core.move import Move
    from knightfall.core.position import Position

_PROMOTION_BONUS = 20_000
_CAPTURE_BONUS = 10_000
_CASTLE_BONUS = 120


def move_order_score(position: Position, move: Move) -> int:
    board = position.board
    moving_piece = board[move.from_sq]
    if moving_piece is None:
        return -_PROMOTION_BONUS

    score = 0
    if move.promotion is not None:
        score += _PROMOTION_BONUS + PIECE_VALUES[move.promotion]

    if move.is_capture:
        victim = board[move.to_sq]
        victim_type = PieceType.PAWN if victim is None else victim.piece_type
        # Most valuable victim first, least valuable attacker breaks ties.
        score += _CAPTURE_BONUS + 10 * PIECE_VALUES[victim_type]
        score -= PIECE_VALUES[moving_piece.piece_type]
    elif move.is_castle:
        score += _CASTLE_BONUS

    score += piece_square_bonus(moving_piece.piece_type, moving_piece.color, move.to_sq)
    score -= piece_square_bonus(moving_piece.piece_type, moving_piece.color, move.from_sq)
    return score


def order_moves(
    position: Position,
    moves: list[Move],
    first: Move | None = None,
) -> list[Move]:
    """Sort *moves* best-first; *first* (e.g. the previous best move) leads if present."""
    ordered = sorted(moves, key=lambda move: move_order_score(position, move), reverse=True)
    if first is not None and first in ordered:
        ordered.remove(first)
        ordered.insert(0, first)
    return ordered
