"""Capture-only extension search run at the leaves of the main search."""

from __future__ import annotations

from typing import TYPE_CHECKING

from knightfall.core.enums import PieceType
from knightfall.core.move_generator import MoveGenerator
from knightfall.engine.evaluation import Evaluator
from knightfall.engine.ordering import order_moves
from knightfall.engine.search import DRAW_SCORE, MATE_SCORE, SearchContext

if TYPE_CHECKING:
    from knightfall.core.move import Move
    from knightfall.core.position import Position

QUIESCENCE_MAX_DEPTH = 16


class QuiescenceSearch:
    """Resolves pending captures so leaf scores do not stop mid-exchange.

    The side to move may always "stand pat" on the static evaluation, so a
    capture sequence is only followed while it improves on doing nothing.
    In check there is no standing pat: every evasion is searched and a
    position without one is scored as mate. A side with no legal move
    outside check is stalemated and scores a draw.

    ``delta_margin`` enables delta pruning: captures whose best case
    (stand pat + victim + margin) still cannot reach alpha are skipped.
    It is off by default because it can change the returned value.
    """

    __slots__ = ("_evaluator", "_context", "_max_depth", "_delta_margin")

    def __init__(
        self,
        evaluator: Evaluator | None = None,
        context: SearchContext | None = None,
        max_depth: int = QUIESCENCE_MAX_DEPTH,
        delta_margin: int | None = None,
    ) -> None:
        self._evaluator = evaluator or Evaluator()
        self._context = context or SearchContext()
        self._max_depth = max_depth
        self._delta_margin = delta_margin

    def search(
        self,
        position: Position,
        alpha: int,
        beta: int,
        ply: int = 0,
        q_depth: int = 0,
    ) -> int:
        self._context.visit_quiescence()

        gen = MoveGenerator(position)
        in_check = gen.is_in_check()
        stand_pat = self._evaluator.evaluate(position)

        if q_depth >= self._max_depth:
            return stand_pat

        if in_check:
            candidates = gen.generate_legal_moves()
            if not candidates:
                return -(MATE_SCORE - ply)
        else:
            candidates = gen.generate_noisy_moves()
            if not candidates and not gen.generate_legal_moves():
                return DRAW_SCORE
            if stand_pat >= beta:
                return beta
            if stand_pat > alpha:
                alpha = stand_pat

        for move in order_moves(position, candidates):
            if not in_check and self._is_futile(position, move, stand_pat, alpha):
                continue
            score = -self.search(position.play(move), -beta, -alpha, ply + 1, q_depth + 1)
            if score >= beta:
                return beta
            if score > alpha:
                alpha = score

        return alpha

    def _is_futile(self, position: Position, move: Move, stand_pat: int, alpha: int) -> bool:
        if self._delta_margin is None or move.promotion is not None:
            return False
        victim = position.board[move.to_sq]
        victim_type = PieceType.PAWN if victim is None else victim.piece_type
        return stand_pat + self._evaluator.piece_value(victim_type) + self._delta_margin <= alpha
