"""Iterative-deepening search controller: the engine's entry point."""

from __future__ import annotations

import logging
from time import perf_counter
from typing import TYPE_CHECKING

from knightfall.core.move_generator import MoveGenerator
from knightfall.engine.alphabeta import AlphaBetaSearch, RootResult
from knightfall.engine.evaluation import Evaluator
from knightfall.engine.ordering import order_moves
from knightfall.engine.quiescence import QUIESCENCE_MAX_DEPTH, QuiescenceSearch
from knightfall.engine.search import (
    DRAW_SCORE,
    MATE_SCORE,
    MATE_THRESHOLD,
    CancelCheck,
    IEngine,
    SearchAborted,
    SearchBudget,
    SearchContext,
    SearchOutcome,
    SearchResult,
)

if TYPE_CHECKING:
    from knightfall.core.enums import Color
    from knightfall.core.move import Move
    from knightfall.core.position import Position

_LOGGER = logging.getLogger(__name__)


class SearchController(IEngine):
    """Runs :class:`AlphaBetaSearch` at depth 1, 2, ... within a :class:`SearchBudget`.

    The wall clock is read only between iterations, so one deep iteration
    can overrun ``time_limit_ms``; the next one is simply not started. The
    optional ``is_cancelled`` callback is the only way to stop an iteration
    midway, and a cancelled iteration is discarded.

    Nothing survives between calls: every :meth:`search` builds a fresh
    context, quiescence and alpha-beta searcher.
    """

    __slots__ = ("_evaluator", "_quiescence_depth", "_delta_margin")

    def __init__(
        self,
        evaluator: Evaluator | None = None,
        *,
        quiescence_depth: int = QUIESCENCE_MAX_DEPTH,
        delta_margin: int | None = None,
    ) -> None:
        self._evaluator = evaluator or Evaluator()
        self._quiescence_depth = quiescence_depth
        self._delta_margin = delta_margin

    @property
    def evaluator(self) -> Evaluator:
        return self._evaluator

    def search(
        self,
        position: Position,
        budget: SearchBudget,
        is_cancelled: CancelCheck | None = None,
    ) -> SearchResult:
        started = perf_counter()
        effective = budget.effective()
        context = SearchContext(is_cancelled)
        searcher = AlphaBetaSearch(context=context, quiescence=self._make_quiescence(context))

        gen = MoveGenerator(position)
        root_moves = gen.generate_legal_moves()
        if not root_moves:
            if gen.is_in_check():
                return SearchResult(None, -MATE_SCORE, 0, 0, outcome=SearchOutcome.CHECKMATE)
            return SearchResult(None, DRAW_SCORE, 0, 0, outcome=SearchOutcome.STALEMATE)

        ordered = order_moves(position, root_moves)
        best: RootResult | None = None
        completed_depth = 0

        for depth in range(1, effective.max_depth + 1):
            if depth > 1 and _out_of_time(started, effective.time_limit_ms):
                break
            try:
                context.check_cancelled()
                result = searcher.search_root(position, ordered, depth)
            except SearchAborted:
                _LOGGER.debug("Search cancelled during depth %d", depth)
                if best is None:
                    best = searcher.root_best
                break

            best = result
            completed_depth = depth
            _LOGGER.debug(
                "depth %d score %d nodes %d time %dms pv %s",
                depth,
                result.score,
                context.total_nodes,
                _elapsed_ms(started),
                " ".join(str(m) for m in result.pv),
            )
            if abs(result.score) >= MATE_THRESHOLD:
                break
            ordered = order_moves(position, root_moves, first=result.move)

        elapsed = _elapsed_ms(started)
        if best is None:
            _LOGGER.warning(
                "No search iteration finished; falling back to %s", ordered[0]
            )
            return SearchResult(
                ordered[0],
                self._evaluator.evaluate(position),
                0,
                context.total_nodes,
                elapsed,
            )

        _LOGGER.info(
            "Best move %s score %d depth %d nodes %d in %dms",
            best.move,
            best.score,
            completed_depth,
            context.total_nodes,
            elapsed,
        )
        return SearchResult(
            best.move,
            best.score,
            completed_depth,
            context.total_nodes,
            elapsed,
            ponder_move=best.reply,
        )

    def best_move(
        self,
        position: Position,
        side_to_move: Color,
        budget: SearchBudget | None = None,
    ) -> Move | None:
        """Best move for *side_to_move*, or ``None`` on checkmate or stalemate."""
        if side_to_move != position.side_to_move:
            raise ValueError(
                f"Position has {position.side_to_move} to move, not {side_to_move}"
            )
        return self.search(position, budget or SearchBudget()).best_move

    def _make_quiescence(self, context: SearchContext) -> QuiescenceSearch:
        return QuiescenceSearch(
            self._evaluator,
            context,
            max_depth=self._quiescence_depth,
            delta_margin=self._delta_margin,
        )


def _elapsed_ms(started: float) -> int:
    return int((perf_counter() - started) * 1000)


def _out_of_time(started: float, time_limit_ms: int | None) -> bool:
    return time_limit_ms is not None and _elapsed_ms(started) >= time_limit_ms
