"""Negamax search with alpha-beta pruning."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from knightfall.core.move_generator import MoveGenerator
from knightfall.core.rules import Rules
from knightfall.engine.evaluation import Evaluator
from knightfall.engine.ordering import order_moves
from knightfall.engine.quiescence import QuiescenceSearch
from knightfall.engine.search import DRAW_SCORE, INF_SCORE, MATE_SCORE, SearchContext

if TYPE_CHECKING:
    from knightfall.core.move import Move
    from knightfall.core.position import Position

Line = tuple["Move", ...]


@dataclass(slots=True, frozen=True)
class RootResult:
    """Best root move of one iteration together with its principal variation."""

    score: int
    move: Move
    pv: Line

    @property
    def reply(self) -> Move | None:
        return self.pv[1] if len(self.pv) > 1 else None


class AlphaBetaSearch:
    """Depth-first negamax over legal moves.

    Every node is a pure function of ``(position, depth, alpha, beta)``: the
    children are fresh positions from :meth:`Position.play`, and the only
    state touched is the node counter in the shared :class:`SearchContext`.
    Leaves hand over to :class:`QuiescenceSearch` rather than the static
    evaluation.
    """

    __slots__ = ("_context", "_quiescence", "root_best")

    def __init__(
        self,
        evaluator: Evaluator | None = None,
        context: SearchContext | None = None,
        quiescence: QuiescenceSearch | None = None,
    ) -> None:
        self._context = context or SearchContext()
        self._quiescence = quiescence or QuiescenceSearch(evaluator, self._context)
        # Best fully searched root move of the running iteration; survives an abort.
        self.root_best: RootResult | None = None

    @property
    def context(self) -> SearchContext:
        return self._context

    def search(
        self,
        position: Position,
        depth: int,
        alpha: int = -INF_SCORE,
        beta: int = INF_SCORE,
        ply: int = 0,
    ) -> int:
        """Score of *position* for the side to move, searched *depth* plies deep."""
        return self._negamax(position, depth, alpha, beta, ply)[0]

    def search_root(
        self,
        position: Position,
        moves: list[Move],
        depth: int,
    ) -> RootResult:
        """Search every move in *moves*, in the given order, with a full window."""
        if not moves:
            raise ValueError("search_root needs at least one move")
        self.root_best = None
        alpha = -INF_SCORE
        for move in moves:
            score, line = self._negamax(position.play(move), depth - 1, -INF_SCORE, -alpha, 1)
            score = -score
            if self.root_best is None or score > alpha:
                alpha = score
                self.root_best = RootResult(score, move, (move, *line))
        assert self.root_best is not None
        return self.root_best

    def _negamax(
        self,
        position: Position,
        depth: int,
        alpha: int,
        beta: int,
        ply: int,
    ) -> tuple[int, Line]:
        self._context.visit()

        if ply > 0 and Rules.is_draw(position):
            # Checkmate outranks the fifty-move rule; the mate is scored below.
            if not (Rules.is_fifty_move_rule(position) and Rules.is_checkmate(position)):
                return DRAW_SCORE, ()

        if depth <= 0:
            return self._quiescence.search(position, alpha, beta, ply), ()

        gen = MoveGenerator(position)
        legal = gen.generate_legal_moves()
        if not legal:
            if gen.is_in_check():
                # Nearer mates score higher for the winner.
                return -(MATE_SCORE - ply), ()
            return DRAW_SCORE, ()

        best_score = -INF_SCORE
        best_line: Line = ()
        for move in order_moves(position, legal):
            score, line = self._negamax(position.play(move), depth - 1, -beta, -alpha, ply + 1)
            score = -score
            if score > best_score:
                best_score = score
                best_line = (move, *line)
            if score > alpha:
                alpha = score
            if alpha >= beta:
                break
        return best_score, best_line
