"""Chess engine package: evaluation, quiescence, alpha-beta and the search controller.

The Qt worker lives in :mod:`knightfall.engine.qt_bridge` and is imported
on demand so the search itself never needs a Qt installation at import time.
"""

from knightfall.engine.alphabeta import AlphaBetaSearch, RootResult
from knightfall.engine.controller import SearchController
from knightfall.engine.evaluation import PIECE_VALUES, Evaluator, evaluate
from knightfall.engine.quiescence import QuiescenceSearch
from knightfall.engine.search import (
    DRAW_SCORE,
    MATE_SCORE,
    MATE_THRESHOLD,
    CancelCheck,
    IEngine,
    SearchBudget,
    SearchOutcome,
    SearchResult,
    mate_in,
)

__all__ = [
    "AlphaBetaSearch",
    "CancelCheck",
    "DRAW_SCORE",
    "Evaluator",
    "IEngine",
    "MATE_SCORE",
    "MATE_THRESHOLD",
    "PIECE_VALUES",
    "QuiescenceSearch",
    "RootResult",
    "SearchBudget",
    "SearchController",
    "SearchOutcome",
    "SearchResult",
    "evaluate",
    "mate_in",
]
