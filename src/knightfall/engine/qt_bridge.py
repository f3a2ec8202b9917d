"""Qt bridge to run engine search in a worker thread (auto-respond mode)."""

from __future__ import annotations

import logging
import threading

from PyQt6.QtCore import QObject, pyqtSignal, pyqtSlot

from knightfall.core.position import Position
from knightfall.engine.controller import SearchController
from knightfall.engine.search import IEngine, SearchBudget

_LOGGER = logging.getLogger(__name__)


class EngineWorker(QObject):
    """Thread-affine worker that computes engine moves on demand.

    Move it to a ``QThread`` and connect a queued signal to
    :meth:`request_move`. Each request emits exactly one completion signal,
    tagged with the caller's request id so stale answers can be ignored.
    """

    best_move_ready = pyqtSignal(int, object, int, int, int)
    search_cancelled = pyqtSignal(int)
    search_no_move = pyqtSignal(int, int, int, int)
    search_error = pyqtSignal(int, str)

    def __init__(
        self,
        *,
        budget: SearchBudget | None = None,
        engine: IEngine | None = None,
    ) -> None:
        super().__init__()
        self._engine: IEngine = engine or SearchController()
        self._budget = budget or SearchBudget()
        self._cancel_event = threading.Event()

    @property
    def budget(self) -> SearchBudget:
        return self._budget

    @pyqtSlot(object, int)
    def request_move(self, position_obj: object, request_id: int) -> None:
        """Search for the best move in *position_obj* and emit the result."""
        if not isinstance(position_obj, Position):
            self.search_error.emit(request_id, "Engine received invalid position")
            return

        self._cancel_event.clear()
        try:
            result = self._engine.search(
                position_obj,
                self._budget,
                is_cancelled=self._cancel_event.is_set,
            )
        except Exception as exc:
            _LOGGER.exception("Engine search failed for request %d", request_id)
            self.search_error.emit(request_id, str(exc))
            return

        if self._cancel_event.is_set():
            self.search_cancelled.emit(request_id)
            return

        if result.best_move is None:
            self.search_no_move.emit(request_id, result.score_cp, result.depth, result.nodes)
            return

        self.best_move_ready.emit(
            request_id,
            result.best_move,
            result.score_cp,
            result.depth,
            result.nodes,
        )

    @pyqtSlot()
    def cancel(self) -> None:
        """Request cancellation of the current search."""
        self._cancel_event.set()

    @pyqtSlot(int, int, int)
    def set_budget(self, max_depth: int, time_limit_ms: int, strength: int) -> None:
        """Update the budget (takes effect on the next search). ``time_limit_ms <= 0`` means no limit."""
        self._budget = SearchBudget(
            max_depth=max_depth,
            time_limit_ms=time_limit_ms if time_limit_ms > 0 else None,
            strength=strength,
        )
