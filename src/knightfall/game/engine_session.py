"""Engine search session: runs the worker in a QThread for auto-respond games."""

from __future__ import annotations

import logging

from PyQt6.QtCore import QObject, QThread, pyqtSignal, pyqtSlot

from knightfall.core.position import Position
from knightfall.engine.qt_bridge import EngineWorker
from knightfall.engine.search import SearchBudget
from knightfall.game.controller import GameController

_LOGGER = logging.getLogger(__name__)


class EngineSession(QObject):
    """Owns the worker thread and hands engine answers to a :class:`GameController`.

    The session lives in the UI thread. Requests travel to the worker through
    a queued signal, and answers come back as queued slot calls, so
    :meth:`GameController.complete_engine_move` always runs on the UI thread.
    """

    move_requested = pyqtSignal(object, int)
    budget_changed = pyqtSignal(int, int, int)
    search_failed = pyqtSignal(str)

    def __init__(
        self,
        controller: GameController,
        *,
        budget: SearchBudget | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._controller = controller
        self._thread = QThread(self)
        self._worker = EngineWorker(budget=budget)
        self._is_started = False

    @property
    def worker(self) -> EngineWorker:
        return self._worker

    def setup(self) -> None:
        """Start the worker thread and connect the request/answer signals."""
        if self._is_started:
            return
        self._worker.moveToThread(self._thread)
        self.move_requested.connect(self._worker.request_move)
        self.budget_changed.connect(self._worker.set_budget)
        self._worker.best_move_ready.connect(self._on_best_move)
        self._worker.search_no_move.connect(self._on_no_move)
        self._worker.search_cancelled.connect(self._on_cancelled)
        self._worker.search_error.connect(self._on_error)
        self._controller.events.on_engine_request.append(self._request)
        self._thread.start()
        self._is_started = True

    def shutdown(self) -> None:
        if not self._is_started:
            return
        self._controller.events.on_engine_request.remove(self._request)
        self._worker.cancel()
        self._thread.quit()
        self._thread.wait()
        self._is_started = False

    def cancel(self) -> None:
        """Stop the running search; the worker only sets a thread-safe flag."""
        self._controller.cancel_engine_request()
        self._worker.cancel()

    def set_budget(self, budget: SearchBudget) -> None:
        """Change the budget for the next search; queued once the thread runs."""
        args = (budget.max_depth, budget.time_limit_ms or 0, budget.strength)
        if self._is_started:
            self.budget_changed.emit(*args)
        else:
            self._worker.set_budget(*args)

    def _request(self, position: Position, request_id: int) -> None:
        self.move_requested.emit(position, request_id)

    @pyqtSlot(int, object, int, int, int)
    def _on_best_move(
        self, request_id: int, move: object, score_cp: int, depth: int, nodes: int
    ) -> None:
        _LOGGER.debug(
            "Engine answered request %d: %s (%d cp, depth %d, %d nodes)",
            request_id,
            move,
            score_cp,
            depth,
            nodes,
        )
        self._controller.complete_engine_move(request_id, move)  # type: ignore[arg-type]

    @pyqtSlot(int, int, int, int)
    def _on_no_move(self, request_id: int, score_cp: int, depth: int, nodes: int) -> None:
        self._controller.complete_engine_move(request_id, None)

    @pyqtSlot(int)
    def _on_cancelled(self, request_id: int) -> None:
        _LOGGER.debug("Engine request %d cancelled", request_id)

    @pyqtSlot(int, str)
    def _on_error(self, request_id: int, message: str) -> None:
        _LOGGER.error("Engine request %d failed: %s", request_id, message)
        self._controller.cancel_engine_request()
        self.search_failed.emit(message)
