"""Tests for the Qt engine bridge worker."""

from __future__ import annotations

from PyQt6.QtTest import QSignalSpy

from knightfall.core.move_generator import MoveGenerator
from knightfall.core.notation import STARTING_FEN, position_from_fen
from knightfall.core.position import Position
from knightfall.engine.qt_bridge import EngineWorker
from knightfall.engine.search import (
    MATE_SCORE,
    CancelCheck,
    SearchBudget,
    SearchOutcome,
    SearchResult,
)


class _CancellingEngine:
    def __init__(self, worker: EngineWorker) -> None:
        self._worker = worker

    def search(
        self,
        position: Position,
        _budget: SearchBudget,
        is_cancelled: CancelCheck | None = None,
    ) -> SearchResult:
        del is_cancelled
        legal = MoveGenerator(position).generate_legal_moves()
        self._worker.cancel()
        return SearchResult(best_move=legal[0], score_cp=0, depth=1, nodes=1)


class _MatedEngine:
    def search(
        self,
        _position: Position,
        _budget: SearchBudget,
        is_cancelled: CancelCheck | None = None,
    ) -> SearchResult:
        del is_cancelled
        return SearchResult(
            best_move=None,
            score_cp=-MATE_SCORE,
            depth=0,
            nodes=0,
            outcome=SearchOutcome.CHECKMATE,
        )


class _FailingEngine:
    def search(
        self,
        _position: Position,
        _budget: SearchBudget,
        is_cancelled: CancelCheck | None = None,
    ) -> SearchResult:
        raise RuntimeError("boom")


class _RecordingEngine:
    def __init__(self) -> None:
        self.budgets: list[SearchBudget] = []

    def search(
        self,
        position: Position,
        budget: SearchBudget,
        is_cancelled: CancelCheck | None = None,
    ) -> SearchResult:
        assert is_cancelled is not None and not is_cancelled()
        self.budgets.append(budget)
        move = MoveGenerator(position).generate_legal_moves()[0]
        return SearchResult(best_move=move, score_cp=15, depth=2, nodes=42)


class TestEngineWorker:
    def test_emits_best_move(self, qapp: object) -> None:
        position = position_from_fen(STARTING_FEN)
        engine = _RecordingEngine()
        worker = EngineWorker(engine=engine)

        best_moves = QSignalSpy(worker.best_move_ready)
        worker.request_move(position, 3)

        assert len(best_moves) == 1
        request_id, move, score, depth, nodes = best_moves[0]
        assert request_id == 3
        assert move in MoveGenerator(position).generate_legal_moves()
        assert (score, depth, nodes) == (15, 2, 42)

    def test_emits_cancelled_when_search_is_cancelled(self, qapp: object) -> None:
        worker = EngineWorker()
        worker._engine = _CancellingEngine(worker)

        cancelled = QSignalSpy(worker.search_cancelled)
        best_moves = QSignalSpy(worker.best_move_ready)

        worker.request_move(position_from_fen(STARTING_FEN), 7)

        assert len(cancelled) == 1
        assert cancelled[0][0] == 7
        assert len(best_moves) == 0

    def test_emits_no_move_when_search_returns_none(self, qapp: object) -> None:
        worker = EngineWorker(engine=_MatedEngine())

        no_move = QSignalSpy(worker.search_no_move)
        best_moves = QSignalSpy(worker.best_move_ready)
        errors = QSignalSpy(worker.search_error)

        worker.request_move(position_from_fen(STARTING_FEN), 11)

        assert len(no_move) == 1
        assert no_move[0][0] == 11
        assert no_move[0][1] == -MATE_SCORE
        assert len(best_moves) == 0
        assert len(errors) == 0

    def test_engine_exception_becomes_error_signal(self, qapp: object) -> None:
        worker = EngineWorker(engine=_FailingEngine())
        errors = QSignalSpy(worker.search_error)

        worker.request_move(position_from_fen(STARTING_FEN), 5)

        assert len(errors) == 1
        assert errors[0][0] == 5
        assert "boom" in errors[0][1]

    def test_rejects_non_position_payload(self, qapp: object) -> None:
        worker = EngineWorker(engine=_RecordingEngine())
        errors = QSignalSpy(worker.search_error)

        worker.request_move("not a position", 9)

        assert len(errors) == 1
        assert errors[0][0] == 9

    def test_cancel_flag_is_cleared_for_next_request(self, qapp: object) -> None:
        engine = _RecordingEngine()
        worker = EngineWorker(engine=engine)
        worker.cancel()

        best_moves = QSignalSpy(worker.best_move_ready)
        worker.request_move(position_from_fen(STARTING_FEN), 1)

        assert len(best_moves) == 1

    def test_set_budget_applies_to_next_search(self, qapp: object) -> None:
        engine = _RecordingEngine()
        worker = EngineWorker(engine=engine)

        worker.set_budget(3, 0, 5)
        worker.request_move(position_from_fen(STARTING_FEN), 1)

        assert worker.budget == SearchBudget(max_depth=3, time_limit_ms=None, strength=5)
        assert engine.budgets == [worker.budget]
