"""GameController: applies human and engine moves to a single current position.

This is the seam toward the interaction layer. It owns no board rendering or
move history; it only guarantees that every move is legal and that an engine
answer advances the turn exactly once.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import IntEnum, auto
from typing import TYPE_CHECKING

from knightfall.api import resolve_move
from knightfall.core.enums import Color, GameResult
from knightfall.core.errors import IllegalMoveError
from knightfall.core.notation import STARTING_FEN, position_from_fen
from knightfall.core.rules import Rules

if TYPE_CHECKING:
    from knightfall.core.move import Move
    from knightfall.core.position import Position

_LOGGER = logging.getLogger(__name__)

MoveCallback = Callable[["Move", "Position"], None]
GameOverCallback = Callable[[GameResult], None]
EngineRequestCallback = Callable[["Position", int], None]


class GamePhase(IntEnum):
    """Finite-state-machine states for a game."""

    NOT_STARTED = auto()
    AWAITING_MOVE = auto()
    THINKING = auto()  # engine is computing
    GAME_OVER = auto()


@dataclass
class GameEvents:
    """Observable callbacks. Multiple handlers per event."""

    on_move: list[MoveCallback] = field(default_factory=list)
    on_game_over: list[GameOverCallback] = field(default_factory=list)
    on_engine_request: list[EngineRequestCallback] = field(default_factory=list)


class GameController:
    """Holds the current position and the side the engine plays, if any.

    Engine requests are numbered. :meth:`complete_engine_move` accepts only
    the answer to the outstanding request and clears it before applying the
    move, so a duplicate or late answer can never advance the turn twice.

    Methods are meant to be called from one thread (the UI thread); the
    Qt worker's results reach it through queued signals.
    """

    __slots__ = ("_position", "_engine_color", "_phase", "_request_id", "_pending_request", "events")

    def __init__(self) -> None:
        self._position = position_from_fen(STARTING_FEN)
        self._engine_color: Color | None = None
        self._phase = GamePhase.NOT_STARTED
        self._request_id = 0
        self._pending_request: int | None = None
        self.events = GameEvents()

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def position(self) -> Position:
        return self._position

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def pending_request(self) -> int | None:
        return self._pending_request

    @property
    def result(self) -> GameResult:
        return Rules.game_result(self._position)

    # ── Commands ─────────────────────────────────────────────────────────

    def new_game(self, fen: str | None = None, engine_color: Color | None = None) -> None:
        """Start from *fen* (default: initial position); the engine plays *engine_color*."""
        self._position = position_from_fen(fen or STARTING_FEN)
        self._engine_color = engine_color
        self._pending_request = None
        self._advance()

    def submit_move(self, move: Move) -> bool:
        """Apply a human move. Returns ``False`` if it is rejected."""
        if self._phase != GamePhase.AWAITING_MOVE:
            return False
        return self._apply(move)

    def complete_engine_move(self, request_id: int, move: Move | None) -> bool:
        """Apply the engine's answer to request *request_id*.

        Stale, duplicate or cancelled answers are ignored and return ``False``.
        ``move=None`` (no legal move) ends the game.
        """
        if self._phase != GamePhase.THINKING or request_id != self._pending_request:
            _LOGGER.debug("Ignoring engine answer for request %d", request_id)
            return False
        self._pending_request = None
        if move is None:
            self._finish()
            return False
        if not self._apply(move):
            # Ask again rather than leave the engine side stuck.
            self._advance()
            return False
        return True

    def cancel_engine_request(self) -> None:
        """Forget the outstanding request; a late answer will be ignored."""
        if self._pending_request is None:
            return
        self._pending_request = None
        self._phase = GamePhase.AWAITING_MOVE

    # ── Internal helpers ─────────────────────────────────────────────────

    def _apply(self, move: Move) -> bool:
        try:
            move = resolve_move(self._position, move)
        except IllegalMoveError as exc:
            _LOGGER.info("Rejected move: %s", exc)
            return False

        self._position = self._position.play(move)
        for cb in self.events.on_move:
            cb(move, self._position)
        self._advance()
        return True

    def _advance(self) -> None:
        if Rules.game_result(self._position) != GameResult.IN_PROGRESS:
            self._finish()
            return

        if self._position.side_to_move != self._engine_color:
            self._phase = GamePhase.AWAITING_MOVE
            return

        self._phase = GamePhase.THINKING
        self._request_id += 1
        self._pending_request = self._request_id
        for cb in self.events.on_engine_request:
            cb(self._position, self._request_id)

    def _finish(self) -> None:
        self._phase = GamePhase.GAME_OVER
        result = Rules.game_result(self._position)
        for cb in self.events.on_game_over:
            cb(result)
