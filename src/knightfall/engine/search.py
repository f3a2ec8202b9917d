"""Shared engine search models and protocol."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Final, Protocol

if TYPE_CHECKING:
    from knightfall.core.move import Move
    from knightfall.core.position import Position

CancelCheck = Callable[[], bool]

INF_SCORE: Final = 1_000_000
MATE_SCORE: Final = 100_000
# Scores beyond this magnitude encode a forced mate (MATE_SCORE - plies).
MATE_THRESHOLD: Final = MATE_SCORE - 1_000
DRAW_SCORE: Final = 0

MIN_STRENGTH: Final = 1
MAX_STRENGTH: Final = 10

# strength -> (depth cap, share of the time budget)
STRENGTH_LEVELS: Final[dict[int, tuple[int | None, float]]] = {
    1: (1, 0.1),
    2: (1, 0.2),
    3: (2, 0.3),
    4: (2, 0.4),
    5: (3, 0.5),
    6: (3, 0.6),
    7: (4, 0.7),
    8: (5, 0.8),
    9: (6, 0.9),
    10: (None, 1.0),
}


def mate_in(score: int) -> int | None:
    """Plies to mate encoded in *score* (negative when being mated), else ``None``."""
    if score >= MATE_THRESHOLD:
        return MATE_SCORE - score
    if score <= -MATE_THRESHOLD:
        return -(MATE_SCORE + score)
    return None


class SearchAborted(Exception):
    """Raised inside the tree when a cancel request arrives; never leaves the engine."""


@dataclass(slots=True, frozen=True)
class SearchBudget:
    """Search constraints for a single move computation.

    ``strength`` runs from 1 (weakest) to 10 (full budget). Lower levels cap
    the depth and shorten the time limit; they never change evaluation.
    """

    max_depth: int = 4
    time_limit_ms: int | None = 900
    strength: int = MAX_STRENGTH

    def __post_init__(self) -> None:
        if self.max_depth < 1:
            raise ValueError(f"Search depth must be >= 1, got {self.max_depth}")
        if self.time_limit_ms is not None and self.time_limit_ms < 1:
            raise ValueError(f"Time limit must be >= 1 ms, got {self.time_limit_ms}")
        if not MIN_STRENGTH <= self.strength <= MAX_STRENGTH:
            raise ValueError(
                f"Strength must be in [{MIN_STRENGTH}, {MAX_STRENGTH}], got {self.strength}"
            )

    def effective(self) -> SearchBudget:
        """The budget actually searched once strength throttling is applied."""
        depth_cap, time_share = STRENGTH_LEVELS[self.strength]
        max_depth = self.max_depth if depth_cap is None else min(self.max_depth, depth_cap)
        time_limit_ms = self.time_limit_ms
        if time_limit_ms is not None:
            time_limit_ms = max(1, int(time_limit_ms * time_share))
        return replace(
            self, max_depth=max_depth, time_limit_ms=time_limit_ms, strength=MAX_STRENGTH
        )


class SearchOutcome(Enum):
    """Whether a search produced a move or hit a terminal position."""

    MOVE = "move"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"


@dataclass(slots=True, frozen=True)
class SearchResult:
    """Result produced by the engine search.

    ``score_cp`` is from the point of view of the side to move. ``depth`` is
    the deepest completed iteration (0 when the move is a fallback).
    """

    best_move: Move | None
    score_cp: int
    depth: int
    nodes: int
    elapsed_ms: int = 0
    ponder_move: Move | None = None
    outcome: SearchOutcome = SearchOutcome.MOVE

    @property
    def is_terminal(self) -> bool:
        return self.outcome is not SearchOutcome.MOVE

    @property
    def mate_in(self) -> int | None:
        return mate_in(self.score_cp)


class SearchContext:
    """Node counters and cancel polling shared by one search call."""

    __slots__ = ("nodes", "qnodes", "_is_cancelled", "_poll_mask")

    def __init__(self, is_cancelled: CancelCheck | None = None, poll_interval: int = 256) -> None:
        self.nodes = 0
        self.qnodes = 0
        self._is_cancelled = is_cancelled
        # poll_interval must be a power of two
        self._poll_mask = poll_interval - 1

    @property
    def total_nodes(self) -> int:
        return self.nodes + self.qnodes

    def visit(self) -> None:
        self.nodes += 1
        self._poll()

    def visit_quiescence(self) -> None:
        self.qnodes += 1
        self._poll()

    def check_cancelled(self) -> None:
        if self._is_cancelled is not None and self._is_cancelled():
            raise SearchAborted

    def _poll(self) -> None:
        if (self.nodes + self.qnodes) & self._poll_mask == 0:
            self.check_cancelled()


class IEngine(Protocol):
    """Protocol for chess engines used by the game layer and the Qt worker."""

    def search(
        self,
        position: Position,
        budget: SearchBudget,
        is_cancelled: CancelCheck | None = None,
    ) -> SearchResult: ...
