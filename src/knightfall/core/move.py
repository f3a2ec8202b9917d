"""Move value object (UCI-style representation)."""

from __future__ import annotations

from dataclasses import dataclass, field

from knightfall.core.enums import MoveFlag, PieceType
from knightfall.core.types import Square, is_valid_square, square_name

_PROMO_CHARS: dict[PieceType, str] = {
    PieceType.KNIGHT: "n",
    PieceType.BISHOP: "b",
    PieceType.ROOK: "r",
    PieceType.QUEEN: "q",
}


@dataclass(frozen=True, slots=True)
class Move:
    """Immutable value object representing a single chess move.

    ``is_capture`` is filled in by the move generator and ignored by
    equality, so ``Move(E2, E4, MoveFlag.DOUBLE_PAWN)`` built by hand
    compares equal to the generated one.
    """

    from_sq: Square
    to_sq: Square
    flag: MoveFlag = MoveFlag.NORMAL
    promotion: PieceType | None = None
    is_capture: bool = field(default=False, compare=False)

    def __post_init__(self) -> None:
        if not (is_valid_square(self.from_sq) and is_valid_square(self.to_sq)):
            raise ValueError(f"Move squares off the board: {self.from_sq}, {self.to_sq}")
        if self.from_sq == self.to_sq:
            raise ValueError(f"Null move on {square_name(self.from_sq)}")

    # ── Classification ───────────────────────────────────────────────────

    @property
    def is_promotion(self) -> bool:
        return self.flag == MoveFlag.PROMOTION

    @property
    def is_en_passant(self) -> bool:
        return self.flag == MoveFlag.EN_PASSANT

    @property
    def is_castle(self) -> bool:
        return self.flag in (MoveFlag.CASTLE_KINGSIDE, MoveFlag.CASTLE_QUEENSIDE)

    @property
    def is_noisy(self) -> bool:
        """Captures (including en passant) and promotions."""
        return self.is_capture or self.is_en_passant or self.is_promotion

    # ── Display ──────────────────────────────────────────────────────────

    def __str__(self) -> str:
        base = f"{square_name(self.from_sq)}{square_name(self.to_sq)}"
        if self.promotion is not None:
            base += _PROMO_CHARS.get(self.promotion, "")
        return base

    @property
    def uci(self) -> str:
        """UCI long-algebraic notation."""
        return str(self)
