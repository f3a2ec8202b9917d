"""Piece value object."""

from __future__ import annotations

from dataclasses import dataclass

from knightfall.core.enums import Color, PieceType

# FEN letter (white, upper case) for each piece kind.
_LETTERS: dict[PieceType, str] = {
    PieceType.PAWN: "P",
    PieceType.KNIGHT: "N",
    PieceType.BISHOP: "B",
    PieceType.ROOK: "R",
    PieceType.QUEEN: "Q",
    PieceType.KING: "K",
}
_KINDS: dict[str, PieceType] = {letter: kind for kind, letter in _LETTERS.items()}


@dataclass(frozen=True, slots=True)
class Piece:
    """Immutable (color, kind) pair. Empty squares hold ``None`` instead."""

    color: Color
    piece_type: PieceType

    def __str__(self) -> str:
        """FEN character (uppercase = white, lowercase = black)."""
        letter = _LETTERS[self.piece_type]
        return letter if self.color == Color.WHITE else letter.lower()

    @classmethod
    def from_char(cls, char: str) -> Piece:
        """Create piece from FEN character, e.g. 'N' → white knight."""
        kind = _KINDS.get(char.upper()) if len(char) == 1 else None
        if kind is None:
            raise ValueError(f"Invalid piece character: {char!r}")
        return cls(Color.WHITE if char.isupper() else Color.BLACK, kind)
