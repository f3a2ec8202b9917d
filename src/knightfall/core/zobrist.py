"""Zobrist keys for position hashing and repetition detection."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from knightfall.core.enums import CastlingRights, Color
from knightfall.core.piece import Piece
from knightfall.core.types import Square

if TYPE_CHECKING:
    from knightfall.core.board import Board

_SEED: Final = 0x6B4E1F3C2D5A7980
_MASK_64: Final = 0xFFFFFFFFFFFFFFFF


def _splitmix64(state: int) -> int:
    """Deterministic 64-bit mixer, so keys are stable between runs."""
    z = (state + 0x9E3779B97F4A7C15) & _MASK_64
    z = ((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9) & _MASK_64
    z = ((z ^ (z >> 27)) * 0x94D049BB133111EB) & _MASK_64
    return z ^ (z >> 31)


def _key_table(start: int, count: int) -> tuple[int, ...]:
    return tuple(_splitmix64(_SEED + start + i) for i in range(count))


# Layout: 768 piece keys, 1 side key, 16 castling keys, 64 en-passant keys.
_PIECE_KEYS: Final = _key_table(0, 2 * 6 * 64)
_SIDE_TO_MOVE_KEY: Final = _splitmix64(_SEED + 768)
_CASTLING_KEYS: Final = _key_table(769, 16)
_EN_PASSANT_KEYS: Final = _key_table(785, 64)


def piece_key(piece: Piece, sq: Square) -> int:
    return _PIECE_KEYS[(int(piece.color) * 6 + int(piece.piece_type) - 1) * 64 + sq]


def side_to_move_key() -> int:
    """Toggled whenever black is to move."""
    return _SIDE_TO_MOVE_KEY


def castling_key(castling: CastlingRights) -> int:
    return _CASTLING_KEYS[int(castling) & 0xF]


def en_passant_key(ep_square: Square) -> int:
    return _EN_PASSANT_KEYS[ep_square]


def position_key(
    board: Board,
    side_to_move: Color,
    castling: CastlingRights,
    en_passant: Square | None,
) -> int:
    """Full key computed from scratch; :meth:`Position.play` updates it incrementally."""
    key = castling_key(castling)
    if side_to_move == Color.BLACK:
        key ^= _SIDE_TO_MOVE_KEY
    if en_passant is not None:
        key ^= en_passant_key(en_passant)
    for sq in range(64):
        piece = board[sq]
        if piece is not None:
            key ^= piece_key(piece, sq)
    return key
