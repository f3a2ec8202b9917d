"""Static evaluation: material, piece-square terms and pawn structure."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from knightfall.core.enums import Color, PieceType
from knightfall.core.types import Square, file_of, rank_of

if TYPE_CHECKING:
    from collections.abc import Callable

    from knightfall.core.position import Position

PIECE_VALUES: Final[dict[PieceType, int]] = {
    PieceType.PAWN: 100,
    PieceType.KNIGHT: 320,
    PieceType.BISHOP: 330,
    PieceType.ROOK: 500,
    PieceType.QUEEN: 900,
    PieceType.KING: 0,
}

DOUBLED_PAWN_PENALTY: Final = 45

# Game phase from non-pawn material: 24 with all pieces on, 0 with none.
_PHASE_WEIGHTS: Final[dict[PieceType, int]] = {
    PieceType.KNIGHT: 1,
    PieceType.BISHOP: 1,
    PieceType.ROOK: 2,
    PieceType.QUEEN: 4,
}
_TOTAL_PHASE: Final = 24

_FILE_MASKS: Final = tuple(0x0101010101010101 << f for f in range(8))


def _middlegame_bonus(piece_type: PieceType, file_idx: int, rank_idx: int) -> int:
    """Positional bonus with *rank_idx* counted from the owner's back rank."""
    center_dist = abs(file_idx - 3) + abs(rank_idx - 3)

    if piece_type == PieceType.PAWN:
        return rank_idx * 12 - abs(file_idx - 3) * 2
    if piece_type == PieceType.KNIGHT:
        return 28 - center_dist * 8
    if piece_type == PieceType.BISHOP:
        return 22 - center_dist * 5 + rank_idx * 2
    if piece_type == PieceType.ROOK:
        return 10 + rank_idx * 3 - abs(file_idx - 3)
    if piece_type == PieceType.QUEEN:
        return 6 - center_dist * 2

    # King: stay home behind the pawns.
    if rank_idx <= 1:
        return 18 - abs(file_idx - 4) * 2
    return -rank_idx * 8


def _endgame_bonus(piece_type: PieceType, file_idx: int, rank_idx: int) -> int:
    if piece_type == PieceType.KING:
        center_dist = max(3 - file_idx, file_idx - 4, 0) + max(3 - rank_idx, rank_idx - 4, 0)
        return 24 - center_dist * 8
    if piece_type == PieceType.PAWN:
        return rank_idx * rank_idx * 3
    return _middlegame_bonus(piece_type, file_idx, rank_idx)


def _build_tables(
    bonus: Callable[[PieceType, int, int], int], color: Color
) -> tuple[tuple[int, ...], ...]:
    tables: list[tuple[int, ...]] = [()]  # index 0 unused, PieceType starts at 1
    for piece_type in PieceType:
        row: list[int] = []
        for sq in range(64):
            rank_idx = rank_of(sq) if color == Color.WHITE else 7 - rank_of(sq)
            row.append(bonus(piece_type, file_of(sq), rank_idx))
        tables.append(tuple(row))
    return tuple(tables)


# [color][piece_type][square]
_MIDDLEGAME_TABLES: Final = (
    _build_tables(_middlegame_bonus, Color.WHITE),
    _build_tables(_middlegame_bonus, Color.BLACK),
)
_ENDGAME_TABLES: Final = (
    _build_tables(_endgame_bonus, Color.WHITE),
    _build_tables(_endgame_bonus, Color.BLACK),
)


def piece_square_bonus(
    piece_type: PieceType, color: Color, sq: Square, endgame: bool = False
) -> int:
    tables = _ENDGAME_TABLES if endgame else _MIDDLEGAME_TABLES
    return tables[int(color)][piece_type][sq]


class Evaluator:
    """Scores a position in centipawns from the side to move's point of view.

    Material plus piece-square terms blended between middlegame and endgame
    tables by the remaining non-pawn material, minus a penalty for every
    extra pawn on a file. Deterministic and antisymmetric: the same placement
    with the other side to move scores the exact negation.
    """

    __slots__ = ("_piece_values", "_doubled_pawn_penalty")

    def __init__(
        self,
        piece_values: dict[PieceType, int] | None = None,
        doubled_pawn_penalty: int = DOUBLED_PAWN_PENALTY,
    ) -> None:
        self._piece_values = dict(PIECE_VALUES if piece_values is None else piece_values)
        self._doubled_pawn_penalty = doubled_pawn_penalty

    def piece_value(self, piece_type: PieceType) -> int:
        return self._piece_values[piece_type]

    def evaluate(self, position: Position) -> int:
        board = position.board
        material = 0
        middlegame = 0
        endgame = 0
        phase = 0

        for color in Color:
            sign = 1 if color == Color.WHITE else -1
            mg_table = _MIDDLEGAME_TABLES[int(color)]
            eg_table = _ENDGAME_TABLES[int(color)]
            for piece_type in PieceType:
                bitboard = board.pieces_bitboard(color, piece_type)
                if not bitboard:
                    continue
                count = bitboard.bit_count()
                material += sign * self._piece_values[piece_type] * count
                phase += _PHASE_WEIGHTS.get(piece_type, 0) * count
                mg_row = mg_table[piece_type]
                eg_row = eg_table[piece_type]
                while bitboard:
                    lsb = bitboard & -bitboard
                    sq = lsb.bit_length() - 1
                    middlegame += sign * mg_row[sq]
                    endgame += sign * eg_row[sq]
                    bitboard ^= lsb
            material -= sign * self._doubled_pawns(board.pieces_bitboard(color, PieceType.PAWN))

        phase = min(phase, _TOTAL_PHASE)
        blended = middlegame * phase + endgame * (_TOTAL_PHASE - phase)
        # Truncate toward zero so colour-mirrored positions score exactly opposite.
        positional = abs(blended) // _TOTAL_PHASE
        if blended < 0:
            positional = -positional
        score = material + positional
        return score if position.side_to_move == Color.WHITE else -score

    def _doubled_pawns(self, pawns: int) -> int:
        penalty = 0
        for file_mask in _FILE_MASKS:
            on_file = (pawns & file_mask).bit_count()
            if on_file > 1:
                penalty += (on_file - 1) * self._doubled_pawn_penalty
        return penalty


_DEFAULT_EVALUATOR = Evaluator()


def evaluate(position: Position) -> int:
    """Evaluate *position* with the default weights."""
    return _DEFAULT_EVALUATOR.evaluate(position)
