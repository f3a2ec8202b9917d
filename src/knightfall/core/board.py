"""Board - piece placement on an 8x8 board."""

from __future__ import annotations

from knightfall.core.enums import Color, PieceType
from knightfall.core.piece import Piece
from knightfall.core.types import Square, make_square

_PIECE_TYPE_COUNT = 6
_COLOR_COUNT = 2

_BACK_RANK: tuple[PieceType, ...] = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)


def squares_of(bitboard: int) -> list[Square]:
    """Square indexes of the set bits in *bitboard*, lowest first."""
    squares: list[Square] = []
    while bitboard:
        lsb = bitboard & -bitboard
        squares.append(lsb.bit_length() - 1)
        bitboard ^= lsb
    return squares


class Board:
    """64-square board with incremental bitboard indexes.

    A board is mutable while it is being set up and becomes read-only once
    :meth:`freeze` is called, which :class:`~knightfall.core.position.Position`
    does when it takes ownership.
    """

    __slots__ = ("_squares", "_piece_bitboards", "_color_bitboards", "_frozen")

    def __init__(self) -> None:
        self._squares: list[Piece | None] = [None] * 64
        # [color][piece_type-1] -> bitboard of occupied squares.
        self._piece_bitboards: list[list[int]] = [
            [0] * _PIECE_TYPE_COUNT for _ in range(_COLOR_COUNT)
        ]
        # [color] -> bitboard of all occupied squares for that color.
        self._color_bitboards: list[int] = [0] * _COLOR_COUNT
        self._frozen = False

    # -- Element access -----------------------------------------------------

    def __getitem__(self, sq: Square) -> Piece | None:
        return self._squares[sq]

    def __setitem__(self, sq: Square, piece: Piece | None) -> None:
        if self._frozen:
            raise TypeError("Board is frozen; apply a move to get a new position")
        old_piece = self._squares[sq]
        if old_piece == piece:
            return

        mask = 1 << sq
        if old_piece is not None:
            old_color = int(old_piece.color)
            self._piece_bitboards[old_color][int(old_piece.piece_type) - 1] &= ~mask
            self._color_bitboards[old_color] &= ~mask

        self._squares[sq] = piece
        if piece is None:
            return

        color = int(piece.color)
        self._piece_bitboards[color][int(piece.piece_type) - 1] |= mask
        self._color_bitboards[color] |= mask

    def is_empty(self, sq: Square) -> bool:
        return self._squares[sq] is None

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    # -- Query helpers ------------------------------------------------------

    def pieces(self, color: Color, piece_type: PieceType) -> list[Square]:
        """Squares occupied by *color*'s *piece_type*."""
        return squares_of(self.pieces_bitboard(color, piece_type))

    def pieces_bitboard(self, color: Color, piece_type: PieceType) -> int:
        """Bitboard of squares occupied by *color*'s *piece_type*."""
        return self._piece_bitboards[int(color)][int(piece_type) - 1]

    def has_piece(self, color: Color, piece_type: PieceType) -> bool:
        return bool(self.pieces_bitboard(color, piece_type))

    def all_pieces_bitboard(self, color: Color) -> int:
        """Bitboard of all squares occupied by *color*."""
        return self._color_bitboards[int(color)]

    def occupied_bitboard(self) -> int:
        return self._color_bitboards[0] | self._color_bitboards[1]

    def all_pieces(self, color: Color) -> list[Square]:
        return squares_of(self.all_pieces_bitboard(color))

    def king_count(self, color: Color) -> int:
        return self.pieces_bitboard(color, PieceType.KING).bit_count()

    def king_square(self, color: Color) -> Square:
        """Return the single king square for *color*."""
        kings = self.pieces_bitboard(color, PieceType.KING)
        if not kings:
            raise ValueError(f"No {color.name} king on board")
        return (kings & -kings).bit_length() - 1

    # -- Copying ------------------------------------------------------------

    def copy(self) -> Board:
        """Unfrozen copy that may be edited freely."""
        b = Board()
        b._squares = self._squares.copy()
        b._piece_bitboards = [row.copy() for row in self._piece_bitboards]
        b._color_bitboards = self._color_bitboards.copy()
        return b

    def freeze(self) -> Board:
        self._frozen = True
        return self

    # -- Factory ------------------------------------------------------------

    @classmethod
    def initial(cls) -> Board:
        """Standard starting position."""
        b = cls()
        for f in range(8):
            b[make_square(f, 1)] = Piece(Color.WHITE, PieceType.PAWN)
            b[make_square(f, 6)] = Piece(Color.BLACK, PieceType.PAWN)
        for f, pt in enumerate(_BACK_RANK):
            b[make_square(f, 0)] = Piece(Color.WHITE, pt)
            b[make_square(f, 7)] = Piece(Color.BLACK, pt)
        return b

    # -- Dunder helpers -----------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._squares == other._squares

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        rows: list[str] = []
        for rank in range(7, -1, -1):
            row = []
            for file in range(8):
                p = self[make_square(file, rank)]
                row.append(str(p) if p else ".")
            rows.append(f"{rank + 1} {' '.join(row)}")
        rows.append("  a b c d e f g h")
        return "\n".join(rows)
