"""Position: immutable game state (board + metadata) with pure move application."""

from __future__ import annotations

from knightfall.core.board import Board
from knightfall.core.enums import CastlingRights, Color, MoveFlag, PieceType
from knightfall.core.move import Move
from knightfall.core.piece import Piece
from knightfall.core.types import Square, file_of, make_square, rank_of
from knightfall.core.zobrist import (
    castling_key,
    en_passant_key,
    piece_key,
    position_key,
    side_to_move_key,
)

# Rook corner → castling right lost when that square is vacated or captured on.
_ROOK_CORNERS: dict[Square, CastlingRights] = {
    make_square(0, 0): CastlingRights.WHITE_QUEENSIDE,
    make_square(7, 0): CastlingRights.WHITE_KINGSIDE,
    make_square(0, 7): CastlingRights.BLACK_QUEENSIDE,
    make_square(7, 7): CastlingRights.BLACK_KINGSIDE,
}
_KING_RIGHTS: tuple[CastlingRights, CastlingRights] = (
    CastlingRights.WHITE_BOTH,
    CastlingRights.BLACK_BOTH,
)


def place_move(board: Board, move: Move) -> Piece | None:
    """Move pieces on an editable *board* according to *move*.

    Handles en passant, promotion and the castling rook slide. Returns the
    captured piece, if any. Rights, clocks and hashes are not touched.
    """
    piece = board[move.from_sq]
    if piece is None:
        raise ValueError(f"No piece on {move.from_sq} for move {move}")

    capture_sq = move.to_sq
    if move.is_en_passant:
        capture_sq = make_square(file_of(move.to_sq), rank_of(move.from_sq))
    captured = board[capture_sq]
    if captured is not None:
        board[capture_sq] = None

    board[move.from_sq] = None
    if move.is_promotion and move.promotion is not None:
        board[move.to_sq] = Piece(piece.color, move.promotion)
    else:
        board[move.to_sq] = piece

    if move.flag == MoveFlag.CASTLE_KINGSIDE:
        rank = rank_of(move.from_sq)
        board[make_square(5, rank)] = board[make_square(7, rank)]
        board[make_square(7, rank)] = None
    elif move.flag == MoveFlag.CASTLE_QUEENSIDE:
        rank = rank_of(move.from_sq)
        board[make_square(3, rank)] = board[make_square(0, rank)]
        board[make_square(0, rank)] = None
    return captured


class Position:
    """Full chess position: board + side to move + castling + en passant + clocks.

    Positions are values. :meth:`play` returns a new position and leaves the
    receiver untouched, so sibling branches of a search never share a board.
    Besides the FEN fields a position remembers the Zobrist keys reached since
    the last irreversible move, which is what repetition detection needs.
    """

    __slots__ = (
        "_board",
        "_side_to_move",
        "_castling",
        "_en_passant",
        "_halfmove_clock",
        "_fullmove_number",
        "_key",
        "_history",
    )

    def __init__(
        self,
        board: Board | None = None,
        side_to_move: Color = Color.WHITE,
        castling: CastlingRights = CastlingRights.ALL,
        en_passant: Square | None = None,
        halfmove_clock: int = 0,
        fullmove_number: int = 1,
    ) -> None:
        if board is None:
            board = Board.initial()
        elif not board.is_frozen:
            board = board.copy()
        self._board = board.freeze()
        self._side_to_move = side_to_move
        self._castling = castling
        self._en_passant = en_passant
        self._halfmove_clock = halfmove_clock
        self._fullmove_number = fullmove_number
        self._key = position_key(board, side_to_move, castling, en_passant)
        self._history: tuple[int, ...] = ()

    # ── Read-only state ──────────────────────────────────────────────────

    @property
    def board(self) -> Board:
        return self._board

    @property
    def side_to_move(self) -> Color:
        return self._side_to_move

    @property
    def castling(self) -> CastlingRights:
        return self._castling

    @property
    def en_passant(self) -> Square | None:
        return self._en_passant

    @property
    def halfmove_clock(self) -> int:
        return self._halfmove_clock

    @property
    def fullmove_number(self) -> int:
        return self._fullmove_number

    @property
    def zobrist_hash(self) -> int:
        """Zobrist key for placement, side, castling and en passant."""
        return self._key

    def repetition_count(self) -> int:
        """How many times the current position occurred since the last irreversible move."""
        return self._history.count(self._key) + 1

    # ── Move application ─────────────────────────────────────────────────

    def play(self, move: Move) -> Position:
        """Return the position after *move*.

        *move* is trusted to be at least pseudo-legal for this position;
        ``knightfall.api.apply_move`` is the validating entry point.
        """
        piece = self._board[move.from_sq]
        if piece is None:
            raise ValueError(f"No piece on {move.from_sq} for move {move}")

        board = self._board.copy()
        captured = place_move(board, move)

        key = self._key ^ side_to_move_key()
        key ^= piece_key(piece, move.from_sq) ^ piece_key(board[move.to_sq], move.to_sq)
        if captured is not None:
            capture_sq = move.to_sq
            if move.is_en_passant:
                capture_sq = make_square(file_of(move.to_sq), rank_of(move.from_sq))
            key ^= piece_key(captured, capture_sq)
        if move.is_castle:
            rank = rank_of(move.from_sq)
            rook = Piece(piece.color, PieceType.ROOK)
            if move.flag == MoveFlag.CASTLE_KINGSIDE:
                key ^= piece_key(rook, make_square(7, rank)) ^ piece_key(rook, make_square(5, rank))
            else:
                key ^= piece_key(rook, make_square(0, rank)) ^ piece_key(rook, make_square(3, rank))

        castling = self._castling
        if piece.piece_type == PieceType.KING:
            castling &= ~_KING_RIGHTS[int(piece.color)]
        for sq in (move.from_sq, move.to_sq):
            right = _ROOK_CORNERS.get(sq)
            if right is not None:
                castling &= ~right
        if castling != self._castling:
            key ^= castling_key(self._castling) ^ castling_key(castling)

        en_passant: Square | None = None
        if move.flag == MoveFlag.DOUBLE_PAWN:
            en_passant = (move.from_sq + move.to_sq) // 2
        if self._en_passant is not None:
            key ^= en_passant_key(self._en_passant)
        if en_passant is not None:
            key ^= en_passant_key(en_passant)

        irreversible = piece.piece_type == PieceType.PAWN or captured is not None
        child = Position.__new__(Position)
        child._board = board.freeze()
        child._side_to_move = self._side_to_move.opposite
        child._castling = castling
        child._en_passant = en_passant
        child._halfmove_clock = 0 if irreversible else self._halfmove_clock + 1
        child._fullmove_number = self._fullmove_number + (
            1 if self._side_to_move == Color.BLACK else 0
        )
        child._key = key
        child._history = () if irreversible else self._history + (self._key,)
        return child

    # ── Dunder helpers ───────────────────────────────────────────────────

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Position):
            return NotImplemented
        return (
            self._key == other._key
            and self._board == other._board
            and self._side_to_move == other._side_to_move
            and self._castling == other._castling
            and self._en_passant == other._en_passant
            and self._halfmove_clock == other._halfmove_clock
            and self._fullmove_number == other._fullmove_number
        )

    def __hash__(self) -> int:
        return self._key

    def __repr__(self) -> str:
        from knightfall.core.notation.fen import position_to_fen

        return f"Position({position_to_fen(self)!r})"
