"""Legal and pseudo-legal move generation + attack detection."""

from __future__ import annotations

from typing import TYPE_CHECKING

from knightfall.core.enums import CastlingRights, Color, MoveFlag, PieceType
from knightfall.core.move import Move
from knightfall.core.position import place_move
from knightfall.core.types import Square, is_valid_square, make_square

if TYPE_CHECKING:
    from knightfall.core.board import Board
    from knightfall.core.position import Position


KNIGHT_OFFSETS: tuple[tuple[int, int], ...] = (
    (-2, -1),
    (-2, 1),
    (-1, -2),
    (-1, 2),
    (1, -2),
    (1, 2),
    (2, -1),
    (2, 1),
)

KING_OFFSETS: tuple[tuple[int, int], ...] = (
    (-1, -1),
    (-1, 0),
    (-1, 1),
    (0, -1),
    (0, 1),
    (1, -1),
    (1, 0),
    (1, 1),
)

BISHOP_DIRS: tuple[tuple[int, int], ...] = ((-1, -1), (-1, 1), (1, -1), (1, 1))
ROOK_DIRS: tuple[tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))
QUEEN_DIRS: tuple[tuple[int, int], ...] = BISHOP_DIRS + ROOK_DIRS

PROMOTION_TYPES: tuple[PieceType, ...] = (
    PieceType.QUEEN,
    PieceType.ROOK,
    PieceType.BISHOP,
    PieceType.KNIGHT,
)

# Per color: (push direction, start rank, rank a pawn promotes from).
_PAWN_GEOMETRY: tuple[tuple[int, int, int], tuple[int, int, int]] = (
    (8, 1, 6),
    (-8, 6, 1),
)

_KINGSIDE_RIGHT = (CastlingRights.WHITE_KINGSIDE, CastlingRights.BLACK_KINGSIDE)
_QUEENSIDE_RIGHT = (CastlingRights.WHITE_QUEENSIDE, CastlingRights.BLACK_QUEENSIDE)


# -- Precomputed lookup tables ---------------------------------------------


def _build_targets(
    offsets: tuple[tuple[int, int], ...],
) -> tuple[tuple[Square, ...], ...]:
    targets: list[tuple[Square, ...]] = []
    for sq in range(64):
        file_idx = sq & 7
        rank_idx = sq >> 3
        targets.append(
            tuple(
                make_square(file_idx + df, rank_idx + dr)
                for df, dr in offsets
                if 0 <= file_idx + df < 8 and 0 <= rank_idx + dr < 8
            )
        )
    return tuple(targets)


def _build_mask(squares: tuple[Square, ...]) -> int:
    mask = 0
    for sq in squares:
        mask |= 1 << sq
    return mask


def _build_rays(
    directions: tuple[tuple[int, int], ...],
) -> tuple[tuple[tuple[Square, ...], ...], ...]:
    rays_per_square: list[tuple[tuple[Square, ...], ...]] = []
    for sq in range(64):
        square_rays: list[tuple[Square, ...]] = []
        for df, dr in directions:
            af = (sq & 7) + df
            ar = (sq >> 3) + dr
            ray: list[Square] = []
            while 0 <= af < 8 and 0 <= ar < 8:
                ray.append(make_square(af, ar))
                af += df
                ar += dr
            square_rays.append(tuple(ray))
        rays_per_square.append(tuple(square_rays))
    return tuple(rays_per_square)


def _build_pawn_captures(forward: int) -> tuple[tuple[Square, ...], ...]:
    """Squares a pawn on each square attacks when moving in *forward* rank direction."""
    return _build_targets(((-1, forward), (1, forward)))


_KNIGHT_TARGETS = _build_targets(KNIGHT_OFFSETS)
_KING_TARGETS = _build_targets(KING_OFFSETS)
_KNIGHT_ATTACK_MASKS = tuple(_build_mask(t) for t in _KNIGHT_TARGETS)
_KING_ATTACK_MASKS = tuple(_build_mask(t) for t in _KING_TARGETS)
# [color][sq] -> squares a pawn of that color on sq attacks.
_PAWN_CAPTURES = (_build_pawn_captures(1), _build_pawn_captures(-1))
# [by_color][sq] -> squares from which a pawn of by_color attacks sq.
_PAWN_ATTACKER_MASKS = (
    tuple(_build_mask(t) for t in _build_pawn_captures(-1)),
    tuple(_build_mask(t) for t in _build_pawn_captures(1)),
)

_BISHOP_RAYS = _build_rays(BISHOP_DIRS)
_ROOK_RAYS = _build_rays(ROOK_DIRS)
_QUEEN_RAYS = _build_rays(QUEEN_DIRS)


def is_square_attacked(board: Board, sq: Square, by_color: Color) -> bool:
    """Is *sq* attacked by any piece of *by_color* on *board*?"""
    by_idx = int(by_color)

    if board.pieces_bitboard(by_color, PieceType.PAWN) & _PAWN_ATTACKER_MASKS[by_idx][sq]:
        return True
    if board.pieces_bitboard(by_color, PieceType.KNIGHT) & _KNIGHT_ATTACK_MASKS[sq]:
        return True
    if board.pieces_bitboard(by_color, PieceType.KING) & _KING_ATTACK_MASKS[sq]:
        return True

    queens = board.pieces_bitboard(by_color, PieceType.QUEEN)
    if queens or board.pieces_bitboard(by_color, PieceType.BISHOP):
        if _ray_hits(board, _BISHOP_RAYS[sq], by_color, PieceType.BISHOP):
            return True
    if queens or board.pieces_bitboard(by_color, PieceType.ROOK):
        if _ray_hits(board, _ROOK_RAYS[sq], by_color, PieceType.ROOK):
            return True
    return False


def _ray_hits(
    board: Board,
    rays: tuple[tuple[Square, ...], ...],
    by_color: Color,
    slider: PieceType,
) -> bool:
    for ray in rays:
        for to_sq in ray:
            piece = board[to_sq]
            if piece is None:
                continue
            if piece.color == by_color and piece.piece_type in (slider, PieceType.QUEEN):
                return True
            break
    return False


class MoveGenerator:
    """Generates legal moves for a given :class:`Position`.

    Generation is a pure function of the position: legality is checked by
    replaying each candidate on a scratch copy of the board.
    """

    __slots__ = ("_pos", "_board")

    def __init__(self, position: Position) -> None:
        self._pos = position
        self._board = position.board

    # -- Public API ---------------------------------------------------------

    def generate_legal_moves(self) -> list[Move]:
        """All strictly legal moves for the side to move."""
        return self._filter_legal(self.generate_pseudo_legal_moves())

    def generate_legal_moves_from(self, sq: Square) -> list[Move]:
        """Legal moves of the piece standing on *sq* (empty if none or not to move)."""
        if not is_valid_square(sq):
            raise ValueError(f"Square index out of range: {sq}")
        piece = self._board[sq]
        if piece is None or piece.color != self._pos.side_to_move:
            return []
        moves: list[Move] = []
        self._gen_piece(sq, piece.piece_type, piece.color, moves)
        return self._filter_legal(moves)

    def generate_noisy_moves(self) -> list[Move]:
        """Legal captures, en-passant captures and promotions."""
        noisy = [m for m in self.generate_pseudo_legal_moves() if m.is_noisy]
        return self._filter_legal(noisy)

    def generate_pseudo_legal_moves(self) -> list[Move]:
        """All pseudo-legal moves (may leave own king in check)."""
        moves: list[Move] = []
        color = self._pos.side_to_move
        for piece_type in PieceType:
            bitboard = self._board.pieces_bitboard(color, piece_type)
            while bitboard:
                lsb = bitboard & -bitboard
                self._gen_piece(lsb.bit_length() - 1, piece_type, color, moves)
                bitboard ^= lsb
        return moves

    def is_legal(self, move: Move) -> bool:
        """Does *move* keep the mover's king safe? Assumes it is pseudo-legal."""
        color = self._pos.side_to_move
        board = self._board.copy()
        place_move(board, move)
        kings = board.pieces_bitboard(color, PieceType.KING)
        if not kings:
            return True
        king_sq = (kings & -kings).bit_length() - 1
        return not is_square_attacked(board, king_sq, color.opposite)

    # -- Attack detection (public) -----------------------------------------

    def is_in_check(self, color: Color | None = None) -> bool:
        """Is *color*'s king (default: side to move) attacked by the opponent?"""
        if color is None:
            color = self._pos.side_to_move
        kings = self._board.pieces_bitboard(color, PieceType.KING)
        if not kings:
            return False
        king_sq = (kings & -kings).bit_length() - 1
        return is_square_attacked(self._board, king_sq, color.opposite)

    def is_square_attacked(self, sq: Square, by_color: Color) -> bool:
        return is_square_attacked(self._board, sq, by_color)

    # -- Piece-specific generators (private) -------------------------------

    def _filter_legal(self, moves: list[Move]) -> list[Move]:
        return [move for move in moves if self.is_legal(move)]

    def _gen_piece(
        self,
        sq: Square,
        piece_type: PieceType,
        color: Color,
        moves: list[Move],
    ) -> None:
        if piece_type == PieceType.PAWN:
            self._gen_pawn(sq, color, moves)
        elif piece_type == PieceType.KNIGHT:
            self._gen_steps(sq, color, _KNIGHT_TARGETS[sq], moves)
        elif piece_type == PieceType.BISHOP:
            self._gen_sliding(sq, color, _BISHOP_RAYS[sq], moves)
        elif piece_type == PieceType.ROOK:
            self._gen_sliding(sq, color, _ROOK_RAYS[sq], moves)
        elif piece_type == PieceType.QUEEN:
            self._gen_sliding(sq, color, _QUEEN_RAYS[sq], moves)
        else:
            self._gen_steps(sq, color, _KING_TARGETS[sq], moves)
            self._gen_castling(sq, color, moves)

    def _gen_pawn(self, sq: Square, color: Color, moves: list[Move]) -> None:
        board = self._board
        forward, start_rank, promo_rank = _PAWN_GEOMETRY[int(color)]
        rank_idx = sq >> 3
        promotes = rank_idx == promo_rank

        one_step = sq + forward
        if not 0 <= one_step < 64:
            return
        if board.is_empty(one_step):
            if promotes:
                self._add_promotions(sq, one_step, False, moves)
            else:
                moves.append(Move(sq, one_step))
                two_step = one_step + forward
                if rank_idx == start_rank and board.is_empty(two_step):
                    moves.append(Move(sq, two_step, MoveFlag.DOUBLE_PAWN))

        for cap_sq in _PAWN_CAPTURES[int(color)][sq]:
            target = board[cap_sq]
            if target is not None:
                if target.color == color:
                    continue
                if promotes:
                    self._add_promotions(sq, cap_sq, True, moves)
                else:
                    moves.append(Move(sq, cap_sq, is_capture=True))
            elif cap_sq == self._pos.en_passant:
                moves.append(Move(sq, cap_sq, MoveFlag.EN_PASSANT, is_capture=True))

    @staticmethod
    def _add_promotions(
        from_sq: Square, to_sq: Square, is_capture: bool, moves: list[Move]
    ) -> None:
        for pt in PROMOTION_TYPES:
            moves.append(Move(from_sq, to_sq, MoveFlag.PROMOTION, pt, is_capture))

    def _gen_steps(
        self,
        sq: Square,
        color: Color,
        targets: tuple[Square, ...],
        moves: list[Move],
    ) -> None:
        board = self._board
        for to_sq in targets:
            target = board[to_sq]
            if target is None:
                moves.append(Move(sq, to_sq))
            elif target.color != color:
                moves.append(Move(sq, to_sq, is_capture=True))

    def _gen_sliding(
        self,
        sq: Square,
        color: Color,
        rays: tuple[tuple[Square, ...], ...],
        moves: list[Move],
    ) -> None:
        board = self._board
        for ray in rays:
            for to_sq in ray:
                target = board[to_sq]
                if target is None:
                    moves.append(Move(sq, to_sq))
                    continue
                if target.color != color:
                    moves.append(Move(sq, to_sq, is_capture=True))
                break

    def _gen_castling(self, king_sq: Square, color: Color, moves: list[Move]) -> None:
        castling = self._pos.castling
        idx = int(color)
        if not castling & (_KINGSIDE_RIGHT[idx] | _QUEENSIDE_RIGHT[idx]):
            return

        offset = 0 if color == Color.WHITE else 56
        if king_sq != offset + 4:
            return
        board = self._board
        opponent = color.opposite
        if is_square_attacked(board, king_sq, opponent):
            return

        if castling & _KINGSIDE_RIGHT[idx] and self._rook_home(offset + 7, color):
            f_sq, g_sq = offset + 5, offset + 6
            if (
                board.is_empty(f_sq)
                and board.is_empty(g_sq)
                and not is_square_attacked(board, f_sq, opponent)
                and not is_square_attacked(board, g_sq, opponent)
            ):
                moves.append(Move(king_sq, g_sq, MoveFlag.CASTLE_KINGSIDE))

        if castling & _QUEENSIDE_RIGHT[idx] and self._rook_home(offset, color):
            b_sq, c_sq, d_sq = offset + 1, offset + 2, offset + 3
            if (
                board.is_empty(b_sq)
                and board.is_empty(c_sq)
                and board.is_empty(d_sq)
                and not is_square_attacked(board, c_sq, opponent)
                and not is_square_attacked(board, d_sq, opponent)
            ):
                moves.append(Move(king_sq, c_sq, MoveFlag.CASTLE_QUEENSIDE))

    def _rook_home(self, sq: Square, color: Color) -> bool:
        rook = self._board[sq]
        return (
            rook is not None
            and rook.color == color
            and rook.piece_type == PieceType.ROOK
        )
