"""FEN parsing and serialization."""

from __future__ import annotations

from knightfall.core.board import Board
from knightfall.core.enums import CastlingRights, Color, PieceType
from knightfall.core.errors import FenError
from knightfall.core.piece import Piece
from knightfall.core.position import Position
from knightfall.core.types import Square, make_square, parse_square, rank_of, square_name

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

_CASTLING_CHARS: tuple[tuple[str, CastlingRights], ...] = (
    ("K", CastlingRights.WHITE_KINGSIDE),
    ("Q", CastlingRights.WHITE_QUEENSIDE),
    ("k", CastlingRights.BLACK_KINGSIDE),
    ("q", CastlingRights.BLACK_QUEENSIDE),
)


def position_from_fen(fen: str) -> Position:
    """Parse a FEN string into a :class:`Position`.

    The two clock fields are optional and default to ``0 1``. Anything
    malformed raises :class:`FenError`; nothing is silently corrected.
    """
    parts = fen.split()
    if not (4 <= len(parts) <= 6):
        raise FenError("Invalid FEN (need 4-6 fields)", fen)

    placement, side_part, castling_part, ep_part = parts[:4]
    board = _parse_placement(placement, fen)

    # Side to move
    if side_part == "w":
        side = Color.WHITE
    elif side_part == "b":
        side = Color.BLACK
    else:
        raise FenError(f"Invalid side-to-move field {side_part!r}", fen)

    # Castling
    castling = CastlingRights.NONE
    if castling_part != "-":
        rights = dict(_CASTLING_CHARS)
        for ch in castling_part:
            right = rights.pop(ch, None)
            if right is None:
                raise FenError(f"Invalid castling field {castling_part!r}", fen)
            castling |= right

    # En passant
    ep: Square | None = None
    if ep_part != "-":
        try:
            ep = parse_square(ep_part)
        except ValueError:
            raise FenError(f"Invalid en-passant square {ep_part!r}", fen) from None
        expected_rank = 5 if side == Color.WHITE else 2
        if rank_of(ep) != expected_rank:
            raise FenError(f"En-passant square {ep_part!r} does not fit side to move", fen)

    halfmove = _parse_counter(parts, 4, 0, 0, fen)
    fullmove = _parse_counter(parts, 5, 1, 1, fen)

    return Position(board, side, castling, ep, halfmove, fullmove)


def _parse_placement(placement: str, fen: str) -> Board:
    ranks = placement.split("/")
    if len(ranks) != 8:
        raise FenError("Board must contain 8 ranks", fen)

    board = Board()
    for rank_idx, rank_text in enumerate(ranks):
        rank = 7 - rank_idx
        file = 0
        for ch in rank_text:
            if ch.isdigit():
                step = int(ch)
                if not (1 <= step <= 8):
                    raise FenError(f"Invalid digit {ch!r}", fen)
                file += step
            else:
                if file >= 8:
                    raise FenError("Rank too wide", fen)
                try:
                    piece = Piece.from_char(ch)
                except ValueError:
                    raise FenError(f"Invalid piece character {ch!r}", fen) from None
                if piece.piece_type == PieceType.PAWN and rank in (0, 7):
                    raise FenError("Pawn on first or last rank", fen)
                board[make_square(file, rank)] = piece
                file += 1
            if file > 8:
                raise FenError("Rank too wide", fen)
        if file != 8:
            raise FenError("Rank too narrow", fen)

    for color in Color:
        if board.king_count(color) > 1:
            raise FenError(f"More than one {color} king", fen)
    return board


def _parse_counter(parts: list[str], index: int, default: int, minimum: int, fen: str) -> int:
    if len(parts) <= index:
        return default
    text = parts[index]
    if not text.isdigit():
        raise FenError(f"Invalid move counter {text!r}", fen)
    value = int(text)
    if value < minimum:
        raise FenError(f"Move counter {text!r} out of range", fen)
    return value


def position_to_fen(pos: Position) -> str:
    """Serialise a :class:`Position` to FEN."""
    rows: list[str] = []
    for rank in range(7, -1, -1):
        empty = 0
        row = ""
        for file in range(8):
            piece = pos.board[make_square(file, rank)]
            if piece is None:
                empty += 1
                continue
            if empty:
                row += str(empty)
                empty = 0
            row += str(piece)
        if empty:
            row += str(empty)
        rows.append(row)

    side_str = "w" if pos.side_to_move == Color.WHITE else "b"
    castling_str = "".join(ch for ch, right in _CASTLING_CHARS if pos.castling & right) or "-"
    ep_str = square_name(pos.en_passant) if pos.en_passant is not None else "-"

    return (
        f"{'/'.join(rows)} {side_str} {castling_str} {ep_str} "
        f"{pos.halfmove_clock} {pos.fullmove_number}"
    )
