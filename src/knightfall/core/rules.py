"""High-level chess rules: checkmate, stalemate, draw detection."""

from __future__ import annotations

from typing import TYPE_CHECKING

from knightfall.core.enums import Color, GameResult, PieceType
from knightfall.core.move_generator import MoveGenerator
from knightfall.core.types import file_of, rank_of

if TYPE_CHECKING:
    from knightfall.core.position import Position


class Rules:
    """Static rule-checker that operates on a :class:`Position`."""

    # Draws by rule are treated as automatic: the engine and the game layer
    # both stop at the fifty-move rule and at threefold repetition.

    @staticmethod
    def is_in_check(position: Position) -> bool:
        return MoveGenerator(position).is_in_check(position.side_to_move)

    @staticmethod
    def is_checkmate(position: Position) -> bool:
        gen = MoveGenerator(position)
        return gen.is_in_check() and not gen.generate_legal_moves()

    @staticmethod
    def is_stalemate(position: Position) -> bool:
        gen = MoveGenerator(position)
        return not gen.is_in_check() and not gen.generate_legal_moves()

    @staticmethod
    def is_insufficient_material(position: Position) -> bool:
        """K vs K, K+B vs K, K+N vs K, K+B vs K+B (same-color bishops)."""
        board = position.board
        total = board.occupied_bitboard().bit_count()

        if total == 2:
            return True

        if total == 3:
            return any(
                board.has_piece(color, pt)
                for color in Color
                for pt in (PieceType.KNIGHT, PieceType.BISHOP)
            )

        if total == 4:
            wb = board.pieces_bitboard(Color.WHITE, PieceType.BISHOP)
            bb = board.pieces_bitboard(Color.BLACK, PieceType.BISHOP)
            if wb.bit_count() == 1 and bb.bit_count() == 1:
                w_sq = wb.bit_length() - 1
                b_sq = bb.bit_length() - 1
                return (file_of(w_sq) + rank_of(w_sq)) % 2 == (file_of(b_sq) + rank_of(b_sq)) % 2

        return False

    @staticmethod
    def is_fifty_move_rule(position: Position) -> bool:
        return position.halfmove_clock >= 100  # 100 half-moves = 50 full moves

    @staticmethod
    def is_threefold_repetition(position: Position) -> bool:
        return position.repetition_count() >= 3

    @staticmethod
    def is_draw(position: Position) -> bool:
        """Draw by rule, not counting stalemate (which needs move generation)."""
        return (
            Rules.is_insufficient_material(position)
            or Rules.is_fifty_move_rule(position)
            or Rules.is_threefold_repetition(position)
        )

    @staticmethod
    def game_result(position: Position) -> GameResult:
        gen = MoveGenerator(position)
        if not gen.generate_legal_moves():
            if gen.is_in_check():
                return (
                    GameResult.BLACK_WINS
                    if position.side_to_move == Color.WHITE
                    else GameResult.WHITE_WINS
                )
            return GameResult.DRAW

        if Rules.is_draw(position):
            return GameResult.DRAW
        return GameResult.IN_PROGRESS
