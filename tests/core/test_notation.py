"""Tests for FEN and UCI notation."""

import pytest

from knightfall.core.enums import CastlingRights, Color, MoveFlag, PieceType
from knightfall.core.errors import FenError, IllegalMoveError
from knightfall.core.move_generator import MoveGenerator
from knightfall.core.notation import (
    STARTING_FEN,
    parse_uci_move,
    position_from_fen,
    position_to_fen,
)
from knightfall.core.piece import Piece
from knightfall.core.types import E1, E2, E3, E4, E8, G1


class TestFenParsing:
    def test_starting_side(self) -> None:
        assert position_from_fen(STARTING_FEN).side_to_move == Color.WHITE

    def test_starting_castling(self) -> None:
        assert position_from_fen(STARTING_FEN).castling == CastlingRights.ALL

    def test_starting_clocks(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        assert pos.en_passant is None
        assert pos.halfmove_clock == 0
        assert pos.fullmove_number == 1

    def test_starting_kings(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        assert pos.board[E1] == Piece(Color.WHITE, PieceType.KING)
        assert pos.board[E8] == Piece(Color.BLACK, PieceType.KING)

    def test_en_passant_square(self) -> None:
        fen = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"
        assert position_from_fen(fen).en_passant == E3

    def test_partial_castling(self) -> None:
        fen = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w Kq - 0 1"
        assert position_from_fen(fen).castling == (
            CastlingRights.WHITE_KINGSIDE | CastlingRights.BLACK_QUEENSIDE
        )

    def test_clock_fields_are_optional(self) -> None:
        pos = position_from_fen("4k3/8/8/8/8/8/8/4K3 b - -")
        assert pos.side_to_move == Color.BLACK
        assert pos.halfmove_clock == 0
        assert pos.fullmove_number == 1

    def test_fen_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            position_from_fen("invalid")


class TestMalformedFen:
    @pytest.mark.parametrize(
        ("fen", "match"),
        [
            ("invalid", "4-6 fields"),
            ("8/8/8/8/8/8/8 w - - 0 1", "8 ranks"),
            ("9/8/8/8/8/8/8/8 w - - 0 1", "digit"),
            ("8/8/8/8/8/8/8/7 w - - 0 1", "narrow"),
            ("8/8/8/8/8/8/8/8p w - - 0 1", "wide"),
            ("8/8/8/8/8/8/8/7x w - - 0 1", "piece character"),
            ("P7/8/8/8/8/8/8/8 w - - 0 1", "Pawn"),
            ("4k3/8/8/8/8/8/8/K3K3 w - - 0 1", "king"),
            ("8/8/8/8/8/8/8/8 x - - 0 1", "side-to-move"),
            ("8/8/8/8/8/8/8/8 w Kx - 0 1", "castling"),
            ("8/8/8/8/8/8/8/8 w KK - 0 1", "castling"),
            ("8/8/8/8/8/8/8/8 w - z9 0 1", "en-passant"),
            ("8/8/8/8/8/8/8/8 w - e3 0 1", "side to move"),
            ("8/8/8/8/8/8/8/8 w - - x 1", "counter"),
            ("8/8/8/8/8/8/8/8 w - - 0 0", "range"),
        ],
    )
    def test_rejected(self, fen: str, match: str) -> None:
        with pytest.raises(FenError, match=match) as info:
            position_from_fen(fen)
        assert info.value.fen == fen


class TestFenSerialisation:
    @pytest.mark.parametrize(
        "fen",
        [
            STARTING_FEN,
            "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1",
            "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1",
            "8/8/4k3/8/8/4K3/8/8 w - - 0 1",
            "rnbq1k1r/pp1Pbppp/2p5/8/2B5/8/PPP1NnPP/RNBQK2R w KQ - 1 8",
            "4k3/8/8/8/8/8/8/4K3 b - - 99 142",
        ],
    )
    def test_roundtrip(self, fen: str) -> None:
        assert position_to_fen(position_from_fen(fen)) == fen

    def test_short_fen_gets_default_clocks(self) -> None:
        pos = position_from_fen("4k3/8/8/8/8/8/8/4K3 w - -")
        assert position_to_fen(pos) == "4k3/8/8/8/8/8/8/4K3 w - - 0 1"

    def test_roundtrip_after_every_start_move(self) -> None:
        start = position_from_fen(STARTING_FEN)
        for move in MoveGenerator(start).generate_legal_moves():
            child = start.play(move)
            fen = position_to_fen(child)
            assert position_from_fen(fen) == child


class TestUci:
    def test_double_push_carries_flag(self) -> None:
        move = parse_uci_move(position_from_fen(STARTING_FEN), "e2e4")
        assert move.from_sq == E2
        assert move.to_sq == E4
        assert move.flag == MoveFlag.DOUBLE_PAWN
        assert move.uci == "e2e4"

    def test_castle_resolved(self) -> None:
        pos = position_from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
        move = parse_uci_move(pos, "e1g1")
        assert move.flag == MoveFlag.CASTLE_KINGSIDE
        assert move.to_sq == G1

    def test_promotion_piece(self) -> None:
        pos = position_from_fen("8/4P3/8/8/8/8/k7/4K3 w - - 0 1")
        move = parse_uci_move(pos, "e7e8n")
        assert move.promotion == PieceType.KNIGHT
        assert str(move) == "e7e8n"

    def test_missing_promotion_is_illegal(self) -> None:
        pos = position_from_fen("8/4P3/8/8/8/8/k7/4K3 w - - 0 1")
        with pytest.raises(IllegalMoveError):
            parse_uci_move(pos, "e7e8")

    def test_illegal_move_raises(self) -> None:
        with pytest.raises(IllegalMoveError) as info:
            parse_uci_move(position_from_fen(STARTING_FEN), "e2e5")
        assert info.value.fen == STARTING_FEN

    @pytest.mark.parametrize("text", ["", "e2", "e2e4qq", "z2e4", "e7e8k"])
    def test_malformed_text_raises(self, text: str) -> None:
        with pytest.raises(ValueError):
            parse_uci_move(position_from_fen(STARTING_FEN), text)
