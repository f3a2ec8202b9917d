"""Move generator tests: perft counts plus targeted legality checks.

Reference values: https://www.chessprogramming.org/Perft_Results
"""

import pytest

from knightfall.core.enums import Color, MoveFlag, PieceType
from knightfall.core.move import Move
from knightfall.core.move_generator import MoveGenerator
from knightfall.core.notation import STARTING_FEN, position_from_fen
from knightfall.core.position import Position
from knightfall.core.types import B1, C1, D5, D6, E1, E2, E4, E5, G1, parse_square


def perft(position: Position, depth: int) -> int:
    """Count leaf nodes at *depth*; every child is a fresh position."""
    if depth == 0:
        return 1
    moves = MoveGenerator(position).generate_legal_moves()
    if depth == 1:
        return len(moves)
    return sum(perft(position.play(move), depth - 1) for move in moves)


# ── Starting position ────────────────────────────────────────────────────────


class TestPerftStarting:
    def test_depth_1(self) -> None:
        assert perft(position_from_fen(STARTING_FEN), 1) == 20

    def test_depth_2(self) -> None:
        assert perft(position_from_fen(STARTING_FEN), 2) == 400

    def test_depth_3(self) -> None:
        assert perft(position_from_fen(STARTING_FEN), 3) == 8_902

    @pytest.mark.slow
    def test_depth_4(self) -> None:
        assert perft(position_from_fen(STARTING_FEN), 4) == 197_281


# ── Kiwipete: castling, en passant and promotions all in play ───────────────

KIWIPETE = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"


class TestPerftKiwipete:
    def test_depth_1(self) -> None:
        assert perft(position_from_fen(KIWIPETE), 1) == 48

    def test_depth_2(self) -> None:
        assert perft(position_from_fen(KIWIPETE), 2) == 2_039

    @pytest.mark.slow
    def test_depth_3(self) -> None:
        assert perft(position_from_fen(KIWIPETE), 3) == 97_862


# ── Discovered checks along the fifth rank after en passant ─────────────────

POS3 = "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1"


class TestPerftPos3:
    def test_depth_1(self) -> None:
        assert perft(position_from_fen(POS3), 1) == 14

    def test_depth_2(self) -> None:
        assert perft(position_from_fen(POS3), 2) == 191

    def test_depth_3(self) -> None:
        assert perft(position_from_fen(POS3), 3) == 2_812


POS4 = "r3k2r/Pppp1ppp/1b3nbN/nP6/BBP1P3/q4N2/Pp1P2PP/R2Q1RK1 w kq - 0 1"


class TestPerftPos4:
    def test_depth_1(self) -> None:
        assert perft(position_from_fen(POS4), 1) == 6

    def test_depth_2(self) -> None:
        assert perft(position_from_fen(POS4), 2) == 264

    def test_depth_3(self) -> None:
        assert perft(position_from_fen(POS4), 3) == 9_467


POS5 = "rnbq1k1r/pp1Pbppp/2p5/8/2B5/8/PPP1NnPP/RNBQK2R w KQ - 1 8"


class TestPerftPos5:
    def test_depth_1(self) -> None:
        assert perft(position_from_fen(POS5), 1) == 44

    def test_depth_2(self) -> None:
        assert perft(position_from_fen(POS5), 2) == 1_486

    @pytest.mark.slow
    def test_depth_3(self) -> None:
        assert perft(position_from_fen(POS5), 3) == 62_379


# ── Targeted cases ───────────────────────────────────────────────────────────


class TestLegalMovesFrom:
    def test_knight_from_start(self) -> None:
        gen = MoveGenerator(position_from_fen(STARTING_FEN))
        targets = {m.to_sq for m in gen.generate_legal_moves_from(G1)}
        assert targets == {parse_square("f3"), parse_square("h3")}

    def test_pawn_from_start_has_single_and_double_push(self) -> None:
        gen = MoveGenerator(position_from_fen(STARTING_FEN))
        moves = gen.generate_legal_moves_from(E2)
        assert {m.to_sq for m in moves} == {parse_square("e3"), E4}
        double = next(m for m in moves if m.to_sq == E4)
        assert double.flag == MoveFlag.DOUBLE_PAWN

    def test_blocked_bishop_has_no_moves(self) -> None:
        gen = MoveGenerator(position_from_fen(STARTING_FEN))
        assert gen.generate_legal_moves_from(C1) == []

    def test_empty_square_has_no_moves(self) -> None:
        gen = MoveGenerator(position_from_fen(STARTING_FEN))
        assert gen.generate_legal_moves_from(E4) == []

    def test_opponent_piece_has_no_moves(self) -> None:
        gen = MoveGenerator(position_from_fen(STARTING_FEN))
        assert gen.generate_legal_moves_from(parse_square("e7")) == []

    @pytest.mark.parametrize("sq", [-1, 64])
    def test_out_of_range_square_rejected(self, sq: int) -> None:
        gen = MoveGenerator(position_from_fen(STARTING_FEN))
        with pytest.raises(ValueError, match="out of range"):
            gen.generate_legal_moves_from(sq)

    def test_narrowed_moves_are_subset_of_all(self) -> None:
        pos = position_from_fen(KIWIPETE)
        gen = MoveGenerator(pos)
        everything = gen.generate_legal_moves()
        narrowed = [m for sq in range(64) for m in gen.generate_legal_moves_from(sq)]
        assert sorted(str(m) for m in narrowed) == sorted(str(m) for m in everything)


class TestLegality:
    def test_no_move_leaves_own_king_in_check(self) -> None:
        for fen in (STARTING_FEN, KIWIPETE, POS3, POS4, POS5):
            pos = position_from_fen(fen)
            mover = pos.side_to_move
            for move in MoveGenerator(pos).generate_legal_moves():
                child = pos.play(move)
                assert not MoveGenerator(child).is_in_check(mover), f"{fen}: {move}"

    def test_pinned_piece_cannot_leave_the_pin(self) -> None:
        # Bishop on e2 is pinned against the king by the rook on e8.
        pos = position_from_fen("4r2k/8/8/8/8/8/4B3/4K3 w - - 0 1")
        assert MoveGenerator(pos).generate_legal_moves_from(E2) == []

    def test_in_check_only_evasions(self) -> None:
        pos = position_from_fen("4k3/8/8/8/8/8/3PP3/r3K3 w - - 0 1")
        gen = MoveGenerator(pos)
        assert gen.is_in_check()
        moves = gen.generate_legal_moves()
        assert moves
        assert all(m.from_sq == E1 for m in moves)

    def test_captures_are_flagged(self) -> None:
        pos = position_from_fen("4k3/8/8/3p4/4P3/8/8/4K3 w - - 0 1")
        capture = next(
            m for m in MoveGenerator(pos).generate_legal_moves() if m.to_sq == D5
        )
        assert capture.is_capture


class TestCastling:
    def test_both_sides_available(self) -> None:
        pos = position_from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
        flags = {m.flag for m in MoveGenerator(pos).generate_legal_moves_from(E1)}
        assert MoveFlag.CASTLE_KINGSIDE in flags
        assert MoveFlag.CASTLE_QUEENSIDE in flags

    def test_no_castling_out_of_check(self) -> None:
        pos = position_from_fen("r3k2r/8/8/8/8/8/4r3/R3K2R w KQkq - 0 1")
        assert not any(m.is_castle for m in MoveGenerator(pos).generate_legal_moves())

    def test_no_castling_through_attacked_square(self) -> None:
        # f1 is covered by the rook on f8.
        pos = position_from_fen("5r1k/8/8/8/8/8/8/4K2R w K - 0 1")
        assert not any(m.is_castle for m in MoveGenerator(pos).generate_legal_moves())

    def test_queenside_allowed_when_only_b1_attacked(self) -> None:
        pos = position_from_fen("1r5k/8/8/8/8/8/8/R3K3 w Q - 0 1")
        moves = MoveGenerator(pos).generate_legal_moves()
        assert any(m.flag == MoveFlag.CASTLE_QUEENSIDE for m in moves)
        assert pos.board[B1] is None

    def test_no_castling_without_rights(self) -> None:
        pos = position_from_fen("r3k2r/8/8/8/8/8/8/R3K2R w - - 0 1")
        assert not any(m.is_castle for m in MoveGenerator(pos).generate_legal_moves())


class TestEnPassant:
    def test_en_passant_generated(self) -> None:
        pos = position_from_fen("4k3/8/8/3pP3/8/8/8/4K3 w - d6 0 2")
        ep = [m for m in MoveGenerator(pos).generate_legal_moves_from(E5) if m.is_en_passant]
        assert len(ep) == 1
        assert ep[0].to_sq == D6
        assert ep[0].is_capture

    def test_en_passant_exposing_king_is_illegal(self) -> None:
        pos = position_from_fen("8/8/8/K2pP2r/8/8/8/7k w - d6 0 2")
        assert not any(m.is_en_passant for m in MoveGenerator(pos).generate_legal_moves())


class TestPromotion:
    def test_four_promotion_choices(self) -> None:
        pos = position_from_fen("8/4P3/8/8/8/8/k7/4K3 w - - 0 1")
        promos = [m for m in MoveGenerator(pos).generate_legal_moves() if m.is_promotion]
        assert {m.promotion for m in promos} == {
            PieceType.QUEEN,
            PieceType.ROOK,
            PieceType.BISHOP,
            PieceType.KNIGHT,
        }

    def test_promotions_are_noisy(self) -> None:
        pos = position_from_fen("8/4P3/8/8/8/8/k7/4K3 w - - 0 1")
        noisy = MoveGenerator(pos).generate_noisy_moves()
        assert len(noisy) == 4
        assert all(m.is_promotion for m in noisy)


class TestNoisyMoves:
    def test_start_has_no_noisy_moves(self) -> None:
        assert MoveGenerator(position_from_fen(STARTING_FEN)).generate_noisy_moves() == []

    def test_noisy_moves_are_legal_captures(self) -> None:
        pos = position_from_fen(KIWIPETE)
        gen = MoveGenerator(pos)
        legal = gen.generate_legal_moves()
        noisy = gen.generate_noisy_moves()
        assert noisy
        assert all(m in legal and m.is_noisy for m in noisy)


class TestKinglessPositions:
    def test_missing_king_is_never_in_check(self) -> None:
        pos = position_from_fen("8/8/8/8/8/8/8/R3K3 w - - 0 1")
        gen = MoveGenerator(pos)
        assert not gen.is_in_check(Color.BLACK)
        assert gen.generate_legal_moves()

    def test_move_equality_ignores_capture_marker(self) -> None:
        assert Move(E2, E4, MoveFlag.DOUBLE_PAWN) == Move(
            E2, E4, MoveFlag.DOUBLE_PAWN, is_capture=True
        )
