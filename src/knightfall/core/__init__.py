"""Core domain layer: pure chess logic with zero external dependencies.

Quick start::

    from knightfall.core import MoveGenerator, position_from_fen, STARTING_FEN

    pos = position_from_fen(STARTING_FEN)
    for move in MoveGenerator(pos).generate_legal_moves():
        print(move, pos.play(move))
"""

from knightfall.core.board import Board
from knightfall.core.enums import CastlingRights, Color, GameResult, MoveFlag, PieceType
from knightfall.core.errors import ChessError, FenError, IllegalMoveError
from knightfall.core.move import Move
from knightfall.core.move_generator import MoveGenerator
from knightfall.core.notation import (
    STARTING_FEN,
    parse_uci_move,
    position_from_fen,
    position_to_fen,
)
from knightfall.core.piece import Piece
from knightfall.core.position import Position
from knightfall.core.rules import Rules
from knightfall.core.types import (
    Square,
    file_of,
    make_square,
    parse_square,
    rank_of,
    square_name,
)

__all__ = [
    # Enums / flags
    "CastlingRights",
    "Color",
    "GameResult",
    "MoveFlag",
    "PieceType",
    # Types / helpers
    "Square",
    "file_of",
    "make_square",
    "parse_square",
    "rank_of",
    "square_name",
    # Errors
    "ChessError",
    "FenError",
    "IllegalMoveError",
    # Domain objects
    "Board",
    "Move",
    "MoveGenerator",
    "Piece",
    "Position",
    "Rules",
    # Notation
    "STARTING_FEN",
    "parse_uci_move",
    "position_from_fen",
    "position_to_fen",
]
