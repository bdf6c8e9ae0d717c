"""Unit tests for /src/chess/pieces.py"""

import pytest

from src.chess.pieces import Color, Piece, PieceSummary, PieceType
from src.chess.square import Square


def test_opposite_color() -> None:
    assert Color.WHITE.opposite == Color.BLACK
    assert Color.BLACK.opposite == Color.WHITE


def test_pawn_direction() -> None:
    """White moves UP the board, black moves DOWN"""
    assert Color.WHITE.direction == 1
    assert Color.BLACK.direction == -1


@pytest.mark.parametrize("name", ["queen", "Queen", "QUEEN", " queen "])
def test_piece_type_from_name(name: str) -> None:
    assert PieceType.from_name(name) == PieceType.QUEEN


@pytest.mark.parametrize("name", ["", "dragon", "q"])
def test_unknown_piece_type_name(name: str) -> None:
    assert PieceType.from_name(name) is None


def test_pieces_are_distinct_entities() -> None:
    """Two knights created separately are different pieces, even on the same square"""
    b1 = Square.from_algebraic("b1")
    knight_1 = Piece(PieceType.KNIGHT, Color.WHITE, b1)
    knight_2 = Piece(PieceType.KNIGHT, Color.WHITE, b1)
    assert knight_1 != knight_2
    assert knight_1.summary == knight_2.summary == PieceSummary(
        PieceType.KNIGHT, Color.WHITE
    )


@pytest.mark.parametrize("piece_type", [PieceType.PAWN, PieceType.ROOK, PieceType.KING])
def test_first_move_is_tracked(piece_type: PieceType) -> None:
    piece = Piece(piece_type, Color.BLACK, Square(0, 0))
    piece.mark_moved()
    assert piece.moved_before


@pytest.mark.parametrize(
    "piece_type", [PieceType.KNIGHT, PieceType.BISHOP, PieceType.QUEEN]
)
def test_first_move_is_ignored(piece_type: PieceType) -> None:
    piece = Piece(piece_type, Color.WHITE, Square(0, 0))
    piece.mark_moved()
    assert not piece.moved_before
