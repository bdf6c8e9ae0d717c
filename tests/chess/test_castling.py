"""unit tests for src/chess/castling.py"""

import pytest

from src.chess.castling import (
    CASTLING_RULES,
    CastlingSide,
    CastlingSquares,
    castling_rule_for,
    squares_between_on_rank,
)
from src.chess.pieces import Color
from src.chess.square import Square


def _names(squares: list[Square]) -> list[str]:
    return [square.to_algebraic() for square in squares]


def test_castling_squares_creation() -> None:
    """Test one case, just to have a little contract stating: 'I want to be able to create this dataclass'"""
    castling_squares = CastlingSquares.from_algebraic("e1", "g1", "h1", "f1")
    assert castling_squares.king_from == Square.from_algebraic("e1")
    assert castling_squares.king_to == Square.from_algebraic("g1")
    assert castling_squares.rook_from == Square.from_algebraic("h1")
    assert castling_squares.rook_to == Square.from_algebraic("f1")


def test_queen_side_paths() -> None:
    """b1 must be empty, but the king never crosses it"""
    rule = CASTLING_RULES[(Color.WHITE, CastlingSide.QUEEN_SIDE)]
    assert _names(rule.between) == ["d1", "c1", "b1"]
    assert _names(rule.king_path) == ["e1", "d1", "c1"]


def test_king_side_paths() -> None:
    rule = CASTLING_RULES[(Color.BLACK, CastlingSide.KING_SIDE)]
    assert _names(rule.between) == ["f8", "g8"]
    assert _names(rule.king_path) == ["e8", "f8", "g8"]


@pytest.mark.parametrize(
    "king_from, king_to, rook_from",
    [("e1", "g1", "h1"), ("e1", "c1", "a1"), ("e8", "g8", "h8"), ("e8", "c8", "a8")],
)
def test_rule_found_from_king_move(king_from: str, king_to: str, rook_from: str) -> None:
    rule = castling_rule_for(Square.from_algebraic(king_from), Square.from_algebraic(king_to))
    assert rule is not None
    assert rule.rook_from == Square.from_algebraic(rook_from)


def test_no_rule_for_ordinary_king_move() -> None:
    assert castling_rule_for(Square.from_algebraic("e1"), Square.from_algebraic("f1")) is None


def test_squares_between_requires_same_rank() -> None:
    with pytest.raises(ValueError):
        squares_between_on_rank(Square.from_algebraic("e1"), Square.from_algebraic("e8"))
