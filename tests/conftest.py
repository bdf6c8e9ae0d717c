"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Callable

import pytest

from src.chess.board import Board
from src.chess.game import Game
from src.chess.pieces import Color, Piece, PieceType
from src.chess.square import Square
from src.chess.timer import Timer

# piece letters used to describe test positions: upper case for white, lower case for black
LETTER_TO_PIECE: dict[str, PieceType] = {
    "p": PieceType.PAWN,
    "n": PieceType.KNIGHT,
    "b": PieceType.BISHOP,
    "r": PieceType.ROOK,
    "q": PieceType.QUEEN,
    "k": PieceType.KING,
}


class FakeClock:
    """Time source for the Timer. Time only moves when the test says so."""

    def __init__(self, start_ms: int = 1_000) -> None:
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


def board_from_placement(placement: dict[str, str]) -> Board:
    """{'e1': 'K', 'e8': 'k'} --> board with just the two kings"""
    board = Board.empty()
    for square_name, letter in placement.items():
        color = Color.WHITE if letter.isupper() else Color.BLACK
        board.place_piece(
            Piece(LETTER_TO_PIECE[letter.lower()], color, Square.from_algebraic(square_name))
        )
    return board


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_board() -> Callable[[dict[str, str]], Board]:
    return board_from_placement


@pytest.fixture
def make_game(fake_clock: FakeClock) -> Callable[..., Game]:
    """Game on a custom position. Call with the placement and (optionally) the color to move."""

    def _create_game(
        placement: dict[str, str], turn: Color = Color.WHITE, minutes: int = 5
    ) -> Game:
        return Game(
            board=board_from_placement(placement),
            timer=Timer(minutes, time_source=fake_clock),
            current_turn=turn,
        )

    return _create_game


@pytest.fixture
def new_game(fake_clock: FakeClock) -> Game:
    """Standard starting position, 5 minutes each, time controlled by the fake clock"""
    return Game.new_game(5, time_source=fake_clock)
