"""Defines the types of chess pieces"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import NamedTuple, Optional

from src.chess.square import Square


class PieceType(StrEnum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"

    @classmethod
    def from_name(cls, name: str) -> Optional[PieceType]:
        """Case insensitive lookup ('Queen', 'QUEEN', 'queen'). Unknown names give None."""
        try:
            return cls(name.strip().lower())
        except (ValueError, AttributeError):
            return None


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"

    @property
    def opposite(self) -> Color:
        return Color.BLACK if self == Color.WHITE else Color.WHITE

    @property
    def direction(self) -> int:
        """White pawns move UP the board, black pawns move DOWN"""
        return 1 if self == Color.WHITE else -1


# Only these pieces care whether they moved before (double step, castling)
TRACKS_FIRST_MOVE: frozenset[PieceType] = frozenset(
    {PieceType.PAWN, PieceType.ROOK, PieceType.KING}
)

PROMOTION_OPTIONS: tuple[PieceType, ...] = (
    PieceType.QUEEN,
    PieceType.ROOK,
    PieceType.BISHOP,
    PieceType.KNIGHT,
)

SLIDING_PIECES: frozenset[PieceType] = frozenset(
    {PieceType.BISHOP, PieceType.ROOK, PieceType.QUEEN}
)


class PieceSummary(NamedTuple):
    """What a piece looks like, regardless of which instance it is."""

    type: PieceType
    color: Color


@dataclass(eq=False)
class Piece:
    """
    A single piece on the board.

    NOTE: eq=False. Two white knights on b1 created separately are two different pieces,
    so equality is identity. Compare `summary` when you care about what the piece is.
    """

    type: PieceType
    color: Color
    square: Square
    moved_before: bool = False

    @property
    def summary(self) -> PieceSummary:
        return PieceSummary(self.type, self.color)

    def mark_moved(self) -> None:
        """Flag is ignored for knights, bishops and queens"""
        if self.type in TRACKS_FIRST_MOVE:
            self.moved_before = True

    def __repr__(self) -> str:
        return f"Piece({self.color} {self.type} on {self.square})"
