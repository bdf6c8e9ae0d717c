"""
A square on the board + the helpers that convert between labels ('e4') and zero based coordinates ((4, 3))

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from src.core.exceptions import InvalidSquareError

# Chess board is always 8x8. Just in case we want to try some funky stuff, make it adjustable
BOARD_DIMENSIONS = (8, 8)
FILES = "abcdefgh"
RANKS = "12345678"


def is_valid(x: int, y: int) -> bool:
    return (0 <= x < BOARD_DIMENSIONS[0]) and (0 <= y < BOARD_DIMENSIONS[1])


def to_coords(label: str) -> tuple[int, int]:
    """'a1' - 'h8' get converted to (0, 0) - (7, 7). Anything else is rejected."""
    if (
        not isinstance(label, str)
        or len(label) != 2
        or label[0] not in FILES
        or label[1] not in RANKS
    ):
        raise InvalidSquareError(f"Cannot interpret {label!r} as a square name.")
    return FILES.index(label[0]), RANKS.index(label[1])


def to_label(x: int, y: int) -> Optional[str]:
    """Reverse of `to_coords()`. Off-board coordinates have no label."""
    if not is_valid(x, y):
        return None
    return f"{FILES[x]}{RANKS[y]}"


@dataclass(frozen=True)
class Square:
    file: int
    rank: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a1' - 'h8' get converted to (0,0) - (7,7)"""
        file, rank = to_coords(sq)
        return cls(file, rank)

    def to_algebraic(self) -> str:
        label = to_label(self.file, self.rank)
        if label is None:
            raise InvalidSquareError(f"{self} lies outside the board.")
        return label

    def is_within_bounds(self) -> bool:
        return is_valid(self.file, self.rank)

    def offset(self, df: int, dr: int) -> Optional[Square]:
        """The square `df` files and `dr` ranks away, if it is still on the board."""
        target = Square(self.file + df, self.rank + dr)
        return target if target.is_within_bounds() else None

    @property
    def index(self) -> int:
        """Position in the board's array of squares"""
        return self.rank * BOARD_DIMENSIONS[0] + self.file

    def __str__(self) -> str:
        return self.to_algebraic() if self.is_within_bounds() else repr(self)


ALL_SQUARES: tuple[Square, ...] = tuple(
    Square(file, rank)
    for rank in range(BOARD_DIMENSIONS[1])
    for file in range(BOARD_DIMENSIONS[0])
)
