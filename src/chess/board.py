"""The Game board implements all rules that effect the `position` (in chess: the configuration of pieces on the board)"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional

from src.chess.castling import castling_rule_for
from src.chess.moves import attacked_squares, possible_moves
from src.chess.pieces import Color, Piece, PieceSummary, PieceType
from src.chess.square import ALL_SQUARES, BOARD_DIMENSIONS, Square
from src.core.exceptions import KingNotFoundError

NUM_SQUARES = BOARD_DIMENSIONS[0] * BOARD_DIMENSIONS[1]

# Back rank from the a-file to the h-file
BACK_RANK: tuple[PieceType, ...] = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)

# Structural picture of a position: who stands where (+ who is to move, filled in by Game)
Snapshot = tuple[Optional[PieceSummary], ...]


def _empty_squares() -> list[Optional[Piece]]:
    return [None] * NUM_SQUARES


@dataclass
class Board:
    """
    64 slots, indexed by `Square.index`. An empty slot holds None.

    Simulating a move = copy the slots, apply the move, test, throw the copy away.
    The copy shares the Piece objects, so a simulation must never mutate a piece.
    """

    squares: list[Optional[Piece]] = field(default_factory=_empty_squares)
    en_passant_target: Optional[Square] = None
    last_move_from: Optional[Square] = None
    last_move_to: Optional[Square] = None
    capture_made: bool = False

    @classmethod
    def empty(cls) -> Board:
        return cls()

    @classmethod
    def starting_position(cls) -> Board:
        board = cls()
        for file, piece_type in enumerate(BACK_RANK):
            board.place_piece(Piece(piece_type, Color.WHITE, Square(file, 0)))
            board.place_piece(Piece(PieceType.PAWN, Color.WHITE, Square(file, 1)))
            board.place_piece(Piece(PieceType.PAWN, Color.BLACK, Square(file, 6)))
            board.place_piece(Piece(piece_type, Color.BLACK, Square(file, 7)))
        return board

    # -- LOOKUPS ---
    def piece(self, square: Square) -> Optional[Piece]:
        return self.squares[square.index]

    def pieces(self, color: Optional[Color] = None) -> Iterator[tuple[Square, Piece]]:
        """All (square, piece) pairs, optionally only those of one color"""
        for square in ALL_SQUARES:
            piece = self.squares[square.index]
            if piece is not None and (color is None or piece.color == color):
                yield square, piece

    def locate_king(self, color: Color) -> Square:
        for square, piece in self.pieces(color):
            if piece.type == PieceType.KING:
                return square
        raise KingNotFoundError(f"King not found for color: {color}")

    def possible_moves(self, square: Square) -> list[Square]:
        """Candidate destinations of the piece on the square (empty list for an empty square)."""
        if self.piece(square) is None:
            return []
        return possible_moves(square, self)

    # -- EDITING ---
    def place_piece(self, piece: Piece, square: Optional[Square] = None) -> None:
        """Put the piece on its own square (or the given one, which then becomes its square)"""
        if square is not None:
            piece.square = square
        self.squares[piece.square.index] = piece

    def remove_piece(self, square: Square) -> Optional[Piece]:
        piece = self.squares[square.index]
        self.squares[square.index] = None
        return piece

    def copy(self) -> Board:
        return Board(
            squares=list(self.squares),
            en_passant_target=self.en_passant_target,
            last_move_from=self.last_move_from,
            last_move_to=self.last_move_to,
            capture_made=self.capture_made,
        )

    # -- SNAPSHOTS ---
    def snapshot(self) -> Snapshot:
        """Compare positions by what stands where, not by which piece instance stands there"""
        return tuple(
            piece.summary if piece is not None else None for piece in self.squares
        )

    def summary(self) -> dict[str, PieceSummary]:
        return {square.to_algebraic(): piece.summary for square, piece in self.pieces()}

    # -- CHECK DETECTION ---
    def is_king_in_check(self, color: Color) -> bool:
        """A king is in check if any opposing piece attacks its square."""
        king_square = self.locate_king(color)
        return self.is_square_under_attack([king_square], color)

    def is_square_under_attack(self, squares: list[Square], color: Color) -> bool:
        """Does any piece of `color`'s opponent attack one of the squares?"""
        targets = set(squares)
        for square, _ in self.pieces(color.opposite):
            if targets.intersection(attacked_squares(square, self)):
                return True
        return False

    def attackers_of(self, target: Square, color: Color) -> list[Square]:
        """Squares of the opposing pieces attacking `target` (used to find who is giving check)"""
        return [
            square
            for square, _ in self.pieces(color.opposite)
            if target in attacked_squares(square, self)
        ]

    # -- MOVE EXECUTION ---
    def en_passant_victim(self, from_square: Square, to_square: Square) -> Optional[Square]:
        """If the move is an en passant capture: the square of the pawn that gets taken"""
        mover = self.piece(from_square)
        if (
            mover is None
            or mover.type != PieceType.PAWN
            or to_square != self.en_passant_target
            or self.piece(to_square) is not None
        ):
            return None
        # the taken pawn stands one rank behind the target, seen from the mover
        return to_square.offset(0, -mover.color.direction)

    def simulate_move(self, from_square: Square, to_square: Square) -> Board:
        """
        A copy of the board with the piece moved (and an en passant victim removed).
        The real board and the pieces themselves are left alone.
        """
        simulated = self.copy()
        victim = self.en_passant_victim(from_square, to_square)
        if victim is not None:
            simulated.squares[victim.index] = None

        mover = simulated.squares[from_square.index]
        simulated.squares[from_square.index] = None
        simulated.squares[to_square.index] = mover
        return simulated

    def is_legal_move(self, from_square: Square, to_square: Square) -> bool:
        """Candidate move that does not leave your own king in check"""
        piece = self.piece(from_square)
        if piece is None or to_square not in self.possible_moves(from_square):
            return False
        return not self.simulate_move(from_square, to_square).is_king_in_check(
            piece.color
        )

    def legal_moves(self, from_square: Square) -> list[Square]:
        return [
            to_square
            for to_square in self.possible_moves(from_square)
            if self.is_legal_move(from_square, to_square)
        ]

    def move_piece(self, from_square: Square, to_square: Square, turn_color: Color) -> bool:
        """
        Try to play the move. Returns False (and leaves the board untouched) when it is not allowed.
        ----

        1. there must be a piece of the turn player on `from_square` that can reach `to_square`
        2. the king moving two files is castling (moves the rook as well)
        3. work out whether something is captured (normally or en passant)
        4. your own king may not be in check afterwards
        5. commit the move
        """
        piece = self.piece(from_square)
        if piece is None or piece.color != turn_color:
            return False

        if to_square not in self.possible_moves(from_square):
            return False

        if piece.type == PieceType.KING and abs(to_square.file - from_square.file) == 2:
            return self._perform_castling(from_square, to_square, turn_color)

        victim = self.en_passant_victim(from_square, to_square)
        capture_made = self.piece(to_square) is not None or victim is not None

        if self.simulate_move(from_square, to_square).is_king_in_check(turn_color):
            return False

        if victim is not None:
            self.remove_piece(victim)
        self.remove_piece(from_square)
        self.place_piece(piece, to_square)
        piece.mark_moved()

        self.capture_made = capture_made
        self.last_move_from = from_square
        self.last_move_to = to_square
        return True

    def _perform_castling(self, king_from: Square, king_to: Square, turn_color: Color) -> bool:
        """
        Board update with the castling move:
        ---

        Move both the king and the rook, after checking again every castling condition.
        """
        rule = castling_rule_for(king_from, king_to)
        if rule is None:
            return False

        king = self.piece(king_from)
        rook = self.piece(rule.rook_from)
        if king is None or king.type != PieceType.KING or king.moved_before:
            return False
        if (
            rook is None
            or rook.type != PieceType.ROOK
            or rook.color != turn_color
            or rook.moved_before
        ):
            return False

        if any(self.piece(square) is not None for square in rule.between):
            return False

        if self.is_king_in_check(turn_color) or self.is_square_under_attack(
            rule.king_path, turn_color
        ):
            return False

        self.remove_piece(king_from)
        self.remove_piece(rule.rook_from)
        self.place_piece(king, rule.king_to)
        self.place_piece(rook, rule.rook_to)
        king.mark_moved()
        rook.mark_moved()

        self.capture_made = False
        self.last_move_from = king_from
        self.last_move_to = king_to
        return True

    def __str__(self) -> str:
        """Text picture of the board, 8th rank on top. Handy while debugging."""
        symbols = {
            PieceType.PAWN: "p",
            PieceType.KNIGHT: "n",
            PieceType.BISHOP: "b",
            PieceType.ROOK: "r",
            PieceType.QUEEN: "q",
            PieceType.KING: "k",
        }
        rows: list[str] = []
        for rank in range(BOARD_DIMENSIONS[1] - 1, -1, -1):
            row: list[str] = []
            for file in range(BOARD_DIMENSIONS[0]):
                piece = self.piece(Square(file, rank))
                if piece is None:
                    row.append(".")
                elif piece.color == Color.WHITE:
                    row.append(symbols[piece.type].upper())
                else:
                    row.append(symbols[piece.type])
            rows.append(" ".join(row))
        return "\n".join(rows)
