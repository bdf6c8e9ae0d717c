"""
The Game class will be the entrypoint into the domain layer for the service layer.
It is responsible for orchestrating all the business logic required to play a turn of the board game:
whose turn it is, whether a move is legal, and whether the game has ended (and how).
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Self

from src.chess.board import Board, Snapshot
from src.chess.pieces import (
    PROMOTION_OPTIONS,
    SLIDING_PIECES,
    Color,
    Piece,
    PieceType,
)
from src.chess.square import BOARD_DIMENSIONS, Square
from src.chess.timer import Timer, TimeSource, monotonic_ms
from src.core.config import get_settings

# 50 moves by each player = 100 half moves
FIFTY_MOVE_LIMIT = 100
REPETITION_LIMIT = 3

PROMOTION_RANK: dict[Color, int] = {
    Color.WHITE: BOARD_DIMENSIONS[1] - 1,
    Color.BLACK: 0,
}


class Status(Enum):
    ONGOING = auto()
    CHECKMATE_WHITE_WINS = auto()
    CHECKMATE_BLACK_WINS = auto()
    STALEMATE_DRAW = auto()
    INSUFFICIENT_MATERIAL_DRAW = auto()
    THREEFOLD_REPETITION_DRAW = auto()
    FIFTY_MOVE_DRAW = auto()
    TIMEOUT = auto()


DRAWS: frozenset[Status] = frozenset(
    {
        Status.STALEMATE_DRAW,
        Status.INSUFFICIENT_MATERIAL_DRAW,
        Status.THREEFOLD_REPETITION_DRAW,
        Status.FIFTY_MOVE_DRAW,
    }
)

RESULT_TEXT: dict[Status, str] = {
    Status.CHECKMATE_WHITE_WINS: "White wins by checkmate",
    Status.CHECKMATE_BLACK_WINS: "Black wins by checkmate",
    Status.STALEMATE_DRAW: "Draw by stalemate",
    Status.INSUFFICIENT_MATERIAL_DRAW: "Draw by insufficient material",
    Status.THREEFOLD_REPETITION_DRAW: "Draw by threefold repetition",
    Status.FIFTY_MOVE_DRAW: "Draw by the fifty-move rule",
}

# The position + the side to move
PositionSnapshot = tuple[Snapshot, Color]


def squares_between(from_square: Square, to_square: Square) -> list[Square]:
    """Squares strictly in between two squares on the same rank, file or diagonal."""
    df = (to_square.file > from_square.file) - (to_square.file < from_square.file)
    dr = (to_square.rank > from_square.rank) - (to_square.rank < from_square.rank)
    squares: list[Square] = []
    square = Square(from_square.file + df, from_square.rank + dr)
    while square != to_square and square.is_within_bounds():
        squares.append(square)
        square = Square(square.file + df, square.rank + dr)
    return squares


@dataclass
class Game:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    board: Board
    timer: Timer
    current_turn: Color = Color.WHITE
    status: Status = Status.ONGOING
    half_move_counter: int = 0
    board_state_history: list[PositionSnapshot] = field(default_factory=list)
    timeout_player: Optional[Color] = None
    has_started: bool = False
    # square of a pawn that reached the last rank and still waits for its new piece type
    pending_promotion: Optional[Square] = None

    @classmethod
    def new_game(
        cls,
        time_budget_minutes: Optional[int] = None,
        time_source: TimeSource = monotonic_ms,
    ) -> Self:
        """A fresh game in the standard starting position. Both players get the same time budget."""
        minutes = (
            time_budget_minutes
            if time_budget_minutes is not None
            else get_settings().default_time_budget_minutes
        )
        return cls(
            board=Board.starting_position(),
            timer=Timer(minutes, time_source=time_source),
        )

    @property
    def is_game_over(self) -> bool:
        return self.status != Status.ONGOING

    @property
    def winner(self) -> Optional[Color]:
        if self.status == Status.CHECKMATE_WHITE_WINS:
            return Color.WHITE
        if self.status == Status.CHECKMATE_BLACK_WINS:
            return Color.BLACK
        if self.status == Status.TIMEOUT and self.timeout_player is not None:
            return self.timeout_player.opposite
        return None

    @property
    def result(self) -> Optional[str]:
        """Human readable outcome, None while the game is still going."""
        if self.status == Status.TIMEOUT and self.timeout_player is not None:
            return f"{self.timeout_player.opposite.capitalize()} wins on time"
        return RESULT_TEXT.get(self.status)

    def is_in_check(self) -> bool:
        return self.board.is_king_in_check(self.current_turn)

    def valid_moves(self, square_name: str) -> list[str]:
        """
        Legal destinations of the piece on the square.
        Empty when the square is empty, holds an opponent's piece, or no move can be made right now.
        """
        square = Square.from_algebraic(square_name)
        if self.is_game_over or self.pending_promotion is not None:
            return []

        piece = self.board.piece(square)
        if piece is None or piece.color != self.current_turn:
            return []
        return [target.to_algebraic() for target in self.board.legal_moves(square)]

    def make_move(
        self, from_square_name: str, to_square_name: str, promotion: Optional[str] = None
    ) -> bool:
        """
        Attempt to make a move
        -----

        1. refuse if the game is over (or still waits for a promotion choice)
        2. the player to move may have run out of time
        3. the piece must belong to the player to move, and be able to reach the square
        4. the move may not leave your own king in check
        5. update the board (NOTE: if castling, move the king and the rook)
        6. update en passant target, half move counter, history of positions
        7. update game status (repetition, checkmate, stalemate)
        8. hand the clock to the opponent (not before a pending promotion is resolved)

        Illegal moves return False and leave the game untouched
        (except that a failed attempt can reveal the player to move is stalemated).
        """
        from_square = Square.from_algebraic(from_square_name)
        to_square = Square.from_algebraic(to_square_name)

        if self.is_game_over or self.pending_promotion is not None:
            return False

        if self.timer.is_timeout():
            self.timeout_player = self.current_turn
            self._change_status(Status.TIMEOUT)
            return False

        piece = self.board.piece(from_square)
        if piece is None:
            self._end_if_stalemate()
            return False

        # make sure it is your turn
        if piece.color != self.current_turn:
            return False

        if not self.has_started:
            # a game set up with black to move starts black's clock
            if self.timer.active_side != self.current_turn:
                self.timer.switch_turn()
            self.timer.start()
            self.has_started = True

        # the simulation below only makes sense for a move the piece can actually make
        if to_square not in self.board.possible_moves(from_square):
            self._end_if_stalemate()
            return False

        # Board.move_piece() repeats this check. A failure here also triggers the stalemate test.
        if self._is_putting_yourself_in_check(from_square, to_square):
            self._end_if_stalemate()
            return False

        if not self.board.move_piece(from_square, to_square, self.current_turn):
            self._end_if_stalemate()
            return False

        self._update_en_passant_target(piece, from_square, to_square)

        if piece.type == PieceType.PAWN or self.board.capture_made:
            self.half_move_counter = 0
            self.board_state_history.clear()
        else:
            self.half_move_counter += 1
            if self.half_move_counter >= FIFTY_MOVE_LIMIT:
                self._switch_turn()
                self._record_position()
                self._change_status(Status.FIFTY_MOVE_DRAW)
                return True

        if self._reached_promotion_rank(piece, to_square):
            new_type = PieceType.from_name(promotion) if promotion else None
            if new_type is not None and new_type in PROMOTION_OPTIONS:
                self._replace_pawn(to_square, new_type)
            else:
                self.pending_promotion = to_square

        self._switch_turn()
        self._record_position()

        if self._is_three_fold_repetition():
            self._change_status(Status.THREEFOLD_REPETITION_DRAW)
            return True

        if self.pending_promotion is None:
            self._update_game_status()

        # a pending promotion keeps the mover's clock running until the choice is made
        if self.status not in DRAWS and self.pending_promotion is None:
            self.timer.switch_turn()
        return True

    def promote_pawn(self, square_name: str, piece_type: str) -> bool:
        """
        Replace a pawn on its last rank by a queen, rook, bishop or knight.
        Anything else (no pawn, wrong rank, unknown piece type) is silently ignored: returns False, nothing changes.
        """
        square = Square.from_algebraic(square_name)
        new_type = PieceType.from_name(piece_type)
        if new_type is None or new_type not in PROMOTION_OPTIONS:
            return False

        pawn = self.board.piece(square)
        if (
            pawn is None
            or pawn.type != PieceType.PAWN
            or not self._reached_promotion_rank(pawn, square)
        ):
            return False

        self._replace_pawn(square, new_type)

        if self.pending_promotion == square:
            # the move is only complete now: re-take the picture and look for mate/stalemate
            self.pending_promotion = None
            if self.board_state_history:
                self.board_state_history[-1] = self._position_snapshot()
            if not self.is_game_over:
                self._update_game_status()
            if not self.is_game_over:
                self.timer.switch_turn()
        return True

    def pause_timer(self) -> bool:
        if not self.has_started or self.is_game_over or not self.timer.is_running:
            return False
        self.timer.stop()
        return True

    def resume_timer(self) -> bool:
        if not self.has_started or self.is_game_over or self.timer.is_running:
            return False
        self.timer.start()
        return True

    # -- PRIVATE HELPERS ---
    def _switch_turn(self) -> None:
        self.current_turn = self.current_turn.opposite

    def _change_status(self, new_status: Status) -> None:
        self.status = new_status
        if self.is_game_over:
            self.timer.stop()

    def _position_snapshot(self) -> PositionSnapshot:
        return self.board.snapshot(), self.current_turn

    def _record_position(self) -> None:
        self.board_state_history.append(self._position_snapshot())

    def _is_putting_yourself_in_check(self, from_square: Square, to_square: Square) -> bool:
        """Copy the board, make the move there, look at your own king."""
        simulated = self.board.simulate_move(from_square, to_square)
        return simulated.is_king_in_check(self.current_turn)

    def _update_en_passant_target(
        self, piece: Piece, from_square: Square, to_square: Square
    ) -> None:
        """Only a pawn that just made a double step can be taken en passant: on the square it skipped."""
        if piece.type == PieceType.PAWN and abs(to_square.rank - from_square.rank) == 2:
            skipped_rank = (from_square.rank + to_square.rank) // 2
            self.board.en_passant_target = Square(from_square.file, skipped_rank)
        else:
            self.board.en_passant_target = None

    def _update_game_status(self) -> None:
        """The player to move is now the opponent of the player who made the move."""
        if self._is_check_mate():
            self._change_status(
                Status.CHECKMATE_WHITE_WINS
                if self.current_turn == Color.BLACK
                else Status.CHECKMATE_BLACK_WINS
            )
            return
        self._end_if_stalemate()

    def _end_if_stalemate(self) -> None:
        if self.has_insufficient_material():
            self._change_status(Status.INSUFFICIENT_MATERIAL_DRAW)
        elif self._is_stale_mate():
            self._change_status(Status.STALEMATE_DRAW)

    # -- PROMOTION RULE HELPERS ---
    def _reached_promotion_rank(self, piece: Piece, square: Square) -> bool:
        return piece.type == PieceType.PAWN and square.rank == PROMOTION_RANK[piece.color]

    def _replace_pawn(self, square: Square, new_type: PieceType) -> None:
        """A brand new piece takes the pawn's place (nothing carries over from the pawn except the color)"""
        pawn = self.board.piece(square)
        assert pawn is not None
        self.board.place_piece(Piece(new_type, pawn.color, square))

    # --- CHECKS FOR ENDING THE GAME ---
    def _can_move_to(self, target: Square, color: Color) -> bool:
        """Can any piece of `color` legally go to the target square (capturing or blocking)?"""
        return any(
            self.board.is_legal_move(square, target) for square, _ in self.board.pieces(color)
        )

    def _is_check_mate(self) -> bool:
        """
        Checkmate
        ----

        1. You must be in check
        2. Your king cannot step out of it
        3. Checked by two pieces at once? Only a king move could help, and there is none --> mate.
        4. Checked by one piece: mate unless you can capture it, or put a piece in between (only against a sliding piece).
        """
        color = self.current_turn
        if not self.board.is_king_in_check(color):
            return False

        king_square = self.board.locate_king(color)
        if self.board.legal_moves(king_square):
            return False

        attackers = self.board.attackers_of(king_square, color)
        if len(attackers) > 1:
            return True

        attacker_square = attackers[0]
        if self._can_move_to(attacker_square, color):
            return False

        # a pawn giving check right after its double step can also be taken en passant
        en_passant_target = self.board.en_passant_target
        if (
            en_passant_target is not None
            and en_passant_target.offset(0, -color.direction) == attacker_square
            and self._can_move_to(en_passant_target, color)
        ):
            return False

        attacker = self.board.piece(attacker_square)
        assert attacker is not None
        if attacker.type in SLIDING_PIECES:
            return not any(
                self._can_move_to(square, color)
                for square in squares_between(king_square, attacker_square)
            )
        return True

    def _is_stale_mate(self) -> bool:
        """Not in check, but no piece of the player to move has a single legal move"""
        color = self.current_turn
        if self.board.is_king_in_check(color):
            return False
        return not any(self.board.legal_moves(square) for square, _ in self.board.pieces(color))

    def has_insufficient_material(self) -> bool:
        """
        Automatic draw when nobody can ever deliver mate:
        * King vs King
        * King + Bishop vs King
        * King + Knight vs King
        """
        remaining = [piece.type for _, piece in self.board.pieces()]
        if len(remaining) == 2:
            return True
        if len(remaining) == 3:
            minor_pieces = [
                t for t in remaining if t in (PieceType.BISHOP, PieceType.KNIGHT)
            ]
            return len(minor_pieces) == 1
        return False

    def _is_three_fold_repetition(self) -> bool:
        """The current position (already stored in the history) occurs at least 3 times"""
        current = self._position_snapshot()
        return self.board_state_history.count(current) >= REPETITION_LIMIT
