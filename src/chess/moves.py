"""
Geometry/Base movement and capturing/attacking rules

Key idea: Use strategy pattern to define the move sets for each piece type.
The piece type works as the tag, the tables below map it onto the function producing its squares.

Legality (does the move leave your own king in check?) is checked later by Board / Game
"""

from typing import Callable, Optional, Protocol

from src.chess.castling import CASTLING_RULES
from src.chess.pieces import Color, Piece, PieceType
from src.chess.square import Square


class Board(Protocol):
    """Just the parts the movement strategies need"""

    en_passant_target: Optional[Square]

    def piece(self, square: Square) -> Optional[Piece]: ...
    def is_king_in_check(self, color: Color) -> bool: ...
    def is_square_under_attack(self, squares: list[Square], color: Color) -> bool: ...


Vector = tuple[int, int]

DIAGONALS: list[Vector] = [(1, 1), (-1, 1), (1, -1), (-1, -1)]
STRAIGHTS: list[Vector] = [(1, 0), (-1, 0), (0, 1), (0, -1)]
KNIGHT_DELTAS: list[Vector] = [
    (2, 1),
    (2, -1),
    (-2, 1),
    (-2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
]
KING_DELTAS: list[Vector] = DIAGONALS + STRAIGHTS

# rank index a pawn must stand on to take en passant
EN_PASSANT_RANK: dict[Color, int] = {Color.WHITE: 4, Color.BLACK: 3}
PAWN_START_RANK: dict[Color, int] = {Color.WHITE: 1, Color.BLACK: 6}


def _mover(square: Square, board: Board) -> Piece:
    piece = board.piece(square)
    if piece is None:
        raise ValueError(f"No piece on {square} to generate moves for.")
    return piece


# --- MOVEMENT RULES ---
def raycasting_move(
    square: Square, board: Board, directions: list[Vector]
) -> list[Square]:
    """
    Raycasting algorithm
    -----

    ---
    The main trick we use to check the 'line of sight of a piece'.
    We define move directions and move along them until we hit another piece or
    the edge of the board.
    """
    player_color = _mover(square, board).color

    squares: list[Square] = []
    for df, dr in directions:
        target_square = square.offset(df, dr)
        while target_square is not None:
            occupant = board.piece(target_square)
            if occupant is not None:
                # only need to add the first occupied square found if it is the opponent's: then it can be captured.
                if occupant.color != player_color:
                    squares.append(target_square)
                break

            squares.append(target_square)
            target_square = target_square.offset(df, dr)
    return squares


def single_step_move(
    square: Square, board: Board, deltas: list[Vector]
) -> list[Square]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that just can move a single step along a direction"""
    player_color = _mover(square, board).color

    squares: list[Square] = []
    for df, dr in deltas:
        target_square = square.offset(df, dr)
        if target_square is None:
            continue

        occupant = board.piece(target_square)
        if occupant is None or occupant.color != player_color:
            squares.append(target_square)

    return squares


def candidate_pawn_moves(square: Square, board: Board) -> list[Square]:
    """
    A pawn:
    - moves by a single square forward.
    - It can move by two in their first move (so when on their starting rank)
    - takes diagonally
    - takes en passant onto the square the opponent's pawn just skipped
    """
    pawn = _mover(square, board)
    direction = pawn.color.direction

    squares: list[Square] = []
    one_step = square.offset(0, direction)
    if one_step is not None and board.piece(one_step) is None:
        squares.append(one_step)

        # the double step needs the intermediate square to be empty as well
        two_steps = square.offset(0, 2 * direction)
        if (
            not pawn.moved_before
            and square.rank == PAWN_START_RANK[pawn.color]
            and two_steps is not None
            and board.piece(two_steps) is None
        ):
            squares.append(two_steps)

    for target_square in pawn_attacks(square, board):
        occupant = board.piece(target_square)
        if occupant is not None and occupant.color != pawn.color:
            squares.append(target_square)
        elif (
            target_square == board.en_passant_target
            and square.rank == EN_PASSANT_RANK[pawn.color]
        ):
            squares.append(target_square)

    return squares


def candidate_knight_moves(square: Square, board: Board) -> list[Square]:
    """Knights always move such that |delta_rank| + |delta_file| = 3"""
    return single_step_move(square, board, KNIGHT_DELTAS)


def candidate_bishop_moves(square: Square, board: Board) -> list[Square]:
    """Bishops move diagonally: |delta_rank| = |delta_file|"""
    return raycasting_move(square, board, DIAGONALS)


def candidate_rook_moves(square: Square, board: Board) -> list[Square]:
    """Rooks move either horizontally or vertically"""
    return raycasting_move(square, board, STRAIGHTS)


def candidate_queen_moves(square: Square, board: Board) -> list[Square]:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return candidate_bishop_moves(square, board) + candidate_rook_moves(square, board)


def candidate_king_moves(square: Square, board: Board) -> list[Square]:
    """
    The king can move by a single square at the time.

    Castling is modelled as a special king move: the king moves two files towards the rook.
    """
    return single_step_move(square, board, KING_DELTAS) + castling_moves(
        square, board
    )


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[[Square, Board], list[Square]]
MOVEMENT_RULES: dict[PieceType, CandidateMovesFn] = {
    PieceType.PAWN: candidate_pawn_moves,
    PieceType.KNIGHT: candidate_knight_moves,
    PieceType.BISHOP: candidate_bishop_moves,
    PieceType.ROOK: candidate_rook_moves,
    PieceType.QUEEN: candidate_queen_moves,
    PieceType.KING: candidate_king_moves,
}


def possible_moves(square: Square, board: Board) -> list[Square]:
    """Squares the piece on `square` could move to. Does NOT check whether your own king ends up in check."""
    piece = _mover(square, board)
    return MOVEMENT_RULES[piece.type](square, board)


# --- ATTACKING RULES ---
def pawn_attacks(square: Square, board: Board) -> list[Square]:
    """
    Pawns take diagonally
    ----

    NOTE: Unlike the other pieces, the squares a pawn attacks are not the squares it can move to.
    It attacks both forward diagonals, whether or not anything stands there.
    """
    direction = _mover(square, board).color.direction
    return [
        target_square
        for df in (-1, 1)
        if (target_square := square.offset(df, direction)) is not None
    ]


def king_attacks(square: Square, board: Board) -> list[Square]:
    """Castling never captures anything, so only the single steps count"""
    return single_step_move(square, board, KING_DELTAS)


IsAttackingFn = Callable[[Square, Board], list[Square]]
ATTACK_RULES: dict[PieceType, IsAttackingFn] = {
    PieceType.PAWN: pawn_attacks,
    PieceType.KNIGHT: candidate_knight_moves,
    PieceType.BISHOP: candidate_bishop_moves,
    PieceType.ROOK: candidate_rook_moves,
    PieceType.QUEEN: candidate_queen_moves,
    PieceType.KING: king_attacks,
}


def attacked_squares(square: Square, board: Board) -> list[Square]:
    """Squares the piece on `square` attacks (could capture on)."""
    piece = _mover(square, board)
    return ATTACK_RULES[piece.type](square, board)


# -- CASTLING MOVES ---
def castling_moves(square: Square, board: Board) -> list[Square]:
    """
    Castling destinations of the king standing on `square`
    ---

    **you are allowed to castle if**

    * Neither the king nor the rook of choice moved before.
    * All squares in between the king and the rook are empty.
    * You are not currently put in check (you cannot castle out of a check).
    * None of the squares the king passes over (or lands on) is under attack.
    """
    king = _mover(square, board)
    if king.type != PieceType.KING or king.moved_before:
        return []

    destinations: list[Square] = []
    for (color, _), rule in CASTLING_RULES.items():
        if color != king.color or rule.king_from != square:
            continue

        rook = board.piece(rule.rook_from)
        if (
            rook is None
            or rook.type != PieceType.ROOK
            or rook.color != king.color
            or rook.moved_before
        ):
            continue

        if any(board.piece(between) is not None for between in rule.between):
            continue

        if board.is_king_in_check(king.color):
            # no castling direction works. Stop looking.
            return []

        if board.is_square_under_attack(rule.king_path, king.color):
            continue

        destinations.append(rule.king_to)
    return destinations
