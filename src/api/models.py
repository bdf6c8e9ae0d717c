"""Requests and Response models"""

from typing import Optional

from pydantic import BaseModel, field_validator

from src.chess.pieces import Color, PieceType
from src.chess.square import to_coords

SquareName = str


def _validate_square_name(value: str) -> str:
    """Raises InvalidSquareError for anything that is not 'a1' - 'h8'"""
    to_coords(value)
    return value


# --- REQUEST MODELS ---
class NewGameRequest(BaseModel):
    time_budget_minutes: Optional[int] = None

    @field_validator("time_budget_minutes")
    @classmethod
    def validate_time_budget(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value <= 0:
            raise ValueError("Time budget must be a positive number of minutes.")
        return value


class MoveRequest(BaseModel):
    from_square: SquareName
    to_square: SquareName
    promote_to: Optional[PieceType] = None

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square_name(value)


class PromotionRequest(BaseModel):
    """piece_type stays a plain string: an unknown type is not an error, the promotion just does not happen"""

    square: SquareName
    piece_type: str

    @field_validator("square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square_name(value)


# --- RESPONSE MODELS ---
class PieceModel(BaseModel):
    type: PieceType
    color: Color


class GameStatusResponse(BaseModel):
    turn: Color
    game_over: bool
    in_check: bool
    result: Optional[str] = None
    # e.g. "e2e4", None before the first move
    last_move: Optional[str] = None
    white_time: str
    black_time: str


class ValidMovesResponse(BaseModel):
    square: SquareName
    valid_moves: list[SquareName]


class MoveResponse(BaseModel):
    success: bool
    captured_piece: Optional[PieceModel] = None
    # set when a pawn reached the last rank and the promotion choice is still missing
    promotion_square: Optional[SquareName] = None
    board: dict[SquareName, PieceModel]
    status: GameStatusResponse

