"""Unit tests for src/services/chess_service.py"""

from typing import Callable, Optional

import pytest

from src.api.models import (
    MoveRequest,
    MoveResponse,
    NewGameRequest,
    PieceModel,
    PromotionRequest,
)
from src.chess.game import Game
from src.chess.pieces import Color, PieceType
from src.core.config import EngineSettings
from src.core.exceptions import GameNotStartedError, InvalidSquareError
from src.services.chess_service import ChessService, build_chess_service

MakeGame = Callable[..., Game]


@pytest.fixture
def service(fake_clock) -> ChessService:
    return ChessService(EngineSettings(default_time_budget_minutes=3), time_source=fake_clock)


@pytest.fixture
def started_service(service: ChessService) -> ChessService:
    service.new_game()
    return service


def move(
    service: ChessService, from_square: str, to_square: str, promote_to: Optional[str] = None
) -> MoveResponse:
    return service.make_move(
        MoveRequest(from_square=from_square, to_square=to_square, promote_to=promote_to)
    )


# --- SERVICE - NO GAME YET ----
@pytest.mark.parametrize(
    "call",
    [
        lambda s: s.status(),
        lambda s: s.board_snapshot(),
        lambda s: s.current_turn(),
        lambda s: s.is_game_over(),
        lambda s: s.valid_moves("e2"),
        lambda s: s.pause_timer(),
    ],
)
def test_calls_before_new_game_raise(service: ChessService, call) -> None:
    with pytest.raises(GameNotStartedError):
        call(service)


# --- SERVICE - CREATE NEW GAME ----
def test_new_game_uses_configured_budget(service: ChessService) -> None:
    status = service.new_game()
    assert status.turn == Color.WHITE
    assert not status.game_over
    assert not status.in_check
    assert status.result is None
    assert status.white_time == "03:00"
    assert status.black_time == "03:00"


def test_new_game_with_requested_budget(service: ChessService) -> None:
    status = service.new_game(NewGameRequest(time_budget_minutes=10))
    assert status.white_time == "10:00"


def test_new_game_replaces_the_old_one(started_service: ChessService) -> None:
    move(started_service, "e2", "e4")
    started_service.new_game()
    assert started_service.current_turn() == Color.WHITE
    assert "e2" in started_service.board_snapshot()


def test_board_snapshot(started_service: ChessService) -> None:
    board = started_service.board_snapshot()
    assert len(board) == 32
    assert board["e1"] == PieceModel(type=PieceType.KING, color=Color.WHITE)
    assert board["g8"] == PieceModel(type=PieceType.KNIGHT, color=Color.BLACK)


# --- SERVICE - MOVES ----
def test_valid_moves(started_service: ChessService) -> None:
    response = started_service.valid_moves("b1")
    assert response.square == "b1"
    assert sorted(response.valid_moves) == ["a3", "c3"]


def test_valid_moves_bad_square(started_service: ChessService) -> None:
    with pytest.raises(InvalidSquareError):
        started_service.valid_moves("k9")


def test_accepted_move(started_service: ChessService) -> None:
    response = move(started_service, "e2", "e4")
    assert response.success
    assert response.captured_piece is None
    assert response.promotion_square is None
    assert "e4" in response.board and "e2" not in response.board
    assert response.status.turn == Color.BLACK
    assert started_service.current_turn() == Color.BLACK


def test_status_shows_the_last_move(started_service: ChessService) -> None:
    assert started_service.status().last_move is None
    move(started_service, "g1", "f3")
    assert started_service.status().last_move == "g1f3"
    assert not move(started_service, "e7", "e4").success
    assert started_service.status().last_move == "g1f3"
    move(started_service, "e7", "e5")
    assert started_service.status().last_move == "e7e5"


def test_rejected_move(started_service: ChessService) -> None:
    response = move(started_service, "e2", "e5")
    assert not response.success
    assert response.captured_piece is None
    assert response.status.turn == Color.WHITE
    assert len(response.board) == 32


def test_capture_is_reported(started_service: ChessService) -> None:
    move(started_service, "e2", "e4")
    move(started_service, "d7", "d5")
    response = move(started_service, "e4", "d5")
    assert response.success
    assert response.captured_piece == PieceModel(type=PieceType.PAWN, color=Color.BLACK)
    assert len(response.board) == 31


def test_en_passant_capture_is_reported(started_service: ChessService) -> None:
    for from_square, to_square in [("e2", "e4"), ("a7", "a6"), ("e4", "e5"), ("f7", "f5")]:
        assert move(started_service, from_square, to_square).success
    response = move(started_service, "e5", "f6")
    assert response.captured_piece == PieceModel(type=PieceType.PAWN, color=Color.BLACK)
    assert "f5" not in response.board


def test_game_over_is_reported(started_service: ChessService) -> None:
    for from_square, to_square in [("f2", "f3"), ("e7", "e5"), ("g2", "g4")]:
        move(started_service, from_square, to_square)
    response = move(started_service, "d8", "h4")
    assert response.status.game_over
    assert response.status.in_check
    assert response.status.result == "Black wins by checkmate"
    assert started_service.is_game_over()
    assert not move(started_service, "a2", "a3").success


# --- SERVICE - PROMOTION ----
@pytest.fixture
def promotion_service(service: ChessService, make_game: MakeGame) -> ChessService:
    service._game = make_game({"a7": "P", "e1": "K", "h5": "k"})
    return service


def test_promotion_flow(promotion_service: ChessService) -> None:
    response = move(promotion_service, "a7", "a8")
    assert response.success
    assert response.promotion_square == "a8"

    response = promotion_service.promote_pawn(PromotionRequest(square="a8", piece_type="rook"))
    assert response.success
    assert response.promotion_square is None
    assert response.board["a8"] == PieceModel(type=PieceType.ROOK, color=Color.WHITE)


def test_promotion_with_the_move(promotion_service: ChessService) -> None:
    response = move(promotion_service, "a7", "a8", "queen")
    assert response.promotion_square is None
    assert response.board["a8"] == PieceModel(type=PieceType.QUEEN, color=Color.WHITE)


def test_ignored_promotion(promotion_service: ChessService) -> None:
    move(promotion_service, "a7", "a8")
    response = promotion_service.promote_pawn(PromotionRequest(square="a8", piece_type="king"))
    assert not response.success
    assert response.promotion_square == "a8"
    assert response.board["a8"] == PieceModel(type=PieceType.PAWN, color=Color.WHITE)


# --- SERVICE - TIMER ----
def test_pause_and_resume(started_service: ChessService, fake_clock) -> None:
    assert not started_service.pause_timer()
    move(started_service, "e2", "e4")
    assert started_service.pause_timer()
    fake_clock.advance(5 * 60 * 1000)
    assert started_service.status().black_time == "03:00"
    assert started_service.resume_timer()
    assert not started_service.resume_timer()


def test_timeout_is_reported(started_service: ChessService, fake_clock) -> None:
    move(started_service, "e2", "e4")
    fake_clock.advance(3 * 60 * 1000)
    response = move(started_service, "e7", "e5")
    assert not response.success
    assert response.status.game_over
    assert response.status.result == "White wins on time"
    assert response.status.black_time == "00:00"


# --- ENTRY POINT ----
def test_build_chess_service() -> None:
    service = build_chess_service(EngineSettings(log_level="WARNING"))
    assert isinstance(service, ChessService)
    assert service.settings.log_level == "WARNING"
    with pytest.raises(GameNotStartedError):
        service.status()
