"""
Orchestration between whatever hosts the engine (an API router, a CLI, ...) and the chess domain layer.

One ChessService owns one Game. Hosting several games means several services: the engine has no shared state,
and calls on one service must not run concurrently.
"""

from typing import Optional

from src.api.models import (
    GameStatusResponse,
    MoveRequest,
    MoveResponse,
    NewGameRequest,
    PieceModel,
    PromotionRequest,
    ValidMovesResponse,
)
from src.chess.game import Game
from src.chess.pieces import Color, PieceSummary
from src.chess.square import Square
from src.chess.timer import TimeSource, monotonic_ms
from src.core.config import EngineSettings, get_settings
from src.core.exceptions import GameNotStartedError
from src.core.logger import get_logger, setup_logging

logger = get_logger(__name__)


class ChessService:
    """Orchestration of layers for chess game."""

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        time_source: TimeSource = monotonic_ms,
    ) -> None:
        self.settings = settings or get_settings()
        self._time_source = time_source
        self._game: Optional[Game] = None

    @property
    def game(self) -> Game:
        if self._game is None:
            raise GameNotStartedError("No game in progress. Start a new game first.")
        return self._game

    # -- API routes logic ---
    def new_game(self, request: Optional[NewGameRequest] = None) -> GameStatusResponse:
        """Throw away the current game (if any) and set up the starting position."""
        minutes = (
            request.time_budget_minutes
            if request is not None and request.time_budget_minutes is not None
            else self.settings.default_time_budget_minutes
        )
        self._game = Game.new_game(minutes, time_source=self._time_source)
        logger.info("new_game", time_budget_minutes=minutes)
        return self.status()

    def board_snapshot(self) -> dict[str, PieceModel]:
        return {
            square: self._piece_model(summary)
            for square, summary in self.game.board.summary().items()
        }

    def current_turn(self) -> Color:
        return self.game.current_turn

    def is_game_over(self) -> bool:
        return self.game.is_game_over

    def status(self) -> GameStatusResponse:
        game = self.game
        return GameStatusResponse(
            turn=game.current_turn,
            game_over=game.is_game_over,
            in_check=game.is_in_check(),
            result=game.result,
            last_move=self._last_move(),
            white_time=game.timer.formatted_time(Color.WHITE),
            black_time=game.timer.formatted_time(Color.BLACK),
        )

    def valid_moves(self, square: str) -> ValidMovesResponse:
        return ValidMovesResponse(square=square, valid_moves=self.game.valid_moves(square))

    def make_move(self, request: MoveRequest) -> MoveResponse:
        """Attempt the move. A refused move is a normal outcome: success=False and an unchanged board."""
        game = self.game
        was_over = game.is_game_over
        captured = self._piece_to_be_captured(request.from_square, request.to_square)
        promotion = request.promote_to.value if request.promote_to else None

        success = game.make_move(request.from_square, request.to_square, promotion)
        if success:
            logger.info(
                "move_accepted",
                from_square=request.from_square,
                to_square=request.to_square,
                half_move_counter=game.half_move_counter,
            )
        else:
            logger.info(
                "move_rejected",
                from_square=request.from_square,
                to_square=request.to_square,
                turn=game.current_turn.value,
            )
        self._log_if_game_ended(was_over)

        pending = game.pending_promotion
        return MoveResponse(
            success=success,
            captured_piece=captured if success else None,
            promotion_square=pending.to_algebraic() if pending else None,
            board=self.board_snapshot(),
            status=self.status(),
        )

    def promote_pawn(self, request: PromotionRequest) -> MoveResponse:
        game = self.game
        was_over = game.is_game_over
        promoted = game.promote_pawn(request.square, request.piece_type)
        if promoted:
            logger.info("pawn_promoted", square=request.square, piece_type=request.piece_type)
        else:
            logger.info("promotion_ignored", square=request.square, piece_type=request.piece_type)
        self._log_if_game_ended(was_over)

        pending = game.pending_promotion
        return MoveResponse(
            success=promoted,
            promotion_square=pending.to_algebraic() if pending else None,
            board=self.board_snapshot(),
            status=self.status(),
        )

    def pause_timer(self) -> bool:
        paused = self.game.pause_timer()
        if paused:
            logger.info("timer_paused")
        return paused

    def resume_timer(self) -> bool:
        resumed = self.game.resume_timer()
        if resumed:
            logger.info("timer_resumed")
        return resumed

    # -- Internal helpers --
    def _piece_model(self, summary: PieceSummary) -> PieceModel:
        return PieceModel(type=summary.type, color=summary.color)

    def _piece_to_be_captured(self, from_square: str, to_square: str) -> Optional[PieceModel]:
        """What the move would take (looked up BEFORE the move is made). En passant takes from another square."""
        board = self.game.board
        source = Square.from_algebraic(from_square)
        target = Square.from_algebraic(to_square)
        victim_square = board.en_passant_victim(source, target) or target
        victim = board.piece(victim_square)
        mover = board.piece(source)
        if victim is None or mover is None or victim.color == mover.color:
            return None
        return self._piece_model(victim.summary)

    def _last_move(self) -> Optional[str]:
        board = self.game.board
        if board.last_move_from is None or board.last_move_to is None:
            return None
        return f"{board.last_move_from}{board.last_move_to}"

    def _log_if_game_ended(self, was_over: bool) -> None:
        game = self.game
        if game.is_game_over and not was_over:
            logger.info(
                "game_over",
                status=game.status.name.lower(),
                result=game.result,
                winner=game.winner.value if game.winner else None,
            )


def build_chess_service(settings: Optional[EngineSettings] = None) -> ChessService:
    """Entry point for a host process: configure logging from the settings, hand back a service without a game yet."""
    settings = settings or get_settings()
    setup_logging(settings.log_level)
    return ChessService(settings)
