"""
Chess clock: two countdown clocks, only the one of the player to move is ticking.

Time is read from a time source (a callable returning milliseconds) at the moment of the call, there is no background tick.
Tests pass in a fake time source to move time forward without sleeping.
"""

import time
from typing import Callable

from src.chess.pieces import Color

TimeSource = Callable[[], int]

MS_PER_MINUTE = 60 * 1000
MS_PER_SECOND = 1000


def monotonic_ms() -> int:
    return time.monotonic_ns() // 1_000_000


def deduct(remaining_ms: int, elapsed_ms: int) -> int:
    """Remaining time after `elapsed_ms` passed. Time never runs backwards, and a clock never goes below zero."""
    return max(0, remaining_ms - max(0, elapsed_ms))


def format_ms(remaining_ms: int) -> str:
    """MM:SS"""
    minutes, rest = divmod(max(0, remaining_ms), MS_PER_MINUTE)
    return f"{minutes:02d}:{rest // MS_PER_SECOND:02d}"


class Timer:
    """Dual chess clock tracking remaining time for both players. White's clock is the first one to run."""

    def __init__(self, initial_minutes: int = 5, time_source: TimeSource = monotonic_ms) -> None:
        self._time_source = time_source
        self._remaining: dict[Color, int] = {
            Color.WHITE: initial_minutes * MS_PER_MINUTE,
            Color.BLACK: initial_minutes * MS_PER_MINUTE,
        }
        self._last_timestamp: dict[Color, int] = {Color.WHITE: 0, Color.BLACK: 0}
        self._running = False
        self._active = Color.WHITE

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def active_side(self) -> Color:
        return self._active

    def last_timestamp(self, color: Color) -> int:
        return self._last_timestamp[color]

    def start(self) -> None:
        """Start (or resume) the clock of the active side. Does nothing when already running."""
        if self._running:
            return
        self._running = True
        self._last_timestamp[self._active] = self._time_source()

    def stop(self) -> None:
        """Charge the active side up to now, then freeze both clocks."""
        if not self._running:
            return
        self._consume_elapsed()
        self._running = False

    def switch_turn(self) -> None:
        """The active side finished its move: charge its time and start the opponent's clock."""
        if self._running:
            now = self._consume_elapsed()
            self._active = self._active.opposite
            self._last_timestamp[self._active] = now
        else:
            self._active = self._active.opposite

    def is_timeout(self) -> bool:
        """Has the active side run out of time?"""
        if self._running:
            self._consume_elapsed()
        return self._remaining[self._active] <= 0

    def remaining_ms(self, color: Color) -> int:
        """Read-only: includes the time the running clock used so far, without charging it."""
        if self._running and color == self._active:
            elapsed = self._time_source() - self._last_timestamp[color]
            return deduct(self._remaining[color], elapsed)
        return self._remaining[color]

    def formatted_time(self, color: Color) -> str:
        return format_ms(self.remaining_ms(color))

    def _consume_elapsed(self) -> int:
        now = self._time_source()
        elapsed = now - self._last_timestamp[self._active]
        if elapsed > 0:
            self._remaining[self._active] = deduct(self._remaining[self._active], elapsed)
            self._last_timestamp[self._active] = now
        return now
