"""
Errors raised by the engine and the service layer.

Illegal moves are NOT errors: they are reported by returning False (and leave the board untouched).
Only malformed input and broken invariants get raised.
"""


class ChessError(Exception):
    """Base class for everything this package raises."""


class InvalidSquareError(ChessError):
    """A square label is not a file letter 'a'-'h' followed by a rank digit '1'-'8'."""


class KingNotFoundError(ChessError):
    """A colour has no king on the board. Should never happen during valid play."""


class GameNotStartedError(ChessError):
    """The service was asked about a game before one was created."""
