from __future__ import annotations


class ChessError(Exception):
    """Base class for rejected moves. The game state is never modified."""

    code = "chess_error"


class InvalidMove(ChessError):
    """No piece at the source square, or a geometry/occupancy rule failed."""

    code = "invalid_move"

    def __init__(self, reason: str) -> None:
        super().__init__(f"invalid move: {reason}")
        self.reason = reason


class NotYourTurn(ChessError):
    code = "not_your_turn"

    def __init__(self) -> None:
        super().__init__("not your turn")


class KingInCheck(ChessError):
    """The move would leave the mover's own king attacked."""

    code = "king_in_check"

    def __init__(self) -> None:
        super().__init__("king would be in check")


class GameOver(ChessError):
    code = "game_over"

    def __init__(self) -> None:
        super().__init__("game is over")
