"""Chess rules engine: board model, move legality, game state and FEN export."""

from .engine.board import Board
from .engine.errors import ChessError, GameOver, InvalidMove, KingInCheck, NotYourTurn
from .engine.game import (
    STARTPOS_FEN,
    GameState,
    get_legal_moves,
    is_in_check,
    make_move,
    new_game,
    to_fen,
)
from .engine.move import PROMOTION_KINDS, Move
from .engine.types import (
    CastlingRights,
    Color,
    GameStatus,
    Piece,
    PieceKind,
    Square,
    StatusKind,
)

__version__ = "0.1.0"
