from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, List, Optional

from .board import Board
from .errors import GameOver, InvalidMove, KingInCheck, NotYourTurn
from .move import PROMOTION_KINDS, Move
from .types import (
    CHECK,
    DRAW,
    IN_PROGRESS,
    STALEMATE,
    CastlingRights,
    Color,
    GameStatus,
    Piece,
    PieceKind,
    Square,
)


logger = logging.getLogger(__name__)


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

FIFTY_MOVE_LIMIT = 50
KING_HOME_FILE = 4
KINGSIDE_ROOK_FILE = 7
QUEENSIDE_ROOK_FILE = 0

CASTLING_KEYS = ("white_kingside", "white_queenside", "black_kingside", "black_queenside")


@dataclass
class GameState:
    """Authoritative state of one game and the rules that change it.

    Responsibility: validate moves, apply them atomically, and keep derived
    state (castling rights, en-passant target, clocks, status) in sync.

    Notes:
    - Validation never mutates; execution runs only after validation passed,
      so a rejected move leaves the whole aggregate unchanged.
    - King safety is tested on a scratch copy of the board.
    - Instances share nothing; callers serialize access to a single instance.
    """

    board: Board = field(default_factory=Board.standard)
    current_player: Color = Color.WHITE
    castling_rights: CastlingRights = field(default_factory=CastlingRights)
    en_passant_target: Optional[Square] = None
    halfmove_clock: int = 0
    fullmove_number: int = 1
    status: GameStatus = IN_PROGRESS

    @classmethod
    def new(cls) -> "GameState":
        """Create a game in the standard initial position, White to move."""
        return cls()

    def copy(self) -> "GameState":
        return replace(
            self,
            board=self.board.copy(),
            castling_rights=replace(self.castling_rights),
        )

    # --- Public operations ---
    def make_move(self, move: Move) -> None:
        """Validate and apply ``move`` in place.

        Raises:
            GameOver: The game already ended in checkmate, stalemate or a draw.
            InvalidMove: No piece on the source square or a movement rule failed.
            NotYourTurn: The source piece belongs to the side not to move.
            KingInCheck: The move would leave the mover's king attacked.
        """
        if self.status.is_terminal:
            raise GameOver()
        piece = self.validate_move(move)
        captured = self.execute_move(move)

        self._update_castling_rights(move, piece)
        self._update_en_passant(move, piece)
        self._update_clocks(move, piece)
        self._switch_player()
        self._update_status()

        logger.debug(
            "move applied",
            extra={
                "move": move.to_uci(),
                "captured": captured.symbol if captured is not None else None,
                "status": self.status.kind.value,
            },
        )
        if self.status.is_terminal:
            logger.info(
                "game finished",
                extra={
                    "status": self.status.kind.value,
                    "winner": self.status.winner.value if self.status.winner else None,
                },
            )

    def validate_move(self, move: Move) -> Piece:
        """Run the legality pipeline for ``move`` without touching the state.

        Returns:
            Piece: The piece standing on the source square.
        """
        piece = self.board.get_piece(move.from_sq)
        if piece is None:
            raise InvalidMove("no piece at source square")
        if piece.color is not self.current_player:
            raise NotYourTurn()
        reason = self._rule_violation(move, piece)
        if reason is not None:
            raise InvalidMove(reason)
        if self._leaves_king_in_check(move, piece):
            raise KingInCheck()
        return piece

    def execute_move(self, move: Move) -> Optional[Piece]:
        """Apply an already validated move to the board.

        Returns:
            Optional[Piece]: The captured piece, if any.
        """
        piece = self.board.get_piece(move.from_sq)
        if piece is None:
            raise InvalidMove("no piece at source square")
        return self._apply(self.board, move, piece)

    def get_legal_moves(self) -> List[Move]:
        """Return every legal move for the side to move.

        Order: pieces in a1..h8 scan order, then destinations in the same
        order; promotions expand to Queen, Rook, Bishop, Knight.
        """
        return list(self._iter_legal_moves())

    def has_legal_moves(self) -> bool:
        return next(self._iter_legal_moves(), None) is not None

    def is_in_check(self, color: Color) -> bool:
        """Return True if ``color``'s king is attacked. No king means no check."""
        king_sq = self.board.find_king(color)
        if king_sq is None:
            return False
        return self.board.is_square_attacked(king_sq, color.opposite)

    def to_fen(self) -> str:
        """Serialize the position as a six-field FEN string."""
        ep = self.en_passant_target.to_algebraic() if self.en_passant_target is not None else "-"
        return (
            f"{self.board.placement_fen()} {self.current_player.fen} "
            f"{self.castling_rights.to_fen()} {ep} {self.halfmove_clock} {self.fullmove_number}"
        )

    # --- Legality ---
    def _rule_violation(self, move: Move, piece: Piece) -> Optional[str]:
        """Return why ``move`` breaks a movement rule, or None if it does not."""
        from_sq, to_sq = move.from_sq, move.to_sq
        if from_sq == to_sq:
            return "source and destination are the same square"
        target = self.board.get_piece(to_sq)
        if target is not None and target.color is piece.color:
            return "destination occupied by own piece"

        kind = piece.kind
        if move.is_castling and kind is not PieceKind.KING:
            return "only the king can castle"
        if move.is_en_passant and kind is not PieceKind.PAWN:
            return "only a pawn can capture en passant"
        if kind is PieceKind.PAWN:
            return self._pawn_violation(move, piece.color)
        if move.promotion is not None:
            return "only a pawn can promote"
        if kind is PieceKind.KING and move.is_castling:
            return self._castling_violation(move, piece.color)

        df = abs(to_sq.file - from_sq.file)
        dr = abs(to_sq.rank - from_sq.rank)
        if kind is PieceKind.KNIGHT:
            legal = (df, dr) in ((1, 2), (2, 1))
        elif kind is PieceKind.KING:
            legal = df <= 1 and dr <= 1
        elif kind is PieceKind.ROOK:
            legal = self._rook_line(from_sq, to_sq)
        elif kind is PieceKind.BISHOP:
            legal = self._bishop_line(from_sq, to_sq)
        else:
            legal = self._rook_line(from_sq, to_sq) or self._bishop_line(from_sq, to_sq)
        if not legal:
            return f"illegal move for a {kind.name.lower()}"
        return None

    def _rook_line(self, from_sq: Square, to_sq: Square) -> bool:
        aligned = from_sq.file == to_sq.file or from_sq.rank == to_sq.rank
        return aligned and self.board.is_path_clear(from_sq, to_sq)

    def _bishop_line(self, from_sq: Square, to_sq: Square) -> bool:
        df = abs(to_sq.file - from_sq.file)
        dr = abs(to_sq.rank - from_sq.rank)
        return df == dr and df > 0 and self.board.is_path_clear(from_sq, to_sq)

    def _pawn_violation(self, move: Move, color: Color) -> Optional[str]:
        from_sq, to_sq = move.from_sq, move.to_sq
        direction = color.forward
        df = to_sq.file - from_sq.file
        dr = to_sq.rank - from_sq.rank
        target = self.board.get_piece(to_sq)

        if abs(df) == 1 and dr == direction:
            if move.is_en_passant:
                if to_sq != self.en_passant_target or target is not None:
                    return "no en passant capture available on that square"
                victim = self.board.get_piece(Square(to_sq.file, from_sq.rank))
                if victim is None or victim.kind is not PieceKind.PAWN or victim.color is color:
                    return "no pawn to capture en passant"
            elif target is None:
                return "pawn can only move diagonally to capture"
        elif move.is_en_passant:
            return "en passant must be a diagonal capture"
        elif df == 0 and dr == direction:
            if target is not None:
                return "pawn push is blocked"
        elif df == 0 and dr == 2 * direction:
            if from_sq.rank != color.home_rank + direction:
                return "pawn can only advance two squares from its starting rank"
            if target is not None or not self.board.is_path_clear(from_sq, to_sq):
                return "pawn push is blocked"
        else:
            return "illegal move for a pawn"

        if to_sq.rank == color.opposite.home_rank:
            if move.promotion is None:
                return "promotion piece required"
            if move.promotion not in PROMOTION_KINDS:
                return "invalid promotion piece"
        elif move.promotion is not None:
            return "promotion is only allowed on the last rank"
        return None

    def _castling_violation(self, move: Move, color: Color) -> Optional[str]:
        from_sq, to_sq = move.from_sq, move.to_sq
        rank = color.home_rank
        if from_sq != Square(KING_HOME_FILE, rank):
            return "king is not on its home square"
        if to_sq.rank != rank or abs(to_sq.file - from_sq.file) != 2:
            return "castling moves the king two files along its home rank"
        kingside = to_sq.file > from_sq.file
        if not self.castling_rights.can_castle(color, kingside):
            return "castling right has been lost"
        rook_sq = Square(KINGSIDE_ROOK_FILE if kingside else QUEENSIDE_ROOK_FILE, rank)
        if self.board.get_piece(rook_sq) != Piece(PieceKind.ROOK, color):
            return "no rook to castle with"
        if self.is_in_check(color):
            return "cannot castle out of check"
        if not self.board.is_path_clear(from_sq, rook_sq):
            return "castling path is blocked"
        step = 1 if kingside else -1
        for file in (from_sq.file + step, to_sq.file):
            sq = Square(file, rank)
            scratch = self.board.copy()
            scratch.move_piece(from_sq, sq)
            if scratch.is_square_attacked(sq, color.opposite):
                return "king would cross or land on an attacked square"
        return None

    def _leaves_king_in_check(self, move: Move, piece: Piece) -> bool:
        scratch = self.board.copy()
        self._apply(scratch, move, piece)
        if piece.kind is PieceKind.KING:
            king_sq: Optional[Square] = move.to_sq
        else:
            king_sq = scratch.find_king(piece.color)
        if king_sq is None:
            return False
        return scratch.is_square_attacked(king_sq, piece.color.opposite)

    def _is_legal(self, move: Move, piece: Piece) -> bool:
        return self._rule_violation(move, piece) is None and not self._leaves_king_in_check(
            move, piece
        )

    def _iter_legal_moves(self) -> Iterator[Move]:
        color = self.current_player
        last_rank = color.opposite.home_rank
        for from_sq, piece in self.board.pieces(color):
            is_pawn = piece.kind is PieceKind.PAWN
            is_king = piece.kind is PieceKind.KING
            for to_sq in Square.all():
                candidate = Move(
                    from_sq,
                    to_sq,
                    is_castling=is_king and abs(to_sq.file - from_sq.file) == 2,
                    is_en_passant=is_pawn and to_sq == self.en_passant_target,
                )
                if is_pawn and to_sq.rank == last_rank:
                    variants = [replace(candidate, promotion=k) for k in PROMOTION_KINDS]
                else:
                    variants = [candidate]
                # Promotion kind never affects legality; test the first variant only.
                if self._is_legal(variants[0], piece):
                    yield from variants

    # --- Execution ---
    @staticmethod
    def _apply(board: Board, move: Move, piece: Piece) -> Optional[Piece]:
        """Apply ``move`` to ``board`` and return the captured piece, if any."""
        from_sq, to_sq = move.from_sq, move.to_sq
        if move.is_castling:
            board.move_piece(from_sq, to_sq)
            rank = from_sq.rank
            if to_sq.file > from_sq.file:
                board.move_piece(Square(KINGSIDE_ROOK_FILE, rank), Square(to_sq.file - 1, rank))
            else:
                board.move_piece(Square(QUEENSIDE_ROOK_FILE, rank), Square(to_sq.file + 1, rank))
            return None

        captured = board.move_piece(from_sq, to_sq)
        if move.is_en_passant:
            captured = board.remove_piece(Square(to_sq.file, from_sq.rank))
        if move.promotion is not None:
            board.set_piece(to_sq, Piece(move.promotion, piece.color))
        return captured

    # --- Derived state ---
    def _update_castling_rights(self, move: Move, piece: Piece) -> None:
        if piece.kind is PieceKind.KING:
            self.castling_rights.revoke(piece.color)
        elif piece.kind is PieceKind.ROOK and move.from_sq.rank == piece.color.home_rank:
            if move.from_sq.file == KINGSIDE_ROOK_FILE:
                self.castling_rights.revoke(piece.color, kingside=True)
            elif move.from_sq.file == QUEENSIDE_ROOK_FILE:
                self.castling_rights.revoke(piece.color, kingside=False)

    def _update_en_passant(self, move: Move, piece: Piece) -> None:
        self.en_passant_target = None
        if piece.kind is PieceKind.PAWN and abs(move.to_sq.rank - move.from_sq.rank) == 2:
            self.en_passant_target = Square(
                move.from_sq.file, move.from_sq.rank + piece.color.forward
            )

    def _update_clocks(self, move: Move, piece: Piece) -> None:
        # Only pawn moves (en passant included) reset the clock.
        if piece.kind is PieceKind.PAWN or move.is_en_passant:
            self.halfmove_clock = 0
        else:
            self.halfmove_clock += 1

    def _switch_player(self) -> None:
        self.current_player = self.current_player.opposite
        if self.current_player is Color.WHITE:
            self.fullmove_number += 1

    def _update_status(self) -> None:
        self.status = self._compute_status()

    def _compute_status(self) -> GameStatus:
        # The fifty-move draw overrides mobility and check.
        if self.halfmove_clock >= FIFTY_MOVE_LIMIT:
            return DRAW
        in_check = self.is_in_check(self.current_player)
        if not self.has_legal_moves():
            if in_check:
                return GameStatus.checkmate(self.current_player.opposite)
            return STALEMATE
        return CHECK if in_check else IN_PROGRESS

    # --- Snapshots ---
    def to_snapshot(self) -> Dict[str, Any]:
        """Return a JSON-compatible snapshot of the full game state."""
        rights = self.castling_rights
        return {
            "board": self.board.to_mapping(),
            "current_player": self.current_player.value,
            "castling_rights": {key: getattr(rights, key) for key in CASTLING_KEYS},
            "en_passant_target": (
                self.en_passant_target.to_algebraic() if self.en_passant_target else None
            ),
            "halfmove_clock": self.halfmove_clock,
            "fullmove_number": self.fullmove_number,
            "status": {
                "kind": self.status.kind.value,
                "winner": self.status.winner.value if self.status.winner else None,
            },
        }

    @classmethod
    def from_snapshot(cls, data: Dict[str, Any]) -> "GameState":
        """Restore a game from a snapshot produced by ``to_snapshot``.

        Args:
            data (Dict[str, Any]): Snapshot dict. Only ``board`` is required;
                missing fields default to White to move, no castling rights,
                no en-passant target and clocks ``0``/``1``.

        Returns:
            GameState: Restored state. Status is recomputed from the position
                rather than read from the snapshot.

        Raises:
            ValueError: If any field is missing or malformed.
        """
        if not isinstance(data, dict) or not isinstance(data.get("board"), dict):
            raise ValueError("snapshot must be a dict with a 'board' mapping")
        board = Board.from_mapping(data["board"])

        try:
            current_player = Color(data.get("current_player", Color.WHITE.value))
        except ValueError as e:
            raise ValueError("invalid current_player in snapshot") from e

        raw_rights = data.get("castling_rights") or {}
        if not isinstance(raw_rights, dict):
            raise ValueError("castling_rights must be a mapping")
        unknown = set(raw_rights) - set(CASTLING_KEYS)
        if unknown:
            raise ValueError(f"unknown castling rights: {sorted(unknown)}")
        flags = {key: raw_rights.get(key, False) for key in CASTLING_KEYS}
        if not all(isinstance(v, bool) for v in flags.values()):
            raise ValueError("castling rights must be booleans")
        castling_rights = CastlingRights(**flags)

        ep = data.get("en_passant_target")
        en_passant_target = Square.from_algebraic(ep) if ep is not None else None

        halfmove_clock = data.get("halfmove_clock", 0)
        fullmove_number = data.get("fullmove_number", 1)
        if not isinstance(halfmove_clock, int) or isinstance(halfmove_clock, bool):
            raise ValueError("halfmove_clock must be an integer")
        if not isinstance(fullmove_number, int) or isinstance(fullmove_number, bool):
            raise ValueError("fullmove_number must be an integer")
        if halfmove_clock < 0 or fullmove_number < 1:
            raise ValueError("invalid move counters in snapshot")

        state = cls(
            board=board,
            current_player=current_player,
            castling_rights=castling_rights,
            en_passant_target=en_passant_target,
            halfmove_clock=halfmove_clock,
            fullmove_number=fullmove_number,
        )
        state._update_status()
        return state


# --- Operations exposed to the service layer ---
def new_game() -> GameState:
    return GameState.new()


def make_move(state: GameState, move: Move) -> None:
    state.make_move(move)


def get_legal_moves(state: GameState) -> List[Move]:
    return state.get_legal_moves()


def is_in_check(state: GameState, color: Color) -> bool:
    return state.is_in_check(color)


def to_fen(state: GameState) -> str:
    return state.to_fen()
