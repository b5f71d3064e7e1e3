from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional


FILES = "abcdefgh"
RANKS = "12345678"


class Color(Enum):
    """Side color."""

    WHITE = "white"
    BLACK = "black"

    @property
    def opposite(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE

    @property
    def forward(self) -> int:
        """Rank direction pawns of this color advance in."""
        return 1 if self is Color.WHITE else -1

    @property
    def home_rank(self) -> int:
        return 0 if self is Color.WHITE else 7

    @property
    def fen(self) -> str:
        return "w" if self is Color.WHITE else "b"


class PieceKind(Enum):
    """Piece kinds keyed by their lowercase FEN letter."""

    PAWN = "p"
    ROOK = "r"
    KNIGHT = "n"
    BISHOP = "b"
    QUEEN = "q"
    KING = "k"


@dataclass(frozen=True)
class Piece:
    kind: PieceKind
    color: Color

    @property
    def symbol(self) -> str:
        """FEN letter: uppercase for White, lowercase for Black."""
        ch = self.kind.value
        return ch.upper() if self.color is Color.WHITE else ch

    @classmethod
    def from_symbol(cls, symbol: str) -> "Piece":
        """Parse a single FEN piece letter such as ``"K"`` or ``"p"``.

        Raises:
            ValueError: If ``symbol`` is not one of ``PRNBQKprnbqk``.
        """
        if not isinstance(symbol, str) or len(symbol) != 1 or symbol.lower() not in "prnbqk":
            raise ValueError(f"invalid piece symbol: {symbol!r}")
        color = Color.WHITE if symbol.isupper() else Color.BLACK
        return cls(PieceKind(symbol.lower()), color)


@dataclass(frozen=True)
class Square:
    """A board coordinate; file 0..7 maps to a..h, rank 0..7 maps to 1..8."""

    file: int
    rank: int

    def __post_init__(self) -> None:
        if not (0 <= self.file < 8 and 0 <= self.rank < 8):
            raise ValueError(f"square out of range: file={self.file}, rank={self.rank}")

    @classmethod
    def from_algebraic(cls, text: str) -> "Square":
        """Parse algebraic notation such as ``"e4"``.

        Raises:
            ValueError: If ``text`` is not a letter ``a``-``h`` followed by a
                digit ``1``-``8``.
        """
        if not isinstance(text, str) or len(text) != 2 or text[0] not in FILES or text[1] not in RANKS:
            raise ValueError(f"invalid square: {text!r}")
        return cls(FILES.index(text[0]), RANKS.index(text[1]))

    def to_algebraic(self) -> str:
        return FILES[self.file] + RANKS[self.rank]

    def offset(self, df: int, dr: int) -> Optional["Square"]:
        """Return the square shifted by ``(df, dr)``, or None when off the board."""
        f, r = self.file + df, self.rank + dr
        if 0 <= f < 8 and 0 <= r < 8:
            return Square(f, r)
        return None

    @staticmethod
    def all() -> Iterator["Square"]:
        """Yield all 64 squares rank-major, file-minor, starting at a1."""
        for rank in range(8):
            for file in range(8):
                yield Square(file, rank)

    def __str__(self) -> str:
        return self.to_algebraic()


@dataclass
class CastlingRights:
    """Castling availability per color and side.

    Rights are only ever revoked during a game, never restored.
    """

    white_kingside: bool = True
    white_queenside: bool = True
    black_kingside: bool = True
    black_queenside: bool = True

    def can_castle(self, color: Color, kingside: bool) -> bool:
        if color is Color.WHITE:
            return self.white_kingside if kingside else self.white_queenside
        return self.black_kingside if kingside else self.black_queenside

    def revoke(self, color: Color, kingside: Optional[bool] = None) -> None:
        """Revoke one side's right, or both when ``kingside`` is None."""
        if color is Color.WHITE:
            if kingside is None or kingside:
                self.white_kingside = False
            if kingside is None or not kingside:
                self.white_queenside = False
        else:
            if kingside is None or kingside:
                self.black_kingside = False
            if kingside is None or not kingside:
                self.black_queenside = False

    def to_fen(self) -> str:
        out = ""
        if self.white_kingside:
            out += "K"
        if self.white_queenside:
            out += "Q"
        if self.black_kingside:
            out += "k"
        if self.black_queenside:
            out += "q"
        return out or "-"


class StatusKind(Enum):
    IN_PROGRESS = "in_progress"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    DRAW = "draw"


@dataclass(frozen=True)
class GameStatus:
    """Game status; ``winner`` is carried only by ``CHECKMATE``."""

    kind: StatusKind
    winner: Optional[Color] = None

    def __post_init__(self) -> None:
        if (self.kind is StatusKind.CHECKMATE) != (self.winner is not None):
            raise ValueError("winner must be set exactly for checkmate")

    @classmethod
    def checkmate(cls, winner: Color) -> "GameStatus":
        return cls(StatusKind.CHECKMATE, winner)

    @property
    def is_terminal(self) -> bool:
        return self.kind in (StatusKind.CHECKMATE, StatusKind.STALEMATE, StatusKind.DRAW)


IN_PROGRESS = GameStatus(StatusKind.IN_PROGRESS)
CHECK = GameStatus(StatusKind.CHECK)
STALEMATE = GameStatus(StatusKind.STALEMATE)
DRAW = GameStatus(StatusKind.DRAW)
