from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .types import Color, Piece, PieceKind, Square


BACK_RANK = (
    PieceKind.ROOK,
    PieceKind.KNIGHT,
    PieceKind.BISHOP,
    PieceKind.QUEEN,
    PieceKind.KING,
    PieceKind.BISHOP,
    PieceKind.KNIGHT,
    PieceKind.ROOK,
)

KNIGHT_OFFSETS = ((-1, 2), (1, 2), (-2, 1), (2, 1), (-2, -1), (2, -1), (-1, -2), (1, -2))
KING_OFFSETS = ((-1, -1), (0, -1), (1, -1), (-1, 0), (1, 0), (-1, 1), (0, 1), (1, 1))


def _empty_grid() -> List[List[Optional[Piece]]]:
    return [[None] * 8 for _ in range(8)]


def _sign(n: int) -> int:
    return (n > 0) - (n < 0)


@dataclass
class Board:
    """8x8 mailbox board.

    Notes:
    - ``squares[rank][file]``, rank 0 is White's home rank.
    - Pieces are immutable values, so copying the grid is enough to get a
      fully independent board.
    """

    squares: List[List[Optional[Piece]]] = field(default_factory=_empty_grid)

    @classmethod
    def empty(cls) -> "Board":
        return cls()

    @classmethod
    def standard(cls) -> "Board":
        """Create a board set up in the standard starting position."""
        board = cls()
        for file, kind in enumerate(BACK_RANK):
            board.set_piece(Square(file, 0), Piece(kind, Color.WHITE))
            board.set_piece(Square(file, 1), Piece(PieceKind.PAWN, Color.WHITE))
            board.set_piece(Square(file, 6), Piece(PieceKind.PAWN, Color.BLACK))
            board.set_piece(Square(file, 7), Piece(kind, Color.BLACK))
        return board

    def copy(self) -> "Board":
        return Board(squares=[list(row) for row in self.squares])

    # --- Placement ---
    def get_piece(self, square: Square) -> Optional[Piece]:
        return self.squares[square.rank][square.file]

    def set_piece(self, square: Square, piece: Piece) -> None:
        self.squares[square.rank][square.file] = piece

    def remove_piece(self, square: Square) -> Optional[Piece]:
        piece = self.squares[square.rank][square.file]
        self.squares[square.rank][square.file] = None
        return piece

    def move_piece(self, from_sq: Square, to_sq: Square) -> Optional[Piece]:
        """Relocate the piece on ``from_sq`` to ``to_sq``.

        Returns:
            Optional[Piece]: The piece displaced from ``to_sq``, if any. When
                ``from_sq`` is empty nothing changes and None is returned.
        """
        piece = self.remove_piece(from_sq)
        if piece is None:
            return None
        captured = self.remove_piece(to_sq)
        self.set_piece(to_sq, piece)
        return captured

    # --- Queries ---
    def pieces(self, color: Color) -> List[Tuple[Square, Piece]]:
        """Return ``(square, piece)`` pairs for ``color`` in a1..h8 scan order."""
        out: List[Tuple[Square, Piece]] = []
        for sq in Square.all():
            piece = self.get_piece(sq)
            if piece is not None and piece.color is color:
                out.append((sq, piece))
        return out

    def find_king(self, color: Color) -> Optional[Square]:
        for sq in Square.all():
            piece = self.get_piece(sq)
            if piece is not None and piece.kind is PieceKind.KING and piece.color is color:
                return sq
        return None

    def is_path_clear(self, from_sq: Square, to_sq: Square) -> bool:
        """Return True if every square strictly between the endpoints is empty.

        Endpoints must share a file, a rank, or a diagonal; any other pair
        returns False.
        """
        df = to_sq.file - from_sq.file
        dr = to_sq.rank - from_sq.rank
        if df != 0 and dr != 0 and abs(df) != abs(dr):
            return False
        step_f, step_r = _sign(df), _sign(dr)
        f, r = from_sq.file + step_f, from_sq.rank + step_r
        while (f, r) != (to_sq.file, to_sq.rank):
            if self.squares[r][f] is not None:
                return False
            f += step_f
            r += step_r
        return True

    # --- Attack detection ---
    def is_square_attacked(self, square: Square, by_color: Color) -> bool:
        """Return True if any piece of ``by_color`` attacks ``square``.

        Scans the whole board and tests each piece's attack geometry. Pawns
        attack one step diagonally forward only; en passant is not an attack.
        """
        for sq in Square.all():
            piece = self.get_piece(sq)
            if piece is not None and piece.color is by_color and self._attacks(sq, square, piece):
                return True
        return False

    def _attacks(self, from_sq: Square, to_sq: Square, piece: Piece) -> bool:
        if from_sq == to_sq:
            return False
        df = to_sq.file - from_sq.file
        dr = to_sq.rank - from_sq.rank
        adf, adr = abs(df), abs(dr)
        kind = piece.kind
        if kind is PieceKind.PAWN:
            return adf == 1 and dr == piece.color.forward
        if kind is PieceKind.KNIGHT:
            return (adf, adr) in ((1, 2), (2, 1))
        if kind is PieceKind.KING:
            return adf <= 1 and adr <= 1
        if kind is PieceKind.ROOK:
            aligned = df == 0 or dr == 0
        elif kind is PieceKind.BISHOP:
            aligned = adf == adr
        else:
            aligned = df == 0 or dr == 0 or adf == adr
        return aligned and self.is_path_clear(from_sq, to_sq)

    # --- Serialization ---
    def placement_fen(self) -> str:
        """Return the FEN piece-placement field, rank 8 first."""
        ranks_str: List[str] = []
        for rank in range(7, -1, -1):
            run = 0
            row = []
            for file in range(8):
                piece = self.squares[rank][file]
                if piece is None:
                    run += 1
                else:
                    if run > 0:
                        row.append(str(run))
                        run = 0
                    row.append(piece.symbol)
            if run > 0:
                row.append(str(run))
            ranks_str.append("".join(row))
        return "/".join(ranks_str)

    def to_mapping(self) -> Dict[str, str]:
        """Return occupied squares as ``{"e1": "K", ...}`` in scan order."""
        out: Dict[str, str] = {}
        for sq in Square.all():
            piece = self.get_piece(sq)
            if piece is not None:
                out[sq.to_algebraic()] = piece.symbol
        return out

    @classmethod
    def from_mapping(cls, mapping: Dict[str, str]) -> "Board":
        """Build a board from ``{"e1": "K", ...}``.

        Raises:
            ValueError: On an invalid square name or piece letter.
        """
        board = cls()
        for name, symbol in mapping.items():
            board.set_piece(Square.from_algebraic(name), Piece.from_symbol(symbol))
        return board
