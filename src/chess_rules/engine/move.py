from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .types import PieceKind, Square


# Order in which promotion moves are listed by legal-move enumeration.
PROMOTION_KINDS = (PieceKind.QUEEN, PieceKind.ROOK, PieceKind.BISHOP, PieceKind.KNIGHT)


@dataclass(frozen=True)
class Move:
    """Engine move representation.

    Attributes:
        from_sq (Square): Origin square.
        to_sq (Square): Destination square.
        promotion (Optional[PieceKind]): Kind a pawn promotes to, if any.
        is_castling (bool): King-and-rook castling move.
        is_en_passant (bool): Pawn capture onto the en-passant target.
    """

    from_sq: Square
    to_sq: Square
    promotion: Optional[PieceKind] = None
    is_castling: bool = False
    is_en_passant: bool = False

    def to_uci(self) -> str:
        """Serialize the move into long algebraic UCI form.

        Returns:
            str: Move encoded like ``"e2e4"`` or ``"e7e8q"``.
        """
        promo = self.promotion.value if self.promotion is not None else ""
        return self.from_sq.to_algebraic() + self.to_sq.to_algebraic() + promo

    def __str__(self) -> str:
        return self.to_uci()
