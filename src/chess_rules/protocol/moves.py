from __future__ import annotations

from typing import Optional

from ..engine.game import KING_HOME_FILE, GameState
from ..engine.move import Move
from ..engine.types import PieceKind, Square


PROMOTION_NAMES = {
    "queen": PieceKind.QUEEN,
    "rook": PieceKind.ROOK,
    "bishop": PieceKind.BISHOP,
    "knight": PieceKind.KNIGHT,
    "q": PieceKind.QUEEN,
    "r": PieceKind.ROOK,
    "b": PieceKind.BISHOP,
    "n": PieceKind.KNIGHT,
}


def parse_promotion(name: str) -> PieceKind:
    """Parse a promotion piece given by name (``"Queen"``) or letter (``"q"``).

    Raises:
        ValueError: If ``name`` is not a queen, rook, bishop or knight.
    """
    kind = PROMOTION_NAMES.get(name.strip().lower()) if isinstance(name, str) else None
    if kind is None:
        raise ValueError(f"invalid promotion piece: {name!r}")
    return kind


def build_move(
    state: GameState,
    from_text: str,
    to_text: str,
    promotion: Optional[str] = None,
) -> Move:
    """Build a ``Move`` from textual coordinates for submission to ``state``.

    Castling is flagged when a king on its home square moves two files along
    its home rank; en passant is flagged when a pawn moves onto the current
    en-passant target. Legality is left to ``GameState.make_move``.

    Raises:
        ValueError: On malformed squares or promotion piece.
    """
    from_sq = Square.from_algebraic(from_text)
    to_sq = Square.from_algebraic(to_text)
    promo = parse_promotion(promotion) if promotion is not None else None

    piece = state.board.get_piece(from_sq)
    is_castling = False
    is_en_passant = False
    if piece is not None:
        if piece.kind is PieceKind.KING:
            home = Square(KING_HOME_FILE, piece.color.home_rank)
            is_castling = (
                from_sq == home
                and to_sq.rank == home.rank
                and abs(to_sq.file - from_sq.file) == 2
            )
        elif piece.kind is PieceKind.PAWN:
            is_en_passant = to_sq == state.en_passant_target
    return Move(
        from_sq,
        to_sq,
        promotion=promo,
        is_castling=is_castling,
        is_en_passant=is_en_passant,
    )


def parse_uci(state: GameState, uci: str) -> Move:
    """Parse a UCI move string (``"e2e4"``, ``"e7e8q"``) against ``state``.

    Raises:
        ValueError: If the string has an invalid length, squares, or promotion
            piece.
    """
    if not isinstance(uci, str) or len(uci) not in (4, 5):
        raise ValueError(f"invalid UCI move length: {uci!r}")
    promotion = uci[4] if len(uci) == 5 else None
    return build_move(state, uci[0:2], uci[2:4], promotion)
