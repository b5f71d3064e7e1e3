from __future__ import annotations

import pytest

from chess_rules.engine.errors import InvalidMove
from chess_rules.engine.move import Move
from chess_rules.engine.types import Color, Piece, PieceKind, Square


OPEN_CASTLING = {"e1": "K", "a1": "R", "h1": "R", "e8": "k", "a8": "r", "h8": "r"}


def sq(name: str) -> Square:
    return Square.from_algebraic(name)


def castle(frm: str, to: str) -> Move:
    return Move(sq(frm), sq(to), is_castling=True)


def test_castling_moves_listed_when_clear(position) -> None:
    g = position(OPEN_CASTLING, castling="KQkq")
    moves = g.get_legal_moves()
    assert castle("e1", "g1") in moves
    assert castle("e1", "c1") in moves


def test_kingside_castling_relocates_rook_and_revokes_rights(position) -> None:
    g = position(OPEN_CASTLING, castling="KQkq")
    g.make_move(castle("e1", "g1"))
    assert g.board.get_piece(sq("g1")) == Piece(PieceKind.KING, Color.WHITE)
    assert g.board.get_piece(sq("f1")) == Piece(PieceKind.ROOK, Color.WHITE)
    assert g.board.get_piece(sq("h1")) is None
    assert g.board.get_piece(sq("e1")) is None
    assert g.castling_rights.to_fen() == "kq"
    assert g.to_fen() == "r3k2r/8/8/8/8/8/8/R4RK1 b kq - 1 1"


def test_black_queenside_castling(position) -> None:
    g = position(OPEN_CASTLING, to_move="black", castling="KQkq")
    g.make_move(castle("e8", "c8"))
    assert g.board.get_piece(sq("c8")) == Piece(PieceKind.KING, Color.BLACK)
    assert g.board.get_piece(sq("d8")) == Piece(PieceKind.ROOK, Color.BLACK)
    assert g.board.get_piece(sq("a8")) is None
    assert g.castling_rights.to_fen() == "KQ"


@pytest.mark.parametrize("blocker", ["f1", "g1"])
def test_kingside_blocked_by_piece_between(position, blocker: str) -> None:
    g = position({**OPEN_CASTLING, blocker: "B"}, castling="KQkq")
    with pytest.raises(InvalidMove):
        g.make_move(castle("e1", "g1"))
    assert castle("e1", "g1") not in g.get_legal_moves()


def test_queenside_blocked_by_knight_on_b_file(position) -> None:
    g = position({**OPEN_CASTLING, "b1": "N"}, castling="KQkq")
    with pytest.raises(InvalidMove):
        g.make_move(castle("e1", "c1"))


def test_no_castling_out_of_check(position) -> None:
    pieces = {"e1": "K", "a1": "R", "h1": "R", "h8": "k", "e5": "r"}
    g = position(pieces, castling="KQ")
    assert g.is_in_check(Color.WHITE)
    with pytest.raises(InvalidMove):
        g.make_move(castle("e1", "g1"))
    with pytest.raises(InvalidMove):
        g.make_move(castle("e1", "c1"))


def test_no_castling_through_attacked_square_even_if_landing_safe(position) -> None:
    # Rook on f8 covers f1 (crossed) but not g1 (landing).
    pieces = {"e1": "K", "h1": "R", "a8": "k", "f8": "r"}
    g = position(pieces, castling="K")
    assert not g.board.is_square_attacked(sq("g1"), Color.BLACK)
    with pytest.raises(InvalidMove):
        g.make_move(castle("e1", "g1"))


def test_no_castling_onto_attacked_square(position) -> None:
    pieces = {"e1": "K", "h1": "R", "a8": "k", "g8": "r"}
    g = position(pieces, castling="K")
    with pytest.raises(InvalidMove):
        g.make_move(castle("e1", "g1"))


def test_queenside_allowed_when_only_rook_path_square_attacked(position) -> None:
    # b1 is attacked, but the king never crosses it.
    pieces = {"e1": "K", "a1": "R", "h8": "k", "b8": "r"}
    g = position(pieces, castling="Q")
    g.make_move(castle("e1", "c1"))
    assert g.board.get_piece(sq("c1")) == Piece(PieceKind.KING, Color.WHITE)
    assert g.board.get_piece(sq("d1")) == Piece(PieceKind.ROOK, Color.WHITE)


def test_castling_requires_right(position) -> None:
    g = position(OPEN_CASTLING, castling="Qkq")
    with pytest.raises(InvalidMove):
        g.make_move(castle("e1", "g1"))
    assert castle("e1", "g1") not in g.get_legal_moves()
    assert castle("e1", "c1") in g.get_legal_moves()


def test_castling_requires_rook_on_corner(position) -> None:
    g = position({"e1": "K", "a1": "R", "e8": "k"}, castling="KQ")
    with pytest.raises(InvalidMove):
        g.make_move(castle("e1", "g1"))


def test_castling_flag_to_wrong_square_rejected(position) -> None:
    g = position(OPEN_CASTLING, castling="KQkq")
    with pytest.raises(InvalidMove):
        g.make_move(castle("e1", "f1"))
    with pytest.raises(InvalidMove):
        g.make_move(castle("e1", "g2"))


def test_rook_move_revokes_only_its_side(position) -> None:
    g = position(OPEN_CASTLING, castling="KQkq")
    g.make_move(Move(sq("h1"), sq("h2")))
    assert g.castling_rights.to_fen() == "Qkq"
    g.make_move(Move(sq("a8"), sq("a7")))
    assert g.castling_rights.to_fen() == "Qk"
    # Moving the rook back does not restore the right.
    g.make_move(Move(sq("h2"), sq("h1")))
    assert g.castling_rights.to_fen() == "Qk"


def test_king_move_revokes_both_sides(position) -> None:
    g = position(OPEN_CASTLING, castling="KQkq")
    g.make_move(Move(sq("e1"), sq("e2")))
    assert g.castling_rights.to_fen() == "kq"
    g.make_move(Move(sq("h8"), sq("h7")))
    g.make_move(Move(sq("e2"), sq("e1")))
    g.make_move(Move(sq("h7"), sq("h8")))
    assert g.castling_rights.to_fen() == "q"
    with pytest.raises(InvalidMove):
        g.make_move(castle("e1", "g1"))
