from __future__ import annotations

import pytest

from chess_rules.engine.errors import GameOver
from chess_rules.engine.game import new_game
from chess_rules.engine.move import Move
from chess_rules.engine.types import Color, GameStatus, Square, StatusKind


def mv(uci: str) -> Move:
    return Move(Square.from_algebraic(uci[:2]), Square.from_algebraic(uci[2:4]))


def test_new_game_in_progress() -> None:
    g = new_game()
    assert g.status.kind is StatusKind.IN_PROGRESS
    assert g.status.winner is None
    assert not g.is_in_check(Color.WHITE)


def test_fools_mate_is_checkmate_for_black() -> None:
    g = new_game()
    for uci in ("f2f3", "e7e5", "g2g4", "d8h4"):
        g.make_move(mv(uci))
    assert g.status == GameStatus.checkmate(Color.BLACK)
    assert g.is_in_check(Color.WHITE)
    assert g.get_legal_moves() == []


def test_move_after_checkmate_raises_game_over() -> None:
    g = new_game()
    for uci in ("f2f3", "e7e5", "g2g4", "d8h4"):
        g.make_move(mv(uci))
    before = g.to_fen()
    with pytest.raises(GameOver):
        g.make_move(mv("e1f2"))
    assert g.to_fen() == before


def test_stalemate(position) -> None:
    g = position({"g6": "K", "e6": "Q", "h8": "k"})
    g.make_move(mv("e6f7"))
    assert g.status.kind is StatusKind.STALEMATE
    assert g.status.winner is None
    assert not g.is_in_check(Color.BLACK)
    with pytest.raises(GameOver):
        g.make_move(mv("h8g8"))


def test_check_status_when_replies_exist(position) -> None:
    g = position({"e1": "K", "a2": "R", "h8": "k"})
    g.make_move(mv("a2a8"))
    assert g.status.kind is StatusKind.CHECK
    assert g.is_in_check(Color.BLACK)
    g.make_move(mv("h8h7"))
    assert g.status.kind is StatusKind.IN_PROGRESS


def test_back_rank_mate(position) -> None:
    g = position({"e1": "K", "a1": "R", "g8": "k", "f7": "p", "g7": "p", "h7": "p"})
    g.make_move(mv("a1a8"))
    assert g.status == GameStatus.checkmate(Color.WHITE)


def test_fifty_move_rule_overrides_checkmate(position) -> None:
    pieces = {"e1": "K", "a1": "R", "g8": "k", "f7": "p", "g7": "p", "h7": "p"}
    g = position(pieces, halfmove=49)
    g.make_move(mv("a1a8"))
    assert g.halfmove_clock == 50
    assert g.status.kind is StatusKind.DRAW
    assert g.status.winner is None


def test_draw_is_terminal_but_moves_still_listed(position) -> None:
    g = position({"e1": "K", "a1": "R", "h8": "k"}, halfmove=49)
    g.make_move(mv("a1a2"))
    assert g.status.kind is StatusKind.DRAW
    assert g.get_legal_moves()
    with pytest.raises(GameOver):
        g.make_move(mv("h8g8"))


def test_pawn_move_on_forty_ninth_ply_avoids_draw(position) -> None:
    g = position({"e1": "K", "a2": "P", "h8": "k"}, halfmove=49)
    g.make_move(mv("a2a3"))
    assert g.halfmove_clock == 0
    assert g.status.kind is StatusKind.IN_PROGRESS


def test_missing_king_is_never_in_check(position) -> None:
    g = position({"e1": "K", "e8": "r"})
    assert g.is_in_check(Color.WHITE)
    assert not g.is_in_check(Color.BLACK)


def test_piece_capture_on_forty_ninth_ply_still_draws(position) -> None:
    g = position({"e1": "K", "e8": "k", "d1": "R", "d5": "n"}, halfmove=49)
    g.make_move(mv("d1d5"))
    assert g.halfmove_clock == 50
    assert g.status.kind is StatusKind.DRAW
