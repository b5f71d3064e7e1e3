from __future__ import annotations

from chess_rules.engine.game import STARTPOS_FEN, GameState, new_game, to_fen
from chess_rules.engine.move import Move
from chess_rules.engine.types import Square


def mv(uci: str) -> Move:
    return Move(Square.from_algebraic(uci[:2]), Square.from_algebraic(uci[2:4]))


def test_new_game_fen_fixed_point() -> None:
    assert to_fen(new_game()) == "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
    assert GameState.new().to_fen() == STARTPOS_FEN


def test_fen_after_double_push_shows_ep_target() -> None:
    g = new_game()
    g.make_move(mv("e2e4"))
    assert g.to_fen() == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"


def test_fen_counters_and_cleared_ep() -> None:
    g = new_game()
    for uci in ("e2e4", "c7c5", "g1f3"):
        g.make_move(mv(uci))
    assert g.to_fen() == "rnbqkbnr/pp1ppppp/8/2p5/4P3/5N2/PPPP1PPP/RNBQKB1R b KQkq - 1 2"


def test_fen_without_castling_rights(position) -> None:
    g = position({"e1": "K", "e8": "k"}, to_move="black", halfmove=7, fullmove=42)
    assert g.to_fen() == "4k3/8/8/8/8/8/8/4K3 b - - 7 42"


def test_fen_partial_castling_rights(position) -> None:
    g = position({"e1": "K", "h1": "R", "e8": "k", "a8": "r"}, castling="Kq")
    assert g.to_fen() == "r3k3/8/8/8/8/8/8/4K2R w Kq - 0 1"
