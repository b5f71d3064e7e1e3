from __future__ import annotations

from typing import Dict

from .game import GameState


def perft(state: GameState, depth: int) -> int:
    """Compute perft node count for ``state`` at ``depth``.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).
    - A finished game (checkmate, stalemate, draw) has no children.

    Children are produced with copy-apply through ``make_move``, so the count
    exercises the full validation pipeline.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1
    if state.status.is_terminal:
        return 0

    nodes = 0
    for move in state.get_legal_moves():
        child = state.copy()
        child.make_move(move)
        nodes += perft(child, depth - 1)
    return nodes


def divide(state: GameState, depth: int) -> Dict[str, int]:
    """Return perft(depth - 1) per root move, keyed by UCI string."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    out: Dict[str, int] = {}
    for move in state.get_legal_moves():
        child = state.copy()
        child.make_move(move)
        out[move.to_uci()] = perft(child, depth - 1)
    return out
