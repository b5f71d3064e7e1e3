import os
import sys
from typing import Callable, Dict, Optional

import pytest


# Ensure the repository's src/ is on sys.path for `chess_rules` imports
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
SRC_PATH = os.path.abspath(os.path.join(REPO_ROOT, "src"))
if SRC_PATH not in sys.path:
    sys.path.insert(0, SRC_PATH)

from chess_rules.engine.game import GameState  # noqa: E402


@pytest.fixture
def position() -> Callable[..., GameState]:
    """Factory building a GameState from ``{"e1": "K", ...}`` plus optional fields.

    ``castling`` takes a FEN-style subset of ``KQkq``.
    """

    def _build(
        pieces: Dict[str, str],
        to_move: str = "white",
        castling: str = "",
        en_passant: Optional[str] = None,
        halfmove: int = 0,
        fullmove: int = 1,
    ) -> GameState:
        return GameState.from_snapshot(
            {
                "board": pieces,
                "current_player": to_move,
                "castling_rights": {
                    "white_kingside": "K" in castling,
                    "white_queenside": "Q" in castling,
                    "black_kingside": "k" in castling,
                    "black_queenside": "q" in castling,
                },
                "en_passant_target": en_passant,
                "halfmove_clock": halfmove,
                "fullmove_number": fullmove,
            }
        )

    return _build
