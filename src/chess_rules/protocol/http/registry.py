from __future__ import annotations

import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional

from ...engine.game import GameState


class GameNotFound(KeyError):
    """Raised when a `game_id` is not registered."""


@dataclass
class _Entry:
    game: GameState
    lock: threading.Lock = field(default_factory=threading.Lock)


class InMemoryGameRegistry:
    """Thread-safe in-memory registry of games.

    Responsibilities:
    - Create games with unique `game_id`s
    - Hand out exclusive access to one game at a time (`checkout`)
    - Delete games

    The registry lock only guards the id -> game mapping; each game carries
    its own lock so moves in different games never wait on each other.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._games: Dict[str, _Entry] = {}

    def create(self, game: Optional[GameState] = None) -> str:
        """Register a game (a fresh one by default) and return its `game_id`."""
        gid = str(uuid.uuid4())
        entry = _Entry(game if game is not None else GameState.new())
        with self._lock:
            self._games[gid] = entry
        return gid

    def __contains__(self, game_id: str) -> bool:
        with self._lock:
            return game_id in self._games

    def __len__(self) -> int:
        with self._lock:
            return len(self._games)

    @contextmanager
    def checkout(self, game_id: str) -> Iterator[GameState]:
        """Hold the game's lock for the duration of the ``with`` block.

        Raises:
            GameNotFound: If ``game_id`` is unknown.
        """
        with self._lock:
            entry = self._games.get(game_id)
        if entry is None:
            raise GameNotFound(game_id)
        with entry.lock:
            yield entry.game

    def snapshot(self, game_id: str) -> GameState:
        """Return an independent copy of the game, taken under its lock."""
        with self.checkout(game_id) as game:
            return game.copy()

    def delete(self, game_id: str) -> bool:
        with self._lock:
            return self._games.pop(game_id, None) is not None
