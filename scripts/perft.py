#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import json
import os
import sys
import time

# Allow running this script directly via `python scripts/perft.py`
# by adding the repo's `src/` to sys.path.
SRC_PATH = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src")
if SRC_PATH not in sys.path:
    sys.path.insert(0, SRC_PATH)

from chess_rules.engine.game import GameState
from chess_rules.engine.perft import divide, perft


def main() -> None:
    parser = argparse.ArgumentParser(description="Run perft from a snapshot or the start position")
    parser.add_argument(
        "--snapshot",
        type=str,
        default=None,
        help="Path to a JSON game snapshot (default: standard start position)",
    )
    parser.add_argument("--depth", type=int, default=3, help="Perft depth (default: 3)")
    parser.add_argument("--divide", action="store_true", help="Print node counts per root move")
    args = parser.parse_args()

    if args.snapshot:
        with open(args.snapshot, "r", encoding="utf-8") as f:
            state = GameState.from_snapshot(json.load(f))
    else:
        state = GameState.new()

    start = time.perf_counter()
    if args.divide:
        counts = divide(state, args.depth)
        for uci, n in counts.items():
            print(f"{uci}: {n}")
        nodes = sum(counts.values())
    else:
        nodes = perft(state, args.depth)
    dt = time.perf_counter() - start
    print(f"nodes={nodes} depth={args.depth} time_ms={int(dt*1000)} nps={int(nodes/max(dt,1e-9))}")


if __name__ == "__main__":
    main()
