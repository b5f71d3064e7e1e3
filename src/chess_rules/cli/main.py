from __future__ import annotations

import argparse
import os
from typing import List, Optional

import uvicorn


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the chess rules HTTP service")
    parser.add_argument(
        "--host",
        type=str,
        default=os.environ.get("CHESS_RULES_HOST", "127.0.0.1"),
        help="Bind address (env: CHESS_RULES_HOST, default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get("CHESS_RULES_PORT", "8000")),
        help="Bind port (env: CHESS_RULES_PORT, default: 8000)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=os.environ.get("CHESS_RULES_LOG_LEVEL", "info"),
        choices=["critical", "error", "warning", "info", "debug"],
        help="Log level (env: CHESS_RULES_LOG_LEVEL, default: info)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    uvicorn.run(
        "chess_rules.protocol.http.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
