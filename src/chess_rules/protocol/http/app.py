from __future__ import annotations

import logging
from typing import Dict, Optional

from fastapi import FastAPI, HTTPException, Response
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from pydantic import BaseModel, ConfigDict, Field

from .error import (
    chess_error_handler,
    exception_handler,
    game_not_found_handler,
    http_exception_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .registry import GameNotFound, InMemoryGameRegistry
from ..moves import build_move
from ...engine.errors import ChessError
from ...engine.game import GameState


logger = logging.getLogger(__name__)


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str


class MoveRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_square: str = Field(..., alias="from", description="Source square, e.g. e2")
    to_square: str = Field(..., alias="to", description="Destination square, e.g. e4")
    promotion: Optional[str] = Field(
        default=None, description="Promotion piece name or letter, e.g. Queen"
    )


class CastlingRightsModel(BaseModel):
    white_kingside: bool
    white_queenside: bool
    black_kingside: bool
    black_queenside: bool


class StatusModel(BaseModel):
    kind: str
    winner: Optional[str] = None


class GameStateResponse(BaseModel):
    game_id: str
    fen: str
    board: Dict[str, str]
    current_player: str
    castling_rights: CastlingRightsModel
    en_passant_target: Optional[str]
    halfmove_clock: int
    fullmove_number: int
    status: StatusModel
    in_check: bool
    legal_moves: list[str]


class MovesResponse(BaseModel):
    moves: list[str]
    count: int


class FenResponse(BaseModel):
    fen: str


def create_app(registry: Optional[InMemoryGameRegistry] = None) -> FastAPI:
    app = FastAPI(title="Chess Rules API", version="0.1.0")

    # Basic logging setup
    logging.basicConfig(level=logging.INFO)

    # Middleware & error handling
    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(ChessError, chess_error_handler)
    app.add_exception_handler(GameNotFound, game_not_found_handler)
    app.add_exception_handler(Exception, exception_handler)

    games = registry if registry is not None else InMemoryGameRegistry()

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse, status_code=201)
    def create_game() -> CreateGameResponse:
        game = GameState.new()
        game_id = games.create(game)
        logger.info("game created", extra={"game_id": game_id})
        return CreateGameResponse(game_id=game_id, fen=game.to_fen())

    @app.get("/api/games/{game_id}/state", response_model=GameStateResponse)
    def get_state(game_id: str) -> GameStateResponse:
        return _state_response(game_id, games.snapshot(game_id))

    @app.post("/api/games/{game_id}/moves", response_model=GameStateResponse)
    def submit_move(game_id: str, req: MoveRequest) -> GameStateResponse:
        # The game's lock is held across validation and application.
        with games.checkout(game_id) as game:
            try:
                move = build_move(game, req.from_square, req.to_square, req.promotion)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            game.make_move(move)
            logger.info(
                "move accepted",
                extra={"game_id": game_id, "move": move.to_uci(), "fen": game.to_fen()},
            )
            snapshot = game.copy()
        return _state_response(game_id, snapshot)

    @app.get("/api/games/{game_id}/moves", response_model=MovesResponse)
    def list_moves(game_id: str) -> MovesResponse:
        moves = [m.to_uci() for m in games.snapshot(game_id).get_legal_moves()]
        return MovesResponse(moves=moves, count=len(moves))

    @app.get("/api/games/{game_id}/fen", response_model=FenResponse)
    def get_fen(game_id: str) -> FenResponse:
        return FenResponse(fen=games.snapshot(game_id).to_fen())

    @app.delete("/api/games/{game_id}", status_code=204)
    def delete_game(game_id: str) -> Response:
        if not games.delete(game_id):
            raise GameNotFound(game_id)
        logger.info("game deleted", extra={"game_id": game_id})
        return Response(status_code=204)

    return app


def _state_response(game_id: str, game: GameState) -> GameStateResponse:
    snap = game.to_snapshot()
    return GameStateResponse(
        game_id=game_id,
        fen=game.to_fen(),
        board=snap["board"],
        current_player=snap["current_player"],
        castling_rights=CastlingRightsModel(**snap["castling_rights"]),
        en_passant_target=snap["en_passant_target"],
        halfmove_clock=snap["halfmove_clock"],
        fullmove_number=snap["fullmove_number"],
        status=StatusModel(**snap["status"]),
        in_check=game.is_in_check(game.current_player),
        legal_moves=[m.to_uci() for m in game.get_legal_moves()],
    )


# Default app for non-factory servers
app = create_app()
