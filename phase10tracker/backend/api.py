"""FastAPI endpoints exposing the game store to the presentation layer."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from fastapi import Depends, FastAPI, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, Field, field_validator

from .config import load_settings
from .phases import MAX_PLAYERS, MIN_PLAYERS, PHASES, QUICK_SCORES
from .state import normalize_player_names
from .storage import create_storage
from .store import GameStore


class NewGameRequest(BaseModel):
    player_names: list[str] = Field(min_length=MIN_PLAYERS, max_length=MAX_PLAYERS)


class ActionEnvelope(BaseModel):
    action: dict[str, Any]

    @field_validator("action")
    @classmethod
    def _check_action(cls, value: dict[str, Any]) -> dict[str, Any]:
        if not isinstance(value.get("type"), str) or value["type"] == "":
            raise ValueError("action.type is required")
        if "score" in value:
            score = value["score"]
            if not isinstance(score, int) or isinstance(score, bool) or score < 0:
                raise ValueError("action.score must be a non-negative integer")
        for key, expected in (("playerId", str), ("gameId", str), ("round", int)):
            if key in value and (not isinstance(value[key], expected) or isinstance(value[key], bool)):
                raise ValueError(f"action.{key} must be of type {expected.__name__}")
        return value


class StateResponse(BaseModel):
    state: dict[str, Any]


class ActionResponse(BaseModel):
    accepted: bool
    state: dict[str, Any]


class StateWebSocketHub:
    def __init__(self) -> None:
        self._connections: set[WebSocket] = set()

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._connections.add(websocket)

    def disconnect(self, websocket: WebSocket) -> None:
        self._connections.discard(websocket)

    async def send_state(self, websocket: WebSocket, state: dict[str, Any]) -> None:
        await websocket.send_json({"type": "state.full", "state": state})

    async def broadcast_state(self, state: dict[str, Any]) -> None:
        stale_connections: list[WebSocket] = []
        for websocket in list(self._connections):
            try:
                await self.send_state(websocket, state)
            except RuntimeError:
                stale_connections.append(websocket)
        for websocket in stale_connections:
            self.disconnect(websocket=websocket)


def read_model(store: GameStore) -> dict[str, Any]:
    model = dict(store.state)
    model["continueGame"] = store.continue_game()
    model["initialPlayerNames"] = store.initial_player_names()
    return model


def _default_store() -> GameStore:
    settings = load_settings()
    return GameStore(storage=create_storage(settings.database_url, settings.storage_path))


def create_app(store: GameStore | None = None) -> FastAPI:
    app = FastAPI(title="Phase 10 Tracker API", version="0.1.0")
    game_store = store if store is not None else _default_store()
    websocket_hub = StateWebSocketHub()
    app.state.websocket_hub = websocket_hub

    def get_store() -> GameStore:
        return game_store

    async def publish(local_store: GameStore) -> dict[str, Any]:
        model = read_model(local_store)
        await websocket_hub.broadcast_state(state=model)
        return model

    @app.get("/api/state", response_model=StateResponse)
    def get_state(local_store: GameStore = Depends(get_store)) -> StateResponse:
        return StateResponse(state=read_model(local_store))

    @app.get("/api/phases")
    def get_phases() -> dict[str, Any]:
        return {
            "phases": [asdict(phase) for phase in PHASES],
            "quickScores": list(QUICK_SCORES),
            "minPlayers": MIN_PLAYERS,
            "maxPlayers": MAX_PLAYERS,
        }

    @app.get("/api/games/current/ranking")
    def get_current_ranking(local_store: GameStore = Depends(get_store)) -> dict[str, Any]:
        return {"players": local_store.current_ranking()}

    @app.get("/api/history")
    def get_history(local_store: GameStore = Depends(get_store)) -> dict[str, Any]:
        return {"games": [asdict(summary) for summary in local_store.history_summaries()]}

    @app.post("/api/games", response_model=ActionResponse)
    async def post_new_game(
        payload: NewGameRequest,
        local_store: GameStore = Depends(get_store),
    ) -> ActionResponse:
        local_store.clear_pending_players()
        result = local_store.dispatch(
            {"type": "START_NEW_GAME", "playerNames": normalize_player_names(payload.player_names)}
        )
        return ActionResponse(accepted=result.accepted, state=await publish(local_store))

    @app.post("/api/actions", response_model=ActionResponse)
    async def post_action(
        payload: ActionEnvelope,
        local_store: GameStore = Depends(get_store),
    ) -> ActionResponse:
        result = local_store.dispatch(payload.action)
        model = await publish(local_store) if result.accepted else read_model(local_store)
        return ActionResponse(accepted=result.accepted, state=model)

    @app.websocket("/ws/state")
    async def state_ws(websocket: WebSocket, local_store: GameStore = Depends(get_store)) -> None:
        await websocket_hub.connect(websocket=websocket)
        await websocket_hub.send_state(websocket=websocket, state=read_model(local_store))

        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            websocket_hub.disconnect(websocket=websocket)

    return app
