"""State builders for games, players and the persisted store snapshot."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Sequence

from .ids import generate_id


SNAPSHOT_FIELDS = (
    "currentGame",
    "savedGames",
    "gameHistory",
    "scoring",
    "lastPlayerNames",
    "pendingPlayerNames",
)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def build_initial_state() -> dict[str, Any]:
    """Return the empty store snapshot used before any game is played."""
    return {
        "currentGame": None,
        "savedGames": [],
        "gameHistory": [],
        "scoring": None,
        "lastPlayerNames": [],
        "pendingPlayerNames": None,
    }


def build_player(name: str) -> dict[str, Any]:
    return {
        "id": generate_id(),
        "name": name,
        "currentPhase": 1,
        "totalScore": 0,
        "rounds": [],
    }


def build_game(player_names: Sequence[str]) -> dict[str, Any]:
    """Return a fresh active game with one player per name, in the given order."""
    now = utc_now_iso()
    return {
        "id": generate_id(),
        "createdAt": now,
        "updatedAt": now,
        "status": "active",
        "currentRound": 1,
        "players": [build_player(name) for name in player_names],
    }


def build_scoring_session(game: dict[str, Any]) -> dict[str, Any]:
    return {
        "gameId": game["id"],
        "currentPlayerIndex": 0,
        "scores": {player["id"]: {"score": 0, "phaseCompleted": False} for player in game["players"]},
    }


def normalize_player_names(names: Sequence[str]) -> list[str]:
    """Strip names and replace blank ones with ``Player N``."""
    return [name.strip() or f"Player {index + 1}" for index, name in enumerate(names)]
