"""Domain models for engine results and read-model projections."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ActionResult:
    state: dict[str, Any]
    accepted: bool
    engine_events: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class RankedPlayer:
    rank: int
    player_id: str
    name: str
    total_score: int
    display_phase: int


@dataclass(frozen=True)
class GameSummary:
    game_id: str
    created_at: str
    status: str
    rounds_played: int
    winner_id: str | None
    winner_name: str | None
    players: tuple[RankedPlayer, ...]
