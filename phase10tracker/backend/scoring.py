"""Ranking, win detection and game summaries."""

from __future__ import annotations

from typing import Any, Iterable

from .models import GameSummary, RankedPlayer
from .phases import FINAL_PHASE


AUTO_COMPLETE_THRESHOLD = 50


def rank_players(players: Iterable[dict[str, Any]] | None) -> list[dict[str, Any]]:
    """Order players by phase (highest first), then by total score (lowest first).

    ``sorted`` is stable, so players tied on both keys keep their list order.
    The input is never mutated.
    """
    if not players:
        return []
    return sorted(players, key=lambda player: (-int(player["currentPhase"]), int(player["totalScore"])))


def check_winner(players: Iterable[dict[str, Any]] | None) -> dict[str, Any] | None:
    """Return the first player in list order who has finished phase 10."""
    for player in players or ():
        if int(player["currentPhase"]) > FINAL_PHASE:
            return player
    return None


def should_auto_complete_phase(score: int) -> bool:
    """A low round score suggests the player went out and completed their phase."""
    return score < AUTO_COMPLETE_THRESHOLD


def recompute_player_totals(player: dict[str, Any]) -> dict[str, Any]:
    rounds = list(player.get("rounds", []))
    next_player = dict(player)
    next_player["totalScore"] = sum(int(entry["score"]) for entry in rounds)
    next_player["currentPhase"] = 1 + sum(1 for entry in rounds if entry["phaseCompleted"])
    return next_player


def summarize_game(game: dict[str, Any]) -> GameSummary:
    ranked = rank_players(game.get("players", []))
    winner_id = game.get("winner")
    winner: dict[str, Any] | None = None
    if winner_id is not None:
        winner = next((player for player in game["players"] if player["id"] == winner_id), None)
    elif ranked:
        winner = ranked[0]

    return GameSummary(
        game_id=game["id"],
        created_at=game["createdAt"],
        status=game["status"],
        rounds_played=int(game["currentRound"]) - 1,
        winner_id=winner["id"] if winner is not None else None,
        winner_name=winner["name"] if winner is not None else None,
        players=tuple(
            RankedPlayer(
                rank=index + 1,
                player_id=player["id"],
                name=player["name"],
                total_score=int(player["totalScore"]),
                display_phase=min(int(player["currentPhase"]), FINAL_PHASE),
            )
            for index, player in enumerate(ranked)
        ),
    )
