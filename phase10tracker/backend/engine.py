"""Reducer for game, scoring-session and history actions.

Every handler takes the current store snapshot and returns a new one; the
input snapshot is never mutated. Invalid preconditions (no current game, no
scoring session, unknown ids, out-of-range indices) are declined: the state
comes back unchanged with ``accepted=False`` and no events.
"""

from __future__ import annotations

from typing import Any, Callable

from .models import ActionResult
from .phases import MAX_PLAYERS, MIN_PLAYERS
from .scoring import check_winner, recompute_player_totals
from .state import build_game, build_scoring_session, utc_now_iso


def apply_action(state: dict[str, Any], action: dict[str, Any]) -> ActionResult:
    """Apply a single action to the store snapshot."""
    action_type = str(action.get("type", "")).upper()
    handler = _HANDLERS.get(action_type)
    if handler is None:
        return _declined(state)
    return handler(state, action)


def _declined(state: dict[str, Any]) -> ActionResult:
    return ActionResult(state=state, accepted=False, engine_events=[])


def _touched(game: dict[str, Any], **changes: Any) -> dict[str, Any]:
    next_game = dict(game)
    next_game.update(changes)
    next_game["updatedAt"] = utc_now_iso()
    return next_game


def _without_game(games: list[dict[str, Any]], game_id: str) -> list[dict[str, Any]]:
    return [game for game in games if game["id"] != game_id]


def _find_game(games: list[dict[str, Any]], game_id: Any) -> dict[str, Any] | None:
    return next((game for game in games if game["id"] == game_id), None)


def _score(action: dict[str, Any]) -> int | None:
    score = action.get("score", 0)
    if not isinstance(score, int) or isinstance(score, bool) or score < 0:
        return None
    return score


def _names(action: dict[str, Any]) -> list[str] | None:
    names = action.get("playerNames")
    if not isinstance(names, (list, tuple)) or not all(isinstance(name, str) for name in names):
        return None
    return list(names)


# Game lifecycle


def _apply_start_new_game(state: dict[str, Any], action: dict[str, Any]) -> ActionResult:
    names = _names(action)
    if names is None or not MIN_PLAYERS <= len(names) <= MAX_PLAYERS:
        return _declined(state)

    game = build_game(names)
    next_state = dict(state)
    next_state["currentGame"] = game
    next_state["scoring"] = None
    next_state["lastPlayerNames"] = names
    return ActionResult(
        state=next_state,
        accepted=True,
        engine_events=[{"kind": "game_started", "gameId": game["id"], "playerNames": names}],
    )


def _apply_set_pending_players(state: dict[str, Any], action: dict[str, Any]) -> ActionResult:
    names = _names(action)
    if names is None:
        return _declined(state)
    next_state = dict(state)
    next_state["pendingPlayerNames"] = names
    return ActionResult(state=next_state, accepted=True)


def _apply_clear_pending_players(state: dict[str, Any], action: dict[str, Any]) -> ActionResult:
    next_state = dict(state)
    next_state["pendingPlayerNames"] = None
    return ActionResult(state=next_state, accepted=True)


def _apply_end_game(state: dict[str, Any], action: dict[str, Any]) -> ActionResult:
    current_game = state.get("currentGame")
    if current_game is None:
        return _declined(state)

    completed = _touched(current_game, status="completed")
    next_state = dict(state)
    next_state["currentGame"] = None
    next_state["gameHistory"] = [completed, *state.get("gameHistory", [])]
    next_state["scoring"] = None
    return ActionResult(
        state=next_state,
        accepted=True,
        engine_events=[{"kind": "game_completed", "gameId": completed["id"], "winner": None}],
    )


def _apply_save_game_for_later(state: dict[str, Any], action: dict[str, Any]) -> ActionResult:
    current_game = state.get("currentGame")
    if current_game is None:
        return _declined(state)

    saved = _touched(current_game)
    next_state = dict(state)
    next_state["currentGame"] = None
    next_state["savedGames"] = [saved, *_without_game(state.get("savedGames", []), saved["id"])]
    next_state["scoring"] = None
    return ActionResult(
        state=next_state,
        accepted=True,
        engine_events=[{"kind": "game_saved", "gameId": saved["id"]}],
    )


def _apply_load_saved_game(state: dict[str, Any], action: dict[str, Any]) -> ActionResult:
    game_id = action.get("gameId")
    saved_games = list(state.get("savedGames", []))
    game_to_load = _find_game(saved_games, game_id)
    if game_to_load is None:
        return _declined(state)

    events: list[dict[str, Any]] = []
    remaining = _without_game(saved_games, game_to_load["id"])
    current_game = state.get("currentGame")
    if current_game is not None:
        remaining = [_touched(current_game), *remaining]
        events.append({"kind": "game_saved", "gameId": current_game["id"]})

    next_state = dict(state)
    next_state["currentGame"] = game_to_load
    next_state["savedGames"] = remaining
    next_state["scoring"] = None
    events.append({"kind": "game_loaded", "gameId": game_to_load["id"]})
    return ActionResult(state=next_state, accepted=True, engine_events=events)


def _apply_delete_saved_game(state: dict[str, Any], action: dict[str, Any]) -> ActionResult:
    game_id = action.get("gameId")
    saved_games = list(state.get("savedGames", []))
    if _find_game(saved_games, game_id) is None:
        return _declined(state)

    next_state = dict(state)
    next_state["savedGames"] = _without_game(saved_games, game_id)
    return ActionResult(
        state=next_state,
        accepted=True,
        engine_events=[{"kind": "saved_game_deleted", "gameId": game_id}],
    )


def _apply_end_saved_game(state: dict[str, Any], action: dict[str, Any]) -> ActionResult:
    game_id = action.get("gameId")
    saved_games = list(state.get("savedGames", []))
    game_to_end = _find_game(saved_games, game_id)
    if game_to_end is None:
        return _declined(state)

    completed = _touched(game_to_end, status="completed")
    next_state = dict(state)
    next_state["savedGames"] = _without_game(saved_games, game_id)
    next_state["gameHistory"] = [completed, *state.get("gameHistory", [])]
    return ActionResult(
        state=next_state,
        accepted=True,
        engine_events=[{"kind": "game_completed", "gameId": game_id, "winner": None}],
    )


def _apply_clear_history(state: dict[str, Any], action: dict[str, Any]) -> ActionResult:
    next_state = dict(state)
    next_state["gameHistory"] = []
    return ActionResult(state=next_state, accepted=True, engine_events=[{"kind": "history_cleared"}])


# Round scoring session


def _active_session(state: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]] | None:
    game = state.get("currentGame")
    scoring = state.get("scoring")
    if game is None or scoring is None:
        return None
    return game, scoring


def _apply_start_scoring(state: dict[str, Any], action: dict[str, Any]) -> ActionResult:
    game = state.get("currentGame")
    if game is None:
        return _declined(state)
    next_state = dict(state)
    next_state["scoring"] = build_scoring_session(game)
    return ActionResult(
        state=next_state,
        accepted=True,
        engine_events=[{"kind": "scoring_started", "gameId": game["id"], "round": game["currentRound"]}],
    )


def _apply_set_player_score(state: dict[str, Any], action: dict[str, Any]) -> ActionResult:
    session = _active_session(state)
    player_id = action.get("playerId")
    score = _score(action)
    if session is None or not isinstance(player_id, str) or score is None:
        return _declined(state)
    if player_id not in session[1]["scores"]:
        return _declined(state)

    scoring = session[1]
    scores = dict(scoring["scores"])
    scores[player_id] = {
        "score": score,
        "phaseCompleted": bool(action.get("phaseCompleted")),
    }
    next_state = dict(state)
    next_state["scoring"] = {**scoring, "scores": scores}
    return ActionResult(state=next_state, accepted=True)


def _apply_next_player(state: dict[str, Any], action: dict[str, Any]) -> ActionResult:
    session = _active_session(state)
    if session is None:
        return _declined(state)
    game, scoring = session

    next_index = int(scoring["currentPlayerIndex"]) + 1
    if next_index >= len(game["players"]):
        return _declined(state)

    next_state = dict(state)
    next_state["scoring"] = {**scoring, "currentPlayerIndex": next_index}
    return ActionResult(state=next_state, accepted=True)


def _apply_previous_player(state: dict[str, Any], action: dict[str, Any]) -> ActionResult:
    session = _active_session(state)
    if session is None or int(session[1]["currentPlayerIndex"]) <= 0:
        return _declined(state)

    scoring = session[1]
    next_state = dict(state)
    next_state["scoring"] = {**scoring, "currentPlayerIndex": int(scoring["currentPlayerIndex"]) - 1}
    return ActionResult(state=next_state, accepted=True)


def _score_player_round(player: dict[str, Any], entry: dict[str, Any] | None, round_number: int) -> dict[str, Any]:
    if entry is None:
        return player
    phase_attempted = int(player["currentPhase"])
    score = int(entry["score"])
    phase_completed = bool(entry["phaseCompleted"])

    next_player = dict(player)
    next_player["totalScore"] = int(player["totalScore"]) + score
    next_player["currentPhase"] = phase_attempted + 1 if phase_completed else phase_attempted
    next_player["rounds"] = [
        *player.get("rounds", []),
        {
            "round": round_number,
            "score": score,
            "phaseCompleted": phase_completed,
            "phaseAttempted": phase_attempted,
        },
    ]
    return next_player


def _apply_finish_round(state: dict[str, Any], action: dict[str, Any]) -> ActionResult:
    session = _active_session(state)
    if session is None:
        return _declined(state)
    game, scoring = session
    if scoring.get("gameId") != game["id"]:
        return _declined(state)

    round_number = int(game["currentRound"])
    scores = scoring["scores"]
    players = [_score_player_round(player, scores.get(player["id"]), round_number) for player in game["players"]]
    updated_game = _touched(game, currentRound=round_number + 1, players=players)

    next_state = dict(state)
    next_state["scoring"] = None
    events: list[dict[str, Any]] = [{"kind": "round_finished", "gameId": game["id"], "round": round_number}]

    winner = check_winner(players)
    if winner is None:
        next_state["currentGame"] = updated_game
        return ActionResult(state=next_state, accepted=True, engine_events=events)

    completed = dict(updated_game)
    completed["status"] = "completed"
    completed["winner"] = winner["id"]
    next_state["currentGame"] = None
    next_state["gameHistory"] = [completed, *state.get("gameHistory", [])]
    events.append({"kind": "game_completed", "gameId": game["id"], "winner": winner["id"]})
    return ActionResult(state=next_state, accepted=True, engine_events=events)


def _apply_cancel_scoring(state: dict[str, Any], action: dict[str, Any]) -> ActionResult:
    if state.get("scoring") is None:
        return _declined(state)
    next_state = dict(state)
    next_state["scoring"] = None
    return ActionResult(state=next_state, accepted=True, engine_events=[{"kind": "scoring_cancelled"}])


# Corrections to the current game


def _apply_update_round_score(state: dict[str, Any], action: dict[str, Any]) -> ActionResult:
    game = state.get("currentGame")
    if game is None:
        return _declined(state)

    player_id = action.get("playerId")
    round_number = action.get("round")
    score = _score(action)
    if not isinstance(player_id, str) or score is None:
        return _declined(state)
    player = next((candidate for candidate in game["players"] if candidate["id"] == player_id), None)
    if player is None or not any(entry["round"] == round_number for entry in player["rounds"]):
        return _declined(state)

    rounds = [
        {**entry, "score": score, "phaseCompleted": bool(action.get("phaseCompleted"))}
        if entry["round"] == round_number
        else entry
        for entry in player["rounds"]
    ]
    corrected = recompute_player_totals({**player, "rounds": rounds})
    players = [corrected if candidate["id"] == player_id else candidate for candidate in game["players"]]

    next_state = dict(state)
    next_state["currentGame"] = _touched(game, players=players)
    return ActionResult(
        state=next_state,
        accepted=True,
        engine_events=[{"kind": "round_score_updated", "playerId": player_id, "round": round_number}],
    )


def _apply_reorder_players(state: dict[str, Any], action: dict[str, Any]) -> ActionResult:
    game = state.get("currentGame")
    from_index = action.get("fromIndex")
    to_index = action.get("toIndex")
    if game is None or not isinstance(from_index, int) or not isinstance(to_index, int):
        return _declined(state)

    player_count = len(game["players"])
    if not 0 <= from_index < player_count or not 0 <= to_index < player_count or from_index == to_index:
        return _declined(state)

    players = list(game["players"])
    players[from_index], players[to_index] = players[to_index], players[from_index]
    next_state = dict(state)
    next_state["currentGame"] = _touched(game, players=players)
    return ActionResult(state=next_state, accepted=True)


_HANDLERS: dict[str, Callable[[dict[str, Any], dict[str, Any]], ActionResult]] = {
    "START_NEW_GAME": _apply_start_new_game,
    "SET_PENDING_PLAYERS": _apply_set_pending_players,
    "CLEAR_PENDING_PLAYERS": _apply_clear_pending_players,
    "END_GAME": _apply_end_game,
    "SAVE_GAME_FOR_LATER": _apply_save_game_for_later,
    "LOAD_SAVED_GAME": _apply_load_saved_game,
    "DELETE_SAVED_GAME": _apply_delete_saved_game,
    "END_SAVED_GAME": _apply_end_saved_game,
    "CLEAR_HISTORY": _apply_clear_history,
    "START_SCORING": _apply_start_scoring,
    "SET_PLAYER_SCORE": _apply_set_player_score,
    "NEXT_PLAYER": _apply_next_player,
    "PREVIOUS_PLAYER": _apply_previous_player,
    "FINISH_ROUND": _apply_finish_round,
    "CANCEL_SCORING": _apply_cancel_scoring,
    "UPDATE_ROUND_SCORE": _apply_update_round_score,
    "REORDER_PLAYERS": _apply_reorder_players,
}
