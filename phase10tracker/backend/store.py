"""Game store: the single owner of active, saved and completed games."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
import logging
from typing import Any, Sequence

from .engine import apply_action
from .models import ActionResult, GameSummary
from .phases import MIN_PLAYERS
from .scoring import rank_players, summarize_game
from .state import SNAPSHOT_FIELDS, build_initial_state
from .storage import STORAGE_KEY, InMemorySnapshotStorage, SnapshotError, SnapshotStorage


logger = logging.getLogger(__name__)


def restore_state(document: Any) -> dict[str, Any]:
    """Validate a persisted snapshot and return it as store state."""
    if not isinstance(document, dict):
        raise SnapshotError("Snapshot must be a JSON object")
    missing = [name for name in SNAPSHOT_FIELDS if name not in document]
    if missing:
        raise SnapshotError(f"Snapshot is missing fields: {', '.join(missing)}")
    if not isinstance(document["savedGames"], list) or not isinstance(document["gameHistory"], list):
        raise SnapshotError("Snapshot game collections must be lists")
    return {name: document[name] for name in SNAPSHOT_FIELDS}


@dataclass
class GameStore:
    """Holds the store snapshot, applies actions to it and persists it afterwards.

    The snapshot is restored once from ``storage`` on construction and written
    back after every action the engine accepts. Declined actions leave both
    the in-memory state and storage untouched.
    """

    storage: SnapshotStorage = field(default_factory=InMemorySnapshotStorage)
    storage_key: str = STORAGE_KEY

    def __post_init__(self) -> None:
        document = self.storage.read(self.storage_key)
        if document is None:
            self._state = build_initial_state()
        else:
            self._state = restore_state(document)
            logger.info(
                "Restored snapshot: %d saved, %d completed, current game %s",
                len(self._state["savedGames"]),
                len(self._state["gameHistory"]),
                "present" if self._state["currentGame"] else "absent",
            )

    # Read model

    @property
    def state(self) -> dict[str, Any]:
        """A deep copy of the snapshot; changes to it never reach the store."""
        return copy.deepcopy(self._state)

    @property
    def current_game(self) -> dict[str, Any] | None:
        return copy.deepcopy(self._state["currentGame"])

    @property
    def saved_games(self) -> list[dict[str, Any]]:
        return copy.deepcopy(self._state["savedGames"])

    @property
    def game_history(self) -> list[dict[str, Any]]:
        return copy.deepcopy(self._state["gameHistory"])

    @property
    def scoring(self) -> dict[str, Any] | None:
        return copy.deepcopy(self._state["scoring"])

    @property
    def last_player_names(self) -> list[str]:
        return copy.deepcopy(self._state["lastPlayerNames"])

    @property
    def pending_player_names(self) -> list[str] | None:
        return copy.deepcopy(self._state["pendingPlayerNames"])

    def continue_game(self) -> bool:
        game = self.current_game
        return game is not None and game["status"] == "active"

    def initial_player_names(self) -> list[str]:
        """Names to pre-fill the setup form with: pending, then last, then two blanks."""
        pending = self.pending_player_names
        if pending and len(pending) >= MIN_PLAYERS:
            return list(pending)
        if len(self.last_player_names) >= MIN_PLAYERS:
            return list(self.last_player_names)
        return ["", ""]

    def current_ranking(self) -> list[dict[str, Any]]:
        game = self.current_game
        return rank_players(game["players"] if game else None)

    def history_summaries(self) -> list[GameSummary]:
        return [summarize_game(game) for game in self.game_history]

    # Dispatch

    def dispatch(self, action: dict[str, Any]) -> ActionResult:
        result = apply_action(state=self._state, action=action)
        action_type = action.get("type")
        if not result.accepted:
            logger.debug("Declined action %s", action_type)
            return replace(result, state=self.state)

        self._state = result.state
        for event in result.engine_events:
            if event["kind"] == "game_completed":
                logger.info("Game %s completed (winner: %s)", event["gameId"], event["winner"])
            else:
                logger.debug("Engine event %s", event)
        self.storage.write(self.storage_key, self._state)
        return replace(result, state=self.state)

    # Game lifecycle

    def start_new_game(self, player_names: Sequence[str]) -> None:
        self.dispatch({"type": "START_NEW_GAME", "playerNames": list(player_names)})

    def start_new_game_with_players(self, player_names: Sequence[str]) -> None:
        self.start_new_game(player_names)

    def set_pending_players(self, player_names: Sequence[str]) -> None:
        self.dispatch({"type": "SET_PENDING_PLAYERS", "playerNames": list(player_names)})

    def clear_pending_players(self) -> None:
        self.dispatch({"type": "CLEAR_PENDING_PLAYERS"})

    def play_again(self, game_id: str) -> None:
        game = next((candidate for candidate in self.game_history if candidate["id"] == game_id), None)
        if game is None:
            return
        self.set_pending_players([player["name"] for player in game["players"]])

    def end_game(self) -> None:
        self.dispatch({"type": "END_GAME"})

    def save_game_for_later(self) -> None:
        self.dispatch({"type": "SAVE_GAME_FOR_LATER"})

    def load_saved_game(self, game_id: str) -> None:
        self.dispatch({"type": "LOAD_SAVED_GAME", "gameId": game_id})

    def delete_saved_game(self, game_id: str) -> None:
        self.dispatch({"type": "DELETE_SAVED_GAME", "gameId": game_id})

    def end_saved_game(self, game_id: str) -> None:
        self.dispatch({"type": "END_SAVED_GAME", "gameId": game_id})

    def clear_history(self) -> None:
        self.dispatch({"type": "CLEAR_HISTORY"})

    # Round scoring

    def start_scoring(self) -> None:
        self.dispatch({"type": "START_SCORING"})

    def set_player_score(self, player_id: str, score: int, phase_completed: bool) -> None:
        self.dispatch(
            {"type": "SET_PLAYER_SCORE", "playerId": player_id, "score": score, "phaseCompleted": phase_completed}
        )

    def next_player(self) -> bool:
        return self.dispatch({"type": "NEXT_PLAYER"}).accepted

    def previous_player(self) -> None:
        self.dispatch({"type": "PREVIOUS_PLAYER"})

    def finish_round(self) -> None:
        self.dispatch({"type": "FINISH_ROUND"})

    def cancel_scoring(self) -> None:
        self.dispatch({"type": "CANCEL_SCORING"})

    # Corrections

    def update_round_score(self, player_id: str, round_number: int, score: int, phase_completed: bool) -> None:
        self.dispatch(
            {
                "type": "UPDATE_ROUND_SCORE",
                "playerId": player_id,
                "round": round_number,
                "score": score,
                "phaseCompleted": phase_completed,
            }
        )

    def reorder_players(self, from_index: int, to_index: int) -> None:
        self.dispatch({"type": "REORDER_PLAYERS", "fromIndex": from_index, "toIndex": to_index})
