import copy
import logging

import pytest

from phase10tracker.backend.state import build_initial_state
from phase10tracker.backend.storage import STORAGE_KEY, InMemorySnapshotStorage, SnapshotError
from phase10tracker.backend.store import GameStore, restore_state


class _RecordingStorage(InMemorySnapshotStorage):
    def __post_init__(self) -> None:
        super().__post_init__()
        self.writes = 0

    def write(self, key: str, document: dict) -> None:
        self.writes += 1
        super().write(key, document)


def _store_with_game(names: list[str] | None = None) -> GameStore:
    store = GameStore()
    store.start_new_game(names or ["A", "B"])
    return store


def _score_round(store: GameStore, entries: list[tuple[int, bool]]) -> None:
    store.start_scoring()
    for index, (score, completed) in enumerate(entries):
        player = store.current_game["players"][index]
        store.set_player_score(player["id"], score, completed)
        if index < len(entries) - 1:
            assert store.next_player() is True
    assert store.next_player() is False
    store.finish_round()


def test_new_store_starts_empty() -> None:
    store = GameStore()

    assert store.state == build_initial_state()
    assert store.continue_game() is False
    assert store.initial_player_names() == ["", ""]


def test_store_scores_a_round_through_action_methods() -> None:
    store = _store_with_game(["A", "B"])

    _score_round(store, [(45, True), (60, False)])

    player_a, player_b = store.current_game["players"]
    assert (player_a["currentPhase"], player_a["totalScore"]) == (2, 45)
    assert (player_b["currentPhase"], player_b["totalScore"]) == (1, 60)
    assert store.current_game["currentRound"] == 2
    assert store.scoring is None
    assert store.continue_game() is True


def test_save_and_resume_round_trip() -> None:
    store = _store_with_game()
    _score_round(store, [(10, True), (30, False)])
    before = copy.deepcopy(store.current_game)

    store.save_game_for_later()
    assert store.current_game is None
    store.load_saved_game(before["id"])

    resumed = dict(store.current_game)
    resumed.pop("updatedAt")
    before.pop("updatedAt")
    assert resumed == before
    assert store.saved_games == []


def test_store_persists_after_accepted_actions_only() -> None:
    storage = _RecordingStorage()
    store = GameStore(storage=storage)

    store.end_game()
    store.cancel_scoring()
    assert storage.writes == 0

    store.start_new_game(["A", "B"])
    store.start_scoring()

    assert storage.writes == 2
    assert storage.read(STORAGE_KEY) == store.state


def test_store_restores_snapshot_from_storage() -> None:
    storage = InMemorySnapshotStorage()
    first = GameStore(storage=storage)
    first.start_new_game(["A", "B", "C"])
    first.save_game_for_later()

    second = GameStore(storage=storage)

    assert second.current_game is None
    assert [player["name"] for player in second.saved_games[0]["players"]] == ["A", "B", "C"]
    assert second.last_player_names == ["A", "B", "C"]
    assert second.initial_player_names() == ["A", "B", "C"]


def test_store_rejects_incompatible_snapshot() -> None:
    storage = InMemorySnapshotStorage()
    storage.write(STORAGE_KEY, {"currentGame": None})

    with pytest.raises(SnapshotError):
        GameStore(storage=storage)


def test_restore_state_requires_object_with_list_collections() -> None:
    with pytest.raises(SnapshotError):
        restore_state(["not", "a", "dict"])

    broken = build_initial_state()
    broken["savedGames"] = {}
    with pytest.raises(SnapshotError):
        restore_state(broken)


def test_play_again_prefills_names_from_history_game() -> None:
    store = _store_with_game(["Ann", "Ben", "Cat"])
    game_id = store.current_game["id"]
    store.end_game()
    store.start_new_game(["X", "Y"])

    store.play_again(game_id)
    store.play_again("unknown")

    assert store.pending_player_names == ["Ann", "Ben", "Cat"]
    assert store.initial_player_names() == ["Ann", "Ben", "Cat"]

    store.clear_pending_players()
    assert store.initial_player_names() == ["X", "Y"]


def test_start_new_game_with_players_replaces_current_game_without_saving() -> None:
    store = _store_with_game(["A", "B"])
    old_id = store.current_game["id"]

    store.start_new_game_with_players(["C", "D"])

    assert store.current_game["id"] != old_id
    assert store.saved_games == []
    assert store.game_history == []


def test_winning_round_logs_completion(caplog: pytest.LogCaptureFixture) -> None:
    store = _store_with_game(["A", "B"])
    for _ in range(9):
        _score_round(store, [(0, True), (20, False)])

    with caplog.at_level(logging.INFO, logger="phase10tracker"):
        _score_round(store, [(0, True), (20, False)])

    winner_id = store.game_history[0]["players"][0]["id"]
    assert store.current_game is None
    assert store.game_history[0]["winner"] == winner_id
    assert any("completed" in record.getMessage() for record in caplog.records)


def test_end_saved_game_and_delete_saved_game() -> None:
    store = _store_with_game()
    first_id = store.current_game["id"]
    store.save_game_for_later()
    store.start_new_game(["C", "D"])
    second_id = store.current_game["id"]
    store.save_game_for_later()

    store.end_saved_game(first_id)
    store.delete_saved_game(second_id)

    assert store.saved_games == []
    assert [game["id"] for game in store.game_history] == [first_id]

    store.clear_history()
    assert store.game_history == []


def test_update_round_score_and_reorder_through_store() -> None:
    store = _store_with_game(["A", "B"])
    _score_round(store, [(0, True), (60, False)])
    _score_round(store, [(30, False), (0, True)])
    a_id = store.current_game["players"][0]["id"]

    store.update_round_score(a_id, 1, 40, False)
    store.reorder_players(0, 1)

    players = store.current_game["players"]
    assert [player["name"] for player in players] == ["B", "A"]
    assert players[1]["currentPhase"] == 1
    assert players[1]["totalScore"] == 70


def test_current_ranking_and_history_summaries() -> None:
    store = GameStore()
    assert store.current_ranking() == []

    store.start_new_game(["A", "B"])
    _score_round(store, [(50, False), (10, True)])

    assert [player["name"] for player in store.current_ranking()] == ["B", "A"]

    store.end_game()
    summary = store.history_summaries()[0]
    assert summary.rounds_played == 1
    assert summary.winner_name == "B"


def test_read_model_returns_copies_that_do_not_leak_into_the_store() -> None:
    storage = _RecordingStorage()
    store = GameStore(storage=storage)
    store.start_new_game(["A", "B"])
    writes_before = storage.writes

    game = store.current_game
    game["players"][0]["totalScore"] = 999
    store.state["savedGames"].append({"id": "rogue"})
    store.last_player_names.append("C")
    result = store.dispatch({"type": "NEXT_PLAYER"})
    result.state["gameHistory"].append({"id": "rogue"})

    assert store.current_game["players"][0]["totalScore"] == 0
    assert store.saved_games == []
    assert store.game_history == []
    assert store.last_player_names == ["A", "B"]
    assert storage.writes == writes_before
