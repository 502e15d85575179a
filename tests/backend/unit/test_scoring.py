from phase10tracker.backend.phases import PHASES, QUICK_SCORES, phase_info
from phase10tracker.backend.scoring import (
    check_winner,
    rank_players,
    recompute_player_totals,
    should_auto_complete_phase,
    summarize_game,
)


def _player(player_id: str, phase: int, score: int, name: str | None = None) -> dict:
    return {"id": player_id, "name": name or player_id, "currentPhase": phase, "totalScore": score, "rounds": []}


def test_rank_players_orders_by_phase_then_lowest_score() -> None:
    players = [_player("p3-50", 3, 50), _player("p3-20", 3, 20), _player("p5", 5, 999)]

    ranked = rank_players(players)

    assert [player["id"] for player in ranked] == ["p5", "p3-20", "p3-50"]
    assert [player["id"] for player in players] == ["p3-50", "p3-20", "p5"]


def test_rank_players_keeps_list_order_for_full_ties() -> None:
    players = [_player("a", 2, 40), _player("b", 2, 40), _player("c", 2, 40)]

    assert [player["id"] for player in rank_players(players)] == ["a", "b", "c"]


def test_rank_players_handles_empty_and_missing_input() -> None:
    assert rank_players([]) == []
    assert rank_players(None) == []


def test_check_winner_prefers_list_order_over_score() -> None:
    players = [_player("a", 4, 10), _player("b", 11, 300), _player("c", 11, 5)]

    winner = check_winner(players)

    assert winner is not None
    assert winner["id"] == "b"


def test_check_winner_returns_none_without_finished_player() -> None:
    assert check_winner([_player("a", 10, 0), _player("b", 9, 0)]) is None
    assert check_winner(None) is None


def test_should_auto_complete_phase_threshold() -> None:
    assert should_auto_complete_phase(0) is True
    assert should_auto_complete_phase(49) is True
    assert should_auto_complete_phase(50) is False


def test_recompute_player_totals_derives_phase_from_completed_count() -> None:
    player = _player("a", 7, 999)
    player["rounds"] = [
        {"round": 1, "score": 10, "phaseCompleted": True, "phaseAttempted": 1},
        {"round": 2, "score": 55, "phaseCompleted": False, "phaseAttempted": 2},
        {"round": 3, "score": 0, "phaseCompleted": True, "phaseAttempted": 2},
    ]

    recomputed = recompute_player_totals(player)

    assert recomputed["totalScore"] == 65
    assert recomputed["currentPhase"] == 3
    assert player["totalScore"] == 999


def test_summarize_game_uses_winner_id_and_caps_display_phase() -> None:
    game = {
        "id": "g1",
        "createdAt": "2024-01-01T00:00:00+00:00",
        "status": "completed",
        "currentRound": 12,
        "winner": "b",
        "players": [_player("a", 10, 20, "Ann"), _player("b", 11, 150, "Ben")],
    }

    summary = summarize_game(game)

    assert summary.rounds_played == 11
    assert summary.winner_id == "b"
    assert summary.winner_name == "Ben"
    assert [(entry.rank, entry.name, entry.display_phase) for entry in summary.players] == [
        (1, "Ben", 10),
        (2, "Ann", 10),
    ]


def test_summarize_game_falls_back_to_top_ranked_player() -> None:
    game = {
        "id": "g2",
        "createdAt": "2024-01-01T00:00:00+00:00",
        "status": "completed",
        "currentRound": 4,
        "players": [_player("a", 2, 80, "Ann"), _player("b", 3, 90, "Ben")],
    }

    summary = summarize_game(game)

    assert summary.winner_id == "b"
    assert summary.rounds_played == 3


def test_phase_reference_data() -> None:
    assert [phase.number for phase in PHASES] == list(range(1, 11))
    assert QUICK_SCORES == (5, 10, 15, 20, 25, 50, 75, 100)
    assert phase_info(4).description == "1 run of 7"
    assert phase_info(0) is None
    assert phase_info(11) is None
