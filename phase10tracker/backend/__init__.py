"""Backend package for the Phase 10 tracker."""

from .config import Phase10Settings, load_settings
from .engine import apply_action
from .ids import generate_id
from .scoring import check_winner, rank_players, summarize_game
from .state import build_initial_state
from .storage import (
    InMemorySnapshotStorage,
    JsonFileSnapshotStorage,
    PostgresSnapshotStorage,
    SnapshotError,
    SnapshotStorage,
    create_storage,
)
from .store import GameStore

__all__ = [
    "apply_action",
    "build_initial_state",
    "check_winner",
    "create_storage",
    "GameStore",
    "generate_id",
    "InMemorySnapshotStorage",
    "JsonFileSnapshotStorage",
    "load_settings",
    "Phase10Settings",
    "PostgresSnapshotStorage",
    "rank_players",
    "SnapshotError",
    "SnapshotStorage",
    "summarize_game",
]
