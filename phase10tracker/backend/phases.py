"""Static Phase 10 reference data."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PhaseInfo:
    number: int
    description: str
    requirement: str


PHASES: tuple[PhaseInfo, ...] = (
    PhaseInfo(1, "2 sets of 3", "Two groups of 3 cards with the same number"),
    PhaseInfo(2, "1 set of 3 + 1 run of 4", "One group of 3 same numbers + 4 cards in sequence"),
    PhaseInfo(3, "1 set of 4 + 1 run of 4", "One group of 4 same numbers + 4 cards in sequence"),
    PhaseInfo(4, "1 run of 7", "Seven cards in sequence"),
    PhaseInfo(5, "1 run of 8", "Eight cards in sequence"),
    PhaseInfo(6, "1 run of 9", "Nine cards in sequence"),
    PhaseInfo(7, "2 sets of 4", "Two groups of 4 cards with the same number"),
    PhaseInfo(8, "7 cards of one color", "Seven cards of the same color"),
    PhaseInfo(9, "1 set of 5 + 1 set of 2", "One group of 5 same numbers + one group of 2 same numbers"),
    PhaseInfo(10, "1 set of 5 + 1 set of 3", "One group of 5 same numbers + one group of 3 same numbers"),
)

QUICK_SCORES: tuple[int, ...] = (5, 10, 15, 20, 25, 50, 75, 100)

MIN_PLAYERS = 2
MAX_PLAYERS = 6
FINAL_PHASE = len(PHASES)


def phase_info(number: int) -> PhaseInfo | None:
    """Return the phase definition for ``number`` or None outside 1..10."""
    if 1 <= number <= FINAL_PHASE:
        return PHASES[number - 1]
    return None
