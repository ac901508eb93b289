"""Embedding eligibility rules.

Decides which players earn a stable identity embedding. Only the player's
current snapshot is consulted; the rules are re-run on every ingestion pass
because depth charts shift during the season. First matching rule wins.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Iterable

from huddle.core.schemas_players import PlayerSnapshot

PRIMARY_POSITIONS = frozenset({"QB", "RB", "WR", "TE"})
KICKER_POSITION = "K"

REASON_FANTASY_RELEVANT = "fantasy_relevant"
REASON_ROOKIE_POTENTIAL = "rookie_potential"
REASON_STARTING_KICKER = "starting_kicker"
REASON_KEY_BACKUP = "key_backup"
REASON_NOT_RELEVANT = "not_fantasy_relevant"

DEFAULT_ROOKIE_SEASON = "2024"


@dataclass(frozen=True)
class Eligibility:
    """Outcome of classify()."""

    eligible: bool
    reason: str
    priority: int


NOT_ELIGIBLE = Eligibility(eligible=False, reason=REASON_NOT_RELEVANT, priority=0)


def _depth_within(player: PlayerSnapshot, limit: int) -> bool:
    order = player.depth_chart_order
    return order is not None and 1 <= order <= limit


def is_rookie(player: PlayerSnapshot, rookie_season: str = DEFAULT_ROOKIE_SEASON) -> bool:
    return player.rookie_year is not None and str(player.rookie_year) == str(rookie_season)


def classify(player: PlayerSnapshot, rookie_season: str = DEFAULT_ROOKIE_SEASON) -> Eligibility:
    """
    Classify a player for embedding eligibility.

    Args:
        player: Current attribute snapshot
        rookie_season: Season whose rookie_year marks a rookie

    Returns:
        Eligibility with reason tag and priority (higher = more fantasy-relevant)
    """
    is_primary = player.position in PRIMARY_POSITIONS
    has_team = bool(player.team)

    if is_primary and has_team and player.status == "Active" and _depth_within(player, 3):
        return Eligibility(eligible=True, reason=REASON_FANTASY_RELEVANT, priority=10)

    if is_primary and is_rookie(player, rookie_season):
        return Eligibility(eligible=True, reason=REASON_ROOKIE_POTENTIAL, priority=7)

    if player.position == KICKER_POSITION and player.depth_chart_order == 1:
        return Eligibility(eligible=True, reason=REASON_STARTING_KICKER, priority=5)

    if (
        is_primary
        and has_team
        and _depth_within(player, 2)
        and player.years_exp is not None
        and player.years_exp >= 2
    ):
        return Eligibility(eligible=True, reason=REASON_KEY_BACKUP, priority=6)

    return NOT_ELIGIBLE


def priority_breakdown(eligibilities: Iterable[Eligibility]) -> dict[str, int]:
    """Count eligible players per reason tag."""
    counts = Counter(e.reason for e in eligibilities if e.eligible)
    return dict(sorted(counts.items()))
