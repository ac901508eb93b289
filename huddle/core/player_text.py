"""Stable identity rendering and content hashing for player embeddings.

Only identity fields go into embedded text. Injury, practice and depth chart
data change daily and are joined in at query time instead, so a status change
never forces a new embedding.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

from huddle.core.eligibility import DEFAULT_ROOKIE_SEASON, is_rookie
from huddle.core.schemas_players import PlayerSnapshot


def stable_attributes(
    player: PlayerSnapshot, rookie_season: str = DEFAULT_ROOKIE_SEASON
) -> tuple[Any, ...]:
    """
    Return the exact tuple of fields that render_identity_content() reads.

    The rookie marker is included because it appears in the rendered text.
    """
    rookie_marker = str(rookie_season) if is_rookie(player, rookie_season) else None
    return (
        player.display_name,
        player.position or "Unknown",
        player.team or "FA",
        player.college or None,
        player.years_exp,
        player.age or None,
        rookie_marker,
        player.height or None,
        player.weight or None,
    )


def render_identity_content(
    player: PlayerSnapshot, rookie_season: str = DEFAULT_ROOKIE_SEASON
) -> str:
    """Render the stable identity chunk that gets embedded."""
    name, position, team, college, years_exp, age, rookie_marker, height, weight = (
        stable_attributes(player, rookie_season)
    )

    parts = [f"Player: {name}", f"Position: {position}", f"Team: {team}"]
    if college:
        parts.append(f"College: {college}")
    if years_exp is not None:
        parts.append(f"Experience: {years_exp} years")
    if age:
        parts.append(f"Age: {age}")
    if rookie_marker:
        parts.append(f"Rookie Year: {rookie_marker}")
    if height and weight:
        parts.append(f'Size: {height}"/{weight}lbs')

    return ", ".join(parts) + f". Fantasy football {position} for the {team} team."


def content_hash(player: PlayerSnapshot, rookie_season: str = DEFAULT_ROOKIE_SEASON) -> str:
    """SHA-256 fingerprint of the stable attribute tuple."""
    payload = json.dumps(list(stable_attributes(player, rookie_season)), separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()
