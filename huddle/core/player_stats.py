"""Aggregate statistics over the player and embedding stores."""

from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class PlayerStats(BaseModel):
    total_players: int = 0
    by_position: dict[str, int] = Field(default_factory=dict)
    by_team: dict[str, int] = Field(default_factory=dict)
    by_status: dict[str, int] = Field(default_factory=dict)
    active_count: int = 0
    injured_count: int = 0
    last_sync_time: str | None = None


class EmbeddingStats(BaseModel):
    total_embedded: int = 0
    by_reason: dict[str, int] = Field(default_factory=dict)
    by_priority: dict[str, int] = Field(default_factory=dict)
    average_content_length: int = 0
    oldest_embedding: str | None = None
    newest_embedding: str | None = None


def _parse_ts(value: Any) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def summarize_players(rows: list[dict[str, Any]]) -> PlayerStats:
    """Count players by position, team and status; find the latest sync time."""
    positions: Counter[str] = Counter()
    teams: Counter[str] = Counter()
    statuses: Counter[str] = Counter()
    active = 0
    injured = 0
    latest: datetime | None = None

    for row in rows:
        if row.get("position"):
            positions[row["position"]] += 1
        if row.get("team"):
            teams[row["team"]] += 1
        if row.get("status"):
            statuses[row["status"]] += 1
        if row.get("active"):
            active += 1
        if row.get("injury_status"):
            injured += 1
        synced = _parse_ts(row.get("last_synced"))
        if synced and (latest is None or synced > latest):
            latest = synced

    return PlayerStats(
        total_players=len(rows),
        by_position=dict(sorted(positions.items())),
        by_team=dict(sorted(teams.items())),
        by_status=dict(sorted(statuses.items())),
        active_count=active,
        injured_count=injured,
        last_sync_time=latest.isoformat() if latest else None,
    )


def summarize_embeddings(rows: list[dict[str, Any]]) -> EmbeddingStats:
    """Count embeddings by reason and priority; content length and age range."""
    reasons: Counter[str] = Counter()
    priorities: Counter[str] = Counter()
    total_length = 0
    oldest: datetime | None = None
    newest: datetime | None = None

    for row in rows:
        if row.get("embed_reason"):
            reasons[row["embed_reason"]] += 1
        priorities[str(row.get("embed_priority") or 0)] += 1
        total_length += len(row.get("content") or "")
        created = _parse_ts(row.get("embedding_created"))
        if created:
            if oldest is None or created < oldest:
                oldest = created
            if newest is None or created > newest:
                newest = created

    return EmbeddingStats(
        total_embedded=len(rows),
        by_reason=dict(sorted(reasons.items())),
        by_priority=dict(sorted(priorities.items(), key=lambda kv: int(kv[0]), reverse=True)),
        average_content_length=round(total_length / len(rows)) if rows else 0,
        oldest_embedding=oldest.isoformat() if oldest else None,
        newest_embedding=newest.isoformat() if newest else None,
    )
