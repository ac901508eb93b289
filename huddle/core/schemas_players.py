"""Player, embedding and context schemas."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Columns copied from the Sleeper payload into players_raw
SNAPSHOT_FIELDS = (
    "full_name",
    "first_name",
    "last_name",
    "position",
    "team",
    "team_abbr",
    "status",
    "active",
    "depth_chart_position",
    "depth_chart_order",
    "injury_status",
    "injury_notes",
    "injury_body_part",
    "injury_start_date",
    "practice_participation",
    "practice_description",
    "age",
    "height",
    "weight",
    "college",
    "years_exp",
    "number",
    "espn_id",
    "yahoo_id",
    "fantasy_data_id",
    "news_updated",
)


class PlayerSnapshot(BaseModel):
    """Latest attribute snapshot for one player (a players_raw row)."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    player_id: str

    # Stable identity
    full_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    position: str | None = None
    team: str | None = None
    team_abbr: str | None = None
    years_exp: int | None = None
    age: int | None = None
    height: str | None = None
    weight: str | None = None
    college: str | None = None
    rookie_year: str | None = None
    number: int | None = None
    espn_id: str | None = None
    yahoo_id: str | None = None
    fantasy_data_id: int | None = None

    # Volatile status
    status: str | None = None
    active: bool | None = None
    depth_chart_position: str | None = None
    depth_chart_order: int | None = None
    injury_status: str | None = None
    injury_notes: str | None = None
    injury_body_part: str | None = None
    injury_start_date: str | None = None
    practice_participation: str | None = None
    practice_description: str | None = None
    news_updated: int | None = None

    raw_data: dict[str, Any] | None = None

    @classmethod
    def from_sleeper(cls, player_id: str, raw: dict[str, Any]) -> PlayerSnapshot:
        """Build a snapshot from one entry of the Sleeper /players/nfl payload."""
        data = {key: raw.get(key) for key in SNAPSHOT_FIELDS}
        metadata = raw.get("metadata") or {}
        data["rookie_year"] = metadata.get("rookie_year")
        return cls(player_id=str(player_id), raw_data=raw, **data)

    @property
    def display_name(self) -> str:
        if self.full_name:
            return self.full_name
        joined = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return joined or self.player_id

    def to_row(self) -> dict[str, Any]:
        """Row payload for the players_raw upsert."""
        return self.model_dump(mode="json")


class EmbeddingRecord(BaseModel):
    """A player_embeddings_selective row."""

    model_config = ConfigDict(extra="ignore")

    player_id: str
    content: str
    embedding: list[float] = Field(default_factory=list)
    content_hash: str
    embed_priority: int
    embed_reason: str
    player_name: str | None = None
    position: str | None = None
    team: str | None = None
    missed_runs: int = 0


class SimilarPlayer(BaseModel):
    """One row returned by the search_similar_players RPC."""

    model_config = ConfigDict(extra="ignore")

    player_id: str
    content: str = ""
    similarity: float
    player_name: str | None = None
    position: str | None = None
    team: str | None = None


class VolatileSummary(BaseModel):
    """Live, frequently-changing fields joined onto a context item."""

    status: str | None = None
    injury_status: str | None = None
    injury_notes: str | None = None
    practice_participation: str | None = None
    depth_chart_position: str | None = None
    depth_chart_order: int | None = None
    last_updated: int | None = None


class ContextItem(BaseModel):
    """Per-query join of stable identity and live status. Never persisted."""

    player_id: str
    player_name: str
    position: str | None = None
    team: str | None = None
    identity_summary: str
    volatile_summary: VolatileSummary
    similarity: float
    is_owned: bool
    is_starter: bool
    is_healthy: bool
