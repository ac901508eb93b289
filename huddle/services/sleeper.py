"""Sleeper API client for the player universe and league rosters.

Uses httpx for async HTTP requests. The Sleeper API is public and read-only.
"""

from __future__ import annotations

from typing import Any

import httpx

from huddle.core.config import get_settings
from huddle.core.errors import UpstreamUnavailableError
from huddle.core.logging import get_logger

logger = get_logger(__name__)


class SleeperService:
    """Read-only access to the Sleeper fantasy API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def fetch_all_players(self) -> dict[str, dict[str, Any]]:
        """
        Fetch the full NFL player universe in one call.

        Returns:
            Mapping of player id to raw Sleeper attributes

        Raises:
            UpstreamUnavailableError: On network/HTTP failure or an empty payload
        """
        try:
            async with self._client() as client:
                resp = await client.get(f"{self.base_url}/players/nfl")
                resp.raise_for_status()
                players = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Sleeper player fetch failed: {e}")
            raise UpstreamUnavailableError(f"Sleeper API error: {e}") from e

        if not isinstance(players, dict) or not players:
            raise UpstreamUnavailableError("Sleeper API returned no players")

        logger.info(f"Fetched {len(players)} players from Sleeper")
        return players

    async def fetch_league_rosters(self, league_id: str) -> list[dict[str, Any]]:
        """
        Fetch every roster in a league.

        Raises:
            httpx.HTTPError: If the request fails
        """
        async with self._client() as client:
            resp = await client.get(f"{self.base_url}/league/{league_id}/rosters")
            resp.raise_for_status()
            return resp.json() or []


def get_sleeper_service() -> SleeperService:
    """Build a SleeperService from settings."""
    settings = get_settings()
    return SleeperService(
        base_url=settings.SLEEPER_API_BASE,
        timeout=settings.SLEEPER_TIMEOUT_SECONDS,
    )
