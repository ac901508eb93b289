"""API router for v1 endpoints."""

from fastapi import APIRouter

from huddle.api import advice, ingestion, players, rosters

router = APIRouter()

router.include_router(advice.router, tags=["advice"])

router.include_router(ingestion.router, prefix="/ingestion", tags=["ingestion"])

router.include_router(rosters.router, prefix="/rosters", tags=["rosters"])

router.include_router(players.router, prefix="/players", tags=["players"])
