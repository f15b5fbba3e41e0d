"""Community statistics route."""
from fastapi import APIRouter

from community_stream.core import ErrorMapper
from community_stream.deps import StatsServiceDep
from community_stream.schemas import CommunityStatsOut, StatsEnvelope

router = APIRouter(prefix="/api/community", tags=["community"])

_errors = ErrorMapper(resource_name="Stats", failure_message="Failed to get community stats")


@router.get("/stats", response_model=StatsEnvelope)
async def get_community_stats(stats: StatsServiceDep) -> StatsEnvelope:
    """Members, active streamers and totals. Created on first read."""
    try:
        row = await stats.get()
    except Exception as exc:
        _errors.raise_http(exc)
    return StatsEnvelope(stats=CommunityStatsOut.from_entity(row))
