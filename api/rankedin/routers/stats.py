"""Site-wide statistics.

GET /api/stats -- counts of ranked entities, stars, badge requests, subscribers
"""

from fastapi import APIRouter

from rankedin.dependencies import DbSession
from rankedin.schemas.stats import StatsResponse
from rankedin.services.stats import collect_stats

router = APIRouter(prefix="/api", tags=["stats"])


@router.get("/stats", response_model=StatsResponse)
async def get_stats(db: DbSession) -> StatsResponse:
    return StatsResponse.model_validate(await collect_stats(db))
