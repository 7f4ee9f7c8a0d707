"""Contribution endpoint.

POST /api/contribute -- add a GitHub user, repository or topic to its ranking
"""

from fastapi import APIRouter

from rankedin.dependencies import DbSession, GitHub
from rankedin.middleware.rate_limiter import WriteRateLimit
from rankedin.schemas.common import ErrorResponse
from rankedin.schemas.contribution import ContributionRequest, ContributionResponse
from rankedin.services.contribution import contribute

router = APIRouter(prefix="/api", tags=["contribute"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.post("/contribute", response_model=ContributionResponse, responses=ERROR_RESPONSES)
async def contribute_entity(
    body: ContributionRequest,
    db: DbSession,
    github: GitHub,
    _rate: WriteRateLimit,
) -> ContributionResponse:
    """Track a new entity and report its leaderboard position.

    409 if the identifier is already ranked (GitHub is not called), 404 if
    GitHub does not know the user or repository. Topics are stored even when
    the GitHub lookup fails, with zeroed metrics and rankInfo.degraded set.
    """
    result = await contribute(db, github, body.type, body.identifier)
    return ContributionResponse.from_result(result)
