"""Embeddable rank badges.

GET /api/badges?username=...&style=default|flat|plastic&format=json|svg

format defaults to SVG when the Accept header asks for image/svg+xml and to
JSON otherwise. Every successful response bumps the global badge counter.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Header, Query
from fastapi.responses import JSONResponse, Response

from rankedin.config import settings
from rankedin.dependencies import DbSession
from rankedin.metrics import badges_rendered
from rankedin.schemas.badge import BadgeStatsResponse
from rankedin.schemas.common import ErrorResponse
from rankedin.services.badges import (
    BadgeFormat,
    BadgeStyle,
    get_badge_stats,
    record_badge_request,
    render_badge_svg,
    wants_svg,
)

router = APIRouter(prefix="/api", tags=["badges"])


def _badge_headers() -> dict[str, str]:
    return {
        "Cache-Control": f"public, max-age={settings.badge_cache_max_age}",
        "Access-Control-Allow-Origin": "*",
    }


@router.get(
    "/badges",
    response_model=BadgeStatsResponse,
    responses={
        200: {"content": {"image/svg+xml": {}}},
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def get_badge(
    db: DbSession,
    username: Optional[str] = None,
    name: Annotated[Optional[str], Query(description="Alias of username")] = None,
    style: BadgeStyle = BadgeStyle.default,
    format: Optional[BadgeFormat] = None,
    accept: Annotated[Optional[str], Header()] = None,
) -> Response:
    stats = await get_badge_stats(db, username or name)
    await record_badge_request(db)

    if wants_svg(format, accept):
        badges_rendered.labels(style=style.value, format="svg").inc()
        return Response(
            content=render_badge_svg(stats, style),
            media_type="image/svg+xml",
            headers=_badge_headers(),
        )

    badges_rendered.labels(style=style.value, format="json").inc()
    body = BadgeStatsResponse.model_validate(stats)
    return JSONResponse(
        content=body.model_dump(mode="json", by_alias=True),
        headers=_badge_headers(),
    )
