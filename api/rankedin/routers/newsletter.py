"""Newsletter sign-up.

POST /api/newsletter/subscribe -- subscribe (or reactivate) an email address
GET  /api/newsletter/subscribe -- number of active subscribers
"""

from fastapi import APIRouter
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from rankedin.dependencies import DbSession
from rankedin.exceptions import ConflictError
from rankedin.middleware.rate_limiter import WriteRateLimit
from rankedin.models import NewsletterSubscriber
from rankedin.schemas.common import ErrorResponse
from rankedin.schemas.newsletter import (
    NewsletterSubscribe,
    NewsletterSubscribeResponse,
    SubscriberCountResponse,
    SubscriberResponse,
)

router = APIRouter(prefix="/api/newsletter", tags=["newsletter"])


@router.post(
    "/subscribe",
    response_model=NewsletterSubscribeResponse,
    status_code=201,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def subscribe(
    body: NewsletterSubscribe,
    db: DbSession,
    _rate: WriteRateLimit,
) -> NewsletterSubscribeResponse:
    result = await db.execute(
        select(NewsletterSubscriber).where(NewsletterSubscriber.email == body.email)
    )
    subscriber = result.scalar_one_or_none()
    if subscriber is not None and subscriber.is_active:
        raise ConflictError("Email is already subscribed")

    if subscriber is None:
        subscriber = NewsletterSubscriber(email=body.email)
        db.add(subscriber)
        message = "Successfully subscribed to newsletter"
    else:
        subscriber.is_active = True
        subscriber.unsubscribed_at = None
        message = "Subscription reactivated"

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Email is already subscribed")
    await db.refresh(subscriber)

    return NewsletterSubscribeResponse(
        message=message,
        subscriber=SubscriberResponse.model_validate(subscriber),
    )


@router.get("/subscribe", response_model=SubscriberCountResponse)
async def subscriber_count(db: DbSession) -> SubscriberCountResponse:
    result = await db.execute(
        select(func.count())
        .select_from(NewsletterSubscriber)
        .where(NewsletterSubscriber.is_active.is_(True))
    )
    return SubscriberCountResponse(count=result.scalar_one())
