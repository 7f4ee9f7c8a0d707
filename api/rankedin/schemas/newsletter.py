import re
import uuid
from datetime import datetime

from pydantic import field_validator

from rankedin.schemas.common import CamelModel

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class NewsletterSubscribe(CamelModel):
    email: str

    @field_validator("email")
    @classmethod
    def email_format(cls, value: str) -> str:
        value = value.strip().lower()
        if not _EMAIL_PATTERN.match(value):
            raise ValueError("Invalid email format")
        return value


class SubscriberResponse(CamelModel):
    id: uuid.UUID
    email: str
    subscribed_at: datetime


class NewsletterSubscribeResponse(CamelModel):
    message: str
    subscriber: SubscriberResponse


class SubscriberCountResponse(CamelModel):
    count: int
