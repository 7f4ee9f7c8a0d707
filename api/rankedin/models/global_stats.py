from datetime import datetime

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

GLOBAL_STATS_ID = "global"


class GlobalStats(Base):
    """Singleton row of site-wide counters (id is always GLOBAL_STATS_ID).

    Counters are only ever bumped with a column expression UPDATE, never
    read-modify-written in Python.
    """

    __tablename__ = "global_stats"

    id: Mapped[str] = mapped_column(String(20), primary_key=True, default=GLOBAL_STATS_ID)
    total_badge_requests: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
