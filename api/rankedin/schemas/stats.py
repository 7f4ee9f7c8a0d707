from rankedin.schemas.common import CamelModel


class StatValue(CamelModel):
    value: str
    raw: int
    description: str


class StatsResponse(CamelModel):
    users_ranked: StatValue
    repositories: StatValue
    total_stars: StatValue
    active_topics: StatValue
    badge_requests: StatValue
    newsletter_subscribers: StatValue
