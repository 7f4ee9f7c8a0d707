import re

from rankedin.exceptions import BadRequestError

INVALID_REPOSITORY_MESSAGE = "Valid repository full name (owner/repo) is required"

# GitHub logins: alphanumerics and single hyphens, max 39 chars, no leading hyphen
_USERNAME_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]{0,38}$")
# GitHub topics: lowercase alphanumerics and hyphens, max 50 chars
_TOPIC_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]{0,49}$")


def normalize_username(raw: str) -> str:
    """Canonical form of a GitHub username.

    Every code path that stores or looks up a RankedUser goes through this,
    so the unique index on username is effectively case-insensitive.
    """
    return raw.strip().lower()


def validate_username(normalized: str) -> bool:
    return bool(_USERNAME_PATTERN.match(normalized))


def parse_username(raw: str) -> str:
    username = normalize_username(raw or "")
    if not validate_username(username):
        raise BadRequestError("A valid GitHub username is required")
    return username


def parse_repository_full_name(raw: str) -> tuple[str, str]:
    """Split "owner/name" into its two segments.

    Raises BadRequestError unless there are exactly two non-empty segments.
    Case is preserved; GitHub resolves owner/name case-insensitively.
    """
    parts = (raw or "").strip().split("/")
    if len(parts) != 2:
        raise BadRequestError(INVALID_REPOSITORY_MESSAGE)
    owner, name = (part.strip() for part in parts)
    if not owner or not name:
        raise BadRequestError(INVALID_REPOSITORY_MESSAGE)
    return owner, name


def normalize_topic(raw: str) -> str:
    return raw.strip().lower()


def parse_topic(raw: str) -> str:
    topic = normalize_topic(raw or "")
    if not _TOPIC_PATTERN.match(topic):
        raise BadRequestError(
            "A valid topic name is required (lowercase letters, numbers and hyphens)"
        )
    return topic
