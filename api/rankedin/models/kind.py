import enum


class EntityKind(str, enum.Enum):
    user = "user"
    repo = "repo"
    topic = "topic"
