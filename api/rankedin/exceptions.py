"""Error taxonomy for the ranking API.

Every request-path failure is one of these. The exception handlers in
rankedin.middleware.exception_handlers render them into the shared
{"error": code, "message": text} envelope with the matching status code.
"""


class RankingError(Exception):
    """Base class for errors that map directly to an HTTP response."""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class BadRequestError(RankingError):
    """Malformed or missing input. Not retried."""

    status_code = 400
    code = "bad_request"


class NotFoundError(RankingError):
    """The entity is not tracked, or GitHub does not know the identifier."""

    status_code = 404
    code = "not_found"


class ConflictError(RankingError):
    """The identifier is already tracked in its ranking table."""

    status_code = 409
    code = "conflict"


class InternalError(RankingError):
    status_code = 500
    code = "internal_error"
