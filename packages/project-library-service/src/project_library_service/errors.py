"""Domain error taxonomy.

Services and auth dependencies raise these; the REST layer turns them into
``{"detail": ..., "code": ...}`` responses (see ``rest/errors.py``).
"""

from __future__ import annotations


class DomainError(Exception):
    status_code = 500
    code = "SERVER_ERROR"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(DomainError):
    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "Authentication required"


class Forbidden(DomainError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "Access denied"


class NotFound(DomainError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"


class BadRequest(DomainError):
    status_code = 400
    code = "BAD_REQUEST"
    default_message = "Bad request"


class Conflict(DomainError):
    status_code = 409
    code = "CONFLICT"
    default_message = "Conflict"


class ServerError(DomainError):
    pass
