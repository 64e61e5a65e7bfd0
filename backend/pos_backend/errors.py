"""
Error taxonomy shared by services and routes.

Services raise a ServiceError subclass tagged with an ErrorKind; routes switch
on the kind to pick the HTTP status. Message text is for humans only and is
never used for dispatch.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    INTERNAL = "internal"


class ServiceError(Exception):
    """Raised for service operation errors."""
    def __init__(self, message: str, kind: ErrorKind = ErrorKind.INVALID_INPUT, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.details = details or {}

    def __repr__(self) -> str:
        return f"<{type(self).__name__} kind={self.kind.value} message={self.message!r}>"


# Sale endpoint mapping. Forbidden and Conflict are business-rule rejections
# the client can fix, so they answer 400. NotFound keeps the generic 500 the
# sale endpoint has always returned for a missing product.
SALE_HTTP_STATUS = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.FORBIDDEN: 400,
    ErrorKind.CONFLICT: 400,
    ErrorKind.NOT_FOUND: 500,
    ErrorKind.INTERNAL: 500,
}

# Read endpoints use the conventional mapping.
DEFAULT_HTTP_STATUS = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}


class SaleError(ServiceError):
    """Raised for sale operation errors."""


class NotificationError(ServiceError):
    """Raised for notification operation errors."""
