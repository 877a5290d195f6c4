# courier_hub/core/errors.py
"""
Error taxonomy shared by every service.

Services raise ``ServiceError`` subclasses; the single boundary translator in
``courier_hub.core.middleware`` turns them into ``{"error": message}``
responses with the status code mapped from ``ErrorKind``.
"""
from enum import Enum
from typing import Dict


class ErrorKind(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    CONFLICT = "conflict"
    INTERNAL = "internal"


STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}


class ServiceError(Exception):
    kind: ErrorKind = ErrorKind.INTERNAL
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]

    def to_dict(self) -> Dict[str, str]:
        return {"error": self.message, "error_code": self.kind.value}


class Unauthenticated(ServiceError):
    kind = ErrorKind.UNAUTHENTICATED
    default_message = "Could not validate credentials"


class Forbidden(ServiceError):
    kind = ErrorKind.FORBIDDEN
    default_message = "Forbidden access"


class NotFound(ServiceError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Resource not found"


class InvalidInput(ServiceError):
    kind = ErrorKind.INVALID_INPUT
    default_message = "Invalid input"


class Conflict(ServiceError):
    kind = ErrorKind.CONFLICT
    default_message = "Conflicting state"


class InternalError(ServiceError):
    kind = ErrorKind.INTERNAL
