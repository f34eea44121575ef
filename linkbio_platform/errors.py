"""
Error kinds for Linkbio Platform.

Every failure the core reports belongs to one of four kinds:

- NotFound: a user, link or username does not resolve. Not retried.
- ValidationError: missing required field or malformed input. Never retried.
- ConflictError: another writer saved the same user aggregate in between our
  read and our write. The caller may retry the whole operation with fresh state.
- PersistenceError: the underlying store is unavailable. Fatal for the request.

Managers raise these exceptions; the service facade turns them into tagged
results and the HTTP layer maps them to status codes.
"""

from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    VALIDATION = "validation_error"
    CONFLICT = "conflict"
    PERSISTENCE = "persistence_error"


class LinkbioError(Exception):
    """Base class for all domain errors."""

    kind: ErrorKind = ErrorKind.PERSISTENCE

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(LinkbioError):
    kind = ErrorKind.NOT_FOUND


class ValidationError(LinkbioError):
    kind = ErrorKind.VALIDATION


class ConflictError(LinkbioError):
    kind = ErrorKind.CONFLICT


class PersistenceError(LinkbioError):
    kind = ErrorKind.PERSISTENCE
