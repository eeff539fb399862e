from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of outcomes a driver error is reduced to."""

    UNIQUE_VIOLATION = "unique_violation"
    NOT_FOUND = "not_found"
    OTHER = "other"
