"""Error taxonomy shared by the orchestration layer and its collaborators.

Every failure carries a stable ``kind`` and a human-readable message. The HTTP
layer maps kinds to status codes; internal causes stay on ``__cause__`` and are
only logged.
"""

from __future__ import annotations

from typing import Any


class FacultyDeskError(Exception):
    """Base class for all domain failures."""

    kind = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class Unauthenticated(FacultyDeskError):
    """Raised when the caller identity is missing or invalid."""

    kind = "unauthenticated"


class Forbidden(FacultyDeskError):
    """Raised when the caller's role lacks the required capability."""

    kind = "forbidden"


class InvalidInput(FacultyDeskError):
    """Raised when required fields are missing or malformed."""

    kind = "invalid_input"

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class NotFound(FacultyDeskError):
    """Raised when a referenced record does not exist."""

    kind = "not_found"


class StorageFailure(FacultyDeskError):
    """Raised when the persistence layer rejects an operation."""

    kind = "storage_failure"


class DeliveryFailure(FacultyDeskError):
    """Raised by a dispatcher when a single notification cannot be delivered."""

    kind = "delivery_failure"

    def __init__(self, message: str, recipient: str | None = None) -> None:
        super().__init__(message)
        self.recipient = recipient
