"""Error kinds raised by the membership and invitation services.

Every client-facing failure is a ``FamilyError`` subclass with a stable
``code`` and HTTP status. Callers match on the class, never on the message.
"""

from fastapi import status


class FamilyError(Exception):
    """Base class for all client-facing domain errors."""

    code: str = "error"
    http_status: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request failed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_response(self) -> dict:
        return {"detail": self.message, "code": self.code}


class NotFound(FamilyError):
    """Referenced family, membership, invitation or user does not exist."""

    code = "not_found"
    http_status = status.HTTP_404_NOT_FOUND
    default_message = "Not found."


class Forbidden(FamilyError):
    """Caller lacks the required role or attempts a disallowed self-operation."""

    code = "forbidden"
    http_status = status.HTTP_403_FORBIDDEN
    default_message = "You do not have access to this family."


class Conflict(FamilyError):
    """Duplicate invitation or membership."""

    code = "conflict"
    http_status = status.HTTP_409_CONFLICT
    default_message = "Conflict."


class InvalidState(FamilyError):
    """Invitation is no longer pending."""

    code = "invalid_state"
    http_status = status.HTTP_409_CONFLICT
    default_message = "This invitation is no longer valid."


class Expired(FamilyError):
    """Invitation reached its expiry before it was accepted."""

    code = "expired"
    http_status = status.HTTP_410_GONE
    default_message = "This invitation has expired."


class QuorumViolation(RuntimeError):
    """A family with members was about to be left without an admin.

    Not a client error: reaching this means a guard upstream is missing, and
    the transaction is rolled back.
    """
