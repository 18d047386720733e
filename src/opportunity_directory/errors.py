"""Error taxonomy shared by services, the SQLite backend and the CLI.

Every error carries a short ``user_message`` that is safe to show to end users;
raw backend text stays in the exception chain and the logs.
"""

from typing import Iterable, Optional


class DirectoryError(Exception):
    """Base class for all expected failures."""

    user_message = "Something went wrong. Please try again."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.user_message)


class ValidationError(DirectoryError):
    """Bad input shape or values. The caller fixes the input and resubmits."""

    user_message = "Please check the highlighted fields and try again."

    def __init__(self, fields: Iterable[str], details: Optional[Iterable[str]] = None):
        self.fields = list(dict.fromkeys(fields))
        self.details = list(details or [])
        summary = "; ".join(self.details) if self.details else ", ".join(self.fields)
        super().__init__(f"Invalid input: {summary}")


class InvalidTransition(ValidationError):
    """Moderation transition not allowed from the record's current status."""

    user_message = "This opportunity can no longer be moved to that status."

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(["status"], [f"cannot move from {current} to {target}"])


class Forbidden(DirectoryError):
    """Role check failed. Never retried."""

    user_message = "You don't have permission to do that."


class Unauthenticated(Forbidden):
    """No resolved identity where one is required."""

    user_message = "Please log in to continue."


class NotFound(DirectoryError):
    """Id absent or not visible to the caller; the two cases are indistinguishable."""

    user_message = "Opportunity not found."


class ProfileNotFound(NotFound):
    """No profile for the given user id."""

    user_message = "Profile not found."


class Transient(DirectoryError):
    """Backend unreachable or timed out. Safe to retry."""

    user_message = "The service is temporarily unavailable. Please try again."


def describe_error(exc: BaseException) -> str:
    """Human-readable message for any failure; never the raw backend string."""
    if isinstance(exc, ValidationError):
        if exc.details:
            return f"{exc.user_message} ({'; '.join(exc.details)})"
        if exc.fields:
            return f"{exc.user_message} ({', '.join(exc.fields)})"
    if isinstance(exc, DirectoryError):
        return exc.user_message
    return DirectoryError.user_message
