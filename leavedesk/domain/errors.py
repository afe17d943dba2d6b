"""Domain errors raised by the leave services."""

from __future__ import annotations


class LeaveDeskError(Exception):
    """Base class for domain errors."""


class InvalidDateRange(LeaveDeskError, ValueError):
    """A date could not be parsed, or a range is inverted."""


class UnknownSubject(LeaveDeskError, LookupError):
    """The owner of the request under evaluation is not a known user."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"Unknown user: {user_id}")
        self.user_id = user_id


class InvalidTransition(LeaveDeskError):
    """A status change was attempted from a terminal state."""


class AuthenticationError(LeaveDeskError):
    def __init__(self, detail: str, status_code: int) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code
