"""Domain errors mapped to HTTP responses by the API layer."""


class ActivityError(Exception):
    """Base class for meeting activity errors."""


class AuthenticationRequired(ActivityError):
    """Raised when a protected operation has no authenticated user."""

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)


class ValidationError(ActivityError):
    """Raised when an activity is missing required or valid fields."""


class ActiveMeetingConflict(ActivityError):
    """Raised when a snapshot targets a meeting tracked by a live connection."""


class PersistenceError(ActivityError):
    """Raised when the activity store cannot complete a read or write."""
