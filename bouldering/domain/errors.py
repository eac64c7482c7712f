"""
Domain Errors

Architectural Intent:
- Single error hierarchy for all bouldering layers
- Errors carry the HTTP status the presentation layer should report
- Infrastructure and application code raise; only presentation translates
"""

from typing import Optional


class BoulderingError(Exception):
    """Base error for the bouldering backend."""

    status_code: int = 500
    code: Optional[str] = None

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code


class TweetNotFoundError(BoulderingError):
    status_code = 404
    code = "TWEET_NOT_FOUND"


class TweetPermissionError(BoulderingError):
    status_code = 403
    code = "TWEET_FORBIDDEN"


class TweetMediaNotFoundError(BoulderingError):
    status_code = 404
    code = "MEDIA_NOT_FOUND"


class InvalidStoragePrefixError(BoulderingError):
    status_code = 400
    code = "INVALID_PREFIX"


class AuthenticationError(BoulderingError):
    status_code = 401
    code = "UNAUTHENTICATED"


class TaskQueueConfigError(BoulderingError):
    """Raised when Cloud Tasks settings are incomplete."""

    code = "TASK_QUEUE_CONFIG"


class UnknownEventTypeError(BoulderingError):
    """Raised when an event payload names a type outside the closed set."""

    code = "UNKNOWN_EVENT_TYPE"
