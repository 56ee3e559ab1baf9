"""Error taxonomy for GitHub user search.

Every failure the client can report is a ``GitHubError`` subclass carrying an
``ErrorKind`` and a user-facing message. ``UserSearchClient`` catches these at
the public boundary and turns them into ``Result`` values.
"""

from datetime import datetime
from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    FORBIDDEN = "forbidden"
    UNAUTHORIZED = "unauthorized"
    UNPROCESSABLE = "unprocessable"
    UNAVAILABLE = "unavailable"
    NETWORK = "network"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


class GitHubError(Exception):
    """Base class for errors reported by the search client."""

    kind = ErrorKind.UNKNOWN
    default_message = "An error occurred while talking to GitHub. Please try again later."

    def __init__(self, message: str | None = None, status: int | None = None):
        self.message = message or self.default_message
        self.status = status
        super().__init__(self.message)


class ValidationError(GitHubError):
    kind = ErrorKind.VALIDATION
    default_message = "Invalid input."


class NotFoundError(GitHubError):
    kind = ErrorKind.NOT_FOUND
    default_message = "The requested resource was not found."


class RateLimitedError(GitHubError):
    """Quota exhausted, either reported by GitHub or predicted from headers."""

    kind = ErrorKind.RATE_LIMITED

    def __init__(self, reset: int, status: int | None = None):
        self.reset = reset
        super().__init__(rate_limit_message(reset), status=status)

    @property
    def reset_at(self) -> datetime:
        return datetime.fromtimestamp(self.reset)


class ForbiddenError(GitHubError):
    kind = ErrorKind.FORBIDDEN
    default_message = "Access forbidden. Check your permissions or access token."


class UnauthorizedError(GitHubError):
    kind = ErrorKind.UNAUTHORIZED
    default_message = "Authentication failed. The stored access token was cleared."


class UnprocessableError(GitHubError):
    kind = ErrorKind.UNPROCESSABLE
    default_message = "Invalid search query. Please adjust your search criteria."


class UnavailableError(GitHubError):
    kind = ErrorKind.UNAVAILABLE
    default_message = "GitHub is temporarily unavailable. Please try again later."


class NetworkError(GitHubError):
    kind = ErrorKind.NETWORK
    default_message = (
        "Network error: no response from GitHub. Please check your internet connection."
    )


class RequestCancelled(GitHubError):
    """Raised when a request's cancellation context is cancelled."""

    kind = ErrorKind.CANCELLED

    def __init__(self, reason: str | None = None):
        self.reason = reason or "Request cancelled"
        super().__init__(self.reason)


def rate_limit_message(reset: int) -> str:
    """Format the user-facing rate limit message for a reset epoch."""
    reset_time = datetime.fromtimestamp(reset).strftime("%H:%M:%S")
    return f"API rate limit exceeded. Please try again after {reset_time}."
