"""Search GitHub users and enrich results with full profiles.

Queries are built from structured filters, search pages are enriched in
throttled batches, and responses are cached in memory while the client tracks
GitHub's rate limit.
"""

from .cli import main
from .client import UserSearchClient, cancel_all_requests, fetch_user_data, search_users
from .errors import ErrorKind
from .models import Result, SearchParameters, SearchResultPage, UserProfile, UserSummary
from .query import build_query
from .rate_limit import RateLimitState

__all__ = [
    "main",
    "UserSearchClient",
    "cancel_all_requests",
    "fetch_user_data",
    "search_users",
    "build_query",
    "ErrorKind",
    "RateLimitState",
    "Result",
    "SearchParameters",
    "SearchResultPage",
    "UserProfile",
    "UserSummary",
]

if __name__ == "__main__":
    main()
