"""Data models and constants for GitHub user search."""

from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any

from .errors import ErrorKind, GitHubError
from .rate_limit import RateLimitState

GITHUB_SEARCH_RESULT_LIMIT = 1000  # GitHub Search API serves at most 1000 results per query
MAX_PER_PAGE = 100
DEFAULT_PER_PAGE = 10


class SortKey(str, Enum):
    RELEVANCE = "relevance"
    FOLLOWERS = "followers"
    REPOSITORIES = "repositories"
    JOINED = "joined"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


# camelCase keys accepted from UI callers
_CAMEL_KEYS = {
    "minRepos": "min_repos",
    "maxRepos": "max_repos",
    "minFollowers": "min_followers",
    "maxFollowers": "max_followers",
    "accountType": "account_type",
    "perPage": "per_page",
    "type": "account_type",
}


def _to_int(value, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


@dataclass
class SearchParameters:
    """Caller-supplied filters for a user search.

    Filter fields are kept as given; the query builder drops malformed ones.
    Paging and sorting fields are normalized on construction.
    """

    username: str | None = None
    location: str | None = None
    company: str | None = None
    min_repos: Any = None
    max_repos: Any = None
    min_followers: Any = None
    max_followers: Any = None
    language: str | None = None
    created: str | None = None
    account_type: str | None = None
    hireable: bool | None = None
    page: int = 1
    per_page: int = DEFAULT_PER_PAGE
    sort: SortKey = SortKey.FOLLOWERS
    order: SortOrder = SortOrder.DESC

    def __post_init__(self):
        self.page = max(1, _to_int(self.page, 1))
        self.per_page = min(MAX_PER_PAGE, max(1, _to_int(self.per_page, DEFAULT_PER_PAGE)))
        try:
            self.sort = SortKey(self.sort)
        except ValueError:
            self.sort = SortKey.FOLLOWERS
        try:
            self.order = SortOrder(self.order)
        except ValueError:
            self.order = SortOrder.DESC

    @classmethod
    def from_dict(cls, data: dict) -> "SearchParameters":
        """Build parameters from snake_case or camelCase keys, ignoring unknown ones."""
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            name = _CAMEL_KEYS.get(key, key)
            if name in known and value is not None:
                kwargs[name] = value
        return cls(**kwargs)

    def request_params(self, query: str) -> dict:
        """Query-string parameters for the search endpoint."""
        params = {"q": query, "page": self.page, "per_page": self.per_page}
        if self.sort is not SortKey.RELEVANCE:
            params["sort"] = self.sort.value
            params["order"] = self.order.value
        return params


@dataclass
class UserSummary:
    """Lightweight user record from the search endpoint."""

    id: int
    login: str
    avatar_url: str | None = None
    html_url: str | None = None
    type: str | None = None
    score: float | None = None

    @classmethod
    def from_api(cls, item: dict) -> "UserSummary":
        return cls(
            id=item["id"],
            login=item["login"],
            avatar_url=item.get("avatar_url"),
            html_url=item.get("html_url"),
            type=item.get("type"),
            score=item.get("score"),
        )


_PROFILE_FIELDS = (
    "name",
    "bio",
    "company",
    "location",
    "blog",
    "email",
    "twitter_username",
    "public_repos",
    "public_gists",
    "followers",
    "following",
    "hireable",
    "created_at",
    "updated_at",
)


@dataclass
class UserProfile(UserSummary):
    """Full user record, or a summary that could not be enriched."""

    name: str | None = None
    bio: str | None = None
    company: str | None = None
    location: str | None = None
    blog: str | None = None
    email: str | None = None
    twitter_username: str | None = None
    public_repos: int | None = None
    public_gists: int | None = None
    followers: int | None = None
    following: int | None = None
    hireable: bool | None = None
    created_at: str | None = None
    updated_at: str | None = None
    details_available: bool = True

    @classmethod
    def from_api(cls, item: dict) -> "UserProfile":
        base = UserSummary.from_api(item)
        return cls(**asdict(base), **{name: item.get(name) for name in _PROFILE_FIELDS})

    @classmethod
    def from_summary(cls, summary: UserSummary) -> "UserProfile":
        """Degrade a summary to the profile shape, flagged as missing details."""
        return cls(**asdict(summary), details_available=False)

    @classmethod
    def merge(cls, summary: UserSummary, detail: dict) -> "UserProfile":
        """Overlay a detail record onto its search summary."""
        return cls.from_api({**asdict(summary), **detail})


@dataclass
class SearchResultPage:
    items: list[UserProfile]
    total_count: int
    page: int
    per_page: int
    has_more: bool
    rate_limit: RateLimitState
    incomplete_results: bool = False


def has_more_pages(page: int, per_page: int, total_count: int) -> bool:
    """Whether another page can be requested, honoring the search result cap."""
    # GitHub answers 422 for any page past the 1000th result
    return page * per_page < min(total_count, GITHUB_SEARCH_RESULT_LIMIT)


@dataclass
class ApiResponse:
    """Response from the GitHub REST transport."""

    status: int
    body: dict | list
    etag: str | None = None
    link: str | None = None
    rate_limit: RateLimitState | None = None
    from_cache: bool = False
    not_modified: bool = False


@dataclass
class Result:
    """Outcome of a public operation: data on success, a message on failure.

    A cancelled outcome carries neither data nor an error message so callers
    can treat it as a silent no-op; check ``cancelled`` to tell it apart.
    """

    data: Any = None
    error: str | None = None
    kind: ErrorKind | None = field(default=None)

    @property
    def ok(self) -> bool:
        return self.kind is None

    @property
    def cancelled(self) -> bool:
        return self.kind is ErrorKind.CANCELLED

    @classmethod
    def success(cls, data) -> "Result":
        return cls(data=data)

    @classmethod
    def failure(cls, error: GitHubError) -> "Result":
        if error.kind is ErrorKind.CANCELLED:
            return cls(kind=ErrorKind.CANCELLED)
        return cls(error=error.message, kind=error.kind)

    def to_dict(self) -> dict:
        data = asdict(self.data) if hasattr(self.data, "__dataclass_fields__") else self.data
        return {"data": data, "error": self.error}
