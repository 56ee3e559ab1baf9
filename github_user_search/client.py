"""Public entry points: user lookup, user search and cancellation."""

import logging

from .cancellation import CancellationContext
from .credentials import CredentialStore, default_store
from .enrich import DetailFetcher, user_endpoint
from .errors import ErrorKind, GitHubError, NotFoundError, RateLimitedError, ValidationError
from .models import Result, SearchParameters, SearchResultPage, UserProfile, UserSummary, has_more_pages
from .query import build_query
from .rate_limit import CORE_RESOURCE, SEARCH_RESOURCE, BatchThrottle, RateLimitState
from .settings import Settings, get_settings
from .transport import GitHubTransport

logger = logging.getLogger(__name__)

SEARCH_ENDPOINT = "/search/users"
UNFILTERED_QUERY = "type:user"
DEFAULT_CANCEL_REASON = "Request cancelled by user"


class UserSearchClient:
    """Searches GitHub users and fetches profiles.

    Public methods never raise for API failures; they return a ``Result``.
    The client owns the latest rate limit snapshot per GitHub quota (search
    and core are separate windows) and the cancellation context of the
    current session.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: GitHubTransport | None = None,
        credentials: CredentialStore | None = None,
        throttle: BatchThrottle | None = None,
    ):
        self.settings = settings or get_settings()
        self.transport = transport or GitHubTransport(
            credentials=credentials or default_store(self.settings),
            base_url=self.settings.github_api_url,
            timeout=self.settings.request_timeout,
            cache_maxsize=self.settings.cache_maxsize,
        )
        self.details = DetailFetcher(
            self.transport,
            max_users=self.settings.enrich_max_users,
            throttle=throttle
            or BatchThrottle(self.settings.enrich_batch_size, self.settings.enrich_batch_delay),
            rate_limit_buffer=self.settings.enrich_rate_limit_buffer,
            ttl=self.settings.profile_cache_ttl,
        )
        self.rate_limits: dict[str, RateLimitState] = {}
        self.rate_limit = RateLimitState()
        self._session = CancellationContext()

    @property
    def session(self) -> CancellationContext:
        return self._session

    def _update_rate_limit(self, state: RateLimitState | None, resource: str) -> None:
        """Record ``state`` under its own resource, or ``resource`` if GitHub sent none."""
        if state is not None:
            self.rate_limits[state.resource or resource] = state
            self.rate_limit = state

    def _preflight(self) -> None:
        state = self.rate_limits.get(SEARCH_RESOURCE)
        if state is not None and state.is_low(0):
            raise RateLimitedError(state.estimated_reset())

    async def fetch_user_data(self, username: str) -> Result:
        """Fetch a single user's profile."""
        if not isinstance(username, str) or not username.strip():
            return Result.failure(ValidationError("Please enter a valid GitHub username."))
        username = username.strip()
        context = self._session

        try:
            response = await self.transport.get(
                user_endpoint(username), context=context, ttl=self.settings.profile_cache_ttl
            )
            self._update_rate_limit(response.rate_limit, CORE_RESOURCE)
            return Result.success(UserProfile.from_api(response.body))
        except NotFoundError:
            return Result(error=f"User '{username}' not found.", kind=ErrorKind.NOT_FOUND)
        except GitHubError as e:
            return self._failure(e, "fetch user", username, CORE_RESOURCE)
        except (ValueError, KeyError, TypeError):
            logger.exception("Unexpected user payload for %s", username)
            return Result.failure(GitHubError())

    async def search_users(self, params: SearchParameters | dict) -> Result:
        """Search users and enrich the page with profile details."""
        if isinstance(params, dict):
            params = SearchParameters.from_dict(params)

        query = build_query(params)
        if not query:
            if not self.settings.allow_unfiltered_search:
                return Result.failure(ValidationError("At least one search parameter is required."))
            query = UNFILTERED_QUERY

        if self.settings.cancel_previous_search:
            self.cancel_all_requests("Superseded by a new search")
        context = self._session

        try:
            self._preflight()
            response = await self.transport.get(
                SEARCH_ENDPOINT,
                params=params.request_params(query),
                context=context,
                ttl=self.settings.search_cache_ttl,
            )
            self._update_rate_limit(response.rate_limit, SEARCH_RESOURCE)

            body = response.body
            summaries = [UserSummary.from_api(item) for item in body.get("items", [])]
            total_count = int(body.get("total_count", 0))

            core = self.rate_limits.get(CORE_RESOURCE)
            items, state = await self.details.enrich(summaries, context, core)
            if state is not core:
                self._update_rate_limit(state, CORE_RESOURCE)

            page = SearchResultPage(
                items=items,
                total_count=total_count,
                page=params.page,
                per_page=params.per_page,
                has_more=has_more_pages(params.page, params.per_page, total_count),
                rate_limit=self.rate_limit,
                incomplete_results=bool(body.get("incomplete_results", False)),
            )
            logger.debug("Search %r returned %d of %d users", query, len(items), total_count)
            return Result.success(page)
        except GitHubError as e:
            return self._failure(e, "search", query, SEARCH_RESOURCE)
        except (ValueError, KeyError, TypeError, AttributeError):
            logger.exception("Unexpected search payload for %r", query)
            return Result.failure(GitHubError())

    def _failure(self, error: GitHubError, action: str, subject: str, resource: str) -> Result:
        if error.kind is ErrorKind.CANCELLED:
            logger.debug("%s %r cancelled: %s", action, subject, error.message)
        else:
            logger.info("%s %r failed (%s): %s", action, subject, error.kind.value, error.message)
        if isinstance(error, RateLimitedError):
            known = self.rate_limits.get(resource) or RateLimitState(resource=resource)
            self._update_rate_limit(
                RateLimitState(
                    limit=known.limit,
                    remaining=0,
                    used=known.limit,
                    reset=error.reset,
                    resource=known.resource or resource,
                ),
                resource,
            )
        return Result.failure(error)

    def cancel_all_requests(self, reason: str = DEFAULT_CANCEL_REASON) -> None:
        """Abort every request of the current session and start a new one."""
        self._session.cancel(reason)
        self._session = CancellationContext()

    async def aclose(self):
        self.cancel_all_requests("Client closed")
        await self.transport.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()


# Client instances keyed by settings identity
_clients: dict[int, UserSearchClient] = {}


def get_default_client(settings: Settings | None = None) -> UserSearchClient:
    """Get or create the shared client for the given settings."""
    settings = settings or get_settings()
    key = id(settings)
    if key not in _clients:
        _clients[key] = UserSearchClient(settings)
    return _clients[key]


async def fetch_user_data(username: str) -> Result:
    return await get_default_client().fetch_user_data(username)


async def search_users(params: SearchParameters | dict) -> Result:
    return await get_default_client().search_users(params)


def cancel_all_requests(reason: str = DEFAULT_CANCEL_REASON) -> None:
    get_default_client().cancel_all_requests(reason)
