"""Cached async GitHub REST transport using httpx + cachetools."""

import hashlib
import json
import logging
import time

import httpx
from cachetools import LRUCache, TTLCache

from .cancellation import CancellationContext
from .credentials import TOKEN_KEY, CredentialStore, MemoryCredentialStore
from .errors import (
    ForbiddenError,
    GitHubError,
    NetworkError,
    NotFoundError,
    RateLimitedError,
    UnauthorizedError,
    UnavailableError,
    UnprocessableError,
)
from .models import ApiResponse
from .rate_limit import DEFAULT_RESET_WAIT, RateLimitState

logger = logging.getLogger(__name__)

API_BASE = "https://api.github.com"
API_VERSION = "2022-11-28"
DEFAULT_TIMEOUT = 10.0
DEFAULT_TTL = 300.0
DEFAULT_MAXSIZE = 256


def cache_key(method: str, url: str, params: dict | None = None) -> str:
    """Generate cache key for an API call."""
    raw = f"{method.upper()}|{url}|{json.dumps(params or {}, sort_keys=True, default=str)}"
    return hashlib.sha256(raw.encode()).hexdigest()[:16]


def _is_cacheable(status: int) -> bool:
    return 200 <= status < 400


class GitHubTransport:
    """Thin cached client for the GitHub REST endpoints used by user search.

    GET responses are cached per call TTL. Once an entry expires its ETag is
    still remembered, so the next request is conditional and a 304 reuses
    the old body.
    """

    def __init__(
        self,
        credentials: CredentialStore | None = None,
        base_url: str = API_BASE,
        timeout: float = DEFAULT_TIMEOUT,
        cache_maxsize: int = DEFAULT_MAXSIZE,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.credentials = credentials or MemoryCredentialStore()
        self.base_url = base_url.rstrip("/")
        self._cache_maxsize = cache_maxsize
        self._caches: dict[float, TTLCache] = {}
        self._etags: LRUCache = LRUCache(maxsize=cache_maxsize)
        self._client = httpx.AsyncClient(
            transport=http_transport,
            headers={
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": API_VERSION,
            },
            timeout=timeout,
        )
        self.requests = 0
        self.cache_hits = 0

    def _cache_for(self, ttl: float) -> TTLCache:
        cache = self._caches.get(ttl)
        if cache is None:
            cache = self._caches[ttl] = TTLCache(maxsize=self._cache_maxsize, ttl=ttl)
        return cache

    def _url(self, endpoint: str) -> str:
        ep = endpoint if endpoint.startswith("/") else f"/{endpoint}"
        return f"{self.base_url}{ep}"

    def _auth_headers(self) -> dict:
        token = self.credentials.get(TOKEN_KEY)
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    async def get(
        self,
        endpoint: str,
        params: dict | None = None,
        context: CancellationContext | None = None,
        ttl: float = DEFAULT_TTL,
    ) -> ApiResponse:
        """Make a GitHub REST API GET call.

        Args:
            endpoint: API path, e.g. "users/octocat"
            params: Query parameters dict
            context: Cancellation context the request belongs to
            ttl: Cache lifetime in seconds for this response

        Returns:
            ApiResponse with status, body, headers of interest and rate limit snapshot.

        Raises:
            GitHubError subclasses for HTTP and network failures,
            RequestCancelled if the context is cancelled.
        """
        context = context or CancellationContext()
        context.check()

        url = self._url(endpoint)
        key = cache_key("GET", url, params)

        cached = self._cache_for(ttl).get(key)
        if cached is not None:
            self.cache_hits += 1
            logger.debug("Cache hit for %s", url)
            return ApiResponse(
                status=cached.status,
                body=cached.body,
                etag=cached.etag,
                link=cached.link,
                from_cache=True,
            )

        headers = self._auth_headers()
        remembered = self._etags.get(key)
        if remembered is not None:
            headers["If-None-Match"] = remembered[0]
            logger.debug("Conditional request for %s (etag %s)", url, remembered[0])

        resp = await context.run(self._send(url, params, headers))
        rate_limit = RateLimitState.from_headers(resp.headers)

        if resp.status_code == 304 and remembered is not None:
            response = ApiResponse(
                status=304,
                body=remembered[1],
                etag=remembered[0],
                link=resp.headers.get("link"),
                rate_limit=rate_limit,
                not_modified=True,
            )
            self._cache_for(ttl)[key] = response
            return response

        if not (200 <= resp.status_code < 300):
            self._raise_for_status(resp, rate_limit)

        response = ApiResponse(
            status=resp.status_code,
            body=resp.json() if resp.content else {},
            etag=resp.headers.get("etag"),
            link=resp.headers.get("link"),
            rate_limit=rate_limit,
        )
        if _is_cacheable(response.status):
            self._cache_for(ttl)[key] = response
            if response.etag:
                self._etags[key] = (response.etag, response.body)
        return response

    async def _send(self, url, params, headers) -> httpx.Response:
        self.requests += 1
        try:
            return await self._client.get(url, params=params, headers=headers)
        except (httpx.TimeoutException, httpx.TransportError) as e:
            logger.warning("No response from GitHub for %s: %s", url, e)
            raise NetworkError() from e

    def _raise_for_status(self, resp: httpx.Response, rate_limit: RateLimitState | None):
        status = resp.status_code
        message = _error_message(resp)

        if status == 401:
            logger.warning("GitHub rejected the access token, clearing it")
            self.credentials.set(TOKEN_KEY, "")
            raise UnauthorizedError(status=status)

        if status in (403, 429):
            exhausted = rate_limit is not None and rate_limit.remaining == 0
            if status == 429 or exhausted or "rate limit" in message.lower():
                raise RateLimitedError(_reset_time(resp, rate_limit), status=status)
            raise ForbiddenError(status=status)

        if status == 404:
            raise NotFoundError(status=status)
        if status == 422:
            raise UnprocessableError(status=status)
        if status >= 500:
            raise UnavailableError(status=status)

        # Client error without a dedicated kind
        raise GitHubError(f"GitHub API error {status}: {message}" if message else None, status=status)

    def clear_cache(self) -> None:
        for cache in self._caches.values():
            cache.clear()
        self._etags.clear()

    async def aclose(self):
        await self._client.aclose()


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json() if resp.content else {}
    except ValueError:
        return resp.text or ""
    if isinstance(body, dict):
        return str(body.get("message") or "")
    return ""


def _reset_time(resp: httpx.Response, rate_limit: RateLimitState | None) -> int:
    """Reset timestamp from headers, else now + retry-after, else a default wait."""
    if rate_limit is not None and rate_limit.reset:
        return rate_limit.reset
    wait = _parse_retry_after(resp)
    return int(time.time() + (wait if wait is not None else DEFAULT_RESET_WAIT))


def _parse_retry_after(resp: httpx.Response) -> float | None:
    val = resp.headers.get("retry-after")
    if val is None:
        return None
    try:
        return float(val)
    except ValueError:
        return None
