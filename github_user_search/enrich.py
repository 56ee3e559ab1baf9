"""Enrich search hits with full user profiles in throttled batches."""

import asyncio
import dataclasses
import logging
from urllib.parse import quote

from .cancellation import CancellationContext
from .errors import GitHubError, RateLimitedError, RequestCancelled
from .models import UserProfile, UserSummary
from .rate_limit import BatchThrottle, RateLimitState

logger = logging.getLogger(__name__)

DEFAULT_MAX_USERS = 30
DEFAULT_BATCH_SIZE = 3
DEFAULT_BATCH_DELAY = 1.0
DEFAULT_RATE_LIMIT_BUFFER = 5
DEFAULT_PROFILE_TTL = 120.0


def user_endpoint(login: str) -> str:
    return f"/users/{quote(login, safe='')}"


class DetailFetcher:
    """Best-effort profile enrichment.

    Output always has the same length and order as the input. Users whose
    details could not be fetched (error, rate limit, over the cap) come back
    as their summary with ``details_available=False``.
    """

    def __init__(
        self,
        transport,
        max_users: int = DEFAULT_MAX_USERS,
        throttle: BatchThrottle | None = None,
        rate_limit_buffer: int = DEFAULT_RATE_LIMIT_BUFFER,
        ttl: float = DEFAULT_PROFILE_TTL,
    ):
        self.transport = transport
        self.max_users = max_users
        self.throttle = throttle or BatchThrottle(DEFAULT_BATCH_SIZE, DEFAULT_BATCH_DELAY)
        self.rate_limit_buffer = rate_limit_buffer
        self.ttl = ttl

    async def enrich(
        self,
        users: list[UserSummary],
        context: CancellationContext,
        rate_limit: RateLimitState | None = None,
    ) -> tuple[list[UserProfile], RateLimitState | None]:
        """Fetch profiles for ``users``.

        Returns the enriched list and the rate limit state after the last
        response seen. Raises RequestCancelled if the context is cancelled.
        """
        if not users:
            return [], rate_limit

        state = rate_limit
        results = [UserProfile.from_summary(user) for user in users]
        capped = list(enumerate(users[: self.max_users]))
        if len(users) > self.max_users:
            logger.debug("Enriching first %d of %d users", self.max_users, len(users))

        self.throttle.reset()
        batches = self.throttle.chunks(capped)
        for batch_num, batch in enumerate(batches, 1):
            await self.throttle.wait_turn()
            context.check()
            if state is not None and state.is_low(self.rate_limit_buffer):
                logger.warning(
                    "Rate limit low (%d remaining), skipping details for %d user(s)",
                    state.remaining,
                    sum(len(b) for b in batches[batch_num - 1 :]),
                )
                break

            logger.debug("Fetching details batch %d/%d (%d users)", batch_num, len(batches), len(batch))
            outcomes = await asyncio.gather(
                *(self._fetch(user, context) for _, user in batch),
                return_exceptions=True,
            )
            self.throttle.settled()

            stop = False
            for (index, user), outcome in zip(batch, outcomes):
                if isinstance(outcome, RequestCancelled):
                    raise outcome
                if isinstance(outcome, RateLimitedError):
                    stop = True
                    state = dataclasses.replace(state or RateLimitState(), remaining=0, reset=outcome.reset)
                    continue
                if isinstance(outcome, (GitHubError, ValueError, KeyError, TypeError)):
                    logger.warning("Details unavailable for %s: %s", user.login, outcome)
                    continue
                if isinstance(outcome, BaseException):
                    raise outcome

                if outcome.rate_limit is not None and (
                    state is None or outcome.rate_limit.remaining < state.remaining
                    or outcome.rate_limit.reset > state.reset
                ):
                    state = outcome.rate_limit
                try:
                    results[index] = UserProfile.merge(user, outcome.body)
                except (KeyError, TypeError) as e:
                    logger.warning("Malformed profile for %s: %s", user.login, e)

            if stop:
                logger.warning("Rate limited while fetching details, stopping enrichment")
                break

        return results, state

    async def _fetch(self, user: UserSummary, context: CancellationContext):
        return await self.transport.get(user_endpoint(user.login), context=context, ttl=self.ttl)
