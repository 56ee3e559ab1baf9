"""Rate limit tracking and batch throttling.

``RateLimitState`` is an immutable snapshot parsed from GitHub's
``x-ratelimit-*`` response headers. Each client owns its current snapshot and
replaces it after every response; checks against it are advisory, GitHub's own
403/429 responses remain authoritative.
"""

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime

# Unauthenticated REST defaults
DEFAULT_LIMIT = 60

# Assumed wait when GitHub gives no reset time
DEFAULT_RESET_WAIT = 60

# Values of x-ratelimit-resource for the two quotas a user search touches
SEARCH_RESOURCE = "search"
CORE_RESOURCE = "core"


@dataclass(frozen=True)
class RateLimitState:
    limit: int = DEFAULT_LIMIT
    remaining: int = DEFAULT_LIMIT
    used: int = 0
    reset: int = 0  # unix timestamp, 0 if unknown
    resource: str | None = None

    @classmethod
    def from_headers(cls, headers, fallback: "RateLimitState | None" = None) -> "RateLimitState | None":
        """Parse rate limit headers, returning ``fallback`` if none are usable."""
        remaining = _header_int(headers, "x-ratelimit-remaining")
        if remaining is None:
            return fallback
        base = fallback or cls()
        limit = _header_int(headers, "x-ratelimit-limit")
        used = _header_int(headers, "x-ratelimit-used")
        reset = _header_int(headers, "x-ratelimit-reset")
        return cls(
            limit=limit if limit is not None else base.limit,
            remaining=remaining,
            used=used if used is not None else max(0, (limit or base.limit) - remaining),
            reset=reset if reset is not None else base.reset,
            resource=headers.get("x-ratelimit-resource") or base.resource,
        )

    def is_low(self, buffer: int = 0) -> bool:
        """True when at most ``buffer`` requests remain in the current window.

        A window whose reset time has passed is assumed refilled.
        """
        if self.reset and self.reset <= time.time():
            return False
        return self.remaining <= buffer

    @property
    def reset_at(self) -> datetime | None:
        return datetime.fromtimestamp(self.reset) if self.reset else None

    def seconds_until_reset(self) -> int:
        """Seconds until the window resets, 0 if already past or unknown."""
        return max(0, int(self.reset - time.time())) if self.reset else 0

    def estimated_reset(self) -> int:
        """Known reset timestamp, or an estimate when GitHub has not sent one."""
        if self.reset and self.reset > time.time():
            return self.reset
        return int(time.time()) + DEFAULT_RESET_WAIT


def _header_int(headers, name: str) -> int | None:
    val = headers.get(name)
    if val is None:
        return None
    try:
        return int(float(val))
    except ValueError:
        return None


class BatchThrottle:
    """Fixed-window throttle for batched requests.

    Splits work into ``capacity``-sized batches and keeps at least ``interval``
    seconds between one batch settling and the next one starting. The sleep
    and clock functions are injectable so the policy can be swapped or tested
    without real waits.
    """

    def __init__(self, capacity: int = 3, interval: float = 1.0, sleep=asyncio.sleep, clock=time.monotonic):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self.interval = interval
        self._sleep = sleep
        self._clock = clock
        self._last_settled: float | None = None

    def chunks(self, items: list) -> list[list]:
        return [items[i : i + self.capacity] for i in range(0, len(items), self.capacity)]

    async def wait_turn(self) -> None:
        """Wait until the interval since the last settled batch has elapsed."""
        if self._last_settled is None:
            return
        elapsed = self._clock() - self._last_settled
        if elapsed < self.interval:
            await self._sleep(self.interval - elapsed)

    def settled(self) -> None:
        self._last_settled = self._clock()

    def reset(self) -> None:
        self._last_settled = None
