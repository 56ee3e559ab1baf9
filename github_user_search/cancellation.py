"""Cooperative cancellation for in-flight requests."""

import asyncio
import logging

from .errors import RequestCancelled

logger = logging.getLogger(__name__)


class CancellationContext:
    """Groups the requests of one logical search session.

    Requests run through ``run`` as tracked tasks. ``cancel`` cancels every
    tracked task, and anyone awaiting one of them gets ``RequestCancelled``
    instead of ``asyncio.CancelledError``. Once cancelled, a context stays
    cancelled; start a new one for new work.
    """

    def __init__(self):
        self._tasks: set[asyncio.Task] = set()
        self._cancelled = False
        self._reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> str | None:
        return self._reason

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def check(self) -> None:
        """Raise ``RequestCancelled`` if this context has been cancelled."""
        if self._cancelled:
            raise RequestCancelled(self._reason)

    async def run(self, coro):
        """Await ``coro`` as a task that ``cancel`` can abort."""
        if self._cancelled:
            coro.close()
            raise RequestCancelled(self._reason)

        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        try:
            return await task
        except asyncio.CancelledError:
            # Only translate cancellations we caused; outer cancellation propagates
            if self._cancelled and task.cancelled():
                raise RequestCancelled(self._reason) from None
            raise
        finally:
            self._tasks.discard(task)

    def cancel(self, reason: str | None = None) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._reason = reason or "Request cancelled"
        if self._tasks:
            logger.debug("Cancelling %d in-flight request(s): %s", len(self._tasks), self._reason)
        for task in list(self._tasks):
            task.cancel()
