"""
Cancellation signal threaded through a retry call.

A single CancellationToken is passed from the caller through the executor
to the transport. Both suspension points of a call (the transport
operation and the backoff sleep) observe it. Native asyncio task
cancellation keeps working as usual and is propagated unchanged.
"""

import asyncio
from typing import Awaitable, TypeVar

from ratelimit_layer.retry.exceptions import RetryCancelledError

T = TypeVar("T")


class CancellationToken:
    """
    Cooperative cancellation flag backed by an ``asyncio.Event``.

    Usage:
        token = CancellationToken()
        task = asyncio.create_task(executor.execute_with_retry(request, token, operate))
        ...
        token.cancel()  # task fails with RetryCancelledError
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason = "Operation cancelled"

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str | None = None) -> None:
        """Request cancellation. Idempotent; the first reason wins."""
        if self._event.is_set():
            return
        if reason:
            self._reason = reason
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise RetryCancelledError(self._reason, details={"reason": self._reason})

    async def wait(self) -> None:
        """Block until cancellation is requested."""
        await self._event.wait()

    async def sleep(self, delay: float) -> None:
        """
        Sleep for ``delay`` seconds unless cancelled first.

        Raises:
            RetryCancelledError: Token fired before or during the sleep
        """
        self.raise_if_cancelled()
        if delay <= 0:
            return
        try:
            await asyncio.wait_for(self._event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return
        self.raise_if_cancelled()

    async def run(self, awaitable: Awaitable[T]) -> T:
        """
        Await ``awaitable``, abandoning it if the token fires first.

        The abandoned work is cancelled and awaited before
        RetryCancelledError is raised, so nothing keeps running in the
        background.
        """
        if self._event.is_set():
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            self.raise_if_cancelled()
        work = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            work.cancel()
            waiter.cancel()
            await asyncio.gather(work, waiter, return_exceptions=True)
            raise

        if work.done():
            waiter.cancel()
            return work.result()

        work.cancel()
        await asyncio.gather(work, return_exceptions=True)
        raise RetryCancelledError(self._reason, details={"reason": self._reason})
