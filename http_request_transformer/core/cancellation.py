"""Explicit cancellation signal threaded through every stage of a request pipeline."""

import asyncio
import inspect
import logging
from typing import Awaitable, Optional, TypeVar

from http_request_transformer.exceptions import RequestCancelledError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CancellationToken:
    """A cancellation signal passed unchanged from the outermost handler down to the terminal sender.

    Any stage may observe the token and abort early. Cancelling is one-way: once
    cancelled, a token stays cancelled.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: Optional[str] = None

    @classmethod
    def none(cls) -> "CancellationToken":
        """Returns a token that nothing holds a reference to, so it is never cancelled."""
        return cls()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def cancel(self, reason: Optional[str] = None) -> None:
        """Signals cancellation to every stage observing this token."""
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()
        logger.debug(f"Cancellation requested: {reason or 'no reason given'}")

    def raise_if_cancelled(self) -> None:
        """Raises RequestCancelledError if the token has been cancelled."""
        if self._event.is_set():
            raise RequestCancelledError(self._reason or "The request was cancelled.")

    async def wait(self) -> None:
        """Waits until the token is cancelled."""
        await self._event.wait()

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Awaits `awaitable`, abandoning it if the token is cancelled first.

        Args:
            awaitable: The operation to run, typically the network call of a terminal sender.

        Returns:
            The result of `awaitable`.

        Raises:
            RequestCancelledError: If the token is cancelled before `awaitable` completes.
                The underlying task is cancelled and awaited before this is raised.
        """
        if self.cancelled:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            self.raise_if_cancelled()
        operation = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({operation, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            if not operation.done():
                operation.cancel()
                await asyncio.gather(operation, return_exceptions=True)
            if not waiter.done():
                waiter.cancel()
                await asyncio.gather(waiter, return_exceptions=True)

        if operation.cancelled():
            self.raise_if_cancelled()
        return operation.result()

    def __repr__(self) -> str:
        return f"<CancellationToken cancelled={self.cancelled}>"
