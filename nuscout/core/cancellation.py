"""Cooperative cancellation for registry operations.

A :class:`CancellationToken` is created per logical request and passed
down the whole call chain. Code checks it between steps with
:meth:`~CancellationToken.raise_if_cancelled` and wraps every network
await in :meth:`~CancellationToken.run`, so that cancelling the token
aborts the in-flight request and surfaces as
:class:`~nuscout.exceptions.OperationCancelled`.

Typical usage::

    token = CancellationToken()
    task = asyncio.create_task(aggregator.search("serilog", token=token))
    ...
    token.cancel()          # a newer request superseded this one
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Set, TypeVar

from nuscout.exceptions import OperationCancelled

T = TypeVar("T")


class CancellationToken:
    """Signal shared by every step of one request.

    Cancelling is idempotent and never blocks: pending operations started
    through :meth:`run` are cancelled.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._pending: Set["asyncio.Future[object]"] = set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Request cancellation of every operation observing this token."""
        if self._cancelled:
            return
        self._cancelled = True

        for future in list(self._pending):
            future.cancel()

    def raise_if_cancelled(self) -> None:
        """Raise :class:`OperationCancelled` if the token was cancelled."""
        if self._cancelled:
            raise OperationCancelled("Operation was cancelled")

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable``, aborting it if the token is cancelled.

        Raises:
            OperationCancelled: The token was cancelled before or while
                ``awaitable`` was running.
        """
        if self._cancelled:
            # Close a never-started coroutine instead of leaking it
            close = getattr(awaitable, "close", None)
            if close is not None:
                close()
            self.raise_if_cancelled()

        future = asyncio.ensure_future(awaitable)
        self._pending.add(future)
        try:
            return await future
        except asyncio.CancelledError:
            if self._cancelled:
                raise OperationCancelled("Operation was cancelled") from None
            raise
        finally:
            self._pending.discard(future)
