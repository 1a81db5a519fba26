"""Cancellable execution context shared by every check of one run."""

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from repotrust.checker.errors import CheckCancelledError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RunContext:
    """Cancellation scope for a dispatcher run.

    Cancelling it (explicitly or when the optional run timeout fires) makes
    every in-flight evidence fetch raise ``CheckCancelledError``.
    """

    def __init__(self, timeout: float | None = None) -> None:
        """Initialize the context.

        Args:
            timeout: Seconds after ``start()`` at which the run is cancelled.
        """
        self.timeout = timeout
        self.reason = ""
        self._cancelled = asyncio.Event()
        self._timer: asyncio.TimerHandle | None = None

    def start(self) -> None:
        """Arm the run timeout on the running event loop."""
        if self.timeout is not None and self._timer is None:
            loop = asyncio.get_running_loop()
            self._timer = loop.call_later(
                self.timeout, self.cancel, f"run timed out after {self.timeout:g}s"
            )

    def stop(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def cancel(self, reason: str = "run cancelled") -> None:
        if not self._cancelled.is_set():
            logger.info(f"Cancelling run: {reason}")
            self.reason = reason
            self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise CheckCancelledError(self.reason)

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless the context is cancelled first.

        Raises:
            CheckCancelledError: If the context is or becomes cancelled.
        """
        self.raise_if_cancelled()
        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._cancelled.wait())
        try:
            done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            waiter.cancel()

        if task in done:
            return task.result()
        task.cancel()
        raise CheckCancelledError(self.reason)
