"""Periodic background loop for the matching jobs.

asyncio background task managed by the FastAPI lifespan. Each pass opens
its own session and runs one recompute batch or one backfill.
"""

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Generic, Protocol, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from haulmatch.services.matching_store import MatchingStore, SqlAlchemyMatchingStore

logger = logging.getLogger(__name__)


class _PassResult(Protocol):
    def to_summary(self) -> dict: ...


R = TypeVar("R", bound=_PassResult)


class PeriodicWorker(Generic[R]):
    """Background worker that runs one matching pass per interval.

    Lifecycle:
    - start() creates an asyncio task that runs the loop.
    - stop() cancels the task and waits for graceful shutdown.
    - run_once() executes a single pass (for testing).

    Args:
        name: Label used in log lines.
        session_factory: Async session factory for DB access.
        run_pass: Runs one pass against a store.
        interval_seconds: Seconds between passes.
    """

    def __init__(
        self,
        name: str,
        session_factory: async_sessionmaker[AsyncSession],
        run_pass: Callable[[MatchingStore], Awaitable[R]],
        *,
        interval_seconds: int,
    ) -> None:
        self._name = name
        self._session_factory = session_factory
        self._run_pass = run_pass
        self._interval_seconds = interval_seconds
        self._task: asyncio.Task[None] | None = None
        self._last_run_at: datetime | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        """Whether the background task is currently active."""
        return self._running and self._task is not None and not self._task.done()

    @property
    def last_run_at(self) -> datetime | None:
        """Timestamp of the most recent completed pass."""
        return self._last_run_at

    def start(self) -> None:
        """Start the background loop.

        No-op if already running. Must be called with a running event loop.
        """
        if self.is_running:
            logger.warning("%s worker already running", self._name)
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info(
            "%s worker started (interval=%ds)", self._name, self._interval_seconds
        )

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        self._running = False
        if self._task is not None and not self._task.done():
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        self._task = None
        logger.info("%s worker stopped", self._name)

    async def run_once(self) -> R:
        """Execute a single pass in a fresh session."""
        async with self._session_factory() as db:
            result = await self._run_pass(SqlAlchemyMatchingStore(db))
        self._last_run_at = datetime.now(UTC)
        return result

    async def _run_loop(self) -> None:
        """Background loop: run pass → sleep → repeat."""
        try:
            while self._running:
                try:
                    result = await self.run_once()
                    logger.info("%s pass: %s", self._name, result.to_summary())
                except Exception:  # noqa: BLE001
                    logger.exception("Error in %s pass", self._name)
                await asyncio.sleep(self._interval_seconds)
        except asyncio.CancelledError:
            logger.debug("%s loop cancelled", self._name)
            raise
