"""Repeating invocation of a service operation on an interval.

Single-writer discipline: only start() and stop() replace the active
session. Each loop holds its own PollingSession; once that session is
cancelled the loop can never publish again, so a superseded loop cannot
race the current one for the publish slot.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

from container_manager.config import Settings
from container_manager.models import PollingSession

logger = logging.getLogger(__name__)

T = TypeVar("T")

ErrorCallback = Callable[[Exception], None]


class PollingController(Generic[T]):
    """Runs at most one poll loop at a time.

    Example:
        >>> poller = PollingController(default_interval=config.refresh_interval)
        >>> poller.start(None, lambda: containers.list(show_all=True), on_result=render)
        >>> ...
        >>> poller.stop()
    """

    def __init__(self, name: str = "poller", default_interval: float | None = None) -> None:
        """Initialize controller.

        Args:
            name: Label used in log messages
            default_interval: Interval used when start() gets None
                (defaults to Settings.refresh_interval)
        """
        self.name = name
        self.default_interval = (
            default_interval if default_interval is not None else Settings().refresh_interval
        )
        self.latest_result: T | None = None
        self.latest_error: Exception | None = None
        self._session: PollingSession | None = None
        self._task: asyncio.Task[None] | None = None
        # Stopped loops not yet awaited by aclose()
        self._retired: set[asyncio.Task[None]] = set()

    @property
    def active(self) -> bool:
        """True while a loop is running."""
        return self._session is not None and self._session.active

    @property
    def session(self) -> PollingSession | None:
        return self._session

    def start(
        self,
        interval_seconds: float | None,
        operation: Callable[[], Awaitable[T]],
        on_result: Callable[[T], None] | None = None,
        on_error: ErrorCallback | None = None,
    ) -> PollingSession:
        """Start polling, replacing any running loop.

        The first tick runs immediately. Must be called from a running
        event loop.

        Args:
            interval_seconds: Pause between the end of one tick and the next
                (None uses default_interval)
            operation: Coroutine factory invoked once per tick
            on_result: Called with each successful result
            on_error: Called with each failure (no automatic retry)

        Returns:
            The new active session

        Raises:
            ValueError: If the interval is not positive
        """
        if interval_seconds is None:
            interval_seconds = self.default_interval
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be > 0, got {interval_seconds}")

        self.stop()

        session = PollingSession(interval_seconds=interval_seconds)
        self._session = session
        self.latest_error = None
        self._task = asyncio.get_running_loop().create_task(
            self._loop(session, operation, on_result, on_error)
        )
        logger.info("Started %s (interval=%.1fs)", self.name, interval_seconds)
        return session

    async def _loop(
        self,
        session: PollingSession,
        operation: Callable[[], Awaitable[T]],
        on_result: Callable[[T], None] | None,
        on_error: ErrorCallback | None,
    ) -> None:
        while session.active:
            try:
                result = await operation()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                if not session.active:
                    break
                session.ticks += 1
                self.latest_error = e
                logger.warning("%s tick %d failed: %s", self.name, session.ticks, e)
                self._publish(on_error, e)
            else:
                if not session.active:
                    break
                session.ticks += 1
                self.latest_result = result
                self.latest_error = None
                self._publish(on_result, result)

            # Wait out the interval unless stop() fires first
            try:
                await asyncio.wait_for(session.stop_event.wait(), timeout=session.interval_seconds)
            except asyncio.TimeoutError:
                pass

        logger.debug("%s loop exited after %d tick(s)", self.name, session.ticks)

    def _publish(self, callback: Callable[[Any], None] | None, value: Any) -> None:
        """Invoke a subscriber; a failing subscriber never ends the loop."""
        if callback is None:
            return
        try:
            callback(value)
        except Exception:
            logger.exception("%s callback failed", self.name)

    def stop(self) -> None:
        """Stop the active loop, if any.

        Idempotent. Takes effect immediately: the session is invalidated
        and an in-progress wait or operation is cancelled.
        """
        session, task = self._session, self._task
        self._session = None
        self._task = None

        if session is not None and session.active:
            session.cancel()
            logger.info("Stopped %s after %d tick(s)", self.name, session.ticks)
        if task is not None:
            if not task.done():
                task.cancel()
                self._retired.add(task)
                task.add_done_callback(self._retired.discard)

    async def aclose(self) -> None:
        """Stop and wait for every stopped loop task to finish."""
        self.stop()
        retired, self._retired = self._retired, set()
        if retired:
            await asyncio.gather(*retired, return_exceptions=True)
