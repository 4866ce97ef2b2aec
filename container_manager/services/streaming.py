"""Stateful wrapper around one live log stream.

State machine:
    idle -> streaming -> completed | cancelled | failed

Restarting from a terminal state opens a fresh process and discards the
previous lines. The session exclusively owns its LineStream, so the child
process is torn down exactly once.
"""

import asyncio
import logging
from collections.abc import Callable

from container_manager.errors import ContainerManagerError
from container_manager.models import LogLine, StreamState
from container_manager.services.runner import LineStream

logger = logging.getLogger(__name__)

StreamOpener = Callable[[], LineStream]
LineCallback = Callable[[LogLine], None]


class StreamingSession:
    """Pumps a LineStream into a line buffer and tracks its state.

    Example:
        >>> session = StreamingSession(lambda: containers.stream_logs(cid, follow=True))
        >>> await session.start()
        >>> ...
        >>> session.stop()
        >>> session.state
        <StreamState.CANCELLED: 'cancelled'>
    """

    def __init__(
        self,
        opener: StreamOpener,
        on_line: LineCallback | None = None,
        name: str = "stream",
    ) -> None:
        """Initialize session in the idle state.

        Args:
            opener: Creates a new (unstarted) LineStream per start
            on_line: Called with each line as it arrives
            name: Label used in log messages
        """
        self._opener = opener
        self._on_line = on_line
        self.name = name
        self.state = StreamState.IDLE
        self.lines: list[LogLine] = []
        self.error: Exception | None = None
        self._stream: LineStream | None = None
        self._pump_task: asyncio.Task[None] | None = None

    @property
    def stream(self) -> LineStream | None:
        """The LineStream of the current run, if any."""
        return self._stream

    async def start(self) -> None:
        """Open a new stream, stopping any current one first.

        Launch failures move the session to ``failed`` instead of raising;
        the error is kept in ``error``.
        """
        await self.aclose()

        self.lines = []
        self.error = None
        self.state = StreamState.STREAMING

        try:
            stream = self._opener()
        except ContainerManagerError as e:
            self._fail(e)
            return

        # Published before spawning so stop() can reach the stream mid-start
        self._stream = stream
        try:
            await stream.start()
        except ContainerManagerError as e:
            self._stream = None
            self._fail(e)
            return

        if self.state is not StreamState.STREAMING or self._stream is not stream:
            # stop() ran while the process was spawning
            await stream.aclose()
            return

        self._pump_task = asyncio.create_task(self._pump(stream))

    def _fail(self, error: ContainerManagerError) -> None:
        self.state = StreamState.FAILED
        self.error = error
        logger.warning("%s failed to launch: %s", self.name, error)

    async def _pump(self, stream: LineStream) -> None:
        async for line in stream:
            self.lines.append(line)
            if self._on_line is not None:
                self._on_line(line)

        if self.state is StreamState.STREAMING and self._stream is stream:
            self.error = stream.error
            self.state = StreamState.COMPLETED
            logger.debug(
                "%s completed with %d line(s), exit code %s",
                self.name,
                len(self.lines),
                stream.returncode,
            )

    def stop(self) -> None:
        """Cancel the running stream.

        The child is signalled before this returns. No-op unless streaming.
        """
        if self.state is not StreamState.STREAMING:
            return
        self.state = StreamState.CANCELLED
        if self._stream is not None:
            self._stream.cancel()
        logger.info("%s cancelled after %d line(s)", self.name, len(self.lines))

    async def wait(self) -> StreamState:
        """Wait for the current run to reach a terminal state."""
        if self._pump_task is not None:
            await asyncio.gather(self._pump_task, return_exceptions=True)
        return self.state

    async def aclose(self) -> None:
        """Stop if streaming and wait for the child process to exit.

        Safe to call multiple times.
        """
        self.stop()
        stream, task = self._stream, self._pump_task
        self._stream = None
        self._pump_task = None
        if stream is not None:
            await stream.aclose()
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    def clear(self) -> None:
        """Discard buffered lines without touching the stream."""
        self.lines = []

    async def __aenter__(self) -> "StreamingSession":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
