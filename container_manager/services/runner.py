"""Local subprocess execution for the container CLI.

Two execution paths:
- run(): one-shot. stdout and stderr are drained concurrently via
  communicate() so a full pipe buffer can never deadlock the wait for exit.
- stream(): returns a LineStream. The process is spawned lazily, a reader
  task splits output into lines and feeds a bounded queue. A full queue
  pauses the reader (backpressure); lines are never dropped.

Termination contract for streams: the child is signalled at most once, the
signal is issued before cancel() returns, and aclose() waits for the exit
(escalating to SIGKILL after a grace period).
"""

import asyncio
import codecs
import contextlib
import logging
import os
import shutil
import time
from collections.abc import Callable
from typing import Any

from container_manager.errors import CommandTimeout, LaunchFailure, ToolNotFound
from container_manager.models import CommandSpec, ExecutionResult, LogLine

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 64 * 1024

# Queue marker for end of stream
_EOF: Any = object()


def resolve_executable(path: str) -> str:
    """Resolve the executable for a spec without spawning anything.

    Bare names (no directory part) are looked up on PATH.

    Args:
        path: Executable path or bare command name

    Returns:
        Path to execute

    Raises:
        ToolNotFound: If the executable does not exist
    """
    if not os.path.dirname(path):
        found = shutil.which(path)
        if found is None:
            raise ToolNotFound(path)
        return found
    if not os.path.exists(path):
        raise ToolNotFound(path)
    return path


async def _spawn(spec: CommandSpec, stdout: int, stderr: int) -> asyncio.subprocess.Process:
    """Start the process for a spec with no stdin.

    Raises:
        ToolNotFound: If the executable is missing
        LaunchFailure: If the OS refuses to spawn it
    """
    executable = resolve_executable(spec.executable_path)
    try:
        return await asyncio.create_subprocess_exec(
            executable,
            *spec.arguments,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=stdout,
            stderr=stderr,
        )
    except OSError as e:
        # Deleted between lookup and exec
        if isinstance(e, FileNotFoundError) and not os.path.exists(executable):
            raise ToolNotFound(spec.executable_path) from e
        raise LaunchFailure(spec.executable_path, e) from e


def _decode(data: bytes | None) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


class LineStream:
    """Cancellable, single-pass async iterator of LogLine objects.

    Owns exactly one child process. Use as an async context manager (or call
    aclose()) so the process is always torn down.

    Example:
        >>> async with runner.stream(spec) as lines:
        ...     async for line in lines:
        ...         print(line.text)
    """

    def __init__(
        self,
        spec: CommandSpec,
        *,
        queue_size: int = 1000,
        terminate_grace: float = 2.0,
        merge_stderr: bool = False,
        on_close: Callable[["LineStream"], None] | None = None,
    ) -> None:
        """Initialize a stream. Nothing is spawned until start().

        Args:
            spec: Command to run
            queue_size: Maximum buffered lines before reading pauses
            terminate_grace: Seconds between SIGTERM and SIGKILL in aclose()
            merge_stderr: Interleave stderr into the line stream
            on_close: Called once when the stream finishes or is closed
        """
        if queue_size <= 0:
            raise ValueError(f"queue_size must be > 0, got {queue_size}")

        self.spec = spec
        self._terminate_grace = terminate_grace
        self._merge_stderr = merge_stderr
        self._on_close = on_close
        self._queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=queue_size)
        self._process: asyncio.subprocess.Process | None = None
        self._reader_task: asyncio.Task[None] | None = None
        self._start_lock = asyncio.Lock()
        self._started = False
        self._iterated = False
        self._cancelled = False
        self._finished = False
        self._terminated = False
        self._closed = False
        self._lines_read = 0
        self.error: Exception | None = None

    @property
    def pid(self) -> int | None:
        """Child process id, once spawned."""
        return self._process.pid if self._process else None

    @property
    def returncode(self) -> int | None:
        """Exit code of the child, or None while running / before spawn."""
        return self._process.returncode if self._process else None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def finished(self) -> bool:
        """True once the consumer has seen the end of the stream."""
        return self._finished

    async def start(self) -> None:
        """Spawn the process and the reader task.

        Idempotent. Called automatically by the first iteration.

        Raises:
            ToolNotFound: If the executable is missing
            LaunchFailure: If the OS refuses to spawn it
        """
        async with self._start_lock:
            if self._started or self._cancelled:
                return
            self._started = True

            stderr = asyncio.subprocess.STDOUT if self._merge_stderr else asyncio.subprocess.DEVNULL
            try:
                self._process = await _spawn(self.spec, asyncio.subprocess.PIPE, stderr)
            except (ToolNotFound, LaunchFailure):
                self._finished = True
                self._close()
                raise
            logger.info("Streaming pid=%d: %s", self._process.pid, self.spec.display())

            if self._cancelled:
                # cancel() raced the spawn
                self._terminate()
                return

            self._reader_task = asyncio.create_task(self._read_loop())

    async def _read_loop(self) -> None:
        """Read stdout in chunks and enqueue complete lines."""
        assert self._process is not None and self._process.stdout is not None
        reader = self._process.stdout
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        pending = ""

        try:
            while True:
                chunk = await reader.read(READ_CHUNK_SIZE)
                if not chunk:
                    break
                pending += decoder.decode(chunk)
                *complete, pending = pending.split("\n")
                for text in complete:
                    await self._emit(text)

            pending += decoder.decode(b"", final=True)
            if pending:
                await self._emit(pending)

            returncode = await self._process.wait()
            logger.debug(
                "Stream pid=%d exited with %d after %d line(s)",
                self._process.pid,
                returncode,
                self._lines_read,
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            # Lines already emitted stay valid; the stream just ends here
            logger.warning("Stream pid=%d read failed: %s", self._process.pid, e)
            self.error = e

        await self._queue.put(_EOF)

    async def _emit(self, text: str) -> None:
        if text.endswith("\r"):
            text = text[:-1]
        line = LogLine(text=text, sequence=self._lines_read)
        self._lines_read += 1
        # Blocks while the consumer lags
        await self._queue.put(line)

    def _terminate(self) -> None:
        """Send SIGTERM to a still-running child, at most once."""
        proc = self._process
        if self._terminated or proc is None or proc.returncode is not None:
            return
        self._terminated = True
        with contextlib.suppress(ProcessLookupError):
            proc.terminate()
        logger.info("Sent SIGTERM to stream pid=%d", proc.pid)

    def cancel(self) -> None:
        """Stop the stream now.

        Signals the child before returning, stops the reader and discards
        anything still buffered so no further lines are yielded. Reaping
        finishes asynchronously; await aclose() to wait for it.
        """
        if self._cancelled or self._finished:
            return
        self._cancelled = True
        self._terminate()

        if self._reader_task is not None and not self._reader_task.done():
            self._reader_task.cancel()

        while True:
            try:
                self._queue.get_nowait()
            except asyncio.QueueEmpty:
                break
        # Wake a consumer blocked in __anext__
        with contextlib.suppress(asyncio.QueueFull):
            self._queue.put_nowait(_EOF)

    async def aclose(self) -> None:
        """Cancel if still running and wait for the child to exit.

        Safe to call multiple times.
        """
        self.cancel()

        proc = self._process
        if proc is not None and proc.returncode is None:
            try:
                await asyncio.wait_for(proc.wait(), timeout=self._terminate_grace)
            except asyncio.TimeoutError:
                logger.warning(
                    "Stream pid=%d ignored SIGTERM for %.1fs, killing",
                    proc.pid,
                    self._terminate_grace,
                )
                with contextlib.suppress(ProcessLookupError):
                    proc.kill()
                await proc.wait()

        if self._reader_task is not None:
            await asyncio.gather(self._reader_task, return_exceptions=True)

        self._close()

    def _close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._on_close is not None:
            self._on_close(self)

    def __aiter__(self) -> "LineStream":
        if self._iterated:
            raise RuntimeError("LineStream is single-pass; start a new stream to re-read")
        self._iterated = True
        return self

    async def __anext__(self) -> LogLine:
        if self._cancelled or self._finished:
            raise StopAsyncIteration

        await self.start()
        if self._reader_task is None:
            # Cancelled while spawning
            raise StopAsyncIteration

        item = await self._queue.get()
        if item is _EOF or self._cancelled:
            self._finished = True
            self._close()
            raise StopAsyncIteration
        return item

    async def __aenter__(self) -> "LineStream":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()


class CommandRunner:
    """Spawns container CLI processes.

    Stateless for one-shot calls; tracks open streams so teardown can close
    every child it started.
    """

    def __init__(
        self,
        default_timeout: float | None = None,
        stream_queue_size: int = 1000,
        stream_terminate_grace: float = 2.0,
    ) -> None:
        """Initialize runner.

        Args:
            default_timeout: Deadline for run() when none is given (None = no limit)
            stream_queue_size: Buffered lines per stream before reads pause
            stream_terminate_grace: Seconds between SIGTERM and SIGKILL on close
        """
        self.default_timeout = default_timeout
        self.stream_queue_size = stream_queue_size
        self.stream_terminate_grace = stream_terminate_grace
        self._streams: set[LineStream] = set()

    async def run(self, spec: CommandSpec, timeout: float | None = None) -> ExecutionResult:
        """Run a command to completion and capture its output.

        A non-zero exit is returned as data, not raised.

        Args:
            spec: Command to run
            timeout: Seconds before the child is killed (defaults to runner setting)

        Returns:
            ExecutionResult with exit code, stdout and stderr

        Raises:
            ToolNotFound: If the executable is missing (nothing is spawned)
            LaunchFailure: If the OS refuses to spawn it
            CommandTimeout: If the deadline passes
        """
        deadline = timeout if timeout is not None else self.default_timeout
        started = time.monotonic()

        proc = await _spawn(spec, asyncio.subprocess.PIPE, asyncio.subprocess.PIPE)
        logger.debug("Spawned pid=%d: %s", proc.pid, spec.display())

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=deadline or None)
        except asyncio.TimeoutError:
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()
            logger.warning("Killed pid=%d after %ss: %s", proc.pid, deadline, spec.display())
            raise CommandTimeout(spec, deadline or 0) from None
        except asyncio.CancelledError:
            if proc.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    proc.kill()
            raise

        elapsed_ms = (time.monotonic() - started) * 1000
        exit_code = proc.returncode if proc.returncode is not None else -1
        logger.debug(
            "pid=%d exited with %d in %.1fms (stdout=%dB, stderr=%dB)",
            proc.pid,
            exit_code,
            elapsed_ms,
            len(stdout or b""),
            len(stderr or b""),
        )

        return ExecutionResult(
            exit_code=exit_code,
            stdout=_decode(stdout),
            stderr=_decode(stderr),
        )

    def stream(self, spec: CommandSpec, *, merge_stderr: bool = False) -> LineStream:
        """Create a line stream for a long-running command.

        The executable is checked immediately; the process starts on first
        iteration. Each call creates a new process.

        Args:
            spec: Command to run
            merge_stderr: Interleave stderr into the stream

        Returns:
            Unstarted LineStream

        Raises:
            ToolNotFound: If the executable is missing
        """
        resolve_executable(spec.executable_path)
        stream = LineStream(
            spec,
            queue_size=self.stream_queue_size,
            terminate_grace=self.stream_terminate_grace,
            merge_stderr=merge_stderr,
            on_close=self._streams.discard,
        )
        self._streams.add(stream)
        return stream

    @property
    def active_streams(self) -> int:
        """Number of streams not yet finished or closed."""
        return len(self._streams)

    async def close_all(self) -> None:
        """Close every open stream and wait for their processes."""
        streams = list(self._streams)
        if streams:
            logger.info("Closing %d open stream(s)", len(streams))
        for stream in streams:
            await stream.aclose()
