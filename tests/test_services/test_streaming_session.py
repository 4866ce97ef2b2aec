"""Tests for StreamingSession."""

import asyncio

import pytest

from container_manager.errors import ToolNotFound
from container_manager.models import CommandSpec, StreamState
from container_manager.services import StreamingSession


async def _wait_for(predicate, timeout: float = 5.0) -> None:
    async def _poll() -> None:
        while not predicate():
            await asyncio.sleep(0.01)

    await asyncio.wait_for(_poll(), timeout=timeout)


@pytest.mark.asyncio
async def test_completes_when_process_exits(make_cli, runner) -> None:
    cli = make_cli("echo one; echo two")
    seen: list[str] = []
    session = StreamingSession(
        lambda: runner.stream(CommandSpec(cli, ())),
        on_line=lambda line: seen.append(line.text),
    )

    assert session.state is StreamState.IDLE
    await session.start()
    state = await session.wait()

    assert state is StreamState.COMPLETED
    assert state.is_terminal
    assert [line.text for line in session.lines] == ["one", "two"]
    assert seen == ["one", "two"]
    await session.aclose()
    assert session.state is StreamState.COMPLETED


@pytest.mark.asyncio
async def test_stop_cancels_and_terminates_process(make_cli, runner) -> None:
    cli = make_cli("echo ready; exec sleep 30")
    session = StreamingSession(lambda: runner.stream(CommandSpec(cli, ())))

    await session.start()
    await _wait_for(lambda: session.lines)
    stream = session.stream
    session.stop()

    assert session.state is StreamState.CANCELLED
    await session.aclose()
    assert stream is not None
    assert stream.returncode is not None
    assert stream.returncode < 0
    assert session.state is StreamState.CANCELLED
    assert runner.active_streams == 0


@pytest.mark.asyncio
async def test_launch_failure_moves_to_failed(tmp_path, runner) -> None:
    missing = str(tmp_path / "nope" / "container")
    session = StreamingSession(lambda: runner.stream(CommandSpec(missing, ())))

    await session.start()

    assert session.state is StreamState.FAILED
    assert isinstance(session.error, ToolNotFound)
    assert await session.wait() is StreamState.FAILED


@pytest.mark.asyncio
async def test_restart_clears_lines_and_spawns_new_process(make_cli, runner) -> None:
    cli = make_cli("echo $$; exec sleep 30")
    session = StreamingSession(lambda: runner.stream(CommandSpec(cli, ())))

    await session.start()
    await _wait_for(lambda: session.lines)
    first_pid = session.lines[0].text
    first_stream = session.stream

    await session.start()
    await _wait_for(lambda: session.lines)

    assert first_stream is not None and first_stream.returncode is not None
    assert session.state is StreamState.STREAMING
    assert len(session.lines) == 1
    assert session.lines[0].text != first_pid
    assert session.lines[0].sequence == 0
    await session.aclose()


@pytest.mark.asyncio
async def test_stop_when_idle_is_noop(runner) -> None:
    session = StreamingSession(lambda: runner.stream(CommandSpec("/bin/true", ())))

    session.stop()
    await session.aclose()

    assert session.state is StreamState.IDLE


@pytest.mark.asyncio
async def test_context_manager_closes_stream(make_cli, runner) -> None:
    cli = make_cli("echo ready; exec sleep 30")

    async with StreamingSession(lambda: runner.stream(CommandSpec(cli, ()))) as session:
        await session.start()
        await _wait_for(lambda: session.lines)
        stream = session.stream

    assert session.state is StreamState.CANCELLED
    assert stream is not None and stream.returncode is not None


@pytest.mark.asyncio
async def test_clear_discards_buffered_lines(make_cli, runner) -> None:
    cli = make_cli("echo a; echo b")
    session = StreamingSession(lambda: runner.stream(CommandSpec(cli, ())))

    await session.start()
    await session.wait()
    session.clear()

    assert session.lines == []
    assert session.state is StreamState.COMPLETED


@pytest.mark.asyncio
async def test_stop_during_start_leaves_no_process(make_cli, runner) -> None:
    """stop() issued while the process is still spawning tears it down."""
    cli = make_cli("echo ready; exec sleep 30")
    session = StreamingSession(lambda: runner.stream(CommandSpec(cli, ())))

    starting = asyncio.create_task(session.start())
    await asyncio.sleep(0)
    assert session.state is StreamState.STREAMING
    stream = session.stream
    session.stop()
    await starting
    await asyncio.sleep(0.3)

    assert session.state is StreamState.CANCELLED
    assert session.lines == []
    assert stream is not None
    assert stream.pid is None or stream.returncode is not None
    await session.aclose()
    assert runner.active_streams == 0
