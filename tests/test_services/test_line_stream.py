"""Tests for streaming command output."""

import asyncio
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

from container_manager.errors import ToolNotFound
from container_manager.models import CommandSpec
from container_manager.services.runner import CommandRunner, LineStream


async def _collect(stream: LineStream) -> list[str]:
    return [line.text async for line in stream]


@pytest.mark.asyncio
async def test_stream_yields_lines_in_order(runner: CommandRunner, make_cli: Callable[..., str]) -> None:
    """Lines keep write order and carry increasing sequence numbers."""
    cli = make_cli("printf 'alpha\\nbeta\\n\\ngamma\\n'")

    async with runner.stream(CommandSpec(cli, ())) as stream:
        lines = [line async for line in stream]

    assert [line.text for line in lines] == ["alpha", "beta", "", "gamma"]
    assert [line.sequence for line in lines] == [0, 1, 2, 3]
    assert stream.returncode == 0


@pytest.mark.asyncio
async def test_stream_flushes_trailing_partial_line(
    runner: CommandRunner, make_cli: Callable[..., str]
) -> None:
    """Output without a final newline is still emitted."""
    cli = make_cli("printf 'first\\nno newline at end'")

    async with runner.stream(CommandSpec(cli, ())) as stream:
        texts = await _collect(stream)

    assert texts == ["first", "no newline at end"]


@pytest.mark.asyncio
async def test_stream_strips_carriage_returns(runner: CommandRunner, make_cli: Callable[..., str]) -> None:
    """CRLF line endings yield clean text."""
    cli = make_cli("printf 'one\\r\\ntwo\\r\\n'")

    async with runner.stream(CommandSpec(cli, ())) as stream:
        texts = await _collect(stream)

    assert texts == ["one", "two"]


@pytest.mark.asyncio
async def test_stream_ends_normally_on_nonzero_exit(
    runner: CommandRunner, make_cli: Callable[..., str]
) -> None:
    """Partial output survives a failing exit; no exception is raised."""
    cli = make_cli("echo 'before crash'\nexit 2")

    async with runner.stream(CommandSpec(cli, ())) as stream:
        texts = await _collect(stream)

    assert texts == ["before crash"]
    assert stream.returncode == 2
    assert stream.finished is True


@pytest.mark.asyncio
async def test_stream_missing_executable_raises_immediately(
    runner: CommandRunner, tmp_path: Path
) -> None:
    """stream() fails with ToolNotFound before spawning anything."""
    with pytest.raises(ToolNotFound):
        runner.stream(CommandSpec(str(tmp_path / "missing"), ("logs", "c1")))

    assert runner.active_streams == 0


@pytest.mark.asyncio
async def test_cancel_mid_stream_terminates_process(
    runner: CommandRunner, make_cli: Callable[..., str]
) -> None:
    """After cancel() no further lines arrive and the child is gone."""
    cli = make_cli("echo first\necho second\nexec sleep 30")
    stream = runner.stream(CommandSpec(cli, ("logs", "c1", "--follow")))

    first = await stream.__anext__()
    assert first.text == "first"
    assert stream.returncode is None

    stream.cancel()

    with pytest.raises(StopAsyncIteration):
        await stream.__anext__()

    await asyncio.wait_for(stream.aclose(), timeout=5)
    assert stream.cancelled is True
    assert stream.returncode is not None
    assert stream.returncode < 0
    assert runner.active_streams == 0


@pytest.mark.asyncio
async def test_cancel_wakes_blocked_consumer(runner: CommandRunner, make_cli: Callable[..., str]) -> None:
    """A consumer waiting for the next line is released by cancel()."""
    cli = make_cli("exec sleep 30")
    stream = runner.stream(CommandSpec(cli, ()))
    await stream.start()

    async def consume() -> list[str]:
        return await _collect(stream)

    consumer = asyncio.create_task(consume())
    await asyncio.sleep(0.1)
    stream.cancel()

    assert await asyncio.wait_for(consumer, timeout=5) == []
    await stream.aclose()
    assert stream.returncode is not None


@pytest.mark.asyncio
async def test_cancel_is_idempotent(runner: CommandRunner, make_cli: Callable[..., str]) -> None:
    """Repeated cancel/aclose calls are safe."""
    cli = make_cli("exec sleep 30")
    stream = runner.stream(CommandSpec(cli, ()))
    await stream.start()

    stream.cancel()
    stream.cancel()
    await stream.aclose()
    await stream.aclose()

    assert stream.returncode is not None


@pytest.mark.asyncio
async def test_cancel_before_start_spawns_nothing(
    runner: CommandRunner, make_cli: Callable[..., str]
) -> None:
    """A stream cancelled before iteration never starts a process."""
    cli = make_cli("echo should-not-run")
    stream = runner.stream(CommandSpec(cli, ()))

    stream.cancel()
    texts = await _collect(stream)
    await stream.aclose()

    assert texts == []
    assert stream.pid is None


@pytest.mark.asyncio
async def test_slow_consumer_receives_every_line(runner: CommandRunner) -> None:
    """A bounded queue pauses reading instead of dropping lines."""
    script = "for i in range(300):\n    print(f'line {i}', flush=True)\n"
    stream = runner.stream(CommandSpec(sys.executable, ("-c", script)))

    received = []
    async with stream:
        async for line in stream:
            received.append(line.text)
            if line.sequence % 50 == 0:
                await asyncio.sleep(0.01)

    assert received == [f"line {i}" for i in range(300)]


@pytest.mark.asyncio
async def test_stream_is_single_pass(runner: CommandRunner, make_cli: Callable[..., str]) -> None:
    """Iterating the same LineStream twice is an error."""
    cli = make_cli("echo once")

    async with runner.stream(CommandSpec(cli, ())) as stream:
        assert await _collect(stream) == ["once"]
        with pytest.raises(RuntimeError, match="single-pass"):
            stream.__aiter__()


@pytest.mark.asyncio
async def test_each_stream_call_starts_new_process(
    runner: CommandRunner, make_cli: Callable[..., str]
) -> None:
    """Re-invoking stream() spawns a fresh process."""
    cli = make_cli("echo $$")
    spec = CommandSpec(cli, ())

    async with runner.stream(spec) as first:
        first_pid = await _collect(first)
    async with runner.stream(spec) as second:
        second_pid = await _collect(second)

    assert first_pid != second_pid


@pytest.mark.asyncio
async def test_merge_stderr_interleaves_output(runner: CommandRunner, make_cli: Callable[..., str]) -> None:
    """merge_stderr routes stderr lines into the stream."""
    cli = make_cli("echo out\necho err >&2")

    async with runner.stream(CommandSpec(cli, ()), merge_stderr=True) as stream:
        texts = await _collect(stream)

    assert sorted(texts) == ["err", "out"]


@pytest.mark.asyncio
async def test_close_all_terminates_open_streams(
    runner: CommandRunner, make_cli: Callable[..., str]
) -> None:
    """Runner teardown leaves no child processes behind."""
    cli = make_cli("echo ready\nexec sleep 30")
    streams = [runner.stream(CommandSpec(cli, ())) for _ in range(3)]
    for stream in streams:
        await stream.start()
    assert runner.active_streams == 3

    await asyncio.wait_for(runner.close_all(), timeout=10)

    assert runner.active_streams == 0
    assert all(stream.returncode is not None for stream in streams)


@pytest.mark.asyncio
async def test_aclose_kills_process_ignoring_sigterm(make_cli: Callable[..., str]) -> None:
    """A child that ignores SIGTERM is killed after the grace period."""
    runner = CommandRunner(stream_terminate_grace=0.3)
    cli = make_cli("trap '' TERM\necho ready\nwhile true; do sleep 0.1; done")
    stream = runner.stream(CommandSpec(cli, ()))

    assert (await stream.__anext__()).text == "ready"
    await asyncio.wait_for(stream.aclose(), timeout=5)

    assert stream.returncode is not None
