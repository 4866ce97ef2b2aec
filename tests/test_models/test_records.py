"""Tests for record and command models."""

import dataclasses

import pytest

from container_manager.models import (
    CommandSpec,
    ContainerRecord,
    ContainerState,
    ExecutionResult,
    ImageRecord,
    NetworkRecord,
    PollingSession,
    StreamState,
    VolumeRecord,
)


class TestContainerState:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("running", ContainerState.RUNNING),
            ("Stopped", ContainerState.STOPPED),
            (" exited ", ContainerState.EXITED),
            ("hibernating", ContainerState.UNKNOWN),
            ("", ContainerState.UNKNOWN),
            (None, ContainerState.UNKNOWN),
            (3, ContainerState.UNKNOWN),
        ],
    )
    def test_parse(self, raw: object, expected: ContainerState) -> None:
        assert ContainerState.parse(raw) is expected


class TestRecords:
    def test_natural_keys(self) -> None:
        assert ContainerRecord(id="c1", display_name="web", image_reference="").key == "c1"
        assert ImageRecord(reference="alpine:3", repository="alpine", tag="3").key == "alpine:3"
        assert VolumeRecord(name="data").key == "data"
        assert NetworkRecord(name="default").key == "default"

    def test_is_running(self) -> None:
        running = ContainerRecord("c1", "c1", "alpine", ContainerState.RUNNING)
        stopped = ContainerRecord("c2", "c2", "alpine", ContainerState.STOPPED)

        assert running.is_running
        assert not stopped.is_running

    def test_records_are_immutable(self) -> None:
        record = VolumeRecord(name="data")

        with pytest.raises(dataclasses.FrozenInstanceError):
            record.name = "other"  # type: ignore[misc]


class TestCommandModels:
    def test_spec_arguments_are_tuple(self) -> None:
        spec = CommandSpec("/usr/local/bin/container", ["list", "--all"])  # type: ignore[arg-type]

        assert spec.arguments == ("list", "--all")
        assert spec.argv == ["/usr/local/bin/container", "list", "--all"]

    def test_spec_display_quotes(self) -> None:
        spec = CommandSpec("/usr/local/bin/container", ("run", "--name", "my box"))

        assert spec.display() == "/usr/local/bin/container run --name 'my box'"

    @pytest.mark.parametrize(
        ("result", "message"),
        [
            (ExecutionResult(1, "out", "  not found \n"), "not found"),
            (ExecutionResult(1, " only stdout ", ""), "only stdout"),
            (ExecutionResult(3, "", "  "), "exit code 3"),
        ],
    )
    def test_error_message(self, result: ExecutionResult, message: str) -> None:
        assert not result.success
        assert result.error_message == message

    def test_success(self) -> None:
        assert ExecutionResult(0, "", "").success


class TestSessionModels:
    def test_terminal_states(self) -> None:
        assert not StreamState.IDLE.is_terminal
        assert not StreamState.STREAMING.is_terminal
        assert StreamState.COMPLETED.is_terminal
        assert StreamState.CANCELLED.is_terminal
        assert StreamState.FAILED.is_terminal

    @pytest.mark.asyncio
    async def test_polling_session_cancel(self) -> None:
        session = PollingSession(interval_seconds=1.0)

        assert session.active
        session.cancel()
        session.cancel()

        assert not session.active
        assert session.stop_event.is_set()
