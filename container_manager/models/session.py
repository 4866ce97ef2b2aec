"""State models for long-lived polling and streaming sessions."""

import asyncio
from dataclasses import dataclass, field
from enum import Enum


class StreamState(Enum):
    """Lifecycle of one streamed log view."""

    IDLE = "idle"
    STREAMING = "streaming"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (StreamState.COMPLETED, StreamState.CANCELLED, StreamState.FAILED)


@dataclass
class PollingSession:
    """One repeating poll loop owned by a PollingController.

    The stop event doubles as the cancellation token: once set, the session
    is permanently inactive and may never publish again.
    """

    interval_seconds: float
    stop_event: asyncio.Event = field(default_factory=asyncio.Event)
    ticks: int = 0

    @property
    def active(self) -> bool:
        return not self.stop_event.is_set()

    def cancel(self) -> None:
        """Invalidate the session."""
        self.stop_event.set()
