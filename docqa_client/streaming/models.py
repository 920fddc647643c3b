"""
Streaming-specific dataclasses for the event-stream decoder.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

MessageCallback = Callable[[str], None]
DoneCallback = Callable[[], None]
ErrorCallback = Callable[[str], None]


class StreamEventType(Enum):
    """Event types the dispatcher acts on. Anything else is ignored."""
    MESSAGE = "message"
    DONE = "done"
    ERROR = "error"


@dataclass
class PendingEvent:
    """Record being assembled from consecutive lines."""
    event_type: str = ""
    data_lines: list[str] = field(default_factory=list)

    def reset(self) -> None:
        self.event_type = ""
        self.data_lines = []


@dataclass(frozen=True)
class ParsedFrame:
    """Result of flushing one labeled record."""
    event_type: str
    data: str


@dataclass(frozen=True)
class FlushResult:
    """Outcome of feeding one line to the assembler."""
    flushed: bool = False
    terminal: bool = False


NO_FLUSH = FlushResult()


@dataclass(frozen=True)
class StreamCallbacks:
    """The three caller callbacks of one session."""
    on_message: MessageCallback
    on_done: DoneCallback
    on_error: ErrorCallback
