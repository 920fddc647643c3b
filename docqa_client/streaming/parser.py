"""
Incremental event-stream decoder for streamed chat answers.

Network chunks arrive at arbitrary boundaries. The pieces here turn them into
discrete callbacks in wire order:

    bytes -> LineFramer -> EventAssembler -> EventDispatcher -> callbacks

Only records labeled with an ``event:`` line are dispatched. Blank lines end a
record; a trailing line that never received its line feed is discarded when the
stream closes.
"""

from __future__ import annotations

import codecs
from typing import Any

from ..exceptions import StreamCallbackError
from ..logging_utils import ContextualLogger
from .models import (
    NO_FLUSH,
    DoneCallback,
    ErrorCallback,
    FlushResult,
    MessageCallback,
    ParsedFrame,
    PendingEvent,
    StreamCallbacks,
    StreamEventType,
)

EVENT_PREFIX = "event:"
DATA_PREFIX = "data:"


class LineFramer:
    """Splits decoded text into complete lines, carrying the partial tail."""

    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""

    def feed(self, chunk: bytes) -> list[str]:
        """Decode a chunk and return every line it completed."""
        self._buffer += self._decoder.decode(chunk)
        *lines, self._buffer = self._buffer.split("\n")
        return [line[:-1] if line.endswith("\r") else line for line in lines]

    def discard(self) -> str:
        """Drop the unterminated tail at end of stream and return it."""
        leftover = self._buffer
        self._buffer = ""
        self._decoder.reset()
        return leftover


class EventDispatcher:
    """Routes flushed frames to the caller and owns the terminated flag."""

    def __init__(self, callbacks: StreamCallbacks, log: ContextualLogger):
        self._callbacks = callbacks
        self._log = log
        self.terminated = False
        self.dispatched = 0

    def dispatch(self, frame: ParsedFrame) -> bool:
        """Deliver a frame. Returns True when the stream must stop."""
        if self.terminated:
            return True

        try:
            event_type = StreamEventType(frame.event_type)
        except ValueError:
            self._log.debug("Ignoring unknown event type", event_type=frame.event_type)
            return False

        self.dispatched += 1

        if event_type is StreamEventType.MESSAGE:
            if frame.data:
                self._invoke(event_type, self._callbacks.on_message, frame.data)
            return False

        # Set before invoking so a re-entrant feed from the callback is a no-op
        self.terminated = True
        if event_type is StreamEventType.DONE:
            self._invoke(event_type, self._callbacks.on_done)
        else:
            self._invoke(event_type, self._callbacks.on_error, frame.data)
        return True

    def finish(self) -> None:
        """Synthesize completion for a stream that closed without one."""
        if self.terminated:
            return
        self.terminated = True
        self._log.debug("Stream closed without terminal event, completing")
        self._invoke(StreamEventType.DONE, self._callbacks.on_done)

    def fail(self, message: str) -> None:
        """Report a transport failure, unless the stream already ended."""
        if self.terminated:
            return
        self.terminated = True
        self._callbacks.on_error(message)

    @staticmethod
    def _invoke(event_type: StreamEventType, callback: Any, *args: Any) -> None:
        try:
            callback(*args)
        except Exception as e:
            raise StreamCallbackError(event_type.value, e) from e


class EventAssembler:
    """
    Groups framed lines into records and flushes them on blank lines.

    A flush resets the pending record whatever the dispatch outcome, including
    when a callback raises.
    """

    def __init__(self, dispatcher: EventDispatcher, log: ContextualLogger):
        self._dispatcher = dispatcher
        self._log = log
        self._pending = PendingEvent()
        self.dropped = 0

    def consume(self, line: str) -> FlushResult:
        if not line:
            return self._flush()

        if line.startswith(EVENT_PREFIX):
            self._pending.event_type = line[len(EVENT_PREFIX):].strip()
        elif line.startswith(DATA_PREFIX):
            value = line[len(DATA_PREFIX):]
            if value.startswith(" "):
                value = value[1:]
            self._pending.data_lines.append(value)
        # id:, retry:, comments and unknown fields are ignored

        return NO_FLUSH

    def flush_at_end(self) -> FlushResult:
        """Flush whatever record is pending when the stream closes."""
        return self._flush()

    def _flush(self) -> FlushResult:
        pending = self._pending
        try:
            if not pending.event_type:
                if pending.data_lines:
                    self.dropped += 1
                    self._log.debug(
                        "Dropping unlabeled record", data_lines=len(pending.data_lines)
                    )
                return NO_FLUSH

            frame = ParsedFrame(
                event_type=pending.event_type,
                data="\n".join(pending.data_lines),
            )
            terminal = self._dispatcher.dispatch(frame)
            return FlushResult(flushed=True, terminal=terminal)
        finally:
            pending.reset()


class StreamDecoder:
    """
    Per-session decoder from raw response chunks to caller callbacks.

    Usage:
        decoder = StreamDecoder(on_message, on_done, on_error)
        for chunk in chunks:
            if decoder.feed(chunk):
                break
        decoder.close()

    Feeding after a terminal event is a no-op. Instances are not shared
    between sessions.
    """

    def __init__(
        self,
        on_message: MessageCallback,
        on_done: DoneCallback,
        on_error: ErrorCallback,
        log: ContextualLogger | None = None,
    ):
        self._log = log or ContextualLogger()
        self._framer = LineFramer()
        self._dispatcher = EventDispatcher(
            StreamCallbacks(on_message, on_done, on_error), self._log
        )
        self._assembler = EventAssembler(self._dispatcher, self._log)
        self.stats = {
            'chunks': 0,
            'bytes': 0,
            'lines': 0,
        }

    @property
    def terminated(self) -> bool:
        return self._dispatcher.terminated

    def feed(self, chunk: bytes) -> bool:
        """Decode one chunk. Returns True once the stream has terminated."""
        if self.terminated:
            return True

        self.stats['chunks'] += 1
        self.stats['bytes'] += len(chunk)

        for line in self._framer.feed(chunk):
            self.stats['lines'] += 1
            if self._assembler.consume(line).terminal:
                return True
        return False

    def close(self) -> None:
        """Handle a natural end of stream: flush, then complete if needed."""
        if self.terminated:
            return

        leftover = self._framer.discard()
        if leftover:
            self._log.debug("Discarding unterminated line", length=len(leftover))

        self._assembler.flush_at_end()
        self._dispatcher.finish()

    def fail(self, message: str) -> None:
        """Report a transport failure through the error callback."""
        self._dispatcher.fail(message)

    def get_stats(self) -> dict[str, int]:
        """Get decoding statistics for monitoring."""
        return {
            **self.stats,
            'frames': self._dispatcher.dispatched,
            'dropped': self._assembler.dropped,
        }
