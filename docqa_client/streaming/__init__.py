"""
Event-stream decoding for streamed chat answers.

This package contains:
- Line framing and record assembly for text/event-stream bodies
- Dispatch of message, done and error events to caller callbacks
- Stream sessions with cooperative cancellation
"""

from __future__ import annotations

from .models import FlushResult, ParsedFrame, PendingEvent, StreamEventType
from .parser import EventAssembler, EventDispatcher, LineFramer, StreamDecoder
from .session import CancellationToken, StreamHandle, StreamSession, start_stream

__all__ = [
    "CancellationToken",
    "EventAssembler",
    "EventDispatcher",
    "FlushResult",
    "LineFramer",
    "ParsedFrame",
    "PendingEvent",
    "StreamDecoder",
    "StreamEventType",
    "StreamHandle",
    "StreamSession",
    "start_stream",
]
