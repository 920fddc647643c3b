"""
Streaming client for a document-QA service.

This package provides:
- Incremental decoding of text/event-stream chat answers
- Stream sessions with cooperative cancellation
- YAML/.env configuration and structured logging
"""

from __future__ import annotations

from .chat_client import ChatStreamClient
from .config import Configuration
from .exceptions import StreamCallbackError, StreamError, StreamRequestError
from .models import ChatRequest
from .streaming import StreamDecoder, StreamHandle, start_stream

__all__ = [
    "ChatRequest",
    "ChatStreamClient",
    "Configuration",
    "StreamCallbackError",
    "StreamDecoder",
    "StreamError",
    "StreamHandle",
    "StreamRequestError",
    "start_stream",
]
