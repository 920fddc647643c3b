"""
Error types for the document-QA streaming client.

Only transport-level failures are modelled here. Protocol malformation in
the event stream is never an error, and cancellation is reported through
the stream handle rather than raised.
"""

from __future__ import annotations


class StreamError(Exception):
    """Base streaming error with request context."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class StreamRequestError(StreamError):
    """The server answered the stream request with a non-2xx status."""

    def __init__(
        self,
        status_code: int,
        response_text: str = "",
        **kwargs,
    ):
        message = f"Stream request failed: HTTP {status_code}"
        if response_text:
            message = f"{message} ({response_text})"
        super().__init__(message, status_code=status_code, **kwargs)
        self.response_text = response_text


class StreamCallbackError(StreamError):
    """A caller-supplied callback raised while an event was dispatched."""

    def __init__(self, event_type: str, original: Exception):
        super().__init__(
            f"Stream callback for '{event_type}' failed: {original!s}"
        )
        self.event_type = event_type
        self.original = original
