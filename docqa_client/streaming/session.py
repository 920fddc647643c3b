"""
Stream sessions: one streamed chat request from issue to termination.

A session owns the HTTP request, its cancellation token and the read loop.
The read loop runs as its own asyncio task and processes one chunk at a time,
so the decoder state it drives needs no locking.

Failures are reported once through the error callback, except when the
caller asked for cancellation first: after ``abort()`` nothing is reported.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from typing import Any

import httpx

from ..exceptions import StreamRequestError
from ..logging_utils import ContextualLogger, StreamErrorHandler
from .models import DoneCallback, ErrorCallback, MessageCallback
from .parser import StreamDecoder

MAX_ERROR_BODY_CHARS = 200
DEFAULT_STREAM_HEADERS = {"Accept": "text/event-stream"}


class CancellationToken:
    """Caller-side cancellation signal wired to the session's read task."""

    def __init__(self) -> None:
        self._cancelled = False
        self._task: asyncio.Task[None] | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def bind(self, task: asyncio.Task[None]) -> None:
        self._task = task

    def cancel(self) -> bool:
        """Request cancellation. Returns False if already requested."""
        if self._cancelled:
            return False
        self._cancelled = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
        return True


class StreamSession:
    """Read loop and lifecycle of a single streamed request."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        url: str,
        payload: dict[str, Any] | None,
        on_message: MessageCallback,
        on_done: DoneCallback,
        on_error: ErrorCallback,
        *,
        method: str = "POST",
        headers: dict[str, str] | None = None,
    ) -> None:
        self.session_id = uuid.uuid4().hex[:12]
        self.method = method
        self.url = url
        self.payload = payload
        self.headers = {**DEFAULT_STREAM_HEADERS, **(headers or {})}
        self.token = CancellationToken()

        self._client = client
        self._log = ContextualLogger({"session_id": self.session_id, "url": url})
        self._decoder = StreamDecoder(
            on_message, on_done, on_error, log=self._log.bind(component="decoder")
        )
        self._task: asyncio.Task[None] | None = None

    @property
    def terminated(self) -> bool:
        return self._decoder.terminated

    @property
    def task(self) -> asyncio.Task[None]:
        if self._task is None:
            raise RuntimeError("Stream session has not been started")
        return self._task

    def start(self) -> StreamHandle:
        """Launch the read loop on the running event loop."""
        if self._task is not None:
            raise RuntimeError("Stream session already started")
        self._task = asyncio.create_task(
            self._run(), name=f"docqa-stream-{self.session_id}"
        )
        self.token.bind(self._task)
        return StreamHandle(self)

    def abort(self) -> None:
        if self._task is None or self._task.done() or self.terminated:
            return
        if self.token.cancel():
            self._log.info("Stream abort requested")

    async def _run(self) -> None:
        start_time = time.perf_counter()
        reason = "completed"

        self._log.info("Stream session started", method=self.method)

        try:
            await self._read()
        except asyncio.CancelledError:
            if not self.token.cancelled:
                reason = "cancelled"
                raise
            reason = "aborted"
        except Exception as e:
            if self.token.cancelled:
                reason = "aborted"
                self._log.debug(
                    "Suppressing error after abort",
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
            else:
                reason = "failed"
                self._report_failure(e)
        finally:
            duration = round((time.perf_counter() - start_time) * 1000, 2)
            self._log.info(
                "Stream session finished",
                reason=reason,
                duration_ms=duration,
                **self._decoder.get_stats(),
            )

    async def _read(self) -> None:
        async with self._client.stream(
            self.method, self.url, json=self.payload, headers=self.headers
        ) as response:
            if not response.is_success:
                body = await response.aread()
                text = body.decode("utf-8", errors="replace").strip()
                raise StreamRequestError(
                    response.status_code,
                    text[:MAX_ERROR_BODY_CHARS],
                    url=self.url,
                )

            self._log.debug("Stream response opened", status_code=response.status_code)

            first_chunk = True
            async for chunk in response.aiter_bytes():
                if first_chunk:
                    first_chunk = False
                    self._log.debug("First chunk received")
                if self._decoder.feed(chunk):
                    return
                # Buffered chunks arrive without a suspension point where
                # the task cancel could land
                if self.token.cancelled:
                    return

            if not self.token.cancelled:
                self._decoder.close()

    def _report_failure(self, error: Exception) -> None:
        message = StreamErrorHandler.describe(error)
        self._log.error(
            "Stream failed",
            error_category=StreamErrorHandler.classify_error(error),
            error_type=type(error).__name__,
            error_message=message,
        )
        try:
            self._decoder.fail(message)
        except Exception as callback_error:
            self._log.error(
                "Error callback raised",
                error_type=type(callback_error).__name__,
                error_message=str(callback_error),
            )


class StreamHandle:
    """Caller's handle on a running stream session."""

    def __init__(self, session: StreamSession) -> None:
        self._session = session

    @property
    def session_id(self) -> str:
        return self._session.session_id

    @property
    def done(self) -> bool:
        return self._session.task.done()

    @property
    def cancelled(self) -> bool:
        return self._session.token.cancelled

    def abort(self) -> None:
        """Cancel the stream. Safe to call at any time, any number of times."""
        self._session.abort()

    async def wait(self) -> None:
        """
        Wait for the session to end.

        Cancellation requested through ``abort()`` and transport failures are
        not raised here; they are reported (or suppressed) via the callbacks.
        """
        task = self._session.task
        await asyncio.wait({task})

        if task.cancelled():
            if not self.cancelled:
                raise asyncio.CancelledError()
            return

        error = task.exception()
        if error is not None:
            raise error


def start_stream(
    client: httpx.AsyncClient,
    url: str,
    payload: dict[str, Any] | None,
    on_message: MessageCallback,
    on_done: DoneCallback,
    on_error: ErrorCallback,
    *,
    method: str = "POST",
    headers: dict[str, str] | None = None,
) -> StreamHandle:
    """
    Issue a streamed request and decode its events in the background.

    Args:
        client: HTTP client the request is sent with
        url: Absolute URL, or a path relative to the client's base_url
        payload: JSON body of the request
        on_message: Called with each non-empty partial answer
        on_done: Called once when the answer is complete
        on_error: Called once with a message when the stream fails

    Returns:
        Handle with ``abort()`` and ``wait()``
    """
    session = StreamSession(
        client,
        url,
        payload,
        on_message,
        on_done,
        on_error,
        method=method,
        headers=headers,
    )
    return session.start()
