"""
HTTP client for streamed chat answers from the document-QA service.
"""

from __future__ import annotations

import httpx

from .config import Configuration
from .models import ChatRequest
from .streaming.models import DoneCallback, ErrorCallback, MessageCallback
from .streaming.session import StreamHandle, start_stream


class ChatStreamClient:
    """Starts stream sessions against the configured chat endpoint."""

    def __init__(
        self,
        config: Configuration,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        api_config = config.get_api_config()

        self.stream_path: str = api_config["stream_path"]
        self.default_collection: str = api_config["default_collection"]
        self.client: httpx.AsyncClient = httpx.AsyncClient(
            base_url=api_config["base_url"],
            timeout=config.build_timeout(),
            transport=transport,
        )

    def send_message_stream(
        self,
        request: ChatRequest,
        on_message: MessageCallback,
        on_done: DoneCallback,
        on_error: ErrorCallback,
    ) -> StreamHandle:
        """Ask a question and stream the answer through the callbacks."""
        payload = request.to_payload(self.default_collection)
        return start_stream(
            self.client,
            self.stream_path,
            payload,
            on_message,
            on_done,
            on_error,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> ChatStreamClient:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
