"""Shared fixtures for the streaming client tests."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from docqa_client.config import BASE_URL_ENV, Configuration

TEST_CONFIG_YAML = """
api:
  base_url: "http://docqa.test/api/v1"
  stream_path: "/chat/stream"
  default_collection: "default"
http_client:
  connect_timeout: 5.0
  read_timeout: null
  write_timeout: 5.0
  pool_timeout: 5.0
logging:
  level: "DEBUG"
"""


class Recorder:
    """Collects callback invocations in the order they fire."""

    def __init__(self) -> None:
        self.events: list[tuple[str, ...]] = []

    def on_message(self, text: str) -> None:
        self.events.append(("message", text))

    def on_done(self) -> None:
        self.events.append(("done",))

    def on_error(self, message: str) -> None:
        self.events.append(("error", message))

    @property
    def errors(self) -> list[str]:
        return [event[1] for event in self.events if event[0] == "error"]


class ChunkStream(httpx.AsyncByteStream):
    """Response body that yields fixed chunks, optionally blocking or failing."""

    def __init__(
        self,
        chunks: list[bytes],
        *,
        block: bool = False,
        fail_with: Exception | None = None,
    ) -> None:
        self.chunks = chunks
        self.block = block
        self.fail_with = fail_with
        self.pulled = 0
        self.closed = False
        self.exhausted = asyncio.Event()
        self.release = asyncio.Event()

    async def __aiter__(self):
        for chunk in self.chunks:
            self.pulled += 1
            yield chunk
        self.exhausted.set()
        if self.fail_with is not None:
            raise self.fail_with
        if self.block:
            await self.release.wait()

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def config(tmp_path, monkeypatch) -> Configuration:
    monkeypatch.delenv(BASE_URL_ENV, raising=False)
    config_path = tmp_path / "config.yaml"
    config_path.write_text(TEST_CONFIG_YAML)
    return Configuration(str(config_path))
