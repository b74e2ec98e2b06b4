"""Shared test helpers for Warden tests."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx

from warden.backends.openai_api import OpenAIChatClient


def completion_payload(
    text: str | None = "pong",
    model: str = "gpt-4.1-2025-04-14",
    total_tokens: int | None = 12,
) -> dict[str, Any]:
    """Build a chat completions response body."""
    payload: dict[str, Any] = {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "model": model,
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": text}, "finish_reason": "stop"}
        ],
    }
    if total_tokens is not None:
        payload["usage"] = {
            "prompt_tokens": 4,
            "completion_tokens": max(total_tokens - 4, 0),
            "total_tokens": total_tokens,
        }
    return payload


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []

        def _handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_handler)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def json_bodies(self) -> list[dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests]


def respond_json(payload: dict[str, Any], status_code: int = 200) -> RecordingTransport:
    return RecordingTransport(lambda request: httpx.Response(status_code, json=payload))


def respond_text(text: str, status_code: int) -> RecordingTransport:
    return RecordingTransport(lambda request: httpx.Response(status_code, text=text))


def raise_error(error: Exception) -> RecordingTransport:
    def _handler(request: httpx.Request) -> httpx.Response:
        raise error

    return RecordingTransport(_handler)


def make_client(transport: httpx.AsyncBaseTransport) -> OpenAIChatClient:
    return OpenAIChatClient(base_url="https://api.test/v1", transport=transport)
