"""Tests for OpenAIChatClient.

Covers request shape, response parsing edge cases (null content, missing
model, missing usage), non-2xx statuses, transport failures, undecodable
bodies, and client lifecycle.
"""

import json

import httpx
import pytest

from tests.helpers import (
    completion_payload,
    make_client,
    raise_error,
    respond_json,
    respond_text,
)
from warden.backends.openai_api import Completion, OpenAIChatClient
from warden.core.config import ExecutorOptions
from warden.core.errors import ApiStatusError
from warden.core.result import Err, Ok


async def _complete(client: OpenAIChatClient, prompt: str = "hello") -> object:
    return await client.complete(prompt, model="gpt-4.1", max_tokens=64000, api_key="sk-test")


class TestComplete:
    """Tests for complete()."""

    @pytest.mark.asyncio
    async def test_success(self) -> None:
        transport = respond_json(completion_payload("pong", model="gpt-4.1-2025-04-14"))
        async with make_client(transport) as client:
            result = await _complete(client)

        assert result == Ok(Completion(text="pong", model="gpt-4.1-2025-04-14", total_tokens=12))

    @pytest.mark.asyncio
    async def test_request_shape(self) -> None:
        transport = respond_json(completion_payload())
        async with make_client(transport) as client:
            await _complete(client, "Analyze the repository")

        [request] = transport.requests
        assert request.method == "POST"
        assert str(request.url) == "https://api.test/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer sk-test"
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content) == {
            "model": "gpt-4.1",
            "messages": [{"role": "user", "content": "Analyze the repository"}],
            "max_completion_tokens": 64000,
        }

    @pytest.mark.asyncio
    async def test_null_content_becomes_empty_string(self) -> None:
        async with make_client(respond_json(completion_payload(None))) as client:
            result = await _complete(client)
        assert isinstance(result, Ok)
        assert result.value.text == ""

    @pytest.mark.asyncio
    async def test_no_choices_becomes_empty_string(self) -> None:
        async with make_client(respond_json({"model": "gpt-4.1", "choices": []})) as client:
            result = await _complete(client)
        assert isinstance(result, Ok)
        assert result.value.text == ""

    @pytest.mark.asyncio
    async def test_missing_model_falls_back_to_requested(self) -> None:
        payload = completion_payload("hi")
        del payload["model"]
        async with make_client(respond_json(payload)) as client:
            result = await _complete(client)
        assert isinstance(result, Ok)
        assert result.value.model == "gpt-4.1"

    @pytest.mark.asyncio
    async def test_missing_usage(self) -> None:
        async with make_client(respond_json(completion_payload("hi", total_tokens=None))) as client:
            result = await _complete(client)
        assert isinstance(result, Ok)
        assert result.value.total_tokens is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 401, 429, 500, 503])
    async def test_non_2xx_is_api_status_error(self, status: int) -> None:
        async with make_client(respond_text("slow down", status)) as client:
            result = await _complete(client)

        assert isinstance(result, Err)
        assert isinstance(result.error, ApiStatusError)
        assert result.error.status == status
        assert str(result.error) == f"OpenAI API error ({status}): slow down"

    @pytest.mark.asyncio
    async def test_transport_error_is_returned(self) -> None:
        error = httpx.ConnectError("connection refused")
        async with make_client(raise_error(error)) as client:
            result = await _complete(client)
        assert isinstance(result, Err)
        assert result.error is error

    @pytest.mark.asyncio
    async def test_timeout_is_returned(self) -> None:
        async with make_client(raise_error(httpx.ReadTimeout("timed out"))) as client:
            result = await _complete(client)
        assert isinstance(result, Err)
        assert isinstance(result.error, httpx.TimeoutException)

    @pytest.mark.asyncio
    async def test_undecodable_body(self) -> None:
        async with make_client(respond_text("<html>gateway</html>", 200)) as client:
            result = await _complete(client)
        assert isinstance(result, Err)
        assert isinstance(result.error, ValueError)

    @pytest.mark.asyncio
    async def test_non_object_body(self) -> None:
        transport = respond_text(json.dumps(["not", "an", "object"]), 200)
        async with make_client(transport) as client:
            result = await _complete(client)
        assert isinstance(result, Err)
        assert "Unexpected completion payload" in str(result.error)


class TestLifecycle:
    """Tests for lazy client creation and close()."""

    def test_from_options(self) -> None:
        options = ExecutorOptions(
            base_url="https://proxy.test/v1/",
            request_timeout_seconds=120.0,
            connect_timeout_seconds=5.0,
        )
        client = OpenAIChatClient.from_options(options)
        assert client.base_url == "https://proxy.test/v1"
        assert client.timeout == 120.0
        assert client.connect_timeout == 5.0

    def test_timeouts_applied_to_http_client(self) -> None:
        client = OpenAIChatClient(timeout=600.0, connect_timeout=10.0)
        http_client = client._get_client()
        assert http_client.timeout.read == 600.0
        assert http_client.timeout.connect == 10.0

    def test_http_client_reused(self) -> None:
        client = OpenAIChatClient()
        assert client._get_client() is client._get_client()

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self) -> None:
        client = make_client(respond_json(completion_payload()))
        await _complete(client)
        await client.close()
        await client.close()
        assert client._client is None

    @pytest.mark.asyncio
    async def test_usable_after_close(self) -> None:
        transport = respond_json(completion_payload())
        client = make_client(transport)
        await _complete(client)
        await client.close()
        result = await _complete(client)
        await client.close()
        assert isinstance(result, Ok)
        assert transport.call_count == 2
