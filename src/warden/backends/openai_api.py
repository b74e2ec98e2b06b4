"""OpenAI-compatible chat completions client.

Thin async client over ``POST {base_url}/chat/completions`` used by both the
credential preflight ping and the execution pipeline. Every request is a
single user message; tool use and multi-turn conversations are not
supported.

Failures are returned rather than raised: a non-2xx response becomes
``Err(ApiStatusError)`` with the body text attached, and httpx transport
errors (timeouts, refused connections) come back as ``Err(exc)`` for the
classifier to inspect.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import TracebackType
from typing import Any, TypedDict

import httpx

from warden.core.config.environment import ExecutorOptions
from warden.core.constants import (
    DEFAULT_API_BASE_URL,
    DEFAULT_CONNECT_TIMEOUT_SECONDS,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
)
from warden.core.errors import ApiStatusError
from warden.core.logging import get_logger
from warden.core.result import Err, Ok, Result

# Module-level logger
_logger = get_logger("backend.openai")

COMPLETIONS_PATH = "/chat/completions"


class ChatMessage(TypedDict):
    role: str
    content: str


class ChatCompletionRequest(TypedDict):
    """Request payload for the chat completions endpoint."""

    model: str
    messages: list[ChatMessage]
    max_completion_tokens: int


@dataclass(frozen=True)
class Completion:
    """Parsed completion response.

    Attributes:
        text: First choice's message content; empty when the API sent none.
        model: Model reported by the API, or the requested model.
        total_tokens: ``usage.total_tokens`` when the API reported usage.
    """

    text: str
    model: str
    total_tokens: int | None = None


def _parse_completion(data: Any, requested_model: str) -> Completion:
    if not isinstance(data, dict):
        raise ValueError(f"Unexpected completion payload type: {type(data).__name__}")

    text = ""
    choices = data.get("choices") or []
    if choices and isinstance(choices[0], dict):
        message = choices[0].get("message") or {}
        text = message.get("content") or ""

    usage = data.get("usage") or {}
    total_tokens = usage.get("total_tokens") if isinstance(usage, dict) else None

    return Completion(
        text=text,
        model=data.get("model") or requested_model,
        total_tokens=total_tokens if isinstance(total_tokens, int) else None,
    )


class OpenAIChatClient:
    """Async client for an OpenAI-compatible completions endpoint.

    The underlying ``httpx.AsyncClient`` is created lazily on first use and
    reused until ``close()``. Credentials are passed per request so the key
    is always read fresh from the environment by the caller.

    Example usage:
        async with OpenAIChatClient() as client:
            result = await client.complete(
                "Summarize the repository", model="gpt-4.1",
                max_tokens=64000, api_key=key,
            )
            if result.ok:
                print(result.value.text)
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: API base URL, e.g. ``https://api.openai.com/v1``.
            timeout: Overall per-request timeout in seconds.
            connect_timeout: Connection establishment timeout in seconds.
            transport: Optional httpx transport (tests use ``httpx.MockTransport``).
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_options(
        cls,
        options: ExecutorOptions,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> OpenAIChatClient:
        """Create a client from executor options."""
        return cls(
            base_url=options.resolved_base_url(),
            timeout=options.request_timeout_seconds,
            connect_timeout=options.connect_timeout_seconds,
            transport=transport,
        )

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout, connect=self.connect_timeout),
                transport=self._transport,
            )
        return self._client

    async def complete(
        self,
        prompt: str,
        *,
        model: str,
        max_tokens: int,
        api_key: str,
    ) -> Result[Completion, Exception]:
        """Send one single-turn completion request.

        Args:
            prompt: Sole user message content.
            model: Model identifier.
            max_tokens: ``max_completion_tokens`` budget.
            api_key: Bearer credential.

        Returns:
            Ok(Completion), Err(ApiStatusError) for non-2xx responses, or
            Err(exception) for transport and decoding failures.
        """
        payload: ChatCompletionRequest = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "max_completion_tokens": max_tokens,
        }

        _logger.debug(
            "completion_request",
            model=model,
            prompt_length=len(prompt),
            max_tokens=max_tokens,
        )

        try:
            response = await self._get_client().post(
                COMPLETIONS_PATH,
                json=payload,
                headers={"Authorization": f"Bearer {api_key}"},
            )
        except httpx.HTTPError as e:
            _logger.warning(
                "completion_transport_error",
                model=model,
                error_type=type(e).__name__,
                error=str(e),
            )
            return Err(e)

        if not response.is_success:
            _logger.warning(
                "completion_status_error",
                model=model,
                status_code=response.status_code,
            )
            return Err(ApiStatusError(response.status_code, response.text))

        try:
            completion = _parse_completion(response.json(), model)
        except ValueError as e:
            # json.JSONDecodeError is a ValueError subclass
            _logger.warning("completion_decode_error", model=model, error=str(e))
            return Err(e)

        _logger.debug(
            "completion_received",
            model=completion.model,
            response_length=len(completion.text),
            total_tokens=completion.total_tokens,
        )
        return Ok(completion)

    async def close(self) -> None:
        """Close the HTTP client and release connections."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> OpenAIChatClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()


__all__ = ["ChatCompletionRequest", "Completion", "OpenAIChatClient"]
