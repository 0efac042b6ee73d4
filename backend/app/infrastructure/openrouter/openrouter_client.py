"""OpenRouter API client — implements the ChatProvider interface.

Communicates with the OpenRouter API (https://openrouter.ai/api/v1)
using httpx for both non-streaming and SSE streaming chat completions.
The streaming body is read chunk by chunk and re-assembled into lines by
SSELineDecoder, so partial network reads never split a record.
"""

import json
import logging
import time
from collections.abc import AsyncIterator
from contextlib import aclosing
from typing import Any

import httpx

from app.application.interfaces.chat_provider import ChatProvider
from app.domain.entities import (
    ChatCompletionResult,
    ChatMessage,
    ChatRequest,
    ProviderKind,
    TokenUsage,
)
from app.domain.exceptions import ChatProviderError
from app.infrastructure.openrouter.sse_decoder import SSEEvent, SSELineDecoder

logger = logging.getLogger(__name__)

_ROLE_MAP = {
    "assistant": "assistant",
    "model": "assistant",
    "system": "system",
    "tool": "tool",
}


class OpenRouterClient(ChatProvider):
    """Infrastructure adapter — connects to the OpenRouter API.

    Uses a shared httpx.AsyncClient when one is injected (connection
    pooling across requests), otherwise opens one per call.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://openrouter.ai/api/v1",
        app_name: str = "RPP Generator",
        referer: str = "http://localhost:3001",
        default_model: str = "anthropic/claude-sonnet-4.5",
        default_max_tokens: int = 65536,
        default_temperature: float = 0.7,
        timeout: float = 120.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._app_name = app_name
        self._referer = referer
        self._default_model = default_model
        self._default_max_tokens = default_max_tokens
        self._default_temperature = default_temperature
        self._timeout = timeout
        self._http_client = http_client

    @property
    def provider_kind(self) -> ProviderKind:
        return ProviderKind.OPENROUTER

    @property
    def _url(self) -> str:
        return f"{self._base_url}/chat/completions"

    def _get_headers(self) -> dict[str, str]:
        """Standard headers for OpenRouter requests, including attribution."""
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self._referer,
            "X-Title": self._app_name,
        }

    def resolve_model(self, request: ChatRequest) -> str:
        return request.model or self._default_model

    def _build_payload(self, request: ChatRequest, *, stream: bool) -> dict:
        """Build the OpenAI-compatible request body."""
        messages = [self._serialize_message(m) for m in request.messages]
        if request.system_instruction:
            messages.insert(0, {"role": "system", "content": request.system_instruction})

        payload: dict[str, Any] = {
            "model": self.resolve_model(request),
            "messages": messages,
            "stream": stream,
            "max_tokens": request.max_tokens or self._default_max_tokens,
            "temperature": (
                request.temperature
                if request.temperature is not None
                else self._default_temperature
            ),
        }
        if request.top_p is not None:
            payload["top_p"] = request.top_p
        if request.top_k is not None:
            payload["top_k"] = request.top_k
        if request.tools:
            payload["tools"] = list(request.tools)
        if request.tool_choice is not None:
            payload["tool_choice"] = request.tool_choice
        if request.response_format is not None:
            payload["response_format"] = {"type": request.response_format.type}
        return payload

    @staticmethod
    def _serialize_message(msg: ChatMessage) -> dict:
        """Convert a domain ChatMessage to an API-compatible dict."""
        role = _ROLE_MAP.get(msg.role, "user")

        if role == "tool":
            result: dict = {
                "role": "tool",
                "content": msg.content if isinstance(msg.content, str) else "",
                "tool_call_id": msg.tool_call_id or "",
            }
            if msg.name:
                result["name"] = msg.name
            return result

        if isinstance(msg.content, str):
            return {"role": role, "content": msg.content}

        # Multimodal content
        parts = []
        for part in msg.content:
            if part.type == "text":
                parts.append({"type": "text", "text": part.text or ""})
            elif part.type == "image_url" and part.image_url:
                parts.append({
                    "type": "image_url",
                    "image_url": part.image_url,
                })
            elif part.type == "file" and part.file_data:
                parts.append({
                    "type": "file",
                    "file": part.file_data,
                })
        return {"role": role, "content": parts}

    async def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or create a new one."""
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=self._timeout)

    async def complete(self, request: ChatRequest) -> ChatCompletionResult:
        """Send a non-streaming chat completion to OpenRouter."""
        payload = self._build_payload(request, stream=False)
        model = payload["model"]

        client = await self._get_client()
        should_close = self._http_client is None

        try:
            response = await client.post(
                self._url, headers=self._get_headers(), json=payload
            )

            if not response.is_success:
                self._raise_provider_error(response, model)

            data = response.json()
            return self._parse_completion_response(data, model)

        finally:
            if should_close:
                await client.aclose()

    async def stream(self, request: ChatRequest) -> AsyncIterator[str]:
        """Send a streaming chat completion to OpenRouter.

        Yields text deltas. A ``[DONE]`` record or the connection closing
        ends the stream normally; closing this generator early closes the
        upstream response.
        """
        payload = self._build_payload(request, stream=True)
        model = payload["model"]

        client = await self._get_client()
        should_close = self._http_client is None

        try:
            async with client.stream(
                "POST", self._url, headers=self._get_headers(), json=payload
            ) as response:
                if not response.is_success:
                    body = await response.aread()
                    self._raise_provider_error_from_bytes(
                        response.status_code, body, model
                    )

                async with aclosing(self._iter_events(response)) as events:
                    async for event in events:
                        if event.error is not None:
                            raise ChatProviderError(
                                provider=self.provider_name,
                                status_code=_as_status(event.error.get("code")),
                                message=event.error.get("message", "Unknown error"),
                                model=model,
                            )
                        if event.done:
                            return
                        yield event.content

        finally:
            if should_close:
                await client.aclose()

    @staticmethod
    async def _iter_events(response: httpx.Response) -> AsyncIterator[SSEEvent]:
        """Decode the body as it arrives; an unterminated last line is flushed at EOF."""
        decoder = SSELineDecoder()
        async for chunk in response.aiter_bytes():
            for event in decoder.feed(chunk):
                yield event
        for event in decoder.flush():
            yield event

    def _parse_completion_response(self, data: dict, model: str) -> ChatCompletionResult:
        """Parse the OpenRouter JSON response into a domain entity."""
        # Upstream can report an error with a 200 status
        error = data.get("error")
        if isinstance(error, dict):
            raise ChatProviderError(
                provider=self.provider_name,
                status_code=_as_status(error.get("code")),
                message=error.get("message", "Unknown error"),
                model=model,
            )

        choices = data.get("choices", [])
        if not choices:
            raise ChatProviderError(
                provider=self.provider_name,
                status_code=502,
                message="No choices in response",
                model=model,
            )

        choice = choices[0]
        message = choice.get("message") or {}
        usage_data = data.get("usage") or {}

        return ChatCompletionResult(
            id=data.get("id") or f"unified-{int(time.time() * 1000)}",
            provider=self.provider_name,
            model=model,
            content=message.get("content") or "",
            finish_reason=choice.get("finish_reason") or "stop",
            usage=TokenUsage(
                prompt_tokens=usage_data.get("prompt_tokens") or 0,
                completion_tokens=usage_data.get("completion_tokens") or 0,
                total_tokens=usage_data.get("total_tokens") or 0,
            ),
            function_calls=message.get("tool_calls") or None,
        )

    def _raise_provider_error(self, response: httpx.Response, model: str) -> None:
        """Raise ChatProviderError from a non-2xx httpx Response."""
        self._raise_provider_error_from_bytes(
            response.status_code, response.content, model
        )

    def _raise_provider_error_from_bytes(
        self, status_code: int, body: bytes, model: str
    ) -> None:
        """Raise ChatProviderError from raw response bytes, keeping the server text."""
        text = body.decode(errors="replace")
        message = text
        try:
            data = json.loads(body)
            error = data.get("error") if isinstance(data, dict) else None
            if isinstance(error, dict) and error.get("message"):
                # Generic messages hide the upstream detail (error.metadata.raw)
                message = f"{error['message']} - {text}"
        except ValueError:
            pass

        logger.debug("OpenRouter rejected request: status=%d body=%.500s", status_code, text)
        raise ChatProviderError(
            provider=self.provider_name,
            status_code=status_code,
            message=message,
            model=model,
        )


def _as_status(code: Any) -> int:
    """OpenRouter error codes are usually HTTP statuses; anything else maps to 502."""
    if isinstance(code, int) and 400 <= code < 600:
        return code
    return 502
