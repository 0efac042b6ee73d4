"""Gemini API client — implements the ChatProvider interface.

Talks to Gemini through the google-genai SDK's async surface
(``client.aio.models``). Buffered calls aggregate the first candidate's
parts; streaming calls relay the SDK's chunk iterator, dropping chunks
that carry no text.
"""

import base64
import binascii
import logging
import mimetypes
import time
from collections.abc import AsyncIterator
from contextlib import aclosing
from typing import Any

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from app.application.interfaces.chat_provider import ChatProvider
from app.domain.entities import (
    ChatCompletionResult,
    ChatMessage,
    ChatRequest,
    ContentPart,
    ProviderKind,
    TokenUsage,
)
from app.domain.exceptions import ChatProviderError

logger = logging.getLogger(__name__)

_DEFAULT_IMAGE_MIME = "image/jpeg"


class GeminiClient(ChatProvider):
    """Infrastructure adapter — connects to Gemini via google-genai.

    ``client`` may be injected (tests pass a fake exposing
    ``aio.models.generate_content`` / ``generate_content_stream``).
    """

    def __init__(
        self,
        api_key: str | None = None,
        default_model: str = "gemini-3-pro-preview",
        default_max_tokens: int = 65536,
        default_temperature: float = 0.7,
        client: Any | None = None,
    ):
        if client is None:
            if not api_key:
                raise ValueError("GeminiClient requires an api_key or a client")
            client = genai.Client(api_key=api_key)
        self._client = client
        self._default_model = default_model
        self._default_max_tokens = default_max_tokens
        self._default_temperature = default_temperature

    @property
    def provider_kind(self) -> ProviderKind:
        return ProviderKind.GEMINI

    def resolve_model(self, request: ChatRequest) -> str:
        return request.model or self._default_model

    # ── Request translation ──────────────────────────────────────────

    def _build_contents(self, request: ChatRequest) -> list[types.Content]:
        return [self._to_content(m) for m in request.messages]

    @staticmethod
    def _to_content(msg: ChatMessage) -> types.Content:
        role = "model" if msg.role in ("assistant", "model") else "user"
        if isinstance(msg.content, str):
            return types.Content(role=role, parts=[types.Part(text=msg.content)])
        parts = [
            p for p in (GeminiClient._to_part(part) for part in msg.content) if p is not None
        ]
        return types.Content(role=role, parts=parts)

    @staticmethod
    def _to_part(part: ContentPart) -> types.Part | None:
        if part.type == "text":
            return types.Part(text=part.text or "")
        if part.type == "image_url" and part.image_url:
            return _part_from_url(part.image_url.get("url", ""), _DEFAULT_IMAGE_MIME)
        if part.type == "file" and part.file_data:
            return _part_from_url(
                part.file_data.get("file_data", ""),
                mimetypes.guess_type(part.file_data.get("filename", ""))[0]
                or "application/octet-stream",
            )
        logger.debug("Dropping unsupported content part type=%s", part.type)
        return None

    def _build_config(self, request: ChatRequest) -> types.GenerateContentConfig:
        config: dict[str, Any] = {
            "max_output_tokens": request.max_tokens or self._default_max_tokens,
            "temperature": (
                request.temperature
                if request.temperature is not None
                else self._default_temperature
            ),
        }
        if request.top_p is not None:
            config["top_p"] = request.top_p
        if request.top_k is not None:
            config["top_k"] = request.top_k
        if request.wants_json:
            config["response_mime_type"] = "application/json"
        if request.system_instruction:
            config["system_instruction"] = request.system_instruction

        tools = [types.Tool.model_validate(t) for t in request.tools or ()]
        if request.enable_search:
            tools.append(types.Tool(google_search=types.GoogleSearch()))
        if tools:
            config["tools"] = tools

        return types.GenerateContentConfig(**config)

    # ── Calls ────────────────────────────────────────────────────────

    async def complete(self, request: ChatRequest) -> ChatCompletionResult:
        """Send a non-streaming generate_content call to Gemini."""
        model = self.resolve_model(request)
        try:
            response = await self._client.aio.models.generate_content(
                model=model,
                contents=self._build_contents(request),
                config=self._build_config(request),
            )
        except genai_errors.APIError as e:
            raise self._wrap_error(e, model) from e

        return self._parse_response(response, model)

    async def stream(self, request: ChatRequest) -> AsyncIterator[str]:
        """Stream generate_content from Gemini, yielding non-empty text deltas."""
        model = self.resolve_model(request)
        try:
            chunks = await self._client.aio.models.generate_content_stream(
                model=model,
                contents=self._build_contents(request),
                config=self._build_config(request),
            )
            async with aclosing(chunks) as stream:
                async for chunk in stream:
                    text = chunk.text
                    if text:
                        yield text
        except genai_errors.APIError as e:
            raise self._wrap_error(e, model) from e

    # ── Response translation ─────────────────────────────────────────

    def _parse_response(
        self, response: types.GenerateContentResponse, model: str
    ) -> ChatCompletionResult:
        candidate = response.candidates[0] if response.candidates else None
        parts = (candidate.content.parts if candidate and candidate.content else None) or []

        text_content = ""
        function_calls: list[dict[str, Any]] = []
        for part in parts:
            if part.text and not part.thought:
                text_content += part.text
            if part.function_call:
                function_calls.append(part.function_call.model_dump(exclude_none=True))

        usage = response.usage_metadata
        grounding = candidate.grounding_metadata if candidate else None

        return ChatCompletionResult(
            id=getattr(response, "response_id", None) or f"unified-{int(time.time() * 1000)}",
            provider=self.provider_name,
            model=model,
            content=text_content,
            finish_reason=_finish_reason(candidate),
            usage=TokenUsage(
                prompt_tokens=(usage.prompt_token_count or 0) if usage else 0,
                completion_tokens=(usage.candidates_token_count or 0) if usage else 0,
                total_tokens=(usage.total_token_count or 0) if usage else 0,
            ),
            function_calls=function_calls or None,
            grounding_metadata=(
                grounding.model_dump(mode="json", exclude_none=True) if grounding else None
            ),
        )

    def _wrap_error(self, error: genai_errors.APIError, model: str) -> ChatProviderError:
        return ChatProviderError(
            provider=self.provider_name,
            status_code=error.code or 502,
            message=error.message or str(error),
            model=model,
        )


def _finish_reason(candidate: types.Candidate | None) -> str:
    if candidate is None or candidate.finish_reason is None:
        return "STOP"
    reason = candidate.finish_reason
    return reason.value if hasattr(reason, "value") else str(reason)


def _part_from_url(url: str, fallback_mime: str) -> types.Part | None:
    """Inline ``data:`` URLs as bytes; pass anything else through as a file URI."""
    if url.startswith("data:"):
        header, _, encoded = url.partition(",")
        mime_type = header[5:].split(";", 1)[0] or fallback_mime
        try:
            data = base64.b64decode(encoded)
        except (binascii.Error, ValueError):
            logger.warning("Dropping content part with invalid base64 data URL")
            return None
        return types.Part.from_bytes(data=data, mime_type=mime_type)
    if not url:
        return None
    mime_type = mimetypes.guess_type(url)[0] or fallback_mime
    return types.Part.from_uri(file_uri=url, mime_type=mime_type)
