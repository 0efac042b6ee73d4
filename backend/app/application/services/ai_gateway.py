"""AI gateway use case — routes a chat request to one provider and relays the result."""

import logging
import time
from collections.abc import AsyncIterator, Iterable
from contextlib import aclosing

from app.application.interfaces.chat_provider import ChatProvider
from app.application.schemas.chat import UnifiedChatRequest, ChatMessageSchema
from app.application.services.llm_usage_logger import LLMUsageLogger
from app.application.services.model_catalog import all_models
from app.application.services.provider_router import (
    DEFAULT_MODEL,
    OPENROUTER_VENDORS,
    route,
)
from app.application.services.stream_relay import relay_sse
from app.domain.entities import (
    ChatCompletionResult,
    ChatMessage,
    ChatRequest,
    ContentPart,
    ModelInfo,
    ProviderKind,
    ResponseFormat,
)
from app.domain.exceptions import (
    ProviderNotConfiguredError,
    StreamingNotSupportedError,
)

logger = logging.getLogger(__name__)


class AIGateway:
    """Application service — the single entry point for chat generation.

    Adapters are built once at startup and injected; a missing adapter
    means the provider has no API key. The gateway keeps no per-request
    state, so one instance serves all concurrent requests.
    """

    def __init__(
        self,
        *,
        gemini: ChatProvider | None = None,
        openrouter: ChatProvider | None = None,
        default_model: str = DEFAULT_MODEL,
        openrouter_vendors: Iterable[str] = OPENROUTER_VENDORS,
        usage_logger: LLMUsageLogger | None = None,
    ):
        self._gemini = gemini
        self._openrouter = openrouter
        self._default_model = default_model
        self._openrouter_vendors = frozenset(openrouter_vendors)
        self._usage_logger = usage_logger or LLMUsageLogger()

    # ── Routing ──────────────────────────────────────────────────────

    def route(self, request: ChatRequest) -> ProviderKind:
        return route(
            request,
            default_model=self._default_model,
            openrouter_vendors=self._openrouter_vendors,
        )

    def _adapter_for(self, kind: ProviderKind) -> ChatProvider | None:
        match kind:
            case ProviderKind.GEMINI:
                return self._gemini
            case ProviderKind.OPENROUTER:
                return self._openrouter

    def _select(self, request: ChatRequest) -> ChatProvider:
        kind = self.route(request)
        provider = self._adapter_for(kind)
        if provider is None:
            raise ProviderNotConfiguredError(kind.value)
        return provider

    def is_available(self, kind: ProviderKind) -> bool:
        return self._adapter_for(kind) is not None

    # ── Chat ─────────────────────────────────────────────────────────

    async def chat(self, request: ChatRequest) -> ChatCompletionResult:
        """Execute a buffered chat completion on the routed provider.

        Raises:
            StreamingNotSupportedError: ``request.stream`` is set.
            ProviderNotConfiguredError: The routed provider has no API key.
            ChatProviderError: The upstream rejected the request.
        """
        if request.stream:
            raise StreamingNotSupportedError()

        provider = self._select(request)
        model = provider.resolve_model(request)
        start = time.monotonic()

        try:
            result = await provider.complete(request)
        except Exception as e:
            self._usage_logger.log_error(
                provider=provider.provider_name,
                model=model,
                feature="chat",
                duration_ms=_elapsed_ms(start),
                error=e,
            )
            raise

        self._usage_logger.log_request(
            provider=result.provider or provider.provider_name,
            model=result.model,
            feature="chat",
            usage=result.usage,
            duration_ms=_elapsed_ms(start),
        )
        return result

    def chat_stream(self, request: ChatRequest) -> AsyncIterator[str]:
        """Route and start a streaming completion, returning SSE records.

        Routing happens eagerly, so an unconfigured provider raises here
        before any frame is produced. Upstream errors after that point
        arrive as a single error frame.
        """
        provider = self._select(request)
        model = provider.resolve_model(request)
        fragments = self._observe(provider, model, provider.stream(request))
        return relay_sse(fragments)

    async def _observe(
        self, provider: ChatProvider, model: str, fragments: AsyncIterator[str]
    ) -> AsyncIterator[str]:
        """Pass fragments through untouched while recording stream stats."""
        start = time.monotonic()
        count = 0
        characters = 0
        status = "cancelled"
        try:
            async with aclosing(fragments) as source:
                async for fragment in source:
                    count += 1
                    characters += len(fragment)
                    yield fragment
            status = "success"
        except Exception as e:
            status = "error"
            self._usage_logger.log_error(
                provider=provider.provider_name,
                model=model,
                feature="chat_stream",
                duration_ms=_elapsed_ms(start),
                error=e,
            )
            raise
        finally:
            self._usage_logger.log_stream(
                provider=provider.provider_name,
                model=model,
                fragments=count,
                characters=characters,
                duration_ms=_elapsed_ms(start),
                status=status,
            )

    # ── Catalog ──────────────────────────────────────────────────────

    def list_models(self) -> list[ModelInfo]:
        return all_models()

    # ── Mapping ──────────────────────────────────────────────────────

    @staticmethod
    def build_request(schema: UnifiedChatRequest) -> ChatRequest:
        """Convert the HTTP schema into an immutable domain request."""
        return ChatRequest(
            messages=tuple(AIGateway._to_domain_message(m) for m in schema.messages),
            model=schema.model,
            provider=schema.provider,
            system_instruction=schema.system_instruction,
            temperature=schema.temperature,
            max_tokens=schema.max_tokens,
            top_p=schema.top_p,
            top_k=schema.top_k,
            tools=tuple(schema.tools) if schema.tools else None,
            tool_choice=schema.tool_choice,
            response_format=(
                ResponseFormat(type=schema.response_format.type)
                if schema.response_format
                else None
            ),
            enable_search=schema.enable_search,
            stream=schema.stream,
        )

    @staticmethod
    def _to_domain_message(msg: ChatMessageSchema) -> ChatMessage:
        if isinstance(msg.content, str):
            content: str | tuple[ContentPart, ...] = msg.content
        else:
            content = tuple(
                ContentPart(
                    type=p.type,
                    text=p.text,
                    image_url=(
                        {"url": p.image_url.url, "detail": p.image_url.detail or "auto"}
                        if p.image_url
                        else None
                    ),
                    file_data=(
                        p.file.model_dump(exclude_none=True) if p.file else None
                    ),
                )
                for p in msg.content
            )
        return ChatMessage(
            role=msg.role,
            content=content,
            tool_call_id=msg.tool_call_id,
            name=msg.name,
        )


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)
