"""Unified AI endpoints — model catalog, buffered chat, and SSE streaming chat."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse, StreamingResponse

from app.application.schemas import (
    ChatCompletionResponse,
    ModelDefaultsResponse,
    ModelInfoResponse,
    ModelListResponse,
    TokenUsageResponse,
    UnifiedChatRequest,
)
from app.application.services import AIGateway
from app.application.services.model_catalog import RECOMMENDED_MODELS
from app.config import get_settings
from app.domain.exceptions import (
    ChatProviderError,
    ProviderNotConfiguredError,
    StreamingNotSupportedError,
)
from app.infrastructure.dependencies import get_ai_gateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["AI - Unified"])

_SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@router.get("/models", response_model=ModelListResponse)
async def list_models(
    gateway: AIGateway = Depends(get_ai_gateway),
) -> ModelListResponse:
    """List every model offered through Gemini and OpenRouter."""
    settings = get_settings()
    return ModelListResponse(
        models=[
            ModelInfoResponse(
                id=m.id,
                provider=m.provider,
                name=m.name,
                description=m.description,
                max_tokens=m.max_tokens,
                supports_search=m.supports_search,
                supports_vision=m.supports_vision,
                recommended=m.recommended,
                available=gateway.is_available(m.provider),
            )
            for m in gateway.list_models()
        ],
        recommended={kind.value: model for kind, model in RECOMMENDED_MODELS.items()},
        defaults=ModelDefaultsResponse(
            max_tokens=settings.default_max_tokens,
            enable_search=True,
            temperature=settings.default_temperature,
        ),
    )


@router.post("/chat", response_model=ChatCompletionResponse)
async def chat(
    body: UnifiedChatRequest,
    gateway: AIGateway = Depends(get_ai_gateway),
):
    """Execute a buffered chat completion.

    Routes to Gemini by default; models named ``anthropic/...``,
    ``openai/...`` and other OpenRouter vendors go to OpenRouter.
    Streaming requests are redirected to ``/chat/stream``.
    """
    try:
        result = await gateway.chat(AIGateway.build_request(body))
    except StreamingNotSupportedError as e:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": str(e)},
        )
    except ProviderNotConfiguredError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        )
    except ChatProviderError as e:
        raise HTTPException(
            status_code=e.status_code if 400 <= e.status_code < 600 else 502,
            detail=f"[{e.provider}] {e.status_code}: {e.message}",
        )

    return ChatCompletionResponse(
        id=result.id,
        provider=result.provider,
        model=result.model,
        content=result.content,
        finish_reason=result.finish_reason,
        usage=TokenUsageResponse(
            prompt_tokens=result.usage.prompt_tokens,
            completion_tokens=result.usage.completion_tokens,
            total_tokens=result.usage.total_tokens,
        ),
        function_calls=result.function_calls,
        grounding_metadata=result.grounding_metadata,
    )


@router.post("/chat/stream")
async def chat_stream(
    body: UnifiedChatRequest,
    gateway: AIGateway = Depends(get_ai_gateway),
) -> StreamingResponse:
    """Execute a streaming chat completion via Server-Sent Events (SSE).

    Each fragment arrives as ``data: {"content": "..."}``; the stream ends
    with ``data: [DONE]`` or a single ``data: {"error": "..."}`` record.
    """
    try:
        frames = gateway.chat_stream(AIGateway.build_request(body))
    except ProviderNotConfiguredError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        )

    return StreamingResponse(
        frames,
        media_type="text/event-stream",
        headers=_SSE_HEADERS,
    )
