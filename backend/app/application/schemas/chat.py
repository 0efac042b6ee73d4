"""Pydantic v2 schemas (DTOs) for the unified chat endpoints.

Field names are snake_case in Python and camelCase on the wire
(``systemInstruction``, ``maxTokens``, ``finishReason`` ...); requests
accept either spelling.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.domain.entities import ProviderKind


class CamelModel(BaseModel):
    """Base schema serialized with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Multimodal content parts ──


class ImageUrlDetail(BaseModel):
    """Image URL with optional detail level."""

    url: str
    detail: str | None = None  # "auto" | "low" | "high"


class FileDataSchema(BaseModel):
    """Inline file payload (``data:<mime>;base64,...``)."""

    file_data: str
    filename: str | None = None


class ContentPartSchema(BaseModel):
    """A single part of a multimodal message content.

    Follows the OpenAI-compatible format:
    - type="text": contains a text field
    - type="image_url": contains an image_url field with a URL or data URL
    - type="file": contains a file field with inline base64 data
    """

    type: Literal["text", "image_url", "file"]
    text: str | None = None
    image_url: ImageUrlDetail | None = None
    file: FileDataSchema | None = None


# ── Message schema ──


class ChatMessageSchema(BaseModel):
    """A chat message with multimodal support.

    Content can be either:
    - A plain string for text-only messages
    - A list of ContentPartSchema for multimodal messages
    """

    role: str = Field(..., pattern=r"^(system|user|assistant|model|tool)$")
    content: str | list[ContentPartSchema]
    tool_call_id: str | None = None
    name: str | None = None


# ── Request ──


class ResponseFormatSchema(BaseModel):
    type: Literal["json_object", "text"] = "text"


class UnifiedChatRequest(CamelModel):
    """Request schema for the unified chat endpoints."""

    provider: ProviderKind | None = Field(
        default=None, description="gemini or openrouter; inferred from the model when absent"
    )
    model: str | None = Field(
        default=None,
        description="Model ID, e.g. 'gemini-3-pro-preview' or 'anthropic/claude-opus-4.5'",
    )
    messages: list[ChatMessageSchema] = Field(
        ..., min_length=1, description="Conversation messages"
    )
    system_instruction: str | None = Field(default=None, description="System instruction")
    temperature: float | None = Field(
        default=None, ge=0.0, le=2.0, description="Sampling temperature"
    )
    max_tokens: int | None = Field(
        default=None, gt=0, description="Maximum tokens in the response"
    )
    top_p: float | None = Field(default=None, ge=0.0, le=1.0)
    top_k: int | None = Field(default=None, gt=0)
    tools: list[dict[str, Any]] | None = Field(
        default=None, description="Provider-shaped tool declarations"
    )
    tool_choice: str | dict[str, Any] | None = None
    response_format: ResponseFormatSchema | None = None
    enable_search: bool = Field(
        default=True, description="Google Search grounding (Gemini only)"
    )
    stream: bool = Field(default=False, description="Use /chat/stream for streaming")


# ── Response ──


class TokenUsageResponse(CamelModel):
    """Token usage statistics."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ChatCompletionResponse(CamelModel):
    """Response schema for non-streaming chat completion."""

    id: str
    provider: ProviderKind
    model: str
    content: str
    finish_reason: str
    usage: TokenUsageResponse
    function_calls: list[dict[str, Any]] | None = None
    grounding_metadata: dict[str, Any] | None = None


class ModelInfoResponse(CamelModel):
    """One entry of the model catalog."""

    id: str
    provider: ProviderKind
    name: str
    description: str
    max_tokens: int
    supports_search: bool
    supports_vision: bool
    recommended: bool
    available: bool


class ModelDefaultsResponse(CamelModel):
    max_tokens: int
    enable_search: bool
    temperature: float


class ModelListResponse(CamelModel):
    """Response schema for the model catalog endpoint."""

    models: list[ModelInfoResponse]
    recommended: dict[str, str]
    defaults: ModelDefaultsResponse
