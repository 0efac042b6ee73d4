"""Domain entities for chat messages — framework-independent, multimodal."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ContentPart:
    """A single content part within a multimodal message.

    Supports text, image_url, and file types, following the OpenAI-compatible
    multimodal format. The Gemini adapter translates these part by part.
    """

    type: str  # "text" | "image_url" | "file"
    text: str | None = None
    image_url: dict[str, str] | None = None  # {"url": "...", "detail": "auto"}
    file_data: dict[str, str] | None = None  # {"file_data": "data:...;base64,...", "filename": "..."}


@dataclass(frozen=True)
class ChatMessage:
    """A single message in a chat conversation.

    Content can be a plain string (text-only) or a tuple of ContentPart
    objects for multimodal input (text + images + files).
    """

    role: str  # "system" | "user" | "assistant" | "model" | "tool"
    content: str | tuple[ContentPart, ...] = ""
    tool_call_id: str | None = None  # Required when role == "tool"
    name: str | None = None


@dataclass
class TokenUsage:
    """Token usage statistics from a completion."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass
class ChatCompletionResult:
    """Normalized result of a buffered chat completion, whatever the provider."""

    id: str
    provider: str
    model: str
    content: str
    finish_reason: str  # "stop" | "length" | "tool_calls" | "STOP" | "MAX_TOKENS" ...
    usage: TokenUsage = field(default_factory=TokenUsage)
    function_calls: list[dict[str, Any]] | None = None
    grounding_metadata: dict[str, Any] | None = None
