"""Normalized chat request — the provider-independent shape every adapter consumes."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .chat_message import ChatMessage


class ProviderKind(str, Enum):
    """The closed set of upstream LLM providers."""

    GEMINI = "gemini"
    OPENROUTER = "openrouter"


@dataclass(frozen=True)
class ResponseFormat:
    """Response-format hint. ``json_object`` asks the upstream for strict JSON."""

    type: str = "text"  # "json_object" | "text"

    @property
    def is_json(self) -> bool:
        return self.type == "json_object"


@dataclass(frozen=True)
class ChatRequest:
    """A chat request, built once per external call and never mutated.

    ``system_instruction`` is kept out of ``messages``: each adapter places it
    where its upstream expects it.
    """

    messages: tuple[ChatMessage, ...]
    model: str | None = None
    provider: ProviderKind | None = None
    system_instruction: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None
    top_p: float | None = None
    top_k: int | None = None
    tools: tuple[dict[str, Any], ...] | None = None
    tool_choice: str | dict[str, Any] | None = None
    response_format: ResponseFormat | None = None
    enable_search: bool = True
    stream: bool = False

    def __post_init__(self) -> None:
        if not self.messages:
            raise ValueError("ChatRequest requires at least one message")
        if self.temperature is not None and not 0.0 <= self.temperature <= 2.0:
            raise ValueError("temperature must be between 0 and 2")

    @property
    def wants_json(self) -> bool:
        return self.response_format is not None and self.response_format.is_json
