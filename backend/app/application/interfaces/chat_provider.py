"""Abstract chat provider interface — port for AI provider adapters.

Each upstream (Gemini, OpenRouter) implements this interface. The gateway
dispatches to exactly one of them per request.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from app.domain.entities import ChatRequest, ChatCompletionResult, ProviderKind


class ChatProvider(ABC):
    """Port — defines what the application layer needs from any chat provider."""

    @property
    @abstractmethod
    def provider_kind(self) -> ProviderKind:
        """The provider this adapter talks to."""
        ...

    @property
    def provider_name(self) -> str:
        return self.provider_kind.value

    def resolve_model(self, request: ChatRequest) -> str:
        """The model identifier this adapter calls for ``request``."""
        return request.model or ""

    @abstractmethod
    async def complete(self, request: ChatRequest) -> ChatCompletionResult:
        """Send a non-streaming chat completion request.

        Args:
            request: The normalized chat request.

        Returns:
            A ChatCompletionResult with the fully assembled content and usage.

        Raises:
            ChatProviderError: If the provider rejects the request.
        """
        ...

    @abstractmethod
    def stream(self, request: ChatRequest) -> AsyncIterator[str]:
        """Send a streaming chat completion request.

        Implementations are async generators: they yield non-empty text
        fragments in arrival order and release the upstream connection
        when closed early.

        Raises:
            ChatProviderError: If the provider rejects the request.
        """
        ...
