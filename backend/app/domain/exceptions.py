"""Domain-specific exceptions — framework-independent."""


class ChatProviderError(Exception):
    """Raised when a chat provider returns an error.

    Provider-agnostic — works for Gemini and OpenRouter. The upstream status
    code and message are kept verbatim for diagnostics.
    """

    def __init__(
        self,
        provider: str,
        status_code: int,
        message: str,
        model: str | None = None,
    ):
        self.provider = provider
        self.status_code = status_code
        self.message = message
        self.model = model
        super().__init__(f"[{provider}] {status_code}: {message}")


class ProviderNotConfiguredError(Exception):
    """Raised when a request is routed to a provider without an API key."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"Provider '{provider}' is not configured")


class StreamingNotSupportedError(Exception):
    """Raised when a streaming request reaches the buffered chat path."""

    def __init__(self, stream_path: str = "/api/v1/ai/chat/stream"):
        self.stream_path = stream_path
        super().__init__(f"use the streaming endpoint {stream_path}")
