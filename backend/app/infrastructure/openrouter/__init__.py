"""OpenRouter infrastructure package."""

from .openrouter_client import OpenRouterClient
from .sse_decoder import SSEEvent, SSELineDecoder

__all__ = ["OpenRouterClient", "SSEEvent", "SSELineDecoder"]
