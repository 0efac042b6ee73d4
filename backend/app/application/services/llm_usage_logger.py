"""Centralized LLM usage logger — single entry point for tracking gateway calls.

Writes one console summary per upstream call (buffered or streamed) with
provider, model, token usage and wall time. Persisting these records is left
to the services that own storage.
"""

import logging

from app.domain.entities import TokenUsage

logger = logging.getLogger(__name__)


class LLMUsageLogger:
    """Tracks LLM usage across the gateway.

    Usage:
        usage_logger = LLMUsageLogger()
        usage_logger.log_request(
            provider="openrouter",
            model="anthropic/claude-sonnet-4.5",
            feature="chat",
            usage=result.usage,
            duration_ms=42,
        )
    """

    def __init__(self, log: logging.Logger | None = None):
        self._log = log or logger

    def log_request(
        self,
        *,
        provider: str,
        model: str,
        feature: str,
        usage: TokenUsage,
        duration_ms: int,
    ) -> None:
        """Log a completed buffered call.

        Args:
            provider: Provider name ("gemini" or "openrouter").
            model: Model identifier the adapter called.
            feature: Which gateway path served the call ("chat").
            usage: Token usage from the completion result.
            duration_ms: Wall-clock time of the request in milliseconds.
        """
        self._log.info(
            "LLM [%s] provider=%s model=%s tokens=%d (prompt=%d completion=%d) %dms",
            feature,
            provider,
            model,
            usage.total_tokens,
            usage.prompt_tokens,
            usage.completion_tokens,
            duration_ms,
        )

    def log_stream(
        self,
        *,
        provider: str,
        model: str,
        fragments: int,
        characters: int,
        duration_ms: int,
        status: str = "success",
    ) -> None:
        """Log the end of a streamed call."""
        self._log.info(
            "LLM [chat_stream] provider=%s model=%s status=%s fragments=%d chars=%d %dms",
            provider,
            model,
            status,
            fragments,
            characters,
            duration_ms,
        )

    def log_error(
        self,
        *,
        provider: str,
        model: str,
        feature: str,
        duration_ms: int,
        error: Exception,
    ) -> None:
        """Log a failed call with the provider and model involved."""
        self._log.error(
            "LLM [%s] provider=%s model=%s failed after %dms: %s",
            feature,
            provider,
            model,
            duration_ms,
            error,
        )
