"""Dependency wiring — builds the gateway from settings and exposes it to FastAPI."""

import logging

import httpx
from fastapi import Request

from app.config import Settings
from app.application.services import AIGateway, LLMUsageLogger
from app.infrastructure.gemini import GeminiClient
from app.infrastructure.openrouter import OpenRouterClient

logger = logging.getLogger(__name__)


def build_ai_gateway(
    settings: Settings,
    http_client: httpx.AsyncClient | None = None,
) -> AIGateway:
    """Construct one adapter per configured provider and the gateway around them.

    A provider without an API key is left out; requests routed to it fail
    with ProviderNotConfiguredError instead of reaching the network.
    """
    gemini = None
    if settings.gemini_configured:
        try:
            gemini = GeminiClient(
                api_key=settings.gemini_api_key.strip(),
                default_model=settings.default_model,
                default_max_tokens=settings.default_max_tokens,
                default_temperature=settings.default_temperature,
            )
            logger.info("Gemini provider initialized")
        except Exception:
            logger.exception("Failed to initialize Gemini provider")
    else:
        logger.warning("GEMINI_API_KEY is not configured; Gemini requests are disabled.")

    openrouter = None
    if settings.openrouter_configured:
        openrouter = OpenRouterClient(
            api_key=settings.openrouter_api_key.strip(),
            base_url=settings.openrouter_base_url,
            app_name=settings.openrouter_app_name,
            referer=settings.openrouter_referer,
            default_model=settings.openrouter_default_model,
            default_max_tokens=settings.default_max_tokens,
            default_temperature=settings.default_temperature,
            timeout=settings.http_timeout_seconds,
            http_client=http_client,
        )
        logger.info("OpenRouter provider initialized")
    else:
        logger.warning(
            "OPENROUTER_API_KEY is not configured; OpenRouter requests are disabled."
        )

    return AIGateway(
        gemini=gemini,
        openrouter=openrouter,
        default_model=settings.default_model,
        openrouter_vendors=settings.openrouter_vendor_prefixes,
        usage_logger=LLMUsageLogger(),
    )


def get_ai_gateway(request: Request) -> AIGateway:
    """Provides the process-wide AIGateway built in the application lifespan."""
    return request.app.state.ai_gateway
