"""Health check endpoint — reports which providers the running gateway can reach."""

from fastapi import APIRouter, Depends

from app.application.services import AIGateway
from app.config import get_settings
from app.domain.entities import ProviderKind
from app.infrastructure.dependencies import get_ai_gateway

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(gateway: AIGateway = Depends(get_ai_gateway)) -> dict:
    """Returns the current application health status and provider availability."""
    settings = get_settings()
    providers = {
        kind.value: "configured" if gateway.is_available(kind) else "not_configured"
        for kind in ProviderKind
    }
    return {
        "status": "healthy" if "configured" in providers.values() else "degraded",
        "version": settings.app_version,
        "environment": settings.app_env,
        "providers": providers,
    }
