from pathlib import Path

from pydantic_settings import BaseSettings
from functools import lru_cache

_BACKEND_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _BACKEND_DIR / ".env",
    ".env",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "RPP Generator AI Gateway"
    app_version: str = "0.1.0"
    app_env: str = "development"
    cors_origins: list[str] = ["http://localhost:3000"]

    # Provider API keys — both optional; a missing key disables that provider
    gemini_api_key: str = ""
    openrouter_api_key: str = ""

    # OpenRouter configuration
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_app_name: str = "RPP Generator"
    openrouter_referer: str = "http://localhost:3001"

    # Model defaults
    default_model: str = "gemini-3-pro-preview"
    openrouter_default_model: str = "anthropic/claude-sonnet-4.5"
    default_max_tokens: int = 65536
    default_temperature: float = 0.7
    openrouter_vendor_prefixes: list[str] = [
        "anthropic",
        "openai",
        "meta-llama",
        "mistralai",
        "deepseek",
        "x-ai",
        "qwen",
        "cohere",
        "openrouter",
    ]

    # Outbound HTTP
    http_timeout_seconds: float = 120.0

    # Logging — per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_http: str = "WARNING"          # httpx / httpcore — outbound HTTP
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_gateway: str = "INFO"          # Router, relay and facade
    log_level_gemini: str = "INFO"           # Gemini adapter and google-genai SDK
    log_level_openrouter: str = "INFO"       # OpenRouter adapter

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }

    @property
    def gemini_configured(self) -> bool:
        return bool(self.gemini_api_key.strip())

    @property
    def openrouter_configured(self) -> bool:
        return bool(self.openrouter_api_key.strip())


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance — reads .env once."""
    return Settings()
