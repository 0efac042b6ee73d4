"""Static catalog of the models the gateway offers, per provider."""

from app.domain.entities import ModelInfo, ProviderKind

GEMINI_MODELS: tuple[ModelInfo, ...] = (
    ModelInfo(
        id="gemini-3-pro-preview",
        provider=ProviderKind.GEMINI,
        description="Flagship model - Terbaik untuk reasoning kompleks",
        max_tokens=65536,
        supports_search=True,
        supports_vision=True,
        recommended=True,
    ),
    ModelInfo(
        id="gemini-3-flash-preview",
        provider=ProviderKind.GEMINI,
        description="Fast model dengan thinking capability",
        max_tokens=65536,
        supports_search=True,
        supports_vision=True,
    ),
    ModelInfo(
        id="gemini-1.5-flash",
        provider=ProviderKind.GEMINI,
        description="Efficient model untuk tugas umum",
        max_tokens=8192,
        supports_search=True,
        supports_vision=True,
        recommended=True,
    ),
    ModelInfo(
        id="gemini-2.5-pro",
        provider=ProviderKind.GEMINI,
        description="Pro model dengan context window besar",
        max_tokens=32768,
        supports_search=True,
        supports_vision=True,
    ),
)

OPENROUTER_MODELS: tuple[ModelInfo, ...] = (
    ModelInfo(
        id="anthropic/claude-opus-4.5",
        provider=ProviderKind.OPENROUTER,
        description="Claude Opus - Visual reasoning superior",
        max_tokens=200000,
        supports_vision=True,
        recommended=True,
    ),
    ModelInfo(
        id="anthropic/claude-sonnet-4.5",
        provider=ProviderKind.OPENROUTER,
        description="Claude Sonnet - 1M context window",
        max_tokens=200000,
        supports_vision=True,
    ),
    ModelInfo(
        id="openai/gpt-5.2",
        provider=ProviderKind.OPENROUTER,
        description="GPT-5.2 Flagship model",
        max_tokens=128000,
        supports_vision=True,
    ),
    ModelInfo(
        id="openai/gpt-5.2-pro",
        provider=ProviderKind.OPENROUTER,
        description="GPT-5.2 Pro - High throughput",
        max_tokens=128000,
        supports_vision=True,
    ),
    ModelInfo(
        id="openai/gpt-5.2-chat",
        provider=ProviderKind.OPENROUTER,
        description="GPT-5.2 Chat - Conversational",
        max_tokens=128000,
        supports_vision=True,
    ),
)

RECOMMENDED_MODELS: dict[ProviderKind, str] = {
    ProviderKind.GEMINI: "gemini-3-pro-preview",
    ProviderKind.OPENROUTER: "anthropic/claude-opus-4.5",
}


def all_models() -> list[ModelInfo]:
    return [*GEMINI_MODELS, *OPENROUTER_MODELS]
