"""Provider routing — decides which upstream serves a request.

Pure functions, no I/O: the buffered and streaming paths both call
``route`` and must always reach the same decision for the same request.
"""

from collections.abc import Iterable

from app.domain.entities import ChatRequest, ProviderKind

DEFAULT_MODEL = "gemini-3-pro-preview"

OPENROUTER_VENDORS: frozenset[str] = frozenset({
    "anthropic",
    "openai",
    "meta-llama",
    "mistralai",
    "deepseek",
    "x-ai",
    "qwen",
    "cohere",
    "openrouter",
})


def model_vendor(model: str) -> str | None:
    """Return the ``vendor`` segment of a ``vendor/model`` identifier, if any."""
    vendor, sep, name = model.partition("/")
    if not sep or not vendor or not name:
        return None
    return vendor.strip().lower()


def route(
    request: ChatRequest,
    *,
    default_model: str = DEFAULT_MODEL,
    openrouter_vendors: Iterable[str] = OPENROUTER_VENDORS,
) -> ProviderKind:
    """Pick the provider for ``request``.

    An explicit ``request.provider`` always wins. Otherwise a model named
    ``vendor/model`` with a known OpenRouter vendor goes to OpenRouter and
    everything else goes to Gemini. The inference is a heuristic; callers
    that need a guaranteed provider should set ``provider``.
    """
    if request.provider is not None:
        return request.provider

    vendor = model_vendor(request.model or default_model)
    if vendor is not None and vendor in {v.lower() for v in openrouter_vendors}:
        return ProviderKind.OPENROUTER
    return ProviderKind.GEMINI
