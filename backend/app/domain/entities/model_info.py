"""Model catalog entry."""

from dataclasses import dataclass

from .chat_request import ProviderKind


@dataclass(frozen=True)
class ModelInfo:
    """Metadata about one model offered through the gateway."""

    id: str
    provider: ProviderKind
    description: str
    max_tokens: int = 8192
    supports_search: bool = False
    supports_vision: bool = False
    recommended: bool = False

    @property
    def name(self) -> str:
        return self.id
