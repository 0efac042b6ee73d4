from .ai_gateway import AIGateway
from .llm_usage_logger import LLMUsageLogger
from .provider_router import route
from .stream_relay import relay_frames, relay_sse

__all__ = [
    "AIGateway",
    "LLMUsageLogger",
    "route",
    "relay_frames",
    "relay_sse",
]
