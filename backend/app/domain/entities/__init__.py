from .chat_message import ChatMessage, ContentPart, TokenUsage, ChatCompletionResult
from .chat_request import ChatRequest, ProviderKind, ResponseFormat
from .model_info import ModelInfo
from .stream_frame import StreamFrame, DONE_SENTINEL

__all__ = [
    "ChatMessage",
    "ContentPart",
    "TokenUsage",
    "ChatCompletionResult",
    "ChatRequest",
    "ProviderKind",
    "ResponseFormat",
    "ModelInfo",
    "StreamFrame",
    "DONE_SENTINEL",
]
