from .chat import (
    UnifiedChatRequest,
    ChatCompletionResponse,
    ChatMessageSchema,
    ContentPartSchema,
    FileDataSchema,
    ImageUrlDetail,
    ModelDefaultsResponse,
    ModelInfoResponse,
    ModelListResponse,
    ResponseFormatSchema,
    TokenUsageResponse,
)

__all__ = [
    "UnifiedChatRequest",
    "ChatCompletionResponse",
    "ChatMessageSchema",
    "ContentPartSchema",
    "FileDataSchema",
    "ImageUrlDetail",
    "ModelDefaultsResponse",
    "ModelInfoResponse",
    "ModelListResponse",
    "ResponseFormatSchema",
    "TokenUsageResponse",
]
