from .chat_provider import ChatProvider

__all__ = [
    "ChatProvider",
]
