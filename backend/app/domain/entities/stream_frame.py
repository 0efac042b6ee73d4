"""Downstream SSE frame — one unit of the streaming protocol."""

import json
from dataclasses import dataclass

DONE_SENTINEL = "[DONE]"


@dataclass(frozen=True)
class StreamFrame:
    """Either a content delta, a terminal error, or the terminal done marker."""

    content: str | None = None
    error: str | None = None
    done: bool = False

    @classmethod
    def delta(cls, text: str) -> "StreamFrame":
        return cls(content=text)

    @classmethod
    def failure(cls, message: str) -> "StreamFrame":
        return cls(error=message)

    @classmethod
    def finished(cls) -> "StreamFrame":
        return cls(done=True)

    @property
    def is_terminal(self) -> bool:
        return self.done or self.error is not None

    def to_sse(self) -> str:
        """Serialize as one ``data: ...`` record followed by a blank line."""
        if self.done:
            return f"data: {DONE_SENTINEL}\n\n"
        if self.error is not None:
            payload = json.dumps({"error": self.error}, ensure_ascii=False)
        else:
            payload = json.dumps({"content": self.content or ""}, ensure_ascii=False)
        return f"data: {payload}\n\n"
