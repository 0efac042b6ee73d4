"""Incremental decoder for OpenAI-compatible chat-completion SSE bodies.

Bytes arrive in arbitrary chunks. A line is only interpreted once its
terminating newline has been received; the trailing partial line stays in
the buffer until the next chunk (or the end of the body) completes it.
"""

import codecs
import json
import logging
from dataclasses import dataclass

from app.domain.entities import DONE_SENTINEL

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SSEEvent:
    """One interpreted ``data:`` line: either a text delta or the end marker."""

    content: str | None = None
    error: dict | None = None  # provider-reported {"code": ..., "message": ...}
    done: bool = False


class SSELineDecoder:
    """Turns raw body chunks into content deltas and the ``[DONE]`` marker.

    Usage:
        decoder = SSELineDecoder()
        async for chunk in response.aiter_bytes():
            for event in decoder.feed(chunk):
                ...
        for event in decoder.flush():
            ...
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._finished = False
        self.discarded_lines = 0

    def feed(self, chunk: bytes) -> list[SSEEvent]:
        """Consume one raw chunk and return the events of every completed line."""
        self._buffer += self._decoder.decode(chunk)
        *lines, self._buffer = self._buffer.split("\n")
        return self._interpret(lines)

    def flush(self) -> list[SSEEvent]:
        """Interpret whatever is left once the body has ended."""
        self._buffer += self._decoder.decode(b"", final=True)
        rest, self._buffer = self._buffer, ""
        return self._interpret([rest])

    def _interpret(self, lines: list[str]) -> list[SSEEvent]:
        events: list[SSEEvent] = []
        if self._finished:
            return events
        for raw in lines:
            event = self._parse_line(raw.rstrip("\r"))
            if event is None:
                continue
            events.append(event)
            if event.done or event.error is not None:
                self._finished = True
                break
        return events

    def _parse_line(self, line: str) -> SSEEvent | None:
        # Blank separators and keepalive comments (": OPENROUTER PROCESSING")
        if not line.strip() or line.startswith(":"):
            return None
        if not line.startswith("data:"):
            return None

        payload = line[5:].strip()
        if payload == DONE_SENTINEL:
            return SSEEvent(done=True)

        try:
            data = json.loads(payload)
        except json.JSONDecodeError:
            self.discarded_lines += 1
            logger.warning(
                "Discarding unparseable SSE line (%d so far): %.200s",
                self.discarded_lines,
                payload,
            )
            return None

        if isinstance(data, dict) and isinstance(data.get("error"), dict):
            return SSEEvent(error=data["error"])

        content = _extract_delta_content(data)
        if not content:
            return None
        return SSEEvent(content=content)


def _extract_delta_content(data: object) -> str | None:
    """Read ``choices[0].delta.content`` without trusting the payload shape."""
    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    delta = choices[0].get("delta") or {}
    if not isinstance(delta, dict):
        return None
    content = delta.get("content")
    return content if isinstance(content, str) else None
