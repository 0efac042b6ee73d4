"""Stream relay — re-frames an adapter's fragment sequence as SSE records."""

import logging
from collections.abc import AsyncIterator
from contextlib import aclosing

from app.domain.entities import StreamFrame

logger = logging.getLogger(__name__)


async def relay_frames(fragments: AsyncIterator[str]) -> AsyncIterator[StreamFrame]:
    """Yield one content frame per fragment, then exactly one terminal frame.

    Any exception from ``fragments`` becomes a single error frame and ends
    the relay. Closing the relay (client gone) closes ``fragments`` too, so
    the upstream read loop stops with it.
    """
    async with aclosing(fragments) as source:
        try:
            async for fragment in source:
                if not fragment:
                    continue
                yield StreamFrame.delta(fragment)
        except Exception as e:
            logger.error("Stream aborted: %s", e)
            yield StreamFrame.failure(str(e) or type(e).__name__)
            return
    yield StreamFrame.finished()


async def relay_sse(fragments: AsyncIterator[str]) -> AsyncIterator[str]:
    """Serialized form of ``relay_frames`` — one ``data:`` record per frame."""
    async with aclosing(relay_frames(fragments)) as frames:
        async for frame in frames:
            yield frame.to_sse()
