"""Wire framing for streamed tutor answers.

Each event travels as one ``data: <json>`` line followed by a blank line.
A stream carries zero or more ``content`` events and ends with exactly one
``done`` or ``error`` event.
"""

from __future__ import annotations

import json
import logging
from contextlib import aclosing
from typing import AsyncGenerator, AsyncIterator

from pydantic import ValidationError

from math_tutor.schemas.tutor import StreamEvent

LOGGER = logging.getLogger(__name__)

DATA_PREFIX = "data: "
STREAM_MEDIA_TYPE = "text/stream-event"
STREAM_ACCEPT_TYPES: tuple[str, ...] = (STREAM_MEDIA_TYPE, "text/event-stream")
PREMATURE_END_MESSAGE = "Stream ended before the answer was complete"


def encode_event(event: StreamEvent) -> str:
    """Serialize one event as a ``data:`` frame."""
    return f"{DATA_PREFIX}{json.dumps(event.model_dump(exclude_none=True), ensure_ascii=False)}\n\n"


class StreamEventDecoder:
    """Incremental decoder for ``data:`` frames.

    Text may arrive split at any point; an incomplete trailing line stays
    buffered until the rest of it arrives.
    """

    def __init__(self) -> None:
        self._buffer = ""

    def feed(self, chunk: str) -> list[StreamEvent]:
        self._buffer += chunk
        lines = self._buffer.split("\n")
        self._buffer = lines.pop()
        return [event for event in (self._parse_line(line) for line in lines) if event is not None]

    def flush(self) -> list[StreamEvent]:
        """Parse whatever is left once the transport has closed."""
        remainder, self._buffer = self._buffer, ""
        event = self._parse_line(remainder)
        return [event] if event is not None else []

    @staticmethod
    def _parse_line(line: str) -> StreamEvent | None:
        line = line.rstrip("\r")
        if not line.startswith(DATA_PREFIX):
            return None
        try:
            return StreamEvent.model_validate(json.loads(line[len(DATA_PREFIX):]))
        except (json.JSONDecodeError, ValidationError):
            LOGGER.warning("Failed to parse streaming frame: %s", line[:200])
            return None


async def enforce_stream_order(events: AsyncGenerator[StreamEvent, None]) -> AsyncIterator[StreamEvent]:
    """Pass events through, stopping at the first terminal one.

    A source that runs dry without a terminal event gets an ``error`` event
    appended, so consumers always see exactly one. The source is closed on
    every exit path.
    """
    async with aclosing(events) as source:
        async for event in source:
            yield event
            if event.is_terminal:
                return
    yield StreamEvent.failure(PREMATURE_END_MESSAGE)


def wants_stream(accept_header: str | None, stream_param: bool) -> bool:
    """Streaming is selected by the Accept header or ``?stream=true``."""
    if stream_param:
        return True
    accept = (accept_header or "").lower()
    return any(media_type in accept for media_type in STREAM_ACCEPT_TYPES)
