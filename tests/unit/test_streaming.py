"""Stream framing tests."""

import anyio
import pytest

from math_tutor.schemas.tutor import StreamEvent
from math_tutor.services.streaming import (
    PREMATURE_END_MESSAGE,
    StreamEventDecoder,
    encode_event,
    enforce_stream_order,
    wants_stream,
)


def test_encode_event_drops_unset_fields():
    assert encode_event(StreamEvent.delta("2x")) == 'data: {"type": "content", "content": "2x"}\n\n'
    assert encode_event(StreamEvent.done()) == 'data: {"type": "done"}\n\n'
    assert encode_event(StreamEvent.failure("boom")) == 'data: {"type": "error", "error": "boom"}\n\n'


def test_encode_event_keeps_unicode():
    assert "√2" in encode_event(StreamEvent.delta("√2"))


class TestStreamEventDecoder:
    def test_partial_line_is_buffered(self):
        decoder = StreamEventDecoder()
        assert decoder.feed('data: {"type": "con') == []
        assert decoder.feed('tent", "content": "x"}\n') == [StreamEvent.delta("x")]

    def test_every_split_point_gives_same_events(self):
        body = encode_event(StreamEvent.delta("a\nb")) + encode_event(StreamEvent.delta("c")) + encode_event(
            StreamEvent.done()
        )
        for split in range(len(body) + 1):
            decoder = StreamEventDecoder()
            events = decoder.feed(body[:split]) + decoder.feed(body[split:]) + decoder.flush()
            assert [e.type for e in events] == ["content", "content", "done"], split
            assert events[0].content == "a\nb"

    def test_crlf_line_endings(self):
        decoder = StreamEventDecoder()
        events = decoder.feed('data: {"type": "done"}\r\n\r\n')
        assert events == [StreamEvent.done()]

    def test_non_data_and_malformed_lines_are_skipped(self, caplog):
        decoder = StreamEventDecoder()
        events = decoder.feed('event: ping\n: keepalive\ndata: {oops}\ndata: {"type": "unknown"}\ndata: {"type": "done"}\n')
        assert events == [StreamEvent.done()]
        assert "Failed to parse streaming frame" in caplog.text

    def test_flush_parses_unterminated_last_line(self):
        decoder = StreamEventDecoder()
        assert decoder.feed('data: {"type": "done"}') == []
        assert decoder.flush() == [StreamEvent.done()]
        assert decoder.flush() == []


async def _collect(source):
    return [event async for event in enforce_stream_order(source)]


class TestEnforceStreamOrder:
    def test_passes_through_until_terminal(self):
        closed = []

        async def source():
            try:
                yield StreamEvent.delta("a")
                yield StreamEvent.done()
                yield StreamEvent.delta("late")
            finally:
                closed.append(True)

        events = anyio.run(_collect, source())
        assert [e.type for e in events] == ["content", "done"]
        assert closed == [True]

    def test_appends_error_when_source_runs_dry(self):
        async def source():
            yield StreamEvent.delta("a")

        events = anyio.run(_collect, source())
        assert events[-1] == StreamEvent.failure(PREMATURE_END_MESSAGE)

    def test_empty_source(self):
        async def source():
            return
            yield

        events = anyio.run(_collect, source())
        assert [e.type for e in events] == ["error"]

    def test_source_closed_when_consumer_stops(self):
        closed = []

        async def source():
            try:
                for i in range(100):
                    yield StreamEvent.delta(str(i))
            finally:
                closed.append(True)

        async def _run():
            ordered = enforce_stream_order(source())
            async for event in ordered:
                if event.content == "2":
                    break
            await ordered.aclose()

        anyio.run(_run)
        assert closed == [True]


@pytest.mark.parametrize(
    "accept, param, expected",
    [
        (None, False, False),
        ("application/json", False, False),
        ("text/stream-event", False, True),
        ("text/event-stream, */*", False, True),
        ("TEXT/STREAM-EVENT", False, True),
        ("application/json", True, True),
    ],
)
def test_wants_stream(accept, param, expected):
    assert wants_stream(accept, param) is expected
