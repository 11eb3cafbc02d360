import json

import pytest

from codex_compat import SSEParser, extract_text_from_event, find_completed_response, iter_sse_text
from utils.exceptions import UpstreamError


def _event(payload) -> str:
    return f"data: {json.dumps(payload)}\n\n"


def _message_event(event_type: str, text: str) -> dict:
    return {
        "type": event_type,
        "response": {"output": [{"type": "message", "content": [{"type": "output_text", "text": text}]}]},
    }


async def _chunks(*parts):
    for part in parts:
        yield part


def test_parser_handles_split_lines_and_crlf():
    parser = SSEParser()

    assert parser.feed("event: response.created\r\nda") == []
    events = parser.feed('ta: {"a": 1}\r\n\r\n')

    assert len(events) == 1
    assert events[0].event == "response.created"
    assert events[0].json() == {"a": 1}


def test_parser_flush_emits_trailing_event():
    parser = SSEParser()
    parser.feed("data: [DONE]")

    events = parser.flush()

    assert [event.data for event in events] == ["[DONE]"]
    assert events[0].json() is None


def test_extract_text_only_from_message_output_text():
    event = {
        "type": "response.done",
        "response": {
            "output": [
                {"type": "reasoning", "content": [{"type": "output_text", "text": "hidden"}]},
                {"type": "message", "content": [
                    {"type": "output_text", "text": "Hello"},
                    {"type": "refusal", "text": "no"},
                ]},
            ]
        },
    }
    assert extract_text_from_event(event) == "Hello"
    assert extract_text_from_event({"type": "response.created"}) == ""


def test_error_event_raises():
    with pytest.raises(UpstreamError) as exc_info:
        extract_text_from_event({"type": "error", "error": {"message": "quota"}})
    assert exc_info.value.message == "quota"


@pytest.mark.asyncio
async def test_iter_sse_text_across_chunk_boundaries():
    body = _event(_message_event("response.ongoing", "Hel")) + _event(_message_event("response.done", "lo"))
    middle = len(body) // 2

    texts = [text async for text in iter_sse_text(_chunks(body[:middle], body[middle:]))]

    assert texts == ["Hel", "lo"]


@pytest.mark.asyncio
async def test_iter_sse_text_stops_at_done_and_skips_bad_json():
    body = "data: not-json\n\n" + _event(_message_event("response.done", "A")) + "data: [DONE]\n\n" + _event(
        _message_event("response.done", "B")
    )

    texts = [text async for text in iter_sse_text(_chunks(body))]

    assert texts == ["A"]


@pytest.mark.asyncio
async def test_iter_sse_text_raises_on_error_event():
    body = _event({"type": "error", "error": {"message": "boom"}})

    with pytest.raises(UpstreamError):
        async for _ in iter_sse_text(_chunks(body)):
            pass


def test_find_completed_response_uses_last_completion_event():
    body = (
        _event({"type": "response.created", "response": {"id": "r0"}})
        + _event({"type": "response.done", "response": {"id": "r1"}})
        + _event({"type": "response.completed", "response": {"id": "r2"}}).replace("\n", "\r\n")
    )

    assert find_completed_response(body) == {"id": "r2"}
    assert find_completed_response(_event({"type": "response.created"})) is None
