import json

import httpx
import pytest

from codex_compat import convert_sse_to_json, ensure_event_stream_content_type, map_usage_limit_404, rewrite_url


def test_rewrite_url():
    assert rewrite_url("https://chatgpt.com/backend-api/responses") == "https://chatgpt.com/backend-api/codex/responses"
    assert rewrite_url("https://chatgpt.com/backend-api/codex/responses") == "https://chatgpt.com/backend-api/codex/responses"
    assert rewrite_url("https://chatgpt.com/backend-api/models") == "https://chatgpt.com/backend-api/models"


def test_content_type_defaults_to_event_stream():
    assert ensure_event_stream_content_type(httpx.Headers())["content-type"].startswith("text/event-stream")
    kept = ensure_event_stream_content_type(httpx.Headers({"content-type": "application/json"}))
    assert kept["content-type"] == "application/json"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"error": {"code": "usage_limit_reached", "message": "You have hit your limit"}},
        {"error": {"type": "usage_not_included"}},
        {"detail": "Rate_Limit_Exceeded for plan"},
    ],
)
async def test_usage_limit_404_becomes_429(body):
    response = httpx.Response(404, json=body, headers={"x-request-id": "abc"})

    mapped = await map_usage_limit_404(response)

    assert mapped.status_code == 429
    assert mapped.json() == body
    assert mapped.headers["x-request-id"] == "abc"


@pytest.mark.asyncio
async def test_plain_404_is_not_mapped():
    assert await map_usage_limit_404(httpx.Response(404, json={"error": {"message": "not found"}})) is None
    assert await map_usage_limit_404(httpx.Response(404)) is None
    assert await map_usage_limit_404(httpx.Response(500, text="usage limit")) is None


@pytest.mark.asyncio
async def test_convert_sse_to_json_returns_final_response():
    sse = (
        'data: {"type": "response.created", "response": {"id": "r"}}\n\n'
        'data: {"type": "response.completed", "response": {"id": "r", "status": "completed"}}\n\n'
    )
    upstream = httpx.Response(200, text=sse, headers={"content-type": "text/event-stream"})

    converted = await convert_sse_to_json(upstream, upstream.headers)

    assert converted.status_code == 200
    assert converted.headers["content-type"].startswith("application/json")
    assert json.loads(converted.content) == {"id": "r", "status": "completed"}


@pytest.mark.asyncio
async def test_convert_sse_to_json_without_completion_returns_raw_text():
    sse = 'data: {"type": "response.created"}\n\n'
    upstream = httpx.Response(200, text=sse, headers={"content-type": "text/event-stream"})

    converted = await convert_sse_to_json(upstream, upstream.headers)

    assert converted.text == sse
