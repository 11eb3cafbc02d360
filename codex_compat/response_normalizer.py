"""
Response normalization for the Codex backend.

Maps usage-limit 404s to 429, buffers SSE into a single JSON document for
callers that did not ask to stream, and fixes up stream content types.
"""
import json
import logging
import re
from typing import Optional

import httpx

from headers import EVENT_STREAM_CONTENT_TYPE, JSON_CONTENT_TYPE
from .sse_parser import find_completed_response

logger = logging.getLogger(__name__)

RESPONSES_PATH = "/responses"
CODEX_RESPONSES_PATH = "/codex/responses"

USAGE_LIMIT_PATTERN = re.compile(
    r"usage_limit_reached|usage_not_included|rate_limit_exceeded|usage limit",
    re.IGNORECASE,
)

# Body bytes are handed over already decoded
_ENCODING_HEADERS = ("content-encoding", "content-length", "transfer-encoding")


def rewrite_url(url: str) -> str:
    """Route SDK /responses calls to the Codex endpoint (first occurrence only)"""
    if CODEX_RESPONSES_PATH in url:
        return url
    return url.replace(RESPONSES_PATH, CODEX_RESPONSES_PATH, 1)


def ensure_event_stream_content_type(headers: httpx.Headers) -> httpx.Headers:
    """Copy of ``headers`` with a content-type, defaulting to text/event-stream"""
    headers = httpx.Headers(headers)
    if "content-type" not in headers:
        headers["content-type"] = EVENT_STREAM_CONTENT_TYPE
    return headers


def decoded_headers(headers: httpx.Headers) -> httpx.Headers:
    """Copy of ``headers`` suitable for a rebuilt response with a decoded body"""
    headers = httpx.Headers(headers)
    for name in _ENCODING_HEADERS:
        headers.pop(name, None)
    return headers


def is_usage_limit_error(body: str) -> bool:
    code = ""
    try:
        parsed = json.loads(body)
        if isinstance(parsed, dict) and isinstance(parsed.get("error"), dict):
            error = parsed["error"]
            code = str(error.get("code") or error.get("type") or "")
    except ValueError:
        code = ""

    return bool(USAGE_LIMIT_PATTERN.search(f"{code} {body}".lower()))


async def map_usage_limit_404(response: httpx.Response) -> Optional[httpx.Response]:
    """
    Turn a usage-limit 404 into a 429 so clients apply their rate-limit handling.

    The given response stays readable: the body is buffered, not consumed.

    Returns:
        A new 429 response with the same headers and body, or None when the
        response is not a usage-limit 404
    """
    if response.status_code != 404:
        return None

    await response.aread()
    body = response.text
    if not body or not is_usage_limit_error(body):
        return None

    return httpx.Response(
        status_code=429,
        headers=decoded_headers(response.headers),
        content=response.content,
    )


async def convert_sse_to_json(response: httpx.Response, headers: httpx.Headers) -> httpx.Response:
    """
    Buffer a full SSE body and return the final response object as JSON.

    Falls back to the raw SSE text (with the upstream status) when no
    completion event is present.
    """
    await response.aread()
    sse_text = response.text

    final_response = find_completed_response(sse_text)
    if final_response is None:
        logger.error("Could not find final response in SSE stream")
        return httpx.Response(
            status_code=response.status_code,
            headers=decoded_headers(headers),
            content=response.content,
        )

    json_headers = decoded_headers(headers)
    json_headers["content-type"] = JSON_CONTENT_TYPE
    return httpx.Response(
        status_code=response.status_code,
        headers=json_headers,
        content=json.dumps(final_response).encode("utf-8"),
    )
