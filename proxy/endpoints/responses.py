"""
OpenAI Responses API endpoint backed by the Codex backend.

The raw request body goes through the Codex HTTP client, whose transport
handles OAuth, the body rewrite and response normalization. Streaming
answers are passed through as SSE; everything else is returned as-is.
"""
import logging
import time
import uuid

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse
from starlette.background import BackgroundTask

from headers import EVENT_STREAM
from providers import CodexProvider
from utils.exceptions import CodexProxyError
from ..dependencies import get_provider
from ..logging_utils import log_request

logger = logging.getLogger(__name__)
router = APIRouter()

# Hop-by-hop and body framing headers are recomputed by the ASGI server
_RESPONSE_SKIP_HEADERS = ("content-length", "content-encoding", "transfer-encoding", "connection")


def _forward_headers(response: httpx.Response) -> dict:
    return {
        name: value
        for name, value in response.headers.items()
        if name.lower() not in _RESPONSE_SKIP_HEADERS
    }


@router.post("/v1/responses")
@router.post("/responses")
async def responses_create(raw_request: Request, provider: CodexProvider = Depends(get_provider)):
    """
    OpenAI-compatible Responses API endpoint for the Codex models.

    Accepts both Responses ``input`` bodies and chat ``messages`` bodies.
    """
    request_id = str(uuid.uuid4())[:8]
    start_time = time.time()
    body = await raw_request.body()

    logger.info(f"[{request_id}] ===== NEW RESPONSES API REQUEST =====")
    log_request(request_id, body, "/v1/responses", dict(raw_request.headers))

    client = provider.create_http_client()
    try:
        upstream_request = client.build_request(
            "POST",
            "/responses",
            content=body,
            headers={"content-type": raw_request.headers.get("content-type", "application/json")},
        )
        upstream = await client.send(upstream_request, stream=True)
    except CodexProxyError as e:
        await client.aclose()
        logger.error(f"[{request_id}] {e.__class__.__name__}: {e.message}")
        return JSONResponse(status_code=e.status_code, content=e.to_dict())
    except httpx.TimeoutException:
        await client.aclose()
        logger.error(f"[{request_id}] Request timeout")
        return JSONResponse(status_code=504, content={"error": {"message": "Request timeout", "type": "timeout"}})
    except httpx.HTTPError as e:
        await client.aclose()
        logger.error(f"[{request_id}] Upstream connection error: {e}")
        return JSONResponse(status_code=502, content={"error": {"message": str(e), "type": "upstream_error"}})

    content_type = upstream.headers.get("content-type", "")
    if upstream.is_success and content_type.startswith(EVENT_STREAM):
        logger.info(f"[{request_id}] Streaming response from Codex")

        async def close_upstream():
            await upstream.aclose()
            await client.aclose()
            logger.info(f"[{request_id}] Stream finished in {time.time() - start_time:.2f}s")

        # Decoded bytes, since content-encoding is not forwarded
        return StreamingResponse(
            upstream.aiter_bytes(),
            status_code=upstream.status_code,
            headers=_forward_headers(upstream),
            media_type=EVENT_STREAM,
            background=BackgroundTask(close_upstream),
        )

    try:
        content = await upstream.aread()
    finally:
        await upstream.aclose()
        await client.aclose()

    elapsed = time.time() - start_time
    if upstream.is_success:
        logger.info(f"[{request_id}] Request completed in {elapsed:.2f}s")
    else:
        logger.warning(f"[{request_id}] Codex returned {upstream.status_code} after {elapsed:.2f}s")

    return Response(
        content=content,
        status_code=upstream.status_code,
        headers=_forward_headers(upstream),
    )
