"""
httpx transport that turns plain OpenAI Responses calls into Codex backend calls.

Mount it on an ``httpx.AsyncClient`` (see ``create_codex_http_client``) and
hand that client to an OpenAI-compatible SDK: every request gets a fresh
OAuth bearer, the Codex URL, a rewritten body and Codex CLI headers, and
the response is normalized on the way back.
"""
import json
import logging
import uuid
from typing import Optional

import httpx

from settings import CODEX_BASE_URL, CONNECT_TIMEOUT, READ_TIMEOUT, STREAM_TIMEOUT
from codex_compat import (
    convert_sse_to_json,
    ensure_event_stream_content_type,
    map_usage_limit_404,
    parse_request_body,
    rewrite_url,
    transform_request_body,
)
from codex_compat.response_normalizer import decoded_headers
from codex_oauth import TokenStore
from headers import build_codex_headers
from instructions import InstructionCache
from models import get_base_model_id
from utils.exceptions import AuthError, AuthErrorKind, TransformError

logger = logging.getLogger(__name__)

# Recomputed for the rewritten body
_BODY_HEADERS = ("content-length", "transfer-encoding", "host")


class CodexTransport(httpx.AsyncBaseTransport):
    """Async transport applying the Codex OAuth and request/response rewriting"""

    def __init__(
        self,
        token_store: TokenStore,
        instruction_cache: InstructionCache,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            token_store: Source of the bearer token and account id
            instruction_cache: Codex CLI instructions per model family
            transport: Underlying network transport (default: httpx.AsyncHTTPTransport)
        """
        self._token_store = token_store
        self._instructions = instruction_cache
        self._transport = transport or httpx.AsyncHTTPTransport()

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        request_id = str(uuid.uuid4())[:8]

        access_token = await self._token_store.get_valid_access_token()
        account_id = self._token_store.get_account_id()
        if not account_id:
            raise AuthError(AuthErrorKind.ACCOUNT_ID_MISSING, "Account ID not found. Please re-authenticate.")

        url = rewrite_url(str(request.url))
        logger.debug(f"[{request_id}] Rewriting URL: {request.url} -> {url}")

        body = await request.aread()
        # Without a readable body the caller is assumed to stream
        stream_requested = True
        prompt_cache_key = None

        if body:
            try:
                parsed = parse_request_body(body)
                instructions = await self._instructions.get_instructions_for_model(
                    get_base_model_id(parsed.get("model") or "")
                )
                result = transform_request_body(parsed, instructions)
                body = json.dumps(result.body).encode("utf-8")
                stream_requested = result.stream_requested
                prompt_cache_key = result.prompt_cache_key
                logger.debug(
                    f"[{request_id}] Transformed request: model={result.model}->{result.normalized_model}, "
                    f"reasoning={result.reasoning_effort}, streaming={stream_requested}"
                )
            except (TransformError, TypeError, ValueError, AttributeError, KeyError) as e:
                logger.error(f"[{request_id}] Error transforming request body, forwarding unchanged: {e}")

        codex_headers = build_codex_headers(request.headers, access_token, account_id, prompt_cache_key)
        for name in _BODY_HEADERS:
            codex_headers.pop(name, None)

        codex_request = httpx.Request(
            request.method,
            url,
            headers=codex_headers,
            content=body,
            extensions=request.extensions,
        )
        upstream = await self._transport.handle_async_request(codex_request)

        if not upstream.is_success:
            return await self._handle_error_response(upstream, request_id)

        response_headers = ensure_event_stream_content_type(upstream.headers)

        if not stream_requested:
            try:
                return await convert_sse_to_json(upstream, response_headers)
            finally:
                await upstream.aclose()

        return httpx.Response(
            status_code=upstream.status_code,
            headers=response_headers,
            stream=upstream.stream,
            extensions=upstream.extensions,
        )

    async def _handle_error_response(self, upstream: httpx.Response, request_id: str) -> httpx.Response:
        try:
            mapped = await map_usage_limit_404(upstream)
            if mapped is not None:
                logger.warning(f"[{request_id}] Usage limit reached, returning 429 status")
                return mapped

            await upstream.aread()
            logger.error(f"[{request_id}] Codex API error: {upstream.status_code} {upstream.text}")
            return httpx.Response(
                status_code=upstream.status_code,
                headers=decoded_headers(upstream.headers),
                content=upstream.content,
                extensions=upstream.extensions,
            )
        finally:
            await upstream.aclose()

    async def aclose(self) -> None:
        await self._transport.aclose()


def create_codex_http_client(
    token_store: TokenStore,
    instruction_cache: InstructionCache,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """AsyncClient for SDKs: Codex base URL with the Codex transport mounted"""
    return httpx.AsyncClient(
        base_url=CODEX_BASE_URL,
        transport=CodexTransport(token_store, instruction_cache, transport),
        timeout=httpx.Timeout(STREAM_TIMEOUT, connect=CONNECT_TIMEOUT, read=READ_TIMEOUT),
    )
