"""
Direct Codex client producing plain text streams.

Alternative to the SDK path: takes a chat-style request, calls the Codex
backend itself and yields only the assistant text.
"""
import json
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from settings import CONNECT_TIMEOUT, DEFAULT_REASONING_SUMMARY, READ_TIMEOUT, STREAM_TIMEOUT
from codex_compat import convert_chat_messages, iter_sse_text
from codex_oauth import TokenStore
from headers import (
    ACCOUNT_ID_HEADER,
    BETA_HEADER,
    CODEX_ORIGINATOR,
    EVENT_STREAM,
    ORIGINATOR_HEADER,
    RESPONSES_BETA,
)
from instructions import InstructionCache
from models import get_base_model_id, get_reasoning_effort, supports_reasoning_level
from utils.exceptions import AuthError, AuthErrorKind, UpstreamError

logger = logging.getLogger(__name__)

CODEX_API_URL = "https://chatgpt.com/backend-api/codex/responses"


@dataclass
class ChatRequest:
    model: str
    messages: List[Dict[str, Any]]
    provider_options: Dict[str, Any] = field(default_factory=dict)


class CodexClient:
    """Calls the Codex backend and yields text fragments"""

    def __init__(
        self,
        token_store: TokenStore,
        instruction_cache: Optional[InstructionCache] = None,
        client: Optional[httpx.AsyncClient] = None,
        endpoint: str = CODEX_API_URL,
    ):
        self.token_store = token_store
        self.instruction_cache = instruction_cache
        self._client = client
        self.endpoint = endpoint

    def get_effective_reasoning_effort(self, request: ChatRequest) -> str:
        """providerOptions.reasoningEffort when the model accepts it, else the model default"""
        requested = request.provider_options.get("reasoningEffort")
        if requested:
            if supports_reasoning_level(request.model, requested):
                return requested
            logger.warning(f"Ignoring reasoning effort '{requested}' unsupported by {request.model}")
        return get_reasoning_effort(request.model)

    async def build_payload(self, request: ChatRequest) -> Dict[str, Any]:
        base_model = get_base_model_id(request.model)
        reasoning_effort = self.get_effective_reasoning_effort(request)

        payload: Dict[str, Any] = {
            "model": base_model,
            "store": False,
            "stream": True,
            "input": convert_chat_messages(request.messages),
            "include": ["reasoning.encrypted_content"],
        }

        if self.instruction_cache is not None:
            instructions = await self.instruction_cache.get_instructions_for_model(base_model)
            if instructions:
                payload["instructions"] = instructions

        if reasoning_effort != "none":
            payload["reasoning"] = {"effort": reasoning_effort, "summary": DEFAULT_REASONING_SUMMARY}

        return payload

    async def stream_text(self, request: ChatRequest) -> AsyncIterator[str]:
        """
        Stream assistant text for a chat request.

        Args:
            request: Chat-style request

        Yields:
            Text fragments in arrival order

        Raises:
            AuthError: when no usable credential is available
            UpstreamError: on a non-2xx answer or an ``error`` event in the stream
        """
        request_id = str(uuid.uuid4())[:8]
        access_token = await self.token_store.get_valid_access_token()
        account_id = self.token_store.get_account_id()
        if not account_id:
            raise AuthError(AuthErrorKind.ACCOUNT_ID_MISSING, "Account ID not found. Please re-authenticate.")

        payload = await self.build_payload(request)
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {access_token}",
            ACCOUNT_ID_HEADER: account_id,
            ORIGINATOR_HEADER: CODEX_ORIGINATOR,
            BETA_HEADER: RESPONSES_BETA,
            "Accept": EVENT_STREAM,
        }

        logger.debug(f"[{request_id}] Streaming from Codex: {self.endpoint} model={payload['model']}")

        client = self._client or httpx.AsyncClient(
            timeout=httpx.Timeout(STREAM_TIMEOUT, connect=CONNECT_TIMEOUT, read=READ_TIMEOUT)
        )
        try:
            async with client.stream("POST", self.endpoint, json=payload, headers=headers) as response:
                if not response.is_success:
                    await response.aread()
                    error_text = response.text
                    logger.error(f"[{request_id}] Codex API error {response.status_code}: {error_text}")
                    raise UpstreamError(
                        response.status_code,
                        error_text,
                        _error_message(error_text) or f"Codex API error: {response.status_code} {response.reason_phrase}",
                    )

                # Leaving the block (including early consumer exit) closes the upstream response
                async for text in iter_sse_text(response.aiter_text()):
                    yield text
        finally:
            if self._client is None:
                await client.aclose()


def _error_message(error_text: str) -> Optional[str]:
    try:
        error_json = json.loads(error_text)
    except ValueError:
        return None
    if isinstance(error_json, dict) and isinstance(error_json.get("error"), dict):
        return error_json["error"].get("message")
    return None
