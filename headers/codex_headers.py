"""Outgoing header construction for Codex backend requests"""

from typing import Optional

import httpx

from .constants import (
    ACCOUNT_ID_HEADER,
    BETA_HEADER,
    CODEX_ORIGINATOR,
    CONVERSATION_ID_HEADER,
    EVENT_STREAM,
    ORIGINATOR_HEADER,
    RESPONSES_BETA,
    SESSION_ID_HEADER,
    STRIPPED_HEADERS,
)


def apply_prompt_cache_headers(headers: httpx.Headers, prompt_cache_key: Optional[str]) -> None:
    """Mirror the prompt cache key into conversation_id/session_id, or remove both"""
    if prompt_cache_key:
        headers[CONVERSATION_ID_HEADER] = prompt_cache_key
        headers[SESSION_ID_HEADER] = prompt_cache_key
    else:
        headers.pop(CONVERSATION_ID_HEADER, None)
        headers.pop(SESSION_ID_HEADER, None)


def build_codex_headers(
    headers: httpx.Headers,
    access_token: str,
    account_id: str,
    prompt_cache_key: Optional[str] = None,
) -> httpx.Headers:
    """Copy of the caller's headers rewritten for the Codex backend

    Args:
        headers: Headers of the outgoing SDK request
        access_token: OAuth bearer token
        account_id: ChatGPT account id
        prompt_cache_key: Conversation key from the request body, if any

    Returns:
        New headers object; the input is left untouched
    """
    codex_headers = httpx.Headers(headers)
    for name in STRIPPED_HEADERS:
        codex_headers.pop(name, None)

    codex_headers["Authorization"] = f"Bearer {access_token}"
    codex_headers[ACCOUNT_ID_HEADER] = account_id
    codex_headers[BETA_HEADER] = RESPONSES_BETA
    codex_headers[ORIGINATOR_HEADER] = CODEX_ORIGINATOR
    codex_headers["accept"] = EVENT_STREAM

    apply_prompt_cache_headers(codex_headers, prompt_cache_key)
    return codex_headers
