"""HTTP headers and constants package for the Codex backend"""

from .constants import (
    ACCOUNT_ID_HEADER,
    BETA_HEADER,
    CODEX_ORIGINATOR,
    CONVERSATION_ID_HEADER,
    EVENT_STREAM,
    EVENT_STREAM_CONTENT_TYPE,
    JSON_CONTENT_TYPE,
    ORIGINATOR_HEADER,
    RESPONSES_BETA,
    SESSION_ID_HEADER,
)
from .codex_headers import apply_prompt_cache_headers, build_codex_headers

__all__ = [
    "ACCOUNT_ID_HEADER",
    "BETA_HEADER",
    "CODEX_ORIGINATOR",
    "CONVERSATION_ID_HEADER",
    "EVENT_STREAM",
    "EVENT_STREAM_CONTENT_TYPE",
    "JSON_CONTENT_TYPE",
    "ORIGINATOR_HEADER",
    "RESPONSES_BETA",
    "SESSION_ID_HEADER",
    "apply_prompt_cache_headers",
    "build_codex_headers",
]
