"""Codex Responses compatibility layer

Rewrites outgoing request bodies into the shape the ChatGPT Codex backend
accepts and normalizes what comes back.
"""

from .bridge_prompt import CODEX_BRIDGE_PROMPT, add_bridge_message
from .request_transformer import (
    TransformResult,
    content_to_text,
    convert_chat_messages,
    filter_input,
    normalize_orphaned_tool_outputs,
    parse_request_body,
    transform_request_body,
)
from .response_normalizer import (
    convert_sse_to_json,
    ensure_event_stream_content_type,
    is_usage_limit_error,
    map_usage_limit_404,
    rewrite_url,
)
from .sse_parser import (
    SSEEvent,
    SSEParser,
    extract_text_from_event,
    find_completed_response,
    iter_sse_text,
)

__all__ = [
    "CODEX_BRIDGE_PROMPT",
    "add_bridge_message",
    "TransformResult",
    "content_to_text",
    "convert_chat_messages",
    "filter_input",
    "normalize_orphaned_tool_outputs",
    "parse_request_body",
    "transform_request_body",
    "convert_sse_to_json",
    "ensure_event_stream_content_type",
    "is_usage_limit_error",
    "map_usage_limit_404",
    "rewrite_url",
    "SSEEvent",
    "SSEParser",
    "extract_text_from_event",
    "find_completed_response",
    "iter_sse_text",
]
