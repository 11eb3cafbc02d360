"""
Request body rewriting for the Codex Responses backend.

The ChatGPT backend only accepts the exact shape the Codex CLI sends:
stateless (store=false), always streaming, with the CLI instructions and
encrypted reasoning included. Items the SDK adds for stateful conversations
must be removed before forwarding.
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from settings import DEFAULT_REASONING_SUMMARY, DEFAULT_TEXT_VERBOSITY
from models import get_base_model_id, get_reasoning_effort
from utils.exceptions import TransformError
from .bridge_prompt import add_bridge_message

logger = logging.getLogger(__name__)

MAX_ORPHAN_OUTPUT_CHARS = 16000
TRUNCATION_MARKER = "\n...[truncated]"


@dataclass
class TransformResult:
    """Rewritten body plus what the transport needs to know about the request"""
    body: Dict[str, Any]
    stream_requested: bool
    prompt_cache_key: Optional[str]
    model: str
    normalized_model: str
    reasoning_effort: str


def parse_request_body(raw: Union[bytes, str]) -> Dict[str, Any]:
    """Decode a JSON request body

    Raises:
        TransformError: if the body is not a JSON object
    """
    try:
        parsed = json.loads(raw)
    except (ValueError, UnicodeDecodeError) as e:
        raise TransformError(f"Request body is not valid JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise TransformError("Request body must be a JSON object")
    return parsed


def content_to_text(content: Any) -> str:
    """Flatten string or array-of-parts content to plain text (text parts only)"""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        texts = []
        for part in content:
            if isinstance(part, str):
                texts.append(part)
            elif isinstance(part, dict) and isinstance(part.get("text"), str):
                texts.append(part["text"])
        return "".join(texts)
    return ""


def convert_chat_messages(messages: List[Any]) -> List[Dict[str, Any]]:
    """Convert chat-completions style messages to Responses input items

    system messages become developer messages, tool results become
    function_call_output items and assistant tool calls become function_call
    items. Anything else passes through unchanged.
    """
    input_items: List[Dict[str, Any]] = []

    for message in messages:
        if not isinstance(message, dict) or "type" in message:
            input_items.append(message)
            continue

        role = message.get("role")
        content = message.get("content")

        if role == "system":
            input_items.append({"type": "message", "role": "developer", "content": content_to_text(content)})
        elif role == "tool":
            input_items.append({
                "type": "function_call_output",
                "call_id": message.get("tool_call_id"),
                "output": content_to_text(content),
            })
        elif role in ("user", "assistant", "developer"):
            text = content_to_text(content)
            if text or role != "assistant":
                input_items.append({"type": "message", "role": role, "content": text})

            for tool_call in message.get("tool_calls") or []:
                if not isinstance(tool_call, dict):
                    continue
                function = tool_call.get("function") or {}
                input_items.append({
                    "type": "function_call",
                    "call_id": tool_call.get("id"),
                    "name": function.get("name"),
                    "arguments": function.get("arguments", ""),
                })
        else:
            input_items.append(message)

    return input_items


def filter_input(items: List[Any]) -> List[Any]:
    """Drop item_reference items and strip ids (the backend runs stateless)"""
    filtered = []
    for item in items:
        if isinstance(item, dict):
            if item.get("type") == "item_reference":
                continue
            if "id" in item:
                item = {key: value for key, value in item.items() if key != "id"}
        filtered.append(item)
    return filtered


def _stringify_output(output: Any) -> str:
    if isinstance(output, str):
        return output
    if output is None:
        return ""
    try:
        return json.dumps(output)
    except (TypeError, ValueError):
        return str(output)


def normalize_orphaned_tool_outputs(items: List[Any]) -> List[Any]:
    """Turn function_call_output items without a matching function_call into assistant text

    The backend rejects outputs whose call it has not seen, which happens once
    the call itself was an item_reference that got filtered out.
    """
    call_ids = {
        item.get("call_id")
        for item in items
        if isinstance(item, dict) and item.get("type") == "function_call" and item.get("call_id")
    }

    normalized = []
    for item in items:
        if (
            isinstance(item, dict)
            and item.get("type") == "function_call_output"
            and not (item.get("call_id") and item.get("call_id") in call_ids)
        ):
            tool_name = item.get("name") or "tool"
            call_id = item.get("call_id") or "unknown"
            text = _stringify_output(item.get("output"))
            if len(text) > MAX_ORPHAN_OUTPUT_CHARS:
                text = text[:MAX_ORPHAN_OUTPUT_CHARS] + TRUNCATION_MARKER
            logger.debug(f"Converting orphaned tool output {call_id} to assistant message")
            item = {
                "type": "message",
                "role": "assistant",
                "content": f"[Previous {tool_name} result; call_id={call_id}]: {text}",
            }
        normalized.append(item)
    return normalized


def transform_request_body(parsed: Dict[str, Any], instructions: str) -> TransformResult:
    """
    Rewrite a Responses (or chat-style) request body for the Codex backend.

    Args:
        parsed: Decoded request body from the SDK
        instructions: Codex CLI instructions for the model family (may be empty)

    Returns:
        TransformResult with the outgoing body; the caller decides from
        ``stream_requested`` whether to hand back SSE or a single JSON document
    """
    model = parsed.get("model") or ""
    normalized_model = get_base_model_id(model)
    reasoning_effort = get_reasoning_effort(model)
    has_tools = bool(parsed.get("tools"))

    if parsed.get("input") is not None:
        items = parsed["input"]
    elif isinstance(parsed.get("messages"), list):
        items = convert_chat_messages(parsed["messages"])
    else:
        items = []

    if isinstance(items, list):
        items = filter_input(items)
        items = normalize_orphaned_tool_outputs(items)
        items = add_bridge_message(items, has_tools)

    body: Dict[str, Any] = {
        "model": normalized_model,
        "store": False,
        # Always stream upstream; non-streaming callers get the buffered result
        "stream": True,
        "input": items,
        "include": ["reasoning.encrypted_content"],
        "text": {"verbosity": DEFAULT_TEXT_VERBOSITY},
    }

    if instructions:
        body["instructions"] = instructions

    if reasoning_effort != "none":
        body["reasoning"] = {"effort": reasoning_effort, "summary": DEFAULT_REASONING_SUMMARY}

    if parsed.get("tools") is not None:
        body["tools"] = parsed["tools"]

    prompt_cache_key = parsed.get("prompt_cache_key")
    result = TransformResult(
        body=body,
        stream_requested=parsed.get("stream") is True,
        prompt_cache_key=prompt_cache_key if isinstance(prompt_cache_key, str) and prompt_cache_key else None,
        model=model,
        normalized_model=normalized_model,
        reasoning_effort=reasoning_effort,
    )
    logger.debug(
        f"Transformed request: model={model}->{normalized_model}, "
        f"reasoning={reasoning_effort}, streaming={result.stream_requested}"
    )
    return result
