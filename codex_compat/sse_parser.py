"""
Server-Sent Events (SSE) parsing for Codex responses.
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, Optional

from utils.exceptions import UpstreamError

logger = logging.getLogger(__name__)

DONE_SENTINEL = "[DONE]"
COMPLETION_EVENT_TYPES = ("response.done", "response.completed")
TEXT_EVENT_TYPES = ("response.ongoing", "response.done")


@dataclass
class SSEEvent:
    """Represents a parsed Server-Sent Events frame."""
    event: Optional[str]
    data: str

    def json(self) -> Optional[Dict[str, Any]]:
        """Decoded data payload, or None for [DONE] and non-JSON frames"""
        if not self.data or self.data == DONE_SENTINEL:
            return None
        try:
            payload = json.loads(self.data)
        except ValueError:
            logger.debug(f"Skipping non-JSON SSE data: {self.data[:100]}")
            return None
        return payload if isinstance(payload, dict) else None


class SSEParser:
    """Incremental parser for text/event-stream payloads."""

    def __init__(self) -> None:
        self._buffer = ""
        self._current_event: Optional[str] = None
        self._current_data: List[str] = []

    def feed(self, chunk: str) -> List[SSEEvent]:
        """Consume raw chunk text and return the events it completes."""
        events: List[SSEEvent] = []
        if not chunk:
            return events

        self._buffer += chunk

        while True:
            newline_idx = self._buffer.find("\n")
            if newline_idx == -1:
                break

            line = self._buffer[:newline_idx]
            self._buffer = self._buffer[newline_idx + 1:]

            # Trim CR from Windows-style endings
            if line.endswith("\r"):
                line = line[:-1]

            if line == "":
                # Blank line terminates the current event
                if self._current_event is not None or self._current_data:
                    events.append(SSEEvent(event=self._current_event, data="\n".join(self._current_data)))
                self._current_event = None
                self._current_data = []
                continue

            if line.startswith(":"):
                continue

            if line.startswith("event:"):
                self._current_event = line[6:].lstrip()
                continue

            if line.startswith("data:"):
                data_value = line[5:]
                if data_value.startswith(" "):
                    data_value = data_value[1:]
                self._current_data.append(data_value)
                continue

            # Unknown field (id:, retry:) - ignored

        return events

    def flush(self) -> List[SSEEvent]:
        """Flush any remaining buffered event (used at stream end)."""
        if self._buffer:
            # A final line without a trailing newline
            pending = self.feed("\n")
        else:
            pending = []
        if self._current_event is not None or self._current_data:
            pending.append(SSEEvent(event=self._current_event, data="\n".join(self._current_data)))
        self._current_event = None
        self._current_data = []
        self._buffer = ""
        return pending


def extract_text_from_event(event: Dict[str, Any]) -> str:
    """
    Extract assistant text from a decoded Codex SSE event.

    Only ``output_text`` parts of ``message`` output items in
    response.ongoing / response.done events carry text.

    Raises:
        UpstreamError: for events of type ``error``
    """
    event_type = event.get("type")

    if event_type == "error":
        error = event.get("error")
        message = error.get("message") if isinstance(error, dict) else None
        raise UpstreamError(502, json.dumps(event), message or "Unknown Codex error")

    if event_type not in TEXT_EVENT_TYPES:
        return ""

    response = event.get("response")
    if not isinstance(response, dict):
        return ""

    texts = []
    for item in response.get("output") or []:
        if not isinstance(item, dict) or item.get("type") != "message":
            continue
        for part in item.get("content") or []:
            if isinstance(part, dict) and part.get("type") == "output_text" and part.get("text"):
                texts.append(part["text"])
    return "".join(texts)


async def iter_sse_text(chunks: AsyncIterator[str]) -> AsyncIterator[str]:
    """
    Turn a Codex SSE text stream into plain text fragments.

    Partial lines are carried over between chunks; ``[DONE]`` ends the stream.

    Args:
        chunks: Decoded text chunks of the SSE body

    Yields:
        Non-empty text fragments in arrival order
    """
    parser = SSEParser()

    async for chunk in chunks:
        for sse_event in parser.feed(chunk):
            if sse_event.data == DONE_SENTINEL:
                return
            payload = sse_event.json()
            if payload is None:
                continue
            text = extract_text_from_event(payload)
            if text:
                yield text

    for sse_event in parser.flush():
        if sse_event.data == DONE_SENTINEL:
            return
        payload = sse_event.json()
        if payload is None:
            continue
        text = extract_text_from_event(payload)
        if text:
            yield text


def find_completed_response(sse_text: str) -> Optional[Any]:
    """Payload of the last completion event in a full SSE body, or None"""
    final_response = None
    found = False
    for line in sse_text.split("\n"):
        line = line.rstrip("\r")
        if not line.startswith("data: "):
            continue
        try:
            data = json.loads(line[6:])
        except ValueError:
            continue
        if isinstance(data, dict) and data.get("type") in COMPLETION_EVENT_TYPES:
            final_response = data.get("response")
            found = True
    return final_response if found else None
