import json

import httpx
import pytest

from codex_oauth import MemorySecretStorage, TokenStore
from providers import ChatRequest, CodexClient
from utils.exceptions import UpstreamError

from .test_codex_transport import StaticInstructions


def _sse(*events) -> str:
    return "".join(f"data: {json.dumps(event)}\n\n" for event in events) + "data: [DONE]\n\n"


def _text_event(text: str) -> dict:
    return {
        "type": "response.done",
        "response": {"output": [{"type": "message", "content": [{"type": "output_text", "text": text}]}]},
    }


async def _store(credential) -> TokenStore:
    store = TokenStore(MemorySecretStorage(), clock=lambda: credential.expires_at - 60 * 60 * 1000)
    await store.save_tokens(credential)
    return store


@pytest.mark.asyncio
async def test_stream_text_yields_message_text(credential):
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, text=_sse({"type": "response.created"}, _text_event("Hello!")))

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        client = CodexClient(await _store(credential), StaticInstructions(), client=http_client)
        request = ChatRequest(
            model="gpt-5.1-codex-mini",
            messages=[{"role": "system", "content": "be brief"}, {"role": "user", "content": "hi"}],
            provider_options={"reasoningEffort": "high"},
        )
        texts = [text async for text in client.stream_text(request)]

    assert texts == ["Hello!"]
    payload = json.loads(requests[0].content)
    assert payload["model"] == "gpt-5.1-codex-mini"
    assert payload["reasoning"]["effort"] == "high"
    assert payload["input"][0] == {"type": "message", "role": "developer", "content": "be brief"}
    assert payload["instructions"] == "CODEX INSTRUCTIONS"
    assert requests[0].headers["chatgpt-account-id"] == credential.account_id


@pytest.mark.asyncio
async def test_unsupported_effort_falls_back_to_model_default(credential):
    client = CodexClient(await _store(credential))

    request = ChatRequest(model="gpt-5.1-codex-mini", messages=[], provider_options={"reasoningEffort": "low"})

    assert client.get_effective_reasoning_effort(request) == "medium"


@pytest.mark.asyncio
async def test_error_response_raises_with_message(credential):
    def handler(request):
        return httpx.Response(403, json={"error": {"message": "Plan does not include Codex"}})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        client = CodexClient(await _store(credential), client=http_client)
        with pytest.raises(UpstreamError) as exc_info:
            async for _ in client.stream_text(ChatRequest(model="gpt-5.1", messages=[])):
                pass

    assert exc_info.value.status == 403
    assert exc_info.value.message == "Plan does not include Codex"
