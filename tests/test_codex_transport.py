import asyncio
import json
from dataclasses import replace

import httpx
import pytest

from codex_oauth import Credential, MemorySecretStorage, TokenStore
from providers import create_codex_http_client
from utils.exceptions import AuthError, AuthErrorKind

from .conftest import ACCOUNT_ID, make_access_token

COMPLETED = {"id": "resp_1", "status": "completed", "output": []}
SSE_BODY = (
    'data: {"type": "response.created", "response": {"id": "resp_1"}}\n\n'
    f'data: {json.dumps({"type": "response.completed", "response": COMPLETED})}\n\n'
)


class StaticInstructions:
    def __init__(self, text: str = "CODEX INSTRUCTIONS"):
        self.text = text
        self.models = []

    async def get_instructions_for_model(self, normalized_model: str) -> str:
        self.models.append(normalized_model)
        return self.text


class Upstream:
    """Records the forwarded request and answers with a canned response"""

    def __init__(self, status_code=200, body=SSE_BODY, headers=None):
        self.status_code = status_code
        self.body = body
        self.headers = headers if headers is not None else {"content-type": "text/event-stream"}
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, content=self.body, headers=self.headers)

    @property
    def last_body(self) -> dict:
        return json.loads(self.requests[-1].content)


async def _store(credential) -> TokenStore:
    store = TokenStore(MemorySecretStorage(), clock=lambda: credential.expires_at - 60 * 60 * 1000)
    await store.save_tokens(credential)
    return store


@pytest.mark.asyncio
async def test_non_streaming_request_returns_final_response_json(credential):
    upstream = Upstream()
    instructions = StaticInstructions()
    client = create_codex_http_client(await _store(credential), instructions, httpx.MockTransport(upstream))

    async with client:
        response = await client.post(
            "/responses",
            json={"model": "gpt-5.1-codex-high", "input": [{"type": "message", "role": "user", "content": "hi"}]},
            headers={"Authorization": "Bearer chatgpt-oauth", "x-api-key": "secret"},
        )

    assert response.status_code == 200
    assert response.json() == COMPLETED

    forwarded = upstream.requests[0]
    assert str(forwarded.url) == "https://chatgpt.com/backend-api/codex/responses"
    assert forwarded.headers["authorization"] == f"Bearer {credential.access_token}"
    assert forwarded.headers["chatgpt-account-id"] == ACCOUNT_ID
    assert forwarded.headers["openai-beta"] == "responses=experimental"
    assert forwarded.headers["originator"] == "codex_cli_rs"
    assert forwarded.headers["accept"] == "text/event-stream"
    assert "x-api-key" not in forwarded.headers

    body = upstream.last_body
    assert body["model"] == "gpt-5.1-codex"
    assert body["stream"] is True
    assert body["store"] is False
    assert body["instructions"] == "CODEX INSTRUCTIONS"
    assert body["reasoning"]["effort"] == "high"
    assert instructions.models == ["gpt-5.1-codex"]


@pytest.mark.asyncio
async def test_streaming_request_passes_sse_through(credential):
    upstream = Upstream(headers={})
    client = create_codex_http_client(await _store(credential), StaticInstructions(), httpx.MockTransport(upstream))

    async with client:
        response = await client.post(
            "/responses",
            json={"model": "gpt-5.2", "stream": True, "input": [], "prompt_cache_key": "conv-7"},
        )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    assert response.text == SSE_BODY

    forwarded = upstream.requests[0]
    assert forwarded.headers["conversation_id"] == "conv-7"
    assert forwarded.headers["session_id"] == "conv-7"
    assert "reasoning" not in upstream.last_body


@pytest.mark.asyncio
async def test_usage_limit_404_is_returned_as_429(credential):
    error_body = json.dumps({"error": {"code": "usage_limit_reached", "message": "limit"}})
    upstream = Upstream(status_code=404, body=error_body, headers={"content-type": "application/json"})
    client = create_codex_http_client(await _store(credential), StaticInstructions(), httpx.MockTransport(upstream))

    async with client:
        response = await client.post("/responses", json={"model": "gpt-5.1", "input": []})

    assert response.status_code == 429
    assert response.json()["error"]["code"] == "usage_limit_reached"


@pytest.mark.asyncio
async def test_other_errors_pass_through(credential):
    upstream = Upstream(status_code=400, body='{"detail": "bad"}', headers={"content-type": "application/json"})
    client = create_codex_http_client(await _store(credential), StaticInstructions(), httpx.MockTransport(upstream))

    async with client:
        response = await client.post("/responses", json={"model": "gpt-5.1", "input": []})

    assert response.status_code == 400
    assert response.json() == {"detail": "bad"}


@pytest.mark.asyncio
async def test_unparseable_body_is_forwarded_unchanged(credential):
    upstream = Upstream()
    client = create_codex_http_client(await _store(credential), StaticInstructions(), httpx.MockTransport(upstream))

    async with client:
        await client.post("/responses", content=b"not json", headers={"content-type": "application/json"})

    assert upstream.requests[0].content == b"not json"


@pytest.mark.asyncio
async def test_unauthenticated_request_raises_before_network():
    upstream = Upstream()
    store = TokenStore(MemorySecretStorage())
    client = create_codex_http_client(store, StaticInstructions(), httpx.MockTransport(upstream))

    async with client:
        with pytest.raises(AuthError) as exc_info:
            await client.post("/responses", json={"model": "gpt-5.1", "input": []})

    assert exc_info.value.kind == AuthErrorKind.NOT_AUTHENTICATED
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_expired_token_is_refreshed_once_before_forwarding(clock, credential):
    refreshed_token = make_access_token()
    refresh_calls = []

    async def refresh_fn(refresh_token: str) -> Credential:
        refresh_calls.append(refresh_token)
        await asyncio.sleep(0.01)
        return Credential(
            access_token=refreshed_token,
            refresh_token="refresh-2",
            expires_at=clock.now + 60 * 60 * 1000,
            account_id=ACCOUNT_ID,
        )

    store = TokenStore(MemorySecretStorage(), refresh_fn=refresh_fn, clock=clock)
    await store.save_tokens(replace(credential, access_token="stale-token", expires_at=clock.now - 1))
    upstream = Upstream()
    client = create_codex_http_client(store, StaticInstructions(), httpx.MockTransport(upstream))

    async with client:
        responses = await asyncio.gather(
            client.post("/responses", json={"model": "gpt-5.1-codex", "input": []}),
            client.post("/responses", json={"model": "gpt-5.1-codex", "input": []}),
        )
        later = await client.post("/responses", json={"model": "gpt-5.1-codex", "input": []})

    assert [response.status_code for response in responses] == [200, 200]
    assert later.status_code == 200
    assert refresh_calls == ["refresh-1"]
    assert len(upstream.requests) == 3
    for forwarded in upstream.requests:
        assert forwarded.headers["authorization"] == f"Bearer {refreshed_token}"
