import asyncio
import json
import os
import stat

import pytest

from codex_oauth import Credential, FileSecretStorage, MemorySecretStorage, TokenStore
from codex_oauth.constants import PENDING_STATE_KEY, PENDING_VERIFIER_KEY, TOKENS_KEY
from utils.exceptions import AuthError, AuthErrorKind

from .conftest import ACCOUNT_ID, NOW, make_access_token


def _expired(credential: Credential) -> Credential:
    return Credential(
        access_token=credential.access_token,
        refresh_token=credential.refresh_token,
        expires_at=NOW + 60 * 1000,  # inside the five minute buffer
        account_id=credential.account_id,
    )


@pytest.mark.asyncio
async def test_not_authenticated_without_tokens(token_store):
    await token_store.initialize()

    assert not token_store.has_valid_token()
    with pytest.raises(AuthError) as exc_info:
        await token_store.get_valid_access_token()
    assert exc_info.value.kind == AuthErrorKind.NOT_AUTHENTICATED


@pytest.mark.asyncio
async def test_initialize_loads_persisted_credential(storage, clock, credential):
    await storage.set(TOKENS_KEY, json.dumps(credential.to_dict()))
    store = TokenStore(storage, clock=clock)

    await store.initialize()

    assert store.has_valid_token()
    assert store.get_account_id() == ACCOUNT_ID
    assert await store.get_valid_access_token() == credential.access_token


@pytest.mark.asyncio
async def test_initialize_ignores_corrupt_credential(storage, clock):
    await storage.set(TOKENS_KEY, "{not json")
    store = TokenStore(storage, clock=clock)

    await store.initialize()

    assert store.get_tokens() is None


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_refresh(storage, clock, credential):
    calls = []
    release = asyncio.Event()

    async def refresh_fn(refresh_token: str) -> Credential:
        calls.append(refresh_token)
        await release.wait()
        return Credential(
            access_token=make_access_token(),
            refresh_token="refresh-2",
            expires_at=NOW + 60 * 60 * 1000,
            account_id=ACCOUNT_ID,
        )

    store = TokenStore(storage, refresh_fn=refresh_fn, clock=clock)
    await store.save_tokens(_expired(credential))

    waiters = [asyncio.ensure_future(store.get_valid_access_token()) for _ in range(5)]
    await asyncio.sleep(0)
    assert store.is_refreshing()

    release.set()
    tokens = await asyncio.gather(*waiters)

    assert calls == ["refresh-1"]
    assert len(set(tokens)) == 1
    assert not store.is_refreshing()
    assert store.get_tokens().refresh_token == "refresh-2"
    assert json.loads(await storage.get(TOKENS_KEY))["refresh_token"] == "refresh-2"


@pytest.mark.asyncio
async def test_refresh_failure_clears_tokens(storage, clock, credential):
    async def refresh_fn(refresh_token: str) -> Credential:
        raise AuthError(AuthErrorKind.REFRESH_FAILED, detail="invalid_grant")

    store = TokenStore(storage, refresh_fn=refresh_fn, clock=clock)
    await store.save_tokens(_expired(credential))

    results = await asyncio.gather(
        store.get_valid_access_token(),
        store.get_valid_access_token(),
        return_exceptions=True,
    )

    for result in results:
        assert isinstance(result, AuthError)
        assert result.kind == AuthErrorKind.REFRESH_FAILED
    assert store.get_tokens() is None
    assert await storage.get(TOKENS_KEY) is None
    assert not store.is_refreshing()


@pytest.mark.asyncio
async def test_unexpected_refresh_error_is_wrapped(storage, clock, credential):
    async def refresh_fn(refresh_token: str) -> Credential:
        raise RuntimeError("boom")

    store = TokenStore(storage, refresh_fn=refresh_fn, clock=clock)
    await store.save_tokens(_expired(credential))

    with pytest.raises(AuthError) as exc_info:
        await store.get_valid_access_token()
    assert exc_info.value.kind == AuthErrorKind.REFRESH_FAILED


@pytest.mark.asyncio
async def test_pending_verifier_is_one_shot(token_store):
    await token_store.store_pending_verifier("verifier-1")

    assert await token_store.get_pending_verifier() == "verifier-1"
    assert await token_store.get_pending_verifier() is None


@pytest.mark.asyncio
async def test_clear_tokens_drops_pending_values(storage, token_store, credential):
    await token_store.save_tokens(credential)
    await token_store.store_pending_verifier("verifier-1")
    await token_store.store_pending_state("state-1")

    await token_store.clear_tokens()

    assert await storage.get(TOKENS_KEY) is None
    assert await storage.get(PENDING_VERIFIER_KEY) is None
    assert await storage.get(PENDING_STATE_KEY) is None


@pytest.mark.asyncio
async def test_file_storage_round_trip_and_permissions(tmp_path):
    secrets_file = tmp_path / "codex" / "secrets.json"
    storage = FileSecretStorage(secrets_file)

    await storage.set("codex_tokens", "value")

    assert await storage.get("codex_tokens") == "value"
    assert json.loads(secrets_file.read_text()) == {"codex_tokens": "value"}
    if os.name == "posix":
        assert stat.S_IMODE(secrets_file.stat().st_mode) == 0o600

    await storage.delete("codex_tokens")
    assert not secrets_file.exists()
    assert await storage.get("codex_tokens") is None


@pytest.mark.asyncio
async def test_memory_storage_initial_values():
    storage = MemorySecretStorage({"a": "1"})
    assert await storage.get("a") == "1"
    await storage.delete("missing")
