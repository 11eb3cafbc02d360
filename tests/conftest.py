import base64
import json
from typing import Any, Dict

import pytest

from codex_oauth import Credential, MemorySecretStorage, TokenStore

ACCOUNT_ID = "acct_1234567890"
NOW = 1_700_000_000_000


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def make_jwt(payload: Dict[str, Any]) -> str:
    header = _b64url(json.dumps({"alg": "RS256", "typ": "JWT"}).encode())
    body = _b64url(json.dumps(payload).encode())
    return f"{header}.{body}.signature"


def make_access_token(account_id: str = ACCOUNT_ID) -> str:
    return make_jwt({
        "sub": "user-abc",
        "https://api.openai.com/auth": {"chatgpt_account_id": account_id},
    })


class FakeClock:
    def __init__(self, now: int = NOW):
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def access_token() -> str:
    return make_access_token()


@pytest.fixture
def credential(access_token: str) -> Credential:
    return Credential(
        access_token=access_token,
        refresh_token="refresh-1",
        expires_at=NOW + 60 * 60 * 1000,
        account_id=ACCOUNT_ID,
    )


@pytest.fixture
def storage() -> MemorySecretStorage:
    return MemorySecretStorage()


@pytest.fixture
def token_store(storage: MemorySecretStorage, clock: FakeClock) -> TokenStore:
    return TokenStore(storage, clock=clock)
