import pytest

from codex_oauth import decode_jwt, extract_account_id
from utils.exceptions import AuthError, AuthErrorKind

from .conftest import _b64url, make_jwt


def test_decode_payload():
    token = make_jwt({"sub": "user-1", "exp": 123})
    assert decode_jwt(token) == {"sub": "user-1", "exp": 123}


@pytest.mark.parametrize("token", ["", "abc", "a.b", "a.b.c.d"])
def test_wrong_segment_count_is_malformed(token):
    with pytest.raises(AuthError) as exc_info:
        decode_jwt(token)
    assert exc_info.value.kind == AuthErrorKind.MALFORMED_TOKEN


def test_undecodable_payload_is_malformed():
    with pytest.raises(AuthError) as exc_info:
        decode_jwt(f"header.{_b64url(b'not json')}.sig")
    assert exc_info.value.kind == AuthErrorKind.MALFORMED_TOKEN


def test_account_id_from_openai_claim():
    token = make_jwt({
        "sub": "user-1",
        "https://api.openai.com/auth": {"chatgpt_account_id": "acct-42"},
    })
    assert extract_account_id(token) == "acct-42"


def test_account_id_falls_back_to_sub():
    token = make_jwt({"sub": "user-1", "https://api.openai.com/auth": {}})
    assert extract_account_id(token) == "user-1"


def test_account_id_missing():
    with pytest.raises(AuthError) as exc_info:
        extract_account_id(make_jwt({"email": "someone@example.com"}))
    assert exc_info.value.kind == AuthErrorKind.ACCOUNT_ID_MISSING
