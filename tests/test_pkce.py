import base64
import hashlib
from urllib.parse import parse_qs, urlparse

import pytest

from codex_oauth import (
    build_authorization_url,
    compute_challenge,
    create_state,
    generate_pkce,
    generate_random_string,
)
from codex_oauth.constants import CLIENT_ID, REDIRECT_URI, SCOPE
from codex_oauth.pkce import UNRESERVED_CHARACTERS


def test_verifier_and_state_lengths_and_alphabet():
    pkce = generate_pkce()
    state = create_state()

    assert len(pkce.verifier) == 64
    assert len(state) == 32
    assert set(pkce.verifier) <= set(UNRESERVED_CHARACTERS)
    assert set(state) <= set(UNRESERVED_CHARACTERS)


def test_challenge_is_base64url_sha256_without_padding():
    verifier = "a" * 64
    expected = base64.urlsafe_b64encode(hashlib.sha256(verifier.encode()).digest()).decode().rstrip("=")

    challenge = compute_challenge(verifier)

    assert challenge == expected
    assert "=" not in challenge
    assert "+" not in challenge and "/" not in challenge


def test_rfc7636_appendix_b_vector():
    verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
    assert compute_challenge(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"


def test_pkce_pair_is_consistent():
    pkce = generate_pkce()
    assert pkce.challenge == compute_challenge(pkce.verifier)


def test_random_strings_differ():
    assert generate_random_string(64) != generate_random_string(64)


def test_negative_length_rejected():
    with pytest.raises(ValueError):
        generate_random_string(-1)


def test_authorization_url_parameters():
    flow = build_authorization_url()
    parsed = urlparse(flow.url)
    params = {key: values[0] for key, values in parse_qs(parsed.query).items()}

    assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == "https://auth.openai.com/oauth/authorize"
    assert params["response_type"] == "code"
    assert params["client_id"] == CLIENT_ID
    assert params["redirect_uri"] == REDIRECT_URI
    assert params["scope"] == SCOPE
    assert params["code_challenge"] == compute_challenge(flow.verifier)
    assert params["code_challenge_method"] == "S256"
    assert params["state"] == flow.state
    assert params["codex_cli_simplified_flow"] == "true"
    assert params["originator"] == "codex_cli_rs"
