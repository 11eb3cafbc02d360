"""
OpenAI OAuth authorization flow with PKCE (RFC 7636)
"""
import base64
import hashlib
import secrets
import string
from typing import NamedTuple
from urllib.parse import urlencode

from .constants import (
    AUTHORIZE_URL,
    CLIENT_ID,
    CODEX_CLI_SIMPLIFIED_FLOW,
    ORIGINATOR,
    REDIRECT_URI,
    SCOPE,
)

# RFC 3986 unreserved characters
UNRESERVED_CHARACTERS = string.ascii_uppercase + string.ascii_lowercase + string.digits + "-._~"

VERIFIER_LENGTH = 64
STATE_LENGTH = 32


class PKCEPair(NamedTuple):
    """PKCE code verifier and challenge pair"""
    verifier: str
    challenge: str


class AuthorizationFlow(NamedTuple):
    """OAuth authorization flow data"""
    url: str
    verifier: str
    state: str


def generate_random_string(length: int) -> str:
    """
    Generate a cryptographically random string over the unreserved alphabet.

    secrets.choice draws uniformly, so every character is equally likely.

    Args:
        length: Number of characters to generate

    Returns:
        Random string of exactly ``length`` characters
    """
    if length < 0:
        raise ValueError("length must be non-negative")
    return "".join(secrets.choice(UNRESERVED_CHARACTERS) for _ in range(length))


def compute_challenge(verifier: str) -> str:
    """S256 code challenge: base64url(sha256(verifier)) without padding"""
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def generate_pkce() -> PKCEPair:
    """
    Generate PKCE code verifier and challenge.

    Returns:
        PKCEPair with a 64 character verifier and its S256 challenge
    """
    verifier = generate_random_string(VERIFIER_LENGTH)
    return PKCEPair(verifier=verifier, challenge=compute_challenge(verifier))


def create_state() -> str:
    """Random state parameter for CSRF protection (32 characters)"""
    return generate_random_string(STATE_LENGTH)


def build_authorization_url() -> AuthorizationFlow:
    """
    Create the OpenAI OAuth authorization URL.

    Generates a fresh PKCE pair and state and builds the authorize URL with
    the parameters the Codex CLI sends.

    Returns:
        AuthorizationFlow: Tuple of (url, verifier, state)
    """
    pkce = generate_pkce()
    state = create_state()

    params = {
        "response_type": "code",
        "client_id": CLIENT_ID,
        "redirect_uri": REDIRECT_URI,
        "scope": SCOPE,
        "code_challenge": pkce.challenge,
        "code_challenge_method": "S256",
        "state": state,
        # Codex CLI parameters (required for token exchange)
        "codex_cli_simplified_flow": CODEX_CLI_SIMPLIFIED_FLOW,
        "originator": ORIGINATOR,
    }

    url = f"{AUTHORIZE_URL}?{urlencode(params)}"

    return AuthorizationFlow(url=url, verifier=pkce.verifier, state=state)
