"""ChatGPT OAuth for the Codex backend

PKCE authorization, token exchange and refresh, and persistent credential
storage for ChatGPT Plus/Pro subscriptions.
"""

from .callback_server import AuthFlowRunner, OAuthCallbackServer, browser_login
from .jwt_utils import decode_jwt, extract_account_id
from .models import Credential
from .pkce import (
    AuthorizationFlow,
    PKCEPair,
    build_authorization_url,
    compute_challenge,
    create_state,
    generate_pkce,
    generate_random_string,
)
from .storage import FileSecretStorage, MemorySecretStorage, SecretStorage
from .token_exchange import exchange_code, is_token_expired, refresh
from .token_store import TokenStore

__all__ = [
    "AuthFlowRunner",
    "OAuthCallbackServer",
    "browser_login",
    "decode_jwt",
    "extract_account_id",
    "Credential",
    "AuthorizationFlow",
    "PKCEPair",
    "build_authorization_url",
    "compute_challenge",
    "create_state",
    "generate_pkce",
    "generate_random_string",
    "FileSecretStorage",
    "MemorySecretStorage",
    "SecretStorage",
    "exchange_code",
    "is_token_expired",
    "refresh",
    "TokenStore",
]
