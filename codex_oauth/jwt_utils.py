"""
JWT payload decoding and ChatGPT account ID extraction

Tokens are only ever decoded after being received directly from the token
endpoint over TLS, so the signature is not verified.
"""
import base64
import binascii
import json
import logging
from typing import Any, Dict

from utils.exceptions import AuthError, AuthErrorKind
from .constants import CHATGPT_ACCOUNT_ID_CLAIM, JWT_CLAIM_PATH

logger = logging.getLogger(__name__)


def decode_jwt(token: str) -> Dict[str, Any]:
    """
    Decode the payload segment of a JWT without verification.

    Args:
        token: JWT access token

    Returns:
        Decoded JWT payload as dictionary

    Raises:
        AuthError: MALFORMED_TOKEN if the token does not have three segments
            or the payload is not base64url encoded JSON
    """
    parts = token.split(".")
    if len(parts) != 3:
        raise AuthError(
            AuthErrorKind.MALFORMED_TOKEN,
            detail=f"expected 3 segments, got {len(parts)}",
        )

    payload = parts[1]
    # JWT uses base64url without padding
    payload += "=" * (-len(payload) % 4)

    try:
        decoded = json.loads(base64.urlsafe_b64decode(payload).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise AuthError(AuthErrorKind.MALFORMED_TOKEN, detail=str(e)) from e

    if not isinstance(decoded, dict):
        raise AuthError(AuthErrorKind.MALFORMED_TOKEN, detail="payload is not a JSON object")
    return decoded


def extract_account_id(access_token: str) -> str:
    """
    Extract the ChatGPT account ID from a JWT access token.

    Looks at ``payload["https://api.openai.com/auth"]["chatgpt_account_id"]``
    first and falls back to the ``sub`` claim.

    Args:
        access_token: OAuth access token (JWT format)

    Returns:
        The account identifier

    Raises:
        AuthError: ACCOUNT_ID_MISSING if neither claim is present,
            MALFORMED_TOKEN if the token cannot be decoded
    """
    payload = decode_jwt(access_token)

    claims = payload.get(JWT_CLAIM_PATH)
    if isinstance(claims, dict):
        account_id = claims.get(CHATGPT_ACCOUNT_ID_CLAIM)
        if account_id:
            return str(account_id)

    subject = payload.get("sub")
    if subject:
        logger.debug("No chatgpt_account_id claim, using sub")
        return str(subject)

    raise AuthError(AuthErrorKind.ACCOUNT_ID_MISSING)
