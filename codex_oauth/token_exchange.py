"""
OpenAI OAuth token endpoint calls: authorization code exchange and refresh
"""
import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from settings import REQUEST_TIMEOUT
from utils.clock import now_ms
from utils.exceptions import AuthError, AuthErrorKind
from .constants import CLIENT_ID, EXPIRY_BUFFER_MS, REDIRECT_URI, TOKEN_URL
from .jwt_utils import extract_account_id
from .models import Credential

logger = logging.getLogger(__name__)


def is_token_expired(
    expires_at: int,
    buffer_ms: int = EXPIRY_BUFFER_MS,
    *,
    now: Optional[int] = None,
) -> bool:
    """Check whether a token expiring at ``expires_at`` must be refreshed.

    True once the current time reaches ``expires_at - buffer_ms``; the
    boundary instant itself counts as expired.
    """
    current = now_ms() if now is None else now
    return current >= expires_at - buffer_ms


async def _post_token_request(
    form: Dict[str, str],
    failure_kind: AuthErrorKind,
    client: Optional[httpx.AsyncClient],
) -> Dict[str, Any]:
    """POST a form-encoded request to the token endpoint and return the JSON body"""
    headers = {"Content-Type": "application/x-www-form-urlencoded"}

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as owned_client:
                response = await owned_client.post(TOKEN_URL, content=urlencode(form), headers=headers)
        else:
            response = await client.post(TOKEN_URL, content=urlencode(form), headers=headers)
    except httpx.HTTPError as e:
        logger.error(f"Token endpoint request failed: {e}")
        raise AuthError(failure_kind, detail=str(e)) from e

    if not response.is_success:
        logger.error(f"Token endpoint returned {response.status_code}: {response.text}")
        raise AuthError(failure_kind, detail=response.text)

    try:
        payload = response.json()
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse token endpoint response: {e}")
        raise AuthError(failure_kind, detail="invalid JSON in token response") from e

    if not isinstance(payload, dict) or not payload.get("access_token"):
        raise AuthError(failure_kind, detail="token response missing access_token")

    return payload


def _expires_at(payload: Dict[str, Any], failure_kind: AuthErrorKind) -> int:
    try:
        expires_in = float(payload["expires_in"])
    except (KeyError, TypeError, ValueError) as e:
        raise AuthError(failure_kind, detail="token response missing expires_in") from e
    return now_ms() + int(expires_in * 1000)


async def exchange_code(
    code: str,
    verifier: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> Credential:
    """
    Exchange an authorization code for access and refresh tokens.

    Args:
        code: Authorization code from the callback
        verifier: PKCE code verifier issued with the authorization URL
        client: Optional HTTP client (a short-lived one is created otherwise)

    Returns:
        Credential with absolute expiry and the ChatGPT account id

    Raises:
        AuthError: TOKEN_EXCHANGE_FAILED on a non-2xx answer or transport
            failure, ACCOUNT_ID_MISSING / MALFORMED_TOKEN if the access token
            does not identify an account
    """
    form = {
        "grant_type": "authorization_code",
        "client_id": CLIENT_ID,
        "code": code,
        "code_verifier": verifier,
        "redirect_uri": REDIRECT_URI,
    }
    payload = await _post_token_request(form, AuthErrorKind.TOKEN_EXCHANGE_FAILED, client)

    refresh_token = payload.get("refresh_token")
    if not refresh_token:
        raise AuthError(AuthErrorKind.TOKEN_EXCHANGE_FAILED, detail="token response missing refresh_token")

    access_token = payload["access_token"]
    credential = Credential(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_at=_expires_at(payload, AuthErrorKind.TOKEN_EXCHANGE_FAILED),
        account_id=extract_account_id(access_token),
    )
    logger.info("Exchanged authorization code for ChatGPT tokens")
    return credential


async def refresh(
    refresh_token: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> Credential:
    """
    Refresh an access token.

    The token endpoint may omit a new refresh token, in which case the
    one passed in is kept.

    Args:
        refresh_token: OAuth refresh token
        client: Optional HTTP client

    Returns:
        Replacement Credential

    Raises:
        AuthError: REFRESH_FAILED on a non-2xx answer or transport failure
    """
    form = {
        "grant_type": "refresh_token",
        "refresh_token": refresh_token,
        "client_id": CLIENT_ID,
    }
    payload = await _post_token_request(form, AuthErrorKind.REFRESH_FAILED, client)

    access_token = payload["access_token"]
    credential = Credential(
        access_token=access_token,
        refresh_token=payload.get("refresh_token") or refresh_token,
        expires_at=_expires_at(payload, AuthErrorKind.REFRESH_FAILED),
        account_id=extract_account_id(access_token),
    )
    logger.info("Successfully refreshed ChatGPT OAuth tokens")
    return credential
