"""
Authentication status endpoint.
"""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from codex_oauth import is_token_expired
from providers import CodexProvider
from utils.clock import now_ms
from ..dependencies import get_provider

router = APIRouter()


class AuthStatus(BaseModel):
    """Token status without secrets"""
    authenticated: bool
    has_tokens: bool
    is_expired: bool
    is_refreshing: bool
    account_id: Optional[str] = None
    expires_at: Optional[int] = None
    expires_in_seconds: Optional[int] = None


@router.get("/auth/status", response_model=AuthStatus)
async def auth_status(provider: CodexProvider = Depends(get_provider)):
    """Get token status without exposing secrets"""
    credential = provider.token_store.get_tokens()
    if credential is None:
        return AuthStatus(authenticated=False, has_tokens=False, is_expired=False, is_refreshing=False)

    return AuthStatus(
        authenticated=provider.is_authenticated(),
        has_tokens=True,
        is_expired=is_token_expired(credential.expires_at),
        is_refreshing=provider.token_store.is_refreshing(),
        account_id=credential.account_id,
        expires_at=credential.expires_at,
        expires_in_seconds=max(0, (credential.expires_at - now_ms()) // 1000),
    )
