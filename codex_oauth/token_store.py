"""
OAuth token lifecycle management

The store owns the single in-memory Credential, persists it through a
SecretStorage and refreshes it transparently. Concurrent callers that find
the token expired share one refresh task, so only one refresh request is
ever in flight.
"""
import asyncio
import json
import logging
from typing import Awaitable, Callable, Optional

from utils.clock import now_ms
from utils.exceptions import AuthError, AuthErrorKind
from .constants import (
    EXPIRY_BUFFER_MS,
    PENDING_STATE_KEY,
    PENDING_VERIFIER_KEY,
    TOKENS_KEY,
)
from .models import Credential
from .storage import SecretStorage
from .token_exchange import is_token_expired, refresh as refresh_tokens

logger = logging.getLogger(__name__)

RefreshFunction = Callable[[str], Awaitable[Credential]]


class TokenStore:
    """Manages OAuth credential storage and refresh"""

    def __init__(
        self,
        storage: SecretStorage,
        refresh_fn: Optional[RefreshFunction] = None,
        clock: Callable[[], int] = now_ms,
    ):
        """
        Initialize token store.

        Args:
            storage: Secret storage used for the credential and pending PKCE values
            refresh_fn: Coroutine function exchanging a refresh token for a new
                Credential (defaults to the OpenAI token endpoint)
            clock: Returns the current time in epoch milliseconds
        """
        self._storage = storage
        self._refresh_fn: RefreshFunction = refresh_fn or refresh_tokens
        self._clock = clock
        self._tokens: Optional[Credential] = None
        self._refresh_task: Optional["asyncio.Task[str]"] = None

    async def initialize(self) -> None:
        """Load a persisted credential. Failures are logged, never raised."""
        try:
            raw = await self._storage.get(TOKENS_KEY)
            if raw:
                self._tokens = Credential.from_dict(json.loads(raw))
                logger.debug(f"Loaded Codex credential for account {self._tokens.account_id[:8]}...")
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Failed to load stored Codex credential: {e}")
            self._tokens = None

    def has_valid_token(self) -> bool:
        """True when a credential is loaded and it can be refreshed"""
        return self._tokens is not None and bool(self._tokens.refresh_token)

    def get_tokens(self) -> Optional[Credential]:
        return self._tokens

    def get_account_id(self) -> Optional[str]:
        return self._tokens.account_id if self._tokens else None

    def is_refreshing(self) -> bool:
        return self._refresh_task is not None

    async def save_tokens(self, credential: Credential) -> None:
        """Replace the in-memory credential and persist it"""
        self._tokens = credential
        await self._storage.set(TOKENS_KEY, json.dumps(credential.to_dict()))
        logger.debug("Saved Codex credential")

    async def clear_tokens(self) -> None:
        """Forget the credential and any pending authorization"""
        self._tokens = None
        await self._storage.delete(TOKENS_KEY)
        await self._storage.delete(PENDING_VERIFIER_KEY)
        await self._storage.delete(PENDING_STATE_KEY)
        logger.info("Cleared Codex credential")

    async def get_valid_access_token(self) -> str:
        """
        Return an access token that is valid for at least the expiry buffer.

        Returns:
            Bearer access token

        Raises:
            AuthError: NOT_AUTHENTICATED if no credential is loaded,
                REFRESH_FAILED if the token had to be refreshed and could not be
                (the credential is cleared in that case)
        """
        if self._tokens is None:
            raise AuthError(AuthErrorKind.NOT_AUTHENTICATED)

        if not is_token_expired(self._tokens.expires_at, EXPIRY_BUFFER_MS, now=self._clock()):
            return self._tokens.access_token

        if self._refresh_task is None:
            logger.info("Codex access token expired, refreshing...")
            self._refresh_task = asyncio.ensure_future(self._run_refresh())
        else:
            logger.debug("Joining in-flight token refresh")

        # Shield so one cancelled caller does not cancel the shared refresh
        return await asyncio.shield(self._refresh_task)

    async def _run_refresh(self) -> str:
        try:
            tokens = self._tokens
            if tokens is None:
                raise AuthError(AuthErrorKind.NOT_AUTHENTICATED)

            credential = await self._refresh_fn(tokens.refresh_token)
            await self.save_tokens(credential)
            return credential.access_token
        except Exception as e:
            logger.error(f"Token refresh failed: {e}")
            await self.clear_tokens()
            if isinstance(e, AuthError) and e.kind == AuthErrorKind.REFRESH_FAILED:
                raise
            raise AuthError(AuthErrorKind.REFRESH_FAILED, detail=str(e)) from e
        finally:
            self._refresh_task = None

    async def store_pending_verifier(self, verifier: str) -> None:
        await self._storage.set(PENDING_VERIFIER_KEY, verifier)

    async def get_pending_verifier(self) -> Optional[str]:
        """Return the pending PKCE verifier and delete it (one-shot)"""
        verifier = await self._storage.get(PENDING_VERIFIER_KEY)
        if verifier is not None:
            await self._storage.delete(PENDING_VERIFIER_KEY)
        return verifier

    async def store_pending_state(self, state: str) -> None:
        await self._storage.set(PENDING_STATE_KEY, state)

    async def get_pending_state(self) -> Optional[str]:
        return await self._storage.get(PENDING_STATE_KEY)

    async def clear_pending_state(self) -> None:
        """Drop both pending authorization values"""
        await self._storage.delete(PENDING_VERIFIER_KEY)
        await self._storage.delete(PENDING_STATE_KEY)
