"""
OpenAI Codex provider facade.

Host-facing surface: login/logout, model listing and the configuration an
OpenAI-compatible SDK needs to talk to the Codex backend through the
ChatGPT subscription.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx

from settings import (
    CODEX_API_KEY_SENTINEL,
    CODEX_BASE_URL,
    INSTRUCTIONS_CACHE_DIR,
    OAUTH_TIMEOUT_SECONDS,
    TOKEN_FILE,
)
from codex_oauth import (
    AuthFlowRunner,
    FileSecretStorage,
    TokenStore,
    browser_login,
    build_authorization_url,
    exchange_code,
)
from instructions import InstructionCache
from models import list_models
from utils.exceptions import AuthError
from .codex_transport import create_codex_http_client

logger = logging.getLogger(__name__)


@dataclass
class AuthResult:
    success: bool
    error: Optional[str] = None


@dataclass
class SDKConfig:
    """What an OpenAI-compatible SDK needs: sentinel key, base URL, HTTP client"""
    api_key: str
    base_url: str
    http_client: httpx.AsyncClient


class CodexProvider:
    """ChatGPT subscription access to the Codex models"""

    provider_id = "openai-codex"
    name = "OpenAI Codex (ChatGPT)"
    description = "Access GPT-5.2 Codex and other models via your ChatGPT subscription"

    def __init__(
        self,
        token_store: TokenStore,
        instruction_cache: Optional[InstructionCache] = None,
        auth_flow: AuthFlowRunner = browser_login,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        oauth_client: Optional[httpx.AsyncClient] = None,
        auth_timeout: float = OAUTH_TIMEOUT_SECONDS,
    ):
        """
        Args:
            token_store: Credential store (call ``initialize`` before use)
            instruction_cache: Codex CLI instruction cache
            auth_flow: Opens the authorization URL and returns the code, or None
            transport: Network transport under the Codex transport (tests inject a mock)
            oauth_client: HTTP client for the token endpoint
            auth_timeout: Seconds the user has to complete the login
        """
        self.token_store = token_store
        self.instruction_cache = instruction_cache or InstructionCache()
        self._auth_flow = auth_flow
        self._transport = transport
        self._oauth_client = oauth_client
        self._auth_timeout = auth_timeout

    @classmethod
    def from_settings(cls, **kwargs: Any) -> "CodexProvider":
        """Provider backed by the configured secrets file and cache directory"""
        token_store = TokenStore(FileSecretStorage(Path(TOKEN_FILE)))
        instruction_cache = InstructionCache(Path(INSTRUCTIONS_CACHE_DIR))
        return cls(token_store, instruction_cache, **kwargs)

    async def initialize(self) -> None:
        await self.token_store.initialize()

    def is_authenticated(self) -> bool:
        return self.token_store.has_valid_token()

    async def authenticate(self) -> AuthResult:
        """
        Run the PKCE login. Never raises.

        Returns:
            AuthResult with success=False and a message on any failure
        """
        try:
            flow = build_authorization_url()
            await self.token_store.store_pending_verifier(flow.verifier)
            await self.token_store.store_pending_state(flow.state)

            logger.info("Starting OAuth flow...")
            code = await self._auth_flow(flow.url, flow.state, self._auth_timeout)

            if not code:
                return AuthResult(success=False, error="Authorization cancelled or timed out")

            verifier = await self.token_store.get_pending_verifier()
            if not verifier:
                return AuthResult(success=False, error="No pending authorization. Please try again.")

            credential = await exchange_code(code, verifier, client=self._oauth_client)
            await self.token_store.save_tokens(credential)

            logger.info("Codex authentication successful")
            return AuthResult(success=True)

        except AuthError as e:
            logger.error(f"Codex authentication error: {e.message}")
            return AuthResult(success=False, error=e.message)
        except (httpx.HTTPError, OSError) as e:
            logger.error(f"Codex authentication error: {e}")
            return AuthResult(success=False, error=str(e) or "Authentication failed")
        except Exception as e:
            logger.exception("Unexpected error during Codex authentication")
            return AuthResult(success=False, error=str(e) or e.__class__.__name__)
        finally:
            await self._discard_pending_authorization()

    async def _discard_pending_authorization(self) -> None:
        try:
            await self.token_store.clear_pending_state()
        except OSError as e:
            logger.error(f"Failed to clear pending authorization: {e}")

    async def logout(self) -> None:
        await self.token_store.clear_tokens()
        logger.info("Codex logout successful")

    def get_models(self) -> List[Dict[str, Any]]:
        """All Codex variants; every one streams and supports function calling"""
        return [model.to_model_listing() for model in list_models()]

    def create_http_client(self) -> httpx.AsyncClient:
        return create_codex_http_client(self.token_store, self.instruction_cache, self._transport)

    def get_sdk_config(self) -> SDKConfig:
        """
        Configuration for an OpenAI-compatible SDK, e.g.
        ``AsyncOpenAI(api_key=cfg.api_key, base_url=cfg.base_url, http_client=cfg.http_client)``.

        The API key is a placeholder; authentication happens in the transport.
        """
        return SDKConfig(
            api_key=CODEX_API_KEY_SENTINEL,
            base_url=CODEX_BASE_URL,
            http_client=self.create_http_client(),
        )
