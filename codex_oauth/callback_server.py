"""
Local OAuth callback server and the default browser login flow
"""
import asyncio
import logging
import webbrowser
from html import escape
from typing import Awaitable, Callable, NamedTuple, Optional

from aiohttp import web

from settings import OPEN_BROWSER
from .constants import OAUTH_CALLBACK_HOST, OAUTH_CALLBACK_PATH, OAUTH_CALLBACK_PORT

logger = logging.getLogger(__name__)

# (authorization_url, expected_state, timeout_seconds) -> authorization code or None
AuthFlowRunner = Callable[[str, str, float], Awaitable[Optional[str]]]

SUCCESS_PAGE = """
<html>
    <body>
        <h1>Authentication Successful!</h1>
        <p>You can now close this window and return to the terminal.</p>
        <script>
            setTimeout(function() {
                window.close();
            }, 2000);
        </script>
    </body>
</html>
"""


class CallbackResult(NamedTuple):
    """OAuth callback result"""
    code: str
    state: str


class OAuthCallbackServer:
    """Local HTTP server receiving the OAuth redirect"""

    def __init__(
        self,
        expected_state: str,
        host: str = OAUTH_CALLBACK_HOST,
        port: int = OAUTH_CALLBACK_PORT,
    ):
        self.expected_state = expected_state
        self.host = host
        self.port = port
        self.result: Optional[CallbackResult] = None
        self.error: Optional[str] = None
        self.app = web.Application()
        self.runner: Optional[web.AppRunner] = None
        self._event = asyncio.Event()

        self.app.router.add_get(OAUTH_CALLBACK_PATH, self._handle_callback)

    async def _handle_callback(self, request: web.Request) -> web.Response:
        """Handle OAuth callback request"""
        code = request.query.get("code")
        state = request.query.get("state")
        error = request.query.get("error")
        error_description = request.query.get("error_description")

        if error:
            logger.error(f"OAuth error: {error} {error_description or ''}".rstrip())
            self.error = error_description or error
            self._event.set()
            return web.Response(
                text=f"""
                <html>
                    <body>
                        <h1>Authentication Failed</h1>
                        <p>Error: {escape(error)}</p>
                        <p>{escape(error_description or '')}</p>
                        <p>You can close this window.</p>
                    </body>
                </html>
                """,
                content_type="text/html",
                status=400,
            )

        if not code or not state:
            return web.Response(text="Missing code or state parameter", status=400)

        # CSRF protection
        if state != self.expected_state:
            logger.warning("OAuth callback state mismatch, ignoring request")
            return web.Response(text="Invalid state parameter", status=400)

        self.result = CallbackResult(code=code, state=state)
        self._event.set()

        return web.Response(text=SUCCESS_PAGE, content_type="text/html")

    async def start(self) -> None:
        """Start the callback server"""
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()

        site = web.TCPSite(self.runner, host=self.host, port=self.port)
        await site.start()
        logger.info(f"OAuth callback server listening on {self.host}:{self.port}")

    async def wait_for_callback(self, timeout: float = 300) -> Optional[CallbackResult]:
        """
        Wait for OAuth callback.

        Args:
            timeout: Maximum time to wait in seconds (default 5 minutes)

        Returns:
            CallbackResult if successful, None on timeout or provider error
        """
        try:
            await asyncio.wait_for(self._event.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"OAuth callback timeout after {timeout} seconds")
            return None
        return self.result

    async def stop(self) -> None:
        """Stop the callback server"""
        if self.runner:
            await self.runner.cleanup()
            self.runner = None


async def browser_login(url: str, expected_state: str, timeout: float = 300) -> Optional[str]:
    """
    Default host flow: open the authorization URL and wait for the redirect.

    Args:
        url: Authorization URL to open
        expected_state: State value the redirect must carry
        timeout: Seconds to wait for the user

    Returns:
        The authorization code, or None if the user did not finish in time
    """
    server = OAuthCallbackServer(expected_state)
    await server.start()
    try:
        logger.info(f"Open this URL to sign in with ChatGPT: {url}")
        if OPEN_BROWSER and not webbrowser.open(url):
            logger.warning("Could not open a browser automatically; open the URL above manually")
        result = await server.wait_for_callback(timeout=timeout)
        return result.code if result else None
    finally:
        await server.stop()
