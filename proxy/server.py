"""
ProxyServer class for CLI control of the FastAPI application.
"""
import logging
from typing import Optional

import uvicorn

from settings import PORT, LOG_LEVEL, BIND_ADDRESS
from .app import app
from .logging_utils import configure_debug_logging

logger = logging.getLogger(__name__)


class ProxyServer:
    """Runs the proxy app under uvicorn"""

    def __init__(self, debug: bool = False, bind_address: Optional[str] = None, port: Optional[int] = None):
        self.server: Optional[uvicorn.Server] = None
        self.debug = debug
        self.bind_address = bind_address or BIND_ADDRESS
        self.port = port or PORT

        if debug:
            log_path = configure_debug_logging()
            logger.info(f"Debug logging enabled - appending to {log_path}")

    @property
    def base_url(self) -> str:
        return f"http://{self.bind_address}:{self.port}"

    def run(self):
        """Run the proxy server (blocking)"""
        logger.info(f"Starting ChatGPT Codex Proxy on {self.base_url}")
        logger.info("Endpoints: /v1/responses, /v1/models, /auth/status, /health")
        config = uvicorn.Config(
            app,
            host=self.bind_address,
            port=self.port,
            log_level="debug" if self.debug else LOG_LEVEL,
            access_log=False,  # the request middleware logs instead
        )
        self.server = uvicorn.Server(config)
        self.server.run()

    def stop(self):
        """Ask a running server to exit"""
        if self.server:
            self.server.should_exit = True
