"""
ChatGPT Codex Proxy - serves the Codex models over an OpenAI-compatible API.

Requests are authenticated with the ChatGPT subscription OAuth tokens and
rewritten for the Codex backend on the way out.
"""
from .server import ProxyServer
from .app import app

__version__ = "1.0.0"

__all__ = [
    'ProxyServer',
    'app',
]
