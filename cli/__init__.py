"""CLI package for the ChatGPT Codex Proxy

Subcommands for logging in, inspecting tokens, listing models and running
the proxy server.
"""

from cli.main import main

__all__ = [
    "main",
]
