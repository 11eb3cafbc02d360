"""
Shared provider instance for the endpoints.

Tests replace it through ``app.dependency_overrides[get_provider]``.
"""
from typing import Optional

from providers import CodexProvider

_provider: Optional[CodexProvider] = None


def get_provider() -> CodexProvider:
    global _provider
    if _provider is None:
        _provider = CodexProvider.from_settings()
    return _provider


def reset_provider() -> None:
    global _provider
    _provider = None
