"""Shared utilities package for the Codex subscription proxy"""

from .exceptions import (
    AuthError,
    AuthErrorKind,
    CodexProxyError,
    TransformError,
    UpstreamError,
)
from .clock import now_ms

__all__ = [
    "AuthError",
    "AuthErrorKind",
    "CodexProxyError",
    "TransformError",
    "UpstreamError",
    "now_ms",
]
