"""
Exception classes shared across the proxy.

AuthError covers the OAuth lifecycle, UpstreamError wraps non-2xx answers
from the Codex backend and TransformError signals a request body that could
not be rewritten.
"""
from enum import Enum
from typing import Any, Dict, Optional


class CodexProxyError(Exception):
    """Base exception class for all proxy errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        *,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.status_code = status_code or 500

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": {
                "message": self.message,
                "type": self.__class__.__name__,
                "details": self.details,
            }
        }


class AuthErrorKind(str, Enum):
    NOT_AUTHENTICATED = "not_authenticated"
    TOKEN_EXCHANGE_FAILED = "token_exchange_failed"
    REFRESH_FAILED = "refresh_failed"
    ACCOUNT_ID_MISSING = "account_id_missing"
    MALFORMED_TOKEN = "malformed_token"


_AUTH_MESSAGES = {
    AuthErrorKind.NOT_AUTHENTICATED: "Not authenticated with ChatGPT. Please log in.",
    AuthErrorKind.TOKEN_EXCHANGE_FAILED: "Token exchange failed",
    AuthErrorKind.REFRESH_FAILED: "Token refresh failed. Please log in again.",
    AuthErrorKind.ACCOUNT_ID_MISSING: "Could not determine ChatGPT account id from access token",
    AuthErrorKind.MALFORMED_TOKEN: "Malformed access token",
}


class AuthError(CodexProxyError):
    """Raised for any failure in the OAuth token lifecycle."""

    def __init__(
        self,
        kind: AuthErrorKind,
        message: Optional[str] = None,
        *,
        detail: Optional[str] = None,
    ):
        text = message or _AUTH_MESSAGES[kind]
        if detail:
            text = f"{text}: {detail}"
        super().__init__(text, {"kind": kind.value}, status_code=401)
        self.kind = kind
        self.detail = detail


class UpstreamError(CodexProxyError):
    """Raised when the Codex backend answers with a non-2xx status."""

    def __init__(self, status: int, body: str, message: Optional[str] = None):
        super().__init__(
            message or f"Codex API error ({status}): {body}",
            {"status": status},
            status_code=status,
        )
        self.status = status
        self.body = body


class TransformError(CodexProxyError):
    """Raised when an outgoing request body cannot be parsed or rewritten."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, status_code=400)
