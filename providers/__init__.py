"""
Codex provider integration.

``CodexProvider`` is the host-facing facade; ``CodexTransport`` performs the
per-request OAuth and body rewriting; ``CodexClient`` is a direct text-stream
client for callers that do not use an OpenAI SDK.
"""
from providers.codex_client import ChatRequest, CodexClient
from providers.codex_provider import AuthResult, CodexProvider, SDKConfig
from providers.codex_transport import CodexTransport, create_codex_http_client

__all__ = [
    'ChatRequest',
    'CodexClient',
    'AuthResult',
    'CodexProvider',
    'SDKConfig',
    'CodexTransport',
    'create_codex_http_client',
]
