from pathlib import Path
from config.loader import get_config_loader

# Get the config loader instance
config = get_config_loader()

# Server configuration
PORT = config.get("PORT", 8082)
LOG_LEVEL = config.get("LOG_LEVEL", "info")
BIND_ADDRESS = config.get("BIND_ADDRESS", "127.0.0.1")

# Timeout configuration
# Connection timeout: Time to establish TCP connection
CONNECT_TIMEOUT = config.get("CONNECT_TIMEOUT", 10.0)
# Read timeout: Time between receiving data chunks, important for detecting stalled streams
READ_TIMEOUT = config.get("READ_TIMEOUT", 60.0)
# Request timeout: Total timeout for non-streaming requests
REQUEST_TIMEOUT = config.get("REQUEST_TIMEOUT", 120.0)
# Stream timeout: Total timeout for streaming requests (reasoning models can take longer)
STREAM_TIMEOUT = config.get("STREAM_TIMEOUT", 600.0)

# Codex backend (hardcoded - not user configurable)
# The SDK-side base URL; the transport rewrites /responses to /codex/responses
CODEX_BASE_URL = "https://chatgpt.com/backend-api"
# Placeholder API key handed to SDK clients; the transport replaces it with the OAuth bearer
CODEX_API_KEY_SENTINEL = "chatgpt-oauth"

# Request shaping
DEFAULT_TEXT_VERBOSITY = config.get("DEFAULT_TEXT_VERBOSITY", "medium")
DEFAULT_REASONING_SUMMARY = config.get("DEFAULT_REASONING_SUMMARY", "auto")

# OAuth login flow
OAUTH_TIMEOUT_SECONDS = config.get("OAUTH_TIMEOUT_SECONDS", 300)
OPEN_BROWSER = config.get("OPEN_BROWSER", True)

# Secret storage (credential + pending PKCE values)
TOKEN_FILE = config.get("TOKEN_FILE", str(Path.home() / ".codex-proxy" / "secrets.json"))

# Codex CLI instruction cache
INSTRUCTIONS_CACHE_DIR = config.get(
    "INSTRUCTIONS_CACHE_DIR", str(Path.home() / ".codex-proxy" / "cache" / "codex")
)
INSTRUCTIONS_CACHE_TTL_SECONDS = config.get("INSTRUCTIONS_CACHE_TTL_SECONDS", 900)
