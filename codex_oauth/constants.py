"""
OpenAI OAuth constants used by the Codex CLI
"""

# OAuth Configuration
CLIENT_ID = "app_EMoamEEZ73f0CkXaXp7hrann"
AUTHORIZE_URL = "https://auth.openai.com/oauth/authorize"
TOKEN_URL = "https://auth.openai.com/oauth/token"
REDIRECT_URI = "http://localhost:1455/auth/callback"
SCOPE = "openid profile email offline_access"

# Vendor flags the authorize endpoint expects from the Codex CLI
CODEX_CLI_SIMPLIFIED_FLOW = "true"
ORIGINATOR = "codex_cli_rs"

# JWT claim path for the ChatGPT account ID
JWT_CLAIM_PATH = "https://api.openai.com/auth"
CHATGPT_ACCOUNT_ID_CLAIM = "chatgpt_account_id"

# OAuth callback server
OAUTH_CALLBACK_HOST = "localhost"
OAUTH_CALLBACK_PORT = 1455
OAUTH_CALLBACK_PATH = "/auth/callback"

# Refresh this long before the access token actually expires
EXPIRY_BUFFER_MS = 5 * 60 * 1000

# Secret storage keys
TOKENS_KEY = "codex_tokens"
PENDING_VERIFIER_KEY = "pending_verifier"
PENDING_STATE_KEY = "pending_state"
