"""HTTP Request Headers for the Codex backend

These values make requests look like they come from the official Codex CLI
"""

# Header names
ACCOUNT_ID_HEADER = "chatgpt-account-id"
BETA_HEADER = "OpenAI-Beta"
ORIGINATOR_HEADER = "originator"
CONVERSATION_ID_HEADER = "conversation_id"
SESSION_ID_HEADER = "session_id"

# Header values
RESPONSES_BETA = "responses=experimental"
CODEX_ORIGINATOR = "codex_cli_rs"
EVENT_STREAM = "text/event-stream"
EVENT_STREAM_CONTENT_TYPE = "text/event-stream; charset=utf-8"
JSON_CONTENT_TYPE = "application/json; charset=utf-8"

# Client supplied credentials that must never reach the backend
STRIPPED_HEADERS = ("x-api-key",)
