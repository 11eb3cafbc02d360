"""Status display functionality for CLI"""

from datetime import datetime
from typing import Optional, Tuple

from rich.table import Table

from codex_oauth import Credential, is_token_expired
from utils.clock import now_ms


def get_auth_status(credential: Optional[Credential], now: Optional[int] = None) -> Tuple[str, str]:
    """
    Get authentication status and expiry info

    Args:
        credential: Stored credential, if any
        now: Current time in epoch milliseconds (defaults to the wall clock)

    Returns:
        Tuple of (status, detail_message)
    """
    if credential is None:
        return "NO AUTH", "No tokens available"

    now = now_ms() if now is None else now
    remaining = (credential.expires_at - now) // 1000

    if remaining <= 0:
        return "EXPIRED", "Token expired (will refresh on next request)"

    hours = remaining // 3600
    minutes = (remaining % 3600) // 60
    time_str = f"{hours}h {minutes}m" if hours > 0 else f"{minutes}m"

    if is_token_expired(credential.expires_at, now=now):
        return "REFRESH DUE", f"Expires in {time_str}"
    return "VALID", f"Expires in {time_str}"


def show_token_status(credential: Optional[Credential], token_file: str, console):
    """
    Display detailed token status

    Args:
        credential: Stored credential, if any
        token_file: Where the credential is persisted
        console: Rich console for output
    """
    status, detail = get_auth_status(credential)

    table = Table(title="Token Status Details")
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    table.add_row("Status", status)
    table.add_row("Detail", detail)

    if credential is not None:
        table.add_row("Account", f"{credential.account_id[:8]}...")
        expires_dt = datetime.fromtimestamp(credential.expires_at / 1000)
        table.add_row("Expires At", expires_dt.isoformat(timespec="seconds"))

    table.add_row("Token File", token_file)

    console.print(table)
