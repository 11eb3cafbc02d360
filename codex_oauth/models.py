"""Data models for Codex OAuth credentials"""

from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class Credential:
    """OAuth credential persisted under the ``codex_tokens`` secret key

    ``expires_at`` is an absolute wall-clock instant in epoch milliseconds.
    """
    access_token: str
    refresh_token: str
    expires_at: int
    account_id: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Credential":
        """Load from dictionary

        Raises:
            KeyError: if a required field is missing
            ValueError: if expires_at is not numeric
        """
        return cls(
            access_token=str(data["access_token"]),
            refresh_token=str(data["refresh_token"]),
            expires_at=int(data["expires_at"]),
            account_id=str(data["account_id"]),
        )
