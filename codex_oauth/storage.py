"""Secret storage backends for Codex OAuth values"""

import json
import logging
from pathlib import Path
from typing import Dict, Optional, Protocol


logger = logging.getLogger(__name__)


class SecretStorage(Protocol):
    """String key/value secret store supplied by the host"""

    async def get(self, key: str) -> Optional[str]:
        ...

    async def set(self, key: str, value: str) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...


class MemorySecretStorage:
    """Process-local secret store, used by tests and ephemeral sessions"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    async def set(self, key: str, value: str) -> None:
        self._values[key] = value

    async def delete(self, key: str) -> None:
        self._values.pop(key, None)


class FileSecretStorage:
    """Persists secrets as one JSON object in a user-only readable file"""

    def __init__(self, secrets_file: Optional[Path] = None):
        """Initialize file storage

        Args:
            secrets_file: Path to the secrets file (default: ~/.codex-proxy/secrets.json)
        """
        if secrets_file is None:
            secrets_file = Path.home() / ".codex-proxy" / "secrets.json"

        self.secrets_file = Path(secrets_file)

    def _ensure_directory(self) -> None:
        """Ensure storage directory exists"""
        self.secrets_file.parent.mkdir(parents=True, exist_ok=True)
        try:
            self.secrets_file.parent.chmod(0o700)
        except OSError as e:
            logger.debug(f"Could not restrict permissions on {self.secrets_file.parent}: {e}")

    def _read_all(self) -> Dict[str, str]:
        if not self.secrets_file.exists():
            return {}

        try:
            data = json.loads(self.secrets_file.read_text())
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"Failed to read secrets from {self.secrets_file}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.error(f"Ignoring malformed secrets file {self.secrets_file}")
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _write_all(self, values: Dict[str, str]) -> None:
        self._ensure_directory()
        tmp_file = self.secrets_file.with_suffix(".tmp")
        tmp_file.write_text(json.dumps(values, indent=2))
        # Restrict before the rename so the secrets are never world readable
        tmp_file.chmod(0o600)
        tmp_file.replace(self.secrets_file)

    async def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    async def set(self, key: str, value: str) -> None:
        values = self._read_all()
        values[key] = value
        self._write_all(values)
        logger.debug(f"Stored secret '{key}' in {self.secrets_file}")

    async def delete(self, key: str) -> None:
        values = self._read_all()
        if key not in values:
            return
        del values[key]
        if values:
            self._write_all(values)
        elif self.secrets_file.exists():
            self.secrets_file.unlink()
        logger.debug(f"Deleted secret '{key}' from {self.secrets_file}")
