"""Configuration loader for the Codex subscription proxy

Values are resolved in this order:
1. CODEX_PROXY_<NAME> environment variable
2. <NAME> environment variable
3. .env file (loaded into the environment without overriding it)
4. Hardcoded defaults
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

TRUE_VALUES = ('true', '1', 'yes', 'on')


def _expand_home(value: Any) -> Any:
    if isinstance(value, str) and value.startswith("~/"):
        return str(Path(value).expanduser())
    return value


def _coerce(name: str, raw: str, default: Any) -> Any:
    """Convert a raw environment string to the type of ``default``"""
    # bool is a subclass of int, so it goes first
    if isinstance(default, bool):
        return raw.strip().lower() in TRUE_VALUES

    for number_type in (int, float):
        if isinstance(default, number_type):
            try:
                return number_type(raw)
            except ValueError:
                logger.warning(f"Failed to parse {name}={raw} as {number_type.__name__}, using default: {default}")
                return default

    return _expand_home(raw)


class ConfigLoader:
    """Resolves settings from the environment and an optional .env file"""

    def __init__(self, env_path: Optional[str] = None, prefix: str = "CODEX_PROXY_"):
        """
        Args:
            env_path: Path to the .env file (default: ./.env)
            prefix: Namespace prefix checked before the bare variable name
        """
        self.env_path = Path(env_path) if env_path else Path(".env")
        self.prefix = prefix

        if self.env_path.exists():
            load_dotenv(dotenv_path=self.env_path)
            logger.debug(f"Loaded environment variables from {self.env_path}")
        else:
            logger.debug(f"No .env file at {self.env_path}")

    def _lookup(self, env_var: str) -> Optional[str]:
        value = os.getenv(f"{self.prefix}{env_var}")
        if value is None:
            value = os.getenv(env_var)
        return value

    def get(self, env_var: str, default: Any) -> Any:
        """Configuration value for ``env_var``, coerced to the type of ``default``"""
        raw = self._lookup(env_var)
        if raw is None:
            return _expand_home(default)
        return _coerce(env_var, raw, default)


_config_loader: Optional[ConfigLoader] = None


def get_config_loader() -> ConfigLoader:
    """Get or create the global ConfigLoader instance"""
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader


def reset_config_loader() -> None:
    """Drop the cached loader so the next call re-reads the environment"""
    global _config_loader
    _config_loader = None
