"""Configuration management package for the Codex subscription proxy"""

from .loader import ConfigLoader, get_config_loader, reset_config_loader

__all__ = [
    "ConfigLoader",
    "get_config_loader",
    "reset_config_loader",
]
