"""Codex CLI instruction fetching and caching"""

from .cache import (
    CACHE_FILES,
    MODEL_FAMILIES,
    PROMPT_FILES,
    CacheMetadata,
    InstructionCache,
    get_model_family,
)
from .releases import InstructionFetchError, get_latest_release_tag

__all__ = [
    "CACHE_FILES",
    "MODEL_FAMILIES",
    "PROMPT_FILES",
    "CacheMetadata",
    "InstructionCache",
    "get_model_family",
    "InstructionFetchError",
    "get_latest_release_tag",
]
