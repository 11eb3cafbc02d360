"""
Codex CLI system prompt cache

The Codex backend expects the same ``instructions`` the official CLI sends.
They are downloaded from the openai/codex repository at the latest release
tag and cached on disk per model family, revalidated with ETags at most
once per TTL window.
"""
import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Callable, Dict, Optional

import httpx

from settings import CONNECT_TIMEOUT, INSTRUCTIONS_CACHE_DIR, INSTRUCTIONS_CACHE_TTL_SECONDS, REQUEST_TIMEOUT
from utils.clock import now_ms
from .releases import InstructionFetchError, get_latest_release_tag

logger = logging.getLogger(__name__)

PROMPT_URL_TEMPLATE = "https://raw.githubusercontent.com/openai/codex/{tag}/codex-rs/core/{prompt_file}"

MODEL_FAMILIES = ("gpt-5.2-codex", "codex-max", "codex", "gpt-5.2", "gpt-5.1")

PROMPT_FILES: Dict[str, str] = {
    "gpt-5.2-codex": "gpt-5.2-codex_prompt.md",
    "codex-max": "gpt-5.1-codex-max_prompt.md",
    "codex": "gpt_5_codex_prompt.md",
    "gpt-5.2": "gpt_5_2_prompt.md",
    "gpt-5.1": "gpt_5_1_prompt.md",
}

CACHE_FILES: Dict[str, str] = {
    "gpt-5.2-codex": "gpt-5.2-codex-instructions.md",
    "codex-max": "codex-max-instructions.md",
    "codex": "codex-instructions.md",
    "gpt-5.2": "gpt-5.2-instructions.md",
    "gpt-5.1": "gpt-5.1-instructions.md",
}


def get_model_family(normalized_model: str) -> str:
    """Classify a backend model name into a prompt family.

    More specific patterns are checked first.
    """
    if "gpt-5.2-codex" in normalized_model or "gpt 5.2 codex" in normalized_model:
        return "gpt-5.2-codex"
    if "codex-max" in normalized_model:
        return "codex-max"
    if "codex" in normalized_model:
        return "codex"
    if "gpt-5.2" in normalized_model:
        return "gpt-5.2"
    return "gpt-5.1"


@dataclass
class CacheMetadata:
    etag: Optional[str]
    tag: Optional[str]
    last_checked: int
    url: str

    def to_json(self) -> str:
        data = asdict(self)
        # On-disk key shared with other Codex tooling caches
        data["lastChecked"] = data.pop("last_checked")
        return json.dumps(data)

    @classmethod
    def from_json(cls, raw: str) -> "CacheMetadata":
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(f"Instruction cache metadata must be an object, got {type(data).__name__}")
        try:
            last_checked = int(data.get("lastChecked") or 0)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid lastChecked in instruction cache metadata: {e}") from e
        return cls(
            etag=data.get("etag"),
            tag=data.get("tag"),
            last_checked=last_checked,
            url=data.get("url", ""),
        )


class InstructionCache:
    """Per-family instruction files with ETag revalidation"""

    def __init__(
        self,
        cache_dir: Optional[Path] = None,
        client: Optional[httpx.AsyncClient] = None,
        ttl_seconds: float = INSTRUCTIONS_CACHE_TTL_SECONDS,
        clock: Callable[[], int] = now_ms,
    ):
        """
        Args:
            cache_dir: Directory holding the cached prompt and metadata files
            client: HTTP client for GitHub; a short-lived client is used if omitted
            ttl_seconds: Skip the network entirely when checked more recently than this
            clock: Returns the current time in epoch milliseconds
        """
        self.cache_dir = Path(cache_dir or INSTRUCTIONS_CACHE_DIR)
        self._client = client
        self.ttl_ms = int(ttl_seconds * 1000)
        self._clock = clock

    def cache_file(self, model_family: str) -> Path:
        return self.cache_dir / CACHE_FILES[model_family]

    def meta_file(self, model_family: str) -> Path:
        return self.cache_dir / CACHE_FILES[model_family].replace(".md", "-meta.json")

    def _read_metadata(self, model_family: str) -> Optional[CacheMetadata]:
        meta_file = self.meta_file(model_family)
        if not meta_file.exists():
            return None
        return CacheMetadata.from_json(meta_file.read_text(encoding="utf-8"))

    def _write_metadata(self, model_family: str, metadata: CacheMetadata) -> None:
        self.meta_file(model_family).write_text(metadata.to_json(), encoding="utf-8")

    async def get_instructions(self, model_family: str) -> str:
        """
        Return the Codex prompt for a model family. Never raises.

        Falls back to the stale cached copy, then to an empty string, when
        GitHub cannot be reached.
        """
        if model_family not in PROMPT_FILES:
            logger.warning(f"Unknown model family '{model_family}', using gpt-5.1 instructions")
            model_family = "gpt-5.1"

        cache_file = self.cache_file(model_family)
        try:
            if self._client is not None:
                return await self._fetch(model_family, self._client)
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(REQUEST_TIMEOUT, connect=CONNECT_TIMEOUT)
            ) as client:
                return await self._fetch(model_family, client)
        except (httpx.HTTPError, InstructionFetchError, OSError, ValueError) as e:
            logger.error(f"Failed to fetch {model_family} instructions: {e}")

            if cache_file.exists():
                logger.warning(f"Using cached {model_family} instructions")
                try:
                    return cache_file.read_text(encoding="utf-8")
                except OSError as read_error:
                    logger.error(f"Failed to read cached {model_family} instructions: {read_error}")

            logger.error(f"No cached instructions available for {model_family}")
            return ""

    async def get_instructions_for_model(self, normalized_model: str) -> str:
        return await self.get_instructions(get_model_family(normalized_model))

    async def _fetch(self, model_family: str, client: httpx.AsyncClient) -> str:
        cache_file = self.cache_file(model_family)
        metadata = self._read_metadata(model_family)

        # Rate limit protection: a recent check is trusted without any network call
        if metadata and self._clock() - metadata.last_checked < self.ttl_ms and cache_file.exists():
            return cache_file.read_text(encoding="utf-8")

        latest_tag = await get_latest_release_tag(client)
        url = PROMPT_URL_TEMPLATE.format(tag=latest_tag, prompt_file=PROMPT_FILES[model_family])

        # A new release invalidates the ETag
        etag = metadata.etag if metadata and metadata.tag == latest_tag else None

        headers = {"If-None-Match": etag} if etag else {}
        response = await client.get(url, headers=headers)

        if response.status_code == 304 and cache_file.exists():
            self._write_metadata(
                model_family,
                CacheMetadata(etag=etag, tag=latest_tag, last_checked=self._clock(), url=url),
            )
            logger.debug(f"{model_family} instructions not modified ({latest_tag})")
            return cache_file.read_text(encoding="utf-8")

        if response.is_success:
            instructions = response.text
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            cache_file.write_text(instructions, encoding="utf-8")
            self._write_metadata(
                model_family,
                CacheMetadata(
                    etag=response.headers.get("etag"),
                    tag=latest_tag,
                    last_checked=self._clock(),
                    url=url,
                ),
            )
            logger.info(f"Fetched {model_family} instructions from {latest_tag}")
            return instructions

        raise InstructionFetchError(f"HTTP {response.status_code} fetching {url}")
