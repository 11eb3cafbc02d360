"""
Latest openai/codex release tag discovery
"""
import logging
import re
from typing import Optional

import httpx

from utils.exceptions import CodexProxyError

logger = logging.getLogger(__name__)

GITHUB_API_RELEASES = "https://api.github.com/repos/openai/codex/releases/latest"
GITHUB_HTML_RELEASES = "https://github.com/openai/codex/releases/latest"

_TAG_IN_HTML = re.compile(r'/openai/codex/releases/tag/([^"]+)')


class InstructionFetchError(CodexProxyError):
    """Raised when the Codex prompt files cannot be resolved or downloaded"""

    def __init__(self, message: str):
        super().__init__(message, status_code=502)


def tag_from_release_url(url: str) -> Optional[str]:
    """Tag from a ``.../releases/tag/<tag>`` URL, or None"""
    if "/tag/" not in url:
        return None
    last = url.split("/tag/")[-1]
    if last and "/" not in last:
        return last
    return None


def tag_from_release_html(html: str) -> Optional[str]:
    match = _TAG_IN_HTML.search(html)
    return match.group(1) if match else None


async def get_latest_release_tag(client: httpx.AsyncClient) -> str:
    """
    Resolve the latest openai/codex release tag.

    The GitHub releases API is asked first; when it fails or has no
    ``tag_name`` the HTML ``releases/latest`` redirect is used instead.

    Args:
        client: HTTP client used for both lookups

    Returns:
        Release tag, e.g. ``rust-v0.77.0``

    Raises:
        InstructionFetchError: if neither source yields a tag
    """
    try:
        response = await client.get(GITHUB_API_RELEASES)
        if response.is_success:
            tag = response.json().get("tag_name")
            if tag:
                return tag
        logger.debug(f"GitHub releases API returned {response.status_code} without a tag")
    except (httpx.HTTPError, ValueError, AttributeError) as e:
        logger.debug(f"GitHub releases API lookup failed: {e}")

    try:
        html_response = await client.get(GITHUB_HTML_RELEASES, follow_redirects=True)
    except httpx.HTTPError as e:
        raise InstructionFetchError(f"Failed to fetch latest release: {e}") from e

    if not html_response.is_success:
        raise InstructionFetchError(f"Failed to fetch latest release: {html_response.status_code}")

    tag = tag_from_release_url(str(html_response.url)) or tag_from_release_html(html_response.text)
    if tag:
        return tag

    raise InstructionFetchError("Failed to determine latest release tag from GitHub")
