"""Image URL helpers shared by the delta reducer."""
from __future__ import annotations

import re
from typing import Any, List, Optional, Tuple

from ..base.models import ContentPart
from ..config.defaults import DEFAULT_IMAGE_MIME

_WHITESPACE = re.compile(r"\s+")
_DATA_URL_MIME = re.compile(r"^data:([^;]+);base64,", re.IGNORECASE)
_MARKDOWN_IMAGE = re.compile(r"!\[[^\]]*]\((data:image/[^)]+|https?://[^)]+)\)")


def normalize_image_url(raw: Any) -> Optional[str]:
    """Trim ``raw``; data-URL images also lose any internal whitespace.

    Returns ``None`` for non-strings and blank input.
    """
    if not isinstance(raw, str):
        return None
    url = raw.strip()
    if not url:
        return None
    if url.startswith("data:image/"):
        url = _WHITESPACE.sub("", url)
    return url


def parse_mime(url: str) -> str:
    match = _DATA_URL_MIME.match(url)
    return match.group(1) if match else DEFAULT_IMAGE_MIME


def image_part(raw: Any) -> Optional[ContentPart]:
    """Build a normalized image :class:`ContentPart`, or ``None`` if ``raw`` is blank."""
    url = normalize_image_url(raw)
    if url is None:
        return None
    return ContentPart.image_part(url, parse_mime(url))


def image_url_of(item: Any) -> Any:
    """Return the URL of an ``image_url`` entry in either of its shapes.

    Both ``{"image_url": {"url": ...}}`` and ``{"image_url": "..."}`` occur in
    the wild; a bare string item is taken as the URL itself.
    """
    if isinstance(item, str):
        return item
    if not isinstance(item, dict):
        return None
    ref = item.get("image_url")
    if isinstance(ref, dict):
        return ref.get("url")
    if isinstance(ref, str):
        return ref
    return item.get("url")


def extract_markdown_images(content: str) -> Tuple[str, List[str]]:
    """Pull ``![alt](url)`` images out of ``content``.

    Returns the remaining text (trimmed) and the image URLs in order.
    """
    urls: List[str] = []

    def _collect(match: "re.Match[str]") -> str:
        urls.append(match.group(1))
        return ""

    text = _MARKDOWN_IMAGE.sub(_collect, content)
    return text.strip(), urls


__all__ = [
    "normalize_image_url",
    "parse_mime",
    "image_part",
    "image_url_of",
    "extract_markdown_images",
]
