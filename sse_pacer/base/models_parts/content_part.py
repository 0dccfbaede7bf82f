"""
Structured content part model for assistant messages.

Upstream servers may deliver assistant content as an ordered array of typed
parts rather than a flat string. This object captures the normalized shape:
text fragments and image references (data URLs or remote URLs).
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Literal, Optional

ContentPartType = Literal["text", "image"]


@dataclass
class ContentPart:
    """A single piece of structured assistant content.

    Attributes:
        type: ``"text"`` or ``"image"``.
        text: Text for text parts.
        url: Normalized image URL for image parts (data URLs have internal
            whitespace removed).
        mime_type: Image MIME type parsed from the data URL prefix, defaulting
            to ``image/png``.
    """

    type: ContentPartType
    text: Optional[str] = None
    url: Optional[str] = None
    mime_type: Optional[str] = None

    @classmethod
    def text_part(cls, text: str) -> "ContentPart":
        return cls(type="text", text=text)

    @classmethod
    def image_part(cls, url: str, mime_type: str) -> "ContentPart":
        return cls(type="image", url=url, mime_type=mime_type)

    @property
    def is_image(self) -> bool:
        return self.type == "image"

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable dictionary without empty fields."""
        return {k: v for k, v in asdict(self).items() if v is not None}


__all__ = ["ContentPart", "ContentPartType"]
