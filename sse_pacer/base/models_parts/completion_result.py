"""
Finalized view of a folded response.

Produced once a session (or a single non-streaming body) has been reduced:
plain text with markdown images hoisted out, the de-duplicated image list and
the last reported usage.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .content_part import ContentPart
from .usage import Usage


@dataclass
class CompletionResult:
    """Text, images and usage extracted from an upstream response."""

    text: Optional[str] = None
    images: List[ContentPart] = field(default_factory=list)
    usage: Optional[Usage] = None
    reasoning_text: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "images": [img.to_dict() for img in self.images],
            "usage": self.usage.to_dict() if self.usage else None,
            "reasoning_text": self.reasoning_text,
        }


__all__ = ["CompletionResult"]
