"""Token usage reported by the upstream server."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping


@dataclass(frozen=True)
class Usage:
    """Prompt/completion token counters; missing counters read as zero."""

    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "Usage":
        """Build from an OpenAI-style ``usage`` object, ignoring junk values."""

        def _count(key: str) -> int:
            val = raw.get(key)
            return val if isinstance(val, int) and not isinstance(val, bool) and val >= 0 else 0

        return cls(prompt_tokens=_count("prompt_tokens"), completion_tokens=_count("completion_tokens"))

    def to_dict(self) -> Dict[str, int]:
        return {
            "prompt": self.prompt_tokens,
            "completion": self.completion_tokens,
            "total": self.total_tokens,
        }


__all__ = ["Usage"]
