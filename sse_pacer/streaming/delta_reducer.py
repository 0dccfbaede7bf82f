"""Fold OpenAI-style chat completion chunks into one accumulated result.

Streaming chunks carry ``choices[0].delta`` fragments that append; some
servers instead (or additionally) send ``choices[0].message`` snapshots that
replace what was accumulated so far. Once a snapshot has been seen the
reducer stays in snapshot mode and later content of either shape replaces
the text.

:func:`finalize` turns the accumulated state into a
:class:`~sse_pacer.base.models.CompletionResult`; :func:`reduce_response`
does both for a single non-streaming body.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from ..base.models import CompletionResult, ContentPart, Usage
from .images import extract_markdown_images, image_part, image_url_of

_TEXT_PART_TYPES = ("text", "output_text")


@dataclass
class AccumulatedResult:
    """Running state of one response.

    Attributes:
        full_text: Concatenated (or last snapshot) assistant text.
        reasoning_text: Concatenated reasoning deltas.
        content_parts: Ordered structured parts seen so far.
        usage: Last usage object reported (last write wins).
        parsed_chunks: Number of chunks applied.
        snapshot_mode: Set once a ``message`` snapshot has been applied.
    """

    full_text: str = ""
    reasoning_text: str = ""
    content_parts: List[ContentPart] = field(default_factory=list)
    usage: Optional[Usage] = None
    parsed_chunks: int = 0
    snapshot_mode: bool = False


@dataclass
class ReductionStep:
    """What a single chunk added.

    ``text`` is the newly visible text: the appended delta, or for a
    snapshot the suffix beyond the previous text when the snapshot extends
    it (``""`` otherwise, with ``replaced`` set).
    """

    text: str = ""
    reasoning: str = ""
    images: List[ContentPart] = field(default_factory=list)
    replaced: bool = False


def _parse_parts(content: List[Any]) -> List[ContentPart]:
    parts: List[ContentPart] = []
    for part in content:
        if not isinstance(part, Mapping):
            continue
        kind = part.get("type")
        if kind in _TEXT_PART_TYPES and isinstance(part.get("text"), str):
            parts.append(ContentPart.text_part(part["text"]))
        elif kind == "image_url":
            img = image_part(image_url_of(part))
            if img is not None:
                parts.append(img)
    return parts


def _joined_text(parts: List[ContentPart]) -> str:
    return "".join(p.text or "" for p in parts if not p.is_image)


class DeltaReducer:
    """Apply chunks in arrival order to an :class:`AccumulatedResult`."""

    def __init__(self) -> None:
        self.result = AccumulatedResult()

    def apply(self, chunk: Any) -> ReductionStep:
        """Fold one parsed chunk; non-mapping input is ignored."""
        step = ReductionStep()
        if not isinstance(chunk, Mapping):
            return step
        res = self.result
        res.parsed_chunks += 1

        usage = chunk.get("usage")
        if isinstance(usage, Mapping):
            res.usage = Usage.from_mapping(usage)

        choices = chunk.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], Mapping):
            return step
        choice = choices[0]

        delta = choice.get("delta")
        if isinstance(delta, Mapping):
            if "content" in delta and delta["content"] is not None:
                self._fold_content(delta["content"], step, replace=res.snapshot_mode)
            reasoning = delta.get("reasoning_content") or delta.get("reasoning")
            if isinstance(reasoning, str) and reasoning:
                res.reasoning_text += reasoning
                step.reasoning += reasoning
            self._fold_images(delta.get("images"), step)

        message = choice.get("message")
        if isinstance(message, Mapping):
            if "content" in message and message["content"] is not None:
                res.snapshot_mode = True
                self._fold_content(message["content"], step, replace=True)
            reasoning = message.get("reasoning_content") or message.get("reasoning")
            if isinstance(reasoning, str) and reasoning:
                res.reasoning_text = reasoning
            self._fold_images(message.get("images"), step)
        return step

    def _fold_content(self, content: Any, step: ReductionStep, *, replace: bool) -> None:
        res = self.result
        if isinstance(content, str):
            if replace:
                self._replace_text(content, step)
            else:
                res.full_text += content
                step.text += content
            return
        if not isinstance(content, list):
            return
        parts = _parse_parts(content)
        step.images.extend(p for p in parts if p.is_image)
        if replace:
            res.content_parts = parts
            self._replace_text(_joined_text(parts), step)
            return
        res.content_parts.extend(parts)
        added = _joined_text(parts)
        res.full_text += added
        step.text += added

    def _replace_text(self, text: str, step: ReductionStep) -> None:
        previous = self.result.full_text
        self.result.full_text = text
        if text.startswith(previous):
            step.text += text[len(previous) :]
        else:
            step.replaced = True

    def _fold_images(self, images: Any, step: ReductionStep) -> None:
        if not isinstance(images, list):
            return
        for item in images:
            if isinstance(item, Mapping) and item.get("type") not in (None, "image_url"):
                continue
            img = image_part(image_url_of(item))
            if img is not None:
                self.result.content_parts.append(img)
                step.images.append(img)


def _unique_images(urls: List[str]) -> List[ContentPart]:
    seen = set()
    out: List[ContentPart] = []
    for url in urls:
        img = image_part(url)
        if img is None or img.url in seen:
            continue
        seen.add(img.url)
        out.append(img)
    return out


def finalize(result: AccumulatedResult) -> CompletionResult:
    """Produce the final text/images/usage view of ``result``.

    Text parts take precedence over ``full_text``. Markdown images are
    hoisted out of string content always, and out of text parts only when no
    image part was delivered.
    """
    parts = result.content_parts
    texts = [p.text for p in parts if not p.is_image and p.text is not None]
    urls = [p.url for p in parts if p.is_image and p.url]
    if texts:
        if not urls:
            merged, urls = extract_markdown_images("\n".join(texts))
            texts = [merged] if merged else []
    elif result.full_text:
        # String content: image parts (if any) came from `images` arrays.
        merged, hoisted = extract_markdown_images(result.full_text)
        texts = [merged] if merged else []
        urls = urls + hoisted

    images = _unique_images(urls)
    text = "\n".join(texts).strip()
    return CompletionResult(
        text=text or None,
        images=images,
        usage=result.usage,
        reasoning_text=result.reasoning_text or None,
    )


def reduce_response(body: Mapping[str, Any]) -> CompletionResult:
    """Reduce a complete (non-streaming) chat completion body."""
    reducer = DeltaReducer()
    reducer.apply(body)
    return finalize(reducer.result)


__all__ = [
    "AccumulatedResult",
    "ReductionStep",
    "DeltaReducer",
    "finalize",
    "reduce_response",
]
