"""Result model helpers: usage parsing and dict views."""

from sse_pacer.base.models import CompletionResult, ContentPart, Usage


def test_usage_from_mapping_ignores_junk():
    usage = Usage.from_mapping({"prompt_tokens": 3, "completion_tokens": "7", "total_tokens": 99})
    assert usage.prompt_tokens == 3 and usage.completion_tokens == 0  # nosec B101
    assert usage.total_tokens == 3  # nosec B101 - derived, never trusted from upstream
    assert Usage.from_mapping({"prompt_tokens": True, "completion_tokens": -1}) == Usage()  # nosec B101


def test_completion_to_dict_drops_empty_part_fields():
    result = CompletionResult(
        text="hi",
        images=[ContentPart.image_part("https://x.test/a.png", "image/png")],
        usage=Usage(1, 2),
    )
    assert result.to_dict() == {  # nosec B101
        "text": "hi",
        "images": [{"type": "image", "url": "https://x.test/a.png", "mime_type": "image/png"}],
        "usage": {"prompt": 1, "completion": 2, "total": 3},
        "reasoning_text": None,
    }
    assert ContentPart.text_part("x").is_image is False  # nosec B101
