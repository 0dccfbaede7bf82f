"""Result models public surface."""

from .models_parts.content_part import ContentPart, ContentPartType
from .models_parts.usage import Usage
from .models_parts.completion_result import CompletionResult
from .models_parts.session_metrics import SessionMetrics
from .models_parts.stream_result import StreamResult

__all__ = [
    "ContentPart",
    "ContentPartType",
    "Usage",
    "CompletionResult",
    "SessionMetrics",
    "StreamResult",
]
