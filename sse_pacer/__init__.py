"""sse_pacer: paced consumption of token-streaming SSE responses.

Typical use::

    from sse_pacer import CancellationToken, stream_fetch

    token = CancellationToken()
    result = await stream_fetch(url, {"model": "m", "messages": [...]}, print,
                                cancellation_token=token)
    print(result.response_text)
"""

from .base.cancellation import CancellationToken, CancelledError
from .base.errors import ErrorCode, StreamError
from .base.models import CompletionResult, ContentPart, SessionMetrics, StreamResult, Usage
from .config import StreamConfig, get_stream_config
from .streaming import (
    ConsumptionScheduler,
    DeltaReducer,
    ItemKind,
    SSEEvent,
    StreamSession,
    UIItem,
    reduce_response,
    stream_fetch,
    stream_fetch_sync,
)

__version__ = "0.1.0"

__all__ = [
    "CancellationToken",
    "CancelledError",
    "ErrorCode",
    "StreamError",
    "CompletionResult",
    "ContentPart",
    "SessionMetrics",
    "StreamResult",
    "Usage",
    "StreamConfig",
    "get_stream_config",
    "ConsumptionScheduler",
    "DeltaReducer",
    "ItemKind",
    "SSEEvent",
    "StreamSession",
    "UIItem",
    "reduce_response",
    "stream_fetch",
    "stream_fetch_sync",
    "__version__",
]
