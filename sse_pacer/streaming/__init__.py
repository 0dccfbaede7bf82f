"""Streaming pipeline package.

Leaves first: frame repair (``frame_extractor``), SSE tokenization
(``sse_decoder``), incremental JSON recovery (``chunk_assembler``), delta
folding (``delta_reducer``), paced delivery (``animation_queue``) and the
session controller tying them to an HTTP response (``session``).
"""

from .frame_extractor import FrameExtractor, FrameState, extract_frames, flush_frames, repair_line
from .sse_decoder import SSEDecoder, TransportEvent
from .chunk_assembler import ChunkAssembler, extract_json_objects
from .delta_reducer import AccumulatedResult, DeltaReducer, ReductionStep, finalize, reduce_response
from .events import ItemKind, SSEEvent, UIItem
from .animation_queue import ConsumptionScheduler, SchedulerState
from .session_state import SessionPhase, SessionState
from .session import StreamSession, stream_fetch, stream_fetch_sync

__all__ = [
    "FrameExtractor",
    "FrameState",
    "extract_frames",
    "flush_frames",
    "repair_line",
    "SSEDecoder",
    "TransportEvent",
    "ChunkAssembler",
    "extract_json_objects",
    "AccumulatedResult",
    "DeltaReducer",
    "ReductionStep",
    "finalize",
    "reduce_response",
    "ItemKind",
    "SSEEvent",
    "UIItem",
    "ConsumptionScheduler",
    "SchedulerState",
    "SessionPhase",
    "SessionState",
    "StreamSession",
    "stream_fetch",
    "stream_fetch_sync",
]
