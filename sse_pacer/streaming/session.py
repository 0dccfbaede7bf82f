"""Stream session controller.

One :class:`StreamSession` owns one streaming POST request end to end:

1. Arms a connect deadline on the session's :class:`CancellationToken`.
2. Opens the request with ``httpx`` and inspects the response head; error
   bodies (plain text, JSON, wrong content type) are decoded into a message.
3. Pipes decoded text through the frame extractor, SSE decoder and chunk
   assembler, dispatching each recovered payload.
4. Paces UI items through a :class:`ConsumptionScheduler` ticking on the same
   event loop as the reader.
5. Settles exactly once: a :class:`StreamResult` on normal completion or
   caller cancellation, a :class:`StreamError` otherwise. Partial text is
   always reported.

Lifecycle events are logged through ``normalized_log_event`` so every line
carries ``phase``, ``error_code``, ``emitted`` and ``tokens``.
"""
from __future__ import annotations

import asyncio
import json
import logging
import time
import uuid
from typing import Any, Callable, Dict, Mapping, Optional

import httpx

from ..base.cancellation import CancellationToken
from ..base.errors import ErrorCode, StreamError, classify_exception, classify_status
from ..base.http import build_async_client, build_stream_timeout
from ..base.log_support import LogContext
from ..base.logging import get_logger, normalized_log_event
from ..base.models import SessionMetrics, StreamResult
from ..base.timeouts import TIMEOUT_REASON, arm_deadline, get_timeout_config
from ..config import StreamConfig, get_stream_config
from ..config.defaults import (
    DONE_SENTINEL,
    EVENT_STREAM_CONTENT_TYPE,
    JSON_CONTENT_TYPE,
    MSG_REQUEST_FAILED,
    MSG_STREAM_ERROR,
    MSG_STREAM_INTERRUPTED,
    MSG_STREAM_UNPARSEABLE,
    MSG_UNEXPECTED_RESPONSE,
    PLAIN_TEXT_CONTENT_TYPE,
)
from .animation_queue import ConsumptionScheduler
from .chunk_assembler import ChunkAssembler
from .delta_reducer import DeltaReducer, finalize
from .dispatch import dispatch_event, error_message_from_payload
from .events import SSEEvent, UIItem
from .frame_extractor import FrameExtractor
from .session_state import SessionPhase, SessionState
from .sse_decoder import SSEDecoder, TransportEvent

OnMessage = Callable[[UIItem], None]

_INLINE_SSE_ERROR_PREFIX = "event: error"


class StreamSession:
    """Drive one streaming request and pace its output into ``on_message``.

    Args:
        url: Endpoint receiving the POST.
        data: JSON body; ``"stream": True`` is always added.
        on_message: Sink receiving every :class:`UIItem`.
        cancellation_token: Abort handle; a fresh one is created if omitted.
        headers: Extra request headers (override ``Content-Type``).
        timeout: Seconds allowed for the response to open. Defaults to
            ``TimeoutConfig.stream_timeout_seconds``.
        client: Pre-built ``httpx.AsyncClient``; the caller keeps ownership.
        is_visible: Visibility check forwarded to the scheduler.
        config: Pacing/buffer settings; defaults to :func:`get_stream_config`.
        logger: Logger for lifecycle events.
    """

    def __init__(
        self,
        url: str,
        data: Optional[Mapping[str, Any]],
        on_message: OnMessage,
        *,
        cancellation_token: Optional[CancellationToken] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
        is_visible: Optional[Callable[[], bool]] = None,
        config: Optional[StreamConfig] = None,
        logger: Optional[logging.Logger] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self.url = url
        self.token = cancellation_token or CancellationToken()
        self._data: Dict[str, Any] = dict(data or {})
        self._on_message = on_message
        self._headers: Dict[str, str] = dict(headers or {})
        self._timeout = timeout if timeout is not None else get_timeout_config().stream_timeout_seconds
        self._client = client
        self._config = config or get_stream_config()
        self._logger = logger or get_logger("sse_pacer.session")
        self.ctx = LogContext(url=url, session_id=session_id or uuid.uuid4().hex[:12])

        self.state = SessionState()
        self.metrics = SessionMetrics()
        self.reducer = DeltaReducer()
        self.scheduler = ConsumptionScheduler(
            self._deliver,
            is_visible=is_visible,
            batch_divisor=self._config.batch_divisor,
        )
        self._extractor = FrameExtractor()
        self._decoder = SSEDecoder()
        self._assemblers: Dict[str, ChunkAssembler] = {}
        self._deadline: Optional[asyncio.TimerHandle] = None
        self._started = 0.0

    # ------------------------------------------------------------------
    # Public entry point
    # ------------------------------------------------------------------
    async def run(self) -> StreamResult:
        """Run the session to completion.

        Returns:
            StreamResult: on normal close, or with ``cancelled=True`` when the
            caller cancelled the token.

        Raises:
            StreamError: on timeout, transport failure, HTTP error or an
                upstream ``error`` event. ``response_text`` holds the text
                delivered before the failure.
        """
        loop = asyncio.get_running_loop()
        self._started = time.perf_counter()
        normalized_log_event(self._logger, "stream.session.open", self.ctx, phase="start", emitted=0)

        ticker = asyncio.create_task(self.scheduler.run(self._config.frame_interval_seconds))
        self._deadline = arm_deadline(loop, self.token, self._timeout)
        reader = asyncio.create_task(self._read())
        remove_callback = self.token.add_callback(lambda _reason: loop.call_soon_threadsafe(reader.cancel))
        try:
            await asyncio.wait({reader})
        except asyncio.CancelledError:
            reader.cancel()
            ticker.cancel()
            raise
        finally:
            remove_callback()
            if self._deadline is not None:
                self._deadline.cancel()

        exc = None if reader.cancelled() else reader.exception()
        aborted = self.token.cancelled
        self.state.phase = SessionPhase.CLOSING
        if aborted:
            self.scheduler.drain()
        else:
            if exc is not None:
                self._record_exception(exc)
            self.scheduler.mark_finished()
        await ticker
        return self._settle(aborted)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    async def _read(self) -> None:
        body = {**self._data, "stream": True}
        headers = {"Content-Type": JSON_CONTENT_TYPE, **self._headers}
        idle = self._config.idle_timeout_seconds
        client = self._client or build_async_client(self._timeout, idle)
        try:
            async with client.stream(
                "POST",
                self.url,
                json=body,
                headers=headers,
                timeout=build_stream_timeout(self._timeout, idle),
            ) as response:
                if self._deadline is not None:
                    self._deadline.cancel()
                self.token.raise_if_cancelled()
                self.ctx.request_id = response.headers.get("x-request-id")
                self.state.phase = SessionPhase.STREAMING
                if not await self._accept_response(response):
                    return
                async for text in response.aiter_text():
                    self.token.raise_if_cancelled()
                    self._ingest(text)
                self._finish_ingest()
        finally:
            if client is not self._client:
                await client.aclose()

    async def _accept_response(self, response: httpx.Response) -> bool:
        """Inspect the response head; return ``True`` to consume it as SSE."""
        status = response.status_code
        content_type = response.headers.get("content-type", "")
        if content_type.startswith(PLAIN_TEXT_CONTENT_TYPE):
            await response.aread()
            code = ErrorCode.UPSTREAM if status == 200 else classify_status(status)
            self.state.record_error(response.text.strip() or MSG_UNEXPECTED_RESPONSE, code, status)
            return False
        if status == 200 and content_type.startswith(EVENT_STREAM_CONTENT_TYPE):
            return True

        await response.aread()
        text = response.text
        code = ErrorCode.UPSTREAM if status == 200 else classify_status(status)
        try:
            payload = json.loads(text)
        except ValueError:
            if text.startswith(_INLINE_SSE_ERROR_PREFIX):
                # Body is an SSE error record sent without the SSE content type.
                return True
            self.state.record_error(f"{MSG_REQUEST_FAILED}: {status}", code, status)
            return False

        if status == 200 and isinstance(payload, dict) and "choices" in payload:
            self._dispatch(SSEEvent.FAST_ANSWER.value, payload)
            return False
        self.state.record_error(
            error_message_from_payload(payload, f"{MSG_REQUEST_FAILED}: {status}"),
            code,
            status,
        )
        return False

    # ------------------------------------------------------------------
    # Decoding pipeline
    # ------------------------------------------------------------------
    def _ingest(self, text: str) -> None:
        for line in self._extractor.feed(text):
            for record in self._decoder.feed_line(line):
                self._handle_record(record)

    def _finish_ingest(self) -> None:
        for line in self._extractor.finish():
            for record in self._decoder.feed_line(line):
                self._handle_record(record)
        for record in self._decoder.finish():
            self._handle_record(record)
        for event, assembler in self._assemblers.items():
            for obj in assembler.finish():
                self._dispatch(event, obj)
        assemblers = self._assemblers.values()
        if any(a.received_count for a in assemblers) and not any(a.parsed_count for a in assemblers):
            self.state.record_error(MSG_STREAM_UNPARSEABLE, ErrorCode.PROTOCOL)

    def _handle_record(self, record: TransportEvent) -> None:
        if record.data.strip() == DONE_SENTINEL:
            return
        assembler = self._assemblers.get(record.event)
        if assembler is None:
            assembler = ChunkAssembler(
                cap=self._config.pending_buffer_cap,
                keep=self._config.pending_buffer_keep,
                logger=self._logger,
                ctx=self.ctx,
            )
            self._assemblers[record.event] = assembler
        for obj in assembler.feed(record.data):
            self._dispatch(record.event, obj)

    def _dispatch(self, event: str, payload: Mapping[str, Any]) -> None:
        error = dispatch_event(
            event,
            payload,
            scheduler=self.scheduler,
            on_message=self._deliver,
            reducer=self.reducer,
            logger=self._logger,
            ctx=self.ctx,
        )
        if error is not None:
            message = error_message_from_payload(error, MSG_STREAM_ERROR)
            self.state.record_error(message, ErrorCode.UPSTREAM)

    def _deliver(self, item: UIItem) -> None:
        if self.metrics.emitted == 0:
            self.metrics.time_to_first_item_ms = (time.perf_counter() - self._started) * 1000.0
        self.metrics.emitted += 1
        self._on_message(item)

    # ------------------------------------------------------------------
    # Settle
    # ------------------------------------------------------------------
    def _record_exception(self, exc: BaseException) -> None:
        message = str(exc).strip() or MSG_STREAM_INTERRUPTED
        status = getattr(getattr(exc, "response", None), "status_code", None)
        self.state.record_error(message, classify_exception(exc), status)

    def _settle(self, aborted: bool) -> StreamResult:
        state = self.state
        state.finished = True
        state.phase = SessionPhase.SETTLED
        state.response_text = self.scheduler.response_text
        completion = finalize(self.reducer.result)
        self.metrics.total_duration_ms = (time.perf_counter() - self._started) * 1000.0
        self.metrics.tokens = completion.usage.to_dict() if completion.usage else None

        if state.failed:
            self._log_failure(state.error_code or ErrorCode.UNKNOWN, state.error_message or "")
            raise StreamError(
                code=state.error_code or ErrorCode.UNKNOWN,
                message=state.error_message or MSG_STREAM_ERROR,
                response_text=state.response_text,
                status_code=state.status_code,
            )
        if aborted and self.token.reason == TIMEOUT_REASON:
            self._log_failure(ErrorCode.TIMEOUT, TIMEOUT_REASON)
            raise StreamError(
                code=ErrorCode.TIMEOUT,
                message=TIMEOUT_REASON,
                response_text=state.response_text,
            )
        if aborted:
            normalized_log_event(
                self._logger,
                "stream.session.cancelled",
                self.ctx,
                phase="cancelled",
                error_code=ErrorCode.CANCELLED.value,
                emitted=self.metrics.emitted,
                tokens=self.metrics.tokens,
                reason=self.token.reason,
            )
        else:
            normalized_log_event(
                self._logger,
                "stream.session.end",
                self.ctx,
                phase="finalize",
                emitted=self.metrics.emitted,
                tokens=self.metrics.tokens,
                total_duration_ms=round(self.metrics.total_duration_ms, 2),
                time_to_first_item_ms=self._rounded_ttfi(),
            )
        return StreamResult(
            response_text=state.response_text,
            completion=completion,
            cancelled=aborted,
            cancel_reason=self.token.reason if aborted else None,
            metrics=self.metrics,
        )

    def _rounded_ttfi(self) -> Optional[float]:
        ttfi = self.metrics.time_to_first_item_ms
        return round(ttfi, 2) if ttfi is not None else None

    def _log_failure(self, code: ErrorCode, message: str) -> None:
        normalized_log_event(
            self._logger,
            "stream.session.error",
            self.ctx,
            phase="error",
            error_code=code.value,
            emitted=self.metrics.emitted,
            tokens=self.metrics.tokens,
            level=logging.ERROR,
            message=message,
            status_code=self.state.status_code,
        )


async def stream_fetch(
    url: str,
    data: Optional[Mapping[str, Any]],
    on_message: OnMessage,
    **kwargs: Any,
) -> StreamResult:
    """Run a :class:`StreamSession` and return its result (see its arguments)."""
    return await StreamSession(url, data, on_message, **kwargs).run()


def stream_fetch_sync(
    url: str,
    data: Optional[Mapping[str, Any]],
    on_message: OnMessage,
    **kwargs: Any,
) -> StreamResult:
    """Blocking wrapper around :func:`stream_fetch` for scripts and the CLI."""
    return asyncio.run(stream_fetch(url, data, on_message, **kwargs))


__all__ = ["StreamSession", "stream_fetch", "stream_fetch_sync"]
