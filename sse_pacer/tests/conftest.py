"""Pytest configuration for the sse_pacer test suite.

Fixtures:
- ``clean_env`` (autouse): strips ``SSE_PACER_*`` variables so tests see defaults.
- ``log_records``: captures JSON log payloads emitted under the ``sse_pacer`` logger.
- ``stream_runner``: runs a :class:`StreamSession` against an ``httpx.MockTransport``.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional

import httpx
import pytest

from sse_pacer.base.logging import BASE_LOGGER_NAME, LEVEL_ENV, get_logger
from sse_pacer.base.models import StreamResult
from sse_pacer.config import StreamConfig
from sse_pacer.streaming import StreamSession, UIItem

TEST_URL = "http://upstream.test/v1/chat/completions"
EVENT_STREAM = "text/event-stream"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in list(os.environ):
        if name.startswith("SSE_PACER_"):
            monkeypatch.delenv(name, raising=False)
    yield


class _ListHandler(logging.Handler):
    """Capture decoded JSON log payloads into a list."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.payloads: List[Dict[str, Any]] = []

    def emit(self, record: logging.LogRecord) -> None:  # pragma: no cover - exercised via tests
        try:
            self.payloads.append(json.loads(record.getMessage()))
        except ValueError:
            self.payloads.append({"message": record.getMessage()})


@pytest.fixture()
def log_records(monkeypatch: pytest.MonkeyPatch) -> Iterator[List[Dict[str, Any]]]:
    # get_logger re-reads the level from the environment on every call.
    monkeypatch.setenv(LEVEL_ENV, "DEBUG")
    logger = get_logger(BASE_LOGGER_NAME)
    handler = _ListHandler()
    logger.addHandler(handler)
    try:
        yield handler.payloads
    finally:
        logger.removeHandler(handler)


@dataclass
class StreamRun:
    """Outcome of one mocked session."""

    result: Optional[StreamResult] = None
    items: List[UIItem] = field(default_factory=list)
    requests: List[httpx.Request] = field(default_factory=list)

    @property
    def texts(self) -> List[str]:
        return [i.text for i in self.items if i.text is not None]

    def request_json(self) -> Dict[str, Any]:
        return json.loads(self.requests[0].content)


async def _iter_chunks(chunks: List[Any]):
    for chunk in chunks:
        yield chunk.encode("utf-8") if isinstance(chunk, str) else chunk


def _build_handler(
    body: Any,
    status: int,
    content_type: str,
    run: StreamRun,
    handler: Optional[Callable[[httpx.Request], Any]],
):
    if handler is not None:

        def _wrapped(request: httpx.Request):
            run.requests.append(request)
            return handler(request)

        return _wrapped

    def _handler(request: httpx.Request) -> httpx.Response:
        run.requests.append(request)
        content = body() if callable(body) else _iter_chunks(list(body))
        return httpx.Response(status, headers={"content-type": content_type}, content=content)

    return _handler


@pytest.fixture()
def stream_run() -> StreamRun:
    """Fresh record to pass as ``run=`` when the session is expected to raise."""
    return StreamRun()


@pytest.fixture()
def fast_config() -> StreamConfig:
    """Pacing config with zero-delay ticks so tests do not sleep."""
    return StreamConfig(frame_interval_seconds=0.0)


@pytest.fixture()
def stream_runner(fast_config: StreamConfig):
    """Return ``run(body, ...) -> StreamRun``.

    ``body`` is a list of str/bytes chunks or a zero-argument callable returning
    an async byte iterator. ``run`` (when passed) is filled even if the session
    raises, so partial deliveries can be asserted.
    """

    def _run(
        body: Any = (),
        *,
        status: int = 200,
        content_type: str = EVENT_STREAM,
        data: Optional[Dict[str, Any]] = None,
        handler: Optional[Callable[[httpx.Request], Any]] = None,
        run: Optional[StreamRun] = None,
        **session_kwargs: Any,
    ) -> StreamRun:
        run = run if run is not None else StreamRun()
        session_kwargs.setdefault("config", fast_config)
        transport = httpx.MockTransport(_build_handler(body, status, content_type, run, handler))

        async def _main() -> StreamResult:
            async with httpx.AsyncClient(transport=transport) as client:
                session = StreamSession(
                    TEST_URL,
                    data if data is not None else {"model": "m"},
                    run.items.append,
                    client=client,
                    **session_kwargs,
                )
                return await session.run()

        run.result = asyncio.run(_main())
        return run

    return _run
