"""CLI action handlers.

Purpose
-------
Subcommand handlers for the sse-pacer CLI. This module has no top-level side
effects and is safe to import in tests; ``handle_stream`` accepts an injected
``httpx.AsyncClient`` so it can run against a mock transport.

Fallback & Error Semantics
--------------------------
- Bad ``--data`` / ``--header`` input is reported as JSON on stderr with
  exit code 2; nothing is sent.
- Stream failures print ``{"error", "code", "response_text"}`` as JSON on
  stderr and return 1. Ctrl-C returns 130.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO

import httpx

from ...base.errors import StreamError
from ...base.logging import get_logger, log_event
from ...base.timeouts import get_timeout_config
from ...config import get_stream_config
from ...config.defaults import JSON_CONTENT_TYPE
from ...streaming import ItemKind, StreamSession, UIItem


class UsageError(ValueError):
    """Raised for malformed CLI input."""


def parse_headers(values: List[str]) -> Dict[str, str]:
    """Turn ``["Name: value", ...]`` into a header mapping."""
    headers: Dict[str, str] = {}
    for raw in values:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            raise UsageError(f"invalid header {raw!r}; expected 'Name: value'")
        headers[name.strip()] = value.strip()
    return headers


def load_data(raw: Optional[str]) -> Dict[str, Any]:
    """Decode ``--data``: inline JSON or ``@path`` to a JSON file."""
    if not raw:
        return {}
    text = Path(raw[1:]).read_text(encoding="utf-8") if raw.startswith("@") else raw
    try:
        data = json.loads(text)
    except ValueError as e:
        raise UsageError(f"--data is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise UsageError("--data must be a JSON object")
    return data


def plan_stream(
    *,
    url: str,
    data: Dict[str, Any],
    headers: Dict[str, str],
    timeout: Optional[float],
) -> Dict[str, Any]:
    """Compute the request a ``stream`` run would send, without I/O."""
    return {
        "method": "POST",
        "url": url,
        "headers": {"Content-Type": JSON_CONTENT_TYPE, **headers},
        "body": {**data, "stream": True},
        "timeout_seconds": timeout if timeout is not None else get_timeout_config().stream_timeout_seconds,
    }


def _request_args(args: argparse.Namespace) -> Dict[str, Any]:
    return {
        "url": args.url,
        "data": load_data(args.data),
        "headers": parse_headers(args.header or []),
        "timeout": args.timeout,
    }


def handle_plan(args: argparse.Namespace, *, out: Optional[TextIO] = None) -> int:
    """Execute the ``plan`` subcommand."""
    out = out or sys.stdout
    try:
        plan = plan_stream(**_request_args(args))
    except (UsageError, OSError) as e:
        print(json.dumps({"error": str(e)}), file=sys.stderr)
        return 2
    print(json.dumps(plan, ensure_ascii=False), file=out)
    return 0


def _item_printer(out: TextIO, json_lines: bool):
    def _print(item: UIItem) -> None:
        if json_lines:
            print(json.dumps(item.to_dict(), ensure_ascii=False), file=out, flush=True)
        elif item.kind is ItemKind.TEXT and item.text:
            out.write(item.text)
            out.flush()

    return _print


def handle_stream(
    args: argparse.Namespace,
    *,
    client: Optional[httpx.AsyncClient] = None,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
) -> int:
    """Execute the ``stream`` subcommand.

    Items are printed as they are delivered; a JSON summary line follows on
    success.
    """
    out = out or sys.stdout
    err = err or sys.stderr
    try:
        request = _request_args(args)
    except (UsageError, OSError) as e:
        print(json.dumps({"error": str(e)}), file=err)
        return 2

    overrides = {"frame_interval_seconds": getattr(args, "frame_interval", None)}
    logger = get_logger("sse_pacer.cli")
    session = StreamSession(
        request["url"],
        request["data"],
        _item_printer(out, args.json),
        headers=request["headers"],
        timeout=request["timeout"],
        client=client,
        config=get_stream_config(overrides),
    )
    log_event(logger, "cli.stream.start", session.ctx)
    try:
        result = asyncio.run(session.run())
    except StreamError as e:
        print(
            json.dumps({"error": e.message, "code": e.code.value, "response_text": e.response_text}),
            file=err,
        )
        return 1
    except KeyboardInterrupt:
        return 130

    if not args.json:
        print(file=out)
    summary = {
        "emitted": result.metrics.emitted,
        "cancelled": result.cancelled,
        "usage": result.completion.usage.to_dict() if result.completion.usage else None,
        "images": len(result.completion.images),
    }
    print(json.dumps(summary), file=out)
    return 0
