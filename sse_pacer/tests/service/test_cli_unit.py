"""Unit tests for the sse-pacer CLI (parser, request planning, stream handler)."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

import sse_pacer.service.cli as cli_pkg
from sse_pacer.service.cli import main
from sse_pacer.service.cli.cli_actions import (
    UsageError,
    handle_stream,
    load_data,
    parse_headers,
    plan_stream,
)
from sse_pacer.service.cli.cli_parser import build_parser

URL = "http://upstream.test/v1/chat/completions"
SSE_BODY = (
    'data: {"choices":[{"delta":{"content":"He"}}]}\n\n'
    'data: {"choices":[{"delta":{"content":"llo"}}],"usage":{"prompt_tokens":2,"completion_tokens":3}}\n\n'
    "data: [DONE]\n\n"
)


def _client(status: int = 200, body: str = SSE_BODY, content_type: str = "text/event-stream") -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, headers={"content-type": content_type}, text=body)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _args(*extra: str):
    return build_parser().parse_args(["stream", "--url", URL, "--frame-interval", "0", *extra])


def test_parse_headers():
    assert parse_headers(["Authorization: Bearer k", "X-Empty:"]) == {  # nosec B101
        "Authorization": "Bearer k",
        "X-Empty": "",
    }
    with pytest.raises(UsageError):
        parse_headers(["no-colon"])


def test_load_data_inline_and_file(tmp_path):
    assert load_data(None) == {}  # nosec B101
    assert load_data('{"model":"m"}') == {"model": "m"}  # nosec B101
    path = tmp_path / "body.json"
    path.write_text('{"messages":[]}', encoding="utf-8")
    assert load_data(f"@{path}") == {"messages": []}  # nosec B101
    with pytest.raises(UsageError):
        load_data("{broken")
    with pytest.raises(UsageError):
        load_data("[1, 2]")


def test_plan_stream_has_no_side_effects():
    plan = plan_stream(url=URL, data={"model": "m", "stream": False}, headers={"X": "1"}, timeout=None)
    assert plan["method"] == "POST" and plan["url"] == URL  # nosec B101
    assert plan["body"] == {"model": "m", "stream": True}  # nosec B101
    assert plan["headers"] == {"Content-Type": "application/json", "X": "1"}  # nosec B101
    assert plan["timeout_seconds"] == 60.0  # nosec B101


def test_main_plan_prints_json(capsys):
    code = main(["plan", "--url", URL, "--data", '{"model":"m"}', "--header", "X-Trace: 7", "--timeout", "5"])
    assert code == 0  # nosec B101
    plan = json.loads(capsys.readouterr().out.strip())
    assert plan["headers"]["X-Trace"] == "7" and plan["timeout_seconds"] == 5.0  # nosec B101


def test_main_defaults_to_stream(monkeypatch):
    seen = {}

    def fake_stream(args):
        seen["cmd"] = args.cmd
        seen["url"] = args.url
        return 0

    monkeypatch.setattr(cli_pkg, "handle_stream", fake_stream)
    assert main(["--url", URL]) == 0  # nosec B101
    assert seen == {"cmd": "stream", "url": URL}  # nosec B101


def test_handle_stream_prints_text_and_summary(capsys):
    client = _client()
    try:
        code = handle_stream(_args(), client=client)
    finally:
        asyncio.run(client.aclose())
    assert code == 0  # nosec B101
    out_lines = capsys.readouterr().out.splitlines()
    assert out_lines[0] == "Hello"  # nosec B101
    summary = json.loads(out_lines[-1])
    assert summary["emitted"] == 5 and summary["cancelled"] is False  # nosec B101
    assert summary["usage"] == {"prompt": 2, "completion": 3, "total": 5}  # nosec B101


def test_handle_stream_json_lines(capsys):
    client = _client()
    try:
        code = handle_stream(_args("--json"), client=client)
    finally:
        asyncio.run(client.aclose())
    assert code == 0  # nosec B101
    lines = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    assert [item["text"] for item in lines[:-1]] == list("Hello")  # nosec B101
    assert all(item["event"] == "answer" for item in lines[:-1])  # nosec B101


def test_handle_stream_reports_failures(capsys):
    client = _client(status=429, body='{"error":{"message":"slow down"}}', content_type="application/json")
    try:
        code = handle_stream(_args(), client=client)
    finally:
        asyncio.run(client.aclose())
    assert code == 1  # nosec B101
    err_lines = [line for line in capsys.readouterr().err.splitlines() if line.startswith('{"error"')]
    payload = json.loads(err_lines[-1])
    assert payload == {"error": "slow down", "code": "rate_limit", "response_text": ""}  # nosec B101


def test_handle_stream_rejects_bad_input(capsys):
    code = handle_stream(_args("--header", "broken"))
    assert code == 2  # nosec B101
    assert "invalid header" in capsys.readouterr().err  # nosec B101
