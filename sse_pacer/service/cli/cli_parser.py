"""CLI parser construction for sse-pacer.

This module wires subparsers but contains no execution logic. Subcommand
handlers live in ``cli_actions``.
"""

from __future__ import annotations

import argparse


def add_request_flags(parser: argparse.ArgumentParser) -> None:
    """Attach the request-shaping flags shared by ``stream`` and ``plan``."""
    parser.add_argument("--url", required=True, help="Endpoint receiving the streaming POST")
    parser.add_argument(
        "--data",
        default=None,
        help="JSON request body, or @path to read it from a file",
    )
    parser.add_argument(
        "--header",
        action="append",
        default=[],
        metavar="'Name: value'",
        help="Extra request header (repeatable)",
    )
    parser.add_argument("--timeout", type=float, default=None, help="Seconds allowed for the response to open")


def build_parser() -> argparse.ArgumentParser:
    """Construct the top-level CLI parser and subcommands.

    Returns
    -------
    argparse.ArgumentParser
        Configured parser with ``stream`` and ``plan`` subcommands.
    """
    p = argparse.ArgumentParser(prog="sse-pacer", description="Stream an SSE endpoint through the pacer")
    sub = p.add_subparsers(dest="cmd")

    # stream
    p_stream = sub.add_parser("stream", help="Open the stream and print delivered items (default)")
    add_request_flags(p_stream)
    p_stream.add_argument("--json", action="store_true", help="Print every item as a JSON line")
    p_stream.add_argument(
        "--frame-interval",
        type=float,
        default=None,
        help="Override the scheduler tick interval in seconds",
    )

    # plan (dry-run; no network I/O)
    p_plan = sub.add_parser("plan", help="Show the request that would be sent, without sending it")
    add_request_flags(p_plan)

    return p
