"""sse-pacer developer CLI (package entrypoint).

Wires argument parsing to the handlers in ``cli_actions``. Running without a
subcommand defaults to ``stream``.
"""

from __future__ import annotations

import sys
from typing import Optional

from .cli_actions import handle_plan, handle_stream
from .cli_parser import build_parser

_COMMANDS = {"stream", "plan"}


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entrypoint.

    Parameters
    ----------
    argv: Optional[list[str]]
        Argument vector; when ``None`` uses ``sys.argv[1:]``.

    Returns
    -------
    int
        Process exit code (0 success, non-zero on error).
    """
    p = build_parser()
    argv_list = list(sys.argv[1:] if argv is None else argv)
    if not argv_list or argv_list[0] not in _COMMANDS:
        argv_list = ["stream"] + argv_list
    args = p.parse_args(argv_list)
    return handle_plan(args) if args.cmd == "plan" else handle_stream(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
