"""Command-line entry point: ``scriptbox run`` and ``scriptbox serve``."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import SandboxConfig
from .exceptions import ScriptboxError
from .service import Sandbox


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scriptbox",
        description="Run untrusted Python snippets in a disposable sandbox",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Execute a script and print its output")
    run.add_argument("file", help="Path to the script, or '-' to read stdin")
    run.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Deadline in seconds (default: SCRIPTBOX_DEFAULT_DEADLINE or 5)",
    )

    serve = sub.add_parser("serve", help="Serve POST /api/execute over HTTP")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=5000)
    serve.add_argument("--debug", action="store_true")
    return parser


def _run(sandbox: Sandbox, file: str, timeout: float | None) -> int:
    try:
        if file == "-":
            source = sys.stdin.read()
        else:
            source = Path(file).read_text(encoding="utf-8")
        result = sandbox.execute(source, deadline=timeout)
    except (ScriptboxError, OSError, UnicodeDecodeError) as exc:
        print(f"scriptbox: {exc}", file=sys.stderr)
        return 2

    if result.output:
        print(result.output)
    if result.error is not None:
        print(result.error, file=sys.stderr)
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    sandbox = Sandbox(SandboxConfig.from_env())

    if args.command == "run":
        return _run(sandbox, args.file, args.timeout)

    from .web import create_app

    create_app(sandbox).run(host=args.host, port=args.port, debug=args.debug)
    return 0


if __name__ == "__main__":
    sys.exit(main())
