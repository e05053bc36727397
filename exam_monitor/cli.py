"""CLI for Exam Monitor: run the liveness service."""

from __future__ import annotations

import argparse
import logging
import sys


def cmd_serve(args):
    """Run the HTTP + WebSocket server under uvicorn."""
    import uvicorn

    from exam_monitor.config import get_settings

    settings = get_settings()
    host = args.host or settings.host
    port = args.port or settings.port
    level = (args.log_level or settings.log_level).upper()

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("exam_monitor.main:app", host=host, port=port, log_level=level.lower())


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(prog="exam-monitor", description="Exam Monitor CLI")
    sub = parser.add_subparsers(dest="command")

    p_serve = sub.add_parser("serve", help="Run the liveness service")
    p_serve.add_argument("--host", default=None, help="Bind address (default from config)")
    p_serve.add_argument("--port", type=int, default=None, help="Listening port (default from config / PORT)")
    p_serve.add_argument("--log-level", default=None, help="Logging level, e.g. INFO or DEBUG")

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "serve":
        cmd_serve(args)


if __name__ == "__main__":
    main()
