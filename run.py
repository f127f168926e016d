#!/usr/bin/env python
"""
Start the EduResult API server.

Usage:
    python run.py [--host HOST] [--port PORT] [--data-dir DIR] [--reload]

Host and port default to the HOST/PORT settings (.env or environment).
"""
import argparse
import os

import uvicorn

from eduresult.config import settings


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="EduResult API Server")
    parser.add_argument("--host", default=settings.HOST, help=f"Host to bind (default: {settings.HOST})")
    parser.add_argument("--port", type=int, default=settings.PORT, help=f"Port to bind (default: {settings.PORT})")
    parser.add_argument(
        "--data-dir",
        help=f"Directory holding the student and exam snapshots (default: {settings.DATA_DIR})"
    )
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    # The app is imported by uvicorn (in a child process with --reload), so the
    # data directory reaches its settings through the environment
    if args.data_dir:
        os.environ["DATA_DIR"] = os.path.abspath(args.data_dir)

    print(f"EduResult API on http://{args.host}:{args.port} (docs at /docs)")
    print(f"Snapshots in {os.environ.get('DATA_DIR', settings.DATA_DIR)}")

    uvicorn.run(
        "eduresult.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="debug" if settings.DEBUG else "info"
    )


if __name__ == "__main__":
    main()
