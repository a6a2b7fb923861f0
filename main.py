#!/usr/bin/env python3
"""
PermaHub accounts -- registration, email verification, and token authentication.

Usage:
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 8080
  python main.py serve --reload

Environment variables (see core/config.py for the full list):
  JWT_ACCESS_SECRET    Signing secret for access tokens (required unless DEBUG=true)
  JWT_REFRESH_SECRET   Signing secret for refresh tokens (required unless DEBUG=true)
  FRONTEND_URL         Public front-end base URL used in verification links
  DATABASE_URL         SQLAlchemy URL of the account database
  MAIL_BACKEND         "smtp" (default) or "console"
"""

import argparse

import uvicorn


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="permahub-accounts",
        description="PermaHub account service",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    serve.add_argument("--reload", action="store_true", help="Restart on code changes (development only)")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    if args.command == "serve":
        # Import string form so --reload can re-import the app in the worker.
        uvicorn.run("api.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
