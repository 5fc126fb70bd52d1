"""Main entry point for Gridmind"""

import asyncio
import argparse
import uuid

from auth import AuthSession, User
from config import settings
from editor import SpreadsheetEditor
from llm.client import LLMClient
from ui.console import ConsoleShell
from ui.notifications import ConsoleNotifier
from utils.logging import configure_logging


def run_shell(args) -> int:
    auth = AuthSession()
    editor = SpreadsheetEditor(
        llm=LLMClient(),
        notifier=ConsoleNotifier(),
        auth=auth,
        rows=args.rows,
        cols=args.cols
    )
    auth.sign_in(User(id=str(uuid.uuid4()), email=args.email))
    asyncio.run(ConsoleShell(editor).run())
    return 0


def run_server(args) -> int:
    import uvicorn

    uvicorn.run(
        "web.api:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.LOG_LEVEL.lower()
    )
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Gridmind - AI-assisted spreadsheet editor"
    )
    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        help="Logging level"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    shell = subparsers.add_parser("shell", help="Interactive console editor")
    shell.add_argument("--email", default="local@example.com", help="Signed-in user email")
    shell.add_argument("--rows", type=int, default=settings.GRID_ROWS)
    shell.add_argument("--cols", type=int, default=settings.GRID_COLS)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")

    args = parser.parse_args()
    configure_logging(args.log_level)

    if args.command == "shell":
        return run_shell(args)
    return run_server(args)


if __name__ == "__main__":
    exit(main())
