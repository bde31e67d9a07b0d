"""CLI for tendril - wiki markup codec and document editor tools."""

import argparse
import asyncio
import json
import logging
import platform
import sys
from pathlib import Path
from typing import Any

from . import __version__
from .core.channel import ChannelHub
from .core.coordinator import ERROR
from .core.errors import UnsupportedEnvironment
from .format.markup import encode_to_presentation, html_to_markup
from .runtime import build_runtime
from .view import DocumentView


def _read_input(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def cmd_render(args: argparse.Namespace, rt: Any) -> int:
    """Encode plain markup to presentation HTML."""
    print(encode_to_presentation(_read_input(args.source)))
    return 0


def cmd_strip(args: argparse.Namespace, rt: Any) -> int:
    """Decode presentation HTML back to plain markup."""
    sys.stdout.write(html_to_markup(_read_input(args.source)))
    return 0


def cmd_show(args: argparse.Namespace, rt: Any) -> int:
    """Print a stored document."""
    doc = rt.store.read(args.title)
    if doc is None:
        print(f"Document {args.title} not found", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps({
            "title": doc.title,
            "tags": doc.tags,
            "metadata": doc.metadata,
            "body": doc.body,
        }, indent=2))
    elif args.html:
        print(encode_to_presentation(doc.body))
    else:
        print(doc.body)
    return 0


def cmd_ls(args: argparse.Namespace, rt: Any) -> int:
    """List stored documents."""
    titles = list(rt.store.list_titles())
    if args.json:
        print(json.dumps(titles, indent=2))
    else:
        for title in titles:
            print(title)
    return 0


async def _save(args: argparse.Namespace, rt: Any, body: str) -> str:
    hub = ChannelHub()
    writer = rt.writer(token=args.token)
    view = DocumentView(hub, writer, rt.recent)
    try:
        await view.open(f"/{args.title}", current_title=args.old_title or args.title)
        title = view.region("title")
        title.mount(args.title)
        view.region("tag").mount(args.tags)
        view.region("metadata").mount(args.metadata)
        for i, line in enumerate(body.split("\n")):
            view.region(f"block-{i}").mount(line)
        title.save()
        await view.settle()
        return view.state
    finally:
        await view.close()
        await writer.aclose()
        hub.close()


def cmd_save(args: argparse.Namespace, rt: Any) -> int:
    """Send a document to the edit endpoint through a document view."""
    body = _read_input(args.source)
    try:
        state = asyncio.run(_save(args, rt, body))
    except UnsupportedEnvironment as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if state == ERROR:
        print(f"Saving {args.title} failed", file=sys.stderr)
        return 1
    if not args.quiet:
        print(f"Saved {args.title}")
    return 0


def cmd_serve(args: argparse.Namespace, rt: Any) -> int:
    """Start the local API server."""
    try:
        import uvicorn

        from .api.app import create_app, generate_token
    except ImportError as e:
        print(
            "Error: API dependencies not installed. "
            "Install with: pip install tendril-editor[api]",
            file=sys.stderr
        )
        print(f"Details: {e}", file=sys.stderr)
        return 1

    token_arg = getattr(args, 'token', 'auto')
    token = None

    if token_arg == 'auto':
        token = generate_token()
        print(f"Generated bearer token: {token}")
        print(f"Use in requests: Authorization: Bearer {token}")
    elif token_arg == 'none':
        print("Warning: Running without authentication. Only use in trusted environments.")
        token = None
    else:
        token = token_arg

    app = create_app(rt, token=token, enable_cors=args.cors)

    host = args.host or rt.config.server.host
    port = args.port or rt.config.server.port

    print(f"Starting server on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level="info")

    return 0


def _version_text() -> str:
    return (
        f"tendril {__version__}\n"
        f"python {platform.python_version()}\n"
        f"platform {platform.platform()}"
    )


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="tendril", description="Tendril wiki editor tools"
    )
    parser.add_argument(
        "--version", action="version", version=_version_text()
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: search cwd/tendril.toml, wiki/tendril.toml)",
    )
    parser.add_argument(
        "--wiki",
        type=Path,
        default=None,
        help="Path to wiki directory (overrides config)",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Minimize output"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Debug logging"
    )
    parser.add_argument(
        "--json", action="store_true", help="Machine-readable output"
    )

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    # render command
    parser_render = subparsers.add_parser("render", help="Markup to presentation HTML")
    parser_render.add_argument("source", nargs="?", default="-", help="File or - for stdin")

    # strip command
    parser_strip = subparsers.add_parser("strip", help="Presentation HTML to markup")
    parser_strip.add_argument("source", nargs="?", default="-", help="File or - for stdin")

    # show command
    parser_show = subparsers.add_parser("show", help="Print a stored document")
    parser_show.add_argument("title")
    parser_show.add_argument("--html", action="store_true", help="Print presentation form")

    # ls command
    subparsers.add_parser("ls", help="List stored documents")

    # save command
    parser_save = subparsers.add_parser("save", help="Send a document to the edit endpoint")
    parser_save.add_argument("title")
    parser_save.add_argument("source", nargs="?", default="-", help="File or - for stdin")
    parser_save.add_argument("--old-title", default="", help="Previous title when renaming")
    parser_save.add_argument("--tags", default="", help="Comma-separated tags")
    parser_save.add_argument("--metadata", default="", help="key: value lines")
    parser_save.add_argument("--token", default=None, help="Bearer token for the server")

    # serve command
    parser_serve = subparsers.add_parser("serve", help="Start local API server")
    parser_serve.add_argument(
        "--host", default=None,
        help="Host to bind to (default: from config, 127.0.0.1)"
    )
    parser_serve.add_argument(
        "--port", type=int, default=None,
        help="Port to bind to (default: from config, 8765)"
    )
    parser_serve.add_argument(
        "--token", default="auto",
        help="Bearer token (auto|<string>|none, default: auto)"
    )
    parser_serve.add_argument(
        "--cors", action="store_true",
        help="Enable CORS (default: false)"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    rt = build_runtime(
        wiki_path=args.wiki,
        config_path=args.config,
    )

    handlers = {
        "render": cmd_render,
        "strip": cmd_strip,
        "show": cmd_show,
        "ls": cmd_ls,
        "save": cmd_save,
        "serve": cmd_serve,
    }
    handler = handlers.get(args.cmd)

    if handler:
        try:
            exit_code = handler(args, rt)
            sys.exit(exit_code)
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        print(f"Unknown command: {args.cmd}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
