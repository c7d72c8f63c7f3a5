#!/usr/bin/env python3
"""
SupportDesk CLI.

    COMMAND         ALIASES         WHAT IT DOES
    -------         -------         ----------------------------------
    serve           start, up       Start the relay server (and web page)
    chat            tui, console    Open the terminal chat window
    ask                             Ask one question, stream the answer to stdout
    ping            health          Ping a running relay
"""

import argparse
import asyncio
import sys

from supportdesk import __version__


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_serve(args):
    """Start the relay server."""
    import uvicorn
    from supportdesk.config import get_config

    cfg = get_config()
    server_cfg = cfg.get("server", {})
    host = args.host or server_cfg.get("host", "0.0.0.0")
    port = args.port or server_cfg.get("port", 8000)

    print(f"  SupportDesk v{__version__} on {host}:{port}")
    print(f"  Provider: {cfg.get('provider', {}).get('url', '')}")
    print(f"  Model: {cfg.get('provider', {}).get('model', '')}")
    print()

    uvicorn.run(
        "supportdesk.main:app",
        host=host,
        port=port,
        reload=args.reload,
        log_level="info",
    )


def _session(args):
    from supportdesk.client.session import ChatSession
    from supportdesk.config import get_config

    session = ChatSession.from_config(get_config())
    if args.url:
        session.relay_url = args.url
    return session


def cmd_chat(args):
    """Launch the terminal chat window."""
    from supportdesk.tui.app import SupportChatApp
    SupportChatApp(_session(args)).run()


def cmd_ask(args):
    """One-shot question; the reply is printed as it streams."""
    session = _session(args)
    printed = 0

    def echo(messages):
        nonlocal printed
        last = messages[-1]
        if last.role != "assistant":
            return
        sys.stdout.write(last.content[printed:])
        sys.stdout.flush()
        printed = len(last.content)

    question = " ".join(args.question)
    session.store.subscribe(echo)
    reply = asyncio.run(session.send(question))
    print()
    if not reply:
        print("  ✗  No reply from the relay", file=sys.stderr)
        sys.exit(1)


def cmd_ping(args):
    """Ping a running relay."""
    import httpx
    from supportdesk.config import get_config

    cfg = get_config()
    server_cfg = cfg.get("server", {})
    url = args.url or f"http://localhost:{server_cfg.get('port', 8000)}"
    try:
        resp = httpx.get(f"{url.rstrip('/')}/health", timeout=5)
        resp.raise_for_status()
        data = resp.json()
        print(f"  ✓  {url} is up (v{data.get('version', '?')}, model {data.get('model', '?')})")
        if not data.get("provider_reachable"):
            print(f"  ⚠  Provider '{data.get('provider', '?')}' is not answering")
    except httpx.HTTPError as e:
        print(f"  ✗  Cannot reach SupportDesk at {url}: {e}")
        sys.exit(1)


# ---------------------------------------------------------------------------
# Parser with aliases
# ---------------------------------------------------------------------------

def _add_command(subparsers, names, help_text, func, setup_fn=None):
    """Register a command under multiple names."""
    p = subparsers.add_parser(names[0], help=help_text, aliases=names[1:])
    p.set_defaults(func=func)
    if setup_fn:
        setup_fn(p)
    return p


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="supportdesk",
        description="SupportDesk — streaming customer-support chat.",
        epilog="Run 'supportdesk <command> --help' for command-specific options.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version", "-V", action="version",
        version=f"supportdesk {__version__}",
    )

    sub = parser.add_subparsers(dest="command", metavar="<command>")

    def setup_serve(p):
        p.add_argument("--host", default=None, help="Override listen host")
        p.add_argument("--port", "-p", type=int, default=None, help="Override listen port")
        p.add_argument("--reload", action="store_true", help="Auto-reload on code changes (dev)")

    _add_command(sub, ["serve", "start", "up"],
                 "Start the SupportDesk relay server", cmd_serve, setup_serve)

    def setup_chat(p):
        p.add_argument("--url", "-u", default=None, help="Relay endpoint (default: client.relay_url)")

    _add_command(sub, ["chat", "tui", "console"],
                 "Open the terminal chat window", cmd_chat, setup_chat)

    def setup_ask(p):
        p.add_argument("question", nargs="+", help="Question to ask")
        p.add_argument("--url", "-u", default=None, help="Relay endpoint (default: client.relay_url)")

    _add_command(sub, ["ask"], "Ask one question and stream the answer", cmd_ask, setup_ask)

    def setup_ping(p):
        p.add_argument("--url", "-u", default=None, help="SupportDesk URL (default: http://localhost:<port>)")

    _add_command(sub, ["ping", "health"],
                 "Ping a running SupportDesk relay", cmd_ping, setup_ping)

    return parser


def main():
    parser = build_parser()
    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        return

    args.func(args)


if __name__ == "__main__":
    main()
