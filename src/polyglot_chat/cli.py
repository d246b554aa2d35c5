"""
Command-line interface for the Polyglot Chat relay.

Provides CLI commands for relay management:
- run: Start the relay server
- config: Print the effective configuration
- translate: Translate one piece of text through the configured gateway

Usage:
    polyglot-chat run [--host HOST] [--port PORT] [--echo | --no-echo]
    polyglot-chat config
    polyglot-chat translate "hello" --from en --to fr

Environment Variables:
    CHAT_HOST: Host to bind the relay (default: 0.0.0.0)
    CHAT_PORT: Port for the relay (default: 8080, auto-discovers if in use)
    CHAT_ECHO_TO_SENDER: Deliver messages back to their sender (default: false)
    AZURE_API_ENDPOINT / AZURE_API_KEY / AZURE_REGION: Translator credentials
"""

import argparse
import asyncio
import sys

from polyglot_chat.config import config, print_config_summary
from polyglot_chat.logging_setup import configure_logging


def cmd_run(args: argparse.Namespace) -> int:
    """
    Run the relay server.

    Configuration Priority:
        1. CLI arguments (--host, --port, --echo/--no-echo)
        2. Environment variables and config/server.ini (see config.py)
        3. Default values (0.0.0.0:8080, no echo)

    Port Auto-Discovery:
        If the port is already in use the server picks the first free port
        in 8080-8179.  Pass an explicit ``--port`` together with
        ``--no-discover`` to fail instead.

    Returns:
        0 on clean shutdown (Ctrl+C), 1 on startup error
    """
    from polyglot_chat.api.server import start_server

    configure_logging(config.logging)

    echo = getattr(args, "echo", None)
    if echo is not None:
        config.relay.echo_to_sender = echo

    try:
        start_server(
            host=getattr(args, "host", None),
            port=getattr(args, "port", None),
            auto_discover=not getattr(args, "no_discover", False),
            cfg=config,
        )
        return 0
    except KeyboardInterrupt:
        print("\nRelay stopped.")
        return 0
    except Exception as e:
        print(f"Error starting relay: {e}", file=sys.stderr)
        return 1


def cmd_config(args: argparse.Namespace) -> int:
    """Print the effective configuration."""
    print_config_summary()
    return 0


def cmd_translate(args: argparse.Namespace) -> int:
    """
    Translate one string with the configured gateway and print the result.

    Useful to check credentials without starting the relay.  Like the relay
    itself, a provider failure prints the input text unchanged (the reason
    is logged to stderr).
    """
    from polyglot_chat.translation import TranslationGatewayConfig, build_gateway

    configure_logging(config.logging)
    gateway_config = TranslationGatewayConfig.from_settings(config.translation)
    if not gateway_config.is_usable:
        print(
            "Warning: translation is not configured; output equals input.",
            file=sys.stderr,
        )
    gateway = build_gateway(gateway_config)

    async def _run() -> str:
        await gateway.open()
        try:
            return await gateway.translate(args.text, args.from_lang, args.to_lang)
        finally:
            await gateway.aclose()

    print(asyncio.run(_run()))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="polyglot-chat",
        description="Polyglot Chat - a chat relay that translates every message",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # run command
    run_parser = subparsers.add_parser(
        "run",
        help="Run the relay server",
        description=(
            "Start the WebSocket relay. "
            "If the port is in use, automatically finds an available port in the range."
        ),
    )
    run_parser.add_argument(
        "--port",
        "-p",
        type=int,
        help="Relay port (default: 8080, or CHAT_PORT env var). Auto-discovers if in use.",
    )
    run_parser.add_argument(
        "--host",
        type=str,
        help="Host to bind to (default: 0.0.0.0, or CHAT_HOST env var)",
    )
    run_parser.add_argument(
        "--no-discover",
        action="store_true",
        help="Fail instead of picking another port when the port is in use",
    )
    echo_group = run_parser.add_mutually_exclusive_group()
    echo_group.add_argument(
        "--echo",
        dest="echo",
        action="store_true",
        default=None,
        help="Deliver each message back to its sender too",
    )
    echo_group.add_argument(
        "--no-echo",
        dest="echo",
        action="store_false",
        help="Never deliver a message back to its sender",
    )
    run_parser.set_defaults(func=cmd_run, echo=None)

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="Show the effective configuration",
    )
    config_parser.set_defaults(func=cmd_config)

    # translate command
    translate_parser = subparsers.add_parser(
        "translate",
        help="Translate text with the configured gateway",
    )
    translate_parser.add_argument("text", help="Text to translate")
    translate_parser.add_argument("--from", dest="from_lang", required=True, help="Source language")
    translate_parser.add_argument("--to", dest="to_lang", required=True, help="Target language")
    translate_parser.set_defaults(func=cmd_translate)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
