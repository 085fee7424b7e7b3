"""
Elpris Chat CLI entry point.

Provides command-line interface for running the chat server and utility commands.
"""

import argparse
import asyncio
import sys
from pathlib import Path

from elpris_chat import __version__
from elpris_chat.config.logging import get_logger, setup_logging
from elpris_chat.config.settings import Settings, load_settings
from elpris_chat.llm.models import ChatFailure, ConfigurationError


def create_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser."""
    parser = argparse.ArgumentParser(
        prog="elpris-chat",
        description="Chat server answering questions about Swedish electricity prices",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Elpris Chat {__version__}",
    )

    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to .env file (default: .env in current directory)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Override logging level from config",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Serve command
    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP chat server",
    )
    serve_parser.add_argument(
        "--host",
        default=None,
        help="Interface to bind (default: SERVER_HOST from config)",
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to listen on (default: SERVER_PORT from config)",
    )

    # Ask command
    ask_parser = subparsers.add_parser(
        "ask",
        help="Ask one question and print the reply",
    )
    ask_parser.add_argument(
        "question",
        help='Question to ask, e.g. "Vad kostar elen i SE3 idag?"',
    )

    # Config command
    subparsers.add_parser(
        "config",
        help="Show current configuration",
    )

    return parser


def cmd_config(settings: Settings) -> int:
    """Show current configuration."""
    logger = get_logger(__name__)

    logger.info("\n=== Elpris Chat Configuration ===\n")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Log Level: {settings.log_level}")
    logger.info(f"Log File: {settings.log_file or 'None (console only)'}")
    logger.info(f"\nLLM Model: {settings.llm.model}")
    logger.info(f"LLM Fallback Model: {settings.llm.fallback_model}")
    logger.info(f"LLM API Key: {'Set' if settings.llm.api_key else 'Not set'}")
    logger.info(f"LLM Backoff (ms): {settings.llm.backoff_ms}")
    logger.info(f"\nMCP URL: {settings.tools.mcp_url}")
    logger.info(f"MCP Tool: {settings.tools.mcp_tool_name}")
    logger.info(f"\nServer: {settings.server.host}:{settings.server.port}")
    logger.info(f"CORS Origins: {', '.join(settings.server.cors_origins)}")

    return 0


def cmd_serve(args, settings: Settings) -> int:
    """Start the HTTP chat server."""
    logger = get_logger(__name__)

    import uvicorn

    from elpris_chat.api import create_app

    try:
        app = create_app(settings)
    except ConfigurationError as e:
        logger.error(f"{e}")
        return 1

    host = args.host or settings.server.host
    port = args.port or settings.server.port
    logger.info(f"Chat server listening on http://{host}:{port}/chat")
    # log_config=None: keep our logging setup instead of uvicorn's default
    uvicorn.run(app, host=host, port=port, log_config=None)
    return 0


async def cmd_ask(args, settings: Settings) -> int:
    """Run one chat turn and print the reply."""
    logger = get_logger(__name__)

    from elpris_chat.llm.orchestrator import ChatOrchestrator

    try:
        orchestrator = ChatOrchestrator.from_settings(settings)
    except ConfigurationError as e:
        logger.error(f"{e}")
        return 1

    try:
        result = await orchestrator.handle_turn(args.question)
    except ChatFailure as e:
        logger.error(f"Chat failed ({e.status_code}): {e}")
        return 1

    print(result.reply)
    return 0


def main() -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    # Load settings
    try:
        settings = load_settings(env_file=args.env_file)
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    # Override log level if specified
    if args.log_level:
        settings.log_level = args.log_level

    setup_logging(settings)

    # Execute command
    if args.command == "config":
        return cmd_config(settings)
    elif args.command == "serve":
        return cmd_serve(args, settings)
    elif args.command == "ask":
        return asyncio.run(cmd_ask(args, settings))
    else:
        # Default: show help
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
