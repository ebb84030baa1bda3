"""
Command line entry point for gemini-gateway.
"""

from __future__ import annotations

import argparse
from typing import List, Optional

import uvicorn

from .core import get_logger, get_settings, setup_logging
from .main import create_app


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gemini-gateway",
        description="OpenAI compatible HTTP gateway for Gemini Code Assist",
    )
    parser.add_argument("-p", "--port", type=int, help="Port to listen on")
    parser.add_argument("-H", "--host", help="Host to bind to")
    parser.add_argument("-m", "--model", help="Default model")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    settings = get_settings()

    # Command line flags override the environment
    if args.port:
        settings.server.port = args.port
    if args.host:
        settings.server.host = args.host
    if args.model:
        settings.gemini.default_model = args.model
    if args.verbose:
        settings.logging.level = "DEBUG"
        setup_logging(settings.logging)

    logger = get_logger(__name__)
    logger.info(
        "Listening",
        url=f"http://{settings.server.host}:{settings.server.port}",
        default_model=settings.gemini.default_model,
    )

    uvicorn.run(
        create_app(settings),
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.logging.level.lower(),
        access_log=False,  # We handle logging ourselves
    )


if __name__ == "__main__":
    main()
