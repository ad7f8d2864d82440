#!/usr/bin/env python3
"""
Simulated API Server - command line entry point

Usage:
    api-server                          # Run until Ctrl+C
    api-server --max-iterations 5       # Stop after 5 request lines
    api-server --seed 42                # Reproducible interval
    api-server --config server.yaml     # Load settings from YAML
    api-server --async                  # Run on an asyncio event loop

stdout carries only the banner and request lines; logs go to stderr.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

import yaml

from api_server.config import LOG_LEVELS, load_config
from api_server.random_source import RandomSource
from api_server.server_loop import ServerLoop

logger = logging.getLogger("api_server")

EXIT_OK = 0
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="api-server",
        description="Simulated API server loop"
    )
    parser.add_argument(
        '--config', '-c',
        type=str,
        default=None,
        help='YAML config file (default: $API_SERVER_CONFIG)'
    )
    parser.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Seed for the interval draw (default: current time in ns)'
    )
    parser.add_argument(
        '--max-iterations', '-n',
        type=int,
        default=None,
        help='Stop after this many request lines (default: run forever)'
    )
    parser.add_argument(
        '--async',
        dest='use_async',
        action='store_true',
        help='Run the loop as an asyncio task'
    )
    parser.add_argument(
        '--log-level',
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help='Log level for stderr diagnostics (default: INFO)'
    )
    return parser


def setup_logging(level: str):
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(
            config_path=args.config,
            seed=args.seed,
            max_iterations=args.max_iterations,
            log_level=args.log_level,
        )
    except (ValueError, yaml.YAMLError) as e:
        setup_logging("INFO")
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG_ERROR

    setup_logging(config.log_level)

    server = ServerLoop(config, RandomSource(config.seed))

    try:
        if args.use_async:
            asyncio.run(server.run_async())
        else:
            server.run()
    except KeyboardInterrupt:
        logger.info("Stopping server loop...")
        return EXIT_INTERRUPTED
    finally:
        logger.info(f"Final status: {server.status().model_dump_json()}")

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
