"""Command-line entry point for the yatijapp terminal client.

Usage::

    yatijapp-tui [--api-endpoint URL] [--display-mode light|dark|auto]
                 [--config PATH] [--log-level LEVEL]

Flags take precedence over ``~/.yatijapp/config.toml`` which takes
precedence over the built-in defaults.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from yatijapp_tui.constants import (
    APP_NAME,
    APP_VERSION,
    DEFAULT_LOG_LEVEL,
    DISPLAY_MODES,
    LOG_FILE,
    TOKEN_FILE,
)
from yatijapp_tui.display.logging_config import setup_logging
from yatijapp_tui.errors import ConfigurationError

module_logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser."""
    parser = argparse.ArgumentParser(
        prog="yatijapp-tui",
        description=f"{APP_NAME} v{APP_VERSION} - terminal client for targets, actions and sessions",
    )
    parser.add_argument(
        "--api-endpoint",
        type=str,
        default=None,
        help="Root URL of the yatijapp API (overrides the config file)",
    )
    parser.add_argument(
        "--display-mode",
        type=str,
        default=None,
        choices=list(DISPLAY_MODES),
        help="Colour scheme (overrides the config file)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a config file (default: ~/.yatijapp/config.toml)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=DEFAULT_LOG_LEVEL,
        help=f"Logging level (default: {DEFAULT_LOG_LEVEL})",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"{APP_NAME} {APP_VERSION}",
    )
    return parser


def _run_tui(args: argparse.Namespace) -> int:
    """Resolve configuration, wire the clients and run the app.

    Returns the process exit code.
    """
    from yatijapp_tui.api import YatijappApi
    from yatijapp_tui.auth import AuthClient, TokenStore
    from yatijapp_tui.config import resolve_config
    from yatijapp_tui.tui.app import YatijappApp
    from yatijapp_tui.tui.context import AppContext

    try:
        config = resolve_config(
            args.config,
            api_endpoint=args.api_endpoint,
            display_mode=args.display_mode,
        )
    except ConfigurationError as exc:
        module_logger.error("Configuration error: %s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    auth = AuthClient(config.api.endpoint, TokenStore(TOKEN_FILE))
    ctx = AppContext(
        api_endpoint=config.api.endpoint,
        display_mode=config.preference.display_mode,
        api=YatijappApi(auth),
        auth=auth,
    )

    try:
        tui_app = YatijappApp(ctx)
        tui_app.run()
    except KeyboardInterrupt:
        module_logger.info("%s TUI interrupted by KeyboardInterrupt.", APP_NAME)
        return 0
    except Exception as e_fatal:
        module_logger.exception("%s TUI encountered an uncaught fatal error: %s", APP_NAME, e_fatal)
        print(f"Error: {e_fatal}", file=sys.stderr)
        return 1
    finally:
        module_logger.info("%s TUI finished.", APP_NAME)
    return tui_app.return_code or 0


def main(argv: Optional[List[str]] = None) -> None:
    """Program entry point: parse arguments and start the TUI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        log_file, log_level = setup_logging(args.log_level, LOG_FILE)
    except (OSError, ValueError) as exc:
        # dictConfig reports an unopenable log file as ValueError.
        print(f"Error: cannot set up logging in {LOG_FILE}: {exc}", file=sys.stderr)
        sys.exit(1)
    module_logger.info("%s v%s starting (log level %s, log file %s)", APP_NAME, APP_VERSION, log_level, log_file)

    sys.exit(_run_tui(args))
