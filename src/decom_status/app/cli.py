"""Command-line interface for decom-status.

This module implements the entry point: argument parsing, settings loading,
logging setup, alias resolution and runner lifecycle, mapping failures to
exit codes with actionable messages on stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import NoReturn

from decom_status.app.runner import ApplicationRunner
from decom_status.core.admin_client import AdminAPIError
from decom_status.core.alias_store import load_alias
from decom_status.core.config import ConfigurationError, load_main_config
from decom_status.utils.logging import configure_logging

__all__ = ["main", "parse_arguments"]

# Exit codes
EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 1
EXIT_RUNTIME_ERROR = 1


def parse_arguments(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    CLI Arguments:
        alias: Cluster alias from the mc configuration
        --config-dir: mc configuration directory (default: ~/.mc)
        --watch, -w: Poll every 10 seconds and redraw
        --config, -c: Optional YAML settings file
        --log-level: Override log level from settings
    """
    parser = argparse.ArgumentParser(
        prog="decom-status",
        description="Show progress and ETA of server pool decommissioning",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  decom-status prod
  decom-status --watch prod
  decom-status --config-dir /etc/mc --log-level DEBUG prod
        """,
    )

    _ = parser.add_argument(
        "alias",
        help="Cluster alias as configured with 'mc alias set'",
    )

    _ = parser.add_argument(
        "--config-dir",
        type=Path,
        default=None,
        help="Path to mc config directory (default: ~/.mc)",
        metavar="PATH",
    )

    _ = parser.add_argument(
        "--watch",
        "-w",
        action="store_true",
        help="Refresh the report every 10 seconds until interrupted",
    )

    _ = parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to optional YAML settings file",
        metavar="PATH",
    )

    _ = parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override log level from settings",
        metavar="LEVEL",
    )

    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> NoReturn:
    """Main entry point for decom-status.

    Exit Codes:
        0: Report printed, or watch mode interrupted
        1: Configuration/alias error or admin API failure
    """
    args = parse_arguments(argv)

    # Extract args with type annotations to avoid reportAny at argparse boundary
    alias_arg: str = args.alias  # pyright: ignore[reportAny]  # argparse boundary
    config_dir_arg: Path | None = args.config_dir  # pyright: ignore[reportAny]  # argparse boundary
    watch_arg: bool = args.watch  # pyright: ignore[reportAny]  # argparse boundary
    config_arg: Path | None = args.config  # pyright: ignore[reportAny]  # argparse boundary
    log_level_arg: str | None = args.log_level  # pyright: ignore[reportAny]  # argparse boundary

    try:
        config = load_main_config(config_arg)
        if log_level_arg is not None:
            config.application.log_level = log_level_arg

        configure_logging(
            log_level=config.application.log_level,
            enable_syslog=config.application.syslog_enabled,
        )

        alias = load_alias(alias_arg, config_dir_arg)
        runner = ApplicationRunner(alias=alias, config=config, watch=watch_arg)
        asyncio.run(runner.run())

    except ConfigurationError as exc:
        print(f"Configuration error:\n{exc}", file=sys.stderr)
        sys.exit(EXIT_CONFIG_ERROR)

    except AdminAPIError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(EXIT_RUNTIME_ERROR)

    except KeyboardInterrupt:
        print("\nStopped", file=sys.stderr)
        sys.exit(EXIT_SUCCESS)

    except Exception as exc:
        print(f"Unexpected error: {exc}", file=sys.stderr)
        logging.getLogger(__name__).exception("Unexpected error during application execution")
        sys.exit(EXIT_RUNTIME_ERROR)

    sys.exit(EXIT_SUCCESS)
