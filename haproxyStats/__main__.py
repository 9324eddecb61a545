"""
Main entry point for the haproxyStats package when run as a module.

Uses Python 3.10+ type annotations.
"""

import csv
import sys
import logging
from collections.abc import Sequence
from typing import Optional

from dotenv import load_dotenv

from haproxyStats.config import load_run_config
from haproxyStats.converter import StatsConverter
from haproxyStats.logging_config import configure_logging
from haproxyStats.errors import HaproxyStatsError, UsageError

# Set up logger
logger = logging.getLogger("haproxyStats")

EXIT_USAGE = 2


def setup_argparse():
    """
    Set up command-line argument parsing.
    """
    import argparse

    parser = argparse.ArgumentParser(
        prog="haproxy-stats",
        description="Convert an HAProxy CSV statistics export to JSON documents "
                    "and print them or index them in Elasticsearch"
    )

    # Exactly one file is accepted; arity is checked after parsing
    parser.add_argument(
        "files",
        nargs="*",
        metavar="FILE",
        help="Statistics export named <unix-epoch>.<hostname>.<name>.csv"
    )

    parser.add_argument(
        "--config",
        help="Path to configuration file (INI, YAML or JSON)"
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on rows whose column count differs from the header"
    )

    # Logging options
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error", "critical"],
        default="info",
        help="Set logging level (default: info)"
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Output logs in JSON format"
    )
    parser.add_argument(
        "--log-file",
        help="Write logs to specified file"
    )

    return parser


def get_input_file(files: Sequence[str]) -> str:
    """
    Return the single input file.

    Raises:
        UsageError: Unless exactly one file was given
    """
    if len(files) != 1:
        raise UsageError(f"expected exactly one statistics file, got {len(files)}")
    return files[0]


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main entry point for the haproxyStats module.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = setup_argparse()
    args = parser.parse_args(argv)

    try:
        csv_file = get_input_file(args.files)
    except UsageError as e:
        parser.print_usage(sys.stderr)
        print(f"{parser.prog}: error: {e.message}", file=sys.stderr)
        return EXIT_USAGE

    try:
        configure_logging(
            level=args.log_level.upper(),
            json_output=args.json_logs,
            log_file=args.log_file
        )

        load_dotenv()
        config = load_run_config(args.config)
        logger.debug("Output mode: %s", config.output or "stdout")

        converter = StatsConverter(config, strict=args.strict)
        summary = converter.convert(csv_file)
        logger.debug("Summary: %s", summary.as_dict())
        return 0

    except HaproxyStatsError as e:
        logger.error("%s: %s", type(e).__name__, e.message)
        for suggestion in e.get_suggestions():
            logger.info("  - %s", suggestion)
        return 1
    except FileNotFoundError as e:
        logger.error("File not found: %s", e)
        return 1
    except OSError as e:
        logger.error("Cannot read %s: %s", csv_file, e)
        return 1
    except (UnicodeDecodeError, csv.Error) as e:
        logger.error("Cannot parse %s: %s", csv_file, e)
        return 1
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        return 130  # Standard Unix exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
