"""Command-line front door for spelunktui.

With no subcommand the interactive search UI starts; ``spelunktui config``
runs the setup wizard instead. Startup failures exit with a message rather
than a traceback.
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence

from .config_wizard import run_config_wizard
from .errors import ConfigMissingError, SpelunkError
from .log import configure_logging
from .runtime import run_app

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spelunktui",
        description="Run Splunk searches and browse their results in the terminal.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Verbosity of the log file (default: INFO).",
    )
    subcommands = parser.add_subparsers(dest="command")
    subcommands.add_parser("config", help="Set the Splunk URL, token, and SSL verification.")
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Parse CLI arguments and run the wizard or the TUI."""
    args = build_parser().parse_args(argv)
    log_path = configure_logging(args.log_level)
    logger.info("spelunktui starting (command=%s, log=%s)", args.command or "tui", log_path)

    if args.command == "config":
        try:
            run_config_wizard()
        except (EOFError, KeyboardInterrupt):
            raise SystemExit("\nConfiguration aborted.") from None
        except OSError as exc:
            raise SystemExit(f"Failed to write configuration: {exc}") from None
        return

    try:
        run_app()
    except ConfigMissingError as exc:
        raise SystemExit(str(exc)) from None
    except SpelunkError as exc:
        raise SystemExit(f"Error: {exc}") from None


if __name__ == "__main__":
    main()
