"""Entry point for Batch Transfer.

Usage:
    python -m batch_transfer                      Run the default task file
    python -m batch_transfer --config tasks.json  Run a specific task file
    python -m batch_transfer --check              Validate and list tasks only
"""

import argparse
import sys
from pathlib import Path

from batch_transfer import __app_name__, __version__


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="batch-transfer",
        description="Copy or move files selected by name pattern and age, "
        "as described by a JSON task file.",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="task file (default: tasks.json in the application config folder)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="override the configured log level",
    )
    parser.add_argument(
        "-w",
        "--workers",
        type=int,
        help="number of tasks to run at once (overrides max_workers)",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="validate the configuration and list the tasks without running them",
    )
    parser.add_argument(
        "--version", action="version", version=f"{__app_name__} {__version__}"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, run the batch, return the exit code."""
    args = build_parser().parse_args(argv)
    if args.workers is not None and args.workers < 1:
        print("error: --workers must be at least 1", file=sys.stderr)
        return 2

    from batch_transfer.app import App

    app = App(
        config_path=args.config,
        log_level=args.log_level,
        max_workers=args.workers,
        check_only=args.check,
    )
    return app.run()


if __name__ == "__main__":
    sys.exit(main())
