"""
Application entry point — wires dependencies and runs update/get per vendor.

Composition root: loads settings, creates the RootStores facade (which
creates the concrete adapters) and runs the requested command for each
selected vendor inside a LoggingExecutionContext.

Responsibilities:
  1. Parse the command line (command, vendors, root directory override)
  2. Load and validate configuration from environment
  3. Configure structlog
  4. Run each vendor, log one summary event per vendor
  5. Exit non-zero if any vendor failed
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

import structlog
from railway import LoggingExecutionContext
from railway.result import Result

from grootstore import __version__
from grootstore.config import AppSettings
from grootstore.domain.models import TrustPool, Vendor
from grootstore.stores import RootStores


def configure_structlog(log_level: str = "INFO") -> None:
    """
    Configure structlog for structured logging.

    Colored, human-readable console output with ISO timestamps.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="grootstore",
        description="Download and normalize vendor root certificate stores.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "command",
        choices=("update", "get"),
        help="update: download if absent, then parse; get: parse the existing store only",
    )
    parser.add_argument(
        "--vendor",
        dest="vendors",
        action="append",
        choices=[vendor.value for vendor in Vendor],
        help="Vendor to process (repeatable, default: all)",
    )
    parser.add_argument(
        "--root-directory",
        type=Path,
        default=None,
        help=(
            "Existing directory for store files (default: ./roots, or GROOTSTORE_ROOT_DIRECTORY); "
            "it is not created"
        ),
    )
    return parser


def run(
    stores: RootStores,
    command: str,
    vendors: Sequence[Vendor],
) -> dict[Vendor, Result[TrustPool]]:
    """Run `command` for each vendor in order and log its outcome."""
    log = structlog.get_logger()
    operation = stores.update if command == "update" else stores.get
    results: dict[Vendor, Result[TrustPool]] = {}
    for vendor in vendors:
        ctx = LoggingExecutionContext(operation=f"{command}:{vendor.value}")
        results[vendor] = (
            ctx.execute(lambda v=vendor: operation(v))
            .peek(
                lambda pool, v=vendor: log.info(
                    "store.ready", vendor=v.value, certificates=len(pool)
                )
            )
            .peek_failure(
                lambda failure, v=vendor: log.error(
                    "store.failed",
                    vendor=v.value,
                    error_code=failure.code.value,
                    message=failure.message,
                    cause=str(failure.exception) if failure.exception else None,
                )
            )
        )
    return results


def main(argv: Sequence[str] | None = None) -> None:
    """Parse arguments, wire dependencies, and run the command."""
    args = build_parser().parse_args(argv)

    try:
        overrides = {"root_directory": args.root_directory} if args.root_directory else {}
        settings = AppSettings(**overrides)
    except Exception as e:
        print(f"FATAL: Configuration error — {e}", file=sys.stderr)  # noqa: T201
        print(  # noqa: T201
            "The root directory must already exist: create ./roots or pass --root-directory.",
            file=sys.stderr,
        )
        sys.exit(1)

    configure_structlog(settings.log_level)
    log = structlog.get_logger()

    vendors = [Vendor(name) for name in args.vendors] if args.vendors else list(Vendor)
    log.info(
        "app.starting",
        version=__version__,
        command=args.command,
        vendors=[vendor.value for vendor in vendors],
        root_directory=str(settings.root_directory),
    )

    results = run(RootStores.from_settings(settings), args.command, vendors)

    failed = [vendor.value for vendor, result in results.items() if result.is_failure()]
    if failed:
        log.error("app.finished", failed=failed)
        sys.exit(1)
    log.info("app.finished", failed=[])


if __name__ == "__main__":
    main()
