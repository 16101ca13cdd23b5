"""CLI entry point for sheetsync."""

import argparse
import asyncio
import json
import logging
import sys
import traceback
from datetime import datetime
from pathlib import Path

import yaml

from .config import Config, load_config
from .credentials import CredentialProvider
from .orchestrator import SheetSynchronizer, SyncResult
from .sheet.samples import build_log_row
from .transport import SheetTransport

logger = logging.getLogger(__name__)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "component": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = "".join(traceback.format_exception(*record.exc_info))

        return json.dumps(log_data)


def setup_logging(verbose: bool = False, log_level: str | None = None, json_output: bool = False) -> None:
    """Configure logging.

    Args:
        verbose: Enable debug logging (ignored if log_level is set).
        log_level: Explicit log level (warning, info, debug).
        json_output: Output logs as JSON lines for machine parsing.
    """
    if log_level:
        level_map = {
            "warning": logging.WARNING,
            "info": logging.INFO,
            "debug": logging.DEBUG,
        }
        level = level_map.get(log_level, logging.INFO)
    else:
        level = logging.DEBUG if verbose else logging.INFO

    handler = logging.StreamHandler()
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)

    logging.basicConfig(
        level=level,
        handlers=[handler],
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def report(result: SyncResult) -> int:
    """Print a workflow result and map it to an exit code."""
    print(f"{result.operation}: {result.status.value}")

    if not result.ok:
        print(f"Error: {result.error}", file=sys.stderr)
        return 1

    if result.operation in ("init", "append"):
        print(f"  Rows before: {result.rows_before}")
        print(f"  Rows added: {result.rows_added}")
        print(f"  Total rows: {result.total_rows}")
    elif result.operation == "reset":
        print(f"  Data rows removed: {result.rows_before}")
        print(f"  Rows remaining: {result.total_rows}")

    for outcome in result.propagation:
        state = "ok" if outcome.ok else f"failed ({outcome.error or outcome.status_code})"
        print(f"  {outcome.step}: {state}")

    return 0


async def _run(config: Config, operation: str) -> SyncResult:
    credentials = CredentialProvider.from_config(config.credentials)
    async with SheetTransport(config.remote) as transport:
        synchronizer = SheetSynchronizer(config, credentials, transport)

        if operation == "init":
            return await synchronizer.init()
        if operation == "append":
            row = build_log_row(
                "sheetsync append",
                config.remote.preview_root,
                config.remote.publish_root,
                generated_text="Row appended from the command line",
            )
            return await synchronizer.append([row])
        if operation == "reset":
            return await synchronizer.reset()
        return await synchronizer.refresh()


async def cmd_sync(args: argparse.Namespace) -> int:
    """Run one sheet workflow."""
    try:
        config = load_config(args.config)
    except (ValueError, yaml.YAMLError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    logger.debug(f"Sheet: {config.remote.source_url} ({config.sheet.strategy.value})")

    result = await _run(config, args.command)
    return report(result)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="sheetsync",
        description="Keep a remote JSON sheet document in sync",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to config file (default: built-in defaults)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["warning", "info", "debug"],
        default=None,
        help="Set log level explicitly (overrides -v/--verbose)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output logs as JSON for machine parsing",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    init_parser = subparsers.add_parser("init", help="Overwrite the sheet with sample rows")
    init_parser.set_defaults(func=cmd_sync)

    append_parser = subparsers.add_parser("append", help="Append a log row to the sheet")
    append_parser.set_defaults(func=cmd_sync)

    reset_parser = subparsers.add_parser(
        "reset", help="Clear all data rows and trigger preview/publish"
    )
    reset_parser.set_defaults(func=cmd_sync)

    refresh_parser = subparsers.add_parser(
        "refresh", help="Trigger cache-bust, preview and publish only"
    )
    refresh_parser.set_defaults(func=cmd_sync)

    args = parser.parse_args(argv)

    setup_logging(args.verbose, args.log_level, args.json)

    if not args.command:
        parser.print_help()
        return 1

    try:
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
