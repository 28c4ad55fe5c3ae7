"""
Command-line interface for the time/expense report.

Usage:
    python -m src.cli.report_cli entries --fixture <file> --from <date> --to <date> [options]
    python -m src.cli.report_cli summary --fixture <file> --from <date> --to <date> [options]
"""

import argparse
import asyncio
import json
import sys
from datetime import date

from pydantic import ValidationError

from src.config.settings import LoaderSettings, load_settings
from src.core.models import ENTRY_KINDS, ENTRY_STATUSES, DateRange, Filters
from src.loading import StreamOrchestrator
from src.loading.sources import JsonFixtureSource
from src.observability.logger import configure_logging, get_logger, log_operation


logger = get_logger(__name__)


def build_filters(args, window: DateRange) -> Filters:
    """
    Build report filters from parsed arguments.

    Args:
        args: Command-line arguments
        window: Loaded date window, used when no narrower range is given
    """
    filter_range = window
    if args.filter_from or args.filter_to:
        filter_range = DateRange(
            from_date=args.filter_from or window.from_date,
            to_date=args.filter_to or window.to_date,
        )

    return Filters(
        date_range=filter_range,
        users=frozenset(args.user or []),
        kinds=frozenset(args.kind or []),
        statuses=frozenset(args.status or []),
    )


async def run_report(args, settings: LoaderSettings) -> dict:
    """
    Run one load cycle against the fixture and build the report payload.

    Args:
        args: Command-line arguments
        settings: Loader settings

    Returns:
        JSON-serializable report
    """
    source = JsonFixtureSource.from_file(args.fixture)
    orchestrator = StreamOrchestrator(source, source, source, settings=settings)
    window = DateRange(from_date=args.date_from, to_date=args.date_to)

    progress = await orchestrator.load(window)
    filtered = orchestrator.filter(build_filters(args, window))

    report = {
        "progress": progress.model_dump(mode="json"),
        "state": orchestrator.state.value,
        "matched": len(filtered),
        "loaded": len(orchestrator.entries),
    }

    if args.command == "summary":
        report["summary"] = [row.model_dump(mode="json") for row in orchestrator.summarize(filtered)]
    else:
        newest_first = sorted(filtered, key=lambda entry: entry.date, reverse=True)
        report["entries"] = [entry.model_dump(mode="json") for entry in newest_first]

    return report


def report_command(args) -> int:
    """
    Execute the entries/summary command.

    Args:
        args: Command-line arguments

    Returns:
        Exit code
    """
    try:
        settings = load_settings(args.config)
    except (FileNotFoundError, ValueError, ValidationError) as e:
        logger.error(f"Invalid loader configuration: {e}")
        return 1

    configure_logging(level=settings.log_level, format_type=settings.log_format)

    try:
        with log_operation("Time/expense report", logger=logger, command=args.command):
            report = asyncio.run(run_report(args, settings))
    except (FileNotFoundError, ValueError, ValidationError) as e:
        logger.error(f"Report failed: {e}")
        return 1

    payload = json.dumps(report, indent=2)
    if args.output:
        with open(args.output, "w") as f:
            f.write(payload + "\n")
        logger.info(f"Report written to {args.output}")
    else:
        print(payload)

    if report["state"] == "error":
        return 1
    return 0


def main(argv=None):
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(
        description="Time/expense report loader CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List approved time entries of November
  %(prog)s entries --fixture dispatches.json --from 2025-11-01 --to 2025-11-30 \\
      --kind time --status approved

  # Per-user totals for one technician
  %(prog)s summary --fixture dispatches.json --from 2025-11-01 --to 2025-11-30 --user 7
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    for name, help_text in (("entries", "List filtered entries"), ("summary", "Per-user totals")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--fixture", required=True, help="JSON fixture with dispatches, entries and users")
        sub.add_argument("--from", dest="date_from", required=True, type=date.fromisoformat,
                         help="First day of the load window (YYYY-MM-DD)")
        sub.add_argument("--to", dest="date_to", required=True, type=date.fromisoformat,
                         help="Last day of the load window (YYYY-MM-DD)")
        sub.add_argument("--filter-from", type=date.fromisoformat,
                         help="First day of the filter range (default: window start)")
        sub.add_argument("--filter-to", type=date.fromisoformat,
                         help="Last day of the filter range (default: window end)")
        sub.add_argument("--user", action="append", help="Restrict to a user id (repeatable)")
        sub.add_argument("--kind", action="append", choices=ENTRY_KINDS, help="Restrict to a kind (repeatable)")
        sub.add_argument("--status", action="append", choices=ENTRY_STATUSES,
                         help="Restrict to a status (repeatable)")
        sub.add_argument("--config", help="Loader settings YAML file")
        sub.add_argument("--output", help="Write the JSON report to this file instead of stdout")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.command in ("entries", "summary"):
        return report_command(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
