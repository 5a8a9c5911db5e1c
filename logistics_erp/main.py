"""
Command-line entry point for the logistics ERP core.

Runs the domain checks offline against JSON exports of the employee and
notification log tables.
"""

import os
import sys
import json
import argparse
from pathlib import Path
from typing import Optional, List, Any

from logistics_erp.config import get_settings, load_settings
from logistics_erp.utils.logger import setup_logging, get_logger, log_performance
from logistics_erp.models.employee_models import Employee
from logistics_erp.hr.hierarchy import has_circular_reporting, get_reporting_chain
from logistics_erp.notifications.models import NotificationLogEntry
from logistics_erp.notifications.stats import (
    calculate_stats, get_delivery_health, get_most_used_channel
)


EXIT_OK = 0
EXIT_CIRCULAR = 1
EXIT_ERROR = 2


def _load_rows(path: str) -> List[Any]:
    rows = json.loads(Path(path).read_text(encoding='utf-8'))
    if not isinstance(rows, list):
        raise ValueError(f"{path} must contain a JSON array of rows")
    for index, row in enumerate(rows):
        if not isinstance(row, dict):
            raise ValueError(f"{path}: row {index} is not a JSON object")
    return rows


@log_performance("cli.stats")
def run_stats(args, settings) -> int:
    """Print notification statistics for a notification log export."""
    logger = get_logger("cli")

    entries = [NotificationLogEntry.from_dict(row) for row in _load_rows(args.file)]
    stats = calculate_stats(entries, errors_limit=settings.notifications.common_errors_limit)
    health = get_delivery_health(stats, settings.notifications.health_thresholds)
    most_used = get_most_used_channel(stats)

    logger.info(f"Computed statistics for {stats.total_sent} notification log entries")

    report = stats.to_dict()
    report['delivery_health'] = health.value
    report['most_used_channel'] = most_used.value if most_used else None

    print(json.dumps(report, indent=2))
    return EXIT_OK


def run_check_reporting(args, settings) -> int:
    """Report whether a manager reassignment would create a reporting cycle."""
    logger = get_logger("cli")

    employees = [Employee.from_dict(row) for row in _load_rows(args.file)]
    circular = has_circular_reporting(args.employee_id, args.manager_id, employees)

    if circular:
        logger.warning(
            f"Assigning {args.manager_id} as manager would create a reporting cycle",
            extra={"employee_id": args.employee_id}
        )

    chain = get_reporting_chain(args.manager_id, employees) if args.manager_id else []
    print(json.dumps({
        'employee_id': args.employee_id,
        'proposed_manager_id': args.manager_id,
        'circular': circular,
        'manager_chain': ([args.manager_id] + chain) if args.manager_id else [],
    }, indent=2))

    return EXIT_CIRCULAR if circular else EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Logistics ERP domain checks")
    parser.add_argument("--env-file", help="Path to .env file")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Log level override")

    subparsers = parser.add_subparsers(dest="command", required=True)

    stats_parser = subparsers.add_parser("stats", help="Notification delivery statistics")
    stats_parser.add_argument("file", help="JSON array of notification log rows")
    stats_parser.set_defaults(handler=run_stats)

    reporting_parser = subparsers.add_parser(
        "check-reporting", help="Check a manager reassignment for reporting cycles"
    )
    reporting_parser.add_argument("file", help="JSON array of employee rows")
    reporting_parser.add_argument("employee_id", help="Employee being reassigned")
    reporting_parser.add_argument("manager_id", nargs="?", default=None,
                                  help="Proposed manager (omit to clear the manager)")
    reporting_parser.set_defaults(handler=run_check_reporting)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    if args.log_level:
        os.environ['LOG_LEVEL'] = args.log_level
        os.environ['LOG_CONSOLE_LEVEL'] = args.log_level

    try:
        settings = load_settings(args.env_file) if args.env_file else get_settings()

        setup_logging(settings.logging.to_logger_config())
        return args.handler(args, settings)

    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return EXIT_OK

    except (OSError, ValueError, KeyError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
