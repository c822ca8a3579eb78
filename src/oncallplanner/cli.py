"""Command-line interface for the on-call planner."""

import argparse
import logging
import sys
from datetime import date, timedelta
from typing import Optional

from oncallplanner.domain.directory import Employee, EmployeeDirectory, load_directory
from oncallplanner.domain.errors import ConfigurationError, OnCallPlannerError
from oncallplanner.domain.models import AvailabilityRecord, OnCallSchedule
from oncallplanner.domain.rules import WeightRules, load_rules
from oncallplanner.io.spreadsheet import AvailabilityImporter
from oncallplanner.output.excel_exporter import ExcelExporter
from oncallplanner.output.ics_exporter import ICSExporter
from oncallplanner.output.load_report import LoadReportGenerator
from oncallplanner.output.pdf_generator import PDFGenerator
from oncallplanner.scheduling.cpsat_solver import SolverConfig
from oncallplanner.scheduling.scheduler import Scheduler, SolverType
from oncallplanner.validation.validator import ScheduleValidator

SAMPLE_NAMES = [
    "Anna", "Ben", "Cara", "David", "Eva", "Felix", "Greta", "Hannes",
    "Ida", "Jonas", "Klara", "Lukas", "Mia", "Noah", "Olga", "Paul",
]


def create_sample_availability(
    employee_count: int = 5,
    days: int = 28,
    start: Optional[date] = None,
) -> list[AvailabilityRecord]:
    """Create synthetic availability for demos.

    Args:
        employee_count: Number of employees.
        days: Number of consecutive days.
        start: First day; defaults to the first of next month.
    """
    if start is None:
        today = date.today()
        start = (today.replace(day=1) + timedelta(days=32)).replace(day=1)

    names = []
    for i in range(employee_count):
        name = SAMPLE_NAMES[i % len(SAMPLE_NAMES)]
        if i >= len(SAMPLE_NAMES):
            name = f"{name}{i // len(SAMPLE_NAMES) + 1}"
        names.append(name)

    records = []
    for offset in range(days):
        day = start + timedelta(days=offset)
        employees = {}
        for i, name in enumerate(names):
            available = (offset + i) % (i + 3) != 0
            # Every third employee never does weekends
            if i % 3 == 2 and day.weekday() >= 5:
                available = False
            employees[name] = available
        records.append(AvailabilityRecord(date=day, employees=employees))

    return records


def create_sample_directory(records: list[AvailabilityRecord]) -> EmployeeDirectory:
    names = []
    for record in records:
        for name in record.employees:
            if name not in names:
                names.append(name)
    return EmployeeDirectory(
        Employee(name=name, position="Safety Officer", phone=f"0151 - {58900000 + i:08d}")
        for i, name in enumerate(names)
    )


def build_rules(args: argparse.Namespace) -> WeightRules:
    """Rules from --rules, overridden by individual flags."""
    rules = load_rules(args.rules) if args.rules else WeightRules()

    custom = dict(rules.custom_weights)
    for item in args.custom_weight or []:
        day_text, _, weight_text = item.partition("=")
        try:
            custom[date.fromisoformat(day_text.strip())] = float(weight_text)
        except ValueError as exc:
            raise ConfigurationError(
                f"Invalid --custom-weight {item!r} (expected YYYY-MM-DD=WEIGHT)",
                field="custom_weights",
            ) from exc

    return WeightRules(
        weekend_weighting=rules.weekend_weighting and not args.no_weekend_weight,
        weekend_multiplier=(
            args.weekend_multiplier if args.weekend_multiplier is not None
            else rules.weekend_multiplier
        ),
        custom_weights=custom,
    )


def print_schedule(
    schedule: OnCallSchedule,
    stats: dict,
    records: list[AvailabilityRecord],
    rules: WeightRules,
) -> bool:
    """Print summary, assignments and validation; return validity."""
    print(f"\n{'=' * 60}")
    print(f"On-Call Schedule: {schedule.month_label()}")
    print(f"{'=' * 60}")
    print(f"  Days: {stats['total_days']} ({stats['unassigned_days']} unassigned)")
    print(f"  Employees: {stats['total_employees']}")
    print(f"  Total Weight: {stats['total_weight']:g}  Target Load: {stats['target_load']:.2f}")

    print("\nAssignments:")
    for a in schedule.assignments:
        phone = f"  {a.contact_info}" if a.contact_info else ""
        print(f"  {a.date.strftime('%d.%m.%Y')} {a.weekday:<11} {a.display_name}{phone}")

    metrics = stats["metrics"]
    print("\nLoads:")
    for name, load in stats["loads"].items():
        print(f"  {name}: {load:g} ({stats['shifts_per_employee'][name]} days)")
    print(f"  Spread: {metrics.spread:g}  Fairness Score: {metrics.fairness_score:.1f}/100")

    if schedule.warnings:
        print(f"\nWarnings ({len(schedule.warnings)}):")
        for warning in schedule.warnings[:10]:
            print(f"    - {warning}")
        if len(schedule.warnings) > 10:
            print(f"    ... and {len(schedule.warnings) - 10} more warnings")

    result = ScheduleValidator().validate(schedule, records, rules)
    if result.is_valid:
        print("\nValidation: PASSED")
    else:
        print(f"\nValidation: FAILED ({len(result.errors)} errors)")
        for error in result.errors[:5]:
            print(f"    - {error}")
        if len(result.errors) > 5:
            print(f"    ... and {len(result.errors) - 5} more errors")
    return result.is_valid


def write_outputs(
    schedule: OnCallSchedule,
    directory: Optional[EmployeeDirectory],
    args: argparse.Namespace,
) -> None:
    if args.pdf:
        print(f"\nGenerating PDF: {args.pdf}")
        PDFGenerator().generate(schedule, args.pdf, directory)
    if args.xlsx:
        print(f"Generating Excel: {args.xlsx}")
        ExcelExporter().export(schedule, args.xlsx)
    if args.ics:
        paths = ICSExporter().export(schedule, args.ics)
        print(f"Generating calendars: {len(paths)} .ics files in {args.ics}")
    if args.report:
        print(f"Generating load report: {args.report}")
        LoadReportGenerator().generate(schedule, args.report)


def run_schedule(
    records: list[AvailabilityRecord],
    rules: WeightRules,
    directory: Optional[EmployeeDirectory],
    args: argparse.Namespace,
) -> int:
    scheduler = Scheduler(
        rules=rules,
        directory=directory,
        solver_type=SolverType(args.solver),
        solver_config=SolverConfig(time_limit_seconds=args.time_limit),
        language=args.language,
    )
    schedule, stats = scheduler.generate_schedule_with_stats(records)
    valid = print_schedule(schedule, stats, records, rules)
    write_outputs(schedule, directory, args)
    return 0 if valid else 1


def run_generate(args: argparse.Namespace) -> int:
    """Generate a schedule from an availability workbook."""
    print(f"Reading availability from {args.availability}...")
    records = AvailabilityImporter(marker=args.marker).read(args.availability, args.sheet)
    rules = build_rules(args)
    directory = load_directory(args.directory) if args.directory else None
    return run_schedule(records, rules, directory, args)


def run_demo(args: argparse.Namespace) -> int:
    """Generate a schedule from synthetic availability."""
    start = date.fromisoformat(args.start) if args.start else None
    print(f"Generating demo schedule for {args.employees} employees over {args.days} days...")
    records = create_sample_availability(args.employees, args.days, start)
    rules = build_rules(args)
    directory = create_sample_directory(records)
    return run_schedule(records, rules, directory, args)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--rules", "-r",
        type=str,
        help="JSON rules file (weekend_weighting, weekend_multiplier, custom_weights)",
    )
    parser.add_argument(
        "--no-weekend-weight",
        action="store_true",
        help="Count weekend days like weekdays",
    )
    parser.add_argument(
        "--weekend-multiplier", "-w",
        type=float,
        default=None,
        help="Weight of a weekend day (default: 2)",
    )
    parser.add_argument(
        "--custom-weight",
        action="append",
        metavar="YYYY-MM-DD=WEIGHT",
        help="Override the weight of a single date (repeatable)",
    )
    parser.add_argument(
        "--solver", "-s",
        type=str,
        default="greedy",
        choices=[t.value for t in SolverType],
        help="Solver: greedy (default), cpsat (exact), hybrid (cpsat with greedy fallback)",
    )
    parser.add_argument(
        "--time-limit", "-t",
        type=float,
        default=10.0,
        help="CP-SAT solver time limit in seconds (default: 10)",
    )
    parser.add_argument(
        "--language",
        type=str,
        default="de",
        choices=["de", "en"],
        help="Weekday/month label language (default: de)",
    )
    parser.add_argument("--pdf", type=str, help="Output PDF file path")
    parser.add_argument("--xlsx", type=str, help="Output Excel file path")
    parser.add_argument(
        "--ics",
        type=str,
        metavar="DIR",
        help="Write one .ics calendar per employee into DIR",
    )
    parser.add_argument("--report", type=str, help="Output text load report path")
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log every assignment decision",
    )


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="On-Call Planner - fair on-call duty scheduling",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s generate availability.xlsx                 Schedule from a workbook
  %(prog)s generate availability.xlsx --pdf plan.pdf  Also write a PDF roster
  %(prog)s generate avail.xlsx --directory staff.json --rules rules.json
  %(prog)s generate avail.xlsx --solver cpsat         Minimise load spread exactly
  %(prog)s generate avail.xlsx --ics calendars/       One calendar file per employee

  %(prog)s demo                                       Demo with 5 employees, 28 days
  %(prog)s demo --employees 8 --days 31 --xlsx plan.xlsx
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate a schedule from an availability workbook",
    )
    generate_parser.add_argument("availability", type=str, help="Availability .xlsx file")
    generate_parser.add_argument("--sheet", type=str, help="Worksheet name (default: first)")
    generate_parser.add_argument(
        "--marker",
        type=str,
        default="x",
        help="Cell value marking availability (default: x)",
    )
    generate_parser.add_argument(
        "--directory", "-D",
        type=str,
        help="JSON employee directory (name, position, phone)",
    )
    _add_common_arguments(generate_parser)

    demo_parser = subparsers.add_parser("demo", help="Run demo schedule generation")
    demo_parser.add_argument(
        "--employees", "-e",
        type=int,
        default=5,
        help="Number of employees to generate (default: 5)",
    )
    demo_parser.add_argument(
        "--days", "-d",
        type=int,
        default=28,
        help="Number of days to schedule (default: 28)",
    )
    demo_parser.add_argument(
        "--start",
        type=str,
        help="First day YYYY-MM-DD (default: first of next month)",
    )
    _add_common_arguments(demo_parser)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "generate":
            return run_generate(args)
        return run_demo(args)
    except FileNotFoundError as exc:
        print(f"Error: file not found: {exc.filename}", file=sys.stderr)
        return 2
    except OnCallPlannerError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
