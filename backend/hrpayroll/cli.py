from __future__ import annotations

import argparse
from pathlib import Path

from hrpayroll.core.config import settings
from hrpayroll.core.logging import bind_company, configure_logging
from hrpayroll.db.session import session_scope
from hrpayroll.domains.payroll.errors import PayrollError
from hrpayroll.domains.payroll.generator import PayrollGenerator, validate_period
from hrpayroll.domains.payroll.repository import department_map, period_lines
from hrpayroll.domains.payroll.summary import summarize
from hrpayroll.domains.reporting.exporter import export_csv, payroll_rows
from hrpayroll.seed.seed_data import seed


def cmd_seed(args: argparse.Namespace) -> None:
    with session_scope() as session:
        employees = seed(session, company_id=args.company, month=args.month, year=args.year)
        print(f"Seeded company {args.company} with {len(employees)} employees")


def cmd_generate(args: argparse.Namespace) -> None:
    with session_scope() as session:
        result = PayrollGenerator(session, args.company).generate(args.month, args.year, force_regenerate=args.force)
        counts = result.counts()
        print(
            f"Payroll {args.month:02d}/{args.year}: "
            f"{counts['success']} created, {counts['regenerated']} regenerated, "
            f"{counts['skipped']} skipped, {counts['failed']} failed"
        )
        for outcome in result.failed:
            print(f"  failed {outcome.employee_id} {outcome.employee_name}: {outcome.reason}")


def cmd_summary(args: argparse.Namespace) -> None:
    validate_period(args.month, args.year)
    with session_scope() as session:
        lines = period_lines(session, args.company, args.month, args.year)
        summary = summarize(lines, departments=department_map(session, args.company))
    print(f"Payroll summary {args.month:02d}/{args.year}")
    print(f"Employees: {summary.total_employees}")
    print(f"Gross: {summary.total_gross}")
    print(f"Deductions: {summary.total_deductions}")
    print(f"Social insurance: {summary.total_social_insurance}")
    print(f"Tax: {summary.total_tax}")
    print(f"Net: {summary.total_net}")
    for status, count in sorted(summary.by_status.items()):
        print(f"  {status}: {count}")
    for department, totals in sorted(summary.by_department.items()):
        print(f"  {department}: {totals.count} employees, net {totals.total_net}")


def cmd_export(args: argparse.Namespace) -> None:
    validate_period(args.month, args.year)
    with session_scope() as session:
        lines = period_lines(session, args.company, args.month, args.year)
        rows = payroll_rows(lines, department_map(session, args.company))
    path = export_csv(rows, Path(args.path))
    print(f"Exported {len(rows)} payroll lines to {path}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="HR payroll maintenance CLI")
    parser.add_argument("--company", type=int, default=1, help="Company id to operate on")
    sub = parser.add_subparsers(dest="command", required=True)

    seed_cmd = sub.add_parser("seed", help="Load demo employees, attendance and adjustments")
    seed_cmd.add_argument("--month", type=int)
    seed_cmd.add_argument("--year", type=int)
    seed_cmd.set_defaults(func=cmd_seed)

    generate = sub.add_parser("generate", help="Generate payroll lines for every active employee")
    generate.add_argument("month", type=int)
    generate.add_argument("year", type=int)
    generate.add_argument("--force", action="store_true", help="Regenerate existing unpaid lines")
    generate.set_defaults(func=cmd_generate)

    summary = sub.add_parser("summary", help="Print totals for a payroll month")
    summary.add_argument("month", type=int)
    summary.add_argument("year", type=int)
    summary.set_defaults(func=cmd_summary)

    export = sub.add_parser("export", help="Export a payroll month to CSV")
    export.add_argument("month", type=int)
    export.add_argument("year", type=int)
    export.add_argument("path")
    export.set_defaults(func=cmd_export)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(settings.log_level, json_logs=False)
    bind_company(args.company)
    try:
        args.func(args)
    except PayrollError as exc:
        parser.exit(1, f"error: {exc.message}\n")


if __name__ == "__main__":
    main()
