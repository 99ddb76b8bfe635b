from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional

from .records import ZERO, money, to_decimal

UNASSIGNED_DEPARTMENT = "Unassigned"


def _status_value(status) -> str:
    return getattr(status, "value", status)


@dataclass
class DepartmentTotals:
    count: int = 0
    total_net: Decimal = ZERO


@dataclass
class PayrollSummary:
    total_employees: int = 0
    total_base_salary: Decimal = ZERO
    total_allowances: Decimal = ZERO
    total_deductions: Decimal = ZERO
    total_overtime: Decimal = ZERO
    total_bonuses: Decimal = ZERO
    total_social_insurance: Decimal = ZERO
    total_tax: Decimal = ZERO
    total_gross: Decimal = ZERO
    total_net: Decimal = ZERO
    by_status: Dict[str, int] = field(default_factory=dict)
    by_department: Dict[str, DepartmentTotals] = field(default_factory=dict)


def summarize(lines: Iterable, departments: Optional[Mapping[int, Optional[str]]] = None) -> PayrollSummary:
    """Reduce payroll lines into batch totals.

    ``lines`` may be ORM rows or ``PayrollLineValues``; scoping by period is the
    caller's job. ``departments`` maps employee id to department name and enables
    the per-department breakdown.
    """
    summary = PayrollSummary()
    for line in lines:
        summary.total_employees += 1
        summary.total_base_salary += to_decimal(line.base_salary)
        summary.total_allowances += to_decimal(line.total_allowances)
        summary.total_deductions += to_decimal(line.total_deductions)
        summary.total_overtime += to_decimal(line.overtime_amount)
        summary.total_bonuses += to_decimal(line.bonuses)
        summary.total_social_insurance += to_decimal(line.social_insurance)
        summary.total_tax += to_decimal(line.tax_amount)
        summary.total_gross += to_decimal(line.gross_salary)
        summary.total_net += to_decimal(line.net_salary)

        status = _status_value(line.status)
        summary.by_status[status] = summary.by_status.get(status, 0) + 1

        if departments is not None:
            name = departments.get(line.employee_id) or UNASSIGNED_DEPARTMENT
            bucket = summary.by_department.setdefault(name, DepartmentTotals())
            bucket.count += 1
            bucket.total_net += to_decimal(line.net_salary)

    for attr in (
        "total_base_salary",
        "total_allowances",
        "total_deductions",
        "total_overtime",
        "total_bonuses",
        "total_social_insurance",
        "total_tax",
        "total_gross",
        "total_net",
    ):
        setattr(summary, attr, money(getattr(summary, attr)))
    for bucket in summary.by_department.values():
        bucket.total_net = money(bucket.total_net)
    return summary


@dataclass
class MonthEntry:
    month: int
    net_salary: Decimal
    status: str


@dataclass
class EmployeeYearTotals:
    employee_id: int
    months: List[MonthEntry] = field(default_factory=list)
    base_salary: Decimal = ZERO
    allowances: Decimal = ZERO
    deductions: Decimal = ZERO
    overtime: Decimal = ZERO
    bonuses: Decimal = ZERO
    gross: Decimal = ZERO
    net: Decimal = ZERO


def annual_report(lines: Iterable) -> List[EmployeeYearTotals]:
    by_employee: Dict[int, EmployeeYearTotals] = {}
    for line in lines:
        totals = by_employee.setdefault(line.employee_id, EmployeeYearTotals(employee_id=line.employee_id))
        totals.months.append(
            MonthEntry(month=line.month, net_salary=money(line.net_salary), status=_status_value(line.status))
        )
        totals.base_salary += to_decimal(line.base_salary)
        totals.allowances += to_decimal(line.total_allowances)
        totals.deductions += to_decimal(line.total_deductions)
        totals.overtime += to_decimal(line.overtime_amount)
        totals.bonuses += to_decimal(line.bonuses)
        totals.gross += to_decimal(line.gross_salary)
        totals.net += to_decimal(line.net_salary)

    report = []
    for employee_id in sorted(by_employee):
        totals = by_employee[employee_id]
        totals.months.sort(key=lambda entry: entry.month)
        report.append(totals)
    return report
