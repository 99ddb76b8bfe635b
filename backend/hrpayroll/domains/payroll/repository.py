from __future__ import annotations

from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from hrpayroll.models import Employee, PayrollLine

from .errors import NotFoundError
from .records import AdvanceInstallment, PayrollLineValues, PayrollStatus, to_decimal
from .workdays import month_bounds

COMPONENT_FIELDS = (
    "base_salary",
    "total_allowances",
    "overtime_hours",
    "overtime_amount",
    "bonuses",
    "working_days",
    "present_days",
    "absent_days",
    "attendance_deduction",
    "late_minutes",
    "late_penalty",
    "early_leave_minutes",
    "early_leave_penalty",
    "other_deductions",
    "advance_deduction",
    "social_insurance",
    "tax_amount",
)


def get_line(db: Session, company_id: int, payroll_id: int, for_update: bool = False) -> PayrollLine:
    query = db.query(PayrollLine).filter(PayrollLine.id == payroll_id, PayrollLine.company_id == company_id)
    if for_update:
        query = query.with_for_update()
    line = query.one_or_none()
    if line is None:
        raise NotFoundError("Payroll", payroll_id)
    return line


def find_line(db: Session, employee_id: int, month: int, year: int) -> Optional[PayrollLine]:
    return (
        db.query(PayrollLine)
        .filter(PayrollLine.employee_id == employee_id, PayrollLine.month == month, PayrollLine.year == year)
        .one_or_none()
    )


def write_values(line: PayrollLine, values: PayrollLineValues) -> PayrollLine:
    """Copy computed components onto the row and refresh the derived totals."""
    for name in COMPONENT_FIELDS:
        setattr(line, name, getattr(values, name))
    line.allowances = {name: float(amount) for name, amount in values.allowances.items()}
    line.advance_details = [{"advance_id": item.advance_id, "amount": float(item.amount)} for item in values.advances]
    line.gross_salary = values.gross_salary
    line.total_deductions = values.total_deductions
    line.net_salary = values.net_salary
    return line


def new_line(company_id: int, values: PayrollLineValues) -> PayrollLine:
    period_start, period_end = month_bounds(values.year, values.month)
    line = PayrollLine(
        company_id=company_id,
        employee_id=values.employee_id,
        month=values.month,
        year=values.year,
        period_start=period_start,
        period_end=period_end,
        status=PayrollStatus.DRAFT.value,
    )
    return write_values(line, values)


def values_from_line(line: PayrollLine) -> PayrollLineValues:
    return PayrollLineValues(
        employee_id=line.employee_id,
        month=line.month,
        year=line.year,
        base_salary=to_decimal(line.base_salary),
        allowances={name: to_decimal(amount) for name, amount in (line.allowances or {}).items()},
        total_allowances=to_decimal(line.total_allowances),
        overtime_hours=to_decimal(line.overtime_hours),
        overtime_amount=to_decimal(line.overtime_amount),
        bonuses=to_decimal(line.bonuses),
        working_days=line.working_days or 0,
        present_days=line.present_days or 0,
        absent_days=line.absent_days or 0,
        attendance_deduction=to_decimal(line.attendance_deduction),
        late_minutes=line.late_minutes or 0,
        late_penalty=to_decimal(line.late_penalty),
        early_leave_minutes=line.early_leave_minutes or 0,
        early_leave_penalty=to_decimal(line.early_leave_penalty),
        other_deductions=to_decimal(line.other_deductions),
        advance_deduction=to_decimal(line.advance_deduction),
        advances=[
            AdvanceInstallment(advance_id=item["advance_id"], amount=to_decimal(item["amount"]))
            for item in (line.advance_details or [])
        ],
        social_insurance=to_decimal(line.social_insurance),
        tax_amount=to_decimal(line.tax_amount),
        status=PayrollStatus(line.status),
    )


def period_lines(db: Session, company_id: int, month: int, year: int) -> List[PayrollLine]:
    return (
        db.query(PayrollLine)
        .filter(PayrollLine.company_id == company_id, PayrollLine.month == month, PayrollLine.year == year)
        .order_by(PayrollLine.employee_id.asc())
        .all()
    )


def department_map(db: Session, company_id: int) -> Dict[int, Optional[str]]:
    rows = db.query(Employee.id, Employee.department).filter(Employee.company_id == company_id).all()
    return {employee_id: department for employee_id, department in rows}
