from __future__ import annotations

import csv
import io
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, TextIO

ReportRow = Dict[str, Any]

PAYROLL_COLUMNS = [
    "payroll_id",
    "employee_id",
    "employee_name",
    "department",
    "month",
    "year",
    "status",
    "base_salary",
    "total_allowances",
    "overtime_amount",
    "bonuses",
    "attendance_deduction",
    "late_penalty",
    "early_leave_penalty",
    "other_deductions",
    "advance_deduction",
    "social_insurance",
    "tax_amount",
    "gross_salary",
    "total_deductions",
    "net_salary",
    "payment_method",
    "payment_reference",
    "paid_at",
]


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Decimal):
        return f"{value:.2f}"
    return str(value)


def payroll_rows(lines: Iterable, departments: Optional[Dict[int, Optional[str]]] = None) -> List[ReportRow]:
    departments = departments or {}
    rows: List[ReportRow] = []
    for line in lines:
        rows.append(
            {
                "payroll_id": line.id,
                "employee_id": line.employee_id,
                "employee_name": line.employee.full_name if line.employee else None,
                "department": departments.get(line.employee_id),
                "month": line.month,
                "year": line.year,
                "status": line.status,
                "base_salary": line.base_salary,
                "total_allowances": line.total_allowances,
                "overtime_amount": line.overtime_amount,
                "bonuses": line.bonuses,
                "attendance_deduction": line.attendance_deduction,
                "late_penalty": line.late_penalty,
                "early_leave_penalty": line.early_leave_penalty,
                "other_deductions": line.other_deductions,
                "advance_deduction": line.advance_deduction,
                "social_insurance": line.social_insurance,
                "tax_amount": line.tax_amount,
                "gross_salary": line.gross_salary,
                "total_deductions": line.total_deductions,
                "net_salary": line.net_salary,
                "payment_method": line.payment_method,
                "payment_reference": line.payment_reference,
                "paid_at": line.paid_at,
            }
        )
    return rows


def write_csv(rows: Iterable[ReportRow], handle: TextIO, fieldnames: List[str] = PAYROLL_COLUMNS) -> None:
    writer = csv.DictWriter(handle, fieldnames=fieldnames)
    writer.writeheader()
    for row in rows:
        writer.writerow({key: _stringify(row.get(key)) for key in fieldnames})


def render_csv(rows: Iterable[ReportRow]) -> str:
    buffer = io.StringIO()
    write_csv(rows, buffer)
    return buffer.getvalue()


def export_csv(rows: Iterable[ReportRow], output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", newline="", encoding="utf-8") as handle:
        write_csv(rows, handle)
    return output_path
