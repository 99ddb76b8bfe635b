from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from hrpayroll.models import AttendanceRecord, Employee, HRSettings, PayrollAdjustment, SalaryAdvance
from hrpayroll.models.attendance_record import ATTENDED_STATUSES

from .errors import InvalidInputError, NotFoundError
from .records import (
    AdvanceInstallment,
    AttendanceSummary,
    EmployeeRecord,
    PeriodAdjustments,
    RateConfig,
    to_decimal,
)
from .tax_tables import TaxTable
from .workdays import is_open_month, month_bounds, working_dates


def rate_config_from_settings(row: Optional[HRSettings]) -> RateConfig:
    if row is None:
        return RateConfig()
    tax_table = None
    if row.tax_enabled:
        tax_table = TaxTable.from_rows(row.tax_brackets) if row.tax_brackets else TaxTable.default()
    return RateConfig(
        monthly_grace_minutes=row.monthly_grace_minutes,
        daily_late_cap_minutes=row.daily_late_cap_minutes,
        workday_minutes=row.workday_minutes,
        late_minute_rate=None if row.late_minute_rate is None else to_decimal(row.late_minute_rate),
        absence_penalty_rate=to_decimal(row.absence_penalty_rate),
        overtime_rate=to_decimal(row.overtime_rate),
        social_insurance_rate=to_decimal(row.social_insurance_rate),
        tax_table=tax_table,
        weekend_days=tuple(row.weekend_days or ()),
        require_attendance_records=bool(row.require_attendance_records),
    )


def get_or_create_hr_settings(db: Session, company_id: int) -> HRSettings:
    row = db.query(HRSettings).filter(HRSettings.company_id == company_id).one_or_none()
    if row is None:
        row = HRSettings(company_id=company_id)
        db.add(row)
        db.flush()
    return row


def to_employee_record(employee: Employee) -> EmployeeRecord:
    return EmployeeRecord(
        employee_id=employee.id,
        name=employee.full_name,
        base_salary=None if employee.base_salary is None else to_decimal(employee.base_salary),
        allowances={name: to_decimal(value) for name, value in (employee.allowances or {}).items()},
        enable_auto_deduction=employee.enable_auto_deduction is not False,
        department=employee.department,
    )


class EmployeeRecordProvider:
    """Database-backed source of everything the calculator needs for one company."""

    def __init__(self, db: Session, company_id: int, today: Optional[date] = None):
        self.db = db
        self.company_id = company_id
        self.today = today or date.today()
        self._rates: Optional[RateConfig] = None

    def get_rate_config(self) -> RateConfig:
        if self._rates is None:
            row = self.db.query(HRSettings).filter(HRSettings.company_id == self.company_id).one_or_none()
            self._rates = rate_config_from_settings(row)
        return self._rates

    def get_active_employees(self) -> List[Employee]:
        return (
            self.db.query(Employee)
            .filter(Employee.company_id == self.company_id, Employee.status == "active")
            .order_by(Employee.id.asc())
            .all()
        )

    def get_employee(self, employee_id: int) -> Employee:
        employee = (
            self.db.query(Employee)
            .filter(Employee.id == employee_id, Employee.company_id == self.company_id)
            .one_or_none()
        )
        if employee is None:
            raise NotFoundError("Employee", employee_id)
        return employee

    def get_attendance_summary(self, employee_id: int, month: int, year: int) -> AttendanceSummary:
        rates = self.get_rate_config()
        period_start, period_end = month_bounds(year, month)
        open_month = is_open_month(year, month, self.today)
        if open_month:
            period_end = self.today

        records = (
            self.db.query(AttendanceRecord)
            .filter(
                AttendanceRecord.employee_id == employee_id,
                AttendanceRecord.work_date >= period_start,
                AttendanceRecord.work_date <= period_end,
            )
            .all()
        )
        if not records and rates.require_attendance_records:
            raise InvalidInputError(f"No attendance records for employee {employee_id} in {month:02d}/{year}")

        all_working = working_dates(year, month, rates.weekend_days)
        due_working = working_dates(year, month, rates.weekend_days, self.today.day if open_month else None)
        attended = {record.work_date for record in records if record.status in ATTENDED_STATUSES}

        return AttendanceSummary(
            working_days=len(all_working),
            present_days=len(attended),
            absent_days=sum(1 for day in due_working if day not in attended),
            late_minutes=sum(record.late_minutes or 0 for record in records),
            early_leave_minutes=sum(record.early_leave_minutes or 0 for record in records),
            overtime_hours=sum((to_decimal(record.overtime_hours) for record in records), Decimal("0")),
            working_days_elapsed=len(due_working) if open_month else None,
        )

    def get_adjustments(self, employee_id: int, month: int, year: int) -> PeriodAdjustments:
        rows = (
            self.db.query(PayrollAdjustment.kind, func.coalesce(func.sum(PayrollAdjustment.amount), 0))
            .filter(
                PayrollAdjustment.employee_id == employee_id,
                PayrollAdjustment.month == month,
                PayrollAdjustment.year == year,
                PayrollAdjustment.status == "approved",
            )
            .group_by(PayrollAdjustment.kind)
            .all()
        )
        totals = {kind: to_decimal(amount) for kind, amount in rows}
        return PeriodAdjustments(
            bonuses=totals.get("bonus", Decimal("0")),
            deductions=totals.get("deduction", Decimal("0")),
            advances=self.get_advance_installments(employee_id),
        )

    def get_advance_installments(self, employee_id: int) -> List[AdvanceInstallment]:
        """What each approved, unpaid advance takes out of this month's pay, capped at its balance."""
        advances = (
            self.db.query(SalaryAdvance)
            .filter(
                SalaryAdvance.company_id == self.company_id,
                SalaryAdvance.employee_id == employee_id,
                SalaryAdvance.status == "APPROVED",
                SalaryAdvance.is_paid_off.is_(False),
                SalaryAdvance.remaining_balance > 0,
            )
            .order_by(SalaryAdvance.id.asc())
            .all()
        )
        installments = []
        for advance in advances:
            balance = to_decimal(advance.remaining_balance)
            if advance.repayment_type == "installments":
                amount = to_decimal(advance.installment_amount)
            else:
                amount = balance
            amount = min(amount, balance)
            if amount > 0:
                installments.append(AdvanceInstallment(advance_id=advance.id, amount=amount))
        return installments
