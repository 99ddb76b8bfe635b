from __future__ import annotations

from decimal import Decimal
from typing import Dict, Optional, Tuple

from .errors import InvalidInputError
from .records import (
    ZERO,
    AdvanceInstallment,
    AttendanceSummary,
    EmployeeRecord,
    PayrollLineValues,
    PayrollStatus,
    PeriodAdjustments,
    RateConfig,
    money,
    to_decimal,
)

DAYS_PER_MONTH = Decimal("30")
EARLY_LEAVE_GRACE_MINUTES = 60


class PayrollCalculator:
    """Pure monthly pay computation. Holds the rate config, performs no I/O."""

    def __init__(self, rates: RateConfig):
        self.rates = rates

    @staticmethod
    def _validate(employee: EmployeeRecord, attendance: AttendanceSummary, month: int, adjustments: PeriodAdjustments) -> None:
        if not 1 <= month <= 12:
            raise InvalidInputError(f"Month must be between 1 and 12, got {month}")
        if employee.base_salary is None or to_decimal(employee.base_salary) < 0:
            raise InvalidInputError(f"Employee {employee.employee_id} has a negative or missing base salary")
        for name, amount in employee.allowances.items():
            if to_decimal(amount) < 0:
                raise InvalidInputError(f"Allowance '{name}' for employee {employee.employee_id} is negative")
        counters = {
            "working_days": attendance.working_days,
            "absent_days": attendance.absent_days,
            "late_minutes": attendance.late_minutes,
            "early_leave_minutes": attendance.early_leave_minutes,
            "overtime_hours": attendance.overtime_hours,
        }
        for name, value in counters.items():
            if value is None or to_decimal(value) < 0:
                raise InvalidInputError(f"Attendance {name} must be >= 0 for employee {employee.employee_id}")
        if to_decimal(adjustments.bonuses) < 0 or to_decimal(adjustments.deductions) < 0:
            raise InvalidInputError(f"Adjustments for employee {employee.employee_id} must be >= 0")
        if any(to_decimal(advance.amount) < 0 for advance in adjustments.advances):
            raise InvalidInputError(f"Advance installments for employee {employee.employee_id} must be >= 0")

    def daily_rate(self, base_salary: Decimal) -> Decimal:
        return base_salary / DAYS_PER_MONTH

    def per_minute_rate(self, base_salary: Decimal) -> Decimal:
        if self.rates.late_minute_rate is not None:
            return to_decimal(self.rates.late_minute_rate)
        if self.rates.workday_minutes <= 0:
            raise InvalidInputError("workday_minutes must be positive to derive a per-minute rate")
        return base_salary / (DAYS_PER_MONTH * self.rates.workday_minutes)

    def attendance_deduction(self, base_salary: Decimal, absent_days: int) -> Decimal:
        raw = Decimal(absent_days) * self.daily_rate(base_salary) * to_decimal(self.rates.absence_penalty_rate)
        return money(min(raw, base_salary))

    def late_penalty(self, base_salary: Decimal, late_minutes: int, working_days: int) -> Decimal:
        over_grace = max(0, late_minutes - self.rates.monthly_grace_minutes)
        chargeable = min(over_grace, self.rates.daily_late_cap_minutes * working_days)
        return money(Decimal(chargeable) * self.per_minute_rate(base_salary))

    def hourly_rate(self, base_salary: Decimal) -> Decimal:
        if self.rates.workday_minutes <= 0:
            return ZERO
        return self.daily_rate(base_salary) / (Decimal(self.rates.workday_minutes) / 60)

    def overtime_amount(self, base_salary: Decimal, overtime_hours: Decimal) -> Decimal:
        return money(to_decimal(overtime_hours) * self.hourly_rate(base_salary) * to_decimal(self.rates.overtime_rate))

    def early_leave_penalty(self, base_salary: Decimal, early_leave_minutes: int) -> Decimal:
        # Nothing is charged up to an hour a month; past that, every full hour counts.
        if early_leave_minutes <= EARLY_LEAVE_GRACE_MINUTES:
            return ZERO
        return money(Decimal(early_leave_minutes // 60) * self.hourly_rate(base_salary))

    def statutory(self, base_salary: Decimal, total_allowances: Decimal) -> Tuple[Decimal, Decimal]:
        social_insurance = money(base_salary * to_decimal(self.rates.social_insurance_rate) / 100)
        tax_amount = ZERO
        if self.rates.tax_table is not None:
            tax_amount = money(self.rates.tax_table.monthly_tax(base_salary + total_allowances))
        return social_insurance, tax_amount

    def compute(
        self,
        employee: EmployeeRecord,
        attendance: AttendanceSummary,
        month: int,
        year: int,
        adjustments: Optional[PeriodAdjustments] = None,
    ) -> PayrollLineValues:
        adjustments = adjustments or PeriodAdjustments()
        self._validate(employee, attendance, month, adjustments)

        base_salary = money(employee.base_salary)
        allowances: Dict[str, Decimal] = {name: money(value) for name, value in employee.allowances.items()}
        total_allowances = money(sum(allowances.values(), ZERO))

        attendance_deduction = ZERO
        late_penalty = ZERO
        if employee.enable_auto_deduction:
            attendance_deduction = self.attendance_deduction(base_salary, attendance.absent_days)
            late_penalty = self.late_penalty(base_salary, attendance.late_minutes, attendance.working_days)

        social_insurance, tax_amount = self.statutory(base_salary, total_allowances)
        advances = [AdvanceInstallment(item.advance_id, money(item.amount)) for item in adjustments.advances]

        return PayrollLineValues(
            employee_id=employee.employee_id,
            month=month,
            year=year,
            base_salary=base_salary,
            allowances=allowances,
            total_allowances=total_allowances,
            overtime_hours=to_decimal(attendance.overtime_hours),
            overtime_amount=self.overtime_amount(base_salary, attendance.overtime_hours),
            bonuses=money(adjustments.bonuses),
            working_days=attendance.working_days,
            present_days=attendance.present_days,
            absent_days=attendance.absent_days,
            attendance_deduction=attendance_deduction,
            late_minutes=attendance.late_minutes,
            late_penalty=late_penalty,
            early_leave_minutes=attendance.early_leave_minutes,
            early_leave_penalty=self.early_leave_penalty(base_salary, attendance.early_leave_minutes),
            other_deductions=money(adjustments.deductions),
            advance_deduction=money(sum((item.amount for item in advances), ZERO)),
            advances=advances,
            social_insurance=social_insurance,
            tax_amount=tax_amount,
            status=PayrollStatus.DRAFT,
        )

    def project(
        self,
        employee: EmployeeRecord,
        attendance: AttendanceSummary,
        month: int,
        year: int,
        adjustments: Optional[PeriodAdjustments] = None,
    ) -> PayrollLineValues:
        """Estimate for the still-open month.

        Salary, allowances and statutory amounts accrue by the share of working
        days already elapsed; absences are not charged until the month closes.
        Advance installments accrue the same way. Late and early-leave
        penalties, overtime and adjustments count as accrued.
        """
        full = self.compute(employee, attendance, month, year, adjustments)

        elapsed = attendance.working_days if attendance.working_days_elapsed is None else attendance.working_days_elapsed
        if attendance.working_days > 0:
            ratio = Decimal(min(elapsed, attendance.working_days)) / Decimal(attendance.working_days)
        else:
            ratio = Decimal("1")

        allowances = {name: money(value * ratio) for name, value in full.allowances.items()}
        advances = [AdvanceInstallment(item.advance_id, money(item.amount * ratio)) for item in full.advances]
        return full.with_changes(
            base_salary=money(full.base_salary * ratio),
            allowances=allowances,
            total_allowances=money(sum(allowances.values(), ZERO)),
            absent_days=0,
            attendance_deduction=ZERO,
            advances=advances,
            advance_deduction=money(sum((item.amount for item in advances), ZERO)),
            social_insurance=money(full.social_insurance * ratio),
            tax_amount=money(full.tax_amount * ratio),
            status=PayrollStatus.PROJECTION,
            earned_ratio=ratio.quantize(Decimal("0.0001")),
        )
