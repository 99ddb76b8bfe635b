from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Dict, List, Optional

from .tax_tables import TaxTable

CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def money(value) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


class PayrollStatus(str, Enum):
    DRAFT = "DRAFT"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    PAID = "PAID"
    CANCELLED = "CANCELLED"
    PROJECTION = "PROJECTION"  # never persisted


@dataclass
class EmployeeRecord:
    employee_id: int
    name: str
    base_salary: Decimal
    allowances: Dict[str, Decimal] = field(default_factory=dict)
    enable_auto_deduction: bool = True
    department: Optional[str] = None


@dataclass
class AttendanceSummary:
    working_days: int
    present_days: int = 0
    absent_days: int = 0
    late_minutes: int = 0
    early_leave_minutes: int = 0
    overtime_hours: Decimal = ZERO
    working_days_elapsed: Optional[int] = None  # set for the still-open month


@dataclass
class AdvanceInstallment:
    advance_id: int
    amount: Decimal


@dataclass
class PeriodAdjustments:
    bonuses: Decimal = ZERO
    deductions: Decimal = ZERO
    advances: List[AdvanceInstallment] = field(default_factory=list)  # installments due this month


@dataclass
class RateConfig:
    monthly_grace_minutes: int = 60
    daily_late_cap_minutes: int = 480
    workday_minutes: int = 480
    late_minute_rate: Optional[Decimal] = None
    absence_penalty_rate: Decimal = Decimal("1")
    overtime_rate: Decimal = Decimal("1.5")
    social_insurance_rate: Decimal = ZERO  # percent
    tax_table: Optional[TaxTable] = None   # None disables tax
    weekend_days: tuple = (4, 5)
    require_attendance_records: bool = False


@dataclass
class PayrollLineValues:
    """Computed pay for one employee and one month.

    Gross, total deductions and net are properties so they can never drift
    from the components they are derived from.
    """

    employee_id: int
    month: int
    year: int
    base_salary: Decimal
    allowances: Dict[str, Decimal] = field(default_factory=dict)
    total_allowances: Decimal = ZERO
    overtime_hours: Decimal = ZERO
    overtime_amount: Decimal = ZERO
    bonuses: Decimal = ZERO
    working_days: int = 0
    present_days: int = 0
    absent_days: int = 0
    attendance_deduction: Decimal = ZERO
    late_minutes: int = 0
    late_penalty: Decimal = ZERO
    early_leave_minutes: int = 0
    early_leave_penalty: Decimal = ZERO
    other_deductions: Decimal = ZERO
    advance_deduction: Decimal = ZERO
    advances: List[AdvanceInstallment] = field(default_factory=list)
    social_insurance: Decimal = ZERO
    tax_amount: Decimal = ZERO
    status: PayrollStatus = PayrollStatus.DRAFT
    earned_ratio: Optional[Decimal] = None

    @property
    def gross_salary(self) -> Decimal:
        return money(self.base_salary + self.total_allowances + self.overtime_amount + self.bonuses)

    @property
    def total_deductions(self) -> Decimal:
        return money(
            self.attendance_deduction
            + self.late_penalty
            + self.early_leave_penalty
            + self.other_deductions
            + self.advance_deduction
        )

    @property
    def net_salary(self) -> Decimal:
        return money(self.gross_salary - self.total_deductions - self.social_insurance - self.tax_amount)

    @property
    def is_negative(self) -> bool:
        return self.net_salary < 0

    def with_changes(self, **changes) -> "PayrollLineValues":
        return replace(self, **changes)
