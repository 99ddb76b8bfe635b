from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from hrpayroll.models import PayrollLine

from .calculator import PayrollCalculator
from .provider import EmployeeRecordProvider, to_employee_record
from .records import PayrollLineValues
from .repository import find_line, values_from_line


@dataclass
class CurrentMonthPayroll:
    values: PayrollLineValues
    payroll_id: Optional[int] = None  # None means the values are a projection
    line: Optional[PayrollLine] = None


class PayrollProjector:
    def __init__(self, db: Session, company_id: int, provider: Optional[EmployeeRecordProvider] = None, today: Optional[date] = None):
        self.db = db
        self.company_id = company_id
        self.provider = provider or EmployeeRecordProvider(db, company_id, today=today)

    @property
    def today(self) -> date:
        return self.provider.today

    def project(self, employee_id: int) -> PayrollLineValues:
        """Estimate the open month from attendance to date. Nothing is persisted."""
        employee = self.provider.get_employee(employee_id)
        month, year = self.today.month, self.today.year
        attendance = self.provider.get_attendance_summary(employee.id, month, year)
        adjustments = self.provider.get_adjustments(employee.id, month, year)
        calculator = PayrollCalculator(self.provider.get_rate_config())
        return calculator.project(to_employee_record(employee), attendance, month, year, adjustments)

    def current_month(self, employee_id: int) -> CurrentMonthPayroll:
        employee = self.provider.get_employee(employee_id)
        existing = find_line(self.db, employee.id, self.today.month, self.today.year)
        if existing is not None:
            return CurrentMonthPayroll(values=values_from_line(existing), payroll_id=existing.id, line=existing)
        return CurrentMonthPayroll(values=self.project(employee.id))
