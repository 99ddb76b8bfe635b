from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hrpayroll.core.logging import get_logger
from hrpayroll.core.observability import get_meter, get_tracer
from hrpayroll.models import Employee, PayrollLine

from .calculator import PayrollCalculator
from .errors import DuplicateError, InvalidInputError, PayrollError
from .provider import EmployeeRecordProvider, to_employee_record
from .records import PayrollStatus
from .repository import find_line, new_line

logger = get_logger(__name__)
tracer = get_tracer(__name__)
generated_counter = get_meter(__name__).create_counter(
    "payroll_lines_generated", description="Payroll lines processed by bulk generation, by outcome"
)

MIN_YEAR = 2000
MAX_YEAR = 2100


def validate_period(month: int, year: int) -> None:
    if not 1 <= month <= 12:
        raise InvalidInputError(f"Month must be between 1 and 12, got {month}")
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise InvalidInputError(f"Year must be between {MIN_YEAR} and {MAX_YEAR}, got {year}")


@dataclass
class GenerationOutcome:
    employee_id: int
    employee_name: str
    payroll_id: Optional[int] = None
    error: Optional[str] = None
    reason: Optional[str] = None


@dataclass
class GenerationResult:
    month: int
    year: int
    success: List[GenerationOutcome] = field(default_factory=list)
    skipped: List[GenerationOutcome] = field(default_factory=list)
    regenerated: List[GenerationOutcome] = field(default_factory=list)
    failed: List[GenerationOutcome] = field(default_factory=list)

    def counts(self) -> Dict[str, int]:
        return {
            "success": len(self.success),
            "skipped": len(self.skipped),
            "regenerated": len(self.regenerated),
            "failed": len(self.failed),
        }


class PayrollGenerator:
    def __init__(self, db: Session, company_id: int, provider: Optional[EmployeeRecordProvider] = None, today: Optional[date] = None):
        self.db = db
        self.company_id = company_id
        self.provider = provider or EmployeeRecordProvider(db, company_id, today=today)

    def _calculator(self) -> PayrollCalculator:
        return PayrollCalculator(self.provider.get_rate_config())

    def _build_line(self, calculator: PayrollCalculator, employee: Employee, month: int, year: int) -> PayrollLine:
        attendance = self.provider.get_attendance_summary(employee.id, month, year)
        adjustments = self.provider.get_adjustments(employee.id, month, year)
        record = to_employee_record(employee)
        if attendance.working_days_elapsed is not None:
            # Open month: pay what has accrued so far, absences are settled at month end.
            values = calculator.project(record, attendance, month, year, adjustments)
            values = values.with_changes(status=PayrollStatus.DRAFT)
        else:
            values = calculator.compute(record, attendance, month, year, adjustments)
        return new_line(self.company_id, values)

    def create_for_employee(self, employee_id: int, month: int, year: int, notes: Optional[str] = None) -> PayrollLine:
        """Create a single DRAFT line; an existing line for the period is a hard error here."""
        validate_period(month, year)
        employee = self.provider.get_employee(employee_id)
        existing = find_line(self.db, employee.id, month, year)
        if existing is not None:
            raise DuplicateError(employee.id, month, year, existing.id)
        line = self._build_line(self._calculator(), employee, month, year)
        line.notes = notes
        self.db.add(line)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateError(employee.id, month, year)
        self.db.refresh(line)
        logger.info("payroll_created", payroll_id=line.id, employee_id=employee.id, month=month, year=year)
        return line

    def generate(self, month: int, year: int, force_regenerate: bool = False) -> GenerationResult:
        validate_period(month, year)
        result = GenerationResult(month=month, year=year)
        calculator = self._calculator()

        with tracer.start_as_current_span("payroll.generate") as span:
            span.set_attribute("payroll.company_id", self.company_id)
            span.set_attribute("payroll.period", f"{year}-{month:02d}")
            span.set_attribute("payroll.force_regenerate", force_regenerate)

            for employee in self.provider.get_active_employees():
                self._generate_one(calculator, employee, month, year, force_regenerate, result)

            for outcome, count in result.counts().items():
                span.set_attribute(f"payroll.{outcome}", count)
                if count:
                    generated_counter.add(count, {"outcome": outcome})

        logger.info(
            "payroll_generated",
            month=month,
            year=year,
            force_regenerate=force_regenerate,
            **result.counts(),
        )
        return result

    def _generate_one(
        self,
        calculator: PayrollCalculator,
        employee: Employee,
        month: int,
        year: int,
        force_regenerate: bool,
        result: GenerationResult,
    ) -> None:
        outcome = GenerationOutcome(employee_id=employee.id, employee_name=employee.full_name)
        try:
            existing = find_line(self.db, employee.id, month, year)
            if existing is not None and not force_regenerate:
                raise DuplicateError(employee.id, month, year, existing.id)
            if existing is not None and existing.status == PayrollStatus.PAID.value:
                outcome.payroll_id = existing.id
                outcome.reason = "paid"
                result.skipped.append(outcome)
                return

            line = self._build_line(calculator, employee, month, year)
            if existing is not None:
                self.db.delete(existing)
                self.db.flush()
            self.db.add(line)
            self.db.commit()
        except DuplicateError as exc:
            self.db.rollback()
            outcome.payroll_id = exc.existing_id
            outcome.reason = "exists"
            result.skipped.append(outcome)
            return
        except IntegrityError:
            # Another writer created the line between our check and insert.
            self.db.rollback()
            outcome.reason = "exists"
            result.skipped.append(outcome)
            return
        except PayrollError as exc:
            self.db.rollback()
            outcome.error = exc.code
            outcome.reason = exc.message
            result.failed.append(outcome)
            logger.warning("payroll_generation_failed", employee_id=employee.id, error=exc.code, reason=exc.message)
            return

        outcome.payroll_id = line.id
        if existing is not None:
            result.regenerated.append(outcome)
        else:
            result.success.append(outcome)
