from __future__ import annotations

from datetime import datetime
from typing import Annotated, Dict, Optional

from pydantic import BaseModel, Field

from hrpayroll.models import PayrollLine

from .generator import GenerationOutcome, GenerationResult
from .lifecycle import BulkPayResult
from .records import PayrollLineValues
from .summary import EmployeeYearTotals, PayrollSummary

Month = Annotated[int, Field(ge=1, le=12)]
Year = Annotated[int, Field(ge=2000, le=2100)]
Amount = Annotated[float, Field(ge=0)]


class AdvanceRepaymentOut(BaseModel):
    advance_id: int
    amount: float


class PayrollLineOut(BaseModel):
    id: Optional[int] = None
    employee_id: int
    month: int
    year: int
    status: str
    base_salary: float
    allowances: Dict[str, float] = {}
    total_allowances: float
    overtime_hours: float
    overtime_amount: float
    bonuses: float
    working_days: int
    present_days: int
    absent_days: int
    attendance_deduction: float
    late_minutes: int
    late_penalty: float
    early_leave_minutes: int = 0
    early_leave_penalty: float = 0
    other_deductions: float
    advance_deduction: float = 0
    advance_details: list[AdvanceRepaymentOut] = []
    total_deductions: float
    social_insurance: float
    tax_amount: float
    gross_salary: float
    net_salary: float
    is_projection: bool = False
    earned_ratio: Optional[float] = None
    approved_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    payment_method: Optional[str] = None
    payment_reference: Optional[str] = None
    cancel_reason: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_line(cls, line: PayrollLine) -> "PayrollLineOut":
        return cls(
            id=line.id,
            employee_id=line.employee_id,
            month=line.month,
            year=line.year,
            status=line.status,
            base_salary=float(line.base_salary),
            allowances={name: float(value) for name, value in (line.allowances or {}).items()},
            total_allowances=float(line.total_allowances),
            overtime_hours=float(line.overtime_hours),
            overtime_amount=float(line.overtime_amount),
            bonuses=float(line.bonuses),
            working_days=line.working_days,
            present_days=line.present_days,
            absent_days=line.absent_days,
            attendance_deduction=float(line.attendance_deduction),
            late_minutes=line.late_minutes,
            late_penalty=float(line.late_penalty),
            early_leave_minutes=line.early_leave_minutes or 0,
            early_leave_penalty=float(line.early_leave_penalty or 0),
            other_deductions=float(line.other_deductions),
            advance_deduction=float(line.advance_deduction or 0),
            advance_details=[AdvanceRepaymentOut(**item) for item in (line.advance_details or [])],
            total_deductions=float(line.total_deductions),
            social_insurance=float(line.social_insurance),
            tax_amount=float(line.tax_amount),
            gross_salary=float(line.gross_salary),
            net_salary=float(line.net_salary),
            approved_at=line.approved_at,
            paid_at=line.paid_at,
            payment_method=line.payment_method,
            payment_reference=line.payment_reference,
            cancel_reason=line.cancel_reason,
            notes=line.notes,
        )

    @classmethod
    def from_values(cls, values: PayrollLineValues, payroll_id: Optional[int] = None) -> "PayrollLineOut":
        return cls(
            id=payroll_id,
            employee_id=values.employee_id,
            month=values.month,
            year=values.year,
            status=values.status.value,
            base_salary=float(values.base_salary),
            allowances={name: float(value) for name, value in values.allowances.items()},
            total_allowances=float(values.total_allowances),
            overtime_hours=float(values.overtime_hours),
            overtime_amount=float(values.overtime_amount),
            bonuses=float(values.bonuses),
            working_days=values.working_days,
            present_days=values.present_days,
            absent_days=values.absent_days,
            attendance_deduction=float(values.attendance_deduction),
            late_minutes=values.late_minutes,
            late_penalty=float(values.late_penalty),
            early_leave_minutes=values.early_leave_minutes,
            early_leave_penalty=float(values.early_leave_penalty),
            other_deductions=float(values.other_deductions),
            advance_deduction=float(values.advance_deduction),
            advance_details=[
                AdvanceRepaymentOut(advance_id=item.advance_id, amount=float(item.amount)) for item in values.advances
            ],
            total_deductions=float(values.total_deductions),
            social_insurance=float(values.social_insurance),
            tax_amount=float(values.tax_amount),
            gross_salary=float(values.gross_salary),
            net_salary=float(values.net_salary),
            is_projection=payroll_id is None,
            earned_ratio=None if values.earned_ratio is None else float(values.earned_ratio),
        )


class PayrollPage(BaseModel):
    items: list[PayrollLineOut]
    page: int
    limit: int
    total: int
    total_pages: int


class PayrollCreate(BaseModel):
    employee_id: int
    month: Month
    year: Year
    notes: Optional[str] = None


class GenerateRequest(BaseModel):
    month: Month
    year: Year
    force_regenerate: bool = False


class OutcomeOut(BaseModel):
    employee_id: int
    employee_name: str
    payroll_id: Optional[int] = None
    error: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def from_outcome(cls, outcome: GenerationOutcome) -> "OutcomeOut":
        return cls(**outcome.__dict__)


class GenerateResponse(BaseModel):
    month: int
    year: int
    success: list[OutcomeOut]
    skipped: list[OutcomeOut]
    regenerated: list[OutcomeOut]
    failed: list[OutcomeOut]
    counts: Dict[str, int]

    @classmethod
    def from_result(cls, result: GenerationResult) -> "GenerateResponse":
        return cls(
            month=result.month,
            year=result.year,
            success=[OutcomeOut.from_outcome(o) for o in result.success],
            skipped=[OutcomeOut.from_outcome(o) for o in result.skipped],
            regenerated=[OutcomeOut.from_outcome(o) for o in result.regenerated],
            failed=[OutcomeOut.from_outcome(o) for o in result.failed],
            counts=result.counts(),
        )


class PayrollEdit(BaseModel):
    base_salary: Optional[Amount] = None
    allowances: Optional[Dict[str, Amount]] = None
    total_allowances: Optional[Amount] = None
    overtime_amount: Optional[Amount] = None
    bonuses: Optional[Amount] = None
    attendance_deduction: Optional[Amount] = None
    late_penalty: Optional[Amount] = None
    early_leave_penalty: Optional[Amount] = None
    other_deductions: Optional[Amount] = None
    social_insurance: Optional[Amount] = None
    tax_amount: Optional[Amount] = None
    notes: Optional[str] = None


class PayRequest(BaseModel):
    method: Optional[str] = Field(default=None, max_length=50)
    reference: Optional[str] = Field(default=None, max_length=100)


class BulkPayRequest(PayRequest):
    ids: list[int] = Field(..., min_length=1)


class BulkPayItemOut(BaseModel):
    payroll_id: int
    ok: bool
    status: Optional[str] = None
    error: Optional[str] = None
    message: Optional[str] = None


class BulkPayResponse(BaseModel):
    updated: int
    failed: int
    results: list[BulkPayItemOut]

    @classmethod
    def from_result(cls, result: BulkPayResult) -> "BulkPayResponse":
        return cls(
            updated=len(result.succeeded),
            failed=len(result.failed),
            results=[BulkPayItemOut(**item.__dict__) for item in result.results],
        )


class CancelRequest(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=255)


class DepartmentTotalsOut(BaseModel):
    count: int
    total_net: float


class SummaryOut(BaseModel):
    month: int
    year: int
    total_employees: int
    total_base_salary: float
    total_allowances: float
    total_deductions: float
    total_overtime: float
    total_bonuses: float
    total_social_insurance: float
    total_tax: float
    total_gross: float
    total_net: float
    by_status: Dict[str, int]
    by_department: Dict[str, DepartmentTotalsOut]

    @classmethod
    def from_summary(cls, month: int, year: int, summary: PayrollSummary) -> "SummaryOut":
        return cls(
            month=month,
            year=year,
            total_employees=summary.total_employees,
            total_base_salary=float(summary.total_base_salary),
            total_allowances=float(summary.total_allowances),
            total_deductions=float(summary.total_deductions),
            total_overtime=float(summary.total_overtime),
            total_bonuses=float(summary.total_bonuses),
            total_social_insurance=float(summary.total_social_insurance),
            total_tax=float(summary.total_tax),
            total_gross=float(summary.total_gross),
            total_net=float(summary.total_net),
            by_status=summary.by_status,
            by_department={
                name: DepartmentTotalsOut(count=bucket.count, total_net=float(bucket.total_net))
                for name, bucket in summary.by_department.items()
            },
        )


class MonthEntryOut(BaseModel):
    month: int
    net_salary: float
    status: str


class EmployeeYearOut(BaseModel):
    employee_id: int
    months: list[MonthEntryOut]
    base_salary: float
    allowances: float
    deductions: float
    overtime: float
    bonuses: float
    gross: float
    net: float

    @classmethod
    def from_totals(cls, totals: EmployeeYearTotals) -> "EmployeeYearOut":
        return cls(
            employee_id=totals.employee_id,
            months=[
                MonthEntryOut(month=m.month, net_salary=float(m.net_salary), status=m.status) for m in totals.months
            ],
            base_salary=float(totals.base_salary),
            allowances=float(totals.allowances),
            deductions=float(totals.deductions),
            overtime=float(totals.overtime),
            bonuses=float(totals.bonuses),
            gross=float(totals.gross),
            net=float(totals.net),
        )


class AnnualReportOut(BaseModel):
    year: int
    employees: list[EmployeeYearOut]
