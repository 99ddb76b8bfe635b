from __future__ import annotations

import math
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hrpayroll.api.deps import get_company_id
from hrpayroll.db.session import get_session
from hrpayroll.models import PayrollLine

from .generator import PayrollGenerator, validate_period
from .lifecycle import PaymentDetails, PayrollLifecycleManager
from .projection import PayrollProjector
from .records import PayrollStatus
from .repository import department_map, get_line, period_lines
from .schemas import (
    AnnualReportOut,
    BulkPayRequest,
    BulkPayResponse,
    CancelRequest,
    EmployeeYearOut,
    GenerateRequest,
    GenerateResponse,
    PayRequest,
    PayrollCreate,
    PayrollEdit,
    PayrollLineOut,
    PayrollPage,
    SummaryOut,
)
from .summary import annual_report, summarize

router = APIRouter(prefix="/payroll", tags=["payroll"])


@router.get("", response_model=PayrollPage)
def list_payrolls(
    month: Optional[int] = Query(default=None, ge=1, le=12),
    year: Optional[int] = Query(default=None),
    status: Optional[PayrollStatus] = None,
    employee_id: Optional[int] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=200),
    company_id: int = Depends(get_company_id),
    db: Session = Depends(get_session),
) -> PayrollPage:
    query = db.query(PayrollLine).filter(PayrollLine.company_id == company_id)
    if month:
        query = query.filter(PayrollLine.month == month)
    if year:
        query = query.filter(PayrollLine.year == year)
    if status:
        query = query.filter(PayrollLine.status == status.value)
    if employee_id:
        query = query.filter(PayrollLine.employee_id == employee_id)

    total = query.count()
    rows = (
        query.order_by(PayrollLine.year.desc(), PayrollLine.month.desc(), PayrollLine.employee_id.asc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return PayrollPage(
        items=[PayrollLineOut.from_line(row) for row in rows],
        page=page,
        limit=limit,
        total=total,
        total_pages=math.ceil(total / limit),
    )


@router.post("", response_model=PayrollLineOut, status_code=201)
def create_payroll(payload: PayrollCreate, company_id: int = Depends(get_company_id), db: Session = Depends(get_session)):
    line = PayrollGenerator(db, company_id).create_for_employee(
        payload.employee_id, payload.month, payload.year, notes=payload.notes
    )
    return PayrollLineOut.from_line(line)


@router.post("/generate", response_model=GenerateResponse)
def generate_payroll(payload: GenerateRequest, company_id: int = Depends(get_company_id), db: Session = Depends(get_session)):
    result = PayrollGenerator(db, company_id).generate(payload.month, payload.year, payload.force_regenerate)
    return GenerateResponse.from_result(result)


@router.get("/summary", response_model=SummaryOut)
def payroll_summary(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(...),
    company_id: int = Depends(get_company_id),
    db: Session = Depends(get_session),
):
    validate_period(month, year)
    lines = period_lines(db, company_id, month, year)
    summary = summarize(lines, departments=department_map(db, company_id))
    return SummaryOut.from_summary(month, year, summary)


@router.get("/annual-report", response_model=AnnualReportOut)
def payroll_annual_report(
    year: int = Query(...),
    employee_id: Optional[int] = None,
    company_id: int = Depends(get_company_id),
    db: Session = Depends(get_session),
):
    query = db.query(PayrollLine).filter(PayrollLine.company_id == company_id, PayrollLine.year == year)
    if employee_id:
        query = query.filter(PayrollLine.employee_id == employee_id)
    report = annual_report(query.order_by(PayrollLine.month.asc()).all())
    return AnnualReportOut(year=year, employees=[EmployeeYearOut.from_totals(totals) for totals in report])


@router.get("/projection/{employee_id}", response_model=PayrollLineOut)
def current_month_payroll(employee_id: int, company_id: int = Depends(get_company_id), db: Session = Depends(get_session)):
    current = PayrollProjector(db, company_id).current_month(employee_id)
    if current.line is not None:
        return PayrollLineOut.from_line(current.line)
    return PayrollLineOut.from_values(current.values, payroll_id=current.payroll_id)


@router.post("/bulk-pay", response_model=BulkPayResponse)
def bulk_pay(payload: BulkPayRequest, company_id: int = Depends(get_company_id), db: Session = Depends(get_session)):
    result = PayrollLifecycleManager(db, company_id).bulk_pay(
        payload.ids, PaymentDetails(method=payload.method, reference=payload.reference)
    )
    return BulkPayResponse.from_result(result)


@router.get("/{payroll_id}", response_model=PayrollLineOut)
def get_payroll(payroll_id: int, company_id: int = Depends(get_company_id), db: Session = Depends(get_session)):
    return PayrollLineOut.from_line(get_line(db, company_id, payroll_id))


@router.patch("/{payroll_id}", response_model=PayrollLineOut)
def edit_payroll(
    payroll_id: int,
    payload: PayrollEdit,
    company_id: int = Depends(get_company_id),
    db: Session = Depends(get_session),
):
    line = PayrollLifecycleManager(db, company_id).edit(payroll_id, payload.model_dump(exclude_unset=True))
    return PayrollLineOut.from_line(line)


@router.post("/{payroll_id}/approve", response_model=PayrollLineOut)
def approve_payroll(payroll_id: int, company_id: int = Depends(get_company_id), db: Session = Depends(get_session)):
    return PayrollLineOut.from_line(PayrollLifecycleManager(db, company_id).approve(payroll_id))


@router.post("/{payroll_id}/pay", response_model=PayrollLineOut)
def pay_payroll(
    payroll_id: int,
    payload: Optional[PayRequest] = None,
    company_id: int = Depends(get_company_id),
    db: Session = Depends(get_session),
):
    payload = payload or PayRequest()
    line = PayrollLifecycleManager(db, company_id).pay(
        payroll_id, PaymentDetails(method=payload.method, reference=payload.reference)
    )
    return PayrollLineOut.from_line(line)


@router.post("/{payroll_id}/cancel", response_model=PayrollLineOut)
def cancel_payroll(
    payroll_id: int,
    payload: Optional[CancelRequest] = None,
    company_id: int = Depends(get_company_id),
    db: Session = Depends(get_session),
):
    reason = payload.reason if payload else None
    return PayrollLineOut.from_line(PayrollLifecycleManager(db, company_id).cancel(payroll_id, reason))
