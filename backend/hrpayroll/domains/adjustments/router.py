from typing import Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from hrpayroll.api.deps import get_company_id
from hrpayroll.core.logging import get_logger
from hrpayroll.db.session import get_session
from hrpayroll.domains.payroll.provider import EmployeeRecordProvider
from hrpayroll.models.payroll_adjustment import PayrollAdjustment

router = APIRouter(prefix="/adjustments", tags=["adjustments"])
logger = get_logger(__name__)


class AdjustmentCreate(BaseModel):
    employee_id: int
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2000, le=2100)
    kind: Literal["bonus", "deduction"]
    amount: float = Field(..., gt=0)
    reason: str | None = Field(default=None, max_length=255)


class AdjustmentOut(AdjustmentCreate):
    id: int
    status: Literal["pending", "approved"]


def _to_out(row: PayrollAdjustment) -> AdjustmentOut:
    return AdjustmentOut(
        id=row.id,
        employee_id=row.employee_id,
        month=row.month,
        year=row.year,
        kind=row.kind,
        amount=float(row.amount),
        reason=row.reason,
        status=row.status,
    )


@router.get("", response_model=list[AdjustmentOut])
def list_adjustments(
    month: int | None = None,
    year: int | None = None,
    employee_id: int | None = None,
    company_id: int = Depends(get_company_id),
    db: Session = Depends(get_session),
):
    query = db.query(PayrollAdjustment).filter(PayrollAdjustment.company_id == company_id)
    if month:
        query = query.filter(PayrollAdjustment.month == month)
    if year:
        query = query.filter(PayrollAdjustment.year == year)
    if employee_id:
        query = query.filter(PayrollAdjustment.employee_id == employee_id)
    return [_to_out(row) for row in query.order_by(PayrollAdjustment.id.asc()).all()]


@router.post("", response_model=AdjustmentOut, status_code=201)
def create_adjustment(payload: AdjustmentCreate, company_id: int = Depends(get_company_id), db: Session = Depends(get_session)):
    EmployeeRecordProvider(db, company_id).get_employee(payload.employee_id)
    row = PayrollAdjustment(company_id=company_id, status="pending", **payload.model_dump())
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("adjustment_created", adjustment_id=row.id, kind=row.kind, employee_id=row.employee_id)
    return _to_out(row)


@router.post("/{adjustment_id}/approve", response_model=AdjustmentOut)
def approve_adjustment(adjustment_id: int, company_id: int = Depends(get_company_id), db: Session = Depends(get_session)):
    row = (
        db.query(PayrollAdjustment)
        .filter(PayrollAdjustment.id == adjustment_id, PayrollAdjustment.company_id == company_id)
        .one_or_none()
    )
    if not row:
        raise HTTPException(status_code=404, detail="Adjustment not found")
    if row.status == "approved":
        raise HTTPException(status_code=409, detail="Adjustment already approved")
    row.status = "approved"
    db.commit()
    db.refresh(row)
    logger.info("adjustment_approved", adjustment_id=row.id)
    return _to_out(row)
