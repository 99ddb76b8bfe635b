from typing import Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, model_validator
from sqlalchemy.orm import Session

from hrpayroll.api.deps import get_company_id
from hrpayroll.core.logging import get_logger
from hrpayroll.db.session import get_session
from hrpayroll.domains.payroll.provider import EmployeeRecordProvider
from hrpayroll.models.salary_advance import SalaryAdvance

router = APIRouter(prefix="/advances", tags=["advances"])
logger = get_logger(__name__)


class AdvanceCreate(BaseModel):
    employee_id: int
    amount: float = Field(..., gt=0)
    repayment_type: Literal["installments", "full"] = "installments"
    installment_amount: float | None = Field(default=None, gt=0)
    reason: str | None = Field(default=None, max_length=255)

    @model_validator(mode="after")
    def require_installment_amount(self) -> "AdvanceCreate":
        if self.repayment_type == "installments" and self.installment_amount is None:
            raise ValueError("installment_amount is required when repaying in installments")
        return self


class AdvanceOut(AdvanceCreate):
    id: int
    remaining_balance: float
    status: Literal["PENDING", "APPROVED", "COMPLETED"]
    is_paid_off: bool


def _to_out(row: SalaryAdvance) -> AdvanceOut:
    return AdvanceOut(
        id=row.id,
        employee_id=row.employee_id,
        amount=float(row.amount),
        repayment_type=row.repayment_type,
        installment_amount=None if row.installment_amount is None else float(row.installment_amount),
        reason=row.reason,
        remaining_balance=float(row.remaining_balance),
        status=row.status,
        is_paid_off=row.is_paid_off,
    )


@router.get("", response_model=list[AdvanceOut])
def list_advances(
    employee_id: int | None = None,
    company_id: int = Depends(get_company_id),
    db: Session = Depends(get_session),
):
    query = db.query(SalaryAdvance).filter(SalaryAdvance.company_id == company_id)
    if employee_id:
        query = query.filter(SalaryAdvance.employee_id == employee_id)
    return [_to_out(row) for row in query.order_by(SalaryAdvance.id.asc()).all()]


@router.post("", response_model=AdvanceOut, status_code=201)
def create_advance(payload: AdvanceCreate, company_id: int = Depends(get_company_id), db: Session = Depends(get_session)):
    EmployeeRecordProvider(db, company_id).get_employee(payload.employee_id)
    row = SalaryAdvance(
        company_id=company_id,
        status="PENDING",
        remaining_balance=payload.amount,
        is_paid_off=False,
        **payload.model_dump(),
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("advance_created", advance_id=row.id, employee_id=row.employee_id, amount=str(row.amount))
    return _to_out(row)


@router.post("/{advance_id}/approve", response_model=AdvanceOut)
def approve_advance(advance_id: int, company_id: int = Depends(get_company_id), db: Session = Depends(get_session)):
    row = (
        db.query(SalaryAdvance)
        .filter(SalaryAdvance.id == advance_id, SalaryAdvance.company_id == company_id)
        .one_or_none()
    )
    if not row:
        raise HTTPException(status_code=404, detail="Advance not found")
    if row.status != "PENDING":
        raise HTTPException(status_code=409, detail=f"Advance is already {row.status}")
    row.status = "APPROVED"
    db.commit()
    db.refresh(row)
    logger.info("advance_approved", advance_id=row.id)
    return _to_out(row)
