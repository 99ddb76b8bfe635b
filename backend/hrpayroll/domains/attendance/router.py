from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hrpayroll.api.deps import get_company_id
from hrpayroll.db.session import get_session
from hrpayroll.domains.payroll.provider import EmployeeRecordProvider
from hrpayroll.domains.payroll.workdays import month_bounds
from hrpayroll.models.attendance_record import AttendanceRecord

router = APIRouter(prefix="/attendance", tags=["attendance"])


class AttendanceCreate(BaseModel):
    employee_id: int
    work_date: date
    status: Literal["PRESENT", "LATE", "REMOTE", "ON_LEAVE", "ABSENT"] = "PRESENT"
    late_minutes: int = Field(default=0, ge=0)
    early_leave_minutes: int = Field(default=0, ge=0)
    overtime_hours: float = Field(default=0, ge=0, le=24)


class AttendanceOut(AttendanceCreate):
    id: int


def _to_out(row: AttendanceRecord) -> AttendanceOut:
    return AttendanceOut(
        id=row.id,
        employee_id=row.employee_id,
        work_date=row.work_date,
        status=row.status,
        late_minutes=row.late_minutes,
        early_leave_minutes=row.early_leave_minutes or 0,
        overtime_hours=float(row.overtime_hours or 0),
    )


@router.get("", response_model=list[AttendanceOut])
def list_attendance(
    employee_id: int,
    month: int = Query(..., ge=1, le=12),
    year: int = Query(...),
    company_id: int = Depends(get_company_id),
    db: Session = Depends(get_session),
):
    start, end = month_bounds(year, month)
    rows = (
        db.query(AttendanceRecord)
        .filter(
            AttendanceRecord.company_id == company_id,
            AttendanceRecord.employee_id == employee_id,
            AttendanceRecord.work_date >= start,
            AttendanceRecord.work_date <= end,
        )
        .order_by(AttendanceRecord.work_date.asc())
        .all()
    )
    return [_to_out(row) for row in rows]


@router.post("", response_model=AttendanceOut, status_code=201)
def record_attendance(payload: AttendanceCreate, company_id: int = Depends(get_company_id), db: Session = Depends(get_session)):
    EmployeeRecordProvider(db, company_id).get_employee(payload.employee_id)
    row = AttendanceRecord(company_id=company_id, **payload.model_dump())
    db.add(row)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Attendance already recorded for this day")
    db.refresh(row)
    return _to_out(row)
