from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from hrpayroll.api.deps import get_company_id
from hrpayroll.core.logging import get_logger
from hrpayroll.db.session import get_session
from hrpayroll.domains.payroll.provider import EmployeeRecordProvider
from hrpayroll.models.employee import Employee

router = APIRouter(prefix="/employees", tags=["employees"])
logger = get_logger(__name__)

EmployeeStatus = Literal["active", "on_leave", "terminated"]


class EmployeeBase(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(default="", max_length=100)
    employee_number: str | None = None
    department: str | None = None
    position: str | None = None
    base_salary: float = Field(default=0, ge=0)
    allowances: dict[str, float] = {}
    enable_auto_deduction: bool = True
    status: EmployeeStatus = "active"
    hire_date: date | None = None


class EmployeeCreate(EmployeeBase):
    pass


class EmployeeUpdate(BaseModel):
    department: str | None = None
    position: str | None = None
    base_salary: float | None = Field(default=None, ge=0)
    allowances: dict[str, float] | None = None
    enable_auto_deduction: bool | None = None
    status: EmployeeStatus | None = None


class EmployeeOut(EmployeeBase):
    id: int


def _to_out(row: Employee) -> EmployeeOut:
    return EmployeeOut(
        id=row.id,
        first_name=row.first_name,
        last_name=row.last_name,
        employee_number=row.employee_number,
        department=row.department,
        position=row.position,
        base_salary=float(row.base_salary or 0),
        allowances={name: float(value) for name, value in (row.allowances or {}).items()},
        enable_auto_deduction=row.enable_auto_deduction,
        status=row.status,
        hire_date=row.hire_date,
    )


@router.get("", response_model=list[EmployeeOut])
def list_employees(company_id: int = Depends(get_company_id), db: Session = Depends(get_session)):
    rows = (
        db.query(Employee)
        .filter(Employee.company_id == company_id)
        .order_by(Employee.last_name.asc(), Employee.first_name.asc(), Employee.id.asc())
        .all()
    )
    return [_to_out(r) for r in rows]


@router.post("", response_model=EmployeeOut, status_code=201)
def create_employee(payload: EmployeeCreate, company_id: int = Depends(get_company_id), db: Session = Depends(get_session)):
    row = Employee(
        company_id=company_id,
        first_name=payload.first_name.strip(),
        last_name=payload.last_name.strip(),
        employee_number=payload.employee_number,
        department=payload.department,
        position=payload.position,
        base_salary=payload.base_salary,
        allowances=payload.allowances,
        enable_auto_deduction=payload.enable_auto_deduction,
        status=payload.status,
        hire_date=payload.hire_date,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("employee_created", employee_id=row.id)
    return _to_out(row)


@router.patch("/{employee_id}", response_model=EmployeeOut)
def update_employee(
    employee_id: int,
    payload: EmployeeUpdate,
    company_id: int = Depends(get_company_id),
    db: Session = Depends(get_session),
):
    row = EmployeeRecordProvider(db, company_id).get_employee(employee_id)
    for name, value in payload.model_dump(exclude_unset=True).items():
        setattr(row, name, value)
    db.commit()
    db.refresh(row)
    logger.info("employee_updated", employee_id=row.id, fields=sorted(payload.model_fields_set))
    return _to_out(row)
