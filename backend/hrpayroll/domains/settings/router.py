from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from hrpayroll.api.deps import get_company_id
from hrpayroll.core.logging import get_logger
from hrpayroll.db.session import get_session
from hrpayroll.domains.payroll.provider import get_or_create_hr_settings
from hrpayroll.domains.payroll.tax_tables import TaxTable
from hrpayroll.models.hr_settings import HRSettings

router = APIRouter(prefix="/settings", tags=["settings"])
logger = get_logger(__name__)


class TaxBracketIn(BaseModel):
    min: float = Field(..., ge=0)
    max: float | None = None
    rate: float = Field(..., ge=0, le=100)


class PayrollSettings(BaseModel):
    monthly_grace_minutes: int = Field(default=60, ge=0)
    daily_late_cap_minutes: int = Field(default=480, ge=0)
    workday_minutes: int = Field(default=480, gt=0, le=1440)
    late_minute_rate: float | None = Field(default=None, ge=0)
    absence_penalty_rate: float = Field(default=1.0, ge=0)
    overtime_rate: float = Field(default=1.5, ge=0)
    social_insurance_rate: float = Field(default=0, ge=0, le=100)
    tax_enabled: bool = False
    tax_brackets: list[TaxBracketIn] | None = None
    weekend_days: list[int] = [4, 5]
    require_attendance_records: bool = False

    @field_validator("weekend_days")
    @classmethod
    def validate_weekend_days(cls, value: list[int]) -> list[int]:
        if any(day < 0 or day > 6 for day in value):
            raise ValueError("Weekend days must be weekday numbers 0 (Monday) to 6 (Sunday)")
        if len(set(value)) >= 7:
            raise ValueError("At least one working day is required")
        return sorted(set(value))

    @field_validator("tax_brackets")
    @classmethod
    def validate_brackets(cls, value: list[TaxBracketIn] | None) -> list[TaxBracketIn] | None:
        if value:
            TaxTable.from_rows([bracket.model_dump() for bracket in value])
        return value


def _to_out(row: HRSettings) -> PayrollSettings:
    return PayrollSettings(
        monthly_grace_minutes=row.monthly_grace_minutes,
        daily_late_cap_minutes=row.daily_late_cap_minutes,
        workday_minutes=row.workday_minutes,
        late_minute_rate=None if row.late_minute_rate is None else float(row.late_minute_rate),
        absence_penalty_rate=float(row.absence_penalty_rate),
        overtime_rate=float(row.overtime_rate),
        social_insurance_rate=float(row.social_insurance_rate),
        tax_enabled=row.tax_enabled,
        tax_brackets=row.tax_brackets,
        weekend_days=row.weekend_days,
        require_attendance_records=row.require_attendance_records,
    )


@router.get("/payroll", response_model=PayrollSettings)
def read_payroll_settings(company_id: int = Depends(get_company_id), db: Session = Depends(get_session)):
    row = get_or_create_hr_settings(db, company_id)
    db.commit()
    return _to_out(row)


@router.put("/payroll", response_model=PayrollSettings)
def update_payroll_settings(
    payload: PayrollSettings,
    company_id: int = Depends(get_company_id),
    db: Session = Depends(get_session),
):
    row = get_or_create_hr_settings(db, company_id)
    data = payload.model_dump()
    for name, value in data.items():
        setattr(row, name, value)
    db.commit()
    db.refresh(row)
    logger.info("payroll_settings_updated", tax_enabled=row.tax_enabled)
    return _to_out(row)
