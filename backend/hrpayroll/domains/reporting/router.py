from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from hrpayroll.api.deps import get_company_id
from hrpayroll.db.session import get_session
from hrpayroll.domains.payroll.generator import validate_period
from hrpayroll.domains.payroll.repository import department_map, period_lines
from hrpayroll.domains.reporting.exporter import payroll_rows, render_csv

router = APIRouter(prefix="/reports", tags=["reporting"])


@router.get("/payroll.csv", summary="Payroll register for one month as CSV")
def payroll_register_csv(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(...),
    company_id: int = Depends(get_company_id),
    db: Session = Depends(get_session),
) -> Response:
    validate_period(month, year)
    rows = payroll_rows(period_lines(db, company_id, month, year), department_map(db, company_id))
    filename = f"payroll-{year}-{month:02d}.csv"
    return Response(
        content=render_csv(rows),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
