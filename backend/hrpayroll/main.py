from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hrpayroll.api.routes import health
from hrpayroll.core.config import settings
from hrpayroll.core.logging import configure_logging, get_logger
from hrpayroll.core.monitoring import configure_error_monitoring
from hrpayroll.core.observability import configure_observability
from hrpayroll.domains.adjustments.router import router as adjustments_router
from hrpayroll.domains.advances.router import router as advances_router
from hrpayroll.domains.attendance.router import router as attendance_router
from hrpayroll.domains.employees.router import router as employee_router
from hrpayroll.domains.payroll.errors import PayrollError
from hrpayroll.domains.payroll.router import router as payroll_router
from hrpayroll.domains.reporting.router import router as reporting_router
from hrpayroll.domains.settings.router import router as settings_router

configure_logging(settings.log_level)
configure_observability()
configure_error_monitoring()
logger = get_logger(__name__)

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(employee_router)
app.include_router(attendance_router)
app.include_router(adjustments_router)
app.include_router(advances_router)
app.include_router(settings_router)
app.include_router(payroll_router)
app.include_router(reporting_router)


@app.exception_handler(PayrollError)
async def payroll_error_handler(request: Request, exc: PayrollError) -> JSONResponse:
    logger.warning("payroll_request_rejected", path=request.url.path, error=exc.code, detail=exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.code, "detail": exc.message})


@app.on_event("startup")
def startup_event() -> None:
    logger.info("startup_complete", env=settings.env)


@app.get("/")
def root() -> dict[str, str]:
    return {"message": "HR Payroll API running", "environment": settings.env}
