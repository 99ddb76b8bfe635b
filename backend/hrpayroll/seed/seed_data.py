from datetime import date

from sqlalchemy.orm import Session

from hrpayroll.domains.payroll.workdays import working_dates
from hrpayroll.models import AttendanceRecord, Employee, HRSettings, PayrollAdjustment, SalaryAdvance
from hrpayroll.models.hr_settings import DEFAULT_WEEKEND_DAYS


def seed(session: Session, company_id: int = 1, month: int | None = None, year: int | None = None) -> list[Employee]:
    """Load a demo company: three employees, one month of attendance, two adjustments and an advance."""
    today = date.today()
    month = month or today.month
    year = year or today.year

    session.add(
        HRSettings(
            company_id=company_id,
            social_insurance_rate=5,
            tax_enabled=True,
            weekend_days=list(DEFAULT_WEEKEND_DAYS),
        )
    )

    employees = [
        Employee(
            company_id=company_id,
            employee_number="E-001",
            first_name="Ada",
            last_name="Lovelace",
            department="Engineering",
            position="Engineer",
            base_salary=12000,
            allowances={"housing": 1500, "transport": 500},
            hire_date=date(2020, 1, 1),
        ),
        Employee(
            company_id=company_id,
            employee_number="E-002",
            first_name="Grace",
            last_name="Hopper",
            department="Engineering",
            position="Lead Engineer",
            base_salary=15000,
            allowances={"housing": 2000},
            hire_date=date(2019, 6, 1),
        ),
        Employee(
            company_id=company_id,
            employee_number="E-003",
            first_name="Katherine",
            last_name="Johnson",
            department="Finance",
            position="Analyst",
            base_salary=9000,
            enable_auto_deduction=False,
            hire_date=date(2021, 3, 15),
        ),
    ]
    session.add_all(employees)
    session.flush()

    days = working_dates(year, month, DEFAULT_WEEKEND_DAYS)
    if year == today.year and month == today.month:
        days = [day for day in days if day <= today]
    for index, employee in enumerate(employees):
        for offset, work_date in enumerate(days):
            # every employee misses one day a fortnight, staggered
            if (offset + index) % 10 == 9:
                status, late = "ABSENT", 0
            elif offset % 7 == index:
                status, late = "LATE", 25
            else:
                status, late = "PRESENT", 0
            session.add(
                AttendanceRecord(
                    company_id=company_id,
                    employee_id=employee.id,
                    work_date=work_date,
                    status=status,
                    late_minutes=late,
                    early_leave_minutes=30 if (offset + index) % 6 == 5 else 0,
                    overtime_hours=2 if offset == 0 else 0,
                )
            )

    session.add_all(
        [
            PayrollAdjustment(
                company_id=company_id,
                employee_id=employees[0].id,
                month=month,
                year=year,
                kind="bonus",
                amount=1000,
                reason="Release bonus",
                status="approved",
            ),
            PayrollAdjustment(
                company_id=company_id,
                employee_id=employees[1].id,
                month=month,
                year=year,
                kind="deduction",
                amount=250,
                reason="Equipment damage",
                status="approved",
            ),
            SalaryAdvance(
                company_id=company_id,
                employee_id=employees[2].id,
                amount=3000,
                repayment_type="installments",
                installment_amount=500,
                remaining_balance=3000,
                status="APPROVED",
                is_paid_off=False,
                reason="Relocation",
            ),
        ]
    )
    session.commit()
    return employees
