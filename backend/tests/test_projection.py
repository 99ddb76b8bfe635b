from datetime import date
from decimal import Decimal

from hrpayroll.domains.payroll.generator import PayrollGenerator
from hrpayroll.domains.payroll.projection import PayrollProjector
from hrpayroll.domains.payroll.provider import EmployeeRecordProvider, rate_config_from_settings
from hrpayroll.domains.payroll.records import PayrollStatus
from hrpayroll.models import AttendanceRecord, HRSettings, PayrollLine

MID_MARCH = date(2024, 3, 10)


def test_attendance_summary_for_open_month_stops_at_today(db, make_employee):
    employee = make_employee()
    for day, status, late in ((3, "PRESENT", 0), (4, "LATE", 30), (5, "ABSENT", 0), (12, "PRESENT", 0)):
        db.add(
            AttendanceRecord(
                company_id=1, employee_id=employee.id, work_date=date(2024, 3, day), status=status, late_minutes=late
            )
        )
    db.commit()

    summary = EmployeeRecordProvider(db, 1, today=MID_MARCH).get_attendance_summary(employee.id, 3, 2024)

    assert summary.working_days == 21
    assert summary.working_days_elapsed == 6
    assert summary.present_days == 2
    assert summary.absent_days == 4
    assert summary.late_minutes == 30


def test_closed_month_has_no_elapsed_counter(db, make_employee):
    employee = make_employee()

    summary = EmployeeRecordProvider(db, 1, today=date(2024, 4, 2)).get_attendance_summary(employee.id, 3, 2024)

    assert summary.working_days_elapsed is None
    assert summary.absent_days == 21


def test_projection_accrues_by_elapsed_working_days(db, make_employee):
    employee = make_employee(base_salary=6300, allowances={"housing": 2100}, enable_auto_deduction=True)

    values = PayrollProjector(db, 1, today=MID_MARCH).project(employee.id)

    assert values.status is PayrollStatus.PROJECTION
    assert values.earned_ratio == Decimal("0.2857")
    assert values.base_salary == Decimal("1800.00")
    assert values.total_allowances == Decimal("600.00")
    assert values.attendance_deduction == Decimal("0")
    assert values.net_salary == Decimal("2400.00")
    assert db.query(PayrollLine).count() == 0


def test_current_month_prefers_persisted_line(db, make_employee):
    employee = make_employee()
    line = PayrollGenerator(db, 1, today=MID_MARCH).create_for_employee(employee.id, 3, 2024)

    current = PayrollProjector(db, 1, today=MID_MARCH).current_month(employee.id)

    assert current.payroll_id == line.id
    assert current.values.status is PayrollStatus.DRAFT


def test_current_month_falls_back_to_projection(db, make_employee):
    employee = make_employee()

    current = PayrollProjector(db, 1, today=MID_MARCH).current_month(employee.id)

    assert current.payroll_id is None
    assert current.values.status is PayrollStatus.PROJECTION


def test_rate_config_defaults_and_tax_toggle():
    defaults = rate_config_from_settings(None)
    assert defaults.tax_table is None
    assert defaults.weekend_days == (4, 5)

    row = HRSettings(
        company_id=1,
        monthly_grace_minutes=30,
        daily_late_cap_minutes=480,
        workday_minutes=480,
        absence_penalty_rate=2,
        overtime_rate=1.5,
        social_insurance_rate=11,
        tax_enabled=True,
        tax_brackets=None,
        weekend_days=[5, 6],
        require_attendance_records=False,
    )
    rates = rate_config_from_settings(row)
    assert rates.tax_table is not None
    assert rates.monthly_grace_minutes == 30
    assert rates.absence_penalty_rate == Decimal("2")
    assert rates.weekend_days == (5, 6)
