from .attendance_record import AttendanceRecord
from .employee import Employee
from .hr_settings import HRSettings
from .payroll_adjustment import PayrollAdjustment
from .payroll_line import PayrollLine
from .salary_advance import SalaryAdvance

__all__ = ["Employee", "AttendanceRecord", "PayrollAdjustment", "HRSettings", "PayrollLine", "SalaryAdvance"]
