from sqlalchemy import JSON, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from hrpayroll.db.session import Base, utcnow


class PayrollLine(Base):
    __tablename__ = "payroll_lines"
    __table_args__ = (UniqueConstraint("employee_id", "month", "year", name="uq_payroll_lines_employee_period"),)

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, nullable=False, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    period_start = Column(Date, nullable=False)
    period_end = Column(Date, nullable=False)

    working_days = Column(Integer, nullable=False, default=0)
    present_days = Column(Integer, nullable=False, default=0)

    base_salary = Column(Numeric(12, 2), nullable=False, default=0)
    allowances = Column(JSON, nullable=False, default=dict)
    total_allowances = Column(Numeric(12, 2), nullable=False, default=0)
    overtime_hours = Column(Numeric(8, 2), nullable=False, default=0)
    overtime_amount = Column(Numeric(12, 2), nullable=False, default=0)
    bonuses = Column(Numeric(12, 2), nullable=False, default=0)

    absent_days = Column(Integer, nullable=False, default=0)
    attendance_deduction = Column(Numeric(12, 2), nullable=False, default=0)
    late_minutes = Column(Integer, nullable=False, default=0)
    late_penalty = Column(Numeric(12, 2), nullable=False, default=0)
    early_leave_minutes = Column(Integer, nullable=False, default=0)
    early_leave_penalty = Column(Numeric(12, 2), nullable=False, default=0)
    other_deductions = Column(Numeric(12, 2), nullable=False, default=0)
    advance_deduction = Column(Numeric(12, 2), nullable=False, default=0)
    advance_details = Column(JSON, nullable=False, default=list)  # [{"advance_id", "amount"}]
    total_deductions = Column(Numeric(12, 2), nullable=False, default=0)

    social_insurance = Column(Numeric(12, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(12, 2), nullable=False, default=0)

    # Derived columns, written only through PayrollLineValues.
    gross_salary = Column(Numeric(12, 2), nullable=False, default=0)
    net_salary = Column(Numeric(12, 2), nullable=False, default=0)

    status = Column(String(20), nullable=False, default="DRAFT")
    approved_at = Column(DateTime, nullable=True)
    paid_at = Column(DateTime, nullable=True)
    payment_method = Column(String(50), nullable=True)
    payment_reference = Column(String(100), nullable=True)
    cancelled_at = Column(DateTime, nullable=True)
    cancel_reason = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    employee = relationship("Employee")
