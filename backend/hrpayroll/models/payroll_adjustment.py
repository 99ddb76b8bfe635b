from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from hrpayroll.db.session import Base, utcnow


class PayrollAdjustment(Base):
    """One-off bonus or manual deduction applied to an employee's month."""

    __tablename__ = "payroll_adjustments"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, nullable=False, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    kind = Column(String(20), nullable=False)                        # bonus|deduction
    amount = Column(Numeric(12, 2), nullable=False)
    reason = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False, default="pending")   # pending|approved
    created_at = Column(DateTime, default=utcnow)

    employee = relationship("Employee")
