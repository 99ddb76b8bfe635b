from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from hrpayroll.db.session import Base, utcnow


class SalaryAdvance(Base):
    """Money lent against future pay, repaid out of payroll until the balance is gone."""

    __tablename__ = "salary_advances"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, nullable=False, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    repayment_type = Column(String(20), nullable=False, default="installments")  # installments|full
    installment_amount = Column(Numeric(12, 2), nullable=True)
    remaining_balance = Column(Numeric(12, 2), nullable=False)
    status = Column(String(20), nullable=False, default="PENDING")  # PENDING|APPROVED|COMPLETED
    is_paid_off = Column(Boolean, nullable=False, default=False)
    reason = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    employee = relationship("Employee")
