from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship

from hrpayroll.db.session import Base, utcnow

ATTENDED_STATUSES = ("PRESENT", "LATE", "REMOTE", "ON_LEAVE")


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"
    __table_args__ = (UniqueConstraint("employee_id", "work_date", name="uq_attendance_employee_day"),)

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, nullable=False, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False)
    work_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default="PRESENT")  # PRESENT|LATE|REMOTE|ON_LEAVE|ABSENT
    late_minutes = Column(Integer, nullable=False, default=0)
    early_leave_minutes = Column(Integer, nullable=False, default=0)
    overtime_hours = Column(Numeric(6, 2), nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow)

    employee = relationship("Employee")
