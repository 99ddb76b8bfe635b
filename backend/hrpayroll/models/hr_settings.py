from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, Numeric

from hrpayroll.db.session import Base, utcnow

DEFAULT_WEEKEND_DAYS = [4, 5]  # Friday, Saturday


class HRSettings(Base):
    __tablename__ = "hr_settings"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, nullable=False, unique=True)

    monthly_grace_minutes = Column(Integer, nullable=False, default=60)
    daily_late_cap_minutes = Column(Integer, nullable=False, default=480)
    workday_minutes = Column(Integer, nullable=False, default=480)
    late_minute_rate = Column(Numeric(12, 4), nullable=True)  # null = derived from salary
    absence_penalty_rate = Column(Numeric(6, 2), nullable=False, default=1)
    overtime_rate = Column(Numeric(6, 2), nullable=False, default=1.5)
    social_insurance_rate = Column(Numeric(6, 2), nullable=False, default=0)  # percent of base salary
    tax_enabled = Column(Boolean, nullable=False, default=False)
    tax_brackets = Column(JSON, nullable=True)
    weekend_days = Column(JSON, nullable=False, default=lambda: list(DEFAULT_WEEKEND_DAYS))
    require_attendance_records = Column(Boolean, nullable=False, default=False)

    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
