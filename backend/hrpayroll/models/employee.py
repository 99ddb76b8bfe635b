from sqlalchemy import JSON, Boolean, Column, Date, DateTime, Integer, Numeric, String, UniqueConstraint

from hrpayroll.db.session import Base, utcnow


class Employee(Base):
    __tablename__ = "employees"
    __table_args__ = (UniqueConstraint("company_id", "employee_number", name="uq_employees_company_number"),)

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, nullable=False, index=True)

    employee_number = Column(String(50), nullable=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False, default="")
    department = Column(String(100), nullable=True)
    position = Column(String(100), nullable=True)

    base_salary = Column(Numeric(12, 2), nullable=False, default=0)        # monthly
    allowances = Column(JSON, nullable=False, default=dict)                # name -> monthly amount
    enable_auto_deduction = Column(Boolean, nullable=False, default=True)  # false = whitelisted from penalties
    status = Column(String(20), nullable=False, default="active")          # active|on_leave|terminated

    hire_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
