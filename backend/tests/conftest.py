from __future__ import annotations

import os

os.environ.setdefault("HRPAYROLL_DATABASE_URL", "sqlite://")
os.environ.setdefault("HRPAYROLL_LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hrpayroll.db.session import Base, get_session
from hrpayroll.main import app
from hrpayroll.models import Employee, HRSettings, PayrollAdjustment, SalaryAdvance

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_session] = override_get_session


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def session_factory():
    return TestingSessionLocal


@pytest.fixture
def client():
    with TestClient(app, headers={"X-Company-ID": "1"}) as test_client:
        yield test_client


@pytest.fixture
def make_employee(db):
    counter = {"n": 0}

    def _make(company_id: int = 1, **overrides) -> Employee:
        counter["n"] += 1
        fields = {
            "company_id": company_id,
            "employee_number": f"E-{counter['n']:03d}",
            "first_name": f"Employee{counter['n']}",
            "last_name": "Test",
            "department": "Engineering",
            "base_salary": 6000,
            "allowances": {},
            "enable_auto_deduction": False,
            "status": "active",
        }
        fields.update(overrides)
        employee = Employee(**fields)
        db.add(employee)
        db.commit()
        db.refresh(employee)
        return employee

    return _make


@pytest.fixture
def make_settings(db):
    def _make(company_id: int = 1, **overrides) -> HRSettings:
        row = HRSettings(company_id=company_id, **overrides)
        db.add(row)
        db.commit()
        db.refresh(row)
        return row

    return _make


@pytest.fixture
def make_adjustment(db):
    def _make(employee: Employee, month: int, year: int, kind: str, amount: float, status: str = "approved"):
        row = PayrollAdjustment(
            company_id=employee.company_id,
            employee_id=employee.id,
            month=month,
            year=year,
            kind=kind,
            amount=amount,
            status=status,
        )
        db.add(row)
        db.commit()
        return row

    return _make


@pytest.fixture
def make_advance(db):
    def _make(
        employee: Employee,
        amount: float,
        installment_amount: float | None = None,
        remaining_balance: float | None = None,
        repayment_type: str = "installments",
        status: str = "APPROVED",
    ) -> SalaryAdvance:
        row = SalaryAdvance(
            company_id=employee.company_id,
            employee_id=employee.id,
            amount=amount,
            repayment_type=repayment_type,
            installment_amount=installment_amount,
            remaining_balance=amount if remaining_balance is None else remaining_balance,
            status=status,
            is_paid_off=False,
        )
        db.add(row)
        db.commit()
        db.refresh(row)
        return row

    return _make
