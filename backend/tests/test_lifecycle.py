from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from hrpayroll.domains.payroll.errors import InvalidInputError, InvalidStateError, NotFoundError
from hrpayroll.domains.payroll.generator import PayrollGenerator
from hrpayroll.domains.payroll.lifecycle import PaymentDetails, PayrollLifecycleManager, can_transition
from hrpayroll.domains.payroll.records import PayrollStatus


@pytest.fixture
def draft_line(db, make_employee):
    def _make(**employee_fields):
        employee = make_employee(**employee_fields)
        return PayrollGenerator(db, 1).create_for_employee(employee.id, 3, 2024)

    return _make


def test_transition_table():
    assert can_transition(PayrollStatus.DRAFT, PayrollStatus.APPROVED)
    assert can_transition(PayrollStatus.APPROVED, PayrollStatus.PAID)
    assert can_transition(PayrollStatus.APPROVED, PayrollStatus.CANCELLED)
    assert can_transition(PayrollStatus.PENDING_APPROVAL, PayrollStatus.CANCELLED)
    assert not can_transition(PayrollStatus.PENDING_APPROVAL, PayrollStatus.APPROVED)
    assert not can_transition(PayrollStatus.DRAFT, PayrollStatus.PAID)
    assert not can_transition(PayrollStatus.PAID, PayrollStatus.CANCELLED)
    assert not can_transition(PayrollStatus.CANCELLED, PayrollStatus.DRAFT)


def test_approve_then_pay_with_default_method(db, draft_line):
    line = draft_line()
    manager = PayrollLifecycleManager(db, 1)

    approved = manager.approve(line.id)
    assert approved.status == "APPROVED"
    assert approved.approved_at is not None

    paid = manager.pay(line.id, PaymentDetails(reference="TX-1"))
    assert paid.status == "PAID"
    assert paid.paid_at is not None
    assert paid.payment_method == "bank_transfer"
    assert paid.payment_reference == "TX-1"


def test_approve_on_paid_line_is_rejected_and_unchanged(db, draft_line):
    line = draft_line()
    manager = PayrollLifecycleManager(db, 1)
    manager.approve(line.id)
    manager.pay(line.id)
    paid_at = line.paid_at

    with pytest.raises(InvalidStateError) as excinfo:
        manager.approve(line.id)

    assert excinfo.value.current_status == "PAID"
    db.expire_all()
    assert line.status == "PAID"
    assert line.paid_at == paid_at


def test_pay_on_draft_is_rejected(db, draft_line):
    line = draft_line()

    with pytest.raises(InvalidStateError):
        PayrollLifecycleManager(db, 1).pay(line.id)


def test_bulk_pay_reports_each_line_without_raising(db, draft_line):
    manager = PayrollLifecycleManager(db, 1)
    approved = draft_line()
    manager.approve(approved.id)
    already_paid = []
    for _ in range(2):
        line = draft_line()
        manager.approve(line.id)
        manager.pay(line.id)
        already_paid.append(line.id)

    result = manager.bulk_pay([approved.id, *already_paid], PaymentDetails(method="cash"))

    assert [item.payroll_id for item in result.succeeded] == [approved.id]
    assert len(result.failed) == 2
    assert {item.error for item in result.failed} == {"invalid_state"}
    assert {item.status for item in result.failed} == {"PAID"}
    db.expire_all()
    assert approved.payment_method == "cash"


def test_bulk_pay_reports_unknown_ids(db):
    result = PayrollLifecycleManager(db, 1).bulk_pay([404])

    assert result.failed[0].error == "not_found"


def test_lines_of_other_companies_are_not_found(db, draft_line):
    line = draft_line()

    with pytest.raises(NotFoundError):
        PayrollLifecycleManager(db, 2).approve(line.id)


def test_cancel_records_reason(db, draft_line):
    line = draft_line()
    manager = PayrollLifecycleManager(db, 1)
    manager.approve(line.id)

    cancelled = manager.cancel(line.id, "  duplicate run ")

    assert cancelled.status == "CANCELLED"
    assert cancelled.cancel_reason == "duplicate run"
    assert cancelled.cancelled_at is not None
    with pytest.raises(InvalidStateError):
        manager.cancel(line.id)


def test_paid_lines_cannot_be_cancelled(db, draft_line):
    line = draft_line()
    manager = PayrollLifecycleManager(db, 1)
    manager.approve(line.id)
    manager.pay(line.id)

    with pytest.raises(InvalidStateError):
        manager.cancel(line.id)


def test_edit_recomputes_totals(db, draft_line):
    line = draft_line(base_salary=6000)

    edited = PayrollLifecycleManager(db, 1).edit(
        line.id,
        {"allowances": {"housing": 1000, "transport": 250}, "bonuses": 500, "tax_amount": 150, "notes": "manual"},
    )

    assert edited.total_allowances == Decimal("1250.00")
    assert edited.allowances == {"housing": 1000.0, "transport": 250.0}
    assert edited.gross_salary == Decimal("7750.00")
    assert edited.net_salary == Decimal("7600.00")
    assert edited.notes == "manual"


def test_edit_total_allowances_without_breakdown(db, draft_line):
    line = draft_line(base_salary=6000)

    edited = PayrollLifecycleManager(db, 1).edit(line.id, {"total_allowances": 400, "other_deductions": 100})

    assert edited.gross_salary == Decimal("6400.00")
    assert edited.total_deductions == Decimal("100.00")
    assert edited.net_salary == Decimal("6300.00")


def test_edit_rejects_negative_amounts(db, draft_line):
    line = draft_line()

    with pytest.raises(InvalidInputError):
        PayrollLifecycleManager(db, 1).edit(line.id, {"bonuses": -1})


def test_edit_only_allowed_on_draft(db, draft_line):
    line = draft_line()
    manager = PayrollLifecycleManager(db, 1)
    manager.approve(line.id)

    with pytest.raises(InvalidStateError):
        manager.edit(line.id, {"bonuses": 10})


def test_negative_net_payable_unless_disabled(db, draft_line):
    line = draft_line(base_salary=1000)
    manager = PayrollLifecycleManager(db, 1)
    manager.edit(line.id, {"other_deductions": 1500})
    manager.approve(line.id)
    assert line.net_salary == Decimal("-500.00")

    with pytest.raises(InvalidStateError):
        PayrollLifecycleManager(db, 1, allow_negative_net_pay=False).pay(line.id)

    assert manager.pay(line.id).status == "PAID"


def test_lifecycle_timestamps_are_naive_utc(db, draft_line):
    line = draft_line()

    approved = PayrollLifecycleManager(db, 1).approve(line.id)

    assert approved.approved_at.tzinfo is None
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    assert abs(now - approved.approved_at) < timedelta(minutes=1)


def test_edit_caps_attendance_deduction_at_base_salary(db, draft_line):
    line = draft_line(base_salary=6000)

    edited = PayrollLifecycleManager(db, 1).edit(line.id, {"attendance_deduction": 8000})

    assert edited.attendance_deduction == Decimal("6000.00")
    assert edited.net_salary == Decimal("0.00")


def test_lowering_base_salary_caps_existing_attendance_deduction(db, draft_line):
    # no attendance recorded, so all 21 working days are absences
    line = draft_line(base_salary=6000, enable_auto_deduction=True)
    assert line.attendance_deduction == Decimal("4200.00")

    edited = PayrollLifecycleManager(db, 1).edit(line.id, {"base_salary": 1000})

    assert edited.attendance_deduction == Decimal("1000.00")
    assert edited.net_salary == Decimal("0.00")


def test_edit_total_allowances_rejected_when_line_has_breakdown(db, draft_line):
    line = draft_line(allowances={"housing": 500})

    with pytest.raises(InvalidInputError):
        PayrollLifecycleManager(db, 1).edit(line.id, {"total_allowances": 900})

    db.expire_all()
    assert line.total_allowances == Decimal("500.00")
    assert line.allowances == {"housing": 500.0}


@pytest.fixture
def advance_line(db, make_employee, make_advance):
    def _make(**advance_fields):
        employee = make_employee(base_salary=6000)
        advance = make_advance(employee, **advance_fields)
        line = PayrollGenerator(db, 1).create_for_employee(employee.id, 3, 2024)
        PayrollLifecycleManager(db, 1).approve(line.id)
        return line, advance

    return _make


def test_pay_reduces_advance_balance_by_installment(db, advance_line):
    line, advance = advance_line(amount=1200, installment_amount=500)
    assert line.advance_deduction == Decimal("500.00")

    PayrollLifecycleManager(db, 1).pay(line.id)

    db.expire_all()
    assert advance.remaining_balance == Decimal("700.00")
    assert advance.is_paid_off is False
    assert advance.status == "APPROVED"


def test_last_installment_is_capped_and_completes_advance(db, advance_line):
    line, advance = advance_line(amount=1200, installment_amount=500, remaining_balance=300)
    assert line.advance_deduction == Decimal("300.00")
    assert line.net_salary == Decimal("5700.00")

    PayrollLifecycleManager(db, 1).pay(line.id)

    db.expire_all()
    assert advance.remaining_balance == Decimal("0.00")
    assert advance.is_paid_off is True
    assert advance.status == "COMPLETED"


def test_cancelled_line_leaves_advance_untouched(db, advance_line):
    line, advance = advance_line(amount=1200, installment_amount=500)

    PayrollLifecycleManager(db, 1).cancel(line.id)

    db.expire_all()
    assert advance.remaining_balance == Decimal("1200.00")
    assert advance.status == "APPROVED"
