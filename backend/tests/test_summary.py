from decimal import Decimal

from hrpayroll.domains.payroll.records import PayrollLineValues, PayrollStatus
from hrpayroll.domains.payroll.summary import UNASSIGNED_DEPARTMENT, annual_report, summarize


def line(employee_id, month=3, base="1000", bonuses="0", other="0", tax="0", status=PayrollStatus.DRAFT):
    return PayrollLineValues(
        employee_id=employee_id,
        month=month,
        year=2024,
        base_salary=Decimal(base),
        bonuses=Decimal(bonuses),
        other_deductions=Decimal(other),
        tax_amount=Decimal(tax),
        status=status,
    )


def test_summarize_totals_and_status_breakdown():
    lines = [
        line(1, base="1000", bonuses="100"),
        line(2, base="2000", other="300", tax="50", status=PayrollStatus.APPROVED),
        line(3, base="1500", status=PayrollStatus.PAID),
    ]

    summary = summarize(lines)

    assert summary.total_employees == 3
    assert summary.total_base_salary == Decimal("4500.00")
    assert summary.total_bonuses == Decimal("100.00")
    assert summary.total_deductions == Decimal("300.00")
    assert summary.total_tax == Decimal("50.00")
    assert summary.total_gross == Decimal("4600.00")
    assert summary.total_net == Decimal("4250.00")
    assert summary.by_status == {"DRAFT": 1, "APPROVED": 1, "PAID": 1}
    assert summary.by_department == {}


def test_summarize_groups_by_department():
    lines = [line(1, base="1000"), line(2, base="2000"), line(3, base="500")]

    summary = summarize(lines, departments={1: "Engineering", 2: "Engineering", 3: None})

    assert summary.by_department["Engineering"].count == 2
    assert summary.by_department["Engineering"].total_net == Decimal("3000.00")
    assert summary.by_department[UNASSIGNED_DEPARTMENT].count == 1


def test_summarize_empty_batch():
    summary = summarize([])

    assert summary.total_employees == 0
    assert summary.total_net == Decimal("0.00")
    assert summary.by_status == {}


def test_annual_report_groups_per_employee_in_month_order():
    lines = [
        line(2, month=2, base="2000"),
        line(1, month=3, base="1000", status=PayrollStatus.PAID),
        line(1, month=1, base="1000", bonuses="200", status=PayrollStatus.PAID),
    ]

    report = annual_report(lines)

    assert [totals.employee_id for totals in report] == [1, 2]
    first = report[0]
    assert [entry.month for entry in first.months] == [1, 3]
    assert first.months[0].status == "PAID"
    assert first.gross == Decimal("2200")
    assert first.net == Decimal("2200")
    assert first.bonuses == Decimal("200")
