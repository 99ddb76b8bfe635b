from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional

from sqlalchemy.orm import Session

from hrpayroll.core.config import settings
from hrpayroll.core.logging import get_logger
from hrpayroll.db.session import utcnow
from hrpayroll.models import PayrollLine, SalaryAdvance

from .errors import InvalidInputError, InvalidStateError, PayrollError
from .records import PayrollStatus, money, to_decimal
from .repository import get_line, values_from_line, write_values

logger = get_logger(__name__)

# status -> statuses reachable from it
TRANSITIONS: Dict[PayrollStatus, frozenset] = {
    PayrollStatus.DRAFT: frozenset({PayrollStatus.APPROVED, PayrollStatus.CANCELLED}),
    PayrollStatus.PENDING_APPROVAL: frozenset({PayrollStatus.CANCELLED}),
    PayrollStatus.APPROVED: frozenset({PayrollStatus.PAID, PayrollStatus.CANCELLED}),
    PayrollStatus.PAID: frozenset(),
    PayrollStatus.CANCELLED: frozenset(),
    PayrollStatus.PROJECTION: frozenset(),
}

# Balances at or below this are treated as repaid.
ADVANCE_PAID_OFF_TOLERANCE = Decimal("0.01")

EDITABLE_MONEY_FIELDS = (
    "base_salary",
    "overtime_amount",
    "bonuses",
    "attendance_deduction",
    "late_penalty",
    "early_leave_penalty",
    "other_deductions",
    "social_insurance",
    "tax_amount",
)


def can_transition(current: PayrollStatus, target: PayrollStatus) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


def ensure_transition(line: PayrollLine, target: PayrollStatus) -> None:
    current = PayrollStatus(line.status)
    if not can_transition(current, target):
        raise InvalidStateError(
            f"Payroll {line.id} cannot move from {current.value} to {target.value}",
            current_status=current.value,
        )


@dataclass
class PaymentDetails:
    method: Optional[str] = None
    reference: Optional[str] = None


@dataclass
class BulkPayItem:
    payroll_id: int
    ok: bool
    status: Optional[str] = None
    error: Optional[str] = None
    message: Optional[str] = None


@dataclass
class BulkPayResult:
    results: List[BulkPayItem] = field(default_factory=list)

    @property
    def succeeded(self) -> List[BulkPayItem]:
        return [item for item in self.results if item.ok]

    @property
    def failed(self) -> List[BulkPayItem]:
        return [item for item in self.results if not item.ok]


class PayrollLifecycleManager:
    """State transitions and edits for persisted payroll lines.

    Every operation re-reads the row with ``SELECT ... FOR UPDATE`` so the
    status check and the write happen under the same lock.
    """

    def __init__(self, db: Session, company_id: int, allow_negative_net_pay: Optional[bool] = None):
        self.db = db
        self.company_id = company_id
        self.allow_negative_net_pay = (
            settings.allow_negative_net_pay if allow_negative_net_pay is None else allow_negative_net_pay
        )

    def _locked(self, payroll_id: int) -> PayrollLine:
        return get_line(self.db, self.company_id, payroll_id, for_update=True)

    def _commit(self, line: PayrollLine) -> PayrollLine:
        self.db.commit()
        self.db.refresh(line)
        return line

    def approve(self, payroll_id: int) -> PayrollLine:
        line = self._locked(payroll_id)
        ensure_transition(line, PayrollStatus.APPROVED)
        line.status = PayrollStatus.APPROVED.value
        line.approved_at = utcnow()
        self._commit(line)
        logger.info("payroll_approved", payroll_id=line.id, employee_id=line.employee_id)
        return line

    def pay(self, payroll_id: int, payment: Optional[PaymentDetails] = None) -> PayrollLine:
        payment = payment or PaymentDetails()
        line = self._locked(payroll_id)
        ensure_transition(line, PayrollStatus.PAID)
        if not self.allow_negative_net_pay and to_decimal(line.net_salary) < 0:
            raise InvalidStateError(
                f"Payroll {line.id} has a negative net salary and cannot be paid",
                current_status=line.status,
            )
        line.status = PayrollStatus.PAID.value
        line.paid_at = utcnow()
        line.payment_method = payment.method or settings.default_payment_method
        line.payment_reference = payment.reference
        self._settle_advances(line)
        self._commit(line)
        logger.info("payroll_paid", payroll_id=line.id, method=line.payment_method, net_salary=str(line.net_salary))
        return line

    def _settle_advances(self, line: PayrollLine) -> None:
        """Reduce each advance by what this line withheld; runs inside the pay transaction."""
        for item in line.advance_details or []:
            advance = (
                self.db.query(SalaryAdvance)
                .filter(SalaryAdvance.id == item["advance_id"], SalaryAdvance.company_id == self.company_id)
                .with_for_update()
                .one_or_none()
            )
            if advance is None:
                logger.warning("advance_missing_on_pay", payroll_id=line.id, advance_id=item["advance_id"])
                continue
            balance = money(to_decimal(advance.remaining_balance) - to_decimal(item["amount"]))
            if balance <= ADVANCE_PAID_OFF_TOLERANCE:
                advance.remaining_balance = Decimal("0")
                advance.is_paid_off = True
                advance.status = "COMPLETED"
            else:
                advance.remaining_balance = balance
            logger.info(
                "advance_repaid",
                payroll_id=line.id,
                advance_id=advance.id,
                amount=str(item["amount"]),
                remaining_balance=str(advance.remaining_balance),
            )

    def bulk_pay(self, payroll_ids: Iterable[int], payment: Optional[PaymentDetails] = None) -> BulkPayResult:
        result = BulkPayResult()
        for payroll_id in dict.fromkeys(payroll_ids):
            try:
                line = self.pay(payroll_id, payment)
            except PayrollError as exc:
                self.db.rollback()
                result.results.append(
                    BulkPayItem(
                        payroll_id=payroll_id,
                        ok=False,
                        status=getattr(exc, "current_status", None),
                        error=exc.code,
                        message=exc.message,
                    )
                )
                continue
            result.results.append(BulkPayItem(payroll_id=payroll_id, ok=True, status=line.status))
        logger.info("payroll_bulk_paid", paid=len(result.succeeded), failed=len(result.failed))
        return result

    def cancel(self, payroll_id: int, reason: Optional[str] = None) -> PayrollLine:
        line = self._locked(payroll_id)
        ensure_transition(line, PayrollStatus.CANCELLED)
        line.status = PayrollStatus.CANCELLED.value
        line.cancelled_at = utcnow()
        line.cancel_reason = reason.strip() if reason else None
        self._commit(line)
        logger.info("payroll_cancelled", payroll_id=line.id, reason=line.cancel_reason)
        return line

    def edit(self, payroll_id: int, fields: Mapping) -> PayrollLine:
        """Apply component edits to a DRAFT line and recompute its totals.

        ``allowances`` replaces the allowance breakdown. ``total_allowances`` on
        its own is only accepted for lines without a breakdown, so the two never
        disagree. The attendance deduction is capped at the base salary, as the
        calculator caps it. Net salary cannot be set.
        """
        line = self._locked(payroll_id)
        if line.status != PayrollStatus.DRAFT.value:
            raise InvalidStateError(
                f"Payroll {line.id} is {line.status}; only DRAFT lines can be edited",
                current_status=line.status,
            )

        values = values_from_line(line)
        changes = {}
        for name in EDITABLE_MONEY_FIELDS:
            if fields.get(name) is not None:
                changes[name] = _non_negative(name, fields[name])

        if fields.get("allowances") is not None:
            allowances = {key: _non_negative(f"allowance '{key}'", amount) for key, amount in fields["allowances"].items()}
            changes["allowances"] = allowances
            changes["total_allowances"] = money(sum(allowances.values(), Decimal("0")))
        elif fields.get("total_allowances") is not None:
            if values.allowances:
                raise InvalidInputError(
                    "total_allowances cannot be set on a line with an allowance breakdown; edit allowances instead"
                )
            changes["total_allowances"] = _non_negative("total_allowances", fields["total_allowances"])

        edited = values.with_changes(**changes)
        if edited.attendance_deduction > edited.base_salary:
            edited = edited.with_changes(attendance_deduction=edited.base_salary)
        write_values(line, edited)
        if "notes" in fields:
            line.notes = fields["notes"]
        self._commit(line)
        logger.info("payroll_edited", payroll_id=line.id, fields=sorted(changes), net_salary=str(line.net_salary))
        return line


def _non_negative(name: str, value) -> Decimal:
    amount = to_decimal(value)
    if amount < 0:
        raise InvalidInputError(f"{name} must be >= 0")
    return money(amount)
