"""Schedule projector: summary facts derived from an installment schedule."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from loan_engine.models.enums import InstallmentStatus, LoanStatus
from loan_engine.models.loan import Installment, Loan

ZERO = Decimal("0")


@dataclass(frozen=True)
class ScheduleProjection:
    """Aggregates over one loan's schedule at a point in time."""

    next_due_date: date | None
    outstanding_balance: Decimal
    amount_paid: Decimal
    paid_count: int
    pending_count: int

    @property
    def is_settled(self) -> bool:
        """True once every installment of a non-empty schedule is paid."""
        return self.pending_count == 0 and self.paid_count > 0


@dataclass(frozen=True)
class PortfolioSummary:
    """Dashboard counts over a set of loans."""

    total_loans: int = 0
    submitted_loans: int = 0
    approved_loans: int = 0
    rejected_loans: int = 0
    total_loan_amount: Decimal = ZERO
    approved_loan_amount: Decimal = ZERO
    outstanding_balance: Decimal = ZERO
    by_status: dict[str, int] = field(default_factory=dict)


def next_due_date(schedule: Sequence[Installment], as_of: date | datetime) -> date | None:
    """Due date of the next pending installment.

    Picks the earliest pending installment due strictly after ``as_of``.
    When every pending installment is already due (overdue), the earliest
    pending one is returned instead. Returns ``None`` when nothing is
    pending.
    """
    today = as_of.date() if isinstance(as_of, datetime) else as_of
    pending = sorted(
        (inst for inst in schedule if inst.status == InstallmentStatus.PENDING),
        key=lambda inst: inst.sequence,
    )
    if not pending:
        return None

    for inst in pending:
        if inst.due_date > today:
            return inst.due_date
    return pending[0].due_date


def outstanding_balance(schedule: Iterable[Installment]) -> Decimal:
    """Sum of amounts still pending."""
    return sum(
        (inst.amount for inst in schedule if inst.status == InstallmentStatus.PENDING),
        ZERO,
    )


def project(schedule: Sequence[Installment], as_of: date | datetime) -> ScheduleProjection:
    """Compute every schedule aggregate in one pass over the installments."""
    paid = [inst for inst in schedule if inst.status == InstallmentStatus.PAID]
    return ScheduleProjection(
        next_due_date=next_due_date(schedule, as_of),
        outstanding_balance=outstanding_balance(schedule),
        amount_paid=sum((inst.amount for inst in paid), ZERO),
        paid_count=len(paid),
        pending_count=len(schedule) - len(paid),
    )


def pending_installments(loans: Iterable[Loan]) -> list[tuple[Loan, Installment]]:
    """Pending installments across the given loans, in due-date order."""
    pending = [
        (loan, inst)
        for loan in loans
        for inst in loan.schedule
        if inst.status == InstallmentStatus.PENDING
    ]
    pending.sort(key=lambda pair: (pair[1].due_date, pair[0].loan_id, pair[1].sequence))
    return pending


def portfolio_summary(loans: Iterable[Loan]) -> PortfolioSummary:
    """Summarize a set of loans the way the admin dashboard reports them."""
    by_status = {status.value: 0 for status in LoanStatus}
    total_amount = ZERO
    approved_amount = ZERO
    balance = ZERO

    for loan in loans:
        by_status[loan.status.value] += 1
        total_amount += loan.amount
        if loan.status == LoanStatus.APPROVED:
            approved_amount += loan.amount
            balance += outstanding_balance(loan.schedule)

    return PortfolioSummary(
        total_loans=sum(by_status.values()),
        submitted_loans=by_status[LoanStatus.SUBMITTED.value],
        approved_loans=by_status[LoanStatus.APPROVED.value],
        rejected_loans=by_status[LoanStatus.REJECTED.value],
        total_loan_amount=total_amount,
        approved_loan_amount=approved_amount,
        outstanding_balance=balance,
        by_status=by_status,
    )
