"""Loan and installment models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from loan_engine.models.enums import InstallmentStatus, LoanStatus


@dataclass(frozen=True)
class LoanTerms:
    """Numeric terms fixed at application time."""

    amount: Decimal  # Principal borrowed
    interest_rate: Decimal  # Annual rate in percent (e.g., 12 for 12%)
    tenure_months: int


@dataclass
class Installment:
    """One scheduled repayment (EMI)."""

    installment_id: str
    sequence: int  # 1, 2, 3, ...
    due_date: date
    amount: Decimal
    status: InstallmentStatus = InstallmentStatus.PENDING
    paid_at: datetime | None = None
    transaction_id: str | None = None

    @property
    def is_paid(self) -> bool:
        return self.status == InstallmentStatus.PAID


@dataclass
class Loan:
    """Loan application and, once approved, its amortizing obligation."""

    loan_id: str
    applicant_id: str
    amount: Decimal
    interest_rate: Decimal
    tenure_months: int
    purpose: str
    status: LoanStatus
    created_at: datetime
    property_value: Decimal | None = None  # Collateral value for home loans
    approved_at: datetime | None = None
    approved_by: str | None = None
    rejected_at: datetime | None = None
    rejection_reason: str | None = None
    schedule: list[Installment] = field(default_factory=list)
    next_due_date: date | None = None  # Derived from schedule, never authoritative
    updated_at: datetime | None = None
    version: int = 0  # Registry revision, 0 until first save

    @property
    def terms(self) -> LoanTerms:
        return LoanTerms(
            amount=self.amount,
            interest_rate=self.interest_rate,
            tenure_months=self.tenure_months,
        )

    def find_installment(self, installment_id: str) -> Installment | None:
        """Return the installment with the given ID, if the loan has one."""
        for installment in self.schedule:
            if installment.installment_id == installment_id:
                return installment
        return None
