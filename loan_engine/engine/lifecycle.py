"""Loan lifecycle state machine.

Every transition is a pure function: it takes the current ``Loan`` record
and returns a new one, leaving its input untouched. Loading and saving the
record is the caller's job (see ``loan_engine.engine.service``).

Loan states::

    SUBMITTED --approve--> APPROVED
    SUBMITTED --reject---> REJECTED

Each installment of an approved loan moves independently from ``PENDING``
to ``PAID`` and never back.
"""

import uuid
from dataclasses import replace
from datetime import datetime
from decimal import Decimal

from loan_engine.engine.amortization import build_schedule, validate_terms
from loan_engine.engine.projection import next_due_date
from loan_engine.exceptions import (
    InstallmentAlreadyPaidError,
    InstallmentNotFoundError,
    InvalidPaymentError,
    InvalidTermsError,
    InvalidTransitionError,
    LoanNotApprovedError,
)
from loan_engine.models.enums import InstallmentStatus, LoanStatus
from loan_engine.models.loan import Loan, LoanTerms


def submit(
    applicant_id: str,
    terms: LoanTerms,
    purpose: str,
    now: datetime,
    property_value: Decimal | None = None,
    loan_id: str | None = None,
) -> Loan:
    """Create a new application in ``SUBMITTED`` state.

    Terms are validated here, before any schedule exists, so a bad
    application never reaches the registry.

    Raises
    ------
    InvalidTermsError
        If the terms cannot be amortized or the property value is negative
        or not finite.
    """
    validate_terms(terms)
    if property_value is not None and (not Decimal(property_value).is_finite() or property_value < 0):
        raise InvalidTermsError(
            f"Property value must be a finite non-negative amount, got {property_value}",
            field="property_value",
        )

    return Loan(
        loan_id=loan_id or uuid.uuid4().hex,
        applicant_id=applicant_id,
        amount=terms.amount,
        interest_rate=terms.interest_rate,
        tenure_months=terms.tenure_months,
        purpose=purpose,
        status=LoanStatus.SUBMITTED,
        created_at=now,
        property_value=property_value,
    )


def approve(loan: Loan, approver_id: str, now: datetime) -> Loan:
    """Approve a submitted loan and generate its schedule."""
    _require_submitted(loan, "approve")

    schedule = build_schedule(loan.terms, start_date=now, loan_id=loan.loan_id)
    return replace(
        loan,
        status=LoanStatus.APPROVED,
        approved_at=now,
        approved_by=approver_id,
        schedule=schedule,
        next_due_date=next_due_date(schedule, now),
        updated_at=now,
    )


def reject(loan: Loan, reason: str | None, now: datetime) -> Loan:
    """Reject a submitted loan. The schedule stays empty."""
    _require_submitted(loan, "reject")

    return replace(
        loan,
        status=LoanStatus.REJECTED,
        rejected_at=now,
        rejection_reason=reason,
        schedule=[],
        next_due_date=None,
        updated_at=now,
    )


def record_payment(
    loan: Loan,
    installment_id: str,
    transaction_id: str,
    now: datetime,
) -> Loan:
    """Mark one pending installment as paid.

    Installments may be settled in any order.

    Raises
    ------
    InvalidPaymentError
        If ``transaction_id`` is blank.
    LoanNotApprovedError
        If the loan is not approved.
    InstallmentNotFoundError
        If the loan has no installment with that ID.
    InstallmentAlreadyPaidError
        If the installment is already paid.
    """
    if not transaction_id or not transaction_id.strip():
        raise InvalidPaymentError("Transaction ID is required")

    if loan.status != LoanStatus.APPROVED:
        raise LoanNotApprovedError(
            f"Cannot record payment on loan {loan.loan_id} in status {loan.status.value}",
            loan_id=loan.loan_id,
            status=loan.status.value,
        )

    target = loan.find_installment(installment_id)
    if target is None:
        raise InstallmentNotFoundError(
            f"Installment {installment_id} not found on loan {loan.loan_id}",
            loan_id=loan.loan_id,
            installment_id=installment_id,
        )
    if target.status == InstallmentStatus.PAID:
        raise InstallmentAlreadyPaidError(
            f"Installment {installment_id} on loan {loan.loan_id} is already paid",
            loan_id=loan.loan_id,
            installment_id=installment_id,
        )

    schedule = [
        replace(inst, status=InstallmentStatus.PAID, paid_at=now, transaction_id=transaction_id)
        if inst.installment_id == installment_id
        else replace(inst)
        for inst in loan.schedule
    ]
    return replace(
        loan,
        schedule=schedule,
        next_due_date=next_due_date(schedule, now),
        updated_at=now,
    )


def _require_submitted(loan: Loan, action: str) -> None:
    if loan.status != LoanStatus.SUBMITTED:
        raise InvalidTransitionError(
            f"Cannot {action} loan {loan.loan_id} in status {loan.status.value}",
            loan_id=loan.loan_id,
            status=loan.status.value,
        )
