"""Command handlers binding the lifecycle to a registry, a clock and a sink."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Protocol

from loan_engine.clock import Clock, SystemClock
from loan_engine.engine import lifecycle
from loan_engine.exceptions import LoanEngineError, SinkError
from loan_engine.logging import loan_context
from loan_engine.models.base import Event
from loan_engine.models.enums import EventType
from loan_engine.models.loan import Installment, Loan, LoanTerms
from loan_engine.store.base import LoanRegistry

logger = logging.getLogger(__name__)

EVENT_SOURCE = "loan-engine"
DEFAULT_TOPIC = "lending.loan-events"


class EventSink(Protocol):
    def send(self, topic: str, record: Any, key: str | None = None) -> None: ...


class LoanService:
    """Apply, approve, reject and record payments against stored loans.

    Every mutating command reads the latest record, validates the
    transition against it and writes the result back with the version it
    read. A write that loses a race raises ``ConcurrentModificationError``;
    the service never retries on its own.

    Parameters
    ----------
    registry : LoanRegistry
        Loan store with compare-and-swap writes.
    clock : Clock | None
        Source of command timestamps (default: UTC wall clock).
    sink : EventSink | None
        Where lifecycle events are published after each committed write.
    topic : str
        Topic name handed to the sink.
    """

    def __init__(
        self,
        registry: LoanRegistry,
        clock: Clock | None = None,
        sink: EventSink | None = None,
        topic: str = DEFAULT_TOPIC,
    ) -> None:
        self.registry = registry
        self.clock = clock or SystemClock()
        self.sink = sink
        self.topic = topic

    def apply(
        self,
        applicant_id: str,
        terms: LoanTerms,
        purpose: str,
        property_value: Decimal | None = None,
    ) -> Loan:
        """Submit a new loan application."""
        now = self.clock.now()
        try:
            loan = lifecycle.submit(applicant_id, terms, purpose, now, property_value=property_value)
        except LoanEngineError as e:
            logger.warning("Application from %s rejected: %s", applicant_id, e)
            raise

        saved = self.registry.save(loan, expected_version=0)
        logger.info(
            "Loan %s submitted by %s: amount=%s rate=%s%% tenure=%d",
            saved.loan_id,
            applicant_id,
            saved.amount,
            saved.interest_rate,
            saved.tenure_months,
            extra=loan_context(saved),
        )
        self._publish(EventType.LOAN_SUBMITTED, saved, now)
        return saved

    def approve(self, loan_id: str, approver_id: str) -> Loan:
        """Approve a submitted loan and generate its EMI schedule."""
        saved = self._execute(loan_id, "approve", lambda loan, now: lifecycle.approve(loan, approver_id, now))
        logger.info(
            "Loan %s approved by %s: %d installments of %s, next due %s",
            loan_id,
            approver_id,
            len(saved.schedule),
            saved.schedule[0].amount,
            saved.next_due_date,
            extra=loan_context(saved),
        )
        self._publish(EventType.LOAN_APPROVED, saved, saved.approved_at)
        return saved

    def reject(self, loan_id: str, reason: str | None = None) -> Loan:
        """Reject a submitted loan."""
        saved = self._execute(loan_id, "reject", lambda loan, now: lifecycle.reject(loan, reason, now))
        logger.info("Loan %s rejected: %s", loan_id, reason, extra=loan_context(saved))
        self._publish(EventType.LOAN_REJECTED, saved, saved.rejected_at)
        return saved

    def record_payment(self, loan_id: str, installment_id: str, transaction_id: str) -> Loan:
        """Mark one installment of an approved loan as paid."""
        saved = self._execute(
            loan_id,
            "record_payment",
            lambda loan, now: lifecycle.record_payment(loan, installment_id, transaction_id, now),
        )
        logger.info(
            "Installment %s of loan %s paid (txn %s), next due %s",
            installment_id,
            loan_id,
            transaction_id,
            saved.next_due_date,
            extra=loan_context(saved, installment_id=installment_id),
        )
        self._publish(
            EventType.INSTALLMENT_PAID,
            saved,
            saved.updated_at,
            installment=saved.find_installment(installment_id),
        )
        return saved

    def get_loan(self, loan_id: str) -> Loan:
        """Load the latest record for a loan."""
        return self.registry.load(loan_id)

    def get_schedule(self, loan_id: str) -> list[Installment]:
        """Installments of a loan in sequence order (empty unless approved)."""
        return sorted(self.registry.load(loan_id).schedule, key=lambda inst: inst.sequence)

    def _execute(self, loan_id: str, action: str, transition: Any) -> Loan:
        """Load, transition and conditionally save one loan."""
        current = self.registry.load(loan_id)
        now = self.clock.now()
        try:
            updated = transition(current, now)
        except LoanEngineError as e:
            logger.warning(
                "Command %s on loan %s refused: %s",
                action,
                loan_id,
                e,
                extra=loan_context(current, action=action),
            )
            raise
        saved = self.registry.save(updated, expected_version=current.version)
        logger.debug(
            "Command %s on loan %s committed at version %d",
            action,
            loan_id,
            saved.version,
            extra=loan_context(saved, action=action),
        )
        return saved

    def _publish(
        self,
        event_type: EventType,
        loan: Loan,
        when: datetime | None,
        installment: Installment | None = None,
    ) -> None:
        if self.sink is None:
            return

        data: dict[str, Any] = {
            "loan_id": loan.loan_id,
            "applicant_id": loan.applicant_id,
            "status": loan.status.value,
            "amount": loan.amount,
            "next_due_date": loan.next_due_date,
        }
        if event_type == EventType.LOAN_APPROVED:
            data["approved_by"] = loan.approved_by
            data["installment_amount"] = loan.schedule[0].amount
            data["tenure_months"] = loan.tenure_months
        elif event_type == EventType.LOAN_REJECTED:
            data["rejection_reason"] = loan.rejection_reason
        elif installment is not None:
            data["installment_id"] = installment.installment_id
            data["sequence"] = installment.sequence
            data["installment_amount"] = installment.amount
            data["transaction_id"] = installment.transaction_id

        event = Event(
            event_id=uuid.uuid4().hex,
            event_type=event_type.value,
            event_time=when or self.clock.now(),
            source=EVENT_SOURCE,
            subject=loan.loan_id,
            data=data,
            metadata={"version": loan.version},
        )

        # The write is already committed; a failed notification must not undo it
        try:
            self.sink.send(self.topic, event, key=loan.loan_id)
        except SinkError:
            logger.exception(
                "Failed to publish %s for loan %s",
                event_type.value,
                loan.loan_id,
                extra=loan_context(loan, event_type=event_type.value),
            )
