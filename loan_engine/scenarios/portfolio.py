"""Portfolio simulation: drive generated applications through the engine."""

from __future__ import annotations

import logging
import random
from datetime import datetime, timezone
from typing import Any

from dateutil.relativedelta import relativedelta

from loan_engine.clock import FixedClock
from loan_engine.engine.projection import PortfolioSummary, portfolio_summary
from loan_engine.engine.service import LoanService
from loan_engine.generators.application import LoanApplicationGenerator
from loan_engine.models.enums import InstallmentStatus, LoanStatus
from loan_engine.store.memory import InMemoryLoanRegistry

logger = logging.getLogger(__name__)

REJECTION_REASONS = [
    "Insufficient income documentation",
    "Property valuation below requested amount",
    "Unfavourable credit history",
]


class PortfolioSimulation:
    """Simulate a lending desk over a number of months.

    This scenario:
    - submits generated applications,
    - approves or rejects each one,
    - then advances a fixed clock month by month, paying each installment
      that has fallen due with probability ``on_time_rate``.

    Every state change goes through ``LoanService``, so the registry ends up
    holding records produced by exactly the same rules as production.
    """

    def __init__(
        self,
        num_applicants: int = 50,
        num_applications: int = 100,
        approval_rate: float = 0.70,
        on_time_rate: float = 0.90,
        months: int = 12,
        start: datetime | None = None,
        seed: int | None = None,
        *,
        sink: Any | None = None,
        topic: str = "lending.loan-events",
    ) -> None:
        """Initialize portfolio simulation.

        Parameters
        ----------
        num_applicants : int
            Number of distinct applicants.
        num_applications : int
            Number of applications submitted on day one.
        approval_rate : float
            Probability an application is approved (0.0 to 1.0).
        on_time_rate : float
            Probability a due installment is paid in the month it falls due.
        months : int
            Number of months to simulate after approval.
        start : datetime | None
            Simulation start instant (default: 2024-01-01 UTC).
        seed : int | None
            Random seed for reproducibility.
        sink : Any | None
            Event sink handed to the service.
        topic : str
            Event topic.
        """
        self.num_applicants = num_applicants
        self.num_applications = num_applications
        self.approval_rate = approval_rate
        self.on_time_rate = on_time_rate
        self.months = months
        self.seed = seed
        self._random = random.Random(seed)

        self.start = start or datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)
        self.clock = FixedClock(self.start)
        self.registry = InMemoryLoanRegistry()
        self.service = LoanService(self.registry, clock=self.clock, sink=sink, topic=topic)
        self._application_gen = LoanApplicationGenerator(seed=seed)
        self._txn_counter = 0

    def run(self) -> InMemoryLoanRegistry:
        """Run the simulation.

        Returns
        -------
        InMemoryLoanRegistry
            Registry holding every simulated loan.
        """
        logger.info(
            "Starting portfolio simulation: %d applications from %d applicants over %d months",
            self.num_applications,
            self.num_applicants,
            self.months,
        )

        self._application_gen.generate_applicants(self.num_applicants)
        loan_ids = []
        for request in self._application_gen.generate_batch(self.num_applications):
            loan = self.service.apply(
                request.applicant_id,
                request.terms,
                request.purpose,
                property_value=request.property_value,
            )
            loan_ids.append(loan.loan_id)

        for loan_id in loan_ids:
            if self._random.random() < self.approval_rate:
                self.service.approve(loan_id, approver_id="sim-underwriter")
            else:
                self.service.reject(loan_id, reason=self._random.choice(REJECTION_REASONS))

        # Offset from the start so month-end clamping does not accumulate
        for month in range(1, self.months + 1):
            self.clock.set(self.start + relativedelta(months=month))
            self._collect_due_payments(loan_ids)

        logger.info("Simulation finished: %s", self.registry.summary())
        return self.registry

    def _collect_due_payments(self, loan_ids: list[str]) -> None:
        """Pay installments that have fallen due, honouring ``on_time_rate``."""
        today = self.clock.now().date()
        for loan_id in loan_ids:
            loan = self.service.get_loan(loan_id)
            if loan.status != LoanStatus.APPROVED:
                continue
            for inst in loan.schedule:
                if inst.status != InstallmentStatus.PENDING or inst.due_date > today:
                    continue
                if self._random.random() >= self.on_time_rate:
                    continue
                self._txn_counter += 1
                self.service.record_payment(loan_id, inst.installment_id, f"TXN{self._txn_counter:08d}")

    def export(self, sinks: list[Any]) -> None:
        """Export loan snapshots to sinks.

        Parameters
        ----------
        sinks : list[Any]
            Sink instances (ConsoleSink, JsonFileSink, KafkaSink).
        """
        loans = self.registry.all_loans()
        for sink in sinks:
            sink.write_batch("loans", loans)

        logger.info("Exported %d loans to %d sinks", len(loans), len(sinks))

    def get_portfolio_summary(self) -> PortfolioSummary:
        """Dashboard figures for the simulated portfolio."""
        return portfolio_summary(self.registry.all_loans())
