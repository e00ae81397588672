"""Loan registry boundary."""

from typing import Protocol

from loan_engine.models.loan import Loan


class LoanRegistry(Protocol):
    """Store of loan records with per-loan compare-and-swap writes.

    ``save`` must be linearizable per loan ID: it succeeds only when the
    stored version still equals ``expected_version`` (``0`` meaning "no
    record yet") and returns the stored copy with its version bumped.
    Otherwise it raises ``ConcurrentModificationError``.
    """

    def load(self, loan_id: str) -> Loan:
        """Return the latest record or raise ``LoanNotFoundError``."""
        ...

    def save(self, loan: Loan, expected_version: int) -> Loan:
        """Replace the record if nobody else wrote it since ``expected_version``."""
        ...
