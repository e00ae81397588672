"""In-memory loan registry with optimistic concurrency control."""

import copy
import logging
import threading
from dataclasses import dataclass, field, replace

from loan_engine.exceptions import ConcurrentModificationError, LoanNotFoundError
from loan_engine.models.loan import Loan

logger = logging.getLogger(__name__)


@dataclass
class InMemoryLoanRegistry:
    """Thread-safe loan store keyed by loan ID.

    Records are deep-copied on the way in and out, so a caller holding a
    loaded ``Loan`` can never change what the registry holds without going
    through ``save``.
    """

    loans: dict[str, Loan] = field(default_factory=dict)

    # Relationship indexes
    _applicant_loans: dict[str, list[str]] = field(default_factory=dict)

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def load(self, loan_id: str) -> Loan:
        """Return a private copy of the latest record."""
        with self._lock:
            stored = self.loans.get(loan_id)
            if stored is None:
                raise LoanNotFoundError(loan_id)
            return copy.deepcopy(stored)

    def save(self, loan: Loan, expected_version: int) -> Loan:
        """Compare-and-swap the record for ``loan.loan_id``."""
        with self._lock:
            current = self.loans.get(loan.loan_id)
            actual_version = current.version if current is not None else 0

            if actual_version != expected_version:
                logger.warning(
                    "Version conflict on loan %s: expected %d, found %d",
                    loan.loan_id,
                    expected_version,
                    actual_version,
                )
                raise ConcurrentModificationError(
                    loan.loan_id,
                    expected_version=expected_version,
                    actual_version=actual_version if current is not None else None,
                )

            stored = copy.deepcopy(replace(loan, version=expected_version + 1))
            self.loans[loan.loan_id] = stored
            if current is None:
                self._applicant_loans.setdefault(loan.applicant_id, []).append(loan.loan_id)

            logger.debug("Saved loan %s at version %d", loan.loan_id, stored.version)
            return copy.deepcopy(stored)

    # Query methods
    def get_applicant_loans(self, applicant_id: str) -> list[Loan]:
        """Get all loans for an applicant, in submission order."""
        with self._lock:
            loan_ids = self._applicant_loans.get(applicant_id, [])
            return [copy.deepcopy(self.loans[lid]) for lid in loan_ids]

    def all_loans(self) -> list[Loan]:
        """Snapshot of every stored loan."""
        with self._lock:
            return [copy.deepcopy(loan) for loan in self.loans.values()]

    def summary(self) -> dict[str, int]:
        """Return loan counts by status."""
        with self._lock:
            counts: dict[str, int] = {"loans": len(self.loans)}
            for loan in self.loans.values():
                key = loan.status.value.lower()
                counts[key] = counts.get(key, 0) + 1
            return counts
