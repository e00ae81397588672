"""Tests for the in-memory loan registry."""

import threading
from datetime import datetime

import pytest

from loan_engine.engine import lifecycle
from loan_engine.exceptions import ConcurrentModificationError, LoanNotFoundError
from loan_engine.models.enums import LoanStatus
from loan_engine.models.loan import Loan, LoanTerms
from loan_engine.store.memory import InMemoryLoanRegistry


@pytest.fixture
def new_loan(sample_terms: LoanTerms, now: datetime) -> Loan:
    """Unsaved submitted loan."""
    return lifecycle.submit("user-001", sample_terms, "Home purchase", now, loan_id="loan-001")


class TestSave:
    """Tests for compare-and-swap writes."""

    def test_insert_assigns_version_one(self, registry: InMemoryLoanRegistry, new_loan: Loan) -> None:
        saved = registry.save(new_loan, expected_version=0)

        assert saved.version == 1
        assert registry.load("loan-001").version == 1

    def test_update_bumps_version(self, registry: InMemoryLoanRegistry, new_loan: Loan, now: datetime) -> None:
        saved = registry.save(new_loan, expected_version=0)
        approved = lifecycle.approve(saved, "admin-001", now)

        result = registry.save(approved, expected_version=saved.version)

        assert result.version == 2
        assert registry.load("loan-001").status == LoanStatus.APPROVED

    def test_duplicate_insert_conflicts(self, registry: InMemoryLoanRegistry, new_loan: Loan) -> None:
        registry.save(new_loan, expected_version=0)

        with pytest.raises(ConcurrentModificationError) as exc_info:
            registry.save(new_loan, expected_version=0)

        assert exc_info.value.expected_version == 0
        assert exc_info.value.actual_version == 1

    def test_stale_version_conflicts(self, registry: InMemoryLoanRegistry, new_loan: Loan, now: datetime) -> None:
        saved = registry.save(new_loan, expected_version=0)
        registry.save(lifecycle.approve(saved, "admin-001", now), expected_version=1)

        with pytest.raises(ConcurrentModificationError):
            registry.save(lifecycle.reject(saved, "late", now), expected_version=1)

        stored = registry.load("loan-001")
        assert stored.status == LoanStatus.APPROVED
        assert stored.rejected_at is None

    def test_update_of_missing_loan_conflicts(self, registry: InMemoryLoanRegistry, new_loan: Loan) -> None:
        with pytest.raises(ConcurrentModificationError) as exc_info:
            registry.save(new_loan, expected_version=3)

        assert exc_info.value.actual_version is None
        assert registry.loans == {}

    def test_concurrent_writers_one_wins(self, registry: InMemoryLoanRegistry, new_loan: Loan,
                                         now: datetime) -> None:
        saved = registry.save(new_loan, expected_version=0)
        candidates = [lifecycle.approve(saved, f"admin-{i}", now) for i in range(8)]
        barrier = threading.Barrier(len(candidates))
        wins: list[str] = []
        conflicts: list[ConcurrentModificationError] = []
        lock = threading.Lock()

        def write(loan: Loan) -> None:
            barrier.wait()
            try:
                registry.save(loan, expected_version=saved.version)
            except ConcurrentModificationError as e:
                with lock:
                    conflicts.append(e)
            else:
                with lock:
                    wins.append(loan.approved_by)

        threads = [threading.Thread(target=write, args=(c,)) for c in candidates]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(wins) == 1
        assert len(conflicts) == 7
        assert registry.load("loan-001").approved_by == wins[0]


class TestIsolation:
    """Callers never share state with the registry."""

    def test_loaded_copy_is_private(self, registry: InMemoryLoanRegistry, new_loan: Loan) -> None:
        registry.save(new_loan, expected_version=0)

        loaded = registry.load("loan-001")
        loaded.purpose = "changed"

        assert registry.load("loan-001").purpose == "Home purchase"

    def test_saved_input_is_not_aliased(self, registry: InMemoryLoanRegistry, new_loan: Loan,
                                        now: datetime) -> None:
        saved = registry.save(new_loan, expected_version=0)
        approved = lifecycle.approve(saved, "admin-001", now)
        registry.save(approved, expected_version=1)

        approved.schedule.clear()

        assert len(registry.load("loan-001").schedule) == 12

    def test_input_version_untouched(self, registry: InMemoryLoanRegistry, new_loan: Loan) -> None:
        registry.save(new_loan, expected_version=0)
        assert new_loan.version == 0


class TestQueries:
    """Tests for lookup and summary methods."""

    def test_load_missing(self, registry: InMemoryLoanRegistry) -> None:
        with pytest.raises(LoanNotFoundError):
            registry.load("nope")

    def test_applicant_index(self, registry: InMemoryLoanRegistry, sample_terms: LoanTerms,
                             now: datetime) -> None:
        for i in range(3):
            registry.save(lifecycle.submit("user-001", sample_terms, "x", now, loan_id=f"a-{i}"), 0)
        registry.save(lifecycle.submit("user-002", sample_terms, "x", now, loan_id="b-0"), 0)

        loans = registry.get_applicant_loans("user-001")

        assert [loan.loan_id for loan in loans] == ["a-0", "a-1", "a-2"]
        assert registry.get_applicant_loans("user-999") == []

    def test_index_not_duplicated_on_update(self, registry: InMemoryLoanRegistry, new_loan: Loan,
                                            now: datetime) -> None:
        saved = registry.save(new_loan, expected_version=0)
        registry.save(lifecycle.approve(saved, "admin-001", now), expected_version=1)

        assert len(registry.get_applicant_loans("user-001")) == 1

    def test_all_loans_and_summary(self, registry: InMemoryLoanRegistry, sample_terms: LoanTerms,
                                   now: datetime) -> None:
        first = registry.save(lifecycle.submit("user-001", sample_terms, "x", now, loan_id="l-1"), 0)
        registry.save(lifecycle.submit("user-001", sample_terms, "x", now, loan_id="l-2"), 0)
        registry.save(lifecycle.approve(first, "admin-001", now), expected_version=1)

        assert {loan.loan_id for loan in registry.all_loans()} == {"l-1", "l-2"}
        assert registry.summary() == {"loans": 2, "approved": 1, "submitted": 1}

    def test_empty_summary(self, registry: InMemoryLoanRegistry) -> None:
        assert registry.summary() == {"loans": 0}
