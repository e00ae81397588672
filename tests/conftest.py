"""Pytest configuration and fixtures."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from loan_engine.clock import FixedClock
from loan_engine.engine.service import LoanService
from loan_engine.models.loan import LoanTerms
from loan_engine.store.memory import InMemoryLoanRegistry


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def now() -> datetime:
    """Fixed command instant."""
    return datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)


@pytest.fixture
def clock(now: datetime) -> FixedClock:
    """Clock frozen at ``now``."""
    return FixedClock(now)


@pytest.fixture
def registry() -> InMemoryLoanRegistry:
    """Fresh in-memory registry."""
    return InMemoryLoanRegistry()


@pytest.fixture
def service(registry: InMemoryLoanRegistry, clock: FixedClock) -> LoanService:
    """Service over the in-memory registry and fixed clock."""
    return LoanService(registry, clock=clock)


@pytest.fixture
def sample_terms() -> LoanTerms:
    """100,000 at 12% over 12 months."""
    return LoanTerms(amount=Decimal("100000"), interest_rate=Decimal("12"), tenure_months=12)


@pytest.fixture
def sample_applicant_id() -> str:
    """Sample applicant ID."""
    return "user-test-001"
