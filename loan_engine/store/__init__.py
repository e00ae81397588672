"""Loan registries: the engine's storage boundary."""

from loan_engine.store.base import LoanRegistry
from loan_engine.store.memory import InMemoryLoanRegistry
from loan_engine.store.postgres import PostgresLoanRegistry

__all__ = ["InMemoryLoanRegistry", "LoanRegistry", "PostgresLoanRegistry"]
