"""Domain models for the loan lifecycle engine."""

from loan_engine.models.base import Event
from loan_engine.models.enums import EventType, InstallmentStatus, LoanStatus
from loan_engine.models.loan import Installment, Loan, LoanTerms

__all__ = [
    "Event",
    "EventType",
    "Installment",
    "InstallmentStatus",
    "Loan",
    "LoanStatus",
    "LoanTerms",
]
