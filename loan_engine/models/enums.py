"""Enumeration types for loan lifecycle entities."""

from enum import Enum


class LoanStatus(str, Enum):
    SUBMITTED = "SUBMITTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class InstallmentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"


class EventType(str, Enum):
    LOAN_SUBMITTED = "loan.submitted"
    LOAN_APPROVED = "loan.approved"
    LOAN_REJECTED = "loan.rejected"
    INSTALLMENT_PAID = "installment.paid"
