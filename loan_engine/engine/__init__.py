"""Loan lifecycle and EMI amortization engine."""

from loan_engine.engine.amortization import (
    build_schedule,
    calculate_emi,
    monthly_rate,
    total_repayable,
    validate_terms,
)
from loan_engine.engine.projection import (
    PortfolioSummary,
    ScheduleProjection,
    next_due_date,
    outstanding_balance,
    pending_installments,
    portfolio_summary,
    project,
)
from loan_engine.engine.service import LoanService

__all__ = [
    "LoanService",
    "PortfolioSummary",
    "ScheduleProjection",
    "build_schedule",
    "calculate_emi",
    "monthly_rate",
    "next_due_date",
    "outstanding_balance",
    "pending_installments",
    "portfolio_summary",
    "project",
    "total_repayable",
    "validate_terms",
]
