"""Loan lifecycle and EMI amortization engine."""

__version__ = "0.1.0"
