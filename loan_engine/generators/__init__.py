"""Sample data generators."""

from loan_engine.generators.application import ApplicationRequest, LoanApplicationGenerator

__all__ = ["ApplicationRequest", "LoanApplicationGenerator"]
