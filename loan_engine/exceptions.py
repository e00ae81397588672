"""Custom exception hierarchy for loan-engine."""


class LoanEngineError(Exception):
    """Base exception for all loan-engine errors."""


class InvalidTermsError(LoanEngineError):
    """Raised when loan terms are malformed at application time."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class InvalidPaymentError(LoanEngineError):
    """Raised when a payment command carries an unusable payload."""


class InvalidTransitionError(LoanEngineError):
    """Raised when a lifecycle command targets a loan in the wrong state."""

    def __init__(self, message: str, loan_id: str | None = None, status: str | None = None) -> None:
        super().__init__(message)
        self.loan_id = loan_id
        self.status = status


class LoanNotApprovedError(InvalidTransitionError):
    """Raised when a payment is recorded against a loan that is not approved."""


class InstallmentError(LoanEngineError):
    """Base class for installment-level failures."""

    def __init__(self, message: str, loan_id: str | None = None, installment_id: str | None = None) -> None:
        super().__init__(message)
        self.loan_id = loan_id
        self.installment_id = installment_id


class InstallmentNotFoundError(InstallmentError):
    """Raised when a payment targets an installment the loan does not have."""


class InstallmentAlreadyPaidError(InstallmentError):
    """Raised when a payment targets an installment that is already settled."""


class EntityNotFoundError(LoanEngineError):
    """Raised when a referenced entity does not exist."""


class LoanNotFoundError(EntityNotFoundError):
    """Raised when a loan identifier is unknown to the registry."""

    def __init__(self, loan_id: str) -> None:
        super().__init__(f"Loan {loan_id} not found")
        self.loan_id = loan_id


class ConcurrentModificationError(LoanEngineError):
    """Raised when a registry write loses a race against another writer.

    The caller must reload the loan and re-validate the command against
    the fresh record; resubmitting the stale mutation is never correct.
    """

    def __init__(self, loan_id: str, expected_version: int, actual_version: int | None = None) -> None:
        super().__init__(
            f"Loan {loan_id} was modified concurrently "
            f"(expected version {expected_version}, found {actual_version})"
        )
        self.loan_id = loan_id
        self.expected_version = expected_version
        self.actual_version = actual_version


class ConfigurationError(LoanEngineError):
    """Raised when configuration is invalid or missing."""


class SinkError(LoanEngineError):
    """Raised when a sink operation fails."""
