"""Tests for custom exception hierarchy."""

from loan_engine.exceptions import (
    ConcurrentModificationError,
    ConfigurationError,
    EntityNotFoundError,
    InstallmentAlreadyPaidError,
    InstallmentError,
    InstallmentNotFoundError,
    InvalidPaymentError,
    InvalidTermsError,
    InvalidTransitionError,
    LoanEngineError,
    LoanNotApprovedError,
    LoanNotFoundError,
    SinkError,
)


class TestExceptionHierarchy:
    """Test exception inheritance chain."""

    def test_loan_engine_error_is_exception(self) -> None:
        assert isinstance(LoanEngineError("test"), Exception)

    def test_invalid_terms_is_loan_engine_error(self) -> None:
        err = InvalidTermsError("bad", field="amount")
        assert isinstance(err, LoanEngineError)
        assert err.field == "amount"

    def test_invalid_payment_is_loan_engine_error(self) -> None:
        assert isinstance(InvalidPaymentError("test"), LoanEngineError)

    def test_loan_not_approved_is_invalid_transition(self) -> None:
        err = LoanNotApprovedError("test", loan_id="loan-1", status="SUBMITTED")
        assert isinstance(err, InvalidTransitionError)
        assert err.loan_id == "loan-1"
        assert err.status == "SUBMITTED"

    def test_installment_errors_share_base(self) -> None:
        assert isinstance(InstallmentNotFoundError("x"), InstallmentError)
        assert isinstance(InstallmentAlreadyPaidError("x"), InstallmentError)
        assert not isinstance(InstallmentAlreadyPaidError("x"), InvalidTransitionError)

    def test_loan_not_found_is_entity_not_found(self) -> None:
        err = LoanNotFoundError("loan-001")
        assert isinstance(err, EntityNotFoundError)
        assert err.loan_id == "loan-001"
        assert str(err) == "Loan loan-001 not found"

    def test_concurrent_modification_carries_versions(self) -> None:
        err = ConcurrentModificationError("loan-001", expected_version=2, actual_version=3)
        assert isinstance(err, LoanEngineError)
        assert err.expected_version == 2
        assert err.actual_version == 3
        assert "loan-001" in str(err)

    def test_configuration_error_is_loan_engine_error(self) -> None:
        assert isinstance(ConfigurationError("test"), LoanEngineError)

    def test_sink_error_is_loan_engine_error(self) -> None:
        assert isinstance(SinkError("test"), LoanEngineError)
