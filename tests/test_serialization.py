"""Tests for shared serialization utilities."""

import json
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal

from loan_engine.engine import lifecycle
from loan_engine.models.enums import InstallmentStatus, LoanStatus
from loan_engine.models.loan import LoanTerms
from loan_engine.sinks.serialization import (
    installment_from_dict,
    loan_from_dict,
    loan_to_dict,
    serialize_value,
    to_dict,
)


@dataclass
class _SampleData:
    name: str
    amount: Decimal
    created_at: datetime


class TestToDict:
    """Tests for to_dict function."""

    def test_dataclass(self) -> None:
        obj = _SampleData(name="test", amount=Decimal("100.50"), created_at=datetime(2024, 1, 1))
        result = to_dict(obj)
        assert result["name"] == "test"
        assert result["amount"] == "100.50"
        assert result["created_at"] == "2024-01-01T00:00:00"

    def test_dict_values_serialized(self) -> None:
        result = to_dict({"amount": Decimal("5.00"), "due": date(2024, 2, 1)})
        assert result == {"amount": "5.00", "due": "2024-02-01"}

    def test_other_type(self) -> None:
        assert to_dict(42) == {"value": "42"}


class TestSerializeValue:
    """Tests for serialize_value function."""

    def test_decimal(self) -> None:
        assert serialize_value(Decimal("99.99")) == "99.99"

    def test_enum(self) -> None:
        assert serialize_value(LoanStatus.APPROVED) == "APPROVED"

    def test_aware_datetime(self) -> None:
        dt = datetime(2024, 6, 15, 10, 30, tzinfo=timezone.utc)
        assert serialize_value(dt) == "2024-06-15T10:30:00+00:00"

    def test_date(self) -> None:
        assert serialize_value(date(2024, 6, 15)) == "2024-06-15"

    def test_list_and_nested_dict(self) -> None:
        data = {"items": [Decimal("1.10"), {"on": date(2024, 1, 1)}]}
        assert serialize_value(data) == {"items": ["1.10", {"on": "2024-01-01"}]}

    def test_none_passthrough(self) -> None:
        assert serialize_value(None) is None


class TestLoanDocuments:
    """Tests for the loan document format used by the registry."""

    def test_submitted_loan_round_trip(self, sample_terms: LoanTerms, now: datetime) -> None:
        loan = lifecycle.submit(
            "user-001", sample_terms, "Home purchase", now, property_value=Decimal("250000"), loan_id="loan-001"
        )

        assert loan_from_dict(loan_to_dict(loan)) == loan

    def test_paid_loan_survives_json(self, sample_terms: LoanTerms, now: datetime) -> None:
        """A loan with a paid installment is unchanged after passing through JSON text."""
        loan = lifecycle.submit("user-001", sample_terms, "x", now, loan_id="loan-001")
        loan = lifecycle.approve(loan, "admin-001", now)
        loan = lifecycle.record_payment(loan, "loan-001-001", "TXN-1", now)

        restored = loan_from_dict(json.loads(json.dumps(loan_to_dict(loan))))

        assert restored == loan
        assert restored.schedule[0].status == InstallmentStatus.PAID
        assert restored.schedule[0].amount == Decimal("8884.88")
        assert restored.approved_at.tzinfo is not None

    def test_document_uses_plain_json_types(self, sample_terms: LoanTerms, now: datetime) -> None:
        loan = lifecycle.approve(lifecycle.submit("user-001", sample_terms, "x", now, loan_id="l"), "a", now)
        doc = loan_to_dict(loan)

        assert doc["amount"] == "100000"
        assert doc["status"] == "APPROVED"
        assert doc["next_due_date"] == "2024-02-15"
        assert doc["schedule"][0]["installment_id"] == "l-001"
        assert doc["property_value"] is None

    def test_installment_defaults(self) -> None:
        inst = installment_from_dict(
            {"installment_id": "l-001", "sequence": 1, "due_date": "2024-02-15", "amount": "10.00", "status": "PENDING"}
        )

        assert inst.paid_at is None
        assert inst.transaction_id is None
        assert inst.due_date == date(2024, 2, 15)
