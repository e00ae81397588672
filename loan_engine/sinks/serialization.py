"""Shared serialization utilities for sinks and registries."""

from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from loan_engine.models.enums import InstallmentStatus, LoanStatus
from loan_engine.models.loan import Installment, Loan


def to_dict(obj: Any) -> dict:
    """Convert object to dictionary."""
    if is_dataclass(obj):
        return dataclass_to_dict(obj)
    elif isinstance(obj, dict):
        return {k: serialize_value(v) for k, v in obj.items()}
    else:
        return {"value": str(obj)}


def dataclass_to_dict(obj: Any) -> dict:
    """Convert dataclass to dict with proper serialization."""
    result = {}
    for key, value in asdict(obj).items():
        result[key] = serialize_value(value)
    return result


def serialize_value(value: Any) -> Any:
    """Serialize a value for JSON output.

    Decimals become strings so money survives a round trip exactly.
    """
    if isinstance(value, Decimal):
        return str(value)
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, date):
        return value.isoformat()
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple)):
        return [serialize_value(v) for v in value]
    return value


def loan_to_dict(loan: Loan) -> dict:
    """Serialize a loan, schedule included."""
    return dataclass_to_dict(loan)


def loan_from_dict(data: dict) -> Loan:
    """Rebuild a loan from ``loan_to_dict`` output."""
    return Loan(
        loan_id=data["loan_id"],
        applicant_id=data["applicant_id"],
        amount=Decimal(data["amount"]),
        interest_rate=Decimal(data["interest_rate"]),
        tenure_months=int(data["tenure_months"]),
        purpose=data["purpose"],
        status=LoanStatus(data["status"]),
        created_at=datetime.fromisoformat(data["created_at"]),
        property_value=_optional(data.get("property_value"), Decimal),
        approved_at=_optional(data.get("approved_at"), datetime.fromisoformat),
        approved_by=data.get("approved_by"),
        rejected_at=_optional(data.get("rejected_at"), datetime.fromisoformat),
        rejection_reason=data.get("rejection_reason"),
        schedule=[installment_from_dict(item) for item in data.get("schedule", [])],
        next_due_date=_optional(data.get("next_due_date"), date.fromisoformat),
        updated_at=_optional(data.get("updated_at"), datetime.fromisoformat),
        version=int(data.get("version", 0)),
    )


def installment_from_dict(data: dict) -> Installment:
    """Rebuild an installment from its serialized form."""
    return Installment(
        installment_id=data["installment_id"],
        sequence=int(data["sequence"]),
        due_date=date.fromisoformat(data["due_date"]),
        amount=Decimal(data["amount"]),
        status=InstallmentStatus(data["status"]),
        paid_at=_optional(data.get("paid_at"), datetime.fromisoformat),
        transaction_id=data.get("transaction_id"),
    )


def _optional(value: Any, parse: Any) -> Any:
    return None if value is None else parse(value)
