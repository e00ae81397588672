"""Amortization calculator: loan terms to EMI amount and installment schedule."""

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from dateutil.relativedelta import relativedelta

from loan_engine.exceptions import InvalidTermsError
from loan_engine.models.enums import InstallmentStatus
from loan_engine.models.loan import Installment, LoanTerms

CENT = Decimal("0.01")
MONTHS_PER_YEAR = Decimal("12")
PERCENT = Decimal("100")


def validate_terms(terms: LoanTerms) -> None:
    """Check that terms can be amortized.

    Besides the sign checks, the rounded installment must come out at one
    cent or more, so a tiny principal spread over a long tenure is refused
    here rather than producing a schedule of zero installments.

    Raises
    ------
    InvalidTermsError
        If the amount is not a positive finite number, the tenure is not a
        positive whole number of months, the rate is negative or not finite,
        or the installment would round to zero.
    """
    amount = _finite_decimal(terms.amount, "amount")
    rate = _finite_decimal(terms.interest_rate, "interest_rate")

    if amount <= 0:
        raise InvalidTermsError(f"Loan amount must be positive, got {terms.amount}", field="amount")
    if (
        not isinstance(terms.tenure_months, int)
        or isinstance(terms.tenure_months, bool)
        or terms.tenure_months <= 0
    ):
        raise InvalidTermsError(
            f"Tenure must be a positive whole number of months, got {terms.tenure_months!r}",
            field="tenure_months",
        )
    if rate < 0:
        raise InvalidTermsError(
            f"Interest rate cannot be negative, got {terms.interest_rate}",
            field="interest_rate",
        )

    if _rounded_emi(amount, rate, terms.tenure_months) <= 0:
        raise InvalidTermsError(
            f"Amount {terms.amount} over {terms.tenure_months} months rounds to a zero installment",
            field="amount",
        )


def monthly_rate(interest_rate: Decimal) -> Decimal:
    """Convert an annual percentage rate to a monthly fraction."""
    return Decimal(interest_rate) / (MONTHS_PER_YEAR * PERCENT)


def calculate_emi(terms: LoanTerms) -> Decimal:
    """Calculate the fixed periodic installment.

    Uses the reducing-balance formula
    ``P * r * (1 + r)^n / ((1 + r)^n - 1)`` and falls back to a straight-line
    split ``P / n`` when the rate is zero.

    Parameters
    ----------
    terms : LoanTerms
        Principal, annual percentage rate and tenure.

    Returns
    -------
    Decimal
        Installment amount rounded half-up to two decimal places.
    """
    validate_terms(terms)
    return _rounded_emi(Decimal(terms.amount), Decimal(terms.interest_rate), terms.tenure_months)


def _rounded_emi(principal: Decimal, interest_rate: Decimal, n: int) -> Decimal:
    r = monthly_rate(interest_rate)
    if r == 0:
        emi = principal / n
    else:
        growth = (1 + r) ** n
        emi = principal * r * growth / (growth - 1)
    return emi.quantize(CENT, rounding=ROUND_HALF_UP)


def _finite_decimal(value: object, field: str) -> Decimal:
    """Coerce a numeric term to ``Decimal``, refusing NaN and infinities."""
    if isinstance(value, bool):
        raise InvalidTermsError(f"{field} must be a number, got {value!r}", field=field)
    try:
        number = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise InvalidTermsError(f"{field} must be a number, got {value!r}", field=field) from e
    if not number.is_finite():
        raise InvalidTermsError(f"{field} must be finite, got {value}", field=field)
    return number


def total_repayable(terms: LoanTerms) -> Decimal:
    """Sum of all installments as scheduled (no drift reconciliation)."""
    return calculate_emi(terms) * terms.tenure_months


def build_schedule(
    terms: LoanTerms,
    start_date: date | datetime,
    loan_id: str = "",
) -> list[Installment]:
    """Generate the full installment schedule.

    Installment ``k`` falls due ``k`` calendar months after ``start_date``;
    nothing is due on the start date itself. Every installment carries the
    same rounded amount.

    Parameters
    ----------
    terms : LoanTerms
        Loan terms.
    start_date : date | datetime
        Schedule anchor (approval instant). Only the date part is used.
    loan_id : str
        Prefix for installment IDs.

    Returns
    -------
    list[Installment]
        ``terms.tenure_months`` pending installments ordered by sequence.
    """
    emi = calculate_emi(terms)
    anchor = start_date.date() if isinstance(start_date, datetime) else start_date
    prefix = f"{loan_id}-" if loan_id else ""

    return [
        Installment(
            installment_id=f"{prefix}{k:03d}",
            sequence=k,
            due_date=anchor + relativedelta(months=k),
            amount=emi,
            status=InstallmentStatus.PENDING,
        )
        for k in range(1, terms.tenure_months + 1)
    ]
