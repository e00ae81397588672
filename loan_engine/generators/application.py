"""Loan application generator for demos and load simulations."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterator

from loan_engine.generators.base import BaseGenerator
from loan_engine.models.loan import LoanTerms


@dataclass
class ApplicationRequest:
    """Payload of one apply command."""

    applicant_id: str
    terms: LoanTerms
    purpose: str
    property_value: Decimal | None = None


class LoanApplicationGenerator(BaseGenerator):
    """Generate plausible home-loan applications."""

    PURPOSES = [
        "Purchase of a new apartment",
        "Purchase of a resale flat",
        "Construction of an independent house",
        "Home renovation",
        "Plot purchase",
        "Balance transfer of an existing home loan",
    ]

    TENURES = [6, 12, 24, 36, 60, 120, 180, 240]

    # Annual rates in percent
    RATE_RANGE = (7.5, 14.0)

    def __init__(
        self,
        seed: int | None = None,
        applicant_ids: list[str] | None = None,
    ) -> None:
        super().__init__(seed)
        self.applicant_ids = applicant_ids

    def generate(self) -> ApplicationRequest:
        """Generate a single application.

        Returns
        -------
        ApplicationRequest
            Generated apply-command payload.
        """
        amount = Decimal(self.random.randint(10, 500) * 10000)
        # Lenders cap home loans at 75-90% of the property value
        loan_to_value = self.random.uniform(0.75, 0.90)
        property_value = Decimal(str(round(float(amount) / loan_to_value, -4)))

        rate = Decimal(str(round(self.random.uniform(*self.RATE_RANGE), 2)))

        if self.applicant_ids:
            applicant_id = self.random.choice(self.applicant_ids)
        else:
            applicant_id = self.fake.uuid4()

        return ApplicationRequest(
            applicant_id=applicant_id,
            terms=LoanTerms(
                amount=amount,
                interest_rate=rate,
                tenure_months=self.random.choice(self.TENURES),
            ),
            purpose=self.random.choice(self.PURPOSES),
            property_value=property_value,
        )

    def generate_batch(self, count: int) -> Iterator[ApplicationRequest]:
        """Generate multiple applications.

        Parameters
        ----------
        count : int
            Number of applications to generate.

        Yields
        ------
        ApplicationRequest
            Generated applications.
        """
        for _ in range(count):
            yield self.generate()

    def generate_applicants(self, count: int) -> list[str]:
        """Generate applicant IDs and keep them for later applications."""
        self.applicant_ids = [self.fake.uuid4() for _ in range(count)]
        return self.applicant_ids
