"""PostgreSQL loan registry.

Each loan is stored as a JSONB document next to the columns the
compare-and-swap needs. A write only lands when the row's ``version``
still matches what the writer loaded.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

import psycopg
from psycopg.types.json import Jsonb

from loan_engine.exceptions import ConcurrentModificationError, LoanNotFoundError
from loan_engine.models.loan import Loan
from loan_engine.sinks.serialization import loan_from_dict, loan_to_dict

logger = logging.getLogger(__name__)

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS loans (
    loan_id       TEXT PRIMARY KEY,
    applicant_id  TEXT NOT NULL,
    status        TEXT NOT NULL,
    version       INTEGER NOT NULL,
    document      JSONB NOT NULL,
    created_at    TIMESTAMPTZ NOT NULL,
    updated_at    TIMESTAMPTZ
)
"""

CREATE_INDEX_SQL = "CREATE INDEX IF NOT EXISTS loans_applicant_idx ON loans (applicant_id)"

SELECT_SQL = "SELECT document, version FROM loans WHERE loan_id = %s"

SELECT_VERSION_SQL = "SELECT version FROM loans WHERE loan_id = %s"

INSERT_SQL = """
INSERT INTO loans (loan_id, applicant_id, status, version, document, created_at, updated_at)
VALUES (%s, %s, %s, %s, %s, %s, %s)
ON CONFLICT (loan_id) DO NOTHING
"""

UPDATE_SQL = """
UPDATE loans
   SET status = %s, version = %s, document = %s, updated_at = %s
 WHERE loan_id = %s AND version = %s
"""


class PostgresLoanRegistry:
    """Loan registry backed by a single PostgreSQL table."""

    def __init__(self, connection_string: str | None = None, connection: Any | None = None) -> None:
        """Initialize the registry.

        Parameters
        ----------
        connection_string : str | None
            libpq connection string; used when no connection is given.
        connection : Any | None
            Existing psycopg connection to reuse.
        """
        if connection is None:
            if connection_string is None:
                raise ValueError("Either connection_string or connection is required")
            connection = psycopg.connect(connection_string)
        self.conn = connection

    def create_tables(self) -> None:
        """Create the loans table if it does not exist."""
        with self.conn.transaction():
            with self.conn.cursor() as cur:
                cur.execute(CREATE_TABLE_SQL)
                cur.execute(CREATE_INDEX_SQL)
        logger.info("Loan registry tables ready")

    def load(self, loan_id: str) -> Loan:
        """Return the latest record or raise ``LoanNotFoundError``."""
        with self.conn.transaction():
            with self.conn.cursor() as cur:
                cur.execute(SELECT_SQL, (loan_id,))
                row = cur.fetchone()
        if row is None:
            raise LoanNotFoundError(loan_id)

        document, version = row
        return replace(loan_from_dict(document), version=version)

    def save(self, loan: Loan, expected_version: int) -> Loan:
        """Compare-and-swap the row for ``loan.loan_id``."""
        stored = replace(loan, version=expected_version + 1)
        document = Jsonb(loan_to_dict(stored))

        with self.conn.transaction():
            with self.conn.cursor() as cur:
                if expected_version == 0:
                    cur.execute(
                        INSERT_SQL,
                        (
                            stored.loan_id,
                            stored.applicant_id,
                            stored.status.value,
                            stored.version,
                            document,
                            stored.created_at,
                            stored.updated_at,
                        ),
                    )
                else:
                    cur.execute(
                        UPDATE_SQL,
                        (
                            stored.status.value,
                            stored.version,
                            document,
                            stored.updated_at,
                            stored.loan_id,
                            expected_version,
                        ),
                    )

                if cur.rowcount != 1:
                    cur.execute(SELECT_VERSION_SQL, (loan.loan_id,))
                    row = cur.fetchone()
                    actual_version = row[0] if row else None
                    if actual_version is None and expected_version != 0:
                        raise LoanNotFoundError(loan.loan_id)
                    logger.warning(
                        "Version conflict on loan %s: expected %d, found %s",
                        loan.loan_id,
                        expected_version,
                        actual_version,
                    )
                    raise ConcurrentModificationError(
                        loan.loan_id,
                        expected_version=expected_version,
                        actual_version=actual_version,
                    )

        logger.debug("Saved loan %s at version %d", stored.loan_id, stored.version)
        return stored

    def close(self) -> None:
        """Close the underlying connection."""
        self.conn.close()

    def __enter__(self) -> PostgresLoanRegistry:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
