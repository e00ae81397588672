"""Structured logging for loan-engine.

Service code attaches loan fields to records with :func:`loan_context`;
:class:`JsonFormatter` lifts them to top-level keys so log lines can be
filtered by loan, applicant or record version.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from loan_engine.models.loan import Loan

STANDARD_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Client libraries that log per message at INFO/DEBUG
QUIET_LOGGERS = ("confluent_kafka", "psycopg", "faker")


def setup_logging(
    level: str = "INFO",
    format_type: str = "standard",
) -> None:
    """Configure the root logger for loan-engine.

    Parameters
    ----------
    level : str
        Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    format_type : str
        "standard" for human-readable lines, "json" for one object per line.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if format_type == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(fmt=STANDARD_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    logging.getLogger("loan_engine").setLevel(log_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def loan_context(loan: Loan, **fields: Any) -> dict[str, Any]:
    """Build the ``extra`` argument that tags a log record with a loan.

    Parameters
    ----------
    loan : Loan
        Loan the record is about.
    **fields
        Additional keys, e.g. ``action`` or ``event_type``.

    Returns
    -------
    dict[str, Any]
        ``{"extra": {...}}``, ready to pass as ``logger.info(..., extra=...)``.
    """
    context: dict[str, Any] = {
        "loan_id": loan.loan_id,
        "applicant_id": loan.applicant_id,
        "status": loan.status.value,
        "version": loan.version,
    }
    context.update(fields)
    return {"extra": context}


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON, merging any loan context."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra"):
            log_data.update(record.extra)

        return json.dumps(log_data, default=str)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    return logging.getLogger(name)
