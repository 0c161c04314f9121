"""
Transaction boundary for position history mutations.

``atomic_transition`` wraps a multi-step mutation in a single database
transaction and translates ORM failures into the subsystem's error taxonomy:

- unique constraint violations and serialization failures → ConflictError
- any other database failure → TransactionError
- an expired caller deadline → TransactionError

In every case the transaction is rolled back before the error reaches the
caller.
"""

import time
from collections.abc import Iterator
from contextlib import contextmanager

from django.conf import settings
from django.db import DatabaseError, IntegrityError, connection, transaction
from loguru import logger

from seatpulse.exceptions import (
    ConflictError,
    PositionHistoryError,
    TransactionError,
)

# PostgreSQL SQLSTATEs that mean "another transaction won, try again"
RETRYABLE_SQLSTATES = {
    "40001",  # serialization_failure
    "40P01",  # deadlock_detected
    "55P03",  # lock_not_available
}


class Deadline:
    """Caller-supplied time budget for one transaction."""

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout
        self._expires_at = None if timeout is None else time.monotonic() + timeout

    def remaining(self) -> float | None:
        """Seconds left, or None when there is no deadline."""
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())

    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def check(self, step: str) -> None:
        """Abort the transaction if the deadline passed before ``step``."""
        if self.expired():
            raise TransactionError(
                f"Deadline of {self.timeout}s exceeded before {step}; rolled back."
            )


def _sqlstate(exc: BaseException) -> str | None:
    cause = exc.__cause__
    if cause is None:
        return None
    # psycopg 3 exposes ``sqlstate``, psycopg2 exposes ``pgcode``
    return getattr(cause, "sqlstate", None) or getattr(cause, "pgcode", None)


def _apply_statement_timeout(deadline: Deadline) -> None:
    remaining = deadline.remaining()
    if remaining is None or connection.vendor != "postgresql":
        return
    milliseconds = max(1, int(remaining * 1000))
    with connection.cursor() as cursor:
        # is_local=true scopes the setting to the current transaction
        cursor.execute(
            "SELECT set_config('statement_timeout', %s, true)", [str(milliseconds)]
        )


@contextmanager
def atomic_transition(
    operation: str, timeout: float | None = None
) -> Iterator[Deadline]:
    """
    Run a mutation as one transaction with error translation.

    Args:
        operation: Human-readable name used in logs and error messages
        timeout: Optional deadline in seconds for the whole transaction;
            defaults to ``SEATPULSE_DEFAULT_TIMEOUT``

    Yields:
        The Deadline to check between steps.

    Raises:
        ConflictError: A concurrent writer won the seat
        TransactionError: The store failed or the deadline expired
    """
    if timeout is None:
        timeout = settings.SEATPULSE_DEFAULT_TIMEOUT
    deadline = Deadline(timeout)
    try:
        with transaction.atomic():
            _apply_statement_timeout(deadline)
            yield deadline
    except PositionHistoryError:
        raise
    except IntegrityError as e:
        logger.warning(f"{operation}: integrity violation, treating as conflict: {e}")
        raise ConflictError(
            f"{operation}: the seat was modified concurrently."
        ) from e
    except DatabaseError as e:
        if _sqlstate(e) in RETRYABLE_SQLSTATES:
            logger.warning(f"{operation}: serialization failure: {e}")
            raise ConflictError(
                f"{operation}: the seat was modified concurrently."
            ) from e
        logger.opt(exception=True).error(f"{operation}: transaction failed: {e}")
        raise TransactionError(f"{operation} failed: {e}") from e
