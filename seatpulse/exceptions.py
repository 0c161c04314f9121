"""
Exceptions raised by the position history subsystem.

Every error derives from PositionHistoryError. NotFoundError and
ValidationError also derive from their Django counterparts so views and
management commands that already handle ``ObjectDoesNotExist`` and
``django.core.exceptions.ValidationError`` keep working unchanged.
"""

from django.core.exceptions import ObjectDoesNotExist
from django.core.exceptions import ValidationError as DjangoValidationError


class PositionHistoryError(Exception):
    """Base class for position history errors."""


class NotFoundError(PositionHistoryError, ObjectDoesNotExist):
    """A record, politician, position or election does not exist."""


class ValidationError(PositionHistoryError, DjangoValidationError):
    """
    The request is malformed.

    Raised for missing temporal fields, a jurisdiction with no discriminator,
    or references to rows that do not exist. Never retried.
    """


class ConflictError(PositionHistoryError):
    """
    A concurrent writer changed the seat between read and write.

    The whole decision transaction may be retried.
    """


class TransactionError(PositionHistoryError):
    """
    The underlying transaction failed and was rolled back.

    Also raised when a caller-supplied deadline expires mid-transaction.
    """
