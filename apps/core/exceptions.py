"""
Error taxonomy shared by the rental and settlement services.

Services raise subclasses of these categories; views map the category to an
HTTP status via ``STATUS_BY_CATEGORY``. Nothing in here ever carries storage
detail into the user-facing message.

Exception Hierarchy:
    SwapServiceError (base)
    ├── ValidationFailedError      400  malformed input, rejected before any write
    ├── NotFoundError              404  referenced entity absent
    ├── ForbiddenError             403  caller lacks ownership/role
    ├── ConflictError              409  precondition violated (possibly under concurrency)
    ├── TransientStorageError      503  storage unavailable/timeout, safe to retry
    └── IntegrityViolationError    500  store rejected a write, always a bug

Usage:
    from apps.core.exceptions import translate_storage_errors

    @translate_storage_errors
    @transaction.atomic
    def return_rental(...):
        ...
"""

import functools
import logging

from django.db import DataError, IntegrityError, OperationalError

logger = logging.getLogger(__name__)


class SwapServiceError(Exception):
    """Base exception for all engine errors."""

    default_message = 'Request could not be processed.'
    code = 'error'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailedError(SwapServiceError):
    default_message = 'Invalid input.'
    code = 'invalid'


class NotFoundError(SwapServiceError):
    default_message = 'Not found.'
    code = 'not_found'


class ForbiddenError(SwapServiceError):
    default_message = 'You do not have permission to perform this action.'
    code = 'forbidden'


class ConflictError(SwapServiceError):
    default_message = 'The resource is not in a state that allows this action.'
    code = 'conflict'


class TransientStorageError(SwapServiceError):
    """Raised when the transaction was aborted by the store; callers may retry."""

    default_message = 'Service temporarily unavailable, please retry.'
    code = 'retry'
    retryable = True


class IntegrityViolationError(SwapServiceError):
    """Raised when the store rejected a write the engine believed valid."""

    default_message = 'Internal consistency error.'
    code = 'integrity'


STATUS_BY_CATEGORY = (
    (ValidationFailedError, 400),
    (NotFoundError, 404),
    (ForbiddenError, 403),
    (ConflictError, 409),
    (TransientStorageError, 503),
    (IntegrityViolationError, 500),
)


def status_for(exc):
    """Return the HTTP status code for a SwapServiceError instance."""
    for category, status_code in STATUS_BY_CATEGORY:
        if isinstance(exc, category):
            return status_code
    return 400


def translate_storage_errors(func):
    """
    Convert database failures raised by ``func`` into the engine taxonomy.

    Must wrap the ``transaction.atomic`` boundary from the outside so the
    rollback has already happened when the error is translated.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except OperationalError:
            logger.warning("Transient storage failure in %s", func.__qualname__, exc_info=True)
            raise TransientStorageError()
        except (IntegrityError, DataError):
            logger.exception("Integrity violation in %s", func.__qualname__)
            raise IntegrityViolationError()

    return wrapper
