from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError


class AttendanceAppError(Exception):
    """Base class for failures surfaced to API callers as structured results."""

    status_code = 400
    default_message = "Request failed"

    def __init__(self, message=None, field_errors=None):
        self.message = message or self.default_message
        self.field_errors = field_errors or None
        super().__init__(self.message)

    def to_result(self):
        result = {"success": False, "error": self.message}
        if self.field_errors:
            result["fieldErrors"] = self.field_errors
        return result


class ValidationError(AttendanceAppError):
    """Malformed or missing input fields."""

    default_message = "Invalid input data"


class InvalidReferenceError(AttendanceAppError):
    """A referenced student or classroom does not exist."""

    default_message = "Invalid student or classroom reference"


class DuplicateError(AttendanceAppError):
    status_code = 409
    default_message = "Record already exists"


class NotFoundError(AttendanceAppError):
    status_code = 404
    default_message = "Not found"


class StorageUnavailable(AttendanceAppError):
    """The database could not be reached or timed out. Safe to retry."""

    status_code = 503
    default_message = "Database connection error. Please try again."


def is_storage_failure(exc):
    if isinstance(exc, IntegrityError):
        return False
    return isinstance(exc, (DBAPIError, PoolTimeoutError))


FOREIGN_KEY_SQLSTATE = "23503"


def is_foreign_key_violation(exc):
    """True when an IntegrityError comes from a FOREIGN KEY constraint."""
    orig = getattr(exc, "orig", None)
    if getattr(orig, "pgcode", None) == FOREIGN_KEY_SQLSTATE:
        return True
    return "foreign key" in str(orig).lower()


def storage_error(exc):
    """Wrap a low-level SQLAlchemy error, keeping the original as the cause."""
    if is_storage_failure(exc):
        return StorageUnavailable()
    return StorageUnavailable("Database error. Please try again.")


__all__ = [
    "AttendanceAppError",
    "ValidationError",
    "InvalidReferenceError",
    "DuplicateError",
    "NotFoundError",
    "StorageUnavailable",
    "is_storage_failure",
    "is_foreign_key_violation",
    "storage_error",
]
