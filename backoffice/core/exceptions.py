"""
Domain exceptions raised by the master-data engine.

Every exception carries the HTTP status the API layer answers with, so routers
can translate them without knowing which component raised them.
"""
from typing import List, Optional


class BackofficeError(Exception):
    """Base exception for master-data errors."""

    status_code = 500

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        self.original_error = original_error
        super().__init__(message)


class RecordValidationError(BackofficeError):
    """Raised when a payload does not conform to its field schema."""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class ImportFormatError(BackofficeError):
    """Raised when an uploaded spreadsheet cannot be imported at all."""

    status_code = 400

    def __init__(self, message: str, missing_fields: Optional[List[str]] = None, status_code: int = 400):
        self.missing_fields = missing_fields or []
        self.status_code = status_code
        super().__init__(message)


class CatalogNotFoundError(BackofficeError):
    """Raised when no catalog is registered under the requested key."""

    status_code = 404

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"No catalog registered for key '{key}'")


class RecordNotFoundError(BackofficeError):
    """Raised when a record id does not exist in the target table."""

    status_code = 404

    def __init__(self, label: str, record_id):
        self.label = label
        self.record_id = record_id
        super().__init__(f"No record with id '{record_id}' in {label}")


class ParentNotFoundError(BackofficeError):
    """Raised when a geography record references an ancestor that is not stored."""

    status_code = 404


class RecordConflictError(BackofficeError):
    """Raised when a write collides with an existing unique key."""

    status_code = 409


class ImportStorageError(BackofficeError):
    """Raised when the import transaction fails and nothing was committed."""

    status_code = 500
