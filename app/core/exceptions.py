"""
Exception hierarchy for the form intake pipeline.

Routes and the exception handlers in app.main translate these into the
JSON envelope ``{success, message, data?, errors?}``.
"""

from typing import Any, Dict, List, Optional


class IntakeError(Exception):
    """Base exception for intake, store and notification failures."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ValidationError(IntakeError):
    """Raised when submitted data violates the field contract.

    ``errors`` lists every violated field, not only the first one.
    """

    status_code = 400

    def __init__(self, message: str = "Validation failed", errors: Optional[List[Dict[str, Any]]] = None):
        self.errors = errors or []
        super().__init__(message)

    @classmethod
    def from_pydantic(cls, exc) -> "ValidationError":
        """Build from a pydantic ValidationError, keeping every field path."""
        return cls(errors=format_validation_errors(exc.errors()))


class DuplicateKeyError(IntakeError):
    """Raised when a unique index rejects a write."""

    status_code = 400

    def __init__(self, message: str, key: Optional[str] = None):
        self.key = key
        super().__init__(message)


class NotFoundError(IntakeError):
    status_code = 404


class NotificationError(IntakeError):
    """Raised when the email sink fails. Never surfaced to the client."""

    def __init__(self, message: str, kind: Optional[str] = None, original_error: Optional[Exception] = None):
        self.kind = kind
        self.original_error = original_error
        super().__init__(message)


class StoreError(IntakeError):
    """Raised for persistence failures other than unique-key collisions."""

    def __init__(self, message: str, operation: Optional[str] = None):
        self.operation = operation
        super().__init__(message)


def format_validation_errors(raw_errors) -> List[Dict[str, Any]]:
    """Flatten pydantic/FastAPI error dicts into ``{field, message}`` entries."""
    formatted = []
    for error in raw_errors:
        # FastAPI prefixes body errors with "body"
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        formatted.append({
            "field": ".".join(location),
            "message": error.get("msg", "Invalid value"),
        })
    return formatted
