"""
Structured error types for table-spine.

Every failure that crosses a component boundary is a :class:`TableSpineError`
subclass.  Each class fixes a machine-readable ``code`` and an HTTP status, so
the catalog surface and every generated data surface render identical error
envelopes from one place (:mod:`tablespine.api.middleware.errors`).

Manifesto:
    - **Typed taxonomy:** validation, not-found, duplicate, policy, internal
    - **Inputs first:** validation errors are raised before any mutation
    - **Never leak internals:** InternalError keeps the engine message in
      ``cause``, not in ``message``
    - **Error chaining:** the original exception is preserved as ``cause``

Architecture:
    ::

        TableSpineError (code, status_code, category, details, cause)
        ├── ValidationError   VALIDATION_ERROR       400
        ├── NotFoundError     NOT_FOUND              404
        ├── DuplicateError    DUPLICATE_ERROR        409
        ├── PolicyViolation   POLICY_VIOLATION       400
        └── InternalError     INTERNAL_SERVER_ERROR  500

Examples:
    >>> err = NotFoundError("Table")
    >>> err.message
    'Table not found'
    >>> err.status_code
    404
    >>> DuplicateError("Column", "label").to_dict()["error"]["code"]
    'DUPLICATE_ERROR'

Tags:
    error-handling, exception-hierarchy, error-envelope, table-spine

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Coarse classification used for logging and routing."""

    VALIDATION = "VALIDATION"     # Malformed, missing or disallowed input
    NOT_FOUND = "NOT_FOUND"       # Unknown table, column or record
    CONFLICT = "CONFLICT"         # Name collisions
    POLICY = "POLICY"             # Unsupported by the storage engine
    INTERNAL = "INTERNAL"         # Bugs, unexpected engine failures


class TableSpineError(Exception):
    """
    Base exception for all table-spine errors.

    Subclasses set ``code``, ``status_code`` and ``default_category`` as
    class attributes; instances carry the human-readable ``message``, optional
    structured ``details`` (a list of field-level problems) and the
    underlying ``cause``.

    Examples:
        >>> err = TableSpineError("Something went wrong")
        >>> err.code
        'INTERNAL_SERVER_ERROR'
        >>> err.to_dict()
        {'error': {'code': 'INTERNAL_SERVER_ERROR', 'message': 'Something went wrong'}}
    """

    code: str = "INTERNAL_SERVER_ERROR"
    status_code: int = 500
    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        details: list[dict[str, Any]] | None = None,
        category: ErrorCategory | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        self.category = category or self.default_category
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> dict[str, Any]:
        """Render the wire envelope ``{"error": {code, message, details?}}``."""
        body: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return {"error": body}

    def log_fields(self) -> dict[str, Any]:
        """Key/value pairs for structured logging."""
        fields: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "error_code": self.code,
            "category": self.category.value,
        }
        if self.cause is not None:
            fields["cause"] = str(self.cause)
        return fields

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, code={self.code})"


class ValidationError(TableSpineError):
    """Malformed, missing or disallowed input."""

    code = "VALIDATION_ERROR"
    status_code = 400
    default_category = ErrorCategory.VALIDATION

    @classmethod
    def from_pydantic(cls, exc: Any, message: str = "Request validation failed") -> ValidationError:
        """Wrap a ``pydantic.ValidationError`` (or FastAPI's request error).

        Each pydantic error entry becomes one ``details`` item with the dotted
        field path, the message, and the pydantic error type.
        """
        details = []
        for item in exc.errors():
            loc = [str(part) for part in item.get("loc", ()) if part not in ("body", "query", "path")]
            details.append({
                "field": ".".join(loc) or None,
                "message": item.get("msg", "invalid value"),
                "type": item.get("type", "value_error"),
            })
        return cls(message, details=details or None)


class NotFoundError(TableSpineError):
    """Unknown table, column, or record."""

    code = "NOT_FOUND"
    status_code = 404
    default_category = ErrorCategory.NOT_FOUND

    def __init__(self, resource: str, **kwargs: Any):
        self.resource = resource
        super().__init__(f"{resource} not found", **kwargs)


class DuplicateError(TableSpineError):
    """A table or column name is already taken."""

    code = "DUPLICATE_ERROR"
    status_code = 409
    default_category = ErrorCategory.CONFLICT

    def __init__(self, resource: str, name: str, **kwargs: Any):
        self.resource = resource
        self.name = name
        super().__init__(f"{resource} '{name}' already exists", **kwargs)


class PolicyViolation(TableSpineError):
    """The operation is valid input but unsupported by the storage engine."""

    code = "POLICY_VIOLATION"
    status_code = 400
    default_category = ErrorCategory.POLICY


class InternalError(TableSpineError):
    """Unexpected failure.  The message is always generic."""

    code = "INTERNAL_SERVER_ERROR"
    status_code = 500
    default_category = ErrorCategory.INTERNAL

    def __init__(self, message: str = "An unexpected error occurred", **kwargs: Any):
        super().__init__(message, **kwargs)


__all__ = [
    "ErrorCategory",
    "TableSpineError",
    "ValidationError",
    "NotFoundError",
    "DuplicateError",
    "PolicyViolation",
    "InternalError",
]
