"""
Notekeeper Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions forming the error taxonomy of the
       persistence layer and the HTTP surface built on top of it.
Why:   Each storage backend fails in its own dialect (HTTP status codes from
       CouchDB, exception classes from pymongo). Adapters translate those into
       this hierarchy at their boundary so nothing backend-specific leaks past
       the repository contract.
How:   Each exception carries a human-readable message and an optional
       context dict. Global handlers registered in main.py turn them into
       structured JSON responses with the matching HTTP status code.

Exception Hierarchy:
    NotekeeperError (base)
    ├── ValidationError              → 400 Bad Request (empty title/content)
    ├── NotFoundError                → 404 Not Found (HTTP layer only)
    ├── ConcurrentModificationError  → 409 Conflict (stale revision token)
    ├── UnsupportedOperationError    → 501 Not Implemented
    ├── BackendUnavailableError      → 503 Service Unavailable
    └── DatabaseError                → 500 Internal Server Error

Not-found at the repository level is a result (None / False / empty list),
never an exception. NotFoundError exists only so that route handlers can
turn those results into a 404.
"""

from typing import Any, Dict, Optional


class NotekeeperError(Exception):
    """
    Base exception for all Notekeeper application errors.

    Attributes:
        message:  Error description that is safe to return in an API response
        context:  Additional debug info (logged, NOT returned to the client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NotekeeperError):
    """
    Raised when a note's title or content is missing or empty.

    When:    create() / update() with an empty value, or a backend-side schema
             validator rejecting a document.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(NotekeeperError):
    """
    Raised by the HTTP layer when a repository call resolved to nothing.

    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConcurrentModificationError(NotekeeperError):
    """
    Raised when a write lost a revision race.

    What:    The revision token presented with a write no longer matches the
             stored document because another writer got there first.
    When:    Indexed-view (CouchDB) adapter only. The query adapter uses atomic
             single-document updates, so the last writer simply wins there.
    HTTP:    409 Conflict

    The adapter never retries. Whether to re-read and try again is up to
    the caller.
    """

    def __init__(
        self,
        note_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = "The note was modified concurrently. Please reload and try again."
        ctx = context or {}
        if note_id:
            ctx["note_id"] = note_id
        super().__init__(message=message, context=ctx)
        self.note_id = note_id


class UnsupportedOperationError(NotekeeperError):
    """
    Raised when an adapter does not implement part of the repository contract.

    Raised instead of returning an empty value so that callers can never
    mistake "unsupported" for "no results".
    HTTP:    501 Not Implemented
    """

    def __init__(
        self,
        operation: str,
        backend: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"Operation '{operation}' is not supported"
        if backend:
            message = f"Operation '{operation}' is not supported by the {backend} backend"
        ctx = context or {}
        ctx["operation"] = operation
        super().__init__(message=message, context=ctx)
        self.operation = operation


class BackendUnavailableError(NotekeeperError):
    """
    Raised when the storage backend cannot be reached or refuses us.

    When:    Connection refused, timeouts, DNS failure, authentication failure.
             Raised from init() or from whichever call first attempted I/O.
    HTTP:    503 Service Unavailable
    """

    def __init__(
        self,
        message: str = "The storage backend is unavailable. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(NotekeeperError):
    """
    Raised when a backend operation fails for any other reason.

    The message returned to the client is always generic; the backend's own
    error details go to the server log only.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
