"""
WayShare Backend - Custom Exception Hierarchy
==============================================

What:  Defines application-specific exceptions for the entity protocol.
How:   Each exception class carries a message, an optional context dict, the
       HTTP status it maps to, and (for client errors) a machine-readable
       error key plus the entity name it concerns.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses.
Who:   Raised by services and endpoints; caught by global handlers.

Exception Hierarchy:
    WayShareError (base)
    ├── EntityRequestError           → 4xx, carries error_key + entity_name
    │   ├── InvalidRequestError      → 400 (id supplied on create, bad sort, ...)
    │   ├── MissingIdError           → 400 (body id required but null)
    │   ├── IdMismatchError          → 400 (path id != body id)
    │   ├── NotFoundError            → 404 (400 when raised by the PUT guard)
    │   └── ValidationError          → 400 (constraint violation)
    ├── DatabaseError                → 500
    └── RateLimitExceededError       → 429

    None of these is retried and none is fatal to the process: each request
    fails on its own and the next one is served normally.
"""

from typing import Any, Dict, Optional


class WayShareError(Exception):
    """
    Base exception for all WayShare application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged; only client errors echo it back)
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class EntityRequestError(WayShareError):
    """
    Base class for errors the caller can fix, scoped to one entity type.

    The (entity_name, error_key) pair is what clients key their UI messages
    on, e.g. ("ride", "idinvalid") → "error.idinvalid".
    """

    status_code = 400
    default_error_key = "badrequest"

    def __init__(
        self,
        message: str,
        entity_name: Optional[str] = None,
        error_key: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message=message, context=context)
        self.entity_name = entity_name
        self.error_key = error_key or self.default_error_key
        if status_code is not None:
            self.status_code = status_code


class InvalidRequestError(EntityRequestError):
    """
    Malformed or contradictory request.

    Raised when a create request carries an id, when a sort parameter names
    an unknown field, or when pagination parameters are out of range.
    """

    default_error_key = "idexists"


class MissingIdError(EntityRequestError):
    """An update was sent without the id of the record to update."""

    default_error_key = "idnull"

    def __init__(self, entity_name: Optional[str] = None, **kwargs: Any):
        super().__init__(message="Invalid id", entity_name=entity_name, **kwargs)


class IdMismatchError(EntityRequestError):
    """The id in the URL path and the id in the request body disagree."""

    default_error_key = "idinvalid"

    def __init__(
        self,
        entity_name: Optional[str] = None,
        path_id: Any = None,
        body_id: Any = None,
        **kwargs: Any,
    ):
        ctx = kwargs.pop("context", None) or {}
        ctx.update(path_id=path_id, body_id=body_id)
        super().__init__(message="Invalid ID", entity_name=entity_name, context=ctx, **kwargs)


class NotFoundError(EntityRequestError):
    """
    No record exists for the given id.

    HTTP: 404 Not Found by default. The full and partial update guards raise
    it with status_code=400, matching the "Entity not found" bad request.
    """

    status_code = 404
    default_error_key = "idnotfound"

    def __init__(
        self,
        entity_name: str = "resource",
        resource_id: Any = None,
        **kwargs: Any,
    ):
        message = f"The requested {entity_name} was not found"
        if resource_id is not None:
            message = f"{entity_name} with ID '{resource_id}' was not found"
        ctx = kwargs.pop("context", None) or {}
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, entity_name=entity_name, context=ctx, **kwargs)


class ValidationError(EntityRequestError):
    """
    Raised when a payload violates a schema constraint.

    When:    Rating score outside [1, 5], missing required field, unique login
             or email taken, foreign key pointing at nothing.

    Example response:
        {
            "error": "bad_request",
            "error_key": "validation",
            "entity_name": "rating",
            "message": "Request payload failed validation",
            "details": {"errors": [{"field": "score", "message": "..."}]}
        }
    """

    default_error_key = "validation"

    def __init__(
        self,
        message: str = "Validation failed",
        entity_name: Optional[str] = None,
        field: Optional[str] = None,
        **kwargs: Any,
    ):
        ctx = kwargs.pop("context", None) or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, entity_name=entity_name, context=ctx, **kwargs)
        self.field = field


class DatabaseError(WayShareError):
    """
    Raised when database operations fail unexpectedly.

    Security Note:
        The message returned to the client is always generic.
        Detailed error info (SQL, constraint names) is logged server-side only.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(WayShareError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    Response includes:
        - retry_after: Seconds until the rate limit window resets
        - Retry-After header for HTTP-compliant clients
    """

    status_code = 429

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
