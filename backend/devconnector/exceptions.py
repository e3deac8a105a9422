"""
DevConnector Backend - Custom Exception Hierarchy
==================================================

What:  Application exceptions, each carrying the HTTP status it maps to.
How:   Services raise these; the global handlers registered in main.py render
       them as JSON. `context` is logged server-side and never returned.

Exception Hierarchy:
    DevConnectorError (base)          → 500
    ├── ValidationError               → 400 (structured `errors` list)
    ├── NotFoundError                 → 404, or 400 on the profile lookups
    │   └── UpstreamError             → 404 (GitHub lookup failed)
    ├── AuthenticationError           → 401 (missing or invalid token)
    ├── UnauthorizedError             → 401 (actor does not own the resource)
    ├── ConflictError                 → 400 (duplicate like / like missing)
    └── DatabaseError                 → 500 ("Server error")
"""

from typing import Any, Dict, List, Optional


class DevConnectorError(Exception):
    """
    Base exception for all DevConnector application errors.

    Attributes:
        message:     User-facing description (safe to return in a response)
        context:     Debug info for the server log only
        status_code: HTTP status the global handler responds with
        error_code:  Machine-readable error identifier
    """

    status_code: int = 500
    error_code: str = "server_error"

    def __init__(
        self,
        message: str = "Server error",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(DevConnectorError):
    """
    Raised when client input fails validation.

    `errors` mirrors the express-validator shape the React client reads:
        [{"msg": "Text is required", "param": "text", "location": "body"}]
    """

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field
        if errors is None:
            errors = [{"msg": message, "param": field, "location": "body"}] if field else []
        self.errors = errors

    @classmethod
    def missing_fields(cls, labels: Dict[str, str]) -> "ValidationError":
        """Builds one error entry per missing field from a {param: label} map."""
        errors = [
            {"msg": f"{label} is required", "param": param, "location": "body"}
            for param, label in labels.items()
        ]
        return cls(
            message="; ".join(e["msg"] for e in errors),
            errors=errors,
            context={"fields": list(labels)},
        )


class NotFoundError(DevConnectorError):
    """
    Raised when a referenced profile, post, comment or user does not exist.

    Most lookups answer 404. The profile lookups answer 400, which existing
    clients depend on, so the status is configurable per raise site.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        if status_code is not None:
            self.status_code = status_code


class UpstreamError(NotFoundError):
    """GitHub answered with a non-success status or could not be reached."""

    def __init__(
        self,
        username: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            resource="github profile",
            resource_id=username,
            message="No github profile found",
            context=context,
        )


class AuthenticationError(DevConnectorError):
    """Raised by the auth gate when the bearer token is missing or invalid."""

    status_code = 401
    error_code = "authentication_error"

    def __init__(
        self,
        message: str = "Token is not valid",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UnauthorizedError(DevConnectorError):
    """Raised when an authenticated user acts on a post or comment they do not own."""

    status_code = 401
    error_code = "unauthorized"

    def __init__(
        self,
        message: str = "User not authorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConflictError(DevConnectorError):
    """Raised for a duplicate like or for unliking a post that was never liked."""

    status_code = 400
    error_code = "conflict"

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(DevConnectorError):
    """
    Raised when a storage operation fails unexpectedly.

    The response always says "Server error"; the original exception type is
    kept in `context` for the log.
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "Server error",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
