"""
DevConnector Backend - Shared Response Schemas
===============================================

What:  Error, acknowledgement and health payloads shared by all routers.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Acknowledgement body for deletes, e.g. {"msg": "Post removed"}."""
    msg: str = Field(description="Human-readable confirmation")


class FieldError(BaseModel):
    """One failed field check, in the shape express-validator clients expect."""
    msg: str
    param: Optional[str] = None
    location: str = "body"


class ErrorResponse(BaseModel):
    """
    Standardized error body for every non-2xx response.

    Example:
        {
            "error": "validation_error",
            "message": "Text is required",
            "msg": "Text is required",
            "errors": [{"msg": "Text is required", "param": "text", "location": "body"}],
            "request_id": "1f2e3d4c"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    msg: str = Field(description="Same as message; read by the React client")
    errors: Optional[List[FieldError]] = Field(default=None, description="Per-field validation failures")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Service and dependency status returned by GET /health."""
    status: str = Field(description="Overall status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    github: str = Field(description="GitHub API status: available, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
