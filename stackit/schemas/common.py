"""
StackIt Backend — Shared Response Schemas
===========================================

What:  Error and health payloads shared by every router.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.
    Why:   Clients show `message` verbatim in a notification and branch on `error`.

    Example:
        {
            "error": "authentication_error",
            "message": "Login required",
            "request_id": "1f2e3d4c"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")


class SuggestedTagsResponse(BaseModel):
    tags: List[str] = Field(description="Tags offered as one-click suggestions")
    max_tags: int = Field(description="Maximum number of tags per question")
