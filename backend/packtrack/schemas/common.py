"""
PackTrack Backend — Shared Schemas
===================================

What:  Base model configuration, the success envelope and error/health
       response models shared by every route.

Wire format:
    JSON keys are camelCase (`internalCode`, `fileUrl`). Input accepts both
    camelCase and snake_case (populate_by_name), and FastAPI serializes
    response models by alias.
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for every API schema: camelCase aliases, ORM attribute reading."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(BaseModel, Generic[T]):
    """
    Success envelope returned by every endpoint.

    Example:
        {"success": true, "message": "Packaging item created successfully", "data": {...}}
    """

    success: bool = True
    message: str
    data: Optional[T] = None


class ErrorResponse(BaseModel):
    """
    Error envelope returned by the global exception handlers.

    Example:
        {
            "success": false,
            "error": "not_found",
            "message": "Packaging item not found",
            "request_id": "1f2e3d4c"
        }
    """

    success: bool = False
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    storage: str = Field(description="Upload directory: writable, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
