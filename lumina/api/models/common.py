"""Shared API request/response models.

Domain models (GuestEntry, RsvpData, ...) live in lumina.models; this module
holds HTTP-layer concerns only.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# Re-export ErrorResponse for convenience - this is the standard error format
from lumina.models import ErrorCode, ErrorResponse

__all__ = [
    "ErrorCode",
    "ErrorResponse",
    "HealthResponse",
    "ValidationErrorResponse",
    "ValidationErrorDetail",
    "SuccessMessage",
]


class ValidationErrorDetail(BaseModel):
    """Detail of a single validation error."""

    model_config = ConfigDict(strict=True)

    loc: list[str | int] = Field(
        ...,
        description="Path to the field that failed validation",
        examples=[["body", "phone"]],
    )
    msg: str = Field(
        ...,
        description="Human-readable error message",
        examples=["field required"],
    )
    type: str = Field(
        ...,
        description="Error type identifier",
        examples=["missing"],
    )


class ValidationErrorResponse(BaseModel):
    """Response format for request validation errors (HTTP 422)."""

    model_config = ConfigDict(strict=True)

    success: bool = False
    error_code: str = ErrorCode.VALIDATION_ERROR.value
    message: str = "Request validation failed"
    recovery: str = "Check the request parameters and try again"
    details: list[ValidationErrorDetail] = Field(default_factory=list)


class SuccessMessage(BaseModel):
    """Generic success response for operations without data payload."""

    model_config = ConfigDict(strict=True)

    success: bool = True
    message: str = Field(
        default="Operation completed successfully",
        description="Human-readable success message",
    )


class HealthResponse(BaseModel):
    status: str = "healthy"
    service: str = "lumina-api"
    environment: str
    timestamp: datetime
