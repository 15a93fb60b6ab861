"""API request/response models."""

from .admin import (
    CredentialsUpdate,
    ResetConfirmRequest,
    ResetResult,
    ScanRequest,
    StockUpdate,
)
from .common import (
    HealthResponse,
    SuccessMessage,
    ValidationErrorDetail,
    ValidationErrorResponse,
)
from .sessions import (
    ClaimRequest,
    EventResponse,
    GameResultRequest,
    IssueRequest,
    TierSelectionRequest,
    VerifyRequest,
    VoteRequest,
)

__all__ = [
    # Admin
    "CredentialsUpdate",
    "ResetConfirmRequest",
    "ResetResult",
    "ScanRequest",
    "StockUpdate",
    # Common
    "HealthResponse",
    "SuccessMessage",
    "ValidationErrorDetail",
    "ValidationErrorResponse",
    # Sessions
    "ClaimRequest",
    "EventResponse",
    "GameResultRequest",
    "IssueRequest",
    "TierSelectionRequest",
    "VerifyRequest",
    "VoteRequest",
]
