"""Standard error codes for guest admission and the admin back office.

Every service raises AdmissionError with one of these codes; the API layer
converts it to an ErrorResponse with a matching HTTP status.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    """Standard error codes."""

    # Guest-facing taxonomy (ERR_001-ERR_005)
    VALIDATION_ERROR = "ERR_001"
    GUEST_NOT_FOUND = "ERR_002"
    RATE_LIMITED = "ERR_003"
    STOCK_EXHAUSTED = "ERR_004"
    BACKEND_ERROR = "ERR_005"

    # Admission flow (ERR_FLOW_001-ERR_FLOW_008)
    SESSION_NOT_FOUND = "ERR_FLOW_001"
    INVALID_TRANSITION = "ERR_FLOW_002"
    VOTING_CLOSED = "ERR_FLOW_003"
    ALREADY_VOTED = "ERR_FLOW_004"
    GAME_NOT_PASSED = "ERR_FLOW_005"
    GAME_PASS_INVALID = "ERR_FLOW_006"
    VENUE_NOT_FOUND = "ERR_FLOW_007"
    TIER_NOT_FOUND = "ERR_FLOW_008"

    # Admin (ERR_ADMIN_001-ERR_ADMIN_003)
    UNAUTHORIZED = "ERR_ADMIN_001"
    DUPLICATE_PHONE = "ERR_ADMIN_002"
    RESET_NOT_CONFIRMED = "ERR_ADMIN_003"


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.VALIDATION_ERROR: "The submitted data is not valid",
    ErrorCode.GUEST_NOT_FOUND: "This phone number is not on the guest list",
    ErrorCode.RATE_LIMITED: "Too many failed attempts, please wait before trying again",
    ErrorCode.STOCK_EXHAUSTED: "No tickets left in this category",
    ErrorCode.BACKEND_ERROR: "The service is temporarily unavailable",
    ErrorCode.SESSION_NOT_FOUND: "Admission session not found or expired",
    ErrorCode.INVALID_TRANSITION: "This step is not available right now",
    ErrorCode.VOTING_CLOSED: "Voting for the venue has closed",
    ErrorCode.ALREADY_VOTED: "A vote has already been registered for this guest",
    ErrorCode.GAME_NOT_PASSED: "The challenge was not completed",
    ErrorCode.GAME_PASS_INVALID: "Complete the challenge before claiming a ticket",
    ErrorCode.VENUE_NOT_FOUND: "Venue not found",
    ErrorCode.TIER_NOT_FOUND: "Ticket category not found",
    ErrorCode.UNAUTHORIZED: "Invalid admin credentials",
    ErrorCode.DUPLICATE_PHONE: "This phone number is already registered",
    ErrorCode.RESET_NOT_CONFIRMED: "Factory reset was not confirmed",
}

ERROR_RECOVERY: dict[ErrorCode, str] = {
    ErrorCode.VALIDATION_ERROR: "Correct the highlighted fields and submit again",
    ErrorCode.GUEST_NOT_FOUND: "Check the number or contact the host",
    ErrorCode.RATE_LIMITED: "Wait for the cooldown to finish",
    ErrorCode.STOCK_EXHAUSTED: "Choose another ticket category",
    ErrorCode.BACKEND_ERROR: "Please try again in a moment",
    ErrorCode.SESSION_NOT_FOUND: "Start a new session and verify your phone",
    ErrorCode.INVALID_TRANSITION: "Refresh the session to see the current step",
    ErrorCode.VOTING_CLOSED: "Continue to ticket selection",
    ErrorCode.ALREADY_VOTED: "Come back after the voting deadline",
    ErrorCode.GAME_NOT_PASSED: "Play the challenge again or pick another category",
    ErrorCode.GAME_PASS_INVALID: "Finish the challenge to obtain a pass",
    ErrorCode.VENUE_NOT_FOUND: "Pick one of the listed venues",
    ErrorCode.TIER_NOT_FOUND: "Pick one of the listed categories",
    ErrorCode.UNAUTHORIZED: "Check the username and password",
    ErrorCode.DUPLICATE_PHONE: "Use a different phone number",
    ErrorCode.RESET_NOT_CONFIRMED: "Request a new reset token and confirm it",
}


class ErrorResponse(BaseModel):
    """Standard error response body."""

    model_config = ConfigDict(strict=True)

    success: bool = False
    error_code: ErrorCode
    message: str
    recovery: str
    details: Optional[dict[str, str]] = None

    @classmethod
    def from_code(
        cls,
        code: ErrorCode,
        details: Optional[dict[str, str]] = None,
    ) -> "ErrorResponse":
        """Create an ErrorResponse from an error code.

        Args:
            code: The error code
            details: Optional additional context about the error

        Returns:
            An ErrorResponse with the message and recovery hint for the code.
        """
        return cls(
            error_code=code,
            message=ERROR_MESSAGES[code],
            recovery=ERROR_RECOVERY[code],
            details=details,
        )


class AdmissionError(Exception):
    """Exception raised by admission and admin operations."""

    def __init__(
        self,
        code: ErrorCode,
        details: Optional[dict[str, str]] = None,
    ):
        self.code = code
        self.message = ERROR_MESSAGES[code]
        self.recovery = ERROR_RECOVERY[code]
        self.details = details
        super().__init__(self.message)

    def to_response(self) -> ErrorResponse:
        """Convert this exception to an ErrorResponse."""
        return ErrorResponse.from_code(self.code, self.details)
