"""FastAPI exception handlers for converting AdmissionError to HTTP responses.

The ErrorCode-to-HTTP status mapping follows REST conventions:
- 400 Bad Request: Validation failures, failed mini-game, unconfirmed reset
- 401 Unauthorized: Admin credentials missing or wrong
- 403 Forbidden: Claim attempted without a valid game pass
- 404 Not Found: Unknown guest, session, venue or tier
- 409 Conflict: Wrong step, closed voting, duplicates, exhausted stock
- 429 Too Many Requests: Verification cooldown
- 503 Service Unavailable: Datastore failures

Usage:
    from lumina.api.exceptions import register_exception_handlers
    register_exception_handlers(app)
"""

from botocore.exceptions import BotoCoreError, ClientError
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_429_TOO_MANY_REQUESTS,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from lumina.api.models.common import ValidationErrorDetail, ValidationErrorResponse
from lumina.models import AdmissionError, ErrorCode, ErrorResponse
from lumina.utils.logging import get_logger

logger = get_logger(__name__)

# Map ErrorCode to HTTP status codes
ERROR_CODE_TO_HTTP_STATUS: dict[ErrorCode, int] = {
    # Validation -> 400 Bad Request
    ErrorCode.VALIDATION_ERROR: HTTP_400_BAD_REQUEST,
    ErrorCode.GAME_NOT_PASSED: HTTP_400_BAD_REQUEST,
    ErrorCode.RESET_NOT_CONFIRMED: HTTP_400_BAD_REQUEST,
    # Authentication -> 401 Unauthorized
    ErrorCode.UNAUTHORIZED: HTTP_401_UNAUTHORIZED,
    # Missing capability -> 403 Forbidden
    ErrorCode.GAME_PASS_INVALID: HTTP_403_FORBIDDEN,
    # Not found -> 404 Not Found
    ErrorCode.GUEST_NOT_FOUND: HTTP_404_NOT_FOUND,
    ErrorCode.SESSION_NOT_FOUND: HTTP_404_NOT_FOUND,
    ErrorCode.VENUE_NOT_FOUND: HTTP_404_NOT_FOUND,
    ErrorCode.TIER_NOT_FOUND: HTTP_404_NOT_FOUND,
    # State conflicts -> 409 Conflict
    ErrorCode.STOCK_EXHAUSTED: HTTP_409_CONFLICT,
    ErrorCode.INVALID_TRANSITION: HTTP_409_CONFLICT,
    ErrorCode.VOTING_CLOSED: HTTP_409_CONFLICT,
    ErrorCode.ALREADY_VOTED: HTTP_409_CONFLICT,
    ErrorCode.DUPLICATE_PHONE: HTTP_409_CONFLICT,
    # Rate limiting -> 429 Too Many Requests
    ErrorCode.RATE_LIMITED: HTTP_429_TOO_MANY_REQUESTS,
    # Datastore -> 503 Service Unavailable
    ErrorCode.BACKEND_ERROR: HTTP_503_SERVICE_UNAVAILABLE,
}


def get_http_status_for_error(code: ErrorCode) -> int:
    """Get HTTP status code for an ErrorCode.

    Args:
        code: The ErrorCode to map

    Returns:
        HTTP status code, defaults to 400 if not explicitly mapped.
    """
    return ERROR_CODE_TO_HTTP_STATUS.get(code, HTTP_400_BAD_REQUEST)


async def admission_error_handler(request: Request, exc: AdmissionError) -> JSONResponse:
    """Handle AdmissionError exceptions and convert to JSON response.

    Args:
        request: The incoming request (unused but required by FastAPI)
        exc: The AdmissionError exception

    Returns:
        JSONResponse with error details and appropriate status code.
    """
    status_code = get_http_status_for_error(exc.code)
    headers: dict[str, str] = {}
    if exc.code == ErrorCode.UNAUTHORIZED:
        headers["WWW-Authenticate"] = "Basic"
    if exc.code == ErrorCode.RATE_LIMITED and exc.details:
        retry_after = exc.details.get("retry_after_seconds")
        if retry_after:
            headers["Retry-After"] = retry_after

    return JSONResponse(
        status_code=status_code,
        content=exc.to_response().model_dump(mode="json"),
        headers=headers or None,
    )


async def backend_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Convert datastore failures into a generic retry-prompting error.

    Local state is not rolled back; the client simply retries.
    """
    logger.exception("Datastore call failed on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=HTTP_503_SERVICE_UNAVAILABLE,
        content=ErrorResponse.from_code(ErrorCode.BACKEND_ERROR).model_dump(mode="json"),
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Wrap request validation errors in the standard error structure."""
    details = [
        ValidationErrorDetail(
            loc=[str(part) if not isinstance(part, int) else part for part in err["loc"]],
            msg=str(err["msg"]),
            type=str(err["type"]),
        )
        for err in exc.errors()
    ]
    body = ValidationErrorResponse(details=details)
    return JSONResponse(
        status_code=422,
        content=body.model_dump(mode="json"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(AdmissionError, admission_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(ClientError, backend_error_handler)
    app.add_exception_handler(BotoCoreError, backend_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
