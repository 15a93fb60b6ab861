"""HTTP Basic authentication for the admin back office."""

from fastapi import Depends
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from lumina.api.dependencies import get_credentials_service
from lumina.models import AdmissionError, ErrorCode
from lumina.services.credentials import AdminCredentialsService
from lumina.utils.logging import get_logger

logger = get_logger(__name__)

http_basic = HTTPBasic(auto_error=False, realm="Lumina admin")


def require_admin(
    credentials: HTTPBasicCredentials | None = Depends(http_basic),
    service: AdminCredentialsService = Depends(get_credentials_service),
) -> str:
    """Dependency that admits only the configured admin.

    Returns:
        The authenticated username

    Raises:
        AdmissionError: UNAUTHORIZED when credentials are missing or wrong
    """
    if credentials is None:
        raise AdmissionError(ErrorCode.UNAUTHORIZED)
    if not service.verify(credentials.username, credentials.password):
        logger.warning("Rejected admin login for %r", credentials.username)
        raise AdmissionError(ErrorCode.UNAUTHORIZED)
    return credentials.username
