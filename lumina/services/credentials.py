"""Admin back-office credentials stored as a password hash in SSM."""

import os
import secrets

from passlib.context import CryptContext

from lumina.utils.logging import get_logger

from .ssm_service import SSMService, SSMServiceError

logger = get_logger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def default_ssm_prefix() -> str:
    environment = os.getenv("ENVIRONMENT", "dev")
    return os.getenv("LUMINA_SSM_PREFIX", f"/lumina/{environment}")


class AdminCredentialsService:
    """Checks and rotates the admin username/password pair.

    Parameters:
        {prefix}/admin/username       plain username
        {prefix}/admin/password_hash  passlib hash of the password
    """

    def __init__(self, ssm: SSMService, prefix: str | None = None) -> None:
        self.ssm = ssm
        self.prefix = (prefix or default_ssm_prefix()).rstrip("/")

    @property
    def username_parameter(self) -> str:
        return f"{self.prefix}/admin/username"

    @property
    def password_parameter(self) -> str:
        return f"{self.prefix}/admin/password_hash"

    def verify(self, username: str, password: str) -> bool:
        """Check a username/password pair.

        Missing or unreadable parameters deny access.
        """
        try:
            expected_user = self.ssm.get_parameter(self.username_parameter)
            password_hash = self.ssm.get_parameter(self.password_parameter)
        except SSMServiceError as e:
            logger.warning("Admin credentials unavailable: %s", e)
            return False

        user_ok = secrets.compare_digest(username.encode(), expected_user.encode())
        try:
            password_ok = pwd_context.verify(password, password_hash)
        except ValueError:
            logger.error("Stored admin password hash is not recognized")
            return False
        return user_ok and password_ok

    def set_credentials(self, username: str, password: str) -> None:
        """Store a new username and password hash."""
        self.ssm.put_parameter(self.username_parameter, username)
        self.ssm.put_parameter(self.password_parameter, pwd_context.hash(password))
        logger.info("Admin credentials rotated")

    def is_configured(self) -> bool:
        try:
            self.ssm.get_parameter(self.username_parameter, use_cache=False)
            self.ssm.get_parameter(self.password_parameter, use_cache=False)
        except SSMServiceError:
            return False
        return True

    def ensure_credentials(self, username: str, password: str) -> bool:
        """Store credentials only when none exist yet.

        Returns:
            True if credentials were written
        """
        if self.is_configured():
            return False
        self.set_credentials(username, password)
        return True
