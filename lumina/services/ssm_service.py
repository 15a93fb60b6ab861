"""SSM Parameter Store service for secure secret retrieval.

Provides cached access to AWS SSM Parameter Store SecureString parameters.
Used for the admin back-office credentials.
"""

import logging
from functools import lru_cache
from typing import ClassVar

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)


class SSMServiceError(Exception):
    """Raised when SSM parameter retrieval fails."""

    pass


class SSMService:
    """Service for retrieving secrets from AWS SSM Parameter Store.

    Features:
    - Retrieves SecureString parameters with automatic decryption
    - In-process caching to avoid repeated API calls
    - Writes invalidate the cached value

    Usage:
        ssm = SSMService()
        username = ssm.get_parameter("/lumina/dev/admin/username")
    """

    _instance: ClassVar["SSMService | None"] = None
    _cache: ClassVar[dict[str, str]] = {}

    def __init__(self) -> None:
        """Initialize the SSM client."""
        self._client = boto3.client("ssm")

    @classmethod
    def get_instance(cls) -> "SSMService":
        """Get singleton instance of SSMService.

        Returns:
            SSMService: Shared service instance.
        """
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def get_parameter(self, name: str, *, use_cache: bool = True) -> str:
        """Retrieve a parameter value from SSM Parameter Store.

        Args:
            name: Full parameter path (e.g., "/lumina/dev/admin/username")
            use_cache: Whether to use cached value if available (default: True)

        Returns:
            The decrypted parameter value.

        Raises:
            SSMServiceError: If parameter cannot be retrieved.
        """
        if use_cache and name in self._cache:
            logger.debug("SSM cache hit for %s", name)
            return self._cache[name]

        try:
            logger.info("Fetching SSM parameter: %s", name)
            response = self._client.get_parameter(Name=name, WithDecryption=True)
            value: str = response["Parameter"]["Value"]

            self._cache[name] = value
            return value

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code == "ParameterNotFound":
                raise SSMServiceError(f"SSM parameter not found: {name}") from e
            if error_code == "AccessDeniedException":
                raise SSMServiceError(
                    f"Access denied to SSM parameter: {name}. "
                    "Check IAM permissions for ssm:GetParameter."
                ) from e
            raise SSMServiceError(
                f"Failed to retrieve SSM parameter {name}: {e}"
            ) from e

    def put_parameter(self, name: str, value: str, *, secure: bool = True) -> None:
        """Create or overwrite a parameter.

        Args:
            name: Full parameter path
            value: New value
            secure: Store as SecureString (default: True)

        Raises:
            SSMServiceError: If the parameter cannot be written.
        """
        try:
            self._client.put_parameter(
                Name=name,
                Value=value,
                Type="SecureString" if secure else "String",
                Overwrite=True,
            )
        except ClientError as e:
            raise SSMServiceError(f"Failed to write SSM parameter {name}: {e}") from e

        self._cache.pop(name, None)
        logger.info("SSM parameter updated: %s", name)


@lru_cache(maxsize=1)
def get_ssm_service() -> SSMService:
    """Get the shared SSMService instance (singleton pattern).

    Returns:
        SSMService: Shared service instance.
    """
    return SSMService.get_instance()


def reset_ssm_service() -> None:
    """Drop the shared instance and its cache (for testing only)."""
    SSMService._cache.clear()
    SSMService._instance = None
    get_ssm_service.cache_clear()
