"""FastAPI dependency injection providers for shared services.

Factory functions use @lru_cache so each service is built once per process.

Usage in routes:
    from lumina.api.dependencies import get_admission_service

    @router.post("/sessions")
    async def start_session(
        service: AdmissionService = Depends(get_admission_service),
    ):
        ...

Service Dependency Graph:
    DynamoDBService (singleton via get_dynamodb_service)
        ├── GuestDirectoryService
        │       └── VerificationService
        ├── VotingService ──────── EventFeed
        ├── StockService ───────── EventFeed
        ├── RsvpService
        ├── ScanService (RsvpService, StockService)
        ├── AdmissionService (all of the above)
        └── AdminService
    SSMService
        └── AdminCredentialsService

Testing:
    Use reset_services() to clear cached instances between tests.
"""

from functools import lru_cache

from lumina.services.admin import AdminService
from lumina.services.admission import AdmissionService
from lumina.services.credentials import AdminCredentialsService
from lumina.services.directory import GuestDirectoryService
from lumina.services.dynamodb import get_dynamodb_service
from lumina.services.realtime import get_event_feed
from lumina.services.rsvps import RsvpService
from lumina.services.scans import ScanService
from lumina.services.ssm_service import get_ssm_service
from lumina.services.stock import StockService
from lumina.services.verification import VerificationService
from lumina.services.voting import VotingService


@lru_cache
def get_directory_service() -> GuestDirectoryService:
    """Get cached GuestDirectoryService instance."""
    return GuestDirectoryService(db=get_dynamodb_service())


@lru_cache
def get_verification_service() -> VerificationService:
    return VerificationService(directory=get_directory_service())


@lru_cache
def get_voting_service() -> VotingService:
    """Get cached VotingService instance.

    Returns:
        VotingService publishing config and venue snapshots on the event feed.
    """
    return VotingService(db=get_dynamodb_service(), feed=get_event_feed())


@lru_cache
def get_stock_service() -> StockService:
    """Get cached StockService instance.

    Returns:
        StockService publishing tier snapshots on the event feed.
    """
    return StockService(db=get_dynamodb_service(), feed=get_event_feed())


@lru_cache
def get_rsvp_service() -> RsvpService:
    return RsvpService(db=get_dynamodb_service())


@lru_cache
def get_scan_service() -> ScanService:
    return ScanService(
        db=get_dynamodb_service(),
        rsvps=get_rsvp_service(),
        stock=get_stock_service(),
    )


@lru_cache
def get_admission_service() -> AdmissionService:
    """Get cached AdmissionService instance.

    Returns:
        AdmissionService configured with all required dependencies.
    """
    return AdmissionService(
        db=get_dynamodb_service(),
        directory=get_directory_service(),
        verification=get_verification_service(),
        voting=get_voting_service(),
        stock=get_stock_service(),
        rsvps=get_rsvp_service(),
    )


@lru_cache
def get_admin_service() -> AdminService:
    """Get cached AdminService instance."""
    return AdminService(
        directory=get_directory_service(),
        voting=get_voting_service(),
        stock=get_stock_service(),
        rsvps=get_rsvp_service(),
        scans=get_scan_service(),
    )


@lru_cache
def get_credentials_service() -> AdminCredentialsService:
    """Get cached AdminCredentialsService instance (reads LUMINA_SSM_PREFIX)."""
    return AdminCredentialsService(ssm=get_ssm_service())


def reset_services() -> None:
    """Clear all cached service instances.

    Call this in test fixtures to ensure clean state between tests.
    Also resets the DynamoDB, SSM and event feed singletons.

    Example:
        @pytest.fixture(autouse=True)
        def reset_state():
            yield
            reset_services()
    """
    from lumina.services.dynamodb import reset_dynamodb_service
    from lumina.services.realtime import reset_event_feed
    from lumina.services.ssm_service import reset_ssm_service

    # Clear all lru_cache instances
    get_directory_service.cache_clear()
    get_verification_service.cache_clear()
    get_voting_service.cache_clear()
    get_stock_service.cache_clear()
    get_rsvp_service.cache_clear()
    get_scan_service.cache_clear()
    get_admission_service.cache_clear()
    get_admin_service.cache_clear()
    get_credentials_service.cache_clear()

    # Reset underlying singletons
    reset_dynamodb_service()
    reset_ssm_service()
    reset_event_feed()
