"""Backend services for the Lumina invitation."""

from .admin import AdminService
from .admission import AdmissionService
from .credentials import AdminCredentialsService
from .directory import GuestDirectoryService
from .dynamodb import DynamoDBService, get_dynamodb_service
from .realtime import EventFeed, get_event_feed
from .rsvps import RsvpService
from .scans import ScanService
from .ssm_service import SSMService, SSMServiceError, get_ssm_service
from .stock import StockService
from .verification import VerificationService
from .voting import VotingService

__all__ = [
    "DynamoDBService",
    "get_dynamodb_service",
    "AdminService",
    "AdmissionService",
    "AdminCredentialsService",
    "EventFeed",
    "get_event_feed",
    "GuestDirectoryService",
    "RsvpService",
    "ScanService",
    "SSMService",
    "SSMServiceError",
    "get_ssm_service",
    "StockService",
    "VerificationService",
    "VotingService",
]
