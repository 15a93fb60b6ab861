"""Pydantic models for Lumina data entities."""

from .enums import AdmissionState, FeedEventType, ScanStatus
from .errors import AdmissionError, ErrorCode, ErrorResponse
from .event_config import EventConfig, PublicEventConfig
from .guest import GuestCreate, GuestEntry, is_valid_phone
from .rsvp import MAX_COMPANIONS, Registrant, RsvpData
from .scan import ScanResult, TicketScan
from .session import AdmissionSession, AdmissionView
from .stats import EventStats, ResetToken, TierStock, VenueVotes
from .tier import GameRequirement, TicketTier, TierView, game_requirement_for
from .venue import VenueCreate, VenueOption, VenueUpdate

__all__ = [
    # Enums
    "AdmissionState",
    "FeedEventType",
    "ScanStatus",
    # Errors
    "AdmissionError",
    "ErrorCode",
    "ErrorResponse",
    # Config
    "EventConfig",
    "PublicEventConfig",
    # Guest directory
    "GuestCreate",
    "GuestEntry",
    "is_valid_phone",
    # Submissions
    "MAX_COMPANIONS",
    "Registrant",
    "RsvpData",
    # Scans
    "ScanResult",
    "TicketScan",
    # Sessions
    "AdmissionSession",
    "AdmissionView",
    # Admin
    "EventStats",
    "ResetToken",
    "TierStock",
    "VenueVotes",
    # Tiers
    "GameRequirement",
    "TicketTier",
    "TierView",
    "game_requirement_for",
    # Venues
    "VenueCreate",
    "VenueOption",
    "VenueUpdate",
]
