"""Enumeration types for Lumina data models."""

from enum import Enum


class AdmissionState(str, Enum):
    """State of a guest's admission session."""

    UNVERIFIED = "unverified"
    VERIFIED = "verified"
    VOTED = "voted"  # Awaiting the voting deadline
    TIER_SELECTING = "tier_selecting"
    CLAIMING = "claiming"  # Tier chosen, mini-game and claim pending
    ISSUING = "issuing"  # Stock claimed, companions and tickets pending
    ISSUED = "issued"


class ScanStatus(str, Enum):
    """Outcome of scanning a ticket at the door."""

    ADMITTED = "admitted"
    ALREADY_USED = "already_used"
    NOT_FOUND = "not_found"


class FeedEventType(str, Enum):
    """Snapshot types pushed on the realtime feed."""

    CONFIG = "config"
    VENUES = "venues"
    TIERS = "tiers"
