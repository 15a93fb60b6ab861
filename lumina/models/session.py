"""Admission session model.

A session is the server-side counterpart of one visitor's screen flow. It
carries the state-machine position, the verification rate-limit counters and
the single-use mini-game pass. Sessions expire after 24 hours via DynamoDB TTL.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .enums import AdmissionState
from .guest import GuestEntry
from .rsvp import RsvpData
from .tier import TierView
from .venue import VenueOption

SESSION_TTL_SECONDS = 24 * 60 * 60


class AdmissionSession(BaseModel):
    """Server-held state for one visitor."""

    session_id: str = Field(..., description="Opaque session ID handed to the client")
    state: AdmissionState = Field(default=AdmissionState.UNVERIFIED)
    guest_id: str | None = Field(default=None, description="Set once verified")
    failed_attempts: int = Field(
        default=0, ge=0, description="Consecutive failed phone lookups"
    )
    locked_until: datetime | None = Field(
        default=None, description="End of the verification cooldown"
    )
    selected_tier_id: str | None = None
    game_pass: str | None = Field(
        default=None, description="Single-use token issued when the mini-game is won"
    )
    created_at: datetime
    updated_at: datetime
    expires_at: int = Field(..., description="Unix epoch timestamp for DynamoDB TTL")


class AdmissionView(BaseModel):
    """Everything the guest screen needs to render the current step."""

    session_id: str
    state: AdmissionState
    guest: GuestEntry | None = None
    voting_open: bool
    voting_deadline: datetime
    winning_venue: VenueOption | None = Field(
        default=None, description="Confirmed venue, set once voting has closed"
    )
    venues: list[VenueOption] = Field(default_factory=list)
    tiers: list[TierView] | None = Field(
        default=None, description="Present while choosing or claiming a tier"
    )
    selected_tier_id: str | None = None
    rsvp: RsvpData | None = None
    failed_attempts: int = 0
    locked_until: datetime | None = None
    game_pass: str | None = Field(
        default=None, description="Returned once, right after the mini-game is won"
    )
