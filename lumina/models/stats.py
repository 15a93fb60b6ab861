"""Admin dashboard models."""

from datetime import datetime

from pydantic import BaseModel, Field


class VenueVotes(BaseModel):
    """Vote count of one venue."""

    venue_id: str
    name: str
    votes: int = Field(..., ge=0)
    percentage: float = Field(..., ge=0, le=100)


class TierStock(BaseModel):
    tier_id: str
    name: str
    stock: int


class EventStats(BaseModel):
    """Aggregates shown on the admin dashboard."""

    total_submissions: int
    total_pax: int = Field(..., description="Registrants plus companions")
    guests_registered: int
    guests_entered: int
    votes: list[VenueVotes]
    leading_venue_id: str | None = Field(
        default=None, description="Most voted venue (ties to the oldest venue)"
    )
    winning_venue_id: str | None = Field(default=None, description="Manual override")
    voting_open: bool
    tiers: list[TierStock]
    tickets_issued: int
    scans_recorded: int


class ResetToken(BaseModel):
    """First step of the two-step factory reset."""

    reset_token: str
    expires_at: datetime
    confirmation_phrase: str = "RESET"
