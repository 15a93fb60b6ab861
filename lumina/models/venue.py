"""Venue option models."""

from pydantic import BaseModel, Field


class VenueOption(BaseModel):
    """A candidate event location guests vote on."""

    venue_id: str = Field(..., description="Unique venue ID")
    name: str = Field(..., min_length=1)
    vibe: str = ""
    min_spend: str = ""
    closing_time: str = ""
    description: str = ""
    perks: list[str] = Field(default_factory=list)
    color: str = ""
    video_url: str | None = None
    maps_url: str | None = None
    position: int = Field(
        default=0, ge=0, description="Creation order, breaks vote ties"
    )


class VenueCreate(BaseModel):
    """Fields an admin supplies for a new venue."""

    venue_id: str | None = Field(
        default=None, description="Optional explicit ID (generated when omitted)"
    )
    name: str = Field(..., min_length=1)
    vibe: str = ""
    min_spend: str = ""
    closing_time: str = ""
    description: str = ""
    perks: list[str] = Field(default_factory=list)
    color: str = ""
    video_url: str | None = None
    maps_url: str | None = None


class VenueUpdate(BaseModel):
    """Fields an admin may change on an existing venue."""

    name: str | None = Field(default=None, min_length=1)
    vibe: str | None = None
    min_spend: str | None = None
    closing_time: str | None = None
    description: str | None = None
    perks: list[str] | None = None
    color: str | None = None
    video_url: str | None = None
    maps_url: str | None = None
