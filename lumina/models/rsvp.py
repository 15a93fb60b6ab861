"""Registrant submission models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

MAX_COMPANIONS = 3


class RsvpData(BaseModel):
    """One registrant's vote and, later, their claimed tickets.

    Keyed by the guest directory ID so every submission is tied to exactly
    one invited identity.
    """

    guest_id: str = Field(..., description="Guest directory ID (table key)")
    rsvp_id: str = Field(..., description="Submission ID")
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: EmailStr
    selected_venue_id: str | None = Field(default=None, description="Venue voted for")
    selected_tier_id: str | None = Field(
        default=None, description="Tier claimed (set at issuance)"
    )
    guest_count: int = Field(default=0, ge=0, le=MAX_COMPANIONS)
    ticket_ids: list[str] = Field(
        default_factory=list, description="Empty until tickets are issued"
    )
    created_at: datetime
    updated_at: datetime
    issued_at: datetime | None = Field(
        default=None, description="Set once tickets are issued; the record is final"
    )

    @model_validator(mode="after")
    def check_ticket_count(self) -> "RsvpData":
        if self.ticket_ids and len(self.ticket_ids) != 1 + self.guest_count:
            raise ValueError("ticket_ids must hold one ticket per attendee")
        return self

    @property
    def has_tickets(self) -> bool:
        return bool(self.ticket_ids)

    @property
    def pax(self) -> int:
        """People covered by this submission (registrant + companions)."""
        return 1 + self.guest_count


class Registrant(BaseModel):
    """Identity fields a guest types into the registration form."""

    model_config = ConfigDict(str_strip_whitespace=True)

    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: EmailStr
