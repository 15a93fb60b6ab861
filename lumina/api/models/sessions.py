"""API models for admission session endpoints."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from lumina.models import (
    AdmissionError,
    ErrorCode,
    PublicEventConfig,
    Registrant,
    VenueOption,
)


class VerifyRequest(BaseModel):
    """Phone number typed on the unlock screen."""

    model_config = ConfigDict(
        json_schema_extra={"examples": [{"phone": "987654321"}]},
    )

    phone: str = Field(..., description="9-digit phone number starting with 9")


class VoteRequest(BaseModel):
    """Venue vote with the registrant's identity."""

    model_config = ConfigDict(str_strip_whitespace=True)

    venue_id: str
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: EmailStr

    def registrant(self) -> Registrant:
        return Registrant(
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
        )


class TierSelectionRequest(BaseModel):
    tier_id: str


class GameResultRequest(BaseModel):
    """Outcome reported by the mini-game."""

    score: int = Field(..., ge=0, description="Targets hit before the time ran out")


class ClaimRequest(BaseModel):
    game_pass: str = Field(..., description="Pass returned by game/complete")


class IssueRequest(BaseModel):
    """Companion count and, for guests who never voted, their identity."""

    model_config = ConfigDict(str_strip_whitespace=True)

    guest_count: int = Field(default=0, description="Companions (0-3)")
    first_name: str | None = None
    last_name: str | None = None
    email: EmailStr | None = None

    def registrant(self) -> Registrant | None:
        """Identity from the request, None when no field was sent.

        Raises:
            AdmissionError: VALIDATION_ERROR when only some fields are set
        """
        fields = (self.first_name, self.last_name, self.email)
        if not any(fields):
            return None
        if not all(fields):
            raise AdmissionError(
                ErrorCode.VALIDATION_ERROR,
                details={"registrant": "first_name, last_name and email are required"},
            )
        return Registrant(
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
        )


class EventResponse(BaseModel):
    """Public event details for the landing screen."""

    config: PublicEventConfig
    voting_open: bool
    winning_venue: VenueOption | None = None
