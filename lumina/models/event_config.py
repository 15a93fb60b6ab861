"""Event-wide configuration model."""

import datetime as dt

from pydantic import BaseModel, Field

DEFAULT_MAX_CAPACITY = 50


def default_voting_deadline() -> dt.datetime:
    """One week from now."""
    return dt.datetime.now(dt.UTC) + dt.timedelta(days=7)


class EventConfig(BaseModel):
    """Process-wide event parameters, stored as a single row.

    Admin-writable and broadcast to every connected session on change.
    Admin credentials live in the secrets store, not here.
    """

    date_display: str = "28 . 02"
    full_date: str = "Sábado, 28 de Febrero 2026"
    time: str = "09:00 PM"
    location_placeholder: str = "Ubicación por Confirmar"
    voting_deadline: dt.datetime = Field(default_factory=default_voting_deadline)
    winning_venue_id: str | None = Field(
        default=None, description="Admin override that closes voting"
    )
    max_capacity: int = Field(default=DEFAULT_MAX_CAPACITY, ge=0)
    guest_passcode: str | None = Field(default="2026", description="Not shown to guests")
    updated_at: dt.datetime | None = None

    def is_voting_open(self, now: dt.datetime) -> bool:
        """Voting is open until the deadline passes or a winner is forced."""
        if self.winning_venue_id:
            return False
        deadline = self.voting_deadline
        if deadline.tzinfo is None:
            deadline = deadline.replace(tzinfo=dt.UTC)
        return deadline > now


class PublicEventConfig(BaseModel):
    """Event configuration as exposed to guests."""

    date_display: str
    full_date: str
    time: str
    location_placeholder: str
    voting_deadline: dt.datetime
    winning_venue_id: str | None
    max_capacity: int

    @classmethod
    def from_config(cls, config: EventConfig) -> "PublicEventConfig":
        return cls(**config.model_dump(exclude={"guest_passcode", "updated_at"}))
