"""Door scan models."""

from datetime import datetime

from pydantic import BaseModel, Field

from .enums import ScanStatus


class TicketScan(BaseModel):
    """Append-only record of the first scan of a ticket."""

    ticket_id: str
    guest_id: str
    guest_name: str
    guest_email: str
    tier_name: str = "N/A"
    scanned_at: datetime


class ScanResult(BaseModel):
    """What the door scanner shows after reading a ticket."""

    status: ScanStatus
    ticket_id: str
    message: str
    guest_name: str | None = None
    guest_email: str | None = None
    tier_name: str | None = None
    scanned_at: datetime | None = Field(
        default=None, description="Time of the first (admitting) scan"
    )

    @property
    def valid(self) -> bool:
        return self.status != ScanStatus.NOT_FOUND
