"""Door validation of ticket QR codes against the append-only scan log."""

import datetime as dt
from typing import TYPE_CHECKING

from lumina.models import ScanResult, ScanStatus, TicketScan
from lumina.utils.logging import get_logger

if TYPE_CHECKING:
    from .dynamodb import DynamoDBService
    from .rsvps import RsvpService
    from .stock import StockService

logger = get_logger(__name__)


class ScanService:
    """Service for admitting tickets exactly once."""

    TABLE = "ticket-scans"

    def __init__(
        self,
        db: "DynamoDBService",
        rsvps: "RsvpService",
        stock: "StockService",
    ) -> None:
        """Initialize scan service.

        Args:
            db: DynamoDB service instance
            rsvps: Submission service (owns the ticket index)
            stock: Stock service, for tier display names
        """
        self.db = db
        self.rsvps = rsvps
        self.stock = stock

    def scan(self, ticket_id: str, now: dt.datetime | None = None) -> ScanResult:
        """Validate a ticket at the door.

        The first scan is written with a conditional put, so two scanners
        reading the same ticket at once admit it only once.

        Args:
            ticket_id: Ticket ID read from the QR code
            now: Scan time

        Returns:
            ScanResult with status admitted, already_used or not_found
        """
        ticket_id = ticket_id.strip()
        ticket = self.rsvps.find_ticket(ticket_id) if ticket_id else None
        if ticket is None:
            logger.warning("Scan of unknown ticket %s", ticket_id)
            return ScanResult(
                status=ScanStatus.NOT_FOUND,
                ticket_id=ticket_id,
                message="Ticket not found",
            )

        rsvp = self.rsvps.get(ticket["guest_id"])
        tier = self.stock.get_tier(ticket.get("tier_id", ""))
        record = TicketScan(
            ticket_id=ticket_id,
            guest_id=ticket["guest_id"],
            guest_name=f"{rsvp.first_name} {rsvp.last_name}" if rsvp else "Unknown",
            guest_email=str(rsvp.email) if rsvp else "",
            tier_name=tier.name if tier else "N/A",
            scanned_at=now or dt.datetime.now(dt.UTC),
        )

        admitted = self.db.put_item(
            self.TABLE,
            record.model_dump(mode="json"),
            condition_expression="attribute_not_exists(ticket_id)",
        )
        if admitted:
            logger.info("Ticket %s admitted", ticket_id)
            return ScanResult(
                status=ScanStatus.ADMITTED,
                message="Access granted",
                **record.model_dump(exclude={"guest_id"}),
            )

        first = self.get_scan(ticket_id) or record
        logger.warning("Ticket %s already used at %s", ticket_id, first.scanned_at.isoformat())
        return ScanResult(
            status=ScanStatus.ALREADY_USED,
            message="Ticket already used",
            **first.model_dump(exclude={"guest_id"}),
        )

    def get_scan(self, ticket_id: str) -> TicketScan | None:
        item = self.db.get_item(self.TABLE, {"ticket_id": ticket_id})
        if not item:
            return None
        return TicketScan.model_validate(item)

    def list_scans(self) -> list[TicketScan]:
        """Get the scan log, most recent first."""
        scans = [TicketScan.model_validate(item) for item in self.db.scan_all(self.TABLE)]
        return sorted(scans, key=lambda s: s.scanned_at, reverse=True)

    def delete_all(self) -> int:
        return self.db.delete_all(self.TABLE, "ticket_id")
