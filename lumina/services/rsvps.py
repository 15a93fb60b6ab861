"""Registrant submissions (votes and issued tickets)."""

import datetime as dt
import uuid
from typing import TYPE_CHECKING, Any

from lumina.models import Registrant, RsvpData
from lumina.utils.logging import get_logger

from .dynamodb import serialize_item

if TYPE_CHECKING:
    from .dynamodb import DynamoDBService

logger = get_logger(__name__)


class RsvpService:
    """Service for submissions keyed by guest directory ID.

    The ticket index (ticket_id -> guest_id) is written in the same
    transaction that attaches tickets to a submission.
    """

    TABLE = "rsvps"
    TICKETS_TABLE = "tickets"

    def __init__(self, db: "DynamoDBService") -> None:
        """Initialize submission service.

        Args:
            db: DynamoDB service instance
        """
        self.db = db

    def get(self, guest_id: str) -> RsvpData | None:
        """Get the submission of a guest, if any."""
        item = self.db.get_item(self.TABLE, {"guest_id": guest_id})
        if not item:
            return None
        return RsvpData.model_validate(item)

    def list_all(self) -> list[RsvpData]:
        """Get every submission, oldest first."""
        rsvps = [RsvpData.model_validate(item) for item in self.db.scan_all(self.TABLE)]
        return sorted(rsvps, key=lambda r: r.created_at)

    def create_vote(
        self,
        guest_id: str,
        registrant: Registrant,
        venue_id: str,
        now: dt.datetime,
    ) -> RsvpData | None:
        """Record a guest's venue vote.

        Args:
            guest_id: Voting guest
            registrant: Identity typed into the form
            venue_id: Venue voted for
            now: Submission time

        Returns:
            The new submission, or None if the guest already has one
        """
        rsvp = RsvpData(
            guest_id=guest_id,
            rsvp_id=str(uuid.uuid4()),
            first_name=registrant.first_name,
            last_name=registrant.last_name,
            email=registrant.email,
            selected_venue_id=venue_id,
            created_at=now,
            updated_at=now,
        )
        created = self.db.put_item(
            self.TABLE,
            rsvp.model_dump(mode="json"),
            condition_expression="attribute_not_exists(guest_id)",
        )
        if not created:
            return None
        logger.info("Vote recorded for %s -> %s", guest_id, venue_id)
        return rsvp

    def record_issuance(
        self,
        guest_id: str,
        registrant: Registrant,
        tier_id: str,
        guest_count: int,
        ticket_ids: list[str],
        now: dt.datetime,
    ) -> RsvpData | None:
        """Attach tier and tickets to a guest's submission.

        Creates the submission when the guest never voted. The submission and
        every ticket index row are written in one transaction; it is refused
        when the submission already carries tickets.

        Returns:
            The final submission, or None if tickets were already issued
        """
        existing = self.get(guest_id)
        rsvp = RsvpData(
            guest_id=guest_id,
            rsvp_id=existing.rsvp_id if existing else str(uuid.uuid4()),
            first_name=registrant.first_name,
            last_name=registrant.last_name,
            email=registrant.email,
            selected_venue_id=existing.selected_venue_id if existing else None,
            selected_tier_id=tier_id,
            guest_count=guest_count,
            ticket_ids=ticket_ids,
            created_at=existing.created_at if existing else now,
            updated_at=now,
            issued_at=now,
        )

        items: list[dict[str, Any]] = [
            {
                "Put": {
                    "TableName": self.db._table_name(self.TABLE),
                    "Item": serialize_item(rsvp.model_dump(mode="json")),
                    "ConditionExpression": (
                        "attribute_not_exists(guest_id) OR attribute_not_exists(issued_at)"
                    ),
                }
            }
        ]
        for ticket_id in ticket_ids:
            items.append(
                {
                    "Put": {
                        "TableName": self.db._table_name(self.TICKETS_TABLE),
                        "Item": serialize_item(
                            {"ticket_id": ticket_id, "guest_id": guest_id, "tier_id": tier_id}
                        ),
                        "ConditionExpression": "attribute_not_exists(ticket_id)",
                    }
                }
            )

        if not self.db.transact_write(items):
            logger.warning("Ticket issuance refused for %s", guest_id)
            return None

        logger.info("Issued %d tickets (%s) for %s", len(ticket_ids), tier_id, guest_id)
        return rsvp

    def find_ticket(self, ticket_id: str) -> dict[str, Any] | None:
        """Look up a ticket in the index.

        Returns:
            Dict with ticket_id, guest_id and tier_id, or None if unknown
        """
        return self.db.get_item(self.TICKETS_TABLE, {"ticket_id": ticket_id})

    def delete_all(self) -> dict[str, int]:
        """Delete every submission and the ticket index."""
        return {
            "rsvps": self.db.delete_all(self.TABLE, "guest_id"),
            "tickets": self.db.delete_all(self.TICKETS_TABLE, "ticket_id"),
        }
