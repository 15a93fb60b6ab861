"""Guest directory service."""

import datetime as dt
import uuid
from typing import TYPE_CHECKING, Any

from lumina.models import AdmissionError, ErrorCode, GuestCreate, GuestEntry
from lumina.utils.logging import get_logger

from .dynamodb import serialize_item

if TYPE_CHECKING:
    from .dynamodb import DynamoDBService

logger = get_logger(__name__)


class GuestDirectoryService:
    """Service for the authoritative list of invited phone numbers.

    Each guest row is paired with a phone-keyed row in `guest-phones`, written
    and deleted in the same transaction, so a phone can only belong to one
    guest.
    """

    TABLE = "guests"
    PHONES_TABLE = "guest-phones"

    def __init__(self, db: "DynamoDBService") -> None:
        """Initialize guest directory service.

        Args:
            db: DynamoDB service instance
        """
        self.db = db

    def list_guests(self) -> list[GuestEntry]:
        """Get every guest, ordered by name."""
        guests = [self._item_to_guest(item) for item in self.db.scan_all(self.TABLE)]
        return sorted(guests, key=lambda g: g.name.lower())

    def get_guest(self, guest_id: str) -> GuestEntry | None:
        """Get a guest by ID.

        Args:
            guest_id: Guest ID

        Returns:
            GuestEntry or None if not found
        """
        item = self.db.get_item(self.TABLE, {"guest_id": guest_id})
        if not item:
            return None
        return self._item_to_guest(item)

    def find_by_phone(self, phone: str) -> GuestEntry | None:
        """Find a guest by exact phone string.

        Args:
            phone: 9-digit phone number

        Returns:
            GuestEntry or None if no guest has this phone
        """
        item = self.db.get_item(self.PHONES_TABLE, {"phone": phone})
        if not item:
            return None
        return self.get_guest(item["guest_id"])

    def add_guest(self, data: GuestCreate, guest_id: str | None = None) -> GuestEntry:
        """Add a guest to the directory.

        Args:
            data: Guest name and (normalized) phone
            guest_id: Optional explicit ID, a UUID is generated otherwise

        Returns:
            The created guest

        Raises:
            AdmissionError: DUPLICATE_PHONE if the phone is already registered,
                VALIDATION_ERROR if the guest ID is taken
        """
        guest = GuestEntry(
            guest_id=guest_id or str(uuid.uuid4()),
            name=data.name,
            phone=data.phone,
        )
        written = self.db.transact_write(
            [
                {
                    "Put": {
                        "TableName": self.db._table_name(self.TABLE),
                        "Item": serialize_item(self._guest_to_item(guest)),
                        "ConditionExpression": "attribute_not_exists(guest_id)",
                    }
                },
                {
                    "Put": {
                        "TableName": self.db._table_name(self.PHONES_TABLE),
                        "Item": serialize_item(
                            {"phone": guest.phone, "guest_id": guest.guest_id}
                        ),
                        "ConditionExpression": "attribute_not_exists(phone)",
                    }
                },
            ]
        )
        if not written:
            if self.db.get_item(self.PHONES_TABLE, {"phone": guest.phone}):
                raise AdmissionError(ErrorCode.DUPLICATE_PHONE, details={"phone": guest.phone})
            raise AdmissionError(
                ErrorCode.VALIDATION_ERROR, details={"guest_id": "already exists"}
            )

        logger.info("Guest added", extra={"guest_id": guest.guest_id})
        return guest

    def delete_guest(self, guest_id: str) -> bool:
        """Remove a guest and its phone from the directory.

        Returns:
            False if the guest did not exist
        """
        guest = self.get_guest(guest_id)
        if not guest:
            return False
        self.db.transact_write(
            [
                {
                    "Delete": {
                        "TableName": self.db._table_name(self.TABLE),
                        "Key": serialize_item({"guest_id": guest_id}),
                    }
                },
                {
                    "Delete": {
                        "TableName": self.db._table_name(self.PHONES_TABLE),
                        "Key": serialize_item({"phone": guest.phone}),
                    }
                },
            ]
        )
        return True

    def mark_used(self, guest_id: str, now: dt.datetime) -> GuestEntry | None:
        """Record that a guest has entered.

        The first entry timestamp is kept on repeated visits.
        """
        attrs = self.db.update_item(
            self.TABLE,
            {"guest_id": guest_id},
            "SET #used = :true, used_at = if_not_exists(used_at, :now)",
            expression_attribute_values={":true": True, ":now": now.isoformat()},
            expression_attribute_names={"#used": "used"},
            condition_expression="attribute_exists(guest_id)",
        )
        if attrs is None:
            return None
        return self._item_to_guest(attrs)

    def reset_guest(self, guest_id: str, clear_claim: bool = False) -> GuestEntry | None:
        """Give a guest access again (used=false, no entry timestamp).

        Args:
            guest_id: Guest ID
            clear_claim: Also forget the guest's tier claim
        """
        update = "SET #used = :false REMOVE used_at"
        if clear_claim:
            update += ", claim_session_id, claimed_tier_id"
        attrs = self.db.update_item(
            self.TABLE,
            {"guest_id": guest_id},
            update,
            expression_attribute_values={":false": False},
            expression_attribute_names={"#used": "used"},
            condition_expression="attribute_exists(guest_id)",
        )
        if attrs is None:
            return None
        return self._item_to_guest(attrs)

    def reset_all(self) -> int:
        """Reset the used flag and tier claim of every guest.

        Returns:
            Number of guests reset
        """
        guests = self.list_guests()
        for guest in guests:
            self.reset_guest(guest.guest_id, clear_claim=True)
        return len(guests)

    # Tier claims (one per guest)

    def reserve_claim(self, guest_id: str, session_id: str) -> bool:
        """Mark a session as the one claiming stock for this guest.

        Returns:
            False if the guest is unknown or another claim is held
        """
        attrs = self.db.update_item(
            self.TABLE,
            {"guest_id": guest_id},
            "SET claim_session_id = :session_id",
            expression_attribute_values={":session_id": session_id},
            condition_expression=(
                "attribute_exists(guest_id) AND attribute_not_exists(claim_session_id)"
            ),
        )
        return attrs is not None

    def confirm_claim(self, guest_id: str, session_id: str, tier_id: str) -> None:
        """Record the tier whose stock the reserving session took."""
        self.db.update_item(
            self.TABLE,
            {"guest_id": guest_id},
            "SET claimed_tier_id = :tier_id",
            expression_attribute_values={":tier_id": tier_id, ":session_id": session_id},
            condition_expression="claim_session_id = :session_id",
        )

    def release_claim(self, guest_id: str, session_id: str) -> None:
        """Drop a reservation whose stock claim did not go through."""
        self.db.update_item(
            self.TABLE,
            {"guest_id": guest_id},
            "REMOVE claim_session_id, claimed_tier_id",
            expression_attribute_values={":session_id": session_id},
            condition_expression="claim_session_id = :session_id",
        )

    def get_claim(self, guest_id: str) -> tuple[str | None, str | None]:
        """Current claim of a guest as (claim_session_id, claimed_tier_id)."""
        item = self.db.get_item(self.TABLE, {"guest_id": guest_id}) or {}
        return item.get("claim_session_id"), item.get("claimed_tier_id")

    def counts(self) -> dict[str, int]:
        """Registered and entered guest counts."""
        guests = self.list_guests()
        return {
            "registered": len(guests),
            "entered": sum(1 for g in guests if g.used),
        }

    def _guest_to_item(self, guest: GuestEntry) -> dict[str, Any]:
        return guest.model_dump(mode="json")

    def _item_to_guest(self, item: dict[str, Any]) -> GuestEntry:
        return GuestEntry(
            guest_id=item["guest_id"],
            name=item["name"],
            phone=item["phone"],
            used=bool(item.get("used", False)),
            used_at=item.get("used_at"),
        )
