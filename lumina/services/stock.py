"""Ticket tier stock and the atomic claim procedure."""

from typing import TYPE_CHECKING, Any

from botocore.exceptions import BotoCoreError, ClientError

from lumina.models import FeedEventType, TicketTier, TierView
from lumina.utils.logging import get_logger, log_claim_operation

if TYPE_CHECKING:
    from .dynamodb import DynamoDBService
    from .realtime import EventFeed

logger = get_logger(__name__)

EXHAUSTED = -1

PLATINUM_FIXED_STOCK = 5

DEFAULT_TIER_STOCK: dict[str, int] = {
    "platinum": PLATINUM_FIXED_STOCK,
    "emerald": 12,
    "standard": 25,
}


def split_capacity(max_capacity: int) -> dict[str, int]:
    """Partition event capacity into tier stock.

    Platinum is fixed; the rest is halved between emerald and standard,
    with standard taking the odd unit.
    """
    rest = max(0, max_capacity - PLATINUM_FIXED_STOCK)
    emerald = rest // 2
    return {
        "platinum": PLATINUM_FIXED_STOCK,
        "emerald": emerald,
        "standard": rest - emerald,
    }


class StockService:
    """Service for ticket tiers and their stock."""

    TABLE = "ticket-tiers"

    def __init__(self, db: "DynamoDBService", feed: "EventFeed | None" = None) -> None:
        """Initialize stock service.

        Args:
            db: DynamoDB service instance
            feed: Realtime feed that receives tier snapshots
        """
        self.db = db
        self.feed = feed

    def list_tier_views(self) -> list[TierView]:
        """Get all tiers with their mini-game requirement."""
        return [TierView.from_tier(t) for t in self.list_tiers()]

    def publish_tiers(self) -> None:
        """Broadcast the current tier list."""
        if self.feed is None:
            return
        self.feed.publish(
            FeedEventType.TIERS,
            [t.model_dump(mode="json") for t in self.list_tier_views()],
        )

    def list_tiers(self) -> list[TicketTier]:
        """Get all tiers in display order."""
        tiers = [self._item_to_tier(item) for item in self.db.scan_all(self.TABLE)]
        return sorted(tiers, key=lambda t: (t.position, t.tier_id))

    def get_tier(self, tier_id: str) -> TicketTier | None:
        """Get a tier by ID (strongly consistent read)."""
        item = self.db.get_item(self.TABLE, {"tier_id": tier_id})
        if not item:
            return None
        return self._item_to_tier(item)

    def put_tier(self, tier: TicketTier) -> None:
        """Create or overwrite a tier definition."""
        self.db.put_item(self.TABLE, tier.model_dump(mode="json"))

    def claim(self, tier_id: str, session_id: str | None = None) -> int:
        """Atomically take one unit of a tier's stock.

        A single conditional UpdateItem: the decrement only happens while
        stock is positive, so concurrent callers can never push it below
        zero and a refused claim leaves it untouched.

        Args:
            tier_id: Tier to claim from
            session_id: Admission session for log context

        Returns:
            The new stock (>= 0), or -1 when the tier is exhausted or unknown
        """
        try:
            attrs = self.db.update_item(
                self.TABLE,
                {"tier_id": tier_id},
                "SET #stock = #stock - :one",
                expression_attribute_values={":one": 1, ":zero": 0},
                expression_attribute_names={"#stock": "stock"},
                condition_expression="attribute_exists(tier_id) AND #stock > :zero",
                return_values="UPDATED_NEW",
            )
        except (ClientError, BotoCoreError) as e:
            log_claim_operation(logger, tier_id, session_id=session_id, error=str(e))
            raise

        new_stock = EXHAUSTED if attrs is None else int(attrs["stock"])
        log_claim_operation(logger, tier_id, new_stock=new_stock, session_id=session_id)
        return new_stock

    def set_stock(self, tier_id: str, stock: int) -> TicketTier | None:
        """Overwrite a tier's stock (admin only).

        Returns:
            Updated tier, or None if the tier does not exist
        """
        if stock < 0:
            raise ValueError("stock must be >= 0")
        attrs = self.db.update_item(
            self.TABLE,
            {"tier_id": tier_id},
            "SET #stock = :stock",
            expression_attribute_values={":stock": stock},
            expression_attribute_names={"#stock": "stock"},
            condition_expression="attribute_exists(tier_id)",
        )
        if attrs is None:
            return None
        logger.info("Stock for %s set to %d", tier_id, stock)
        return self._item_to_tier(attrs)

    def apply_stock(self, stock_by_tier: dict[str, int]) -> list[TicketTier]:
        """Set stock for several tiers, skipping tiers that do not exist."""
        for tier_id, stock in stock_by_tier.items():
            self.set_stock(tier_id, stock)
        self.publish_tiers()
        return self.list_tiers()

    def apply_capacity(self, max_capacity: int) -> list[TicketTier]:
        """Recompute every tier's stock from the event capacity."""
        return self.apply_stock(split_capacity(max_capacity))

    def reset_defaults(self) -> list[TicketTier]:
        """Restore the default stock (5 / 12 / 25)."""
        return self.apply_stock(DEFAULT_TIER_STOCK)

    def _item_to_tier(self, item: dict[str, Any]) -> TicketTier:
        return TicketTier(
            tier_id=item["tier_id"],
            name=item.get("name", item["tier_id"]),
            description=item.get("description", ""),
            stock=int(item.get("stock", 0)),
            perks=list(item.get("perks", [])),
            color=item.get("color", ""),
            position=int(item.get("position", 0)),
        )
