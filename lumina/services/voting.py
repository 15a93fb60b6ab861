"""Event configuration, venues and the venue vote."""

import datetime as dt
import uuid
from collections import Counter
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from lumina.models import (
    EventConfig,
    FeedEventType,
    PublicEventConfig,
    RsvpData,
    VenueCreate,
    VenueOption,
    VenueUpdate,
)
from lumina.utils.logging import get_logger

if TYPE_CHECKING:
    from .dynamodb import DynamoDBService
    from .realtime import EventFeed

logger = get_logger(__name__)

CONFIG_KEY = "event_settings"


def tally(rsvps: Iterable[RsvpData]) -> dict[str, int]:
    """Count votes per venue ID."""
    return dict(Counter(r.selected_venue_id for r in rsvps if r.selected_venue_id))


def winning_venue(
    config: EventConfig,
    venues: list[VenueOption],
    rsvps: Iterable[RsvpData],
) -> VenueOption | None:
    """Pick the event venue.

    A forced winning_venue_id wins outright. Otherwise the venue with the
    most votes wins; equal counts (including no votes at all) go to the
    venue created first.

    Returns:
        The winning venue, or None when there are no venues
    """
    by_id = {v.venue_id: v for v in venues}
    if config.winning_venue_id and config.winning_venue_id in by_id:
        return by_id[config.winning_venue_id]
    if not venues:
        return None

    votes = tally(rsvps)
    return min(venues, key=lambda v: (-votes.get(v.venue_id, 0), v.position))


class VotingService:
    """Service for the single event configuration row and the venue list."""

    CONFIG_TABLE = "config"
    VENUES_TABLE = "venues"

    def __init__(self, db: "DynamoDBService", feed: "EventFeed") -> None:
        """Initialize voting service.

        Args:
            db: DynamoDB service instance
            feed: Realtime feed that receives config and venue snapshots
        """
        self.db = db
        self.feed = feed

    # Config

    def get_config(self) -> EventConfig:
        """Get the event configuration, falling back to defaults."""
        item = self.db.get_item(self.CONFIG_TABLE, {"config_id": CONFIG_KEY})
        if not item:
            return EventConfig()
        item.pop("config_id", None)
        return EventConfig.model_validate(item)

    def has_config(self) -> bool:
        return self.db.get_item(self.CONFIG_TABLE, {"config_id": CONFIG_KEY}) is not None

    def save_config(self, config: EventConfig, now: dt.datetime | None = None) -> EventConfig:
        """Overwrite the configuration and broadcast it.

        Args:
            config: New configuration
            now: Timestamp to record as updated_at

        Returns:
            The stored configuration
        """
        config = config.model_copy(update={"updated_at": now or dt.datetime.now(dt.UTC)})
        item = {"config_id": CONFIG_KEY, **config.model_dump(mode="json")}
        self.db.put_item(self.CONFIG_TABLE, item)
        logger.info(
            "Event config saved (deadline=%s, winner=%s, capacity=%d)",
            config.voting_deadline.isoformat(),
            config.winning_venue_id,
            config.max_capacity,
        )
        self.publish_config(config)
        return config

    def publish_config(self, config: EventConfig) -> None:
        public = PublicEventConfig.from_config(config)
        self.feed.publish(FeedEventType.CONFIG, public.model_dump(mode="json"))

    # Venues

    def list_venues(self) -> list[VenueOption]:
        """Get all venues in creation order."""
        venues = [VenueOption.model_validate(item) for item in self.db.scan_all(self.VENUES_TABLE)]
        return sorted(venues, key=lambda v: (v.position, v.venue_id))

    def get_venue(self, venue_id: str) -> VenueOption | None:
        item = self.db.get_item(self.VENUES_TABLE, {"venue_id": venue_id})
        if not item:
            return None
        return VenueOption.model_validate(item)

    def create_venue(self, data: VenueCreate) -> VenueOption | None:
        """Add a venue at the end of the list.

        Returns:
            The venue, or None if the requested ID is taken
        """
        venues = self.list_venues()
        position = max((v.position for v in venues), default=-1) + 1
        venue = VenueOption(
            **data.model_dump(exclude={"venue_id"}),
            venue_id=data.venue_id or str(uuid.uuid4()),
            position=position,
        )
        created = self.db.put_item(
            self.VENUES_TABLE,
            venue.model_dump(mode="json"),
            condition_expression="attribute_not_exists(venue_id)",
        )
        if not created:
            return None
        logger.info("Venue created: %s", venue.venue_id)
        self.publish_venues()
        return venue

    def update_venue(self, venue_id: str, data: VenueUpdate) -> VenueOption | None:
        """Apply the provided fields to a venue.

        Returns:
            Updated venue, or None if it does not exist
        """
        venue = self.get_venue(venue_id)
        if venue is None:
            return None
        # Only the links may be cleared with null
        changes = {
            k: v
            for k, v in data.model_dump(exclude_unset=True).items()
            if v is not None or k in ("video_url", "maps_url")
        }
        venue = VenueOption.model_validate({**venue.model_dump(), **changes})
        self.db.put_item(self.VENUES_TABLE, venue.model_dump(mode="json"))
        self.publish_venues()
        return venue

    def delete_venue(self, venue_id: str) -> bool:
        if self.get_venue(venue_id) is None:
            return False
        self.db.delete_item(self.VENUES_TABLE, {"venue_id": venue_id})
        logger.info("Venue deleted: %s", venue_id)
        self.publish_venues()
        return True

    def publish_venues(self) -> None:
        payload: list[dict[str, Any]] = [v.model_dump(mode="json") for v in self.list_venues()]
        self.feed.publish(FeedEventType.VENUES, payload)
