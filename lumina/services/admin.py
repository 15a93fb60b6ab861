"""Admin back-office operations: dashboard, config save and factory reset."""

import datetime as dt
import secrets
from collections.abc import Callable
from typing import TYPE_CHECKING

from lumina.models import (
    AdmissionError,
    ErrorCode,
    EventConfig,
    EventStats,
    ResetToken,
    TierStock,
    VenueVotes,
)
from lumina.utils.logging import get_logger

from .voting import tally, winning_venue

if TYPE_CHECKING:
    from .directory import GuestDirectoryService
    from .rsvps import RsvpService
    from .scans import ScanService
    from .stock import StockService
    from .voting import VotingService

logger = get_logger(__name__)

RESET_PHRASE = "RESET"
RESET_TOKEN_TTL = dt.timedelta(minutes=2)
RESET_TOKEN_KEY = "factory_reset"


class AdminService:
    """Service behind the authenticated admin routes."""

    def __init__(
        self,
        directory: "GuestDirectoryService",
        voting: "VotingService",
        stock: "StockService",
        rsvps: "RsvpService",
        scans: "ScanService",
        clock: Callable[[], dt.datetime] | None = None,
    ) -> None:
        self.directory = directory
        self.voting = voting
        self.stock = stock
        self.rsvps = rsvps
        self.scans = scans
        self.clock = clock or (lambda: dt.datetime.now(dt.UTC))

    def stats(self) -> EventStats:
        """Aggregate submissions, votes, stock and door scans."""
        rsvps = self.rsvps.list_all()
        venues = self.voting.list_venues()
        config = self.voting.get_config()
        counts = self.directory.counts()

        votes = tally(rsvps)
        total_votes = sum(votes.values())
        # Share of all submissions, not of votes cast
        venue_votes = [
            VenueVotes(
                venue_id=v.venue_id,
                name=v.name,
                votes=votes.get(v.venue_id, 0),
                percentage=round(100 * votes.get(v.venue_id, 0) / len(rsvps), 1)
                if rsvps
                else 0.0,
            )
            for v in venues
        ]
        # Leader by votes only, ignoring the manual override
        leader = winning_venue(config.model_copy(update={"winning_venue_id": None}), venues, rsvps)

        return EventStats(
            total_submissions=len(rsvps),
            total_pax=sum(r.pax for r in rsvps),
            guests_registered=counts["registered"],
            guests_entered=counts["entered"],
            votes=venue_votes,
            leading_venue_id=leader.venue_id if leader and total_votes else None,
            winning_venue_id=config.winning_venue_id,
            voting_open=config.is_voting_open(self.clock()),
            tiers=[
                TierStock(tier_id=t.tier_id, name=t.name, stock=t.stock)
                for t in self.stock.list_tiers()
            ],
            tickets_issued=sum(len(r.ticket_ids) for r in rsvps),
            scans_recorded=len(self.scans.list_scans()),
        )

    def save_config(self, config: EventConfig) -> EventConfig:
        """Store the config and recompute tier stock from its capacity."""
        saved = self.voting.save_config(config, now=self.clock())
        self.stock.apply_capacity(saved.max_capacity)
        return saved

    # Factory reset

    def request_reset(self) -> ResetToken:
        """Issue a short-lived token that confirm_reset must echo back."""
        now = self.clock()
        token = ResetToken(
            reset_token=secrets.token_urlsafe(24),
            expires_at=now + RESET_TOKEN_TTL,
            confirmation_phrase=RESET_PHRASE,
        )
        self.voting.db.put_item(
            self.voting.CONFIG_TABLE,
            {
                "config_id": RESET_TOKEN_KEY,
                "reset_token": token.reset_token,
                "expires_at": token.expires_at.isoformat(),
            },
        )
        logger.warning("Factory reset requested")
        return token

    def confirm_reset(self, reset_token: str, phrase: str) -> dict[str, int]:
        """Wipe submissions, tickets and scans; restore guests and stock.

        Config and venues are kept.

        Raises:
            AdmissionError: RESET_NOT_CONFIRMED on a wrong phrase or an
                unknown/expired token
        """
        now = self.clock()
        stored = self.voting.db.get_item(self.voting.CONFIG_TABLE, {"config_id": RESET_TOKEN_KEY})

        if phrase != RESET_PHRASE or not stored:
            raise AdmissionError(ErrorCode.RESET_NOT_CONFIRMED)
        if not secrets.compare_digest(str(stored["reset_token"]), reset_token):
            raise AdmissionError(ErrorCode.RESET_NOT_CONFIRMED)
        if dt.datetime.fromisoformat(stored["expires_at"]) <= now:
            raise AdmissionError(ErrorCode.RESET_NOT_CONFIRMED, details={"reason": "token expired"})

        self.voting.db.delete_item(self.voting.CONFIG_TABLE, {"config_id": RESET_TOKEN_KEY})

        deleted = self.rsvps.delete_all()
        deleted["scans"] = self.scans.delete_all()
        deleted["guests_reset"] = self.directory.reset_all()
        self.stock.reset_defaults()

        logger.warning("Factory reset completed: %s", deleted)
        return deleted
