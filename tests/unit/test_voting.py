"""Unit tests for event config, venues and the venue vote."""

import datetime as dt
from unittest.mock import MagicMock

import pytest

from lumina.models import (
    EventConfig,
    FeedEventType,
    RsvpData,
    VenueCreate,
    VenueOption,
    VenueUpdate,
)
from lumina.services.voting import VotingService, tally, winning_venue

NOW = dt.datetime(2026, 2, 20, 21, 0, tzinfo=dt.UTC)

VENUES = [
    VenueOption(venue_id="lounge", name="Skyline Rooftop", position=0),
    VenueOption(venue_id="club", name="Neon Pulse Club", position=1),
    VenueOption(venue_id="pub", name="The Urban Pub", position=2),
]


def make_rsvp(guest_id: str, venue_id: str | None) -> RsvpData:
    return RsvpData(
        guest_id=guest_id,
        rsvp_id=f"rsvp-{guest_id}",
        first_name="Guest",
        last_name=guest_id,
        email=f"{guest_id}@example.com",
        selected_venue_id=venue_id,
        created_at=NOW,
        updated_at=NOW,
    )


class TestTally:
    """Tests for vote counting."""

    def test_counts_per_venue(self) -> None:
        rsvps = [make_rsvp("a", "club"), make_rsvp("b", "club"), make_rsvp("c", "pub")]

        assert tally(rsvps) == {"club": 2, "pub": 1}

    def test_submissions_without_vote_are_skipped(self) -> None:
        assert tally([make_rsvp("a", None)]) == {}


class TestWinningVenue:
    """Tests for winner selection."""

    def test_most_votes_wins(self) -> None:
        rsvps = [make_rsvp("a", "pub"), make_rsvp("b", "pub"), make_rsvp("c", "club")]

        winner = winning_venue(EventConfig(), VENUES, rsvps)

        assert winner is not None
        assert winner.venue_id == "pub"

    def test_tie_goes_to_oldest_venue(self) -> None:
        rsvps = [make_rsvp("a", "pub"), make_rsvp("b", "club")]

        winner = winning_venue(EventConfig(), VENUES, rsvps)

        assert winner is not None
        assert winner.venue_id == "club"

    def test_no_votes_picks_first_venue(self) -> None:
        winner = winning_venue(EventConfig(), VENUES, [])

        assert winner is not None
        assert winner.venue_id == "lounge"

    def test_forced_winner_overrides_votes(self) -> None:
        rsvps = [make_rsvp("a", "lounge"), make_rsvp("b", "lounge")]
        config = EventConfig(winning_venue_id="club")

        winner = winning_venue(config, VENUES, rsvps)

        assert winner is not None
        assert winner.venue_id == "club"

    def test_forced_winner_that_no_longer_exists_falls_back_to_votes(self) -> None:
        config = EventConfig(winning_venue_id="deleted-venue")

        winner = winning_venue(config, VENUES, [make_rsvp("a", "pub")])

        assert winner is not None
        assert winner.venue_id == "pub"

    def test_no_venues(self) -> None:
        assert winning_venue(EventConfig(), [], []) is None


class TestVotingWindow:
    """Tests for EventConfig.is_voting_open."""

    def test_open_before_deadline(self) -> None:
        config = EventConfig(voting_deadline=NOW + dt.timedelta(minutes=1))

        assert config.is_voting_open(NOW)

    def test_closed_at_deadline(self) -> None:
        assert not EventConfig(voting_deadline=NOW).is_voting_open(NOW)

    def test_forced_winner_closes_voting(self) -> None:
        config = EventConfig(
            voting_deadline=NOW + dt.timedelta(days=1),
            winning_venue_id="club",
        )

        assert not config.is_voting_open(NOW)

    def test_naive_deadline_is_treated_as_utc(self) -> None:
        config = EventConfig(voting_deadline=dt.datetime(2026, 2, 21, 0, 0))

        assert config.is_voting_open(NOW)


class TestVotingService:
    """Tests for VotingService against moto."""

    def test_config_defaults_when_absent(self, services) -> None:
        config = services.voting.get_config()

        assert config.max_capacity == 50
        assert not services.voting.has_config()

    def test_save_config_round_trip(self, services) -> None:
        config = EventConfig(
            voting_deadline=NOW + dt.timedelta(days=2),
            max_capacity=80,
            winning_venue_id="club",
        )

        services.voting.save_config(config, now=NOW)
        stored = services.voting.get_config()

        assert stored.max_capacity == 80
        assert stored.winning_venue_id == "club"
        assert stored.voting_deadline == NOW + dt.timedelta(days=2)
        assert stored.updated_at == NOW

    def test_save_config_publishes_public_snapshot(self) -> None:
        db = MagicMock()
        feed = MagicMock()

        VotingService(db, feed).save_config(EventConfig(guest_passcode="9999"), now=NOW)

        event_type, data = feed.publish.call_args.args
        assert event_type == FeedEventType.CONFIG
        assert "guest_passcode" not in data
        assert "updated_at" not in data

    def test_create_venue_appends_position(self, seeded) -> None:
        venue = seeded.voting.create_venue(VenueCreate(name="Garden Terrace"))

        assert venue is not None
        assert venue.position == 3
        assert seeded.voting.list_venues()[-1].venue_id == venue.venue_id

    def test_create_venue_with_taken_id(self, seeded) -> None:
        assert seeded.voting.create_venue(VenueCreate(venue_id="club", name="Other")) is None
        assert seeded.voting.get_venue("club").name == "Neon Pulse Club"

    def test_update_venue_changes_only_sent_fields(self, seeded) -> None:
        venue = seeded.voting.update_venue("pub", VenueUpdate(min_spend="S/ 50"))

        assert venue is not None
        assert venue.min_spend == "S/ 50"
        assert venue.name == "The Urban Pub"
        assert venue.position == 2

    def test_update_venue_can_clear_maps_url(self, seeded) -> None:
        venue = seeded.voting.update_venue("pub", VenueUpdate(maps_url=None))

        assert venue is not None
        assert venue.maps_url is None

    def test_update_missing_venue(self, seeded) -> None:
        assert seeded.voting.update_venue("nowhere", VenueUpdate(name="X")) is None

    def test_delete_venue(self, seeded) -> None:
        assert seeded.voting.delete_venue("pub")
        assert not seeded.voting.delete_venue("pub")
        assert [v.venue_id for v in seeded.voting.list_venues()] == ["lounge", "club"]

    @pytest.mark.parametrize("venue_id", ["lounge", "club", "pub"])
    def test_seeded_venues_exist(self, seeded, venue_id: str) -> None:
        assert seeded.voting.get_venue(venue_id) is not None
