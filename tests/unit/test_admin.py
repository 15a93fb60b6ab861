"""Unit tests for admin dashboard stats, config save and factory reset."""

import datetime as dt

import pytest

from lumina.models import AdmissionError, ErrorCode, GuestCreate, Registrant
from lumina.services.admin import RESET_PHRASE
from lumina.services.stock import DEFAULT_TIER_STOCK

CARLOS_ID = "11111111-1111-1111-1111-111111111111"
MARIA_ID = "22222222-2222-2222-2222-222222222222"
ALONSO_ID = "33333333-3333-3333-3333-333333333333"


def registrant(name: str) -> Registrant:
    return Registrant(first_name=name, last_name="Test", email=f"{name.lower()}@example.com")


@pytest.fixture
def with_votes(seeded, clock):
    """Carlos and María vote pub, Alonso votes club; Carlos holds two tickets."""
    now = clock()
    seeded.rsvps.create_vote(CARLOS_ID, registrant("Carlos"), "pub", now)
    seeded.rsvps.create_vote(MARIA_ID, registrant("Maria"), "pub", now)
    seeded.rsvps.create_vote(ALONSO_ID, registrant("Alonso"), "club", now)
    seeded.rsvps.record_issuance(
        CARLOS_ID,
        registrant("Carlos"),
        "standard",
        1,
        ["LUM-CARL-AAAA1111-0", "LUM-CARL-BBBB2222-1"],
        now,
    )
    seeded.directory.mark_used(CARLOS_ID, now)
    return seeded


class TestStats:
    """Tests for AdminService.stats."""

    def test_empty_event(self, seeded) -> None:
        stats = seeded.admin.stats()

        assert stats.total_submissions == 0
        assert stats.guests_registered == 3
        assert stats.leading_venue_id is None
        assert all(v.percentage == 0.0 for v in stats.votes)
        assert stats.voting_open

    def test_vote_breakdown(self, with_votes) -> None:
        stats = with_votes.admin.stats()
        votes = {v.venue_id: v for v in stats.votes}

        assert stats.total_submissions == 3
        assert stats.total_pax == 4
        assert stats.guests_entered == 1
        assert votes["pub"].votes == 2
        assert votes["pub"].percentage == 66.7
        assert votes["club"].percentage == 33.3
        assert votes["lounge"].votes == 0
        assert stats.leading_venue_id == "pub"
        assert stats.tickets_issued == 2

    def test_percentage_of_all_submissions(self, with_votes, clock) -> None:
        # Given: a fourth guest got tickets without ever voting
        lucia = with_votes.directory.add_guest(GuestCreate(name="Lucía", phone="923456789"))
        with_votes.rsvps.record_issuance(
            lucia.guest_id, registrant("Lucia"), "emerald", 0, ["LUM-LUCI-CCCC3333-0"], clock()
        )

        # When: the dashboard is computed
        stats = with_votes.admin.stats()

        # Then: her submission counts towards every venue's share
        votes = {v.venue_id: v for v in stats.votes}
        assert stats.total_submissions == 4
        assert votes["pub"].percentage == 50.0
        assert votes["club"].percentage == 25.0

    def test_leader_ignores_forced_winner(self, with_votes, clock) -> None:
        config = with_votes.voting.get_config()
        config.winning_venue_id = "lounge"
        with_votes.voting.save_config(config, now=clock())

        stats = with_votes.admin.stats()

        assert stats.leading_venue_id == "pub"
        assert stats.winning_venue_id == "lounge"
        assert not stats.voting_open

    def test_tier_stock_and_scans(self, with_votes) -> None:
        with_votes.scans.scan("LUM-CARL-AAAA1111-0")

        stats = with_votes.admin.stats()

        assert {t.tier_id: t.stock for t in stats.tiers} == DEFAULT_TIER_STOCK
        assert stats.scans_recorded == 1


class TestSaveConfig:
    def test_capacity_recomputes_stock(self, seeded) -> None:
        config = seeded.voting.get_config()
        config.max_capacity = 45

        seeded.admin.save_config(config)

        assert {t.tier_id: t.stock for t in seeded.stock.list_tiers()} == {
            "platinum": 5,
            "emerald": 20,
            "standard": 20,
        }
        assert seeded.voting.get_config().max_capacity == 45


class TestFactoryReset:
    """Tests for the two-step factory reset."""

    def test_reset_wipes_submissions_and_restores_stock(self, with_votes) -> None:
        # Given: votes, tickets, a scan and a claimed unit
        with_votes.scans.scan("LUM-CARL-AAAA1111-0")
        with_votes.stock.claim("platinum")
        token = with_votes.admin.request_reset()

        # When: the reset is confirmed
        deleted = with_votes.admin.confirm_reset(token.reset_token, RESET_PHRASE)

        # Then: everything guest-generated is gone
        assert deleted == {"rsvps": 3, "tickets": 2, "scans": 1, "guests_reset": 3}
        assert with_votes.rsvps.list_all() == []
        assert with_votes.rsvps.find_ticket("LUM-CARL-AAAA1111-0") is None
        assert with_votes.scans.list_scans() == []
        assert with_votes.directory.counts()["entered"] == 0
        assert with_votes.stock.get_tier("platinum").stock == 5
        # Venues and config are kept
        assert len(with_votes.voting.list_venues()) == 3
        assert with_votes.voting.has_config()

    def test_wrong_phrase(self, with_votes) -> None:
        token = with_votes.admin.request_reset()

        with pytest.raises(AdmissionError) as exc_info:
            with_votes.admin.confirm_reset(token.reset_token, "reset")

        assert exc_info.value.code == ErrorCode.RESET_NOT_CONFIRMED
        assert len(with_votes.rsvps.list_all()) == 3

    def test_wrong_token(self, with_votes) -> None:
        with_votes.admin.request_reset()

        with pytest.raises(AdmissionError):
            with_votes.admin.confirm_reset("forged-token", RESET_PHRASE)

    def test_without_request(self, with_votes) -> None:
        with pytest.raises(AdmissionError):
            with_votes.admin.confirm_reset("any-token", RESET_PHRASE)

    def test_expired_token(self, with_votes, clock) -> None:
        token = with_votes.admin.request_reset()
        clock.advance(minutes=2, seconds=1)

        with pytest.raises(AdmissionError) as exc_info:
            with_votes.admin.confirm_reset(token.reset_token, RESET_PHRASE)

        assert exc_info.value.details == {"reason": "token expired"}

    def test_token_is_single_use(self, with_votes) -> None:
        token = with_votes.admin.request_reset()
        with_votes.admin.confirm_reset(token.reset_token, RESET_PHRASE)

        with pytest.raises(AdmissionError):
            with_votes.admin.confirm_reset(token.reset_token, RESET_PHRASE)

    def test_new_request_replaces_old_token(self, with_votes) -> None:
        old = with_votes.admin.request_reset()
        new = with_votes.admin.request_reset()

        with pytest.raises(AdmissionError):
            with_votes.admin.confirm_reset(old.reset_token, RESET_PHRASE)
        assert with_votes.admin.confirm_reset(new.reset_token, RESET_PHRASE)["rsvps"] == 3
