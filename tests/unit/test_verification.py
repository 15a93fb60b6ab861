"""Unit tests for phone verification and its rate limit."""

import datetime as dt
from unittest.mock import MagicMock

import pytest

from lumina.models import AdmissionError, AdmissionSession, ErrorCode, GuestEntry
from lumina.services.verification import (
    COOLDOWN,
    MAX_FAILED_ATTEMPTS,
    VerificationService,
)

NOW = dt.datetime(2026, 2, 20, 21, 0, tzinfo=dt.UTC)

CARLOS = GuestEntry(guest_id="guest-1", name="Carlos", phone="987654321")


def make_session(**overrides) -> AdmissionSession:
    data = {
        "session_id": "session-1",
        "created_at": NOW,
        "updated_at": NOW,
        "expires_at": int(NOW.timestamp()) + 3600,
    }
    data.update(overrides)
    return AdmissionSession(**data)


@pytest.fixture
def directory() -> MagicMock:
    mock = MagicMock()
    mock.find_by_phone.side_effect = lambda phone: CARLOS if phone == CARLOS.phone else None
    return mock


@pytest.fixture
def service(directory: MagicMock) -> VerificationService:
    return VerificationService(directory)


class TestVerify:
    """Tests for VerificationService.verify."""

    def test_known_phone_returns_guest(self, service: VerificationService) -> None:
        session = make_session()

        guest = service.verify(session, "987654321", NOW)

        assert guest == CARLOS
        assert session.failed_attempts == 0

    def test_surrounding_whitespace_is_ignored(self, service: VerificationService) -> None:
        guest = service.verify(make_session(), "  987654321 ", NOW)

        assert guest.guest_id == "guest-1"

    @pytest.mark.parametrize("phone", ["12345", "887654321", "98765432a", "9876543210", ""])
    def test_malformed_phone_does_not_count(
        self, service: VerificationService, directory: MagicMock, phone: str
    ) -> None:
        session = make_session()

        with pytest.raises(AdmissionError) as exc_info:
            service.verify(session, phone, NOW)

        assert exc_info.value.code == ErrorCode.VALIDATION_ERROR
        assert session.failed_attempts == 0
        directory.find_by_phone.assert_not_called()

    def test_unknown_phone_counts_a_failure(self, service: VerificationService) -> None:
        session = make_session()

        with pytest.raises(AdmissionError) as exc_info:
            service.verify(session, "900000000", NOW)

        assert exc_info.value.code == ErrorCode.GUEST_NOT_FOUND
        assert exc_info.value.details == {"remaining_attempts": str(MAX_FAILED_ATTEMPTS - 1)}
        assert session.failed_attempts == 1
        assert session.locked_until is None

    def test_success_resets_counter(self, service: VerificationService) -> None:
        session = make_session(failed_attempts=3)

        service.verify(session, "987654321", NOW)

        assert session.failed_attempts == 0


class TestCooldown:
    """Tests for the lock after repeated misses."""

    def test_fifth_miss_locks_session(self, service: VerificationService) -> None:
        # Given: four misses already
        session = make_session(failed_attempts=MAX_FAILED_ATTEMPTS - 1)

        # When: the fifth miss happens
        with pytest.raises(AdmissionError):
            service.verify(session, "900000000", NOW)

        # Then: the session is locked for the cooldown
        assert session.failed_attempts == MAX_FAILED_ATTEMPTS
        assert session.locked_until == NOW + COOLDOWN

    def test_locked_session_rejects_even_valid_phone(
        self, service: VerificationService, directory: MagicMock
    ) -> None:
        session = make_session(failed_attempts=5, locked_until=NOW + dt.timedelta(minutes=3))

        with pytest.raises(AdmissionError) as exc_info:
            service.verify(session, "987654321", NOW)

        assert exc_info.value.code == ErrorCode.RATE_LIMITED
        assert exc_info.value.details is not None
        assert exc_info.value.details["retry_after_seconds"] == "181"
        directory.find_by_phone.assert_not_called()

    def test_expired_lock_resets_counter(self, service: VerificationService) -> None:
        # Given: a lock that ran out a second ago
        session = make_session(failed_attempts=5, locked_until=NOW - dt.timedelta(seconds=1))

        # When: the guest tries again with a valid phone
        guest = service.verify(session, "987654321", NOW)

        # Then: access is granted and the counters are cleared
        assert guest == CARLOS
        assert session.locked_until is None
        assert session.failed_attempts == 0

    def test_miss_after_expired_lock_starts_from_one(self, service: VerificationService) -> None:
        session = make_session(failed_attempts=5, locked_until=NOW - dt.timedelta(seconds=1))

        with pytest.raises(AdmissionError) as exc_info:
            service.verify(session, "900000000", NOW)

        assert exc_info.value.code == ErrorCode.GUEST_NOT_FOUND
        assert session.failed_attempts == 1
        assert session.locked_until is None
