"""Phone-based identity verification with per-session rate limiting.

A session may miss the guest directory MAX_FAILED_ATTEMPTS times in a row;
the next miss locks it for COOLDOWN. While locked every request is rejected,
valid or not. Malformed phone numbers never count as an attempt.
"""

import datetime as dt
from typing import TYPE_CHECKING

from lumina.models import AdmissionError, AdmissionSession, ErrorCode, GuestEntry
from lumina.models.guest import is_valid_phone
from lumina.utils.logging import get_logger

if TYPE_CHECKING:
    from .directory import GuestDirectoryService

logger = get_logger(__name__)

MAX_FAILED_ATTEMPTS = 5
COOLDOWN = dt.timedelta(minutes=5)


def _as_utc(value: dt.datetime) -> dt.datetime:
    return value if value.tzinfo else value.replace(tzinfo=dt.UTC)


class VerificationService:
    """Matches a typed phone number against the guest directory."""

    def __init__(self, directory: "GuestDirectoryService") -> None:
        self.directory = directory

    def check_cooldown(self, session: AdmissionSession, now: dt.datetime) -> None:
        """Reject a locked session, or clear an expired lock.

        Raises:
            AdmissionError: RATE_LIMITED while the cooldown is running
        """
        if session.locked_until is None:
            return

        locked_until = _as_utc(session.locked_until)
        if now < locked_until:
            remaining = int((locked_until - now).total_seconds()) + 1
            raise AdmissionError(
                ErrorCode.RATE_LIMITED,
                details={
                    "locked_until": locked_until.isoformat(),
                    "retry_after_seconds": str(remaining),
                },
            )

        session.locked_until = None
        session.failed_attempts = 0

    def verify(
        self,
        session: AdmissionSession,
        phone: str,
        now: dt.datetime,
    ) -> GuestEntry:
        """Verify a phone number for a session.

        Mutates the session's rate-limit counters; the caller persists them
        whether or not this raises.

        Args:
            session: Admission session making the attempt
            phone: Phone number as typed
            now: Current time (UTC)

        Returns:
            The matching guest

        Raises:
            AdmissionError: RATE_LIMITED, VALIDATION_ERROR or GUEST_NOT_FOUND
        """
        self.check_cooldown(session, now)

        phone = phone.strip()
        if not is_valid_phone(phone):
            raise AdmissionError(
                ErrorCode.VALIDATION_ERROR,
                details={"phone": "must be 9 digits starting with 9"},
            )

        guest = self.directory.find_by_phone(phone)
        if guest is None:
            session.failed_attempts += 1
            remaining = max(0, MAX_FAILED_ATTEMPTS - session.failed_attempts)
            if session.failed_attempts >= MAX_FAILED_ATTEMPTS:
                session.locked_until = now + COOLDOWN
                logger.warning(
                    "Verification locked for session %s until %s",
                    session.session_id,
                    session.locked_until.isoformat(),
                )
            raise AdmissionError(
                ErrorCode.GUEST_NOT_FOUND,
                details={"remaining_attempts": str(remaining)},
            )

        session.failed_attempts = 0
        session.locked_until = None
        return guest
