"""Guest admission state machine.

Drives one visitor from phone verification to issued tickets:

    UNVERIFIED -> VERIFIED -> VOTED                      (voting open)
    UNVERIFIED -> TIER_SELECTING -> CLAIMING -> ISSUING -> ISSUED
                                                         (voting closed)

A guest whose tickets were already issued goes straight to ISSUED, and a
claim is reserved on the guest row before stock is taken, so the stock claim
runs at most once per guest even across parallel sessions. Claiming requires
a single-use game pass handed out by complete_game.
"""

import datetime as dt
import secrets
import uuid
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from botocore.exceptions import BotoCoreError, ClientError

from lumina.models import (
    MAX_COMPANIONS,
    AdmissionError,
    AdmissionSession,
    AdmissionState,
    AdmissionView,
    ErrorCode,
    Registrant,
    RsvpData,
    game_requirement_for,
)
from lumina.models.session import SESSION_TTL_SECONDS
from lumina.utils.logging import get_logger, log_admission_event

from .tickets import generate_ticket_ids
from .voting import winning_venue

if TYPE_CHECKING:
    from .directory import GuestDirectoryService
    from .dynamodb import DynamoDBService
    from .rsvps import RsvpService
    from .stock import StockService
    from .verification import VerificationService
    from .voting import VotingService

logger = get_logger(__name__)

Clock = Callable[[], dt.datetime]

_TIER_STATES = (AdmissionState.TIER_SELECTING, AdmissionState.CLAIMING)

ISSUE_ATTEMPTS = 3


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


class AdmissionService:
    """Service orchestrating verification, voting, claiming and issuance."""

    TABLE = "admission-sessions"

    def __init__(
        self,
        db: "DynamoDBService",
        directory: "GuestDirectoryService",
        verification: "VerificationService",
        voting: "VotingService",
        stock: "StockService",
        rsvps: "RsvpService",
        clock: Clock | None = None,
    ) -> None:
        """Initialize admission service.

        Args:
            db: DynamoDB service instance
            directory: Guest directory
            verification: Phone verification with rate limiting
            voting: Event config and venues
            stock: Tier stock and the claim procedure
            rsvps: Submission store
            clock: Returns the current UTC time (overridable in tests)
        """
        self.db = db
        self.directory = directory
        self.verification = verification
        self.voting = voting
        self.stock = stock
        self.rsvps = rsvps
        self.clock = clock or utc_now

    # Session persistence

    def start_session(self) -> AdmissionView:
        """Open a new session in UNVERIFIED."""
        now = self.clock()
        session = AdmissionSession(
            session_id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            expires_at=int(now.timestamp()) + SESSION_TTL_SECONDS,
        )
        self.db.put_item(self.TABLE, session.model_dump(mode="json"))
        log_admission_event(
            logger, "start", session_id=session.session_id, state=session.state.value
        )
        return self._build_view(session, now)

    def get_session(self, session_id: str) -> AdmissionSession:
        """Load a live session.

        Raises:
            AdmissionError: SESSION_NOT_FOUND if unknown or expired
        """
        item = self.db.get_item(self.TABLE, {"session_id": session_id})
        if not item:
            raise AdmissionError(ErrorCode.SESSION_NOT_FOUND, details={"session_id": session_id})
        session = AdmissionSession.model_validate(item)
        # TTL deletion is lazy, expired rows can still be read
        if session.expires_at <= int(self.clock().timestamp()):
            raise AdmissionError(ErrorCode.SESSION_NOT_FOUND, details={"session_id": session_id})
        return session

    def _save(self, session: AdmissionSession, now: dt.datetime) -> None:
        session.updated_at = now
        self.db.put_item(self.TABLE, session.model_dump(mode="json"))

    def _require(self, session: AdmissionSession, *states: AdmissionState) -> None:
        if session.state not in states:
            raise AdmissionError(
                ErrorCode.INVALID_TRANSITION,
                details={
                    "state": session.state.value,
                    "expected": ",".join(s.value for s in states),
                },
            )

    def _guest_id(self, session: AdmissionSession) -> str:
        if session.guest_id is None:
            raise AdmissionError(
                ErrorCode.INVALID_TRANSITION, details={"state": session.state.value}
            )
        return session.guest_id

    # Transitions

    def verify(self, session_id: str, phone: str) -> AdmissionView:
        """UNVERIFIED -> VERIFIED | VOTED | TIER_SELECTING | ISSUED.

        Records the guest's entry (used=true) and routes on the guest's
        existing submission and whether voting is still open.
        """
        now = self.clock()
        session = self.get_session(session_id)
        self._require(session, AdmissionState.UNVERIFIED)

        try:
            guest = self.verification.verify(session, phone, now)
        except AdmissionError as e:
            self._save(session, now)
            log_admission_event(
                logger,
                "verify",
                session_id=session_id,
                state=session.state.value,
                result="rejected",
                error=e.code.value,
                failed_attempts=session.failed_attempts,
            )
            raise

        self.directory.mark_used(guest.guest_id, now)
        session.guest_id = guest.guest_id
        session.state = self._route(guest.guest_id, now)
        self._save(session, now)

        log_admission_event(
            logger,
            "verify",
            session_id=session_id,
            guest_id=guest.guest_id,
            state=session.state.value,
            result="success",
        )
        return self._build_view(session, now)

    def _route(self, guest_id: str, now: dt.datetime) -> AdmissionState:
        rsvp = self.rsvps.get(guest_id)
        if rsvp is not None and rsvp.has_tickets:
            return AdmissionState.ISSUED
        if self.voting.get_config().is_voting_open(now):
            return AdmissionState.VOTED if rsvp is not None else AdmissionState.VERIFIED
        return AdmissionState.TIER_SELECTING

    def vote(self, session_id: str, venue_id: str, registrant: Registrant) -> AdmissionView:
        """VERIFIED -> VOTED: record the guest's single venue vote."""
        now = self.clock()
        session = self.get_session(session_id)
        self._require(session, AdmissionState.VERIFIED)
        guest_id = self._guest_id(session)

        if not self.voting.get_config().is_voting_open(now):
            raise AdmissionError(ErrorCode.VOTING_CLOSED)
        if self.voting.get_venue(venue_id) is None:
            raise AdmissionError(ErrorCode.VENUE_NOT_FOUND, details={"venue_id": venue_id})

        rsvp = self.rsvps.create_vote(guest_id, registrant, venue_id, now)
        session.state = AdmissionState.VOTED
        self._save(session, now)

        if rsvp is None:
            log_admission_event(
                logger,
                "vote",
                session_id=session_id,
                guest_id=guest_id,
                state=session.state.value,
                result="rejected",
                error=ErrorCode.ALREADY_VOTED.value,
            )
            raise AdmissionError(ErrorCode.ALREADY_VOTED)

        log_admission_event(
            logger,
            "vote",
            session_id=session_id,
            guest_id=guest_id,
            state=session.state.value,
            result="success",
            venue_id=venue_id,
        )
        return self._build_view(session, now)

    def refresh(self, session_id: str) -> AdmissionView:
        """Re-evaluate a waiting session; VERIFIED/VOTED -> TIER_SELECTING once voting closes."""
        now = self.clock()
        session = self.get_session(session_id)

        if session.state in (AdmissionState.VERIFIED, AdmissionState.VOTED):
            next_state = self._route(self._guest_id(session), now)
            if next_state in (AdmissionState.TIER_SELECTING, AdmissionState.ISSUED):
                session.state = next_state
                self._save(session, now)
                log_admission_event(
                    logger,
                    "refresh",
                    session_id=session_id,
                    guest_id=session.guest_id,
                    state=session.state.value,
                    result="success",
                )
        return self._build_view(session, now)

    def select_tier(self, session_id: str, tier_id: str) -> AdmissionView:
        """TIER_SELECTING -> CLAIMING for a tier that still has stock."""
        now = self.clock()
        session = self.get_session(session_id)
        self._require(session, AdmissionState.TIER_SELECTING)

        if self._already_issued(session, now):
            return self._build_view(session, now)

        tier = self.stock.get_tier(tier_id)
        if tier is None:
            raise AdmissionError(ErrorCode.TIER_NOT_FOUND, details={"tier_id": tier_id})
        if tier.stock <= 0:
            raise AdmissionError(ErrorCode.STOCK_EXHAUSTED, details={"tier_id": tier_id})

        session.selected_tier_id = tier_id
        session.game_pass = None
        session.state = AdmissionState.CLAIMING
        self._save(session, now)
        log_admission_event(
            logger,
            "select_tier",
            session_id=session_id,
            guest_id=session.guest_id,
            state=session.state.value,
            tier_id=tier_id,
        )
        return self._build_view(session, now)

    def complete_game(self, session_id: str, score: int) -> AdmissionView:
        """Report the mini-game result; a passing score yields a game pass."""
        now = self.clock()
        session = self.get_session(session_id)
        self._require(session, AdmissionState.CLAIMING)

        requirement = game_requirement_for(session.selected_tier_id or "")
        if score < requirement.targets_needed:
            raise AdmissionError(
                ErrorCode.GAME_NOT_PASSED,
                details={
                    "score": str(score),
                    "targets_needed": str(requirement.targets_needed),
                },
            )

        session.game_pass = secrets.token_urlsafe(16)
        self._save(session, now)
        log_admission_event(
            logger,
            "complete_game",
            session_id=session_id,
            guest_id=session.guest_id,
            state=session.state.value,
            score=score,
        )
        view = self._build_view(session, now)
        view.game_pass = session.game_pass
        return view

    def abandon_game(self, session_id: str) -> AdmissionView:
        """CLAIMING -> TIER_SELECTING; nothing was claimed so nothing is undone."""
        now = self.clock()
        session = self.get_session(session_id)
        self._require(session, AdmissionState.CLAIMING)

        session.selected_tier_id = None
        session.game_pass = None
        session.state = AdmissionState.TIER_SELECTING
        self._save(session, now)
        log_admission_event(
            logger,
            "abandon_game",
            session_id=session_id,
            guest_id=session.guest_id,
            state=session.state.value,
        )
        return self._build_view(session, now)

    def claim(self, session_id: str, game_pass: str) -> AdmissionView:
        """CLAIMING -> ISSUING, or back to TIER_SELECTING when the tier ran out.

        Raises:
            AdmissionError: GAME_PASS_INVALID without a valid pass,
                STOCK_EXHAUSTED when the claim procedure refuses
        """
        now = self.clock()
        session = self.get_session(session_id)
        self._require(session, AdmissionState.CLAIMING)

        if not session.game_pass or not secrets.compare_digest(session.game_pass, game_pass):
            raise AdmissionError(ErrorCode.GAME_PASS_INVALID)

        if self._already_issued(session, now):
            return self._build_view(session, now)

        guest_id = self._guest_id(session)
        if not self.directory.reserve_claim(guest_id, session_id):
            return self._resume_claim(session, now)

        tier_id = session.selected_tier_id or ""
        session.game_pass = None
        try:
            new_stock = self.stock.claim(tier_id, session_id=session_id)
        except (ClientError, BotoCoreError):
            self.directory.release_claim(guest_id, session_id)
            raise

        if new_stock < 0:
            self.directory.release_claim(guest_id, session_id)
            session.selected_tier_id = None
            session.state = AdmissionState.TIER_SELECTING
            self._save(session, now)
            available = [t.tier_id for t in self.stock.list_tiers() if t.stock > 0]
            log_admission_event(
                logger,
                "claim",
                session_id=session_id,
                guest_id=session.guest_id,
                state=session.state.value,
                result="rejected",
                error=ErrorCode.STOCK_EXHAUSTED.value,
                tier_id=tier_id,
            )
            raise AdmissionError(
                ErrorCode.STOCK_EXHAUSTED,
                details={"tier_id": tier_id, "available_tiers": ",".join(available)},
            )

        self.directory.confirm_claim(guest_id, session_id, tier_id)
        session.state = AdmissionState.ISSUING
        self._save(session, now)
        self.stock.publish_tiers()
        log_admission_event(
            logger,
            "claim",
            session_id=session_id,
            guest_id=session.guest_id,
            state=session.state.value,
            result="success",
            tier_id=tier_id,
            new_stock=new_stock,
        )
        return self._build_view(session, now)

    def issue(
        self,
        session_id: str,
        guest_count: int,
        registrant: Registrant | None = None,
    ) -> AdmissionView:
        """ISSUING -> ISSUED: generate tickets and attach them to the submission.

        The registrant's identity comes from the request or, when omitted,
        from the guest's vote.
        """
        now = self.clock()
        session = self.get_session(session_id)
        self._require(session, AdmissionState.ISSUING)
        guest_id = self._guest_id(session)

        if not 0 <= guest_count <= MAX_COMPANIONS:
            raise AdmissionError(
                ErrorCode.VALIDATION_ERROR,
                details={"guest_count": f"must be between 0 and {MAX_COMPANIONS}"},
            )

        existing = self.rsvps.get(guest_id)
        if existing is not None and existing.has_tickets:
            self._mark_issued(session, now)
            return self._build_view(session, now)

        identity = registrant or self._registrant_from(existing)
        if identity is None:
            raise AdmissionError(
                ErrorCode.VALIDATION_ERROR,
                details={"registrant": "first_name, last_name and email are required"},
            )

        tier_id = session.selected_tier_id or ""
        rsvp: RsvpData | None = None
        ticket_ids: list[str] = []
        issued_elsewhere = False
        for _attempt in range(ISSUE_ATTEMPTS):
            ticket_ids = generate_ticket_ids(identity.first_name, guest_count)
            rsvp = self.rsvps.record_issuance(
                guest_id, identity, tier_id, guest_count, ticket_ids, now
            )
            if rsvp is not None:
                break
            current = self.rsvps.get(guest_id)
            if current is not None and current.has_tickets:
                issued_elsewhere = True
                break
            logger.warning("Ticket ID collision for %s, generating new IDs", guest_id)
        if rsvp is None and not issued_elsewhere:
            raise AdmissionError(
                ErrorCode.BACKEND_ERROR, details={"reason": "ticket IDs could not be allocated"}
            )

        self._mark_issued(session, now)
        log_admission_event(
            logger,
            "issue",
            session_id=session_id,
            guest_id=guest_id,
            state=session.state.value,
            result="success" if rsvp else "rejected",
            tier_id=tier_id,
            tickets=len(ticket_ids) if rsvp else 0,
        )
        return self._build_view(session, now)

    def view(self, session_id: str) -> AdmissionView:
        """Current step of a session."""
        now = self.clock()
        return self._build_view(self.get_session(session_id), now)

    # Helpers

    def _already_issued(self, session: AdmissionSession, now: dt.datetime) -> bool:
        rsvp = self.rsvps.get(self._guest_id(session))
        if rsvp is None or not rsvp.has_tickets:
            return False
        self._mark_issued(session, now)
        return True

    def _resume_claim(self, session: AdmissionSession, now: dt.datetime) -> AdmissionView:
        """Continue on the unit another session of the same guest already took."""
        guest_id = self._guest_id(session)
        claim_session_id, claimed_tier_id = self.directory.get_claim(guest_id)
        if claimed_tier_id is None:
            raise AdmissionError(
                ErrorCode.INVALID_TRANSITION,
                details={"state": session.state.value, "claim_session_id": claim_session_id or ""},
            )

        session.game_pass = None
        session.selected_tier_id = claimed_tier_id
        session.state = AdmissionState.ISSUING
        self._save(session, now)
        log_admission_event(
            logger,
            "claim",
            session_id=session.session_id,
            guest_id=guest_id,
            state=session.state.value,
            result="resumed",
            tier_id=claimed_tier_id,
            claim_session_id=claim_session_id,
        )
        return self._build_view(session, now)

    def _mark_issued(self, session: AdmissionSession, now: dt.datetime) -> None:
        session.state = AdmissionState.ISSUED
        session.game_pass = None
        self._save(session, now)

    def _registrant_from(self, rsvp: RsvpData | None) -> Registrant | None:
        if rsvp is None:
            return None
        return Registrant(
            first_name=rsvp.first_name,
            last_name=rsvp.last_name,
            email=rsvp.email,
        )

    def _build_view(self, session: AdmissionSession, now: dt.datetime) -> AdmissionView:
        config = self.voting.get_config()
        voting_open = config.is_voting_open(now)
        venues = self.voting.list_venues()

        view_data: dict[str, Any] = {
            "session_id": session.session_id,
            "state": session.state,
            "voting_open": voting_open,
            "voting_deadline": config.voting_deadline,
            "venues": venues,
            "selected_tier_id": session.selected_tier_id,
            "failed_attempts": session.failed_attempts,
            "locked_until": session.locked_until,
        }
        if not voting_open:
            view_data["winning_venue"] = winning_venue(config, venues, self.rsvps.list_all())
        if session.guest_id:
            view_data["guest"] = self.directory.get_guest(session.guest_id)
            view_data["rsvp"] = self.rsvps.get(session.guest_id)
        if session.state in _TIER_STATES:
            view_data["tiers"] = self.stock.list_tier_views()

        return AdmissionView(**view_data)
