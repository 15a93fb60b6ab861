"""Admission session endpoints.

Each guest screen maps to one call; the session holds the current step:

- POST /sessions                     open a session (UNVERIFIED)
- POST /sessions/{id}/verify         phone check, routes by vote and deadline
- POST /sessions/{id}/vote           venue vote while voting is open
- POST /sessions/{id}/refresh        pick up a closed vote
- POST /sessions/{id}/tier           choose a tier with stock
- POST /sessions/{id}/game/complete  report the mini-game score
- POST /sessions/{id}/game/abandon   back to tier selection
- POST /sessions/{id}/claim          claim one unit of stock with the game pass
- POST /sessions/{id}/issue          companions and ticket issuance

Every response is the session view. Errors use the standard error body.
"""

from fastapi import APIRouter, Depends
from starlette.status import HTTP_201_CREATED

from lumina.api.dependencies import get_admission_service
from lumina.api.models.sessions import (
    ClaimRequest,
    GameResultRequest,
    IssueRequest,
    TierSelectionRequest,
    VerifyRequest,
    VoteRequest,
)
from lumina.models import AdmissionView
from lumina.services.admission import AdmissionService

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.post(
    "",
    summary="Start admission session",
    response_model=AdmissionView,
    status_code=HTTP_201_CREATED,
)
async def start_session(
    service: AdmissionService = Depends(get_admission_service),
) -> AdmissionView:
    return service.start_session()


@router.get(
    "/{session_id}",
    summary="Get session view",
    response_model=AdmissionView,
    responses={404: {"description": "Session not found or expired"}},
)
async def get_session(
    session_id: str,
    service: AdmissionService = Depends(get_admission_service),
) -> AdmissionView:
    return service.view(session_id)


@router.post(
    "/{session_id}/verify",
    summary="Verify phone number",
    description="""
Match a phone number against the guest list.

**Notes:**
- Malformed numbers are rejected without counting as an attempt
- Five misses in a row lock the session for five minutes (429)
- A match records the guest's entry
""",
    response_model=AdmissionView,
    responses={
        400: {"description": "Malformed phone number"},
        404: {"description": "Phone not on the guest list"},
        409: {"description": "Session already verified"},
        429: {"description": "Too many failed attempts"},
    },
)
async def verify(
    session_id: str,
    body: VerifyRequest,
    service: AdmissionService = Depends(get_admission_service),
) -> AdmissionView:
    return service.verify(session_id, body.phone)


@router.post(
    "/{session_id}/vote",
    summary="Vote for a venue",
    response_model=AdmissionView,
    responses={
        404: {"description": "Venue not found"},
        409: {"description": "Voting closed or already voted"},
    },
)
async def vote(
    session_id: str,
    body: VoteRequest,
    service: AdmissionService = Depends(get_admission_service),
) -> AdmissionView:
    return service.vote(session_id, body.venue_id, body.registrant())


@router.post(
    "/{session_id}/refresh",
    summary="Re-evaluate session",
    response_model=AdmissionView,
)
async def refresh(
    session_id: str,
    service: AdmissionService = Depends(get_admission_service),
) -> AdmissionView:
    return service.refresh(session_id)


@router.post(
    "/{session_id}/tier",
    summary="Select ticket tier",
    response_model=AdmissionView,
    responses={
        404: {"description": "Tier not found"},
        409: {"description": "Tier sold out or wrong step"},
    },
)
async def select_tier(
    session_id: str,
    body: TierSelectionRequest,
    service: AdmissionService = Depends(get_admission_service),
) -> AdmissionView:
    return service.select_tier(session_id, body.tier_id)


@router.post(
    "/{session_id}/game/complete",
    summary="Report mini-game result",
    description="""
Report the mini-game score. A score reaching the tier's target count returns
a single-use `game_pass` required by the claim call.
""",
    response_model=AdmissionView,
    responses={400: {"description": "Score below the tier requirement"}},
)
async def complete_game(
    session_id: str,
    body: GameResultRequest,
    service: AdmissionService = Depends(get_admission_service),
) -> AdmissionView:
    return service.complete_game(session_id, body.score)


@router.post(
    "/{session_id}/game/abandon",
    summary="Abandon mini-game",
    response_model=AdmissionView,
)
async def abandon_game(
    session_id: str,
    service: AdmissionService = Depends(get_admission_service),
) -> AdmissionView:
    return service.abandon_game(session_id)


@router.post(
    "/{session_id}/claim",
    summary="Claim ticket stock",
    response_model=AdmissionView,
    responses={
        403: {"description": "Missing or invalid game pass"},
        409: {"description": "Tier exhausted; session is back at tier selection"},
    },
)
async def claim(
    session_id: str,
    body: ClaimRequest,
    service: AdmissionService = Depends(get_admission_service),
) -> AdmissionView:
    return service.claim(session_id, body.game_pass)


@router.post(
    "/{session_id}/issue",
    summary="Issue tickets",
    response_model=AdmissionView,
    responses={400: {"description": "Invalid companion count or identity"}},
)
async def issue(
    session_id: str,
    body: IssueRequest,
    service: AdmissionService = Depends(get_admission_service),
) -> AdmissionView:
    return service.issue(session_id, body.guest_count, body.registrant())
