"""Public event endpoints.

Provides REST endpoints for:
- Event details (date, time, voting status, confirmed venue)
- Venue options
- Ticket tiers with their mini-game requirement
- Ticket QR codes
"""

import datetime as dt

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from starlette.status import HTTP_404_NOT_FOUND

from lumina.api.dependencies import get_rsvp_service, get_stock_service, get_voting_service
from lumina.api.models.sessions import EventResponse
from lumina.models import PublicEventConfig, TierView, VenueOption
from lumina.services.rsvps import RsvpService
from lumina.services.stock import StockService
from lumina.services.tickets import render_qr
from lumina.services.voting import VotingService, winning_venue

router = APIRouter(tags=["event"])


@router.get(
    "/event",
    summary="Get event details",
    description="""
Public event configuration.

Once voting has closed (deadline passed or winner forced by the admin) the
confirmed venue is included.
""",
    response_model=EventResponse,
)
async def get_event(
    voting: VotingService = Depends(get_voting_service),
    rsvps: RsvpService = Depends(get_rsvp_service),
) -> EventResponse:
    config = voting.get_config()
    voting_open = config.is_voting_open(dt.datetime.now(dt.UTC))
    winner = None
    if not voting_open:
        winner = winning_venue(config, voting.list_venues(), rsvps.list_all())
    return EventResponse(
        config=PublicEventConfig.from_config(config),
        voting_open=voting_open,
        winning_venue=winner,
    )


@router.get(
    "/venues",
    summary="List venue options",
    response_model=list[VenueOption],
)
async def list_venues(
    voting: VotingService = Depends(get_voting_service),
) -> list[VenueOption]:
    """Venues in creation order."""
    return voting.list_venues()


@router.get(
    "/tiers",
    summary="List ticket tiers",
    response_model=list[TierView],
)
async def list_tiers(
    stock: StockService = Depends(get_stock_service),
) -> list[TierView]:
    """Tiers with live stock and the mini-game each one requires."""
    return stock.list_tier_views()


@router.get(
    "/tickets/{ticket_id}/qr",
    summary="Get ticket QR code",
    response_class=Response,
    responses={
        200: {"content": {"image/png": {}}, "description": "PNG QR code"},
        404: {"description": "Ticket not found"},
    },
)
async def get_ticket_qr(
    ticket_id: str,
    rsvps: RsvpService = Depends(get_rsvp_service),
) -> Response:
    """Render an issued ticket as a PNG QR code."""
    if rsvps.find_ticket(ticket_id) is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Ticket not found")
    return Response(content=render_qr(ticket_id), media_type="image/png")
