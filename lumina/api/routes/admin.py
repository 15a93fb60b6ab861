"""Admin back-office endpoints.

All routes require HTTP Basic credentials checked against the hashed
credentials in SSM.
"""

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from starlette.status import HTTP_201_CREATED, HTTP_404_NOT_FOUND, HTTP_409_CONFLICT

from lumina.api.dependencies import (
    get_admin_service,
    get_credentials_service,
    get_directory_service,
    get_rsvp_service,
    get_scan_service,
    get_stock_service,
    get_voting_service,
)
from lumina.api.models.admin import (
    CredentialsUpdate,
    ResetConfirmRequest,
    ResetResult,
    ScanRequest,
    StockUpdate,
)
from lumina.api.models.common import SuccessMessage
from lumina.api.security import require_admin
from lumina.models import (
    AdmissionError,
    ErrorCode,
    EventConfig,
    EventStats,
    GuestCreate,
    GuestEntry,
    ResetToken,
    RsvpData,
    ScanResult,
    ScanStatus,
    TicketScan,
    TicketTier,
    VenueCreate,
    VenueOption,
    VenueUpdate,
)
from lumina.services.admin import AdminService
from lumina.services.credentials import AdminCredentialsService
from lumina.services.directory import GuestDirectoryService
from lumina.services.rsvps import RsvpService
from lumina.services.scans import ScanService
from lumina.services.stock import StockService
from lumina.services.tickets import decode_qr_image
from lumina.services.voting import VotingService

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


# Dashboard


@router.get("/stats", summary="Dashboard statistics", response_model=EventStats)
async def get_stats(service: AdminService = Depends(get_admin_service)) -> EventStats:
    return service.stats()


@router.get("/rsvps", summary="List submissions", response_model=list[RsvpData])
async def list_rsvps(rsvps: RsvpService = Depends(get_rsvp_service)) -> list[RsvpData]:
    return rsvps.list_all()


# Guests


@router.get("/guests", summary="List guests", response_model=list[GuestEntry])
async def list_guests(
    directory: GuestDirectoryService = Depends(get_directory_service),
) -> list[GuestEntry]:
    return directory.list_guests()


@router.post(
    "/guests",
    summary="Add guest",
    response_model=GuestEntry,
    status_code=HTTP_201_CREATED,
    responses={409: {"description": "Phone already registered"}},
)
async def add_guest(
    body: GuestCreate,
    directory: GuestDirectoryService = Depends(get_directory_service),
) -> GuestEntry:
    return directory.add_guest(body)


@router.delete("/guests/{guest_id}", summary="Delete guest", response_model=SuccessMessage)
async def delete_guest(
    guest_id: str,
    directory: GuestDirectoryService = Depends(get_directory_service),
) -> SuccessMessage:
    if not directory.delete_guest(guest_id):
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Guest not found")
    return SuccessMessage(message="Guest deleted")


@router.post(
    "/guests/{guest_id}/reset",
    summary="Reset guest access",
    response_model=GuestEntry,
)
async def reset_guest(
    guest_id: str,
    directory: GuestDirectoryService = Depends(get_directory_service),
) -> GuestEntry:
    guest = directory.reset_guest(guest_id)
    if guest is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Guest not found")
    return guest


# Venues


@router.post(
    "/venues",
    summary="Create venue",
    response_model=VenueOption,
    status_code=HTTP_201_CREATED,
)
async def create_venue(
    body: VenueCreate,
    voting: VotingService = Depends(get_voting_service),
) -> VenueOption:
    venue = voting.create_venue(body)
    if venue is None:
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="Venue ID already exists")
    return venue


@router.patch("/venues/{venue_id}", summary="Update venue", response_model=VenueOption)
async def update_venue(
    venue_id: str,
    body: VenueUpdate,
    voting: VotingService = Depends(get_voting_service),
) -> VenueOption:
    venue = voting.update_venue(venue_id, body)
    if venue is None:
        raise AdmissionError(ErrorCode.VENUE_NOT_FOUND, details={"venue_id": venue_id})
    return venue


@router.delete("/venues/{venue_id}", summary="Delete venue", response_model=SuccessMessage)
async def delete_venue(
    venue_id: str,
    voting: VotingService = Depends(get_voting_service),
) -> SuccessMessage:
    if not voting.delete_venue(venue_id):
        raise AdmissionError(ErrorCode.VENUE_NOT_FOUND, details={"venue_id": venue_id})
    return SuccessMessage(message="Venue deleted")


# Config and stock


@router.get("/config", summary="Get full event config", response_model=EventConfig)
async def get_config(voting: VotingService = Depends(get_voting_service)) -> EventConfig:
    return voting.get_config()


@router.put(
    "/config",
    summary="Save event config",
    description="""
Overwrite the event configuration and broadcast it.

**Notes:**
- Tier stock is recomputed from `max_capacity`: platinum 5, the rest split
  between emerald and standard
- Setting `winning_venue_id` closes voting immediately
""",
    response_model=EventConfig,
)
async def save_config(
    body: EventConfig,
    service: AdminService = Depends(get_admin_service),
) -> EventConfig:
    return service.save_config(body)


@router.put(
    "/tiers/{tier_id}/stock",
    summary="Set tier stock",
    response_model=TicketTier,
)
async def set_stock(
    tier_id: str,
    body: StockUpdate,
    stock: StockService = Depends(get_stock_service),
) -> TicketTier:
    tier = stock.set_stock(tier_id, body.stock)
    if tier is None:
        raise AdmissionError(ErrorCode.TIER_NOT_FOUND, details={"tier_id": tier_id})
    stock.publish_tiers()
    return tier


# Door scans


@router.get("/scans", summary="Scan log", response_model=list[TicketScan])
async def list_scans(scans: ScanService = Depends(get_scan_service)) -> list[TicketScan]:
    return scans.list_scans()


@router.post("/scans", summary="Validate ticket ID", response_model=ScanResult)
async def scan_ticket(
    body: ScanRequest,
    scans: ScanService = Depends(get_scan_service),
) -> ScanResult:
    return scans.scan(body.ticket_id)


@router.post(
    "/scans/image",
    summary="Validate ticket from a QR photo",
    response_model=ScanResult,
)
async def scan_ticket_image(
    file: UploadFile = File(...),
    scans: ScanService = Depends(get_scan_service),
) -> ScanResult:
    image_bytes = await file.read()
    ticket_id = decode_qr_image(image_bytes)
    if ticket_id is None:
        return ScanResult(
            status=ScanStatus.NOT_FOUND,
            ticket_id="",
            message="No QR code found in image",
        )
    return scans.scan(ticket_id)


# Credentials and reset


@router.put(
    "/credentials",
    summary="Rotate admin credentials",
    response_model=SuccessMessage,
)
async def update_credentials(
    body: CredentialsUpdate,
    service: AdminCredentialsService = Depends(get_credentials_service),
) -> SuccessMessage:
    service.set_credentials(body.username, body.password)
    return SuccessMessage(message="Credentials updated")


@router.post(
    "/reset",
    summary="Request factory reset",
    description="""
First step of the factory reset. Returns a token valid for two minutes that
must be sent to `/admin/reset/confirm` together with the phrase `RESET`.
""",
    response_model=ResetToken,
)
async def request_reset(service: AdminService = Depends(get_admin_service)) -> ResetToken:
    return service.request_reset()


@router.post(
    "/reset/confirm",
    summary="Confirm factory reset",
    description="""
Delete every submission, the ticket index and the scan log, give every guest
access again and restore the default tier stock. Venues and config are kept.
""",
    response_model=ResetResult,
    responses={400: {"description": "Wrong phrase, unknown or expired token"}},
)
async def confirm_reset(
    body: ResetConfirmRequest,
    service: AdminService = Depends(get_admin_service),
) -> ResetResult:
    deleted = service.confirm_reset(body.reset_token, body.confirmation_phrase)
    return ResetResult(deleted=deleted)
