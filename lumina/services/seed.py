"""Default data written at first boot."""

import datetime as dt
from typing import TYPE_CHECKING

from lumina.models import EventConfig, GuestCreate, TicketTier, VenueCreate
from lumina.utils.logging import get_logger

from .stock import DEFAULT_TIER_STOCK

if TYPE_CHECKING:
    from .directory import GuestDirectoryService
    from .stock import StockService
    from .voting import VotingService

logger = get_logger(__name__)

# (guest_id, name, phone)
DEFAULT_GUESTS: list[tuple[str, str, str]] = [
    ("11111111-1111-1111-1111-111111111111", "Carlos", "987654321"),
    ("22222222-2222-2222-2222-222222222222", "María", "912345678"),
    ("33333333-3333-3333-3333-333333333333", "Alonso", "956781234"),
]

_MAPS_URL = "https://maps.app.goo.gl/3f9n"

DEFAULT_VENUES: list[VenueCreate] = [
    VenueCreate(
        venue_id="lounge",
        name="Skyline Rooftop",
        vibe="Relajado & Elegante",
        min_spend="S/ 80",
        closing_time="02:00 AM",
        description="Cócteles de autor, vista panorámica a la ciudad y ambiente para conversar.",
        perks=["Vista Increíble", "Música Chill"],
        color="from-indigo-500 to-blue-500",
        maps_url=_MAPS_URL,
    ),
    VenueCreate(
        venue_id="club",
        name="Neon Pulse Club",
        vibe="Energía al Máximo",
        min_spend="S/ 120",
        closing_time="06:00 AM",
        description="Para bailar hasta las últimas consecuencias. Luces potentes y el mejor sonido.",
        perks=["Pista Privada", "DJ de Moda"],
        color="from-fuchsia-600 to-purple-600",
        maps_url=_MAPS_URL,
    ),
    VenueCreate(
        venue_id="pub",
        name="The Urban Pub",
        vibe="Casual & Entre Patas",
        min_spend="S/ 40",
        closing_time="03:00 AM",
        description="Cervezas artesanales bien heladas, piqueos peruanos y buena música para compartir.",
        perks=["Precios Amigos", "Ambiente Familiar"],
        color="from-orange-500 to-amber-500",
        maps_url=_MAPS_URL,
    ),
]

DEFAULT_TIERS: list[TicketTier] = [
    TicketTier(
        tier_id="platinum",
        name="PLATINUM VIP",
        description="Acceso total + Barra Libre",
        stock=DEFAULT_TIER_STOCK["platinum"],
        perks=["Barra Libre", "Zona VIP", "Meet & Greet"],
        color="text-amber-400",
        position=0,
    ),
    TicketTier(
        tier_id="emerald",
        name="EMERALD GUEST",
        description="Acceso Preferencial",
        stock=DEFAULT_TIER_STOCK["emerald"],
        perks=["Zona Preferencial", "Welcome Drink"],
        color="text-emerald-400",
        position=1,
    ),
    TicketTier(
        tier_id="standard",
        name="STANDARD ECHO",
        description="Acceso General",
        stock=DEFAULT_TIER_STOCK["standard"],
        perks=["Acceso General"],
        color="text-gray-400",
        position=2,
    ),
]


def seed_defaults(
    directory: "GuestDirectoryService",
    voting: "VotingService",
    stock: "StockService",
    now: dt.datetime | None = None,
) -> dict[str, int]:
    """Write the default guests, venues, tiers and config into empty tables.

    Collections that already hold data are left untouched.

    Returns:
        Number of records written per collection
    """
    now = now or dt.datetime.now(dt.UTC)
    written = {"guests": 0, "venues": 0, "tiers": 0, "config": 0}

    if not directory.list_guests():
        for guest_id, name, phone in DEFAULT_GUESTS:
            directory.add_guest(GuestCreate(name=name, phone=phone), guest_id=guest_id)
            written["guests"] += 1

    if not voting.list_venues():
        for venue in DEFAULT_VENUES:
            voting.create_venue(venue)
            written["venues"] += 1

    if not stock.list_tiers():
        for tier in DEFAULT_TIERS:
            stock.put_tier(tier)
            written["tiers"] += 1

    if not voting.has_config():
        voting.save_config(EventConfig(voting_deadline=now + dt.timedelta(days=7)), now=now)
        written["config"] = 1

    logger.info("Seeded defaults: %s", written)
    return written
