"""API routes package.

Routers are organized by domain:

- health: Health check endpoint
- event: Public event details, venues, tiers and ticket QR codes
- sessions: Guest admission flow
- admin: Authenticated back office
- feed: Realtime WebSocket feed

All routers are registered in main.py with /api prefix.
"""

from lumina.api.routes.admin import router as admin_router
from lumina.api.routes.event import router as event_router
from lumina.api.routes.feed import router as feed_router
from lumina.api.routes.health import router as health_router
from lumina.api.routes.sessions import router as sessions_router

__all__ = [
    "admin_router",
    "event_router",
    "feed_router",
    "health_router",
    "sessions_router",
]
