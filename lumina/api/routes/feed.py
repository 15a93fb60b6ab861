"""Realtime feed of config, venue and tier snapshots over WebSocket."""

import asyncio
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from starlette.concurrency import run_in_threadpool

from lumina.api.dependencies import get_stock_service, get_voting_service
from lumina.models import FeedEventType, PublicEventConfig
from lumina.services.realtime import Subscription, get_event_feed
from lumina.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["feed"])


def current_snapshots() -> list[dict[str, Any]]:
    """Full config, venues and tiers snapshots for a new subscriber."""
    voting = get_voting_service()
    stock = get_stock_service()
    config = PublicEventConfig.from_config(voting.get_config())
    return [
        {"type": FeedEventType.CONFIG.value, "data": config.model_dump(mode="json")},
        {
            "type": FeedEventType.VENUES.value,
            "data": [v.model_dump(mode="json") for v in voting.list_venues()],
        },
        {
            "type": FeedEventType.TIERS.value,
            "data": [t.model_dump(mode="json") for t in stock.list_tier_views()],
        },
    ]


async def _forward(websocket: WebSocket, subscription: Subscription) -> None:
    while True:
        event = await subscription.get()
        await websocket.send_json(event)


@router.websocket("/ws/feed")
async def feed_socket(websocket: WebSocket) -> None:
    """Send the current snapshots, then every published event.

    Messages sent by the client are ignored.
    """
    await websocket.accept()
    feed = get_event_feed()
    subscription = feed.subscribe()
    forwarder: asyncio.Task[None] | None = None

    try:
        for event in await run_in_threadpool(current_snapshots):
            await websocket.send_json(event)
        forwarder = asyncio.create_task(_forward(websocket, subscription))
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug("Feed subscriber disconnected")
    finally:
        if forwarder is not None:
            forwarder.cancel()
        feed.unsubscribe(subscription)
