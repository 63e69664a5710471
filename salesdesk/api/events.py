"""
Server-sent change events.

Clients keep one stream open and refetch whatever table an event names.
"""

import asyncio
import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from salesdesk.auth.dependencies import get_current_user
from salesdesk.models import User
from salesdesk.services.notifier import ChangeFeed, change_feed

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["Events"])

KEEPALIVE_SECONDS = 15.0


def get_change_feed() -> ChangeFeed:
    return change_feed


async def event_stream(request: Request, feed: ChangeFeed, keepalive: float = KEEPALIVE_SECONDS):
    """Yield SSE frames until the client disconnects."""
    queue = feed.open_stream()
    try:
        yield ": connected\n\n"
        while True:
            if await request.is_disconnected():
                break
            try:
                event = await asyncio.wait_for(queue.get(), timeout=keepalive)
            except asyncio.TimeoutError:
                yield ": keepalive\n\n"
                continue
            yield f"event: change\ndata: {json.dumps(event.to_dict())}\n\n"
    finally:
        feed.close_stream(queue)
        logger.debug("Change stream closed")


@router.get("")
async def stream_changes(
    request: Request,
    current_user: User = Depends(get_current_user),
    feed: ChangeFeed = Depends(get_change_feed),
):
    """Stream record changes as text/event-stream."""
    logger.info(f"Change stream opened by {current_user.email}")
    return StreamingResponse(
        event_stream(request, feed),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
