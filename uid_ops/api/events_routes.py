"""Server-sent event stream of completion pulses."""

import asyncio
import json

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from uid_ops.api.scan_events import ScanEventHub
from uid_ops.config import SSE_KEEPALIVE_SECONDS
from uid_ops.utils.logger import get_logger

logger = get_logger("uid_ops.api.events")

router = APIRouter(tags=["events"])


@router.get("/events/scan")
async def scan_stream(request: Request) -> StreamingResponse:
    """Emit ``data: {"ts": ...}`` per completion; comment lines keep idle proxies open."""
    hub: ScanEventHub = request.app.state.scan_events
    sub = hub.subscribe()

    async def event_generator():
        try:
            yield ": connected\n\n"
            while True:
                if await request.is_disconnected():
                    break
                try:
                    payload = await sub.get(timeout=SSE_KEEPALIVE_SECONDS)
                except asyncio.TimeoutError:
                    yield ": keep-alive\n\n"
                    continue
                if payload is None:
                    break
                yield f"data: {json.dumps(payload)}\n\n"
        finally:
            sub.close()
            logger.debug("events.scan.disconnected")

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
