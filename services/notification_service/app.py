"""
FastAPI service for the scheduled-notification ledger.

This service exposes the in-memory ledger from notification_server/store.py
as REST API endpoints, so that the notification engine can run against a
ledger living in another process. The HTTP client lives in client.py.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException

from notification_engine.models import (
    NotificationChannel as ChannelRecord,
    NotificationContent as ContentRecord,
    ScheduledNotification as ScheduledRecord,
)
from notification_engine.scheduler import CHANNELS
from notification_server.store import ledger
from services.shared.models import (
    CancelResponse,
    NotificationContent,
    RegisterChannelsRequest,
    ScheduleNotificationRequest,
    ScheduledNotification,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Register the built-in channels on startup."""
    await ledger.register_channels(CHANNELS)
    yield


app = FastAPI(
    title="Notification Service",
    description="REST API for the scheduled assignment notification ledger",
    version="1.0.0",
    lifespan=lifespan,
)


def _to_response(record: ScheduledRecord) -> ScheduledNotification:
    return ScheduledNotification(
        identifier=record.identifier,
        content=NotificationContent(
            title=record.content.title,
            body=record.content.body,
            data=record.content.data,
            sound=record.content.sound,
        ),
        fire_time=record.fire_time,
        channel=record.channel,
    )


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "healthy", "service": "notification-service"}


@app.get("/notifications", response_model=list[ScheduledNotification])
async def list_notifications() -> list[ScheduledNotification]:
    """
    List all pending notifications ordered by fire time.
    """
    return [_to_response(record) for record in await ledger.list_scheduled()]


@app.get("/notifications/{identifier}", response_model=ScheduledNotification)
async def get_notification(identifier: str) -> ScheduledNotification:
    record = ledger.get(identifier)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Notification not found: {identifier}")
    return _to_response(record)


@app.post("/notifications", response_model=ScheduledNotification, status_code=201)
async def schedule_notification(request: ScheduleNotificationRequest) -> ScheduledNotification:
    """
    Schedule a notification.

    An existing notification with the same identifier is replaced.
    """
    if request.channel not in ledger.channels:
        raise HTTPException(status_code=404, detail=f"Unknown channel: {request.channel}")

    fire_time = request.fire_time
    if fire_time.tzinfo is not None:
        fire_time = fire_time.astimezone().replace(tzinfo=None)

    await ledger.schedule(
        request.identifier,
        ContentRecord(
            title=request.content.title,
            body=request.content.body,
            data=request.content.data,
            sound=request.content.sound,
        ),
        fire_time,
        request.channel,
    )
    logger.info("Scheduled %s for %s", request.identifier, fire_time.isoformat())
    return _to_response(ledger.get(request.identifier))


@app.delete("/notifications/{identifier}", response_model=CancelResponse)
async def cancel_notification(identifier: str) -> CancelResponse:
    """
    Cancel one notification. Cancelling an unknown identifier is not an error.
    """
    existed = ledger.get(identifier) is not None
    await ledger.cancel(identifier)
    return CancelResponse(cancelled=1 if existed else 0)


@app.delete("/notifications", response_model=CancelResponse)
async def cancel_all_notifications() -> CancelResponse:
    count = len(ledger)
    await ledger.cancel_all()
    return CancelResponse(cancelled=count)


@app.put("/channels")
async def register_channels(request: RegisterChannelsRequest):
    """Register or update delivery channels."""
    await ledger.register_channels([
        ChannelRecord(**channel.model_dump()) for channel in request.channels
    ])
    return {"channels": sorted(ledger.channels)}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8004)
