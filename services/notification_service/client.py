"""
HTTP transport for the notification service.

Implements the notification transport protocol on top of the REST API in
app.py. It handles serialization between the engine's dataclasses and the
Pydantic request/response models, and turns every httpx failure into a
TransportError the engine knows how to skip.
"""
from __future__ import annotations

import typing as t
from dataclasses import asdict
from datetime import datetime
from urllib.parse import quote

import httpx

from notification_engine import config
from notification_engine.interfaces import TransportError
from notification_engine.models import (
    NotificationChannel,
    NotificationContent,
    ScheduledNotification,
)
from services.shared.models import (
    NotificationChannel as PydanticNotificationChannel,
    NotificationContent as PydanticNotificationContent,
    RegisterChannelsRequest,
    ScheduleNotificationRequest,
    ScheduledNotification as PydanticScheduledNotification,
)


def _pydantic_to_dataclass_notification(model: PydanticScheduledNotification) -> ScheduledNotification:
    """Convert Pydantic ScheduledNotification to dataclass ScheduledNotification."""
    return ScheduledNotification(
        identifier=model.identifier,
        content=NotificationContent(
            title=model.content.title,
            body=model.content.body,
            data=model.content.data,
            sound=model.content.sound,
        ),
        fire_time=model.fire_time,
        channel=model.channel,
    )


class HttpNotificationTransport:
    """Notification transport talking to the notification service."""

    def __init__(
        self,
        base_url: str = config.NOTIFICATION_SERVICE_URL,
        timeout: float = config.STANDARD_TIMEOUT,
        client: t.Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    async def _request(self, method: str, path: str, **kwargs: t.Any) -> httpx.Response:
        try:
            if self._client is not None:
                response = await self._client.request(method, f"{self.base_url}{path}", **kwargs)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(method, f"{self.base_url}{path}", **kwargs)
            response.raise_for_status()
            return response
        except httpx.TimeoutException:
            raise TransportError(f"{method} {path} timed out after {self.timeout} seconds")
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"HTTP error from notification service: {e.response.status_code} {e.response.text}"
            )
        except httpx.HTTPError as e:
            raise TransportError(f"Error calling notification service: {str(e)}")

    @staticmethod
    def _path(identifier: str) -> str:
        # Identifiers carry percent-escapes of their own; escape them again.
        return f"/notifications/{quote(identifier, safe='')}"

    async def schedule(
        self,
        identifier: str,
        content: NotificationContent,
        fire_time: datetime,
        channel: str = "default",
    ) -> None:
        request = ScheduleNotificationRequest(
            identifier=identifier,
            content=PydanticNotificationContent(**asdict(content)),
            fire_time=fire_time,
            channel=channel,
        )
        await self._request("POST", "/notifications", json=request.model_dump(mode="json"))

    async def cancel(self, identifier: str) -> None:
        await self._request("DELETE", self._path(identifier))

    async def list_scheduled(self) -> list[ScheduledNotification]:
        response = await self._request("GET", "/notifications")
        return [
            _pydantic_to_dataclass_notification(PydanticScheduledNotification(**item))
            for item in response.json()
        ]

    async def cancel_all(self) -> None:
        await self._request("DELETE", "/notifications")

    async def register_channels(self, channels: list[NotificationChannel]) -> None:
        request = RegisterChannelsRequest(
            channels=[PydanticNotificationChannel(**asdict(channel)) for channel in channels]
        )
        await self._request("PUT", "/channels", json=request.model_dump(mode="json"))
