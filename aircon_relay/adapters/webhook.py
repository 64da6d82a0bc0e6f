"""Incoming-webhook notifier (Slack compatible)."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import aiohttp

from ..config import NotifierConfig
from ..core.models import NotificationPayload

LOGGER = logging.getLogger(__name__)


class NotificationError(RuntimeError):
    """Raised when the webhook rejects or cannot receive a notification."""


class WebhookNotifier:
    """Posts notification payloads as JSON to an incoming-webhook URL."""

    def __init__(
        self,
        config: NotifierConfig,
        *,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        if not config.webhook_url:
            raise NotificationError("Webhook URL is not configured")
        self.url = config.webhook_url
        self.timeout = config.timeout_seconds
        self._session = session
        self._owns_session = session is None

    async def start(self) -> None:
        if self._session is None:
            self._session = aiohttp.ClientSession()
            self._owns_session = True

    async def stop(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    async def send(self, payload: NotificationPayload) -> None:
        if self._session is None:
            raise NotificationError("Notifier not started")

        try:
            async with self._session.post(
                self.url,
                json=payload.as_dict(),
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                if response.status >= 300:
                    text = await response.text()
                    raise NotificationError(
                        f"Webhook rejected notification with status {response.status}: {text}"
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise NotificationError(f"Webhook request failed: {exc}") from exc

        LOGGER.debug("Notification delivered: %s", payload.text.replace("\n", " / "))
