"""Discord REST client posting embeds to the configured channels."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from ..config import DiscordConfig
from .messages import Notification, NotificationChannel, NotificationError


class DiscordNotifier:
    """Send one embed per notification through the bot's REST API."""

    def __init__(
        self,
        config: DiscordConfig,
        logger: structlog.BoundLogger | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config
        self.logger = logger or structlog.get_logger("chapter_notifier.discord").bind(
            component="discord"
        )
        client_kwargs: dict[str, Any] = {
            "base_url": config.api_base,
            "timeout": config.timeout,
            "headers": {"Authorization": f"Bot {config.token}"},
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.Client(**client_kwargs)

    def close(self) -> None:
        self._client.close()

    def channel_for(self, channel: NotificationChannel) -> str:
        if channel is NotificationChannel.ERROR:
            return self.config.resolved_error_channel_id
        return self.config.channel_id

    def send(self, notification: Notification) -> None:
        channel_id = self.channel_for(notification.channel)
        payload = {"embeds": [self._embed(notification)]}
        try:
            response = self._client.post(f"/channels/{channel_id}/messages", json=payload)
        except httpx.TimeoutException as exc:
            raise NotificationError(
                f"timed out sending discord notification after {self.config.timeout:g}s"
            ) from exc
        except httpx.HTTPError as exc:
            raise NotificationError(f"error sending discord notification: {exc}") from exc
        if response.status_code >= 400:
            raise NotificationError(
                f"discord rejected notification with status {response.status_code}: {response.text[:200]}"
            )
        self.logger.debug(
            "discord_message_sent", channel_id=channel_id, title=notification.title
        )

    @staticmethod
    def _embed(notification: Notification) -> dict[str, Any]:
        embed: dict[str, Any] = {
            "title": notification.title,
            "description": notification.description,
            "color": notification.color,
        }
        if notification.url:
            embed["url"] = notification.url
        if notification.footer:
            embed["footer"] = {"text": notification.footer}
        return embed


__all__ = ["DiscordNotifier"]
