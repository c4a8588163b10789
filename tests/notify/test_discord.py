from __future__ import annotations

import json

import httpx
import pytest

from chapter_notifier.config import DiscordConfig
from chapter_notifier.notify import DiscordNotifier, Notification, NotificationChannel, NotificationError


def _notifier(handler, **overrides) -> DiscordNotifier:
    config = DiscordConfig(token="bot-token", channel_id="111", **overrides)
    return DiscordNotifier(config, transport=httpx.MockTransport(handler))


def test_release_embed_posted_to_release_channel() -> None:
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["path"] = request.url.path
        captured["auth"] = request.headers["Authorization"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "1"})

    notifier = _notifier(handler, error_channel_id="222")
    notifier.send(
        Notification(
            title="One Piece",
            description="Chapter 1100: Final Arc",
            url="https://tcbscans.me/chapters/123/one-piece-chapter-1100",
            footer="Released at Wed, 01 May 2024 14:00:00 CEST",
        )
    )
    notifier.close()

    assert captured["path"] == "/api/v10/channels/111/messages"
    assert captured["auth"] == "Bot bot-token"
    assert captured["body"] == {
        "embeds": [
            {
                "title": "One Piece",
                "description": "Chapter 1100: Final Arc",
                "color": 3447003,
                "url": "https://tcbscans.me/chapters/123/one-piece-chapter-1100",
                "footer": {"text": "Released at Wed, 01 May 2024 14:00:00 CEST"},
            }
        ]
    }


def test_error_channel_selection() -> None:
    notifier = _notifier(lambda request: httpx.Response(200), error_channel_id="222")
    assert notifier.channel_for(NotificationChannel.ERROR) == "222"
    notifier.close()

    fallback = _notifier(lambda request: httpx.Response(200))
    assert fallback.channel_for(NotificationChannel.ERROR) == "111"
    fallback.close()


def test_error_embed_omits_empty_url_and_footer() -> None:
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200)

    notifier = _notifier(handler)
    notifier.send(Notification(title="Error", description="boom", channel=NotificationChannel.ERROR))
    notifier.close()
    assert set(bodies[0]["embeds"][0]) == {"title", "description", "color"}


def test_rejected_message_raises() -> None:
    notifier = _notifier(lambda request: httpx.Response(403, json={"message": "Missing Access"}))
    with pytest.raises(NotificationError, match="403"):
        notifier.send(Notification(title="t", description="d"))
    notifier.close()


def test_timeout_raises_notification_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.WriteTimeout("slow", request=request)

    notifier = _notifier(handler, timeout=2)
    with pytest.raises(NotificationError, match="timed out"):
        notifier.send(Notification(title="t", description="d"))
    notifier.close()
