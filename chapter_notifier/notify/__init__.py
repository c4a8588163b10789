"""Outbound notifications."""

from .discord import DiscordNotifier
from .dispatcher import NotificationDispatcher, Notifier, PipelineErrorState
from .messages import Notification, NotificationChannel, NotificationError

__all__ = [
    "DiscordNotifier",
    "Notification",
    "NotificationChannel",
    "NotificationDispatcher",
    "NotificationError",
    "Notifier",
    "PipelineErrorState",
]
