"""Follower notifications driven by domain events."""

from .notification_recorder import NotificationRecorder

__all__ = ["NotificationRecorder"]
