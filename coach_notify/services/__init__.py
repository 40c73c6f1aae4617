"""Service layer package."""

from coach_notify.services.announcements import AnnouncementService
from coach_notify.services.auth import AuthService
from coach_notify.services.group_chats import GroupChatService
from coach_notify.services.notification_service import (
    CleanupResult,
    DispatchResult,
    NotificationService,
    notify_users,
)
from coach_notify.services.subscription_registry import SubscriptionRegistry

__all__ = [
    "AnnouncementService",
    "AuthService",
    "CleanupResult",
    "DispatchResult",
    "GroupChatService",
    "NotificationService",
    "SubscriptionRegistry",
    "notify_users",
]
