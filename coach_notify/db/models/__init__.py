"""Database models package."""
from coach_notify.db.models.user import User
from coach_notify.db.models.push_subscription import PushSubscription
from coach_notify.db.models.announcement import Announcement, AnnouncementRecipient
from coach_notify.db.models.group_chat import GroupChat, GroupChatMember

__all__ = [
    "User",
    "PushSubscription",
    "Announcement",
    "AnnouncementRecipient",
    "GroupChat",
    "GroupChatMember",
]
