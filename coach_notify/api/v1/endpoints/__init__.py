"""API endpoint modules for v1."""

from coach_notify.api.v1.endpoints import announcements, auth, group_chats, push

__all__ = ["announcements", "auth", "group_chats", "push"]
