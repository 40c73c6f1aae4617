"""Pydantic schemas package."""

from coach_notify.schemas.announcement import (
    AnnouncementCreate,
    AnnouncementRead,
    ClientAnnouncementRead,
)
from coach_notify.schemas.auth import Token, TokenPayload
from coach_notify.schemas.group_chat import GroupNotificationsRead, GroupNotificationsUpdate
from coach_notify.schemas.push import (
    DispatchResultRead,
    PushPayload,
    SubscriptionKeys,
    UnsubscribeRequest,
    VapidKeyRead,
)
from coach_notify.schemas.user import UserBase, UserCreate, UserLogin, UserRead

__all__ = [
    "AnnouncementCreate",
    "AnnouncementRead",
    "ClientAnnouncementRead",
    "DispatchResultRead",
    "GroupNotificationsRead",
    "GroupNotificationsUpdate",
    "PushPayload",
    "SubscriptionKeys",
    "Token",
    "TokenPayload",
    "UnsubscribeRequest",
    "UserBase",
    "UserCreate",
    "UserLogin",
    "UserRead",
    "VapidKeyRead",
]
