"""Pydantic models for coach announcements."""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class AnnouncementCreate(BaseModel):
    """Announcement composer input; accepts camelCase keys from the web client."""

    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    is_pinned: bool = Field(default=False, validation_alias=AliasChoices("is_pinned", "isPinned"))
    send_push: bool = Field(default=False, validation_alias=AliasChoices("send_push", "sendPush"))
    target_type: Literal["all", "selected"] = Field(
        default="all", validation_alias=AliasChoices("target_type", "targetType")
    )
    selected_client_ids: List[uuid.UUID] = Field(
        default_factory=list,
        validation_alias=AliasChoices("selected_client_ids", "selectedClientIds"),
    )


class AnnouncementRead(BaseModel):
    """Coach view of an announcement with read statistics."""

    id: uuid.UUID
    title: str
    content: str
    is_pinned: bool
    send_push: bool
    target_type: str
    created_at: Optional[datetime] = None
    read_count: int = 0
    total_count: int = 0

    model_config = ConfigDict(from_attributes=True)


class ClientAnnouncementRead(BaseModel):
    """Client view of an announcement addressed to them."""

    id: uuid.UUID
    recipient_id: uuid.UUID
    title: str
    content: str
    is_pinned: bool
    created_at: Optional[datetime] = None
    read_at: Optional[datetime] = None
