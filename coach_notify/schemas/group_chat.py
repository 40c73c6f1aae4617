"""Schemas for group chat notification preferences."""
from __future__ import annotations

from pydantic import BaseModel, StrictBool


class GroupNotificationsRead(BaseModel):
    enabled: bool


class GroupNotificationsUpdate(BaseModel):
    enabled: StrictBool
