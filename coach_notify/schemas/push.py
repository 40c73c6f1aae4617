"""Schemas for push registration and notification payloads."""
from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from coach_notify.config import settings


class PushPayload(BaseModel):
    """Message rendered by the service worker on the user's device."""

    title: str = Field(min_length=1, max_length=255)
    body: str = Field(min_length=1)
    url: str = Field(default_factory=lambda: settings.DEFAULT_PUSH_URL)

    @field_validator("title", "body")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @field_validator("url", mode="before")
    @classmethod
    def _default_url(cls, value: str | None) -> str:
        return value or settings.DEFAULT_PUSH_URL


class SubscriptionKeys(BaseModel):
    """Client encryption keys from ``PushSubscription.toJSON()``."""

    p256dh: str = Field(min_length=1)
    auth: str = Field(min_length=1)


class UnsubscribeRequest(BaseModel):
    endpoint: str | None = None


class DispatchResultRead(BaseModel):
    """Aggregate outcome of one notification batch."""

    sent: int
    failed: int


class VapidKeyRead(BaseModel):
    publicKey: str
