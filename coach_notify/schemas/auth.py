"""Authentication related schemas."""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class Token(BaseModel):
    """Token pair issued after a successful login."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class TokenPayload(BaseModel):
    """Claims carried by access tokens."""

    sub: uuid.UUID
    exp: datetime
    type: str
    role: Optional[str] = None
