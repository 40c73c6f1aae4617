"""Shared API dependencies."""
from __future__ import annotations

import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from pydantic import ValidationError
from sqlalchemy.orm import Session

from coach_notify.config import settings
from coach_notify.core.security import InvalidTokenError, decode_token
from coach_notify.db.models.user import User
from coach_notify.db.session import SessionLocal
from coach_notify.schemas import TokenPayload
from coach_notify.services.notification_service import NotificationService
from coach_notify.utils.exceptions import PermissionDeniedError, handle_permission_denied

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login")


def get_db() -> Session:
    """Yield a database session for request lifetime."""

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)
) -> User:
    """Resolve the authenticated user from the Authorization header."""

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not token:
        raise credentials_exception

    try:
        payload = decode_token(token)
        if payload.get("type") != "access":
            raise InvalidTokenError("Token must be an access token")
        token_data = TokenPayload.model_validate(payload)
    except (InvalidTokenError, ValidationError, ValueError, KeyError) as exc:
        raise credentials_exception from exc

    user = db.get(User, uuid.UUID(str(token_data.sub)))
    if not user or not user.is_active:
        raise credentials_exception
    return user


def get_current_coach(current_user: User = Depends(get_current_user)) -> User:
    """Restrict an endpoint to coaches."""

    if not current_user.is_coach:
        raise handle_permission_denied(PermissionDeniedError("Forbidden"))
    return current_user


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    return NotificationService(db)
