"""Push subscription endpoints."""
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Header, HTTPException, status

from coach_notify.api import deps
from coach_notify.config import settings
from coach_notify.db.models.user import User
from coach_notify.schemas import DispatchResultRead, PushPayload, UnsubscribeRequest, VapidKeyRead
from coach_notify.services.notification_service import NotificationService
from coach_notify.utils.exceptions import (
    InvalidSubscriptionError,
    StorageError,
    handle_invalid_subscription,
    handle_storage_error,
)

router = APIRouter(prefix="/push", tags=["push"])


@router.get("/vapid-key", response_model=VapidKeyRead)
def get_vapid_public_key() -> VapidKeyRead:
    """Public application server key the browser needs to subscribe."""

    if not settings.VAPID_PUBLIC_KEY:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="VAPID key not configured",
        )
    return VapidKeyRead(publicKey=settings.VAPID_PUBLIC_KEY)


@router.post("/subscribe")
def subscribe(
    subscription: Dict[str, Any] = Body(...),
    user_agent: str | None = Header(default=None),
    current_user: User = Depends(deps.get_current_user),
    service: NotificationService = Depends(deps.get_notification_service),
) -> dict:
    try:
        service.subscribe(current_user.id, subscription, user_agent)
    except InvalidSubscriptionError as exc:
        raise handle_invalid_subscription(exc) from exc
    except StorageError as exc:
        raise handle_storage_error(exc) from exc
    return {"success": True}


@router.post("/unsubscribe")
def unsubscribe(
    payload: UnsubscribeRequest,
    current_user: User = Depends(deps.get_current_user),
    service: NotificationService = Depends(deps.get_notification_service),
) -> dict:
    if not payload.endpoint:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Endpoint required")
    try:
        service.unsubscribe(current_user.id, payload.endpoint)
    except StorageError as exc:
        raise handle_storage_error(exc) from exc
    return {"success": True}


@router.post("/test", response_model=DispatchResultRead)
async def send_test_notification(
    current_user: User = Depends(deps.get_current_user),
    service: NotificationService = Depends(deps.get_notification_service),
) -> DispatchResultRead:
    """Push a sample notification to every device of the caller."""

    result = await service.dispatch(
        {current_user.id},
        PushPayload(title="Notifications enabled", body="You will now get updates from your coach."),
    )
    return DispatchResultRead(**result.as_dict())
