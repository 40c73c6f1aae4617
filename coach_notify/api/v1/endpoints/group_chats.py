"""Group chat notification preference endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from coach_notify.api import deps
from coach_notify.db.models.user import User
from coach_notify.schemas import GroupNotificationsRead, GroupNotificationsUpdate
from coach_notify.services.group_chats import GroupChatService
from coach_notify.utils.exceptions import StorageError, handle_storage_error

router = APIRouter(prefix="/group-chats", tags=["group-chats"])


@router.get("/notifications", response_model=GroupNotificationsRead)
def get_group_notifications(
    current_user: User = Depends(deps.get_current_user),
    db: Session = Depends(deps.get_db),
) -> GroupNotificationsRead:
    enabled = GroupChatService(db).notifications_enabled(current_user.id)
    return GroupNotificationsRead(enabled=enabled)


@router.patch("/notifications")
def update_group_notifications(
    payload: GroupNotificationsUpdate,
    current_user: User = Depends(deps.get_current_user),
    db: Session = Depends(deps.get_db),
) -> dict:
    """Mute or unmute every group chat the user belongs to."""

    try:
        GroupChatService(db).set_notifications(current_user.id, payload.enabled)
    except StorageError as exc:
        raise handle_storage_error(exc) from exc
    return {"success": True, "enabled": payload.enabled}
