"""Coach announcement endpoints."""
from __future__ import annotations

from typing import List, Union

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session

from coach_notify.api import deps
from coach_notify.db.models.user import User
from coach_notify.schemas import AnnouncementCreate, AnnouncementRead, ClientAnnouncementRead
from coach_notify.services.announcements import AnnouncementService
from coach_notify.services.notification_service import notify_users
from coach_notify.utils.exceptions import StorageError, handle_storage_error

router = APIRouter(prefix="/announcements", tags=["announcements"])


@router.get("", response_model=Union[List[AnnouncementRead], List[ClientAnnouncementRead]])
def list_announcements(
    current_user: User = Depends(deps.get_current_user),
    db: Session = Depends(deps.get_db),
):
    """Coaches see every announcement with read counts; clients see their own."""

    service = AnnouncementService(db)
    if current_user.is_coach:
        return service.list_for_coach()
    return service.list_for_client(current_user)


@router.post("", response_model=AnnouncementRead, status_code=status.HTTP_201_CREATED)
def create_announcement(
    payload: AnnouncementCreate,
    background_tasks: BackgroundTasks,
    coach: User = Depends(deps.get_current_coach),
    db: Session = Depends(deps.get_db),
) -> AnnouncementRead:
    service = AnnouncementService(db)
    try:
        announcement, client_ids = service.create(coach, payload)
    except StorageError as exc:
        raise handle_storage_error(exc) from exc

    if announcement.send_push and client_ids:
        # Runs after the response is sent; the fan-out opens its own session.
        background_tasks.add_task(
            notify_users, client_ids, AnnouncementService.push_payload(coach, announcement)
        )

    return AnnouncementRead(
        id=announcement.id,
        title=announcement.title,
        content=announcement.content,
        is_pinned=announcement.is_pinned,
        send_push=announcement.send_push,
        target_type=announcement.target_type,
        created_at=announcement.created_at,
        read_count=0,
        total_count=len(client_ids),
    )
