"""Service layer for coach announcements."""
from __future__ import annotations

import uuid
from typing import List

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from coach_notify.db.models.announcement import (
    TARGET_ALL,
    Announcement,
    AnnouncementRecipient,
)
from coach_notify.db.models.user import ROLE_CLIENT, User
from coach_notify.schemas import (
    AnnouncementCreate,
    AnnouncementRead,
    ClientAnnouncementRead,
    PushPayload,
)
from coach_notify.utils.exceptions import PermissionDeniedError, StorageError

PREVIEW_LENGTH = 50


def message_preview(content: str) -> str:
    """Push body for an announcement, cut to ``PREVIEW_LENGTH`` characters."""

    return content if len(content) <= PREVIEW_LENGTH else content[:PREVIEW_LENGTH] + "..."


class AnnouncementService:
    """Creates announcements and resolves who should hear about them."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, coach: User, payload: AnnouncementCreate) -> tuple[Announcement, List[uuid.UUID]]:
        """Persist the announcement and its recipient rows; return it with the client ids."""

        if not coach.is_coach:
            raise PermissionDeniedError("Only coaches can post announcements")

        announcement = Announcement(
            created_by=coach.id,
            title=payload.title,
            content=payload.content,
            is_pinned=payload.is_pinned,
            send_push=payload.send_push,
            target_type=payload.target_type,
        )
        try:
            self.db.add(announcement)
            self.db.flush()

            if payload.target_type == TARGET_ALL:
                client_ids = list(
                    self.db.scalars(
                        select(User.id).where(User.role == ROLE_CLIENT, User.is_active.is_(True))
                    )
                )
            else:
                client_ids = list(dict.fromkeys(payload.selected_client_ids))

            self.db.add_all(
                AnnouncementRecipient(announcement_id=announcement.id, client_id=client_id)
                for client_id in client_ids
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError("Could not create announcement", {"error": str(exc)}) from exc

        self.db.refresh(announcement)
        logger.info(
            "Announcement created",
            announcement_id=str(announcement.id),
            recipients=len(client_ids),
            send_push=announcement.send_push,
        )
        return announcement, client_ids

    @staticmethod
    def push_payload(coach: User, announcement: Announcement) -> PushPayload:
        return PushPayload(
            title=f"Announcement from {coach.full_name or 'Coach'}",
            body=message_preview(announcement.content),
            url="/announcements",
        )

    def list_for_coach(self) -> List[AnnouncementRead]:
        stmt = (
            select(Announcement)
            .options(selectinload(Announcement.recipients))
            .order_by(Announcement.is_pinned.desc(), Announcement.created_at.desc())
        )
        results = []
        for announcement in self.db.scalars(stmt):
            recipients = announcement.recipients
            results.append(
                AnnouncementRead(
                    id=announcement.id,
                    title=announcement.title,
                    content=announcement.content,
                    is_pinned=announcement.is_pinned,
                    send_push=announcement.send_push,
                    target_type=announcement.target_type,
                    created_at=announcement.created_at,
                    read_count=sum(1 for r in recipients if r.read_at is not None),
                    total_count=len(recipients),
                )
            )
        return results

    def list_for_client(self, client: User) -> List[ClientAnnouncementRead]:
        stmt = (
            select(AnnouncementRecipient, Announcement)
            .join(Announcement, AnnouncementRecipient.announcement_id == Announcement.id)
            .where(AnnouncementRecipient.client_id == client.id)
            .order_by(Announcement.is_pinned.desc(), Announcement.created_at.desc())
        )
        return [
            ClientAnnouncementRead(
                id=announcement.id,
                recipient_id=recipient.id,
                title=announcement.title,
                content=announcement.content,
                is_pinned=announcement.is_pinned,
                created_at=announcement.created_at,
                read_at=recipient.read_at,
            )
            for recipient, announcement in self.db.execute(stmt)
        ]
