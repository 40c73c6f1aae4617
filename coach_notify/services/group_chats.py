"""Group chat notification preferences."""
from __future__ import annotations

import uuid
from typing import Any, List

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coach_notify.db.models.group_chat import GroupChatMember
from coach_notify.utils.exceptions import StorageError


class GroupChatService:
    """The preference is a single switch per user, stored on every membership row."""

    def __init__(self, db: Session):
        self.db = db

    def notifications_enabled(self, user_id: uuid.UUID) -> bool:
        """True when the user has no memberships or none of them is muted."""

        flags = list(
            self.db.scalars(
                select(GroupChatMember.notifications_enabled).where(GroupChatMember.user_id == user_id)
            )
        )
        return all(flags)

    def set_notifications(self, user_id: uuid.UUID, enabled: bool) -> int:
        """Apply the switch to every group the user belongs to; returns rows touched."""

        stmt = (
            update(GroupChatMember)
            .where(GroupChatMember.user_id == user_id)
            .values(notifications_enabled=enabled)
        )
        try:
            result = self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError("Could not update group notifications", {"error": str(exc)}) from exc
        return result.rowcount

    def notifiable_members(self, group_chat_id: Any, exclude_user_id: Any = None) -> List[uuid.UUID]:
        """Members of the group who should receive a push for a new message."""

        stmt = select(GroupChatMember.user_id).where(
            GroupChatMember.group_chat_id == uuid.UUID(str(group_chat_id)),
            GroupChatMember.notifications_enabled.is_(True),
        )
        if exclude_user_id is not None:
            stmt = stmt.where(GroupChatMember.user_id != uuid.UUID(str(exclude_user_id)))
        return list(self.db.scalars(stmt))
