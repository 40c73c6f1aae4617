"""Group chat membership models."""
import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from coach_notify.db.base import Base


class GroupChat(Base):
    """A coach-run group conversation."""

    __tablename__ = "group_chats"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class GroupChatMember(Base):
    """Membership row; carries the member's push preference for the group."""

    __tablename__ = "group_chat_members"

    group_chat_id = Column(
        UUID(as_uuid=True), ForeignKey("group_chats.id", ondelete="CASCADE"), primary_key=True
    )
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True)
    notifications_enabled = Column(Boolean, default=True, nullable=False)
    joined_at = Column(DateTime(timezone=True), server_default=func.now())
