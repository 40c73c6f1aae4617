"""Coach announcement models."""
import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from coach_notify.db.base import Base


TARGET_ALL = "all"
TARGET_SELECTED = "selected"


class Announcement(Base):
    """A message broadcast by a coach to some or all clients."""

    __tablename__ = "announcements"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    is_pinned = Column(Boolean, default=False, nullable=False)
    send_push = Column(Boolean, default=False, nullable=False)
    target_type = Column(String(20), default=TARGET_ALL, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    recipients = relationship(
        "AnnouncementRecipient",
        back_populates="announcement",
        cascade="all, delete-orphan",
    )


class AnnouncementRecipient(Base):
    """Delivery and read state of an announcement for one client."""

    __tablename__ = "announcement_recipients"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    announcement_id = Column(
        UUID(as_uuid=True), ForeignKey("announcements.id", ondelete="CASCADE"), nullable=False, index=True
    )
    client_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    read_at = Column(DateTime(timezone=True))

    announcement = relationship("Announcement", back_populates="recipients")
