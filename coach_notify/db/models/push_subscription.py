"""Push Notification Subscription model."""
import uuid
from sqlalchemy import JSON, Column, ForeignKey, String, Text, DateTime, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.sql import func
from coach_notify.db.base import Base


class PushSubscription(Base):
    """Stores a Web Push endpoint registered by one of a user's devices."""
    __tablename__ = "push_subscriptions"
    __table_args__ = (
        UniqueConstraint("user_id", "endpoint", name="uq_push_subscriptions_user_id_endpoint"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    endpoint = Column(Text, nullable=False, index=True)
    keys = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False)  # { p256dh: "...", auth: "..." }

    user_agent = Column(String(255))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
