"""Celery tasks that deliver push notifications outside the request cycle."""
from __future__ import annotations

import asyncio
from typing import List

from loguru import logger

from coach_notify.celery_app import celery_app
from coach_notify.db.session import SessionLocal
from coach_notify.schemas.push import PushPayload
from coach_notify.services.group_chats import GroupChatService
from coach_notify.services.notification_service import NotificationService


@celery_app.task(name="coach_notify.tasks.notifications.send_push_notification")
def send_push_notification(
    user_ids: List[str], title: str, body: str, url: str | None = None
) -> dict[str, int]:
    """Fan out one notification to every device of ``user_ids``."""

    payload = PushPayload(title=title, body=body, url=url)
    db = SessionLocal()
    try:
        result = asyncio.run(NotificationService(db).dispatch(user_ids, payload))
    finally:
        db.close()

    logger.info("Push task processed", users=len(user_ids), sent=result.sent, failed=result.failed)
    return result.as_dict()


@celery_app.task(name="coach_notify.tasks.notifications.notify_group_chat")
def notify_group_chat(
    group_chat_id: str, sender_id: str, title: str, body: str
) -> dict[str, int]:
    """Push a new group message to members who have not muted group chats."""

    db = SessionLocal()
    try:
        recipients = GroupChatService(db).notifiable_members(group_chat_id, exclude_user_id=sender_id)
        if not recipients:
            return {"sent": 0, "failed": 0}
        payload = PushPayload(title=title, body=body, url=f"/group-chats/{group_chat_id}")
        result = asyncio.run(NotificationService(db).dispatch(recipients, payload))
    finally:
        db.close()

    logger.info(
        "Group chat push processed",
        group_chat_id=group_chat_id,
        recipients=len(recipients),
        sent=result.sent,
        failed=result.failed,
    )
    return result.as_dict()
