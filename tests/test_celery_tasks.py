"""Tests for Celery push tasks."""
from __future__ import annotations

from unittest.mock import patch

import pytest
from sqlalchemy import select

from coach_notify.db.models import GroupChat, GroupChatMember, PushSubscription
from coach_notify.services.notification_service import NotificationService
from coach_notify.tasks.notifications import notify_group_chat, send_push_notification

KEYS = {"p256dh": "a", "auth": "b"}


@pytest.fixture()
def patched_task_io(session_factory, stub_transport_factory):
    transport = stub_transport_factory({"https://push.example/gone": 410})
    with patch("coach_notify.tasks.notifications.SessionLocal", side_effect=session_factory), patch(
        "coach_notify.services.push_transport.get_transport", return_value=transport
    ):
        yield transport


def test_send_push_notification(db_session, make_user, patched_task_io):
    alive, stale = make_user(), make_user()
    service = NotificationService(db_session)
    service.subscribe(alive.id, {"endpoint": "https://push.example/alive", "keys": KEYS})
    service.subscribe(stale.id, {"endpoint": "https://push.example/gone", "keys": KEYS})

    result = send_push_notification.run([str(alive.id), str(stale.id)], "Reminder", "Log your workout")

    assert result == {"sent": 1, "failed": 1}
    assert patched_task_io.calls[0][2]["url"] == "/"
    remaining = list(db_session.scalars(select(PushSubscription.endpoint)))
    assert remaining == ["https://push.example/alive"]


def test_send_push_notification_with_no_users(patched_task_io):
    assert send_push_notification.run([], "Reminder", "Log your workout") == {"sent": 0, "failed": 0}
    assert patched_task_io.calls == []


def test_send_push_notification_with_malformed_ids(patched_task_io):
    assert send_push_notification.run(["u1"], "Reminder", "Log your workout") == {"sent": 0, "failed": 0}
    assert patched_task_io.calls == []


def test_notify_group_chat(db_session, make_user, patched_task_io):
    coach, athlete, muted = make_user("coach"), make_user("client"), make_user("client")
    chat = GroupChat(name="Lifters", created_by=coach.id)
    db_session.add(chat)
    db_session.flush()
    db_session.add_all(
        [
            GroupChatMember(group_chat_id=chat.id, user_id=coach.id),
            GroupChatMember(group_chat_id=chat.id, user_id=athlete.id),
            GroupChatMember(group_chat_id=chat.id, user_id=muted.id, notifications_enabled=False),
        ]
    )
    db_session.commit()
    service = NotificationService(db_session)
    for user in (coach, athlete, muted):
        service.subscribe(user.id, {"endpoint": f"https://push.example/{user.id}", "keys": KEYS})

    result = notify_group_chat.run(str(chat.id), str(coach.id), "Lifters", "Sam: PRs today?")

    assert result == {"sent": 1, "failed": 0}
    endpoint, _, payload = patched_task_io.calls[0]
    assert endpoint == f"https://push.example/{athlete.id}"
    assert payload["url"] == f"/group-chats/{chat.id}"
