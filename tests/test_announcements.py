"""Tests for coach announcements and their push fan-out."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient
from sqlalchemy import select

from coach_notify.db.models import Announcement, AnnouncementRecipient
from coach_notify.schemas import PushPayload
from coach_notify.services.announcements import message_preview
from coach_notify.services.notification_service import NotificationService


def test_message_preview() -> None:
    assert message_preview("short") == "short"
    assert message_preview("x" * 50) == "x" * 50
    assert message_preview("y" * 51) == "y" * 50 + "..."


def test_clients_cannot_post_announcements(client: TestClient, make_user, headers_for) -> None:
    member = make_user("client")

    response = client.post(
        "/api/v1/announcements",
        json={"title": "Hello", "content": "World"},
        headers=headers_for(member),
    )

    assert response.status_code == 403


def test_title_and_content_are_required(client: TestClient, make_user, headers_for) -> None:
    coach = make_user("coach")

    response = client.post(
        "/api/v1/announcements", json={"title": "", "content": "World"}, headers=headers_for(coach)
    )

    assert response.status_code == 422


def test_announcement_to_all_clients_schedules_push(
    client: TestClient, db_session, make_user, headers_for
) -> None:
    coach = make_user("coach", full_name="Sam Strong")
    first, second = make_user("client"), make_user("client")
    make_user("client", is_active=False)
    content = "New training block starts Monday. Check your program for the details!"

    with patch(
        "coach_notify.api.v1.endpoints.announcements.notify_users", new_callable=AsyncMock
    ) as notify:
        response = client.post(
            "/api/v1/announcements",
            json={"title": "Block 2", "content": content, "sendPush": True, "isPinned": True},
            headers=headers_for(coach),
        )

    assert response.status_code == 201
    data = response.json()
    assert data["total_count"] == 2
    assert data["read_count"] == 0
    assert data["is_pinned"] is True

    notify.assert_called_once()
    user_ids, payload = notify.call_args.args
    assert set(user_ids) == {first.id, second.id}
    assert payload == PushPayload(
        title="Announcement from Sam Strong",
        body=content[:50] + "...",
        url="/announcements",
    )


def test_announcement_without_push_does_not_notify(
    client: TestClient, db_session, make_user, headers_for
) -> None:
    coach = make_user("coach")
    make_user("client")

    with patch(
        "coach_notify.api.v1.endpoints.announcements.notify_users", new_callable=AsyncMock
    ) as notify:
        response = client.post(
            "/api/v1/announcements",
            json={"title": "Quiet", "content": "No buzz"},
            headers=headers_for(coach),
        )

    assert response.status_code == 201
    notify.assert_not_called()


def test_selected_recipients_are_deduplicated(client: TestClient, db_session, make_user, headers_for) -> None:
    coach = make_user("coach")
    chosen, skipped = make_user("client"), make_user("client")

    response = client.post(
        "/api/v1/announcements",
        json={
            "title": "Just you",
            "content": "Form check tomorrow",
            "target_type": "selected",
            "selected_client_ids": [str(chosen.id), str(chosen.id)],
        },
        headers=headers_for(coach),
    )

    assert response.status_code == 201
    recipients = list(db_session.scalars(select(AnnouncementRecipient.client_id)))
    assert recipients == [chosen.id]
    assert skipped.id not in recipients


def test_background_push_reaches_subscribed_clients(
    client: TestClient, db_session, session_factory, make_user, headers_for, stub_transport_factory
) -> None:
    coach = make_user("coach", full_name="Sam Strong")
    athlete = make_user("client")
    NotificationService(db_session).subscribe(
        athlete.id, {"endpoint": "https://push.example/athlete", "keys": {"p256dh": "a", "auth": "b"}}
    )
    transport = stub_transport_factory()

    with patch("coach_notify.services.notification_service.SessionLocal", side_effect=session_factory), patch(
        "coach_notify.services.push_transport.get_transport", return_value=transport
    ):
        response = client.post(
            "/api/v1/announcements",
            json={"title": "Deload", "content": "Easy week", "send_push": True},
            headers=headers_for(coach),
        )

    assert response.status_code == 201
    assert len(transport.calls) == 1
    endpoint, _, payload = transport.calls[0]
    assert endpoint == "https://push.example/athlete"
    assert payload == {"title": "Announcement from Sam Strong", "body": "Easy week", "url": "/announcements"}


def test_listing_for_coach_and_client(client: TestClient, db_session, make_user, headers_for) -> None:
    coach = make_user("coach")
    athlete = make_user("client")
    now = datetime.now(timezone.utc)

    older_pinned = Announcement(
        created_by=coach.id, title="Rules", content="Read me", is_pinned=True, created_at=now - timedelta(days=3)
    )
    newer = Announcement(created_by=coach.id, title="News", content="Hi", created_at=now)
    db_session.add_all([older_pinned, newer])
    db_session.flush()
    db_session.add_all(
        [
            AnnouncementRecipient(announcement_id=older_pinned.id, client_id=athlete.id, read_at=now),
            AnnouncementRecipient(announcement_id=newer.id, client_id=athlete.id),
        ]
    )
    db_session.commit()

    coach_view = client.get("/api/v1/announcements", headers=headers_for(coach)).json()
    assert [item["title"] for item in coach_view] == ["Rules", "News"]
    assert coach_view[0]["read_count"] == 1
    assert coach_view[0]["total_count"] == 1

    client_view = client.get("/api/v1/announcements", headers=headers_for(athlete)).json()
    assert [item["title"] for item in client_view] == ["Rules", "News"]
    assert client_view[0]["read_at"] is not None
    assert client_view[1]["read_at"] is None
