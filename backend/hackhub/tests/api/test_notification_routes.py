from fastapi.testclient import TestClient
from sqlmodel import Session

from hackhub.models import NotificationType
from hackhub.services.notifications import notify, unread_count
from hackhub.tests.utils import API, auth_headers, create_user


def seed(db: Session, user_id, count: int = 2) -> None:
    for i in range(count):
        notify(
            session=db,
            user_ids=[user_id],
            type=NotificationType.general,
            title=f"Notice {i}",
            message="Something happened",
        )


def test_list_notifications(client: TestClient, db: Session) -> None:
    user = create_user(db)
    seed(db, user.id)
    seed(db, create_user(db).id)

    body = client.get(f"{API}/notifications/", headers=auth_headers(user)).json()

    assert body["count"] == 2
    assert body["unread_count"] == 2


def test_mark_read(client: TestClient, db: Session) -> None:
    user = create_user(db)
    seed(db, user.id, count=1)
    notification_id = client.get(f"{API}/notifications/", headers=auth_headers(user)).json()["data"][0]["id"]

    r = client.patch(f"{API}/notifications/{notification_id}/read", headers=auth_headers(user))

    assert r.status_code == 200
    assert r.json()["read"] is True
    assert unread_count(session=db, user_id=user.id) == 0


def test_cannot_read_others_notification(client: TestClient, db: Session) -> None:
    owner = create_user(db)
    seed(db, owner.id, count=1)
    notification_id = client.get(f"{API}/notifications/", headers=auth_headers(owner)).json()["data"][0]["id"]

    r = client.patch(
        f"{API}/notifications/{notification_id}/read", headers=auth_headers(create_user(db))
    )

    assert r.status_code == 404


def test_read_all(client: TestClient, db: Session) -> None:
    user = create_user(db)
    seed(db, user.id, count=3)

    assert client.post(f"{API}/notifications/read-all", headers=auth_headers(user)).status_code == 200

    body = client.get(
        f"{API}/notifications/", headers=auth_headers(user), params={"unread_only": True}
    ).json()
    assert body["count"] == 0
    assert body["unread_count"] == 0


def test_notifications_require_login(client: TestClient) -> None:
    assert client.get(f"{API}/notifications/").status_code == 401
