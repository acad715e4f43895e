from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, select

from hackhub.models import (
    EventStatus,
    Notification,
    NotificationType,
    RegistrationFormConfig,
    Team,
    UserRole,
    get_datetime_utc,
)
from hackhub.tests.utils import (
    API,
    auth_headers,
    create_event,
    create_team,
    create_user,
    register,
)

ATLAS_KEYS = {"ATLAS_PUBLIC_KEY": "public", "ATLAS_PRIVATE_KEY": "private", "ATLAS_ORG_ID": "org-1"}


def test_register_creates_profile_and_notification(client: TestClient, db: Session) -> None:
    event = create_event(db)
    user = create_user(db, full_name="Ada Lovelace")

    r = client.post(
        f"{API}/events/{event.id}/register",
        headers=auth_headers(user),
        json={"skills": ["Python", "MongoDB"], "experience_level": "intermediate"},
    )

    assert r.status_code == 200
    assert r.json()["status"] == "registered"
    notification = db.exec(select(Notification).where(Notification.user_id == user.id)).one()
    assert notification.type == NotificationType.registration_confirmed
    assert event.name in notification.message


def test_register_twice_is_rejected(client: TestClient, db: Session) -> None:
    event = create_event(db)
    user = create_user(db)
    register(db, event, user)

    r = client.post(f"{API}/events/{event.id}/register", headers=auth_headers(user), json={})

    assert r.status_code == 400
    assert r.json() == {"error": "Already registered for this event"}


def test_register_when_full(client: TestClient, db: Session) -> None:
    event = create_event(db, capacity=1)
    register(db, event, create_user(db))

    r = client.post(f"{API}/events/{event.id}/register", headers=auth_headers(create_user(db)), json={})

    assert r.status_code == 400
    assert r.json()["error"] == "Event is at full capacity"


def test_register_after_deadline(client: TestClient, db: Session) -> None:
    now = get_datetime_utc()
    event = create_event(db, registration_deadline=now - timedelta(hours=1))

    r = client.post(f"{API}/events/{event.id}/register", headers=auth_headers(create_user(db)), json={})

    assert r.status_code == 400
    assert r.json()["error"] == "Registration deadline has passed"


def test_register_for_draft_event(client: TestClient, db: Session) -> None:
    event = create_event(db, status=EventStatus.draft)

    r = client.post(f"{API}/events/{event.id}/register", headers=auth_headers(create_user(db)), json={})

    assert r.status_code == 400
    assert r.json()["error"] == "Event is not open for registration"


def test_register_requires_custom_answers(client: TestClient, db: Session) -> None:
    form = RegistrationFormConfig(
        name="With Questions",
        slug="with-questions",
        tier1={
            "show_experience_level": True,
            "custom_questions": [
                {"id": "shirt", "label": "T-shirt size", "type": "select", "options": ["S", "M", "L"], "required": True}
            ],
        },
        tier2={"enabled": False},
        tier3={"enabled": False},
    )
    db.add(form)
    db.commit()
    event = create_event(db, registration_form_id=form.id)
    headers = auth_headers(create_user(db))

    r = client.post(f"{API}/events/{event.id}/register", headers=headers, json={})
    assert r.status_code == 400
    assert r.json()["error"] == "Please answer the required question: T-shirt size"

    r = client.post(
        f"{API}/events/{event.id}/register", headers=headers, json={"custom_responses": {"shirt": "M"}}
    )
    assert r.status_code == 200
    assert r.json()["custom_responses"] == {"shirt": "M"}


def test_unregister_leader_with_teammates_is_blocked(client: TestClient, db: Session) -> None:
    event = create_event(db)
    leader, mate = create_user(db), create_user(db)
    register(db, event, leader)
    register(db, event, mate)
    create_team(db, event, leader, mate)

    r = client.delete(f"{API}/events/{event.id}/register", headers=auth_headers(leader))

    assert r.status_code == 400


def test_unregister_last_member_removes_team(client: TestClient, db: Session) -> None:
    event = create_event(db)
    user = create_user(db)
    register(db, event, user)
    team = create_team(db, event, user)
    team_id = team.id

    r = client.delete(f"{API}/events/{event.id}/register", headers=auth_headers(user))

    assert r.status_code == 200
    db.expire_all()
    assert db.get(Team, team_id) is None


def test_status_must_move_one_step(client: TestClient, db: Session) -> None:
    event = create_event(db, status=EventStatus.draft)
    headers = auth_headers(create_user(db, role=UserRole.organizer))

    r = client.patch(f"{API}/events/{event.id}", headers=headers, json={"status": "concluded"})
    assert r.status_code == 409

    r = client.patch(f"{API}/events/{event.id}", headers=headers, json={"status": "open"})
    assert r.status_code == 200
    assert r.json()["status"] == "open"


@pytest.mark.parametrize("auto_cleanup,queued", [(True, True), (False, False)])
def test_concluding_event_queues_atlas_cleanup(
    client: TestClient, db: Session, auto_cleanup: bool, queued: bool
) -> None:
    event = create_event(
        db,
        status=EventStatus.in_progress,
        atlas_provisioning={"enabled": True, "auto_cleanup_on_event_end": auto_cleanup},
    )
    headers = auth_headers(create_user(db, role=UserRole.organizer))

    with (
        patch.multiple("hackhub.api.routes.events.settings", **ATLAS_KEYS),
        patch("hackhub.services.jobs.cleanup_event", new_callable=AsyncMock) as cleanup,
    ):
        r = client.patch(f"{API}/events/{event.id}", headers=headers, json={"status": "concluded"})

    assert r.status_code == 200
    if queued:
        cleanup.assert_called_once_with(event.id)
    else:
        cleanup.assert_not_called()


def test_update_rejects_end_before_start(client: TestClient, db: Session) -> None:
    event = create_event(db)
    headers = auth_headers(create_user(db, role=UserRole.admin))

    r = client.patch(
        f"{API}/events/{event.id}",
        headers=headers,
        json={"end_date": (get_datetime_utc() - timedelta(days=30)).isoformat()},
    )

    assert r.status_code == 400
    assert r.json()["error"] == "End date must be after start date"


def test_participants_cannot_create_events(client: TestClient, db: Session) -> None:
    r = client.post(f"{API}/events/", headers=auth_headers(create_user(db)), json={})
    assert r.status_code == 403


def test_drafts_hidden_from_public(client: TestClient, db: Session) -> None:
    create_event(db, name="Open Event")
    create_event(db, name="Secret Draft", status=EventStatus.draft)

    public = client.get(f"{API}/events/").json()
    staff = client.get(
        f"{API}/events/", headers=auth_headers(create_user(db, role=UserRole.organizer))
    ).json()

    assert [e["name"] for e in public["data"]] == ["Open Event"]
    assert staff["count"] == 2


def test_event_detail_counts_spots(client: TestClient, db: Session) -> None:
    event = create_event(db, capacity=3)
    register(db, event, create_user(db))

    body = client.get(f"{API}/events/{event.id}").json()

    assert body["registered_count"] == 1
    assert body["spots_left"] == 2


def test_results_hidden_until_published(client: TestClient, db: Session) -> None:
    event = create_event(db)

    r = client.get(f"{API}/events/{event.id}/results")
    assert r.status_code == 403
    assert r.json() == {"error": "Results have not been published yet"}

    staff = auth_headers(create_user(db, role=UserRole.organizer))
    assert client.post(f"{API}/events/{event.id}/publish-results", headers=staff).status_code == 200
    r = client.get(f"{API}/events/{event.id}/results")
    assert r.status_code == 200
    assert r.json()["published"] is True


def test_export_registrations_csv(client: TestClient, db: Session) -> None:
    event = create_event(db)
    register(db, event, create_user(db, full_name="Grace Hopper"))

    r = client.get(
        f"{API}/events/{event.id}/registrations/export",
        headers=auth_headers(create_user(db, role=UserRole.organizer)),
    )

    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    lines = r.text.strip().splitlines()
    assert lines[0].startswith("Name,Email")
    assert "Grace Hopper" in lines[1]


def test_landing_slug_conflict(client: TestClient, db: Session) -> None:
    first, second = create_event(db), create_event(db, name="Autumn Hack")
    headers = auth_headers(create_user(db, role=UserRole.organizer))

    r = client.put(
        f"{API}/events/{first.id}/landing-page",
        headers=headers,
        json={"slug": "spring-hack", "template": "modern", "published": True},
    )
    assert r.status_code == 200

    r = client.put(
        f"{API}/events/{second.id}/landing-page",
        headers=headers,
        json={"slug": "spring-hack", "template": "modern"},
    )
    assert r.status_code == 409
    assert r.json()["error"] == "This landing page URL is already in use"

    page = client.get(f"{API}/landing-pages/spring-hack")
    assert page.status_code == 200
    assert page.json()["template"]["slug"] == "modern"


def test_waitlist_upserts_by_email(client: TestClient, db: Session) -> None:
    event = create_event(db)
    for name in ("Linus", "Linus T"):
        r = client.post(
            f"{API}/events/{event.id}/waitlist", json={"name": name, "email": "Linus@Example.com"}
        )
        assert r.status_code == 200
