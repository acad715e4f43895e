from datetime import timedelta
from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient
from sqlmodel import Session, select

from hackhub.models import Notification, NotificationType, ProjectStatus, UserRole, get_datetime_utc
from hackhub.tests.utils import (
    API,
    auth_headers,
    create_event,
    create_project,
    create_team,
    create_user,
    register,
)

PROJECT = {
    "name": "Mongo Maps",
    "description": "Find the nearest hackathon snack table in real time.",
    "category": "Geo",
    "technologies": ["React", "MongoDB"],
    "repo_url": "https://github.com/example/mongo-maps",
}


def test_project_requires_team(client: TestClient, db: Session) -> None:
    event = create_event(db)
    user = create_user(db)
    register(db, event, user)

    r = client.post(f"{API}/events/{event.id}/projects", headers=auth_headers(user), json=PROJECT)

    assert r.status_code == 400
    assert r.json()["error"] == "You must be on a team to create a project"


def test_one_project_per_team(client: TestClient, db: Session) -> None:
    event = create_event(db)
    leader = create_user(db)
    register(db, event, leader)
    create_team(db, event, leader)
    headers = auth_headers(leader)

    assert client.post(f"{API}/events/{event.id}/projects", headers=headers, json=PROJECT).status_code == 200
    r = client.post(f"{API}/events/{event.id}/projects", headers=headers, json=PROJECT)

    assert r.status_code == 400
    assert r.json()["error"] == "Your team already has a project for this event"


def test_repo_url_must_point_at_github(client: TestClient, db: Session) -> None:
    event = create_event(db)
    leader = create_user(db)
    register(db, event, leader)
    create_team(db, event, leader)

    r = client.post(
        f"{API}/events/{event.id}/projects",
        headers=auth_headers(leader),
        json={**PROJECT, "repo_url": "https://gitlab.com/example/mongo-maps"},
    )

    assert r.status_code == 422


def test_submit_after_deadline(client: TestClient, db: Session) -> None:
    now = get_datetime_utc()
    event = create_event(db, submission_deadline=now - timedelta(minutes=5))
    leader = create_user(db)
    register(db, event, leader)
    create_team(db, event, leader)

    r = client.post(
        f"{API}/events/{event.id}/projects",
        headers=auth_headers(leader),
        json={**PROJECT, "status": "submitted"},
    )

    assert r.status_code == 400
    assert r.json()["error"] == "Submission deadline has passed"


def test_submit_notifies_team_and_locks_project(client: TestClient, db: Session) -> None:
    event = create_event(db)
    leader, mate = create_user(db), create_user(db)
    register(db, event, leader)
    register(db, event, mate)
    team = create_team(db, event, leader, mate)
    project = create_project(db, event, team, status=ProjectStatus.draft)
    url = f"{API}/events/{event.id}/projects/{project.id}"

    with patch("hackhub.api.routes.projects.settings.LLM_API_KEY", None):
        r = client.post(f"{url}/submit", headers=auth_headers(mate))

    assert r.status_code == 200
    assert r.json()["status"] == "submitted"
    assert r.json()["submission_date"] is not None
    notified = db.exec(
        select(Notification.user_id).where(Notification.type == NotificationType.project_submitted)
    ).all()
    assert set(notified) == {leader.id, mate.id}

    r = client.patch(url, headers=auth_headers(leader), json={"name": "Too Late"})
    assert r.status_code == 400
    assert r.json()["error"] == "Submitted projects cannot be edited"


def test_submit_schedules_ai_summary(client: TestClient, db: Session) -> None:
    event = create_event(db)
    leader = create_user(db)
    register(db, event, leader)
    team = create_team(db, event, leader)
    project = create_project(db, event, team, status=ProjectStatus.draft)

    with (
        patch("hackhub.api.routes.projects.settings.LLM_API_KEY", "sk-test"),
        patch("hackhub.services.jobs.summarize_project", new_callable=AsyncMock) as summarize,
    ):
        r = client.post(
            f"{API}/events/{event.id}/projects/{project.id}/submit", headers=auth_headers(leader)
        )

    assert r.status_code == 200
    summarize.assert_called_once_with(project.id)


def test_submit_without_llm_skips_summary(client: TestClient, db: Session) -> None:
    event = create_event(db)
    leader = create_user(db)
    register(db, event, leader)
    team = create_team(db, event, leader)

    with (
        patch("hackhub.api.routes.projects.settings.LLM_API_KEY", None),
        patch("hackhub.services.jobs.summarize_project", new_callable=AsyncMock) as summarize,
    ):
        r = client.post(
            f"{API}/events/{event.id}/projects",
            headers=auth_headers(leader),
            json={**PROJECT, "status": "submitted"},
        )

    assert r.status_code == 200
    summarize.assert_not_called()


def test_drafts_visible_to_team_only(client: TestClient, db: Session) -> None:
    event = create_event(db)
    leader, outsider = create_user(db), create_user(db)
    register(db, event, leader)
    team = create_team(db, event, leader)
    project = create_project(db, event, team, status=ProjectStatus.draft)
    url = f"{API}/events/{event.id}/projects/{project.id}"

    assert client.get(url, headers=auth_headers(outsider)).status_code == 404
    assert client.get(url, headers=auth_headers(leader)).status_code == 200
    assert client.get(f"{API}/events/{event.id}/projects").json()["count"] == 0


def test_non_members_cannot_edit(client: TestClient, db: Session) -> None:
    event = create_event(db)
    leader, outsider = create_user(db), create_user(db)
    register(db, event, leader)
    team = create_team(db, event, leader)
    project = create_project(db, event, team, status=ProjectStatus.draft)

    r = client.patch(
        f"{API}/events/{event.id}/projects/{project.id}",
        headers=auth_headers(outsider),
        json={"name": "Hijacked"},
    )

    assert r.status_code == 403


def test_featured_projects_in_gallery(client: TestClient, db: Session) -> None:
    event = create_event(db)
    leader = create_user(db)
    register(db, event, leader)
    team = create_team(db, event, leader)
    project = create_project(db, event, team, name="Star Project")

    r = client.patch(
        f"{API}/projects/{project.id}/featured",
        headers=auth_headers(create_user(db, role=UserRole.admin)),
        json={"is_featured": True},
    )
    assert r.status_code == 200

    gallery = client.get(f"{API}/gallery").json()
    assert [p["name"] for p in gallery["data"]] == ["Star Project"]
    assert gallery["data"][0]["team_name"] == "Byte Club"
