import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from hackhub.models import (
    AtlasCluster,
    ClusterStatus,
    Notification,
    NotificationType,
    Project,
    ProjectStatus,
    Score,
    Team,
    TeamNote,
    TeamStatus,
    UserRole,
)
from hackhub.tests.utils import (
    API,
    auth_headers,
    create_event,
    create_project,
    create_team,
    create_user,
    register,
)


def test_create_team_requires_registration(client: TestClient, db: Session) -> None:
    event = create_event(db)
    user = create_user(db)

    r = client.post(f"{API}/events/{event.id}/teams/", headers=auth_headers(user), json={"name": "Night Owls"})

    assert r.status_code == 400
    assert r.json()["error"] == "You must be registered for this event to create a team"


def test_creator_becomes_leader_and_member(client: TestClient, db: Session) -> None:
    event = create_event(db)
    user = create_user(db)
    register(db, event, user)

    r = client.post(
        f"{API}/events/{event.id}/teams/",
        headers=auth_headers(user),
        json={"name": "Night Owls", "max_members": 4, "desired_skills": ["React"]},
    )

    assert r.status_code == 200
    body = r.json()
    assert body["leader_id"] == str(user.id)
    assert body["member_count"] == 1
    assert [m["user_id"] for m in body["members"]] == [str(user.id)]

    again = client.post(f"{API}/events/{event.id}/teams/", headers=auth_headers(user), json={"name": "Second"})
    assert again.status_code == 400


def test_join_full_team(client: TestClient, db: Session) -> None:
    event = create_event(db)
    leader, mate, late = create_user(db), create_user(db), create_user(db)
    for user in (leader, mate, late):
        register(db, event, user)
    team = create_team(db, event, leader, mate, max_members=2)

    r = client.post(f"{API}/events/{event.id}/teams/{team.id}/join", headers=auth_headers(late))

    assert r.status_code == 400
    assert r.json()["error"] == "Team is full"


def test_join_notifies_leader_and_closes_team(client: TestClient, db: Session) -> None:
    event = create_event(db)
    leader, joiner = create_user(db), create_user(db)
    register(db, event, leader)
    register(db, event, joiner)
    team = create_team(db, event, leader, max_members=2)

    r = client.post(f"{API}/events/{event.id}/teams/{team.id}/join", headers=auth_headers(joiner))

    assert r.status_code == 200
    assert r.json()["member_count"] == 2
    assert r.json()["looking_for_members"] is False
    notification = db.exec(select(Notification).where(Notification.user_id == leader.id)).one()
    assert notification.type == NotificationType.team_member_joined


def test_leader_must_transfer_before_leaving(client: TestClient, db: Session) -> None:
    event = create_event(db)
    leader, mate = create_user(db), create_user(db)
    register(db, event, leader)
    register(db, event, mate)
    team = create_team(db, event, leader, mate)

    r = client.post(f"{API}/events/{event.id}/teams/{team.id}/leave", headers=auth_headers(leader))
    assert r.status_code == 400
    assert r.json()["error"] == "Team leader must transfer leadership before leaving"

    r = client.post(
        f"{API}/events/{event.id}/teams/{team.id}/transfer-leader",
        headers=auth_headers(leader),
        json={"user_id": str(mate.id)},
    )
    assert r.status_code == 200
    assert r.json()["leader_id"] == str(mate.id)

    r = client.post(f"{API}/events/{event.id}/teams/{team.id}/leave", headers=auth_headers(leader))
    assert r.status_code == 200


def test_transfer_to_outsider_is_rejected(client: TestClient, db: Session) -> None:
    event = create_event(db)
    leader, outsider = create_user(db), create_user(db)
    register(db, event, leader)
    team = create_team(db, event, leader)

    r = client.post(
        f"{API}/events/{event.id}/teams/{team.id}/transfer-leader",
        headers=auth_headers(leader),
        json={"user_id": str(outsider.id)},
    )

    assert r.status_code == 400
    assert r.json()["error"] == "New leader must be a member of the team"


def test_last_member_leaving_deletes_team(client: TestClient, db: Session) -> None:
    event = create_event(db)
    leader = create_user(db)
    register(db, event, leader)
    team = create_team(db, event, leader)
    team_id = team.id

    r = client.post(f"{API}/events/{event.id}/teams/{team_id}/leave", headers=auth_headers(leader))

    assert r.status_code == 200
    db.expire_all()
    assert db.get(Team, team_id) is None


def solo_team_with_judged_project(db: Session):
    event = create_event(db)
    leader = create_user(db)
    register(db, event, leader)
    team = create_team(db, event, leader)
    project = create_project(db, event, team, status=ProjectStatus.under_review)
    judge = create_user(db, role=UserRole.judge)
    db.add(
        Score(
            event_id=event.id,
            project_id=project.id,
            judge_id=judge.id,
            scores={"Innovation": 9, "Execution": 9, "Impact": 9, "Presentation": 9},
            total_score=36,
        )
    )
    db.add(
        AtlasCluster(
            event_id=event.id,
            team_id=team.id,
            project_id=project.id,
            atlas_project_id="group-1",
            atlas_project_name="mh-team",
            atlas_cluster_name="hackathon-cluster",
            status=ClusterStatus.active,
        )
    )
    db.commit()
    return event, leader, team, project


def test_last_member_leaving_keeps_team_with_project(client: TestClient, db: Session) -> None:
    event, leader, team, project = solo_team_with_judged_project(db)
    team_id, project_id = team.id, project.id

    r = client.post(f"{API}/events/{event.id}/teams/{team_id}/leave", headers=auth_headers(leader))

    assert r.status_code == 200
    assert r.json()["message"] == "Left team and team was closed (it still owns a project)"
    db.expire_all()
    team = db.get(Team, team_id)
    assert team.status == TeamStatus.inactive
    assert team.looking_for_members is False
    assert db.get(Project, project_id) is not None
    assert len(db.exec(select(Score).where(Score.project_id == project_id)).all()) == 1
    assert len(db.exec(select(AtlasCluster).where(AtlasCluster.team_id == team_id)).all()) == 1


def test_unregister_keeps_team_with_project(client: TestClient, db: Session) -> None:
    event, leader, team, project = solo_team_with_judged_project(db)
    team_id = team.id

    r = client.delete(f"{API}/events/{event.id}/register", headers=auth_headers(leader))

    assert r.status_code == 200
    db.expire_all()
    assert db.get(Team, team_id).status == TeamStatus.inactive
    assert db.get(Project, project.id) is not None


def test_closed_team_cannot_be_joined(client: TestClient, db: Session) -> None:
    event, leader, team, _ = solo_team_with_judged_project(db)
    client.post(f"{API}/events/{event.id}/teams/{team.id}/leave", headers=auth_headers(leader))
    newcomer = create_user(db)
    register(db, event, newcomer)

    r = client.post(f"{API}/events/{event.id}/teams/{team.id}/join", headers=auth_headers(newcomer))

    assert r.status_code == 400
    assert r.json()["error"] == "This team is no longer active"


def test_database_refuses_to_drop_team_with_project(db: Session) -> None:
    event = create_event(db)
    leader = create_user(db)
    register(db, event, leader)
    team = create_team(db, event, leader)
    create_project(db, event, team)

    db.delete(team)
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_only_leader_updates_team(client: TestClient, db: Session) -> None:
    event = create_event(db)
    leader, mate = create_user(db), create_user(db)
    register(db, event, leader)
    register(db, event, mate)
    team = create_team(db, event, leader, mate)
    url = f"{API}/events/{event.id}/teams/{team.id}"

    assert client.patch(url, headers=auth_headers(mate), json={"name": "Renamed"}).status_code == 403
    r = client.patch(url, headers=auth_headers(leader), json={"max_members": 1})
    assert r.status_code == 400


def test_notes_are_private_to_members(client: TestClient, db: Session) -> None:
    event = create_event(db)
    leader, mate, outsider = create_user(db), create_user(db), create_user(db)
    register(db, event, leader)
    register(db, event, mate)
    team = create_team(db, event, leader, mate)
    url = f"{API}/events/{event.id}/teams/{team.id}/notes"

    r = client.post(url, headers=auth_headers(leader), json={"content": "Standup at 9"})
    assert r.status_code == 200
    note_id = r.json()["id"]
    reply = client.post(
        url, headers=auth_headers(mate), json={"content": "Works for me", "parent_note_id": note_id}
    )
    assert reply.status_code == 200

    assert client.get(url, headers=auth_headers(outsider)).status_code == 403
    assert len(client.get(url, headers=auth_headers(mate)).json()) == 2

    assert client.delete(f"{url}/{note_id}", headers=auth_headers(mate)).status_code == 403
    assert client.delete(f"{url}/{note_id}", headers=auth_headers(leader)).status_code == 200
    db.expire_all()
    assert db.exec(select(TeamNote).where(TeamNote.team_id == team.id)).all() == []
