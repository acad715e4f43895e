from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient
from sqlmodel import Session

from hackhub.models import (
    AssignmentStatus,
    JudgeAssignment,
    Project,
    ProjectStatus,
    Score,
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

GOOD_SCORES = {"innovation": 8, "technical": 7, "impact": 9, "presentation": 6}


def setup_judging(db: Session):
    event = create_event(db)
    leader = create_user(db)
    register(db, event, leader)
    team = create_team(db, event, leader)
    project = create_project(db, event, team)
    judge = create_user(db, role=UserRole.judge)
    return event, project, judge


def assign(db: Session, event, project, judge) -> JudgeAssignment:
    assignment = JudgeAssignment(event_id=event.id, project_id=project.id, judge_id=judge.id)
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    return assignment


def test_assign_judges_skips_existing(client: TestClient, db: Session) -> None:
    event, project, judge = setup_judging(db)
    headers = auth_headers(create_user(db, role=UserRole.organizer))
    body = {"judge_id": str(judge.id), "project_ids": [str(project.id)]}

    first = client.post(f"{API}/admin/events/{event.id}/assignments", headers=headers, json=body)
    second = client.post(f"{API}/admin/events/{event.id}/assignments", headers=headers, json=body)

    assert first.json()["created"] == 1
    assert second.json() == {
        "message": "Assigned 0 project(s), skipped 1 existing",
        "created": 0,
        "skipped": 1,
    }


def test_assign_rejects_non_judges(client: TestClient, db: Session) -> None:
    event, project, _ = setup_judging(db)
    participant = create_user(db)

    r = client.post(
        f"{API}/admin/events/{event.id}/assignments",
        headers=auth_headers(create_user(db, role=UserRole.organizer)),
        json={"judge_id": str(participant.id), "project_ids": [str(project.id)]},
    )

    assert r.status_code == 400


def test_scoring_requires_assignment(client: TestClient, db: Session) -> None:
    event, project, judge = setup_judging(db)

    r = client.post(
        f"{API}/judging/{event.id}/score",
        headers=auth_headers(judge),
        json={"project_id": str(project.id), "scores": GOOD_SCORES},
    )

    assert r.status_code == 403
    assert r.json()["error"] == "You are not assigned to judge this project"


def test_scores_outside_range_are_rejected(client: TestClient, db: Session) -> None:
    event, project, judge = setup_judging(db)
    assign(db, event, project, judge)

    r = client.post(
        f"{API}/judging/{event.id}/score",
        headers=auth_headers(judge),
        json={"project_id": str(project.id), "scores": {**GOOD_SCORES, "impact": 11}},
    )

    assert r.status_code == 400
    assert "between 1 and 10" in r.json()["error"]


def test_rescoring_replaces_previous_score(client: TestClient, db: Session) -> None:
    event, project, judge = setup_judging(db)
    assignment = assign(db, event, project, judge)
    url = f"{API}/judging/{event.id}/score"
    headers = auth_headers(judge)

    first = client.post(url, headers=headers, json={"project_id": str(project.id), "scores": GOOD_SCORES})
    second = client.post(
        url,
        headers=headers,
        json={"project_id": str(project.id), "scores": {k: 10 for k in GOOD_SCORES}, "comments": "Great"},
    )

    assert first.status_code == 200
    assert first.json()["total_score"] == 30
    assert second.json()["total_score"] == 40
    assert second.json()["id"] == first.json()["id"]
    db.expire_all()
    assert db.get(JudgeAssignment, assignment.id).status == AssignmentStatus.completed
    assert db.get(Project, project.id).status == ProjectStatus.under_review


def test_judge_sees_assigned_projects(client: TestClient, db: Session) -> None:
    event, project, judge = setup_judging(db)
    assign(db, event, project, judge)

    body = client.get(f"{API}/judging/{event.id}/projects", headers=auth_headers(judge)).json()

    assert body["criteria"] == ["innovation", "technical", "impact", "presentation"]
    assert body["projects"][0]["project"]["id"] == str(project.id)
    assert body["projects"][0]["has_scored"] is False


def test_participants_cannot_judge(client: TestClient, db: Session) -> None:
    event, _, _ = setup_judging(db)
    r = client.get(f"{API}/judging/{event.id}/projects", headers=auth_headers(create_user(db)))
    assert r.status_code == 403


def test_generate_feedback_without_llm(client: TestClient, db: Session) -> None:
    event, _, _ = setup_judging(db)

    with patch("hackhub.ai.llm_client.settings.LLM_API_KEY", None):
        r = client.post(
            f"{API}/admin/events/{event.id}/generate-feedback",
            headers=auth_headers(create_user(db, role=UserRole.admin)),
        )

    assert r.status_code == 503


def test_generate_feedback_marks_projects_judged(client: TestClient, db: Session) -> None:
    event, project, judge = setup_judging(db)
    db.add(
        Score(
            event_id=event.id,
            project_id=project.id,
            judge_id=judge.id,
            scores=GOOD_SCORES,
            total_score=30,
            comments="Solid demo",
        )
    )
    db.commit()

    with (
        patch("hackhub.ai.llm_client.settings.LLM_API_KEY", "dummy_key"),
        patch("hackhub.ai.llm_client.AsyncOpenAI"),
        patch("hackhub.api.routes.judging.FeedbackAgent.run", new=AsyncMock(return_value="Nice work.")),
    ):
        r = client.post(
            f"{API}/admin/events/{event.id}/generate-feedback",
            headers=auth_headers(create_user(db, role=UserRole.admin)),
        )

    assert r.json() == {"generated": 1, "skipped": 0, "failed": 0}
    db.expire_all()
    refreshed = db.get(Project, project.id)
    assert refreshed.ai_feedback == "Nice work."
    assert refreshed.status == ProjectStatus.judged


def test_admin_results_include_individual_scores(client: TestClient, db: Session) -> None:
    event, project, judge = setup_judging(db)
    assign(db, event, project, judge)
    client.post(
        f"{API}/judging/{event.id}/score",
        headers=auth_headers(judge),
        json={"project_id": str(project.id), "scores": GOOD_SCORES},
    )

    body = client.get(
        f"{API}/admin/events/{event.id}/results",
        headers=auth_headers(create_user(db, role=UserRole.organizer)),
    ).json()

    assert body["results"][0]["rank"] == 1
    assert body["results"][0]["average_total"] == 30.0
    assert body["results"][0]["individual_scores"][0]["judge_id"] == str(judge.id)
