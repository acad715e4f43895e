import uuid
from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient
from sqlmodel import Session, select

from hackhub.ai.artifacts import GeneratedIdea, GeneratedIdeas
from hackhub.models import ProjectIdea
from hackhub.tests.utils import API, auth_headers, create_event, create_team, create_user, register

IDEA = GeneratedIdea(
    name="TaskPilot",
    tagline="Your backlog, triaged",
    problem_statement="Teams drown in tickets.",
    solution="An assistant that groups and ranks tickets.",
)


def generate(client: TestClient, user, event, count: int = 1):
    with (
        patch("hackhub.ai.llm_client.settings.LLM_API_KEY", "dummy_key"),
        patch("hackhub.ai.llm_client.AsyncOpenAI"),
        patch(
            "hackhub.api.routes.ideas.IdeaAgent.run",
            new=AsyncMock(return_value=GeneratedIdeas(ideas=[IDEA] * count)),
        ),
    ):
        return client.post(
            f"{API}/project-suggestions/generate",
            headers=auth_headers(user),
            json={"event_id": str(event.id), "count": count, "inputs": {"team_size": 2}},
        )


def test_generate_stores_ideas_for_team(client: TestClient, db: Session) -> None:
    leader = create_user(db)
    event = create_event(db, tags=["ai"])
    register(db, event, leader)
    team = create_team(db, event, leader)

    r = generate(client, leader, event, count=2)

    assert r.status_code == 200
    assert r.json()["count"] == 2
    stored = db.exec(select(ProjectIdea)).all()
    assert {i.team_id for i in stored} == {team.id}
    assert stored[0].idea["name"] == "TaskPilot"


def test_generate_without_llm(client: TestClient, db: Session) -> None:
    user = create_user(db)
    event = create_event(db)

    with patch("hackhub.ai.llm_client.settings.LLM_API_KEY", None):
        r = client.post(
            f"{API}/project-suggestions/generate", headers=auth_headers(user), json={"event_id": str(event.id)}
        )

    assert r.status_code == 503


def test_generate_failure_is_bad_gateway(client: TestClient, db: Session) -> None:
    user = create_user(db)
    event = create_event(db)

    with (
        patch("hackhub.ai.llm_client.settings.LLM_API_KEY", "dummy_key"),
        patch("hackhub.ai.llm_client.AsyncOpenAI"),
        patch("hackhub.api.routes.ideas.IdeaAgent.run", new=AsyncMock(side_effect=ValueError("bad json"))),
    ):
        r = client.post(
            f"{API}/project-suggestions/generate", headers=auth_headers(user), json={"event_id": str(event.id)}
        )

    assert r.status_code == 502


def test_save_and_list(client: TestClient, db: Session) -> None:
    user = create_user(db)
    event = create_event(db)
    idea_id = generate(client, user, event).json()["data"][0]["id"]

    assert client.post(f"{API}/project-suggestions/{idea_id}/save", headers=auth_headers(create_user(db))).status_code == 404
    assert client.post(f"{API}/project-suggestions/{idea_id}/save", headers=auth_headers(user)).json()["saved"] is True

    saved = client.get(
        f"{API}/project-suggestions/saved", headers=auth_headers(user), params={"event_id": str(event.id)}
    ).json()
    assert saved["count"] == 1


def test_builder_prompt_for_teammate(client: TestClient, db: Session) -> None:
    leader, member = create_user(db), create_user(db)
    event = create_event(db)
    register(db, event, leader)
    register(db, event, member)
    create_team(db, event, leader, member)
    idea_id = generate(client, leader, event).json()["data"][0]["id"]

    r = client.get(
        f"{API}/project-suggestions/{idea_id}/builder-prompt",
        headers=auth_headers(member),
        params={"variant": "backend-first"},
    )

    assert r.status_code == 200
    body = r.json()
    assert body["variant"] == "backend-first"
    assert body["enhanced"] is False
    assert body["prompt"].startswith("# Project: TaskPilot")
    idea = db.get(ProjectIdea, uuid.UUID(idea_id))
    db.refresh(idea)
    assert "backend-first" in idea.builder_prompts


def test_builder_prompt_hidden_from_outsiders(client: TestClient, db: Session) -> None:
    user = create_user(db)
    event = create_event(db)
    idea_id = generate(client, user, event).json()["data"][0]["id"]

    r = client.get(f"{API}/project-suggestions/{idea_id}/builder-prompt", headers=auth_headers(create_user(db)))

    assert r.status_code == 404


def test_enhance_without_llm(client: TestClient, db: Session) -> None:
    user = create_user(db)
    event = create_event(db)
    idea_id = generate(client, user, event).json()["data"][0]["id"]

    with patch("hackhub.ai.llm_client.settings.LLM_API_KEY", None):
        r = client.get(
            f"{API}/project-suggestions/{idea_id}/builder-prompt",
            headers=auth_headers(user),
            params={"enhance": True},
        )

    assert r.status_code == 503
