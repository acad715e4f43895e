from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlmodel import Session

from hackhub.atlas.client import AtlasNotConfiguredError
from hackhub.models import CleanupReport, Project, ProjectStatus
from hackhub.services import jobs
from hackhub.tests.utils import create_event, create_project, create_team, create_user, register


def submitted_project(db: Session) -> Project:
    event = create_event(db)
    leader = create_user(db)
    register(db, event, leader)
    team = create_team(db, event, leader)
    return create_project(db, event, team, status=ProjectStatus.submitted)


def summary_agent(**run_kwargs) -> MagicMock:
    agent_cls = MagicMock()
    agent_cls.return_value.run = AsyncMock(**run_kwargs)
    return agent_cls


@pytest.mark.asyncio
async def test_summarize_project_stores_summary(db: Session):
    project = submitted_project(db)
    agent_cls = summary_agent(return_value="A real-time snack finder built on MongoDB.")

    with patch.object(jobs, "engine", db.get_bind()), patch.object(jobs, "SummaryAgent", agent_cls):
        await jobs.summarize_project(project.id)

    db.expire_all()
    assert db.get(Project, project.id).ai_summary == "A real-time snack finder built on MongoDB."
    brief = agent_cls.return_value.run.call_args.args[0]
    assert brief.name == project.name
    assert brief.technologies == ["Python", "MongoDB"]


@pytest.mark.asyncio
async def test_summarize_project_swallows_llm_errors(db: Session):
    project = submitted_project(db)
    agent_cls = summary_agent(side_effect=ValueError("Model returned empty content"))

    with patch.object(jobs, "engine", db.get_bind()), patch.object(jobs, "SummaryAgent", agent_cls):
        await jobs.summarize_project(project.id)

    db.expire_all()
    assert db.get(Project, project.id).ai_summary is None


@pytest.mark.asyncio
async def test_cleanup_event_runs_cluster_cleanup(db: Session):
    event = create_event(db)
    client = MagicMock()
    atlas_cls = MagicMock()
    atlas_cls.return_value.__aenter__.return_value = client
    report = CleanupReport(event_id=event.id, event_name=event.name, clusters_found=1, clusters_deleted=1)

    with (
        patch.object(jobs, "engine", db.get_bind()),
        patch.object(jobs, "AtlasClient", atlas_cls),
        patch.object(jobs, "cleanup_event_clusters", AsyncMock(return_value=report)) as cleanup,
    ):
        await jobs.cleanup_event(event.id)

    cleanup.assert_awaited_once()
    assert cleanup.call_args.kwargs["client"] is client
    assert cleanup.call_args.kwargs["event"].id == event.id


@pytest.mark.asyncio
async def test_cleanup_event_without_atlas_credentials(db: Session):
    event = create_event(db)

    with (
        patch.object(jobs, "engine", db.get_bind()),
        patch.object(jobs, "AtlasClient", MagicMock(side_effect=AtlasNotConfiguredError("not configured"))),
        patch.object(jobs, "cleanup_event_clusters", AsyncMock()) as cleanup,
    ):
        await jobs.cleanup_event(event.id)

    cleanup.assert_not_awaited()
