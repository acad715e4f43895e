"""
Work scheduled with FastAPI ``BackgroundTasks``.

Each job opens its own database session because the request session is
closed once the response has been sent. Failures are logged, never raised.
"""
import logging
import uuid

from sqlmodel import Session

from hackhub.ai.artifacts import ProjectBrief
from hackhub.ai.llm_client import LLMNotConfiguredError
from hackhub.ai.summary_agent import SummaryAgent
from hackhub.atlas.client import AtlasApiError, AtlasClient, AtlasNotConfiguredError
from hackhub.atlas.provisioning import cleanup_event_clusters
from hackhub.core.db import engine
from hackhub.models import Event, Project

logger = logging.getLogger(__name__)


async def summarize_project(project_id: uuid.UUID) -> None:
    with Session(engine) as session:
        project = session.get(Project, project_id)
        if not project:
            return
        try:
            summary = await SummaryAgent().run(
                ProjectBrief(
                    name=project.name,
                    description=project.description,
                    technologies=project.technologies or [],
                    innovations=project.innovations,
                )
            )
        except (LLMNotConfiguredError, ValueError) as exc:
            logger.warning("AI summary for project %s failed: %s", project_id, exc)
            return
        except Exception:
            logger.exception("AI summary for project %s failed", project_id)
            return

        project.ai_summary = summary
        session.add(project)
        session.commit()
        logger.info("Stored AI summary for project %s", project_id)


async def cleanup_event(event_id: uuid.UUID) -> None:
    with Session(engine) as session:
        event = session.get(Event, event_id)
        if not event:
            return
        try:
            async with AtlasClient() as client:
                report = await cleanup_event_clusters(session=session, client=client, event=event)
        except (AtlasNotConfiguredError, AtlasApiError) as exc:
            logger.error("Atlas cleanup for event %s failed: %s", event_id, exc)
            return
        if report.errors:
            logger.warning(
                "Atlas cleanup for event %s left %s clusters behind",
                event_id,
                len(report.errors),
            )
