import logging
import uuid
from typing import Any

from fastapi import APIRouter, BackgroundTasks, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlmodel import col, select

from hackhub import crud
from hackhub.api.deps import AdminUser, CurrentUser, EventDep, OptionalUser, SessionDep
from hackhub.core.config import settings
from hackhub.models import (
    Event,
    FeaturedUpdate,
    NotificationType,
    Project,
    ProjectCreate,
    ProjectFeedback,
    ProjectPublic,
    ProjectsPublic,
    ProjectStatus,
    ProjectUpdate,
    Score,
    Team,
    User,
    ensure_utc,
    get_datetime_utc,
)
from hackhub.services import jobs
from hackhub.services.judging import average_scores
from hackhub.services.notifications import notify

router = APIRouter(tags=["projects"])
logger = logging.getLogger(__name__)


def submission_deadline_passed(event: Event) -> bool:
    deadline = event.submission_deadline or event.end_date
    return ensure_utc(deadline) < get_datetime_utc()


def project_public(session: SessionDep, project: Project) -> ProjectPublic:
    team = session.get(Team, project.team_id)
    return ProjectPublic.model_validate(project, update={"team_name": team.name if team else None})


def get_project_or_404(session: SessionDep, event: Event, project_id: uuid.UUID) -> Project:
    project = session.get(Project, project_id)
    if not project or project.event_id != event.id:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


def is_team_member(session: SessionDep, project: Project, user: User | None) -> bool:
    if not user:
        return False
    membership = crud.get_membership(session=session, event_id=project.event_id, user_id=user.id)
    return membership is not None and membership.team_id == project.team_id


def after_submit(
    session: SessionDep, project: Project, user: User, background_tasks: BackgroundTasks
) -> None:
    members = crud.get_team_members(session=session, team_id=project.team_id)
    notify(
        session=session,
        user_ids=[m.user_id for m in members],
        type=NotificationType.project_submitted,
        title="Project submitted",
        message=f"{project.name} was submitted by {user.full_name or user.email}",
        related_event_id=project.event_id,
        related_team_id=project.team_id,
        related_project_id=project.id,
        action_url=f"/events/{project.event_id}/projects/{project.id}",
    )
    if settings.llm_enabled:
        background_tasks.add_task(jobs.summarize_project, project.id)
    else:
        logger.info("LLM not configured, skipping AI summary for project %s", project.id)


@router.post("/events/{event_id}/projects", response_model=ProjectPublic)
def create_project(
    *,
    session: SessionDep,
    event: EventDep,
    current_user: CurrentUser,
    background_tasks: BackgroundTasks,
    project_in: ProjectCreate,
) -> Any:
    """
    Create the team's project for an event, as a draft or straight away submitted.
    """
    membership = crud.get_membership(session=session, event_id=event.id, user_id=current_user.id)
    if not membership:
        raise HTTPException(status_code=400, detail="You must be on a team to create a project")
    existing = session.exec(
        select(Project.id).where(Project.event_id == event.id, Project.team_id == membership.team_id)
    ).first()
    if existing:
        raise HTTPException(
            status_code=400, detail="Your team already has a project for this event"
        )
    submitting = project_in.status == ProjectStatus.submitted
    if submitting and submission_deadline_passed(event):
        raise HTTPException(status_code=400, detail="Submission deadline has passed")

    now = get_datetime_utc()
    project = Project.model_validate(
        crud.dump_document(project_in),
        update={
            "event_id": event.id,
            "team_id": membership.team_id,
            "submission_date": now if submitting else None,
            "last_modified": now,
        },
    )
    session.add(project)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="Your team already has a project for this event")
    session.refresh(project)

    if submitting:
        after_submit(session, project, current_user, background_tasks)
        session.refresh(project)
    return project_public(session, project)


@router.get("/events/{event_id}/projects", response_model=ProjectsPublic)
def read_projects(
    session: SessionDep,
    event: EventDep,
    current_user: OptionalUser,
    status: ProjectStatus | None = None,
) -> Any:
    """
    Projects of an event. Drafts are only listed for staff.
    """
    statement = select(Project).where(Project.event_id == event.id)
    if status:
        statement = statement.where(Project.status == status)
    if not (current_user and current_user.is_staff):
        statement = statement.where(Project.status != ProjectStatus.draft)
    projects = session.exec(statement.order_by(col(Project.created_at).desc())).all()
    return ProjectsPublic(data=[project_public(session, p) for p in projects], count=len(projects))


@router.get("/events/{event_id}/projects/{project_id}", response_model=ProjectPublic)
def read_project(
    session: SessionDep, event: EventDep, project_id: uuid.UUID, current_user: OptionalUser
) -> Any:
    project = get_project_or_404(session, event, project_id)
    if project.status == ProjectStatus.draft:
        allowed = current_user and (current_user.is_staff or is_team_member(session, project, current_user))
        if not allowed:
            raise HTTPException(status_code=404, detail="Project not found")
    return project_public(session, project)


@router.patch("/events/{event_id}/projects/{project_id}", response_model=ProjectPublic)
def update_project(
    *,
    session: SessionDep,
    event: EventDep,
    project_id: uuid.UUID,
    current_user: CurrentUser,
    project_in: ProjectUpdate,
) -> Any:
    project = get_project_or_404(session, event, project_id)
    if not is_team_member(session, project, current_user):
        raise HTTPException(status_code=403, detail="Only team members can edit the project")
    if project.status != ProjectStatus.draft:
        raise HTTPException(status_code=400, detail="Submitted projects cannot be edited")
    project.sqlmodel_update(
        crud.dump_document(project_in, exclude_unset=True),
        update={"last_modified": get_datetime_utc()},
    )
    session.add(project)
    session.commit()
    session.refresh(project)
    return project_public(session, project)


@router.post("/events/{event_id}/projects/{project_id}/submit", response_model=ProjectPublic)
def submit_project(
    *,
    session: SessionDep,
    event: EventDep,
    project_id: uuid.UUID,
    current_user: CurrentUser,
    background_tasks: BackgroundTasks,
) -> Any:
    project = get_project_or_404(session, event, project_id)
    if not is_team_member(session, project, current_user):
        raise HTTPException(status_code=403, detail="Only team members can submit the project")
    if project.status != ProjectStatus.draft:
        raise HTTPException(status_code=400, detail="Project has already been submitted")
    if submission_deadline_passed(event):
        raise HTTPException(status_code=400, detail="Submission deadline has passed")

    now = get_datetime_utc()
    project.status = ProjectStatus.submitted
    project.submission_date = now
    project.last_modified = now
    session.add(project)
    session.commit()
    session.refresh(project)
    after_submit(session, project, current_user, background_tasks)
    session.refresh(project)
    return project_public(session, project)


@router.get("/events/{event_id}/projects/{project_id}/feedback", response_model=ProjectFeedback)
def read_project_feedback(
    session: SessionDep, event: EventDep, project_id: uuid.UUID, current_user: CurrentUser
) -> Any:
    """
    Judges' feedback for a team, released with the event results.
    """
    project = get_project_or_404(session, event, project_id)
    if not (current_user.is_staff or is_team_member(session, project, current_user)):
        raise HTTPException(status_code=403, detail="Only team members can view feedback")
    if not event.results_published and not current_user.is_staff:
        raise HTTPException(status_code=403, detail="Feedback is available once results are published")

    scores = session.exec(select(Score).where(Score.project_id == project.id)).all()
    return ProjectFeedback(
        project_id=project.id,
        ai_feedback=project.ai_feedback,
        average_scores=average_scores(scores, event.rubric) if scores else {},
        judge_comments=[s.comments for s in scores if s.comments.strip()],
    )


@router.patch("/projects/{project_id}/featured", response_model=ProjectPublic)
def set_featured(
    *, session: SessionDep, project_id: uuid.UUID, current_user: AdminUser, body: FeaturedUpdate
) -> Any:
    project = session.get(Project, project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    project.is_featured = body.is_featured
    session.add(project)
    session.commit()
    session.refresh(project)
    return project_public(session, project)


@router.get("/gallery", response_model=ProjectsPublic)
def read_gallery(session: SessionDep, skip: int = 0, limit: int = 50) -> Any:
    """
    Featured projects across all events.
    """
    projects = session.exec(
        select(Project)
        .where(Project.is_featured == True, Project.status != ProjectStatus.draft)  # noqa: E712
        .order_by(col(Project.submission_date).desc())
    ).all()
    page = projects[skip : skip + limit]
    return ProjectsPublic(data=[project_public(session, p) for p in page], count=len(projects))
