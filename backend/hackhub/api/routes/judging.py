import logging
import uuid
from typing import Any

from fastapi import APIRouter, HTTPException
from openai import OpenAIError
from sqlmodel import col, select

from hackhub.ai.artifacts import JudgeFeedbackInput, ProjectBrief
from hackhub.ai.feedback_agent import FeedbackAgent
from hackhub.ai.llm_client import LLMNotConfiguredError
from hackhub.api.deps import EventDep, JudgeUser, SessionDep, StaffUser
from hackhub.api.routes.projects import project_public
from hackhub.models import (
    JUDGE_ROLES,
    AssignmentResult,
    AssignmentStatus,
    EventResults,
    FeedbackGenerationReport,
    JudgeAssignment,
    JudgeAssignmentCreate,
    JudgeAssignmentPublic,
    JudgingProject,
    JudgingProjects,
    Message,
    NotificationType,
    Project,
    ProjectStatus,
    Score,
    ScorePublic,
    ScoreSubmit,
    User,
    get_datetime_utc,
)
from hackhub.services.judging import average_scores, event_results, validate_scores
from hackhub.services.notifications import notify

router = APIRouter(tags=["judging"])
logger = logging.getLogger(__name__)

FEEDBACK_STATUSES = (ProjectStatus.submitted, ProjectStatus.under_review, ProjectStatus.judged)


@router.get("/admin/events/{event_id}/assignments", response_model=list[JudgeAssignmentPublic])
def read_assignments(
    session: SessionDep, event: EventDep, current_user: StaffUser, judge_id: uuid.UUID | None = None
) -> Any:
    statement = select(JudgeAssignment).where(JudgeAssignment.event_id == event.id)
    if judge_id:
        statement = statement.where(JudgeAssignment.judge_id == judge_id)
    assignments = session.exec(statement.order_by(col(JudgeAssignment.assigned_at))).all()

    judges = {
        u.id: u
        for u in session.exec(
            select(User).where(col(User.id).in_({a.judge_id for a in assignments}))
        ).all()
    } if assignments else {}
    projects = {
        p.id: p
        for p in session.exec(
            select(Project).where(col(Project.id).in_({a.project_id for a in assignments}))
        ).all()
    } if assignments else {}
    return [
        JudgeAssignmentPublic.model_validate(
            a,
            update={
                "judge_name": judges[a.judge_id].full_name if a.judge_id in judges else None,
                "judge_email": judges[a.judge_id].email if a.judge_id in judges else None,
                "project_name": projects[a.project_id].name if a.project_id in projects else None,
            },
        )
        for a in assignments
    ]


@router.post("/admin/events/{event_id}/assignments", response_model=AssignmentResult)
def create_assignments(
    *, session: SessionDep, event: EventDep, current_user: StaffUser, body: JudgeAssignmentCreate
) -> Any:
    """
    Assign a judge to a batch of projects. Existing assignments are skipped.
    """
    judge = session.get(User, body.judge_id)
    if not judge:
        raise HTTPException(status_code=404, detail="Judge not found")
    if judge.role not in JUDGE_ROLES:
        raise HTTPException(status_code=400, detail="User must have the judge or admin role")

    project_ids = list(dict.fromkeys(body.project_ids))
    projects = session.exec(
        select(Project).where(col(Project.id).in_(project_ids), Project.event_id == event.id)
    ).all()
    if len(projects) != len(project_ids):
        raise HTTPException(status_code=400, detail="Some projects do not belong to this event")

    existing = set(
        session.exec(
            select(JudgeAssignment.project_id).where(
                JudgeAssignment.judge_id == judge.id, col(JudgeAssignment.project_id).in_(project_ids)
            )
        ).all()
    )
    created = 0
    for project_id in project_ids:
        if project_id in existing:
            continue
        session.add(
            JudgeAssignment(
                event_id=event.id,
                judge_id=judge.id,
                project_id=project_id,
                assigned_by=current_user.id,
            )
        )
        created += 1
    session.commit()

    if created:
        notify(
            session=session,
            user_ids=[judge.id],
            type=NotificationType.judge_assigned,
            title="New judging assignments",
            message=f"You have been assigned {created} project(s) to judge for {event.name}",
            related_event_id=event.id,
            action_url=f"/judging/{event.id}",
        )
    skipped = len(project_ids) - created
    return AssignmentResult(
        message=f"Assigned {created} project(s), skipped {skipped} existing",
        created=created,
        skipped=skipped,
    )


@router.delete("/admin/events/{event_id}/assignments/{assignment_id}", response_model=Message)
def delete_assignment(
    session: SessionDep, event: EventDep, assignment_id: uuid.UUID, current_user: StaffUser
) -> Any:
    assignment = session.get(JudgeAssignment, assignment_id)
    if not assignment or assignment.event_id != event.id:
        raise HTTPException(status_code=404, detail="Assignment not found")
    session.delete(assignment)
    session.commit()
    return Message(message="Assignment removed")


@router.get("/judging/{event_id}/projects", response_model=JudgingProjects)
def read_judging_projects(session: SessionDep, event: EventDep, current_user: JudgeUser) -> Any:
    """
    The projects assigned to the current judge, with the judge's own scores.
    """
    assignments = session.exec(
        select(JudgeAssignment).where(
            JudgeAssignment.event_id == event.id, JudgeAssignment.judge_id == current_user.id
        )
    ).all()
    scores = {
        s.project_id: s
        for s in session.exec(
            select(Score).where(Score.event_id == event.id, Score.judge_id == current_user.id)
        ).all()
    }
    rows = []
    for assignment in assignments:
        project = session.get(Project, assignment.project_id)
        if not project or project.status not in FEEDBACK_STATUSES:
            continue
        score = scores.get(project.id)
        rows.append(
            JudgingProject(
                project=project_public(session, project),
                assignment_status=assignment.status,
                has_scored=score is not None,
                my_score=ScorePublic.model_validate(score) if score else None,
            )
        )
    return JudgingProjects(criteria=event.rubric, projects=rows)


@router.post("/judging/{event_id}/score", response_model=ScorePublic)
def submit_score(
    *, session: SessionDep, event: EventDep, current_user: JudgeUser, body: ScoreSubmit
) -> Any:
    """
    Score an assigned project against the event rubric. Scoring again
    replaces the judge's earlier score.
    """
    project = session.get(Project, body.project_id)
    if not project or project.event_id != event.id:
        raise HTTPException(status_code=404, detail="Project not found")
    if project.status == ProjectStatus.draft:
        raise HTTPException(status_code=400, detail="Project has not been submitted")
    assignment = session.exec(
        select(JudgeAssignment).where(
            JudgeAssignment.project_id == project.id, JudgeAssignment.judge_id == current_user.id
        )
    ).first()
    if not assignment:
        raise HTTPException(status_code=403, detail="You are not assigned to judge this project")

    try:
        total = validate_scores(body.scores, event.rubric)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    now = get_datetime_utc()
    score = session.exec(
        select(Score).where(Score.project_id == project.id, Score.judge_id == current_user.id)
    ).first()
    if score:
        score.scores = dict(body.scores)
        score.comments = body.comments
        score.total_score = total
        score.submitted_at = now
    else:
        score = Score(
            event_id=event.id,
            project_id=project.id,
            judge_id=current_user.id,
            scores=dict(body.scores),
            comments=body.comments,
            total_score=total,
            submitted_at=now,
        )
    session.add(score)

    assignment.status = AssignmentStatus.completed
    assignment.completed_at = now
    session.add(assignment)
    if project.status == ProjectStatus.submitted:
        project.status = ProjectStatus.under_review
        session.add(project)
    session.commit()
    session.refresh(score)
    logger.info("Judge %s scored project %s: %s", current_user.id, project.id, total)
    return score


@router.get("/admin/events/{event_id}/results", response_model=EventResults)
def read_admin_results(session: SessionDep, event: EventDep, current_user: StaffUser) -> Any:
    return event_results(session=session, event=event, include_individual=True)


@router.post("/admin/events/{event_id}/generate-feedback", response_model=FeedbackGenerationReport)
async def generate_feedback(session: SessionDep, event: EventDep, current_user: StaffUser) -> Any:
    """
    Write AI feedback for every scored project that does not have any yet.
    Projects that get feedback are marked judged.
    """
    try:
        agent = FeedbackAgent()
    except LLMNotConfiguredError as exc:
        raise HTTPException(status_code=503, detail=str(exc))

    projects = session.exec(
        select(Project).where(
            Project.event_id == event.id,
            col(Project.status).in_(FEEDBACK_STATUSES),
            col(Project.ai_feedback).is_(None),
        )
    ).all()

    report = FeedbackGenerationReport(generated=0, skipped=0, failed=0)
    for project in projects:
        scores = session.exec(select(Score).where(Score.project_id == project.id)).all()
        if not scores:
            report.skipped += 1
            continue
        try:
            feedback = await agent.run(
                JudgeFeedbackInput(
                    project=ProjectBrief(
                        name=project.name,
                        description=project.description,
                        technologies=project.technologies or [],
                        innovations=project.innovations,
                    ),
                    average_scores=average_scores(scores, event.rubric),
                    comments=[s.comments for s in scores if s.comments.strip()],
                )
            )
        except (ValueError, OpenAIError) as exc:
            logger.warning("Feedback generation failed for project %s: %s", project.id, exc)
            report.failed += 1
            continue

        project.ai_feedback = feedback
        project.status = ProjectStatus.judged
        session.add(project)
        session.commit()
        report.generated += 1

    logger.info(
        "Feedback for event %s: %s generated, %s skipped, %s failed",
        event.id,
        report.generated,
        report.skipped,
        report.failed,
    )
    return report
