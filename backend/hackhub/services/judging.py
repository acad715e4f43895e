import uuid
from collections import defaultdict
from collections.abc import Sequence

from sqlmodel import Session, col, select

from hackhub.models import (
    Event,
    EventResults,
    IndividualScore,
    Project,
    ProjectResult,
    ProjectStatus,
    Score,
    Team,
    User,
)

SCORE_MIN = 1
SCORE_MAX = 10

RANKED_STATUSES = (ProjectStatus.under_review, ProjectStatus.judged)


def validate_scores(scores: dict[str, int], criteria: Sequence[str]) -> int:
    """Check a score sheet against the rubric and return its total."""
    missing = [criterion for criterion in criteria if criterion not in scores]
    if missing:
        raise ValueError(f"Missing scores for: {', '.join(missing)}")
    unknown = [criterion for criterion in scores if criterion not in criteria]
    if unknown:
        raise ValueError(f"Unknown criteria: {', '.join(unknown)}")
    for criterion, value in scores.items():
        if isinstance(value, bool) or not isinstance(value, int) or not SCORE_MIN <= value <= SCORE_MAX:
            raise ValueError(
                f"Score for {criterion} must be an integer between {SCORE_MIN} and {SCORE_MAX}"
            )
    return sum(scores.values())


def average_scores(scores: Sequence[Score], criteria: Sequence[str]) -> dict[str, float]:
    averages = {}
    for criterion in criteria:
        values = [s.scores[criterion] for s in scores if criterion in (s.scores or {})]
        averages[criterion] = round(sum(values) / len(values), 1) if values else 0.0
    return averages


def rank_projects(
    projects: Sequence[Project],
    scores_by_project: dict[uuid.UUID, list[Score]],
    criteria: Sequence[str],
    *,
    team_names: dict[uuid.UUID, str] | None = None,
    judge_names: dict[uuid.UUID, str | None] | None = None,
    include_individual: bool = False,
) -> list[ProjectResult]:
    """
    Build the leaderboard: projects without scores are left out, the rest are
    ordered by average total (highest first, then by name) and numbered from 1.
    """
    team_names = team_names or {}
    judge_names = judge_names or {}
    rows = []
    for project in projects:
        scores = scores_by_project.get(project.id, [])
        if not scores:
            continue
        individual = []
        if include_individual:
            individual = [
                IndividualScore(
                    judge_id=s.judge_id,
                    judge_name=judge_names.get(s.judge_id),
                    scores=s.scores,
                    total_score=s.total_score,
                    comments=s.comments,
                )
                for s in scores
            ]
        rows.append(
            ProjectResult(
                rank=0,
                project_id=project.id,
                name=project.name,
                description=project.description,
                category=project.category,
                repo_url=project.repo_url,
                demo_url=project.demo_url,
                team_id=project.team_id,
                team_name=team_names.get(project.team_id),
                judge_count=len(scores),
                average_scores=average_scores(scores, criteria),
                average_total=round(sum(s.total_score for s in scores) / len(scores), 1),
                individual_scores=individual,
            )
        )

    rows.sort(key=lambda row: (-row.average_total, row.name.lower()))
    for position, row in enumerate(rows, start=1):
        row.rank = position
    return rows


def event_results(*, session: Session, event: Event, include_individual: bool = False) -> EventResults:
    projects = session.exec(
        select(Project).where(
            Project.event_id == event.id, col(Project.status).in_(RANKED_STATUSES)
        )
    ).all()
    scores = session.exec(select(Score).where(Score.event_id == event.id)).all()

    scores_by_project: dict[uuid.UUID, list[Score]] = defaultdict(list)
    for score in scores:
        scores_by_project[score.project_id].append(score)

    teams = session.exec(select(Team).where(Team.event_id == event.id)).all()
    judge_names: dict[uuid.UUID, str | None] = {}
    if include_individual and scores:
        judge_ids = {s.judge_id for s in scores}
        judges = session.exec(select(User).where(col(User.id).in_(judge_ids))).all()
        judge_names = {j.id: j.full_name or j.email for j in judges}

    return EventResults(
        event_id=event.id,
        published=event.results_published,
        criteria=event.rubric,
        results=rank_projects(
            projects,
            scores_by_project,
            event.rubric,
            team_names={t.id: t.name for t in teams},
            judge_names=judge_names,
            include_individual=include_individual,
        ),
    )
