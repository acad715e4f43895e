import uuid
from collections import Counter
from collections.abc import Iterable
from datetime import datetime

from pydantic import BaseModel
from sqlmodel import Session, SQLModel, col, func, select

from hackhub.models import (
    Event,
    FeedbackFormConfig,
    FeedbackResponse,
    Participant,
    Partner,
    Prize,
    Project,
    Registration,
    Score,
    Team,
    TeamMember,
    User,
    ensure_utc,
)

TOP_N = 10


class NamedCount(BaseModel):
    name: str
    count: int


class EventCapacity(BaseModel):
    event_id: uuid.UUID
    name: str
    capacity: int
    registrations: int
    fill_rate: float


class Overview(BaseModel):
    total_users: int
    total_events: int
    total_registrations: int
    total_teams: int
    total_projects: int
    total_partners: int
    total_prizes: int
    total_scores: int


class AdminAnalytics(BaseModel):
    overview: Overview
    users_by_role: dict[str, int]
    events_by_status: dict[str, int]
    events_by_format: dict[str, int]
    events_by_month: dict[str, int]
    event_capacity: list[EventCapacity]
    participants_by_experience: dict[str, int]
    top_skills: list[NamedCount]
    attendance: dict[str, int]
    registrations_by_month: dict[str, int]
    projects_by_status: dict[str, int]
    projects_by_category: dict[str, int]
    top_technologies: list[NamedCount]
    projects_by_month: dict[str, int]
    teams_by_status: dict[str, int]
    team_size_distribution: dict[str, int]
    partners_by_tier: dict[str, int]
    partners_by_status: dict[str, int]
    partners_by_industry: dict[str, int]
    partners_by_engagement: dict[str, int]
    total_contributions: float
    prizes_by_category: dict[str, int]
    total_prize_value: float
    prizes_awarded: int
    score_averages: dict[str, float]
    score_distribution: dict[str, int]


class EventFeedbackStats(BaseModel):
    event_id: uuid.UUID
    event_name: str
    total_responses: int
    participant_responses: int
    partner_responses: int
    average_completion_minutes: float | None
    average_rating: float | None


class FeedbackAnalytics(BaseModel):
    total_responses: int
    events: list[EventFeedbackStats]


def _label(value) -> str:
    return value.value if hasattr(value, "value") else str(value)


def count_by(values: Iterable) -> dict[str, int]:
    return dict(Counter(_label(v) for v in values if v is not None))


def count_by_month(values: Iterable[datetime | None]) -> dict[str, int]:
    counter = Counter(ensure_utc(v).strftime("%Y-%m") for v in values if v is not None)
    return dict(sorted(counter.items()))


def top_counts(values: Iterable[str], limit: int = TOP_N) -> list[NamedCount]:
    counter = Counter(v.strip() for v in values if v and v.strip())
    return [NamedCount(name=name, count=count) for name, count in counter.most_common(limit)]


def _mean(values: list[float]) -> float | None:
    return round(sum(values) / len(values), 1) if values else None


def total(session: Session, table: type[SQLModel]) -> int:
    return session.exec(select(func.count()).select_from(table)).one()


def grouped(session: Session, column) -> dict[str, int]:
    """``SELECT column, count(*) ... GROUP BY column`` keyed by the column's label."""
    rows = session.exec(select(column, func.count()).group_by(column)).all()
    return {_label(value): count for value, count in rows if value is not None}


def column_values(session: Session, column) -> list:
    return list(session.exec(select(column)).all())


def admin_analytics(*, session: Session) -> AdminAnalytics:
    registrations_per_event = dict(
        session.exec(
            select(Registration.event_id, func.count()).group_by(Registration.event_id)
        ).all()
    )
    events = session.exec(select(Event.id, Event.name, Event.capacity)).all()
    capacity = [
        EventCapacity(
            event_id=event_id,
            name=name,
            capacity=event_capacity,
            registrations=registrations_per_event.get(event_id, 0),
            fill_rate=round(registrations_per_event.get(event_id, 0) / event_capacity * 100, 1),
        )
        for event_id, name, event_capacity in events
    ]

    total_teams = total(session, Team)
    team_sizes = Counter(
        session.exec(select(func.count()).select_from(TeamMember).group_by(TeamMember.team_id)).all()
    )
    if total_teams > sum(team_sizes.values()):
        team_sizes[0] = total_teams - sum(team_sizes.values())

    criterion_values: dict[str, list[int]] = {}
    distribution = {str(bucket): 0 for bucket in range(1, 11)}
    for scores in column_values(session, Score.scores):
        for criterion, value in (scores or {}).items():
            criterion_values.setdefault(criterion, []).append(value)
            if str(value) in distribution:
                distribution[str(value)] += 1

    engagements = [e or {} for e in column_values(session, Partner.engagement)]
    virtual = grouped(session, Event.is_virtual)

    return AdminAnalytics(
        overview=Overview(
            total_users=total(session, User),
            total_events=len(events),
            total_registrations=sum(registrations_per_event.values()),
            total_teams=total_teams,
            total_projects=total(session, Project),
            total_partners=len(engagements),
            total_prizes=total(session, Prize),
            total_scores=total(session, Score),
        ),
        users_by_role=grouped(session, User.role),
        events_by_status=grouped(session, Event.status),
        events_by_format={
            "virtual" if label == "True" else "in_person": count for label, count in virtual.items()
        },
        events_by_month=count_by_month(column_values(session, Event.start_date)),
        event_capacity=capacity,
        participants_by_experience=grouped(session, Participant.experience_level),
        top_skills=top_counts(
            skill for skills in column_values(session, Participant.skills) for skill in skills or []
        ),
        attendance=grouped(session, Registration.status),
        registrations_by_month=count_by_month(column_values(session, Registration.registered_at)),
        projects_by_status=grouped(session, Project.status),
        projects_by_category=grouped(session, Project.category),
        top_technologies=top_counts(
            tech for techs in column_values(session, Project.technologies) for tech in techs or []
        ),
        projects_by_month=count_by_month(column_values(session, Project.created_at)),
        teams_by_status=grouped(session, Team.status),
        team_size_distribution=count_by(team_sizes.elements()),
        partners_by_tier=grouped(session, Partner.tier),
        partners_by_status=grouped(session, Partner.status),
        partners_by_industry=grouped(session, Partner.industry),
        partners_by_engagement=count_by(e.get("engagement_level") or "unknown" for e in engagements),
        total_contributions=sum(e.get("total_contribution") or 0 for e in engagements),
        prizes_by_category=grouped(session, Prize.category),
        total_prize_value=session.exec(select(func.coalesce(func.sum(Prize.monetary_value), 0))).one(),
        prizes_awarded=sum(1 for winners in column_values(session, Prize.winners) if winners),
        score_averages={c: _mean(v) or 0.0 for c, v in criterion_values.items()},
        score_distribution=distribution,
    )


def rating_answers(form: FeedbackFormConfig | None, answers: dict) -> list[float]:
    if form is None:
        return []
    rated = {
        q["id"]
        for section in form.sections or []
        for q in section.get("questions", [])
        if q.get("type") in ("linear_scale", "rating")
    }
    return [float(v) for k, v in answers.items() if k in rated and isinstance(v, int | float)]


def feedback_analytics(*, session: Session) -> FeedbackAnalytics:
    counts = session.exec(
        select(
            FeedbackResponse.event_id,
            FeedbackResponse.respondent_type,
            func.count(),
        ).group_by(FeedbackResponse.event_id, FeedbackResponse.respondent_type)
    ).all()
    per_event: dict[uuid.UUID, dict[str, int]] = {}
    for event_id, respondent_type, count in counts:
        per_event.setdefault(event_id, {})[_label(respondent_type)] = count
    minutes = dict(
        session.exec(
            select(FeedbackResponse.event_id, func.avg(FeedbackResponse.completion_time_minutes))
            .group_by(FeedbackResponse.event_id)
        ).all()
    )
    names = dict(
        session.exec(select(Event.id, Event.name).where(col(Event.id).in_(per_event))).all()
    ) if per_event else {}
    forms = {f.id: f for f in session.exec(select(FeedbackFormConfig)).all()}

    ratings: dict[uuid.UUID, list[float]] = {}
    answers = session.exec(
        select(FeedbackResponse.event_id, FeedbackResponse.form_id, FeedbackResponse.answers)
    ).all()
    for event_id, form_id, response_answers in answers:
        ratings.setdefault(event_id, []).extend(
            rating_answers(forms.get(form_id), response_answers or {})
        )

    stats = []
    for event_id, by_type in per_event.items():
        if event_id not in names:
            continue
        average_minutes = minutes.get(event_id)
        stats.append(
            EventFeedbackStats(
                event_id=event_id,
                event_name=names[event_id],
                total_responses=sum(by_type.values()),
                participant_responses=by_type.get("participant", 0),
                partner_responses=by_type.get("partner", 0),
                average_completion_minutes=(
                    round(float(average_minutes), 1) if average_minutes is not None else None
                ),
                average_rating=_mean(ratings.get(event_id, [])),
            )
        )
    stats.sort(key=lambda s: s.total_responses, reverse=True)
    return FeedbackAnalytics(total_responses=total(session, FeedbackResponse), events=stats)
