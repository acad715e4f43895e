import random
import string
import uuid
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

from sqlmodel import Session

from hackhub.core import security
from hackhub.models import (
    Event,
    EventStatus,
    Participant,
    Project,
    ProjectStatus,
    Registration,
    Team,
    TeamMember,
    User,
    UserRole,
    get_datetime_utc,
)

API = "/api/v1"


def random_lower_string(length: int = 12) -> str:
    return "".join(random.choices(string.ascii_lowercase, k=length))


def random_email() -> str:
    return f"{random_lower_string()}@example.com"


def create_user(session: Session, *, role: UserRole = UserRole.participant, full_name: str | None = None) -> User:
    user = User(
        email=random_email(),
        full_name=full_name or random_lower_string(8).title(),
        role=role,
        hashed_password=security.get_password_hash("changethis123"),
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def auth_headers(user: User) -> dict[str, str]:
    token = security.create_access_token(user.id, expires_delta=timedelta(minutes=30))
    return {"Authorization": f"Bearer {token}"}


def create_event(session: Session, **overrides) -> Event:
    now = get_datetime_utc()
    data = {
        "name": "Spring Hack",
        "description": "A weekend of building things together.",
        "theme": "Developer tools",
        "start_date": now + timedelta(days=7),
        "end_date": now + timedelta(days=9),
        "registration_deadline": now + timedelta(days=5),
        "location": "Dublin",
        "capacity": 50,
        "status": EventStatus.open,
    }
    data.update(overrides)
    event = Event(**data)
    session.add(event)
    session.commit()
    session.refresh(event)
    return event


def register(session: Session, event: Event, user: User) -> Registration:
    participant = Participant(user_id=user.id, email=user.email, name=user.full_name or "Hacker")
    session.add(participant)
    session.flush()
    registration = Registration(participant_id=participant.id, event_id=event.id, user_id=user.id)
    session.add(registration)
    session.commit()
    session.refresh(registration)
    return registration


def create_team(session: Session, event: Event, leader: User, *members: User, **overrides) -> Team:
    team = Team(event_id=event.id, leader_id=leader.id, name=overrides.pop("name", "Byte Club"), **overrides)
    session.add(team)
    session.flush()
    for user in (leader, *members):
        session.add(TeamMember(team_id=team.id, event_id=event.id, user_id=user.id))
    session.commit()
    session.refresh(team)
    return team


def create_project(
    session: Session, event: Event, team: Team, *, status: ProjectStatus = ProjectStatus.submitted, name: str | None = None
) -> Project:
    project = Project(
        event_id=event.id,
        team_id=team.id,
        name=name or f"Project {uuid.uuid4().hex[:6]}",
        description="An app that helps teams ship faster.",
        category="Productivity",
        technologies=["Python", "MongoDB"],
        repo_url="https://github.com/example/project",
        status=status,
        submission_date=get_datetime_utc() if status != ProjectStatus.draft else None,
    )
    session.add(project)
    session.commit()
    session.refresh(project)
    return project


ATLAS_ENABLED = {"enabled": True, "default_provider": "AWS", "default_region": "US_EAST_1"}


def mock_atlas_client() -> MagicMock:
    client = MagicMock()
    client.create_project = AsyncMock(return_value={"id": "group-1"})
    client.create_m0_cluster = AsyncMock(
        return_value={
            "id": "cluster-1",
            "connectionStrings": {"standardSrv": "mongodb+srv://hackathon-cluster.abc.mongodb.net"},
        }
    )
    client.create_database_user = AsyncMock(return_value={})
    client.add_access_list_entries = AsyncMock(return_value=None)
    client.delete_project = AsyncMock(return_value=None)
    client.delete_database_user = AsyncMock(return_value=None)
    client.delete_access_list_entry = AsyncMock(return_value=None)
    client.get_cluster = AsyncMock()
    return client
