import ipaddress
import re
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Literal, Self

from pydantic import AfterValidator, EmailStr, field_validator, model_validator
from sqlalchemy import DateTime, JSON, UniqueConstraint
from sqlmodel import Field, SQLModel

from hackhub.ai.artifacts import GeneratedIdea, IdeaInputs


def get_datetime_utc() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
USERNAME_RE = re.compile(r"^[a-zA-Z0-9_-]{3,32}$")
GITHUB_REPO_RE = re.compile(r"^https?://(www\.)?github\.com/[\w-]+/[\w.-]+")
HTTP_URL_RE = re.compile(r"^https?://.+")

DEFAULT_JUDGING_CRITERIA = ["innovation", "technical", "impact", "presentation"]


def _check_slug(value: str) -> str:
    if not SLUG_RE.match(value):
        raise ValueError("Slug may only contain lowercase letters, numbers and hyphens")
    return value


Slug = Annotated[str, AfterValidator(_check_slug)]


class UserRole(str, Enum):
    super_admin = "super_admin"
    admin = "admin"
    organizer = "organizer"
    judge = "judge"
    participant = "participant"


class EventStatus(str, Enum):
    draft = "draft"
    open = "open"
    in_progress = "in_progress"
    concluded = "concluded"


class ExperienceLevel(str, Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"


class RegistrationStatus(str, Enum):
    registered = "registered"
    attended = "attended"
    no_show = "no_show"


class TeamStatus(str, Enum):
    forming = "forming"
    active = "active"
    inactive = "inactive"


class CommunicationPlatform(str, Enum):
    discord = "discord"
    slack = "slack"
    other = "other"


class ProjectStatus(str, Enum):
    draft = "draft"
    submitted = "submitted"
    under_review = "under_review"
    judged = "judged"


class AssignmentStatus(str, Enum):
    pending = "pending"
    in_progress = "in_progress"
    completed = "completed"


class PartnerTier(str, Enum):
    platinum = "platinum"
    gold = "gold"
    silver = "silver"
    bronze = "bronze"
    community = "community"


class PartnerStatus(str, Enum):
    active = "active"
    inactive = "inactive"
    pending = "pending"


class PrizeCategory(str, Enum):
    grand = "grand"
    track = "track"
    sponsor = "sponsor"
    special = "special"
    community = "community"


class FeedbackAudience(str, Enum):
    participant = "participant"
    partner = "partner"
    both = "both"


class RespondentType(str, Enum):
    participant = "participant"
    partner = "partner"


class ClusterStatus(str, Enum):
    creating = "creating"
    idle = "idle"
    active = "active"
    deleting = "deleting"
    deleted = "deleted"
    error = "error"


class CloudProvider(str, Enum):
    AWS = "AWS"
    GCP = "GCP"
    AZURE = "AZURE"


class NotificationType(str, Enum):
    registration_confirmed = "registration_confirmed"
    event_reminder = "event_reminder"
    team_member_joined = "team_member_joined"
    team_member_left = "team_member_left"
    team_invite = "team_invite"
    project_submitted = "project_submitted"
    registration_closed = "registration_closed"
    results_published = "results_published"
    judging_started = "judging_started"
    judge_assigned = "judge_assigned"
    score_received = "score_received"
    feedback_requested = "feedback_requested"
    general = "general"


STAFF_ROLES = (UserRole.super_admin, UserRole.admin, UserRole.organizer)
ADMIN_ROLES = (UserRole.super_admin, UserRole.admin)
JUDGE_ROLES = (UserRole.judge, UserRole.admin, UserRole.super_admin)


# Generic message
class Message(SQLModel):
    message: str


class HealthStatus(SQLModel):
    database: bool
    emails: bool
    llm: bool
    atlas: bool


# JSON payload containing access token
class Token(SQLModel):
    access_token: str
    token_type: str = "bearer"


# Contents of JWT token
class TokenPayload(SQLModel):
    sub: str | None = None


# Users

class NotificationPreferences(SQLModel):
    email_notifications: bool = True
    event_reminders: bool = True
    team_invites: bool = True
    project_updates: bool = True
    newsletter: bool = False


# Shared properties
class UserBase(SQLModel):
    email: EmailStr = Field(unique=True, index=True, max_length=255)
    is_active: bool = True
    role: UserRole = Field(default=UserRole.participant)
    full_name: str | None = Field(default=None, max_length=255)


# Properties to receive via API on creation
class UserCreate(UserBase):
    password: str = Field(min_length=8, max_length=128)


class UserRegister(SQLModel):
    email: EmailStr = Field(max_length=255)
    password: str = Field(min_length=8, max_length=128)
    full_name: str | None = Field(default=None, max_length=255)


class UserUpdateMe(SQLModel):
    full_name: str | None = Field(default=None, max_length=255)
    email: EmailStr | None = Field(default=None, max_length=255)
    notification_preferences: NotificationPreferences | None = None


class UpdatePassword(SQLModel):
    current_password: str = Field(min_length=8, max_length=128)
    new_password: str = Field(min_length=8, max_length=128)


class UserRoleUpdate(SQLModel):
    role: UserRole


# Database model, database table inferred from class name
class User(UserBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    hashed_password: str
    notification_preferences: dict = Field(
        default_factory=lambda: NotificationPreferences().model_dump(), sa_type=JSON
    )
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES


# Properties to return via API, id is always required
class UserPublic(UserBase):
    id: uuid.UUID
    notification_preferences: NotificationPreferences | None = None
    created_at: datetime | None = None


class UsersPublic(SQLModel):
    data: list[UserPublic]
    count: int


# Events

class AtlasProvisioningSettings(SQLModel):
    enabled: bool = False
    default_provider: CloudProvider = CloudProvider.AWS
    default_region: str = "US_EAST_1"
    open_network_access: bool = True
    auto_cleanup_on_event_end: bool = True


def check_event_dates(
    start_date: datetime, end_date: datetime, registration_deadline: datetime
) -> None:
    start, end, deadline = (ensure_utc(d) for d in (start_date, end_date, registration_deadline))
    if end < start:
        raise ValueError("End date must be after start date")
    if deadline > end:
        raise ValueError("Registration deadline must be before the event ends")


class EventBase(SQLModel):
    name: str = Field(min_length=3, max_length=200)
    description: str = Field(min_length=10, max_length=5000)
    theme: str = Field(min_length=2, max_length=200)
    start_date: datetime = Field(sa_type=DateTime(timezone=True))  # type: ignore
    end_date: datetime = Field(sa_type=DateTime(timezone=True))  # type: ignore
    registration_deadline: datetime = Field(sa_type=DateTime(timezone=True))  # type: ignore
    submission_deadline: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))  # type: ignore
    location: str = Field(min_length=2, max_length=500)
    capacity: int = Field(gt=0, le=10000)
    is_virtual: bool = False
    tags: list[str] = Field(default_factory=list, sa_type=JSON)
    rules: str = Field(default="", max_length=10000)
    judging_criteria: list[str] = Field(default_factory=list, sa_type=JSON)


class EventCreate(EventBase):
    status: EventStatus = EventStatus.draft

    @model_validator(mode="after")
    def _check_dates(self) -> Self:
        check_event_dates(self.start_date, self.end_date, self.registration_deadline)
        return self


class EventUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=3, max_length=200)
    description: str | None = Field(default=None, min_length=10, max_length=5000)
    theme: str | None = Field(default=None, min_length=2, max_length=200)
    start_date: datetime | None = None
    end_date: datetime | None = None
    registration_deadline: datetime | None = None
    submission_deadline: datetime | None = None
    location: str | None = Field(default=None, min_length=2, max_length=500)
    capacity: int | None = Field(default=None, gt=0, le=10000)
    is_virtual: bool | None = None
    tags: list[str] | None = None
    rules: str | None = Field(default=None, max_length=10000)
    judging_criteria: list[str] | None = None
    status: EventStatus | None = None
    registration_form_id: uuid.UUID | None = None


class Event(EventBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    status: EventStatus = Field(default=EventStatus.draft, index=True)
    results_published: bool = False
    results_published_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))  # type: ignore
    created_by: uuid.UUID | None = Field(default=None, foreign_key="user.id", ondelete="SET NULL")
    landing_slug: str | None = Field(default=None, unique=True, index=True, max_length=120)
    landing_template: str = Field(default="modern", max_length=120)
    landing_published: bool = False
    landing_custom_content: dict = Field(default_factory=dict, sa_type=JSON)
    registration_form_id: uuid.UUID | None = Field(
        default=None, foreign_key="registrationformconfig.id", ondelete="SET NULL"
    )
    participant_feedback_form_id: uuid.UUID | None = Field(
        default=None, foreign_key="feedbackformconfig.id", ondelete="SET NULL"
    )
    partner_feedback_form_id: uuid.UUID | None = Field(
        default=None, foreign_key="feedbackformconfig.id", ondelete="SET NULL"
    )
    atlas_provisioning: dict = Field(
        default_factory=lambda: AtlasProvisioningSettings().model_dump(mode="json"), sa_type=JSON
    )
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    updated_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
        sa_column_kwargs={"onupdate": get_datetime_utc},
    )

    @property
    def rubric(self) -> list[str]:
        return list(self.judging_criteria or DEFAULT_JUDGING_CRITERIA)


class EventPublic(EventBase):
    id: uuid.UUID
    status: EventStatus
    results_published: bool = False
    results_published_at: datetime | None = None
    created_by: uuid.UUID | None = None
    landing_slug: str | None = None
    landing_published: bool = False
    registration_form_id: uuid.UUID | None = None
    participant_feedback_form_id: uuid.UUID | None = None
    partner_feedback_form_id: uuid.UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class EventDetail(EventPublic):
    registered_count: int = 0
    spots_left: int = 0


class EventsPublic(SQLModel):
    data: list[EventPublic]
    count: int


# Participants & registrations

class ParticipantBase(SQLModel):
    name: str = Field(min_length=2, max_length=200)
    bio: str = Field(default="", max_length=2000)
    skills: list[str] = Field(default_factory=list, sa_type=JSON)
    interests: list[str] = Field(default_factory=list, sa_type=JSON)
    experience_level: ExperienceLevel = ExperienceLevel.beginner
    github_url: str | None = Field(default=None, max_length=500)


class Participant(ParticipantBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="user.id", unique=True, nullable=False, ondelete="CASCADE")
    email: str = Field(index=True, max_length=255)
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class ParticipantPublic(ParticipantBase):
    id: uuid.UUID
    user_id: uuid.UUID
    email: str


class EventRegistrationRequest(SQLModel):
    name: str | None = Field(default=None, min_length=2, max_length=200)
    bio: str | None = Field(default=None, max_length=2000)
    skills: list[str] = Field(default_factory=list, max_length=30)
    interests: list[str] = Field(default_factory=list, max_length=20)
    experience_level: ExperienceLevel | None = None
    github_url: str | None = Field(default=None, max_length=500)
    custom_responses: dict[str, Any] = Field(default_factory=dict)


class Registration(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("participant_id", "event_id"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    participant_id: uuid.UUID = Field(foreign_key="participant.id", nullable=False, ondelete="CASCADE")
    event_id: uuid.UUID = Field(foreign_key="event.id", nullable=False, index=True, ondelete="CASCADE")
    user_id: uuid.UUID = Field(foreign_key="user.id", nullable=False, index=True, ondelete="CASCADE")
    status: RegistrationStatus = Field(default=RegistrationStatus.registered)
    custom_responses: dict = Field(default_factory=dict, sa_type=JSON)
    registered_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class RegistrationPublic(SQLModel):
    id: uuid.UUID
    participant_id: uuid.UUID
    event_id: uuid.UUID
    user_id: uuid.UUID
    status: RegistrationStatus
    custom_responses: dict[str, Any] = {}
    registered_at: datetime | None = None


class RegistrationWithParticipant(RegistrationPublic):
    participant: ParticipantPublic
    team_id: uuid.UUID | None = None


class RegistrationsPublic(SQLModel):
    data: list[RegistrationWithParticipant]
    count: int


class RegistrationStatusUpdate(SQLModel):
    status: RegistrationStatus


class WaitlistJoin(SQLModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr


class WaitlistEntry(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("event_id", "email"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    event_id: uuid.UUID = Field(foreign_key="event.id", nullable=False, ondelete="CASCADE")
    name: str = Field(max_length=200)
    email: str = Field(max_length=255)
    notified: bool = False
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


# Teams

class TeamBase(SQLModel):
    name: str = Field(min_length=2, max_length=100)
    description: str | None = Field(default=None, max_length=1000)
    looking_for_members: bool = True
    desired_skills: list[str] = Field(default_factory=list, sa_type=JSON)
    max_members: int = Field(default=5, ge=1, le=10)
    communication_platform: CommunicationPlatform | None = None
    communication_url: str | None = Field(default=None, max_length=500)


class TeamCreate(TeamBase):
    pass


class TeamUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=2, max_length=100)
    description: str | None = Field(default=None, max_length=1000)
    looking_for_members: bool | None = None
    desired_skills: list[str] | None = None
    max_members: int | None = Field(default=None, ge=1, le=10)
    communication_platform: CommunicationPlatform | None = None
    communication_url: str | None = Field(default=None, max_length=500)
    status: TeamStatus | None = None


class Team(TeamBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    event_id: uuid.UUID = Field(foreign_key="event.id", nullable=False, index=True, ondelete="CASCADE")
    leader_id: uuid.UUID = Field(foreign_key="user.id", nullable=False, index=True)
    status: TeamStatus = Field(default=TeamStatus.forming)
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    updated_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
        sa_column_kwargs={"onupdate": get_datetime_utc},
    )


class TeamMember(SQLModel, table=True):
    # One team per user per event
    __table_args__ = (UniqueConstraint("event_id", "user_id"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    team_id: uuid.UUID = Field(foreign_key="team.id", nullable=False, index=True, ondelete="CASCADE")
    event_id: uuid.UUID = Field(foreign_key="event.id", nullable=False, ondelete="CASCADE")
    user_id: uuid.UUID = Field(foreign_key="user.id", nullable=False, index=True, ondelete="CASCADE")
    joined_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class TeamMemberPublic(SQLModel):
    user_id: uuid.UUID
    full_name: str | None = None
    email: str
    joined_at: datetime | None = None


class TeamPublic(TeamBase):
    id: uuid.UUID
    event_id: uuid.UUID
    leader_id: uuid.UUID
    status: TeamStatus
    created_at: datetime | None = None
    members: list[TeamMemberPublic] = []
    member_count: int = 0


class TeamsPublic(SQLModel):
    data: list[TeamPublic]
    count: int


class TeamMemberAction(SQLModel):
    user_id: uuid.UUID


class TeamNoteBase(SQLModel):
    content: str = Field(min_length=1, max_length=2000)
    parent_note_id: uuid.UUID | None = Field(default=None, foreign_key="teamnote.id", ondelete="CASCADE")


class TeamNoteCreate(TeamNoteBase):
    pass


class TeamNoteUpdate(SQLModel):
    content: str = Field(min_length=1, max_length=2000)


class TeamNote(TeamNoteBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    team_id: uuid.UUID = Field(foreign_key="team.id", nullable=False, index=True, ondelete="CASCADE")
    author_id: uuid.UUID = Field(foreign_key="user.id", nullable=False, ondelete="CASCADE")
    edited_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))  # type: ignore
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class TeamNotePublic(TeamNoteBase):
    id: uuid.UUID
    team_id: uuid.UUID
    author_id: uuid.UUID
    edited_at: datetime | None = None
    created_at: datetime | None = None


# Projects

def _check_repo_url(value: str) -> str:
    if not GITHUB_REPO_RE.match(value):
        raise ValueError("GitHub URL must be in format: https://github.com/username/repo")
    return value


def _check_http_url(value: str) -> str:
    if not HTTP_URL_RE.match(value):
        raise ValueError("URL must start with http:// or https://")
    return value


GitHubRepoUrl = Annotated[str, AfterValidator(_check_repo_url)]
HttpUrlString = Annotated[str, AfterValidator(_check_http_url)]


class ProjectBase(SQLModel):
    name: str = Field(min_length=2, max_length=200)
    description: str = Field(min_length=10, max_length=10000)
    category: str = Field(min_length=2, max_length=100)
    technologies: list[str] = Field(default_factory=list, sa_type=JSON)
    repo_url: GitHubRepoUrl = Field(max_length=500)
    demo_url: HttpUrlString | None = Field(default=None, max_length=500)
    documentation_url: HttpUrlString | None = Field(default=None, max_length=500)
    innovations: str = Field(default="", max_length=5000)


class ProjectCreate(ProjectBase):
    status: ProjectStatus = ProjectStatus.draft

    @field_validator("status")
    @classmethod
    def _only_draft_or_submitted(cls, value: ProjectStatus) -> ProjectStatus:
        if value not in (ProjectStatus.draft, ProjectStatus.submitted):
            raise ValueError("A new project can only be a draft or submitted")
        return value


class ProjectUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=2, max_length=200)
    description: str | None = Field(default=None, min_length=10, max_length=10000)
    category: str | None = Field(default=None, min_length=2, max_length=100)
    technologies: list[str] | None = None
    repo_url: GitHubRepoUrl | None = Field(default=None, max_length=500)
    demo_url: HttpUrlString | None = Field(default=None, max_length=500)
    documentation_url: HttpUrlString | None = Field(default=None, max_length=500)
    innovations: str | None = Field(default=None, max_length=5000)


class Project(ProjectBase, table=True):
    # One project per team per event
    __table_args__ = (UniqueConstraint("event_id", "team_id"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    event_id: uuid.UUID = Field(foreign_key="event.id", nullable=False, index=True, ondelete="CASCADE")
    team_id: uuid.UUID = Field(foreign_key="team.id", nullable=False, index=True)
    status: ProjectStatus = Field(default=ProjectStatus.draft, index=True)
    submission_date: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))  # type: ignore
    last_modified: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    ai_summary: str | None = None
    ai_feedback: str | None = None
    is_featured: bool = False
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class ProjectPublic(ProjectBase):
    id: uuid.UUID
    event_id: uuid.UUID
    team_id: uuid.UUID
    status: ProjectStatus
    submission_date: datetime | None = None
    last_modified: datetime | None = None
    ai_summary: str | None = None
    is_featured: bool = False
    created_at: datetime | None = None
    team_name: str | None = None


class ProjectsPublic(SQLModel):
    data: list[ProjectPublic]
    count: int


class ProjectFeedback(SQLModel):
    project_id: uuid.UUID
    ai_feedback: str | None = None
    average_scores: dict[str, float] = {}
    judge_comments: list[str] = []


class FeaturedUpdate(SQLModel):
    is_featured: bool


# Judging

class JudgeAssignmentCreate(SQLModel):
    judge_id: uuid.UUID
    project_ids: list[uuid.UUID] = Field(min_length=1)


class JudgeAssignment(SQLModel, table=True):
    # One assignment per judge per project
    __table_args__ = (UniqueConstraint("project_id", "judge_id"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    event_id: uuid.UUID = Field(foreign_key="event.id", nullable=False, index=True, ondelete="CASCADE")
    judge_id: uuid.UUID = Field(foreign_key="user.id", nullable=False, index=True, ondelete="CASCADE")
    project_id: uuid.UUID = Field(foreign_key="project.id", nullable=False, ondelete="CASCADE")
    status: AssignmentStatus = Field(default=AssignmentStatus.pending)
    assigned_by: uuid.UUID | None = Field(default=None, foreign_key="user.id", ondelete="SET NULL")
    assigned_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    completed_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))  # type: ignore


class JudgeAssignmentPublic(SQLModel):
    id: uuid.UUID
    event_id: uuid.UUID
    judge_id: uuid.UUID
    project_id: uuid.UUID
    status: AssignmentStatus
    assigned_by: uuid.UUID | None = None
    assigned_at: datetime | None = None
    completed_at: datetime | None = None
    judge_name: str | None = None
    judge_email: str | None = None
    project_name: str | None = None


class AssignmentResult(SQLModel):
    message: str
    created: int
    skipped: int


class ScoreSubmit(SQLModel):
    project_id: uuid.UUID
    scores: dict[str, int]
    comments: str = Field(default="", max_length=5000)


class Score(SQLModel, table=True):
    # A judge scores a project once; resubmission updates the row
    __table_args__ = (UniqueConstraint("project_id", "judge_id"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    event_id: uuid.UUID = Field(foreign_key="event.id", nullable=False, index=True, ondelete="CASCADE")
    project_id: uuid.UUID = Field(foreign_key="project.id", nullable=False, ondelete="CASCADE")
    judge_id: uuid.UUID = Field(foreign_key="user.id", nullable=False, ondelete="CASCADE")
    scores: dict = Field(default_factory=dict, sa_type=JSON)
    comments: str = ""
    total_score: int = 0
    submitted_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class ScorePublic(SQLModel):
    id: uuid.UUID
    event_id: uuid.UUID
    project_id: uuid.UUID
    judge_id: uuid.UUID
    scores: dict[str, int]
    comments: str = ""
    total_score: int
    submitted_at: datetime | None = None


class JudgingProject(SQLModel):
    project: ProjectPublic
    assignment_status: AssignmentStatus
    has_scored: bool
    my_score: ScorePublic | None = None


class JudgingProjects(SQLModel):
    criteria: list[str]
    projects: list[JudgingProject]


class IndividualScore(SQLModel):
    judge_id: uuid.UUID
    judge_name: str | None = None
    scores: dict[str, int]
    total_score: int
    comments: str = ""


class ProjectResult(SQLModel):
    rank: int
    project_id: uuid.UUID
    name: str
    description: str
    category: str
    repo_url: str
    demo_url: str | None = None
    team_id: uuid.UUID
    team_name: str | None = None
    judge_count: int
    average_scores: dict[str, float]
    average_total: float
    individual_scores: list[IndividualScore] = []


class EventResults(SQLModel):
    event_id: uuid.UUID
    published: bool
    criteria: list[str]
    results: list[ProjectResult]


class FeedbackGenerationReport(SQLModel):
    generated: int
    skipped: int
    failed: int


# Partners & prizes

class PartnerContact(SQLModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    phone: str | None = None
    role: str = Field(min_length=1, max_length=200)
    is_primary: bool = False


class PartnerCompanyInfo(SQLModel):
    size: Literal["startup", "small", "medium", "large", "enterprise"] | None = None
    headquarters: str | None = None
    founded_year: int | None = Field(default=None, ge=1800, le=2100)
    employee_count: str | None = None


class PartnerEngagement(SQLModel):
    events_participated: list[uuid.UUID] = []
    prizes_offered: list[uuid.UUID] = []
    total_contribution: float | None = Field(default=None, ge=0)
    engagement_level: Literal["low", "medium", "high"] | None = None
    last_engagement_date: datetime | None = None


class PartnerSocial(SQLModel):
    linkedin: str | None = None
    twitter: str | None = None
    github: str | None = None
    youtube: str | None = None


class PartnerBase(SQLModel):
    name: str = Field(min_length=1, max_length=200, unique=True, index=True)
    description: str = Field(min_length=1, max_length=5000)
    logo: str | None = Field(default=None, max_length=500)
    website: str | None = Field(default=None, max_length=500)
    industry: str = Field(min_length=1, max_length=200)
    tier: PartnerTier = PartnerTier.bronze
    status: PartnerStatus = PartnerStatus.pending
    tags: list[str] = Field(default_factory=list, sa_type=JSON)
    notes: str | None = None


class PartnerCreate(PartnerBase):
    company_info: PartnerCompanyInfo = PartnerCompanyInfo()
    contacts: list[PartnerContact] = []
    engagement: PartnerEngagement = PartnerEngagement()
    social: PartnerSocial = PartnerSocial()


class PartnerUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, min_length=1, max_length=5000)
    logo: str | None = None
    website: str | None = None
    industry: str | None = None
    tier: PartnerTier | None = None
    status: PartnerStatus | None = None
    tags: list[str] | None = None
    notes: str | None = None
    company_info: PartnerCompanyInfo | None = None
    contacts: list[PartnerContact] | None = None
    engagement: PartnerEngagement | None = None
    social: PartnerSocial | None = None


class Partner(PartnerBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    company_info: dict = Field(default_factory=dict, sa_type=JSON)
    contacts: list[dict] = Field(default_factory=list, sa_type=JSON)
    engagement: dict = Field(default_factory=dict, sa_type=JSON)
    social: dict = Field(default_factory=dict, sa_type=JSON)
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    updated_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
        sa_column_kwargs={"onupdate": get_datetime_utc},
    )


class PartnerPublic(PartnerBase):
    id: uuid.UUID
    company_info: PartnerCompanyInfo
    contacts: list[PartnerContact]
    engagement: PartnerEngagement
    social: PartnerSocial
    created_at: datetime | None = None


class PartnersPublic(SQLModel):
    data: list[PartnerPublic]
    count: int


class PrizeWinner(SQLModel):
    project_id: uuid.UUID
    team_id: uuid.UUID
    awarded_at: datetime
    notes: str | None = None


class PrizeBase(SQLModel):
    event_id: uuid.UUID = Field(foreign_key="event.id", index=True, ondelete="CASCADE")
    partner_id: uuid.UUID | None = Field(default=None, foreign_key="partner.id", ondelete="SET NULL")
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=5000)
    category: PrizeCategory
    value: str | None = Field(default=None, max_length=200)
    monetary_value: float | None = Field(default=None, ge=0)
    eligibility: str | None = None
    criteria: list[str] = Field(default_factory=list, sa_type=JSON)
    display_order: int = 0
    is_active: bool = True
    image_url: str | None = Field(default=None, max_length=500)


class PrizeCreate(PrizeBase):
    pass


class PrizeUpdate(SQLModel):
    partner_id: uuid.UUID | None = None
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, min_length=1, max_length=5000)
    category: PrizeCategory | None = None
    value: str | None = None
    monetary_value: float | None = Field(default=None, ge=0)
    eligibility: str | None = None
    criteria: list[str] | None = None
    display_order: int | None = None
    is_active: bool | None = None
    image_url: str | None = None


class Prize(PrizeBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    winners: list[dict] = Field(default_factory=list, sa_type=JSON)
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class PrizePublic(PrizeBase):
    id: uuid.UUID
    winners: list[PrizeWinner] = []
    created_at: datetime | None = None


class PrizesPublic(SQLModel):
    data: list[PrizePublic]
    count: int


class PrizeAward(SQLModel):
    project_id: uuid.UUID
    notes: str | None = Field(default=None, max_length=1000)


# Feedback forms

class ScaleConfig(SQLModel):
    min: int = 1
    max: int = 5
    min_label: str = ""
    max_label: str = ""


class FeedbackQuestion(SQLModel):
    id: str = Field(min_length=1)
    type: Literal["short_text", "long_text", "multiple_choice", "checkbox", "linear_scale", "rating"]
    label: str = Field(min_length=1)
    description: str = ""
    required: bool = False
    placeholder: str = ""
    options: list[str] = []
    scale_config: ScaleConfig | None = None


class FeedbackSection(SQLModel):
    id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    description: str = ""
    questions: list[FeedbackQuestion] = []


class FeedbackFormBase(SQLModel):
    name: str = Field(min_length=1, max_length=200)
    slug: Slug = Field(unique=True, index=True, max_length=120)
    description: str = Field(default="", max_length=2000)
    target_audience: FeedbackAudience = FeedbackAudience.participant


class FeedbackFormCreate(FeedbackFormBase):
    sections: list[FeedbackSection] = []


class FeedbackFormUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    slug: Slug | None = Field(default=None, max_length=120)
    description: str | None = Field(default=None, max_length=2000)
    target_audience: FeedbackAudience | None = None
    sections: list[FeedbackSection] | None = None


class FeedbackFormConfig(FeedbackFormBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    is_built_in: bool = Field(default=False, index=True)
    created_by: uuid.UUID | None = Field(default=None, foreign_key="user.id", ondelete="SET NULL")
    sections: list[dict] = Field(default_factory=list, sa_type=JSON)
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    updated_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
        sa_column_kwargs={"onupdate": get_datetime_utc},
    )


class FeedbackFormPublic(FeedbackFormBase):
    id: uuid.UUID
    is_built_in: bool
    created_by: uuid.UUID | None = None
    sections: list[FeedbackSection]
    created_at: datetime | None = None
    updated_at: datetime | None = None


class FeedbackFormsPublic(SQLModel):
    data: list[FeedbackFormPublic]
    count: int


class FormClone(SQLModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    slug: Slug | None = Field(default=None, max_length=120)


class EventFeedbackForms(SQLModel):
    participant_form_id: uuid.UUID | None = None
    partner_form_id: uuid.UUID | None = None


FeedbackAnswer = str | int | float | list[str]


class FeedbackSubmit(SQLModel):
    event_id: uuid.UUID
    respondent_email: EmailStr
    respondent_name: str = Field(min_length=1, max_length=200)
    respondent_type: RespondentType
    answers: dict[str, FeedbackAnswer]
    started_at: datetime | None = None


class FeedbackResponse(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("form_id", "event_id", "respondent_email"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    form_id: uuid.UUID = Field(foreign_key="feedbackformconfig.id", nullable=False, ondelete="CASCADE")
    event_id: uuid.UUID = Field(foreign_key="event.id", nullable=False, index=True, ondelete="CASCADE")
    respondent_email: str = Field(max_length=255)
    respondent_name: str = Field(max_length=200)
    respondent_type: RespondentType
    user_id: uuid.UUID | None = Field(default=None, foreign_key="user.id", ondelete="SET NULL")
    answers: dict = Field(default_factory=dict, sa_type=JSON)
    started_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))  # type: ignore
    submitted_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    completion_time_minutes: int | None = None


class FeedbackResponsePublic(SQLModel):
    id: uuid.UUID
    form_id: uuid.UUID
    event_id: uuid.UUID
    respondent_email: str
    respondent_name: str
    respondent_type: RespondentType
    answers: dict[str, Any]
    submitted_at: datetime | None = None
    completion_time_minutes: int | None = None


class QuestionSummary(SQLModel):
    question_id: str
    label: str
    type: str
    response_count: int
    average: float | None = None
    distribution: dict[str, int] = {}


class FeedbackResponsesSummary(SQLModel):
    event_id: uuid.UUID
    total_responses: int
    by_respondent_type: dict[str, int]
    average_completion_minutes: float | None = None
    questions: list[QuestionSummary]
    responses: list[FeedbackResponsePublic]


class FeedbackRequestReport(SQLModel):
    form_id: uuid.UUID
    notified: int
    emailed: int


# Registration forms

class CustomQuestion(SQLModel):
    id: str = Field(min_length=1)
    label: str = Field(min_length=1)
    type: Literal["text", "select", "multiselect", "checkbox"]
    options: list[str] = []
    required: bool = False
    placeholder: str = ""


class RegistrationTier1(SQLModel):
    show_experience_level: bool = True
    custom_questions: list[CustomQuestion] = []


class RegistrationTier2(SQLModel):
    enabled: bool = True
    prompt: str = "Help us match you with a great team"
    show_skills: bool = True
    show_github: bool = True
    show_bio: bool = True
    custom_questions: list[CustomQuestion] = []


class RegistrationTier3(SQLModel):
    enabled: bool = False
    prompt: str = "A few more questions from the organizers"
    custom_questions: list[CustomQuestion] = []


class RegistrationFormBase(SQLModel):
    name: str = Field(min_length=1, max_length=200)
    slug: Slug = Field(unique=True, index=True, max_length=120)
    description: str = Field(default="", max_length=2000)


class RegistrationFormCreate(RegistrationFormBase):
    tier1: RegistrationTier1 = RegistrationTier1()
    tier2: RegistrationTier2 = RegistrationTier2()
    tier3: RegistrationTier3 = RegistrationTier3()


class RegistrationFormUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    slug: Slug | None = Field(default=None, max_length=120)
    description: str | None = Field(default=None, max_length=2000)
    tier1: RegistrationTier1 | None = None
    tier2: RegistrationTier2 | None = None
    tier3: RegistrationTier3 | None = None


class RegistrationFormConfig(RegistrationFormBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    is_built_in: bool = Field(default=False, index=True)
    created_by: uuid.UUID | None = Field(default=None, foreign_key="user.id", ondelete="SET NULL")
    tier1: dict = Field(default_factory=dict, sa_type=JSON)
    tier2: dict = Field(default_factory=dict, sa_type=JSON)
    tier3: dict = Field(default_factory=dict, sa_type=JSON)
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    updated_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
        sa_column_kwargs={"onupdate": get_datetime_utc},
    )

    def custom_questions(self) -> list[CustomQuestion]:
        questions = list(RegistrationTier1.model_validate(self.tier1 or {}).custom_questions)
        for tier_model, data in ((RegistrationTier2, self.tier2), (RegistrationTier3, self.tier3)):
            tier = tier_model.model_validate(data or {})
            if tier.enabled:
                questions.extend(tier.custom_questions)
        return questions


class RegistrationFormPublic(RegistrationFormBase):
    id: uuid.UUID
    is_built_in: bool
    created_by: uuid.UUID | None = None
    tier1: RegistrationTier1
    tier2: RegistrationTier2
    tier3: RegistrationTier3
    created_at: datetime | None = None


class RegistrationFormsPublic(SQLModel):
    data: list[RegistrationFormPublic]
    count: int


# Landing-page templates

class TemplateColors(SQLModel):
    primary: str = "#00684A"
    secondary: str = "#13AA52"
    background: str = "#FFFFFF"
    surface: str = "#F9FBFA"
    text: str = "#001E2B"
    text_secondary: str = "#5C6C75"
    hero_bg: str = "#00684A"
    hero_bg_end: str = "#004D37"
    hero_text: str = "#FFFFFF"
    button_bg: str = "#FFFFFF"
    button_text: str = "#00684A"


class TemplateTypography(SQLModel):
    heading_font: Literal["system", "serif", "mono"] = "system"
    body_font: Literal["system", "serif", "mono"] = "system"
    heading_weight: Literal[600, 700, 800, 900] = 700
    scale: Literal["compact", "default", "large"] = "default"


class TemplateSectionStyle(SQLModel):
    bg_style: Literal["light", "dark", "primary", "gradient"] = "light"
    spacing: Literal["compact", "default", "spacious"] = "default"


class TemplateSection(SQLModel):
    type: Literal["hero", "about", "prizes", "schedule", "sponsors", "partners", "faq", "cta"]
    enabled: bool = True
    layout: str = "default"
    style: TemplateSectionStyle = TemplateSectionStyle()


class TemplateCards(SQLModel):
    border_radius: Literal[0, 8, 12, 16] = 12
    style: Literal["shadow", "border", "flat", "glass"] = "shadow"
    accent_position: Literal["top", "left", "none"] = "none"


class TemplateHero(SQLModel):
    style: Literal["gradient", "solid", "image-overlay", "light"] = "gradient"
    gradient_direction: str = "135deg"
    overlay_opacity: float = Field(default=0.85, ge=0, le=1)
    button_style: Literal["rounded", "pill", "square"] = "rounded"


def default_template_sections() -> list[TemplateSection]:
    return [
        TemplateSection(type=section_type)  # type: ignore[arg-type]
        for section_type in ("hero", "about", "prizes", "schedule", "sponsors", "faq", "cta")
    ]


class TemplateBase(SQLModel):
    name: str = Field(min_length=1, max_length=200)
    slug: Slug = Field(unique=True, index=True, max_length=120)
    description: str = Field(default="", max_length=2000)
    base_template: str = Field(default="", max_length=120)
    is_default: bool = Field(default=False, index=True)


class TemplateCreate(TemplateBase):
    colors: TemplateColors = TemplateColors()
    typography: TemplateTypography = TemplateTypography()
    sections: list[TemplateSection] = Field(default_factory=default_template_sections)
    cards: TemplateCards = TemplateCards()
    hero: TemplateHero = TemplateHero()


class TemplateUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    slug: Slug | None = Field(default=None, max_length=120)
    description: str | None = Field(default=None, max_length=2000)
    is_default: bool | None = None
    colors: TemplateColors | None = None
    typography: TemplateTypography | None = None
    sections: list[TemplateSection] | None = None
    cards: TemplateCards | None = None
    hero: TemplateHero | None = None


class TemplateConfig(TemplateBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    is_built_in: bool = Field(default=False, index=True)
    created_by: uuid.UUID | None = Field(default=None, foreign_key="user.id", ondelete="SET NULL")
    colors: dict = Field(default_factory=dict, sa_type=JSON)
    typography: dict = Field(default_factory=dict, sa_type=JSON)
    sections: list[dict] = Field(default_factory=list, sa_type=JSON)
    cards: dict = Field(default_factory=dict, sa_type=JSON)
    hero: dict = Field(default_factory=dict, sa_type=JSON)
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    updated_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
        sa_column_kwargs={"onupdate": get_datetime_utc},
    )


class TemplatePublic(TemplateBase):
    id: uuid.UUID
    is_built_in: bool
    created_by: uuid.UUID | None = None
    colors: TemplateColors
    typography: TemplateTypography
    sections: list[TemplateSection]
    cards: TemplateCards
    hero: TemplateHero
    created_at: datetime | None = None


class TemplatesPublic(SQLModel):
    data: list[TemplatePublic]
    count: int


class LandingPageUpdate(SQLModel):
    slug: Slug = Field(max_length=120)
    template: str = Field(default="modern", max_length=120)
    published: bool = False
    custom_content: dict[str, Any] = {}


class LandingPagePublic(SQLModel):
    slug: str | None = None
    template: str
    published: bool
    custom_content: dict[str, Any] = {}


class PartnerPrize(SQLModel):
    title: str
    description: str
    value: str | None = None
    category: PrizeCategory
    partner_name: str
    partner_logo: str | None = None


class LandingPageView(SQLModel):
    event: EventPublic
    slug: str
    template: TemplatePublic | None = None
    custom_content: dict[str, Any] = {}
    sections: list[TemplateSection] = []
    prizes: list[PrizePublic] = []
    partner_prizes: list[PartnerPrize] = []


# Atlas clusters

class AtlasCluster(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    event_id: uuid.UUID = Field(foreign_key="event.id", nullable=False, index=True, ondelete="CASCADE")
    team_id: uuid.UUID = Field(foreign_key="team.id", nullable=False, index=True)
    project_id: uuid.UUID = Field(foreign_key="project.id", nullable=False)
    provisioned_by: uuid.UUID | None = Field(default=None, foreign_key="user.id", ondelete="SET NULL")
    atlas_project_id: str = Field(unique=True, index=True, max_length=64)
    atlas_project_name: str = Field(max_length=64)
    atlas_cluster_name: str = Field(max_length=64)
    atlas_cluster_id: str = ""
    connection_string: str = ""
    standard_connection_string: str = ""
    database_users: list[dict] = Field(default_factory=list, sa_type=JSON)
    ip_access_list: list[dict] = Field(default_factory=list, sa_type=JSON)
    status: ClusterStatus = Field(default=ClusterStatus.creating, index=True)
    provider_name: CloudProvider = CloudProvider.AWS
    region_name: str = "US_EAST_1"
    mongodb_version: str = ""
    error_message: str | None = None
    last_status_check: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    deleted_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))  # type: ignore


class AtlasDatabaseUserEntry(SQLModel):
    username: str
    created_at: datetime
    created_by: uuid.UUID | None = None


class AtlasIpAccessEntry(SQLModel):
    cidr_block: str
    comment: str = ""
    added_at: datetime
    added_by: uuid.UUID | None = None


class AtlasClusterPublic(SQLModel):
    id: uuid.UUID
    event_id: uuid.UUID
    team_id: uuid.UUID
    project_id: uuid.UUID
    provisioned_by: uuid.UUID | None = None
    atlas_project_id: str
    atlas_project_name: str
    atlas_cluster_name: str
    connection_string: str
    standard_connection_string: str
    database_users: list[AtlasDatabaseUserEntry]
    ip_access_list: list[AtlasIpAccessEntry]
    status: ClusterStatus
    provider_name: CloudProvider
    region_name: str
    mongodb_version: str
    error_message: str | None = None
    last_status_check: datetime | None = None
    created_at: datetime | None = None
    deleted_at: datetime | None = None


class AtlasClustersPublic(SQLModel):
    data: list[AtlasClusterPublic]
    count: int


class AtlasCredentials(SQLModel):
    username: str
    password: str


class ProvisionedCluster(AtlasClusterPublic):
    initial_credentials: AtlasCredentials


class ClusterProvisionRequest(SQLModel):
    event_id: uuid.UUID
    provider: CloudProvider | None = None
    region: str | None = Field(default=None, max_length=64)


class DatabaseUserCreate(SQLModel):
    username: str

    @field_validator("username")
    @classmethod
    def _check_username(cls, value: str) -> str:
        if not USERNAME_RE.match(value):
            raise ValueError("Username must be 3-32 letters, numbers, hyphens or underscores")
        return value


class IpAccessCreate(SQLModel):
    cidr_block: str
    comment: str = Field(default="", max_length=200)

    @field_validator("cidr_block")
    @classmethod
    def _check_cidr(cls, value: str) -> str:
        network = ipaddress.ip_network(value if "/" in value else f"{value}/32", strict=False)
        return str(network)


class CleanupError(SQLModel):
    cluster_id: uuid.UUID
    error: str


class CleanupReport(SQLModel):
    event_id: uuid.UUID
    event_name: str
    clusters_found: int
    clusters_deleted: int
    errors: list[CleanupError] = []


# Notifications

class Notification(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="user.id", nullable=False, index=True, ondelete="CASCADE")
    type: NotificationType
    title: str = Field(max_length=200)
    message: str = Field(max_length=2000)
    read: bool = Field(default=False, index=True)
    related_event_id: uuid.UUID | None = Field(default=None, foreign_key="event.id", ondelete="CASCADE")
    related_team_id: uuid.UUID | None = Field(default=None, foreign_key="team.id", ondelete="SET NULL")
    related_project_id: uuid.UUID | None = Field(default=None, foreign_key="project.id", ondelete="SET NULL")
    action_url: str | None = Field(default=None, max_length=500)
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class NotificationPublic(SQLModel):
    id: uuid.UUID
    type: NotificationType
    title: str
    message: str
    read: bool
    related_event_id: uuid.UUID | None = None
    related_team_id: uuid.UUID | None = None
    related_project_id: uuid.UUID | None = None
    action_url: str | None = None
    created_at: datetime | None = None


class NotificationsPublic(SQLModel):
    data: list[NotificationPublic]
    count: int
    unread_count: int


# Dashboard

class DashboardRegistration(SQLModel):
    event_id: uuid.UUID
    event_name: str
    event_status: EventStatus
    start_date: datetime
    registration_status: RegistrationStatus
    team_id: uuid.UUID | None = None
    team_name: str | None = None
    is_team_leader: bool = False
    project_id: uuid.UUID | None = None
    project_name: str | None = None
    project_status: ProjectStatus | None = None


class UserDashboard(SQLModel):
    user: UserPublic
    registrations: list[DashboardRegistration]
    judging_assignments: int = 0
    unread_notifications: int = 0


# Project ideas

class ProjectIdeaGenerate(SQLModel):
    event_id: uuid.UUID
    inputs: IdeaInputs = IdeaInputs()
    count: int = Field(default=3, ge=1, le=5)


class ProjectIdea(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="user.id", nullable=False, index=True, ondelete="CASCADE")
    event_id: uuid.UUID = Field(foreign_key="event.id", nullable=False, index=True, ondelete="CASCADE")
    team_id: uuid.UUID | None = Field(default=None, foreign_key="team.id", ondelete="SET NULL")
    inputs: dict = Field(default_factory=dict, sa_type=JSON)
    idea: dict = Field(default_factory=dict, sa_type=JSON)
    saved: bool = False
    model: str = ""
    builder_prompts: dict = Field(default_factory=dict, sa_type=JSON)
    generated_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class ProjectIdeaPublic(SQLModel):
    id: uuid.UUID
    user_id: uuid.UUID
    event_id: uuid.UUID
    team_id: uuid.UUID | None = None
    inputs: IdeaInputs
    idea: GeneratedIdea
    saved: bool
    model: str
    builder_prompts: dict[str, Any] = {}
    generated_at: datetime | None = None


class ProjectIdeasPublic(SQLModel):
    data: list[ProjectIdeaPublic]
    count: int


class BuilderPromptMetadata(SQLModel):
    idea_id: uuid.UUID
    idea_name: str
    event_name: str
    generated_at: datetime


class BuilderPromptResult(SQLModel):
    prompt: str
    variant: Literal["full-scaffold", "backend-first", "frontend-first"]
    enhanced: bool
    token_estimate: int
    metadata: BuilderPromptMetadata
