import copy
import uuid
from typing import Any, TypeVar

from sqlmodel import Session, SQLModel, select

from hackhub.core.security import get_password_hash, verify_password
from hackhub.models import (
    AtlasCluster,
    FeedbackFormConfig,
    Participant,
    Project,
    Registration,
    RegistrationFormConfig,
    Team,
    TeamMember,
    TeamStatus,
    TemplateConfig,
    User,
    UserCreate,
    UserUpdateMe,
)

ConfigDocument = TypeVar("ConfigDocument", FeedbackFormConfig, RegistrationFormConfig, TemplateConfig)


def dump_document(obj_in: SQLModel, *, exclude_unset: bool = False) -> dict[str, Any]:
    """Dump a request model for writing into a table.

    Nested documents end up in JSON columns, so they are dumped in JSON mode
    (UUIDs and datetimes become strings). Scalar fields keep their Python types.
    """
    data = obj_in.model_dump(exclude_unset=exclude_unset)
    json_data = obj_in.model_dump(mode="json", exclude_unset=exclude_unset)
    return {
        key: json_data[key] if isinstance(value, dict | list) else value
        for key, value in data.items()
    }


def create_user(*, session: Session, user_create: UserCreate) -> User:
    db_obj = User.model_validate(
        user_create,
        update={
            "email": user_create.email.lower(),
            "hashed_password": get_password_hash(user_create.password),
        },
    )
    session.add(db_obj)
    session.commit()
    session.refresh(db_obj)
    return db_obj


def update_user(*, session: Session, db_user: User, user_in: UserUpdateMe) -> Any:
    user_data = dump_document(user_in, exclude_unset=True)
    if user_data.get("email"):
        user_data["email"] = user_data["email"].lower()
    db_user.sqlmodel_update(user_data)
    session.add(db_user)
    session.commit()
    session.refresh(db_user)
    return db_user


def get_user_by_email(*, session: Session, email: str) -> User | None:
    statement = select(User).where(User.email == email.lower())
    session_user = session.exec(statement).first()
    return session_user


# Dummy hash to use for timing attack prevention when user is not found
# This is an Argon2 hash of a random password, used to ensure constant-time comparison
DUMMY_HASH = "$argon2id$v=19$m=65536,t=3,p=4$MjQyZWE1MzBjYjJlZTI0Yw$YTU4NGM5ZTZmYjE2NzZlZjY0ZWY3ZGRkY2U2OWFjNjk"


def authenticate(*, session: Session, email: str, password: str) -> User | None:
    db_user = get_user_by_email(session=session, email=email)
    if not db_user:
        # Keep response time similar whether or not the email exists
        verify_password(password, DUMMY_HASH)
        return None
    verified, updated_password_hash = verify_password(password, db_user.hashed_password)
    if not verified:
        return None
    if updated_password_hash:
        db_user.hashed_password = updated_password_hash
        session.add(db_user)
        session.commit()
        session.refresh(db_user)
    return db_user


def get_participant_for_user(*, session: Session, user_id: uuid.UUID) -> Participant | None:
    statement = select(Participant).where(Participant.user_id == user_id)
    return session.exec(statement).first()


def find_config(
    *, session: Session, table: type[ConfigDocument], id_or_slug: str
) -> ConfigDocument | None:
    """Look a form or template up by id, falling back to its slug."""
    try:
        document = session.get(table, uuid.UUID(id_or_slug))
    except ValueError:
        document = None
    if document:
        return document
    return session.exec(select(table).where(table.slug == id_or_slug)).first()


def slug_taken(
    *, session: Session, table: type[ConfigDocument], slug: str, exclude_id: uuid.UUID | None = None
) -> bool:
    statement = select(table.id).where(table.slug == slug)
    if exclude_id:
        statement = statement.where(table.id != exclude_id)
    return session.exec(statement).first() is not None


def unique_slug(*, session: Session, table: type[ConfigDocument], base: str) -> str:
    slug = base
    counter = 1
    while slug_taken(session=session, table=table, slug=slug):
        slug = f"{base}-{counter}"
        counter += 1
    return slug


def clone_config(
    *,
    session: Session,
    source: ConfigDocument,
    created_by: uuid.UUID,
    name: str | None = None,
    slug: str | None = None,
) -> ConfigDocument:
    """Copy a form or template into a new, editable document.

    Everything but identifiers and timestamps is copied. The copy is never
    built in or default; templates remember the slug they were cloned from.
    """
    table = type(source)
    data = copy.deepcopy(source.model_dump(exclude={"id", "created_at", "updated_at"}))
    data.update(
        name=name or f"{source.name} (Copy)",
        slug=unique_slug(session=session, table=table, base=slug or f"{source.slug}-copy"),
        is_built_in=False,
        created_by=created_by,
    )
    if table is TemplateConfig:
        data.update(is_default=False, base_template=source.slug)
    db_obj = table.model_validate(data)
    session.add(db_obj)
    session.commit()
    session.refresh(db_obj)
    return db_obj


def get_registration(*, session: Session, event_id: uuid.UUID, user_id: uuid.UUID) -> Registration | None:
    statement = select(Registration).where(
        Registration.event_id == event_id, Registration.user_id == user_id
    )
    return session.exec(statement).first()


def get_membership(*, session: Session, event_id: uuid.UUID, user_id: uuid.UUID) -> TeamMember | None:
    statement = select(TeamMember).where(
        TeamMember.event_id == event_id, TeamMember.user_id == user_id
    )
    return session.exec(statement).first()


def get_team_members(*, session: Session, team_id: uuid.UUID) -> list[TeamMember]:
    statement = select(TeamMember).where(TeamMember.team_id == team_id).order_by(TeamMember.joined_at)
    return list(session.exec(statement).all())


def registered_user_ids(*, session: Session, event_id: uuid.UUID) -> list[uuid.UUID]:
    statement = select(Registration.user_id).where(Registration.event_id == event_id)
    return list(session.exec(statement).all())


def close_empty_team(*, session: Session, team: Team) -> bool:
    """Drop a team whose last member has left.

    Teams that own a project or an Atlas cluster are kept as inactive so the
    submission, its scores and the cluster record stay intact. Returns True
    when the team was deleted. The caller commits.
    """
    owns_records = session.exec(
        select(Project.id).where(Project.team_id == team.id)
    ).first() or session.exec(
        select(AtlasCluster.id).where(AtlasCluster.team_id == team.id)
    ).first()
    if owns_records:
        team.status = TeamStatus.inactive
        team.looking_for_members = False
        session.add(team)
        return False
    session.delete(team)
    return True
