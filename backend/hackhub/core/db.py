import logging

from sqlmodel import Session, SQLModel, create_engine, select

from hackhub import crud
from hackhub.core.builtins import (
    BUILT_IN_FEEDBACK_FORMS,
    BUILT_IN_REGISTRATION_FORMS,
    BUILT_IN_TEMPLATES,
)
from hackhub.core.config import settings
from hackhub.models import (
    FeedbackFormConfig,
    RegistrationFormConfig,
    TemplateConfig,
    User,
    UserCreate,
    UserRole,
)

logger = logging.getLogger(__name__)

engine = create_engine(str(settings.SQLALCHEMY_DATABASE_URI))


def seed_built_ins(session: Session) -> int:
    """Insert the built-in forms and templates that are missing, matched by slug."""
    created = 0
    for table, documents in (
        (FeedbackFormConfig, BUILT_IN_FEEDBACK_FORMS),
        (RegistrationFormConfig, BUILT_IN_REGISTRATION_FORMS),
        (TemplateConfig, BUILT_IN_TEMPLATES),
    ):
        for document in documents:
            existing = session.exec(select(table).where(table.slug == document.slug)).first()
            if existing:
                continue
            session.add(table.model_validate(crud.dump_document(document), update={"is_built_in": True}))
            created += 1
    session.commit()
    return created


def init_db(session: Session) -> None:
    # Tables are created directly from the SQLModel metadata
    SQLModel.metadata.create_all(session.get_bind())

    user = session.exec(
        select(User).where(User.email == settings.FIRST_SUPERUSER)
    ).first()
    if not user:
        user_in = UserCreate(
            email=settings.FIRST_SUPERUSER,
            password=settings.FIRST_SUPERUSER_PASSWORD,
            role=UserRole.super_admin,
            full_name="Super Admin",
        )
        user = crud.create_user(session=session, user_create=user_in)
        logger.info("Created first superuser %s", user.email)

    created = seed_built_ins(session)
    if created:
        logger.info("Seeded %s built-in forms and templates", created)
