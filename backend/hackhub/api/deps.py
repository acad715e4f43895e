import uuid
from collections.abc import AsyncGenerator, Callable, Generator
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jwt.exceptions import InvalidTokenError
from pydantic import ValidationError
from sqlmodel import Session

from hackhub.atlas.client import AtlasClient, AtlasNotConfiguredError
from hackhub.core import security
from hackhub.core.config import settings
from hackhub.core.db import engine
from hackhub.models import (
    ADMIN_ROLES,
    Event,
    JUDGE_ROLES,
    STAFF_ROLES,
    TokenPayload,
    User,
    UserRole,
)

reusable_oauth2 = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/login/access-token"
)
optional_oauth2 = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/login/access-token", auto_error=False
)


def get_db() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


SessionDep = Annotated[Session, Depends(get_db)]
TokenDep = Annotated[str, Depends(reusable_oauth2)]


def _user_from_token(session: Session, token: str) -> User:
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[security.ALGORITHM]
        )
        token_data = TokenPayload(**payload)
        user_id = uuid.UUID(token_data.sub or "")
    except (InvalidTokenError, ValidationError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = session.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if not user.is_active:
        raise HTTPException(status_code=400, detail="Inactive user")
    return user


def get_current_user(session: SessionDep, token: TokenDep) -> User:
    return _user_from_token(session, token)


CurrentUser = Annotated[User, Depends(get_current_user)]


def get_optional_user(
    session: SessionDep, token: Annotated[str | None, Depends(optional_oauth2)]
) -> User | None:
    if not token:
        return None
    return _user_from_token(session, token)


OptionalUser = Annotated[User | None, Depends(get_optional_user)]


def require_roles(*roles: UserRole) -> Callable[[User], User]:
    def checker(current_user: CurrentUser) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=403, detail="The user doesn't have enough privileges"
            )
        return current_user

    return checker


StaffUser = Annotated[User, Depends(require_roles(*STAFF_ROLES))]
AdminUser = Annotated[User, Depends(require_roles(*ADMIN_ROLES))]
SuperAdminUser = Annotated[User, Depends(require_roles(UserRole.super_admin))]
JudgeUser = Annotated[User, Depends(require_roles(*JUDGE_ROLES))]


def get_event(event_id: uuid.UUID, session: SessionDep) -> Event:
    event = session.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


EventDep = Annotated[Event, Depends(get_event)]


async def get_atlas_client() -> AsyncGenerator[AtlasClient, None]:
    try:
        client = AtlasClient()
    except AtlasNotConfiguredError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    async with client:
        yield client


AtlasClientDep = Annotated[AtlasClient, Depends(get_atlas_client)]
