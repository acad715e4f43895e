import uuid
from typing import Any

from fastapi import APIRouter, HTTPException
from sqlmodel import col, func, or_, select

from hackhub import crud
from hackhub.api.deps import AdminUser, CurrentUser, SessionDep, SuperAdminUser
from hackhub.core.security import get_password_hash, verify_password
from hackhub.models import (
    ADMIN_ROLES,
    DashboardRegistration,
    Event,
    JudgeAssignment,
    Message,
    Project,
    Registration,
    Team,
    TeamMember,
    UpdatePassword,
    User,
    UserCreate,
    UserDashboard,
    UserPublic,
    UserRegister,
    UserRole,
    UserRoleUpdate,
    UsersPublic,
    UserUpdateMe,
)
from hackhub.services.notifications import unread_count

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/", response_model=UsersPublic)
def read_users(
    session: SessionDep,
    current_user: AdminUser,
    role: UserRole | None = None,
    search: str | None = None,
    skip: int = 0,
    limit: int = 100,
) -> Any:
    """
    Retrieve users, optionally filtered by role or a name/email search.
    """
    statement = select(User)
    count_statement = select(func.count()).select_from(User)
    if role:
        statement = statement.where(User.role == role)
        count_statement = count_statement.where(User.role == role)
    if search:
        pattern = f"%{search}%"
        condition = or_(col(User.email).ilike(pattern), col(User.full_name).ilike(pattern))
        statement = statement.where(condition)
        count_statement = count_statement.where(condition)

    count = session.exec(count_statement).one()
    users = session.exec(
        statement.order_by(col(User.created_at).desc()).offset(skip).limit(limit)
    ).all()
    return UsersPublic(data=users, count=count)


@router.post("/signup", response_model=UserPublic)
def register_user(session: SessionDep, user_in: UserRegister) -> Any:
    """
    Create new user without the need to be logged in.
    """
    user = crud.get_user_by_email(session=session, email=user_in.email)
    if user:
        raise HTTPException(
            status_code=400,
            detail="The user with this email already exists in the system",
        )
    user_create = UserCreate.model_validate(user_in)
    return crud.create_user(session=session, user_create=user_create)


@router.get("/me", response_model=UserPublic)
def read_user_me(current_user: CurrentUser) -> Any:
    """
    Get current user.
    """
    return current_user


@router.patch("/me", response_model=UserPublic)
def update_user_me(
    *, session: SessionDep, user_in: UserUpdateMe, current_user: CurrentUser
) -> Any:
    """
    Update own profile and notification preferences.
    """
    if user_in.email:
        existing_user = crud.get_user_by_email(session=session, email=user_in.email)
        if existing_user and existing_user.id != current_user.id:
            raise HTTPException(
                status_code=409, detail="User with this email already exists"
            )
    return crud.update_user(session=session, db_user=current_user, user_in=user_in)


@router.patch("/me/password", response_model=Message)
def update_password_me(
    *, session: SessionDep, body: UpdatePassword, current_user: CurrentUser
) -> Any:
    verified, _ = verify_password(body.current_password, current_user.hashed_password)
    if not verified:
        raise HTTPException(status_code=400, detail="Incorrect password")
    if body.current_password == body.new_password:
        raise HTTPException(
            status_code=400, detail="New password cannot be the same as the current one"
        )
    current_user.hashed_password = get_password_hash(body.new_password)
    session.add(current_user)
    session.commit()
    return Message(message="Password updated successfully")


@router.get("/me/dashboard", response_model=UserDashboard)
def read_dashboard(session: SessionDep, current_user: CurrentUser) -> Any:
    """
    Everything a signed-in user is part of: events, their teams and projects.
    """
    registrations = []
    statement = (
        select(Registration)
        .where(Registration.user_id == current_user.id)
        .order_by(col(Registration.registered_at).desc())
    )
    for registration in session.exec(statement).all():
        event = session.get(Event, registration.event_id)
        if not event:
            continue
        entry = DashboardRegistration(
            event_id=event.id,
            event_name=event.name,
            event_status=event.status,
            start_date=event.start_date,
            registration_status=registration.status,
        )
        membership = crud.get_membership(
            session=session, event_id=event.id, user_id=current_user.id
        )
        if membership:
            team = session.get(Team, membership.team_id)
            if team:
                entry.team_id = team.id
                entry.team_name = team.name
                entry.is_team_leader = team.leader_id == current_user.id
                project = session.exec(
                    select(Project).where(Project.team_id == team.id)
                ).first()
                if project:
                    entry.project_id = project.id
                    entry.project_name = project.name
                    entry.project_status = project.status
        registrations.append(entry)

    assignments = session.exec(
        select(func.count())
        .select_from(JudgeAssignment)
        .where(JudgeAssignment.judge_id == current_user.id)
    ).one()
    return UserDashboard(
        user=UserPublic.model_validate(current_user),
        registrations=registrations,
        judging_assignments=assignments,
        unread_notifications=unread_count(session=session, user_id=current_user.id),
    )


@router.patch("/{user_id}/role", response_model=UserPublic)
def update_user_role(
    *, session: SessionDep, user_id: uuid.UUID, body: UserRoleUpdate, current_user: AdminUser
) -> Any:
    """
    Change a user's role. Only super admins may grant or revoke admin roles.
    """
    db_user = session.get(User, user_id)
    if not db_user:
        raise HTTPException(status_code=404, detail="User not found")
    if db_user.id == current_user.id:
        raise HTTPException(status_code=400, detail="You cannot change your own role")
    touches_admin = body.role in ADMIN_ROLES or db_user.role in ADMIN_ROLES
    if touches_admin and current_user.role != UserRole.super_admin:
        raise HTTPException(
            status_code=403, detail="Only super admins can grant or revoke admin roles"
        )
    db_user.role = body.role
    session.add(db_user)
    session.commit()
    session.refresh(db_user)
    return db_user


@router.patch("/{user_id}/ban", response_model=UserPublic)
def toggle_user_ban(
    *, session: SessionDep, user_id: uuid.UUID, current_user: AdminUser
) -> Any:
    db_user = session.get(User, user_id)
    if not db_user:
        raise HTTPException(status_code=404, detail="User not found")
    if db_user.id == current_user.id:
        raise HTTPException(status_code=400, detail="You cannot ban yourself")
    if db_user.role == UserRole.super_admin and current_user.role != UserRole.super_admin:
        raise HTTPException(status_code=403, detail="Only super admins can ban a super admin")
    db_user.is_active = not db_user.is_active
    session.add(db_user)
    session.commit()
    session.refresh(db_user)
    return db_user


@router.delete("/{user_id}", response_model=Message)
def delete_user(
    *, session: SessionDep, user_id: uuid.UUID, current_user: SuperAdminUser
) -> Any:
    """
    Delete a user.
    """
    db_user = session.get(User, user_id)
    if not db_user:
        raise HTTPException(status_code=404, detail="User not found")
    if db_user.id == current_user.id:
        raise HTTPException(
            status_code=403, detail="Super users are not allowed to delete themselves"
        )
    leads_team = session.exec(select(Team.id).where(Team.leader_id == user_id)).first()
    if leads_team:
        raise HTTPException(
            status_code=409, detail="User leads a team; transfer leadership before deleting"
        )
    memberships = session.exec(select(TeamMember).where(TeamMember.user_id == user_id)).all()
    for membership in memberships:
        session.delete(membership)
    session.delete(db_user)
    session.commit()
    return Message(message="User deleted successfully")
