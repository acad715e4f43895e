import logging
import uuid
from typing import Any

from fastapi import APIRouter, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlmodel import col, select

from hackhub import crud
from hackhub.api.deps import CurrentUser, EventDep, SessionDep
from hackhub.models import (
    Event,
    Message,
    NotificationType,
    Team,
    TeamCreate,
    TeamMember,
    TeamMemberAction,
    TeamMemberPublic,
    TeamNote,
    TeamNoteCreate,
    TeamNotePublic,
    TeamNoteUpdate,
    TeamPublic,
    TeamsPublic,
    TeamStatus,
    TeamUpdate,
    User,
    get_datetime_utc,
)
from hackhub.services.notifications import notify

router = APIRouter(prefix="/events/{event_id}/teams", tags=["teams"])
logger = logging.getLogger(__name__)


def get_team_or_404(session: SessionDep, event: Event, team_id: uuid.UUID) -> Team:
    team = session.get(Team, team_id)
    if not team or team.event_id != event.id:
        raise HTTPException(status_code=404, detail="Team not found")
    return team


def team_public(session: SessionDep, team: Team) -> TeamPublic:
    members = crud.get_team_members(session=session, team_id=team.id)
    users = {}
    if members:
        users = {
            u.id: u
            for u in session.exec(
                select(User).where(col(User.id).in_([m.user_id for m in members]))
            ).all()
        }
    member_rows = [
        TeamMemberPublic(
            user_id=m.user_id,
            full_name=users[m.user_id].full_name,
            email=users[m.user_id].email,
            joined_at=m.joined_at,
        )
        for m in members
        if m.user_id in users
    ]
    return TeamPublic.model_validate(
        team, update={"members": member_rows, "member_count": len(members)}
    )


def require_member(session: SessionDep, team: Team, user: User) -> None:
    membership = crud.get_membership(session=session, event_id=team.event_id, user_id=user.id)
    if not membership or membership.team_id != team.id:
        raise HTTPException(status_code=403, detail="You are not a member of this team")


def require_leader(team: Team, user: User) -> None:
    if team.leader_id != user.id:
        raise HTTPException(status_code=403, detail="Only the team leader can do this")


def refresh_looking_for_members(session: SessionDep, team: Team) -> None:
    count = len(crud.get_team_members(session=session, team_id=team.id))
    if count >= team.max_members:
        team.looking_for_members = False
    session.add(team)


@router.get("/", response_model=TeamsPublic)
def read_teams(
    session: SessionDep, event: EventDep, looking_for_members: bool | None = None
) -> Any:
    statement = select(Team).where(Team.event_id == event.id)
    if looking_for_members is not None:
        statement = statement.where(Team.looking_for_members == looking_for_members)
    teams = session.exec(statement.order_by(col(Team.created_at).desc())).all()
    return TeamsPublic(data=[team_public(session, t) for t in teams], count=len(teams))


@router.post("/", response_model=TeamPublic)
def create_team(
    *, session: SessionDep, event: EventDep, current_user: CurrentUser, team_in: TeamCreate
) -> Any:
    """
    Create a team for an event. The creator becomes its leader and first member.
    """
    if not crud.get_registration(session=session, event_id=event.id, user_id=current_user.id):
        raise HTTPException(
            status_code=400, detail="You must be registered for this event to create a team"
        )
    if crud.get_membership(session=session, event_id=event.id, user_id=current_user.id):
        raise HTTPException(status_code=400, detail="You are already in a team for this event")

    team = Team.model_validate(
        crud.dump_document(team_in), update={"event_id": event.id, "leader_id": current_user.id}
    )
    if team.max_members <= 1:
        team.looking_for_members = False
    session.add(team)
    session.flush()
    session.add(TeamMember(team_id=team.id, event_id=event.id, user_id=current_user.id))
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="You are already in a team for this event")
    session.refresh(team)
    logger.info("Team %s created for event %s", team.id, event.id)
    return team_public(session, team)


@router.get("/{team_id}", response_model=TeamPublic)
def read_team(session: SessionDep, event: EventDep, team_id: uuid.UUID) -> Any:
    return team_public(session, get_team_or_404(session, event, team_id))


@router.patch("/{team_id}", response_model=TeamPublic)
def update_team(
    *,
    session: SessionDep,
    event: EventDep,
    team_id: uuid.UUID,
    current_user: CurrentUser,
    team_in: TeamUpdate,
) -> Any:
    team = get_team_or_404(session, event, team_id)
    if not current_user.is_staff:
        require_leader(team, current_user)
    update_data = crud.dump_document(team_in, exclude_unset=True)
    member_count = len(crud.get_team_members(session=session, team_id=team.id))
    if update_data.get("max_members") and update_data["max_members"] < member_count:
        raise HTTPException(
            status_code=400, detail="Max members cannot be lower than the current team size"
        )
    team.sqlmodel_update(update_data)
    if member_count >= team.max_members:
        team.looking_for_members = False
    session.add(team)
    session.commit()
    session.refresh(team)
    return team_public(session, team)


@router.post("/{team_id}/join", response_model=TeamPublic)
def join_team(
    session: SessionDep, event: EventDep, team_id: uuid.UUID, current_user: CurrentUser
) -> Any:
    team = get_team_or_404(session, event, team_id)
    if not crud.get_registration(session=session, event_id=event.id, user_id=current_user.id):
        raise HTTPException(
            status_code=400, detail="You must be registered for this event to join a team"
        )
    if crud.get_membership(session=session, event_id=event.id, user_id=current_user.id):
        raise HTTPException(status_code=400, detail="You are already in a team for this event")
    if team.status == TeamStatus.inactive:
        raise HTTPException(status_code=400, detail="This team is no longer active")
    if len(crud.get_team_members(session=session, team_id=team.id)) >= team.max_members:
        raise HTTPException(status_code=400, detail="Team is full")

    session.add(TeamMember(team_id=team.id, event_id=event.id, user_id=current_user.id))
    try:
        session.flush()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="You are already in a team for this event")
    refresh_looking_for_members(session, team)
    session.commit()
    session.refresh(team)

    notify(
        session=session,
        user_ids=[team.leader_id],
        type=NotificationType.team_member_joined,
        title="New team member",
        message=f"{current_user.full_name or current_user.email} joined {team.name}",
        related_event_id=event.id,
        related_team_id=team.id,
        action_url=f"/events/{event.id}/teams/{team.id}",
    )
    return team_public(session, team)


@router.post("/{team_id}/leave", response_model=Message)
def leave_team(
    session: SessionDep, event: EventDep, team_id: uuid.UUID, current_user: CurrentUser
) -> Any:
    """
    Leave a team. The leader has to hand over leadership first unless they
    are the last member, in which case the team is deleted.
    """
    team = get_team_or_404(session, event, team_id)
    require_member(session, team, current_user)
    members = crud.get_team_members(session=session, team_id=team.id)
    if team.leader_id == current_user.id and len(members) > 1:
        raise HTTPException(
            status_code=400, detail="Team leader must transfer leadership before leaving"
        )

    membership = next(m for m in members if m.user_id == current_user.id)
    session.delete(membership)
    if len(members) == 1:
        deleted = crud.close_empty_team(session=session, team=team)
        session.commit()
        if deleted:
            return Message(message="Left team and team was deleted (empty)")
        return Message(message="Left team and team was closed (it still owns a project)")

    session.commit()
    notify(
        session=session,
        user_ids=[team.leader_id],
        type=NotificationType.team_member_left,
        title="Team member left",
        message=f"{current_user.full_name or current_user.email} left {team.name}",
        related_event_id=event.id,
        related_team_id=team.id,
        action_url=f"/events/{event.id}/teams/{team.id}",
    )
    return Message(message="Successfully left team")


@router.post("/{team_id}/remove-member", response_model=TeamPublic)
def remove_member(
    *,
    session: SessionDep,
    event: EventDep,
    team_id: uuid.UUID,
    current_user: CurrentUser,
    body: TeamMemberAction,
) -> Any:
    team = get_team_or_404(session, event, team_id)
    require_leader(team, current_user)
    if body.user_id == current_user.id:
        raise HTTPException(status_code=400, detail="Use leave to remove yourself from the team")
    membership = crud.get_membership(session=session, event_id=event.id, user_id=body.user_id)
    if not membership or membership.team_id != team.id:
        raise HTTPException(status_code=404, detail="User is not a member of this team")
    session.delete(membership)
    team.looking_for_members = True
    session.add(team)
    session.commit()
    session.refresh(team)
    return team_public(session, team)


@router.post("/{team_id}/transfer-leader", response_model=TeamPublic)
def transfer_leadership(
    *,
    session: SessionDep,
    event: EventDep,
    team_id: uuid.UUID,
    current_user: CurrentUser,
    body: TeamMemberAction,
) -> Any:
    team = get_team_or_404(session, event, team_id)
    require_leader(team, current_user)
    membership = crud.get_membership(session=session, event_id=event.id, user_id=body.user_id)
    if not membership or membership.team_id != team.id:
        raise HTTPException(status_code=400, detail="New leader must be a member of the team")
    team.leader_id = body.user_id
    session.add(team)
    session.commit()
    session.refresh(team)
    return team_public(session, team)


# Notes

def get_note_or_404(session: SessionDep, team: Team, note_id: uuid.UUID) -> TeamNote:
    note = session.get(TeamNote, note_id)
    if not note or note.team_id != team.id:
        raise HTTPException(status_code=404, detail="Note not found")
    return note


@router.get("/{team_id}/notes", response_model=list[TeamNotePublic])
def read_notes(
    session: SessionDep, event: EventDep, team_id: uuid.UUID, current_user: CurrentUser
) -> Any:
    team = get_team_or_404(session, event, team_id)
    require_member(session, team, current_user)
    return session.exec(
        select(TeamNote).where(TeamNote.team_id == team.id).order_by(col(TeamNote.created_at))
    ).all()


@router.post("/{team_id}/notes", response_model=TeamNotePublic)
def create_note(
    *,
    session: SessionDep,
    event: EventDep,
    team_id: uuid.UUID,
    current_user: CurrentUser,
    note_in: TeamNoteCreate,
) -> Any:
    team = get_team_or_404(session, event, team_id)
    require_member(session, team, current_user)
    content = note_in.content.strip()
    if not content:
        raise HTTPException(status_code=400, detail="Content is required")
    if note_in.parent_note_id:
        get_note_or_404(session, team, note_in.parent_note_id)

    note = TeamNote(
        team_id=team.id,
        author_id=current_user.id,
        content=content,
        parent_note_id=note_in.parent_note_id,
    )
    session.add(note)
    session.commit()
    session.refresh(note)

    others = [
        m.user_id
        for m in crud.get_team_members(session=session, team_id=team.id)
        if m.user_id != current_user.id
    ]
    if others:
        notify(
            session=session,
            user_ids=others,
            type=NotificationType.general,
            title="New team note",
            message=f"{current_user.full_name or 'A team member'} posted a note in {team.name}",
            related_event_id=event.id,
            related_team_id=team.id,
            action_url=f"/events/{event.id}/teams/{team.id}",
        )
        session.refresh(note)
    return note


@router.patch("/{team_id}/notes/{note_id}", response_model=TeamNotePublic)
def update_note(
    *,
    session: SessionDep,
    event: EventDep,
    team_id: uuid.UUID,
    note_id: uuid.UUID,
    current_user: CurrentUser,
    note_in: TeamNoteUpdate,
) -> Any:
    team = get_team_or_404(session, event, team_id)
    note = get_note_or_404(session, team, note_id)
    if note.author_id != current_user.id:
        raise HTTPException(status_code=403, detail="You can only edit your own notes")
    content = note_in.content.strip()
    if not content:
        raise HTTPException(status_code=400, detail="Content is required")
    note.content = content
    note.edited_at = get_datetime_utc()
    session.add(note)
    session.commit()
    session.refresh(note)
    return note


@router.delete("/{team_id}/notes/{note_id}", response_model=Message)
def delete_note(
    *,
    session: SessionDep,
    event: EventDep,
    team_id: uuid.UUID,
    note_id: uuid.UUID,
    current_user: CurrentUser,
) -> Any:
    team = get_team_or_404(session, event, team_id)
    note = get_note_or_404(session, team, note_id)
    if note.author_id != current_user.id:
        raise HTTPException(status_code=403, detail="You can only delete your own notes")
    replies = session.exec(select(TeamNote).where(TeamNote.parent_note_id == note.id)).all()
    for reply in replies:
        session.delete(reply)
    session.flush()
    session.delete(note)
    session.commit()
    return Message(message="Note deleted")
