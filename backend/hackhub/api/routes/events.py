import csv
import io
import logging
import uuid
from typing import Any

from fastapi import APIRouter, BackgroundTasks, HTTPException, Response
from sqlalchemy.exc import IntegrityError
from sqlmodel import col, func, select

from hackhub import crud
from hackhub.api.deps import (
    AdminUser,
    CurrentUser,
    EventDep,
    OptionalUser,
    SessionDep,
    StaffUser,
)
from hackhub.atlas.provisioning import event_settings
from hackhub.core.config import settings
from hackhub.models import (
    Event,
    EventCreate,
    EventDetail,
    EventPublic,
    EventRegistrationRequest,
    EventResults,
    EventsPublic,
    EventStatus,
    EventUpdate,
    LandingPagePublic,
    LandingPageUpdate,
    Message,
    NotificationType,
    Participant,
    Registration,
    RegistrationFormConfig,
    RegistrationPublic,
    RegistrationsPublic,
    RegistrationStatusUpdate,
    RegistrationWithParticipant,
    Team,
    TeamMember,
    TemplateConfig,
    WaitlistEntry,
    WaitlistJoin,
    check_event_dates,
    ensure_utc,
    get_datetime_utc,
)
from hackhub.services import email as email_service
from hackhub.services import jobs
from hackhub.services.judging import event_results
from hackhub.services.notifications import notify

router = APIRouter(prefix="/events", tags=["events"])
logger = logging.getLogger(__name__)

EVENT_FLOW = [EventStatus.draft, EventStatus.open, EventStatus.in_progress, EventStatus.concluded]
REGISTRATION_OPEN = (EventStatus.open, EventStatus.in_progress)


def registration_count(session: SessionDep, event_id: uuid.UUID) -> int:
    return session.exec(
        select(func.count()).select_from(Registration).where(Registration.event_id == event_id)
    ).one()


def check_transition(current: EventStatus, target: EventStatus) -> None:
    """Events move one step forward or back along draft, open, in progress, concluded."""
    if current == target:
        return
    if abs(EVENT_FLOW.index(target) - EVENT_FLOW.index(current)) != 1:
        raise HTTPException(
            status_code=409,
            detail=f"Cannot move an event from {current.value} to {target.value}",
        )


def leave_event_team(session: SessionDep, event_id: uuid.UUID, user_id: uuid.UUID) -> None:
    membership = crud.get_membership(session=session, event_id=event_id, user_id=user_id)
    if not membership:
        return
    team = session.get(Team, membership.team_id)
    members = crud.get_team_members(session=session, team_id=membership.team_id)
    if team and team.leader_id == user_id and len(members) > 1:
        raise HTTPException(
            status_code=400,
            detail="Transfer team leadership before leaving the event",
        )
    session.delete(membership)
    if team and len(members) == 1:
        crud.close_empty_team(session=session, team=team)


def _event_detail(session: SessionDep, event: Event) -> EventDetail:
    registered = registration_count(session, event.id)
    return EventDetail.model_validate(
        event,
        update={"registered_count": registered, "spots_left": max(event.capacity - registered, 0)},
    )


@router.get("/", response_model=EventsPublic)
def read_events(
    session: SessionDep,
    current_user: OptionalUser,
    status: EventStatus | None = None,
    tag: str | None = None,
    skip: int = 0,
    limit: int = 100,
) -> Any:
    """
    List events. Drafts are only visible to staff.
    """
    statement = select(Event)
    if status:
        statement = statement.where(Event.status == status)
    if not (current_user and current_user.is_staff):
        statement = statement.where(Event.status != EventStatus.draft)
    events = session.exec(statement.order_by(col(Event.start_date).desc())).all()
    if tag:
        events = [e for e in events if tag.lower() in (t.lower() for t in e.tags or [])]
    return EventsPublic(data=events[skip : skip + limit], count=len(events))


@router.post("/", response_model=EventPublic)
def create_event(
    *, session: SessionDep, current_user: StaffUser, event_in: EventCreate
) -> Any:
    event = Event.model_validate(crud.dump_document(event_in), update={"created_by": current_user.id})
    session.add(event)
    session.commit()
    session.refresh(event)
    logger.info("Event %s created by %s", event.id, current_user.email)
    return event


@router.get("/{event_id}", response_model=EventDetail)
def read_event(session: SessionDep, event: EventDep, current_user: OptionalUser) -> Any:
    if event.status == EventStatus.draft and not (current_user and current_user.is_staff):
        raise HTTPException(status_code=404, detail="Event not found")
    return _event_detail(session, event)


@router.patch("/{event_id}", response_model=EventDetail)
def update_event(
    *,
    session: SessionDep,
    event: EventDep,
    current_user: StaffUser,
    background_tasks: BackgroundTasks,
    event_in: EventUpdate,
) -> Any:
    """
    Update an event. Moving it to concluded cleans up its Atlas clusters.
    """
    update_data = crud.dump_document(event_in, exclude_unset=True)
    try:
        check_event_dates(
            update_data.get("start_date") or event.start_date,
            update_data.get("end_date") or event.end_date,
            update_data.get("registration_deadline") or event.registration_deadline,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    previous_status = event.status
    if event_in.status:
        check_transition(event.status, event_in.status)
    if event_in.registration_form_id and not session.get(
        RegistrationFormConfig, event_in.registration_form_id
    ):
        raise HTTPException(status_code=400, detail="Registration form not found")

    event.sqlmodel_update(update_data)
    session.add(event)
    session.commit()
    session.refresh(event)

    concluded = previous_status != EventStatus.concluded and event.status == EventStatus.concluded
    if concluded:
        config = event_settings(event)
        if config.enabled and config.auto_cleanup_on_event_end and settings.atlas_enabled:
            background_tasks.add_task(jobs.cleanup_event, event.id)
    return _event_detail(session, event)


@router.delete("/{event_id}", response_model=Message)
def delete_event(session: SessionDep, event: EventDep, current_user: AdminUser) -> Any:
    """
    Delete an event. Only drafts or events nobody registered for can go.
    """
    if event.status != EventStatus.draft and registration_count(session, event.id):
        raise HTTPException(
            status_code=400,
            detail="Only draft events or events without registrations can be deleted",
        )
    session.delete(event)
    session.commit()
    return Message(message="Event deleted successfully")


@router.post("/{event_id}/register", response_model=RegistrationPublic)
def register_for_event(
    *,
    session: SessionDep,
    event: EventDep,
    current_user: CurrentUser,
    background_tasks: BackgroundTasks,
    registration_in: EventRegistrationRequest,
) -> Any:
    """
    Register the current user for an event, creating or updating their
    participant profile along the way.
    """
    if event.status not in REGISTRATION_OPEN:
        raise HTTPException(status_code=400, detail="Event is not open for registration")
    if ensure_utc(event.registration_deadline) < get_datetime_utc():
        raise HTTPException(status_code=400, detail="Registration deadline has passed")
    if crud.get_registration(session=session, event_id=event.id, user_id=current_user.id):
        raise HTTPException(status_code=400, detail="Already registered for this event")
    if registration_count(session, event.id) >= event.capacity:
        raise HTTPException(status_code=400, detail="Event is at full capacity")

    if event.registration_form_id:
        form = session.get(RegistrationFormConfig, event.registration_form_id)
        if form:
            for question in form.custom_questions():
                answer = registration_in.custom_responses.get(question.id)
                if question.required and answer in (None, "", [], False):
                    raise HTTPException(
                        status_code=400,
                        detail=f"Please answer the required question: {question.label}",
                    )

    profile = registration_in.model_dump(
        exclude_unset=True, exclude_none=True, exclude={"custom_responses"}
    )
    participant = crud.get_participant_for_user(session=session, user_id=current_user.id)
    if participant:
        participant.sqlmodel_update(profile)
    else:
        profile.setdefault("name", current_user.full_name or current_user.email.split("@")[0])
        participant = Participant.model_validate(
            profile, update={"user_id": current_user.id, "email": current_user.email}
        )
    session.add(participant)
    session.flush()

    registration = Registration(
        participant_id=participant.id,
        event_id=event.id,
        user_id=current_user.id,
        custom_responses=registration_in.custom_responses,
    )
    session.add(registration)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="Already registered for this event")
    session.refresh(registration)

    notify(
        session=session,
        user_ids=[current_user.id],
        type=NotificationType.registration_confirmed,
        title="Registration confirmed",
        message=f"You're registered for {event.name}",
        related_event_id=event.id,
        action_url=f"/events/{event.id}",
        background_tasks=background_tasks,
        email=email_service.registration_confirmation(
            name=participant.name,
            event_name=event.name,
            start_date=ensure_utc(event.start_date).strftime("%B %d, %Y"),
            location="Online" if event.is_virtual else event.location,
        ),
    )
    session.refresh(registration)
    return registration


@router.delete("/{event_id}/register", response_model=Message)
def unregister_from_event(
    session: SessionDep, event: EventDep, current_user: CurrentUser
) -> Any:
    """
    Cancel a registration. The user also leaves their team for the event.
    """
    registration = crud.get_registration(session=session, event_id=event.id, user_id=current_user.id)
    if not registration:
        raise HTTPException(status_code=404, detail="Not registered for this event")
    if event.status == EventStatus.concluded:
        raise HTTPException(status_code=400, detail="Event has already concluded")
    leave_event_team(session, event.id, current_user.id)
    session.delete(registration)
    session.commit()
    return Message(message="Registration cancelled")


@router.post("/{event_id}/waitlist", response_model=Message)
def join_waitlist(session: SessionDep, event: EventDep, body: WaitlistJoin) -> Any:
    email = body.email.lower()
    entry = session.exec(
        select(WaitlistEntry).where(WaitlistEntry.event_id == event.id, WaitlistEntry.email == email)
    ).first()
    if entry:
        entry.name = body.name
    else:
        entry = WaitlistEntry(event_id=event.id, name=body.name, email=email)
    session.add(entry)
    session.commit()
    return Message(message="You're on the waitlist")


def _registrations_with_participants(
    session: SessionDep, event_id: uuid.UUID
) -> list[RegistrationWithParticipant]:
    rows = session.exec(
        select(Registration, Participant)
        .join(Participant, col(Participant.id) == Registration.participant_id)
        .where(Registration.event_id == event_id)
        .order_by(col(Registration.registered_at))
    ).all()
    teams = dict(
        session.exec(
            select(TeamMember.user_id, TeamMember.team_id).where(TeamMember.event_id == event_id)
        ).all()
    )
    return [
        RegistrationWithParticipant.model_validate(
            registration,
            update={"participant": participant, "team_id": teams.get(registration.user_id)},
        )
        for registration, participant in rows
    ]


@router.get("/{event_id}/registrations", response_model=RegistrationsPublic)
def read_registrations(session: SessionDep, event: EventDep, current_user: StaffUser) -> Any:
    registrations = _registrations_with_participants(session, event.id)
    return RegistrationsPublic(data=registrations, count=len(registrations))


@router.get("/{event_id}/registrations/export")
def export_registrations(session: SessionDep, event: EventDep, current_user: StaffUser) -> Response:
    """
    Registrations as a CSV download.
    """
    team_names = {t.id: t.name for t in session.exec(select(Team).where(Team.event_id == event.id)).all()}
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(
        ["Name", "Email", "Experience", "Skills", "GitHub", "Status", "Team", "Registered At"]
    )
    for row in _registrations_with_participants(session, event.id):
        participant = row.participant
        writer.writerow(
            [
                participant.name,
                participant.email,
                participant.experience_level.value,
                "; ".join(participant.skills),
                participant.github_url or "",
                row.status.value,
                team_names.get(row.team_id, "") if row.team_id else "",
                row.registered_at.isoformat() if row.registered_at else "",
            ]
        )
    filename = f"registrations-{event.id}.csv"
    return Response(
        content=buffer.getvalue(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.patch("/{event_id}/registrations/{registration_id}", response_model=RegistrationPublic)
def update_registration_status(
    *,
    session: SessionDep,
    event: EventDep,
    registration_id: uuid.UUID,
    current_user: StaffUser,
    body: RegistrationStatusUpdate,
) -> Any:
    registration = session.get(Registration, registration_id)
    if not registration or registration.event_id != event.id:
        raise HTTPException(status_code=404, detail="Registration not found")
    registration.status = body.status
    session.add(registration)
    session.commit()
    session.refresh(registration)
    return registration


@router.get("/{event_id}/results", response_model=EventResults)
def read_results(session: SessionDep, event: EventDep, current_user: OptionalUser) -> Any:
    """
    Public leaderboard, available once results are published.
    """
    if not event.results_published and not (current_user and current_user.is_staff):
        raise HTTPException(status_code=403, detail="Results have not been published yet")
    return event_results(session=session, event=event)


@router.post("/{event_id}/publish-results", response_model=EventResults)
def publish_results(
    *,
    session: SessionDep,
    event: EventDep,
    current_user: StaffUser,
    background_tasks: BackgroundTasks,
) -> Any:
    first_time = not event.results_published
    event.results_published = True
    event.results_published_at = get_datetime_utc()
    session.add(event)
    session.commit()
    session.refresh(event)

    if first_time:
        results_url = f"{settings.FRONTEND_HOST}/events/{event.id}/results"
        notify(
            session=session,
            user_ids=crud.registered_user_ids(session=session, event_id=event.id),
            type=NotificationType.results_published,
            title="Results published",
            message=f"The results for {event.name} are out",
            related_event_id=event.id,
            action_url=f"/events/{event.id}/results",
            background_tasks=background_tasks,
            email=email_service.results_published(
                name="there", event_name=event.name, results_url=results_url
            ),
        )
    return event_results(session=session, event=event)


@router.get("/{event_id}/landing-page", response_model=LandingPagePublic)
def read_landing_page(event: EventDep, current_user: StaffUser) -> Any:
    return LandingPagePublic(
        slug=event.landing_slug,
        template=event.landing_template,
        published=event.landing_published,
        custom_content=event.landing_custom_content or {},
    )


@router.put("/{event_id}/landing-page", response_model=LandingPagePublic)
def update_landing_page(
    *, session: SessionDep, event: EventDep, current_user: StaffUser, body: LandingPageUpdate
) -> Any:
    """
    Configure the public landing page. Slugs are unique across events.
    """
    taken = session.exec(
        select(Event.id).where(Event.landing_slug == body.slug, Event.id != event.id)
    ).first()
    if taken:
        raise HTTPException(status_code=409, detail="This landing page URL is already in use")
    if not crud.find_config(session=session, table=TemplateConfig, id_or_slug=body.template):
        raise HTTPException(status_code=400, detail="Template not found")

    event.landing_slug = body.slug
    event.landing_template = body.template
    event.landing_published = body.published
    event.landing_custom_content = body.custom_content
    session.add(event)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="This landing page URL is already in use")
    session.refresh(event)
    return LandingPagePublic(
        slug=event.landing_slug,
        template=event.landing_template,
        published=event.landing_published,
        custom_content=event.landing_custom_content or {},
    )
