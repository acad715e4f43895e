import uuid
from collections import Counter
from typing import Any

from fastapi import APIRouter, BackgroundTasks, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlmodel import col, or_, select

from hackhub import crud
from hackhub.api.deps import AdminUser, EventDep, OptionalUser, SessionDep, StaffUser
from hackhub.core.config import settings
from hackhub.models import (
    Event,
    EventFeedbackForms,
    EventPublic,
    FeedbackAudience,
    FeedbackFormConfig,
    FeedbackFormCreate,
    FeedbackFormPublic,
    FeedbackFormsPublic,
    FeedbackFormUpdate,
    FeedbackRequestReport,
    FeedbackResponse,
    FeedbackResponsePublic,
    FeedbackResponsesSummary,
    FeedbackSubmit,
    FormClone,
    Message,
    NotificationType,
    RespondentType,
    User,
    get_datetime_utc,
)
from hackhub.services import email as email_service
from hackhub.services.feedback import completion_minutes, summarize_questions, validate_answers
from hackhub.services.notifications import notify, wants_email

router = APIRouter(tags=["feedback-forms"])

AUDIENCES = {
    RespondentType.participant: (FeedbackAudience.participant, FeedbackAudience.both),
    RespondentType.partner: (FeedbackAudience.partner, FeedbackAudience.both),
}


def get_form_or_404(session: SessionDep, form_id: str) -> FeedbackFormConfig:
    form = crud.find_config(session=session, table=FeedbackFormConfig, id_or_slug=form_id)
    if not form:
        raise HTTPException(status_code=404, detail="Feedback form not found")
    return form


def forbid_built_in(form: FeedbackFormConfig, action: str) -> None:
    if form.is_built_in:
        raise HTTPException(
            status_code=403, detail=f"Built-in forms cannot be {action}. Clone it instead."
        )


@router.get("/admin/feedback-forms", response_model=FeedbackFormsPublic)
def read_feedback_forms(session: SessionDep, current_user: StaffUser) -> Any:
    forms = session.exec(
        select(FeedbackFormConfig).order_by(
            col(FeedbackFormConfig.is_built_in).desc(), col(FeedbackFormConfig.name)
        )
    ).all()
    return FeedbackFormsPublic(data=forms, count=len(forms))


@router.get("/admin/feedback-forms/{form_id}", response_model=FeedbackFormPublic)
def read_feedback_form(session: SessionDep, form_id: str, current_user: StaffUser) -> Any:
    return get_form_or_404(session, form_id)


@router.post("/admin/feedback-forms", response_model=FeedbackFormPublic)
def create_feedback_form(
    *, session: SessionDep, current_user: AdminUser, form_in: FeedbackFormCreate
) -> Any:
    if crud.slug_taken(session=session, table=FeedbackFormConfig, slug=form_in.slug):
        raise HTTPException(status_code=409, detail="A form with this slug already exists")
    form = FeedbackFormConfig.model_validate(
        crud.dump_document(form_in), update={"created_by": current_user.id}
    )
    session.add(form)
    session.commit()
    session.refresh(form)
    return form


@router.patch("/admin/feedback-forms/{form_id}", response_model=FeedbackFormPublic)
def update_feedback_form(
    *, session: SessionDep, form_id: str, current_user: AdminUser, form_in: FeedbackFormUpdate
) -> Any:
    form = get_form_or_404(session, form_id)
    forbid_built_in(form, "edited")
    if form_in.slug and crud.slug_taken(
        session=session, table=FeedbackFormConfig, slug=form_in.slug, exclude_id=form.id
    ):
        raise HTTPException(status_code=409, detail="A form with this slug already exists")
    form.sqlmodel_update(crud.dump_document(form_in, exclude_unset=True))
    session.add(form)
    session.commit()
    session.refresh(form)
    return form


@router.delete("/admin/feedback-forms/{form_id}", response_model=Message)
def delete_feedback_form(session: SessionDep, form_id: str, current_user: AdminUser) -> Any:
    form = get_form_or_404(session, form_id)
    forbid_built_in(form, "deleted")
    events = session.exec(
        select(Event).where(
            or_(
                Event.participant_feedback_form_id == form.id,
                Event.partner_feedback_form_id == form.id,
            )
        )
    ).all()
    for event in events:
        if event.participant_feedback_form_id == form.id:
            event.participant_feedback_form_id = None
        if event.partner_feedback_form_id == form.id:
            event.partner_feedback_form_id = None
        session.add(event)
    session.delete(form)
    session.commit()
    return Message(message="Feedback form deleted successfully")


@router.post("/admin/feedback-forms/{form_id}/clone", response_model=FeedbackFormPublic)
def clone_feedback_form(
    *, session: SessionDep, form_id: str, current_user: AdminUser, body: FormClone | None = None
) -> Any:
    source = get_form_or_404(session, form_id)
    body = body or FormClone()
    return crud.clone_config(
        session=session, source=source, created_by=current_user.id, name=body.name, slug=body.slug
    )


@router.put("/admin/events/{event_id}/feedback-forms", response_model=EventPublic)
def assign_feedback_forms(
    *, session: SessionDep, event: EventDep, current_user: StaffUser, body: EventFeedbackForms
) -> Any:
    """
    Choose the feedback forms sent to participants and to partners of an event.
    """
    for form_id, respondent in (
        (body.participant_form_id, RespondentType.participant),
        (body.partner_form_id, RespondentType.partner),
    ):
        if not form_id:
            continue
        form = session.get(FeedbackFormConfig, form_id)
        if not form:
            raise HTTPException(status_code=404, detail="Feedback form not found")
        if form.target_audience not in AUDIENCES[respondent]:
            raise HTTPException(
                status_code=400,
                detail=f"{form.name} is not meant for {respondent.value}s",
            )
    event.participant_feedback_form_id = body.participant_form_id
    event.partner_feedback_form_id = body.partner_form_id
    session.add(event)
    session.commit()
    session.refresh(event)
    return event


def get_assigned_form(session: SessionDep, form_id: uuid.UUID, event_id: uuid.UUID) -> tuple[FeedbackFormConfig, Event]:
    form = session.get(FeedbackFormConfig, form_id)
    event = session.get(Event, event_id)
    if not form or not event or form.id not in (
        event.participant_feedback_form_id,
        event.partner_feedback_form_id,
    ):
        raise HTTPException(status_code=404, detail="Feedback form not found for this event")
    return form, event


@router.get("/feedback/{form_id}", response_model=FeedbackFormPublic)
def read_public_feedback_form(session: SessionDep, form_id: uuid.UUID, event_id: uuid.UUID) -> Any:
    form, _ = get_assigned_form(session, form_id, event_id)
    return form


@router.post("/feedback/{form_id}", response_model=FeedbackResponsePublic)
def submit_feedback(
    *, session: SessionDep, form_id: uuid.UUID, current_user: OptionalUser, body: FeedbackSubmit
) -> Any:
    """
    Submit a feedback response. Each email can answer a form once per event.
    """
    form, event = get_assigned_form(session, form_id, body.event_id)
    slot = (
        event.participant_feedback_form_id
        if body.respondent_type == RespondentType.participant
        else event.partner_feedback_form_id
    )
    if slot != form.id:
        raise HTTPException(
            status_code=400,
            detail=f"This form is not the {body.respondent_type.value} form for this event",
        )
    try:
        answers = validate_answers(form.sections or [], body.answers)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    email = body.respondent_email.lower()
    duplicate = session.exec(
        select(FeedbackResponse.id).where(
            FeedbackResponse.form_id == form.id,
            FeedbackResponse.event_id == event.id,
            FeedbackResponse.respondent_email == email,
        )
    ).first()
    if duplicate:
        raise HTTPException(status_code=409, detail="You have already submitted feedback for this event")

    submitted_at = get_datetime_utc()
    response = FeedbackResponse(
        form_id=form.id,
        event_id=event.id,
        respondent_email=email,
        respondent_name=body.respondent_name,
        respondent_type=body.respondent_type,
        user_id=current_user.id if current_user else None,
        answers=answers,
        started_at=body.started_at,
        submitted_at=submitted_at,
        completion_time_minutes=completion_minutes(body.started_at, submitted_at),
    )
    session.add(response)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="You have already submitted feedback for this event")
    session.refresh(response)
    return response


@router.get("/admin/events/{event_id}/feedback-responses", response_model=FeedbackResponsesSummary)
def read_feedback_responses(
    session: SessionDep,
    event: EventDep,
    current_user: StaffUser,
    respondent_type: RespondentType | None = None,
) -> Any:
    """
    Every response for an event with per-question aggregates.
    """
    statement = select(FeedbackResponse).where(FeedbackResponse.event_id == event.id)
    if respondent_type:
        statement = statement.where(FeedbackResponse.respondent_type == respondent_type)
    responses = session.exec(statement.order_by(col(FeedbackResponse.submitted_at).desc())).all()

    questions = []
    for form_id in dict.fromkeys(r.form_id for r in responses):
        form = session.get(FeedbackFormConfig, form_id)
        if form:
            form_responses = [r for r in responses if r.form_id == form_id]
            questions.extend(summarize_questions(form.sections or [], form_responses))

    minutes = [r.completion_time_minutes for r in responses if r.completion_time_minutes is not None]
    return FeedbackResponsesSummary(
        event_id=event.id,
        total_responses=len(responses),
        by_respondent_type=dict(Counter(r.respondent_type.value for r in responses)),
        average_completion_minutes=round(sum(minutes) / len(minutes), 1) if minutes else None,
        questions=questions,
        responses=responses,
    )


@router.post("/admin/events/{event_id}/send-feedback", response_model=FeedbackRequestReport)
def send_feedback_requests(
    *,
    session: SessionDep,
    event: EventDep,
    current_user: StaffUser,
    background_tasks: BackgroundTasks,
) -> Any:
    """
    Ask every registered participant to fill in the event's feedback form.
    """
    if not event.participant_feedback_form_id:
        raise HTTPException(status_code=400, detail="No participant feedback form is assigned to this event")
    form_id = event.participant_feedback_form_id
    user_ids = crud.registered_user_ids(session=session, event_id=event.id)
    users = session.exec(select(User).where(col(User.id).in_(user_ids))).all() if user_ids else []
    form_url = f"{settings.FRONTEND_HOST}/feedback/{form_id}?event_id={event.id}"

    notify(
        session=session,
        user_ids=user_ids,
        type=NotificationType.feedback_requested,
        title="Share your feedback",
        message=f"Tell us how {event.name} went",
        related_event_id=event.id,
        action_url=f"/feedback/{form_id}?event_id={event.id}",
        background_tasks=background_tasks,
        email=email_service.feedback_request(name="there", event_name=event.name, form_url=form_url),
    )
    return FeedbackRequestReport(
        form_id=form_id,
        notified=len(user_ids),
        emailed=sum(1 for u in users if u.is_active and wants_email(u)),
    )
