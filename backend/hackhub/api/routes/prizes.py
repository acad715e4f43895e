import uuid
from typing import Any

from fastapi import APIRouter, HTTPException
from sqlmodel import Session, col, select

from hackhub import crud
from hackhub.api.deps import OptionalUser, SessionDep, StaffUser
from hackhub.models import (
    Event,
    Message,
    Partner,
    Prize,
    PrizeAward,
    PrizeCreate,
    PrizePublic,
    PrizesPublic,
    PrizeUpdate,
    Project,
    get_datetime_utc,
)

router = APIRouter(prefix="/prizes", tags=["prizes"])


def get_prize_or_404(session: SessionDep, prize_id: uuid.UUID) -> Prize:
    prize = session.get(Prize, prize_id)
    if not prize:
        raise HTTPException(status_code=404, detail="Prize not found")
    return prize


def record_partner_engagement(session: Session, partner: Partner, prize: Prize) -> None:
    """Remember on the partner which events and prizes it sponsored."""
    engagement = dict(partner.engagement or {})
    events = list(engagement.get("events_participated") or [])
    prizes = list(engagement.get("prizes_offered") or [])
    if str(prize.event_id) not in events:
        events.append(str(prize.event_id))
    if str(prize.id) not in prizes:
        prizes.append(str(prize.id))
    engagement.update(
        events_participated=events,
        prizes_offered=prizes,
        last_engagement_date=get_datetime_utc().isoformat(),
    )
    partner.engagement = engagement
    session.add(partner)


@router.get("/", response_model=PrizesPublic)
def read_prizes(
    session: SessionDep, current_user: OptionalUser, event_id: uuid.UUID | None = None
) -> Any:
    """
    Prizes, optionally for one event. Inactive prizes are only listed for staff.
    """
    statement = select(Prize)
    if event_id:
        statement = statement.where(Prize.event_id == event_id)
    if not (current_user and current_user.is_staff):
        statement = statement.where(Prize.is_active == True)  # noqa: E712
    prizes = session.exec(statement.order_by(col(Prize.display_order))).all()
    return PrizesPublic(data=prizes, count=len(prizes))


@router.get("/{prize_id}", response_model=PrizePublic)
def read_prize(session: SessionDep, prize_id: uuid.UUID) -> Any:
    return get_prize_or_404(session, prize_id)


@router.post("/", response_model=PrizePublic)
def create_prize(*, session: SessionDep, current_user: StaffUser, prize_in: PrizeCreate) -> Any:
    if not session.get(Event, prize_in.event_id):
        raise HTTPException(status_code=404, detail="Event not found")
    partner = None
    if prize_in.partner_id:
        partner = session.get(Partner, prize_in.partner_id)
        if not partner:
            raise HTTPException(status_code=404, detail="Partner not found")

    prize = Prize.model_validate(crud.dump_document(prize_in))
    session.add(prize)
    if partner:
        record_partner_engagement(session, partner, prize)
    session.commit()
    session.refresh(prize)
    return prize


@router.patch("/{prize_id}", response_model=PrizePublic)
def update_prize(
    *, session: SessionDep, prize_id: uuid.UUID, current_user: StaffUser, prize_in: PrizeUpdate
) -> Any:
    prize = get_prize_or_404(session, prize_id)
    update_data = crud.dump_document(prize_in, exclude_unset=True)
    partner = None
    if update_data.get("partner_id"):
        partner = session.get(Partner, update_data["partner_id"])
        if not partner:
            raise HTTPException(status_code=404, detail="Partner not found")
    prize.sqlmodel_update(update_data)
    session.add(prize)
    if partner:
        record_partner_engagement(session, partner, prize)
    session.commit()
    session.refresh(prize)
    return prize


@router.delete("/{prize_id}", response_model=Message)
def delete_prize(session: SessionDep, prize_id: uuid.UUID, current_user: StaffUser) -> Any:
    prize = get_prize_or_404(session, prize_id)
    session.delete(prize)
    session.commit()
    return Message(message="Prize deleted successfully")


@router.post("/{prize_id}/winners", response_model=PrizePublic)
def award_prize(
    *, session: SessionDep, prize_id: uuid.UUID, current_user: StaffUser, body: PrizeAward
) -> Any:
    """
    Record a winning project. The project has to belong to the prize's event.
    """
    prize = get_prize_or_404(session, prize_id)
    project = session.get(Project, body.project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    if project.event_id != prize.event_id:
        raise HTTPException(status_code=400, detail="Project does not belong to this prize's event")
    winners = list(prize.winners or [])
    if any(w.get("project_id") == str(project.id) for w in winners):
        raise HTTPException(status_code=409, detail="Project has already won this prize")

    winners.append(
        {
            "project_id": str(project.id),
            "team_id": str(project.team_id),
            "awarded_at": get_datetime_utc().isoformat(),
            "notes": body.notes,
        }
    )
    prize.winners = winners
    session.add(prize)
    session.commit()
    session.refresh(prize)
    return prize
