import uuid
from typing import Any

from fastapi import APIRouter, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlmodel import col, or_, select

from hackhub import crud
from hackhub.api.deps import AdminUser, SessionDep, StaffUser
from hackhub.models import (
    Message,
    Partner,
    PartnerCreate,
    PartnerPublic,
    PartnersPublic,
    PartnerStatus,
    PartnerTier,
    PartnerUpdate,
)

router = APIRouter(prefix="/partners", tags=["partners"])


def get_partner_or_404(session: SessionDep, partner_id: uuid.UUID) -> Partner:
    partner = session.get(Partner, partner_id)
    if not partner:
        raise HTTPException(status_code=404, detail="Partner not found")
    return partner


def name_taken(session: SessionDep, name: str, exclude_id: uuid.UUID | None = None) -> bool:
    statement = select(Partner.id).where(Partner.name == name)
    if exclude_id:
        statement = statement.where(Partner.id != exclude_id)
    return session.exec(statement).first() is not None


@router.get("/", response_model=PartnersPublic)
def read_partners(
    session: SessionDep,
    current_user: StaffUser,
    tier: PartnerTier | None = None,
    status: PartnerStatus | None = None,
    search: str | None = None,
) -> Any:
    statement = select(Partner)
    if tier:
        statement = statement.where(Partner.tier == tier)
    if status:
        statement = statement.where(Partner.status == status)
    if search:
        pattern = f"%{search}%"
        statement = statement.where(
            or_(
                col(Partner.name).ilike(pattern),
                col(Partner.description).ilike(pattern),
                col(Partner.industry).ilike(pattern),
            )
        )
    partners = session.exec(statement.order_by(col(Partner.name))).all()
    return PartnersPublic(data=partners, count=len(partners))


@router.get("/{partner_id}", response_model=PartnerPublic)
def read_partner(session: SessionDep, partner_id: uuid.UUID, current_user: StaffUser) -> Any:
    return get_partner_or_404(session, partner_id)


@router.post("/", response_model=PartnerPublic)
def create_partner(*, session: SessionDep, current_user: AdminUser, partner_in: PartnerCreate) -> Any:
    if name_taken(session, partner_in.name):
        raise HTTPException(status_code=409, detail="A partner with this name already exists")
    partner = Partner.model_validate(crud.dump_document(partner_in))
    session.add(partner)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="A partner with this name already exists")
    session.refresh(partner)
    return partner


@router.patch("/{partner_id}", response_model=PartnerPublic)
def update_partner(
    *, session: SessionDep, partner_id: uuid.UUID, current_user: AdminUser, partner_in: PartnerUpdate
) -> Any:
    partner = get_partner_or_404(session, partner_id)
    if partner_in.name and name_taken(session, partner_in.name, exclude_id=partner.id):
        raise HTTPException(status_code=409, detail="A partner with this name already exists")
    partner.sqlmodel_update(crud.dump_document(partner_in, exclude_unset=True))
    session.add(partner)
    session.commit()
    session.refresh(partner)
    return partner


@router.delete("/{partner_id}", response_model=Message)
def delete_partner(session: SessionDep, partner_id: uuid.UUID, current_user: AdminUser) -> Any:
    partner = get_partner_or_404(session, partner_id)
    session.delete(partner)
    session.commit()
    return Message(message="Partner deleted successfully")
