from typing import Any

from fastapi import APIRouter, HTTPException
from sqlmodel import col, select

from hackhub import crud
from hackhub.api.deps import AdminUser, SessionDep, StaffUser
from hackhub.models import (
    Event,
    FormClone,
    Message,
    RegistrationFormConfig,
    RegistrationFormCreate,
    RegistrationFormPublic,
    RegistrationFormsPublic,
    RegistrationFormUpdate,
)

router = APIRouter(prefix="/admin/registration-forms", tags=["registration-forms"])


def get_form_or_404(session: SessionDep, form_id: str) -> RegistrationFormConfig:
    form = crud.find_config(session=session, table=RegistrationFormConfig, id_or_slug=form_id)
    if not form:
        raise HTTPException(status_code=404, detail="Registration form not found")
    return form


@router.get("/", response_model=RegistrationFormsPublic)
def read_registration_forms(session: SessionDep, current_user: StaffUser) -> Any:
    forms = session.exec(
        select(RegistrationFormConfig).order_by(
            col(RegistrationFormConfig.is_built_in).desc(), col(RegistrationFormConfig.name)
        )
    ).all()
    return RegistrationFormsPublic(data=forms, count=len(forms))


@router.get("/{form_id}", response_model=RegistrationFormPublic)
def read_registration_form(session: SessionDep, form_id: str, current_user: StaffUser) -> Any:
    """
    Fetch a registration form by id or slug.
    """
    return get_form_or_404(session, form_id)


@router.post("/", response_model=RegistrationFormPublic)
def create_registration_form(
    *, session: SessionDep, current_user: AdminUser, form_in: RegistrationFormCreate
) -> Any:
    if crud.slug_taken(session=session, table=RegistrationFormConfig, slug=form_in.slug):
        raise HTTPException(status_code=409, detail="A form with this slug already exists")
    form = RegistrationFormConfig.model_validate(
        crud.dump_document(form_in), update={"created_by": current_user.id}
    )
    session.add(form)
    session.commit()
    session.refresh(form)
    return form


@router.patch("/{form_id}", response_model=RegistrationFormPublic)
def update_registration_form(
    *, session: SessionDep, form_id: str, current_user: AdminUser, form_in: RegistrationFormUpdate
) -> Any:
    form = get_form_or_404(session, form_id)
    if form.is_built_in:
        raise HTTPException(status_code=403, detail="Built-in forms cannot be edited. Clone it instead.")
    if form_in.slug and crud.slug_taken(
        session=session, table=RegistrationFormConfig, slug=form_in.slug, exclude_id=form.id
    ):
        raise HTTPException(status_code=409, detail="A form with this slug already exists")
    form.sqlmodel_update(crud.dump_document(form_in, exclude_unset=True))
    session.add(form)
    session.commit()
    session.refresh(form)
    return form


@router.delete("/{form_id}", response_model=Message)
def delete_registration_form(session: SessionDep, form_id: str, current_user: AdminUser) -> Any:
    form = get_form_or_404(session, form_id)
    if form.is_built_in:
        raise HTTPException(status_code=403, detail="Built-in forms cannot be deleted")
    in_use = session.exec(
        select(Event.id).where(Event.registration_form_id == form.id)
    ).first()
    if in_use:
        raise HTTPException(status_code=400, detail="Form is used by an event")
    session.delete(form)
    session.commit()
    return Message(message="Registration form deleted successfully")


@router.post("/{form_id}/clone", response_model=RegistrationFormPublic)
def clone_registration_form(
    *, session: SessionDep, form_id: str, current_user: AdminUser, body: FormClone | None = None
) -> Any:
    source = get_form_or_404(session, form_id)
    body = body or FormClone()
    return crud.clone_config(
        session=session, source=source, created_by=current_user.id, name=body.name, slug=body.slug
    )
