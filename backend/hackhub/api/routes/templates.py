from typing import Any

from fastapi import APIRouter, HTTPException
from sqlmodel import Session, col, select, update

from hackhub import crud
from hackhub.api.deps import AdminUser, SessionDep, StaffUser
from hackhub.models import (
    FormClone,
    Message,
    TemplateConfig,
    TemplateCreate,
    TemplatePublic,
    TemplatesPublic,
    TemplateUpdate,
)

router = APIRouter(prefix="/admin/templates", tags=["templates"])


def get_template_or_404(session: SessionDep, template_id: str) -> TemplateConfig:
    template = crud.find_config(session=session, table=TemplateConfig, id_or_slug=template_id)
    if not template:
        raise HTTPException(status_code=404, detail="Template not found")
    return template


def clear_default(session: Session, keep: TemplateConfig) -> None:
    # Only one template may be the default at a time.
    session.exec(  # type: ignore[call-overload]
        update(TemplateConfig)
        .where(col(TemplateConfig.id) != keep.id, col(TemplateConfig.is_default) == True)  # noqa: E712
        .values(is_default=False)
    )


@router.get("/", response_model=TemplatesPublic)
def read_templates(session: SessionDep, current_user: StaffUser) -> Any:
    templates = session.exec(
        select(TemplateConfig).order_by(
            col(TemplateConfig.is_default).desc(),
            col(TemplateConfig.is_built_in).desc(),
            col(TemplateConfig.name),
        )
    ).all()
    return TemplatesPublic(data=templates, count=len(templates))


@router.get("/{template_id}", response_model=TemplatePublic)
def read_template(session: SessionDep, template_id: str, current_user: StaffUser) -> Any:
    return get_template_or_404(session, template_id)


@router.post("/", response_model=TemplatePublic)
def create_template(
    *, session: SessionDep, current_user: AdminUser, template_in: TemplateCreate
) -> Any:
    if crud.slug_taken(session=session, table=TemplateConfig, slug=template_in.slug):
        raise HTTPException(status_code=409, detail="A template with this slug already exists")
    template = TemplateConfig.model_validate(
        crud.dump_document(template_in), update={"created_by": current_user.id}
    )
    session.add(template)
    session.flush()
    if template.is_default:
        clear_default(session, template)
    session.commit()
    session.refresh(template)
    return template


@router.patch("/{template_id}", response_model=TemplatePublic)
def update_template(
    *, session: SessionDep, template_id: str, current_user: AdminUser, template_in: TemplateUpdate
) -> Any:
    """
    Edit a custom template. Built-in templates only accept the default flag.
    """
    template = get_template_or_404(session, template_id)
    update_data = crud.dump_document(template_in, exclude_unset=True)
    if template.is_built_in and set(update_data) - {"is_default"}:
        raise HTTPException(status_code=403, detail="Built-in templates cannot be edited. Clone it instead.")
    if template_in.slug and crud.slug_taken(
        session=session, table=TemplateConfig, slug=template_in.slug, exclude_id=template.id
    ):
        raise HTTPException(status_code=409, detail="A template with this slug already exists")
    template.sqlmodel_update(update_data)
    session.add(template)
    if template.is_default:
        clear_default(session, template)
    session.commit()
    session.refresh(template)
    return template


@router.delete("/{template_id}", response_model=Message)
def delete_template(session: SessionDep, template_id: str, current_user: AdminUser) -> Any:
    template = get_template_or_404(session, template_id)
    if template.is_built_in:
        raise HTTPException(status_code=403, detail="Built-in templates cannot be deleted")
    if template.is_default:
        raise HTTPException(status_code=400, detail="Choose another default template first")
    session.delete(template)
    session.commit()
    return Message(message="Template deleted successfully")


@router.post("/{template_id}/clone", response_model=TemplatePublic)
def clone_template(
    *, session: SessionDep, template_id: str, current_user: AdminUser, body: FormClone | None = None
) -> Any:
    source = get_template_or_404(session, template_id)
    body = body or FormClone()
    return crud.clone_config(
        session=session, source=source, created_by=current_user.id, name=body.name, slug=body.slug
    )
