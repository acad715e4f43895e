from typing import Any

from fastapi import APIRouter, HTTPException
from sqlmodel import col, select

from hackhub import crud
from hackhub.api.deps import SessionDep
from hackhub.models import (
    Event,
    LandingPageView,
    Partner,
    PartnerPrize,
    Prize,
    TemplateConfig,
    TemplatePublic,
)

router = APIRouter(prefix="/landing-pages", tags=["landing-pages"])


@router.get("/{slug}", response_model=LandingPageView)
def read_landing_page(session: SessionDep, slug: str) -> Any:
    """
    Public landing page of an event: the event, its resolved template and
    active prizes, with partner-sponsored prizes listed separately.
    """
    event = session.exec(
        select(Event).where(Event.landing_slug == slug, Event.landing_published == True)  # noqa: E712
    ).first()
    if not event:
        raise HTTPException(status_code=404, detail="Landing page not found")

    template = crud.find_config(session=session, table=TemplateConfig, id_or_slug=event.landing_template)
    if not template:
        template = session.exec(select(TemplateConfig).where(TemplateConfig.is_default == True)).first()  # noqa: E712
    template_public = TemplatePublic.model_validate(template) if template else None

    prizes = session.exec(
        select(Prize)
        .where(Prize.event_id == event.id, Prize.is_active == True)  # noqa: E712
        .order_by(col(Prize.display_order))
    ).all()
    partner_ids = {p.partner_id for p in prizes if p.partner_id}
    partners = (
        {p.id: p for p in session.exec(select(Partner).where(col(Partner.id).in_(partner_ids))).all()}
        if partner_ids
        else {}
    )
    partner_prizes = [
        PartnerPrize(
            title=prize.title,
            description=prize.description,
            value=prize.value,
            category=prize.category,
            partner_name=partners[prize.partner_id].name if prize.partner_id in partners else "Partner",
            partner_logo=partners[prize.partner_id].logo if prize.partner_id in partners else None,
        )
        for prize in prizes
        if prize.partner_id
    ]

    return LandingPageView(
        event=event,
        slug=slug,
        template=template_public,
        custom_content=event.landing_custom_content or {},
        sections=[s for s in template_public.sections if s.enabled] if template_public else [],
        prizes=prizes,
        partner_prizes=partner_prizes,
    )
