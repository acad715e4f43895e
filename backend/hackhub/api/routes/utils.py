from typing import Any

from fastapi import APIRouter
from sqlmodel import select

from hackhub.api.deps import SessionDep
from hackhub.core.config import settings
from hackhub.models import HealthStatus

router = APIRouter(prefix="/utils", tags=["utils"])


@router.get("/health-check/", response_model=HealthStatus)
def health_check(session: SessionDep) -> Any:
    """
    Liveness of the database plus which outside integrations are configured.
    """
    session.exec(select(1)).one()
    return HealthStatus(
        database=True,
        emails=settings.emails_enabled,
        llm=settings.llm_enabled,
        atlas=settings.atlas_enabled,
    )
