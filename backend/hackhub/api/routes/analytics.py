from typing import Any

from fastapi import APIRouter

from hackhub.api.deps import AdminUser, SessionDep
from hackhub.services.analytics import AdminAnalytics, FeedbackAnalytics, admin_analytics, feedback_analytics

router = APIRouter(prefix="/admin/analytics", tags=["analytics"])


@router.get("/", response_model=AdminAnalytics)
def read_analytics(session: SessionDep, current_user: AdminUser) -> Any:
    """
    Platform-wide counts and distributions for the admin dashboard.
    """
    return admin_analytics(session=session)


@router.get("/feedback", response_model=FeedbackAnalytics)
def read_feedback_analytics(session: SessionDep, current_user: AdminUser) -> Any:
    return feedback_analytics(session=session)
