from fastapi import APIRouter

from hackhub.api.routes import (
    analytics,
    atlas,
    events,
    feedback_forms,
    ideas,
    judging,
    landing_pages,
    login,
    notifications,
    partners,
    prizes,
    projects,
    registration_forms,
    teams,
    templates,
    users,
    utils,
)

api_router = APIRouter()
api_router.include_router(login.router)
api_router.include_router(users.router)
api_router.include_router(utils.router)
api_router.include_router(events.router)
api_router.include_router(landing_pages.router)
api_router.include_router(teams.router)
api_router.include_router(projects.router)
api_router.include_router(judging.router)
api_router.include_router(partners.router)
api_router.include_router(prizes.router)
api_router.include_router(feedback_forms.router)
api_router.include_router(registration_forms.router)
api_router.include_router(templates.router)
api_router.include_router(atlas.router)
api_router.include_router(notifications.router)
api_router.include_router(ideas.router)
api_router.include_router(analytics.router)
