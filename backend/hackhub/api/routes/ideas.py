import logging
import uuid
from typing import Any

from fastapi import APIRouter, HTTPException
from openai import OpenAIError
from sqlmodel import col, select

from hackhub import crud
from hackhub.ai.artifacts import GeneratedIdea, IdeaInputs, IdeaRequest
from hackhub.ai.builder_prompt import PromptVariant, generate_builder_prompt
from hackhub.ai.idea_agent import IdeaAgent
from hackhub.ai.llm_client import LLMNotConfiguredError
from hackhub.api.deps import CurrentUser, SessionDep
from hackhub.models import (
    BuilderPromptResult,
    Event,
    Prize,
    ProjectIdea,
    ProjectIdeaGenerate,
    ProjectIdeaPublic,
    ProjectIdeasPublic,
    User,
)

router = APIRouter(prefix="/project-suggestions", tags=["project-suggestions"])
logger = logging.getLogger(__name__)


def can_use_idea(session: SessionDep, idea: ProjectIdea, user: User) -> bool:
    if idea.user_id == user.id:
        return True
    if not idea.team_id:
        return False
    membership = crud.get_membership(session=session, event_id=idea.event_id, user_id=user.id)
    return membership is not None and membership.team_id == idea.team_id


def get_idea_or_404(session: SessionDep, idea_id: uuid.UUID, user: User) -> ProjectIdea:
    idea = session.get(ProjectIdea, idea_id)
    if not idea or not can_use_idea(session, idea, user):
        raise HTTPException(status_code=404, detail="Project idea not found")
    return idea


@router.post("/generate", response_model=ProjectIdeasPublic)
async def generate_ideas(
    *, session: SessionDep, current_user: CurrentUser, body: ProjectIdeaGenerate
) -> Any:
    """
    Brainstorm project ideas for the current user's team from the event theme,
    the event's prize categories and what the team said about itself.
    """
    event = session.get(Event, body.event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    try:
        agent = IdeaAgent()
    except LLMNotConfiguredError as exc:
        raise HTTPException(status_code=503, detail=str(exc))

    prize_categories = session.exec(
        select(Prize.category).where(Prize.event_id == event.id, Prize.is_active == True)  # noqa: E712
    ).all()
    categories = list(dict.fromkeys([*(event.tags or []), *(c.value for c in prize_categories)]))
    try:
        result = await agent.run(
            IdeaRequest(
                event_theme=event.theme,
                event_categories=categories,
                inputs=body.inputs,
                count=body.count,
            )
        )
    except (ValueError, OpenAIError) as exc:
        logger.warning("Idea generation failed for user %s: %s", current_user.id, exc)
        raise HTTPException(status_code=502, detail="Idea generation failed, please try again")

    membership = crud.get_membership(session=session, event_id=event.id, user_id=current_user.id)
    ideas = [
        ProjectIdea(
            user_id=current_user.id,
            event_id=event.id,
            team_id=membership.team_id if membership else None,
            inputs=body.inputs.model_dump(mode="json"),
            idea=idea.model_dump(mode="json"),
            model=agent.llm.model_name,
        )
        for idea in result.ideas
    ]
    session.add_all(ideas)
    session.commit()
    for idea in ideas:
        session.refresh(idea)
    logger.info("Generated %s ideas for user %s in event %s", len(ideas), current_user.id, event.id)
    return ProjectIdeasPublic(data=ideas, count=len(ideas))


@router.get("/saved", response_model=ProjectIdeasPublic)
def read_saved_ideas(
    session: SessionDep, current_user: CurrentUser, event_id: uuid.UUID | None = None
) -> Any:
    statement = select(ProjectIdea).where(
        ProjectIdea.user_id == current_user.id, ProjectIdea.saved == True  # noqa: E712
    )
    if event_id:
        statement = statement.where(ProjectIdea.event_id == event_id)
    ideas = session.exec(statement.order_by(col(ProjectIdea.generated_at).desc())).all()
    return ProjectIdeasPublic(data=ideas, count=len(ideas))


@router.post("/{idea_id}/save", response_model=ProjectIdeaPublic)
def save_idea(session: SessionDep, idea_id: uuid.UUID, current_user: CurrentUser) -> Any:
    idea = session.get(ProjectIdea, idea_id)
    if not idea or idea.user_id != current_user.id:
        raise HTTPException(status_code=404, detail="Project idea not found")
    idea.saved = True
    session.add(idea)
    session.commit()
    session.refresh(idea)
    return idea


@router.get("/{idea_id}/builder-prompt", response_model=BuilderPromptResult)
async def read_builder_prompt(
    session: SessionDep,
    idea_id: uuid.UUID,
    current_user: CurrentUser,
    variant: PromptVariant = "full-scaffold",
    enhance: bool = False,
) -> Any:
    """
    Turn an idea into a prompt for an AI coding assistant. The idea's owner
    and teammates in the same event can use it.
    """
    idea = get_idea_or_404(session, idea_id, current_user)
    event = session.get(Event, idea.event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")

    try:
        result = await generate_builder_prompt(
            idea_id=idea.id,
            idea=GeneratedIdea.model_validate(idea.idea),
            inputs=IdeaInputs.model_validate(idea.inputs or {}),
            event=event,
            variant=variant,
            enhance=enhance,
        )
    except LLMNotConfiguredError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    except (ValueError, OpenAIError) as exc:
        logger.warning("Builder prompt enhancement failed for idea %s: %s", idea.id, exc)
        raise HTTPException(status_code=502, detail="Prompt enhancement failed, please try again")

    key = f"{variant}-enhanced" if result.enhanced else variant
    idea.builder_prompts = {**(idea.builder_prompts or {}), key: result.model_dump(mode="json")}
    session.add(idea)
    session.commit()
    return result
