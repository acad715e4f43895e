"""
Builder prompts: a markdown brief a team pastes into an AI coding assistant.

The base prompt is plain template interpolation over a saved idea and its
event. Enhancement is an optional single LLM pass that only adds content.
"""
import logging
import math
import uuid
from typing import Literal

from hackhub.ai.artifacts import GeneratedIdea, IdeaInputs
from hackhub.ai.llm_client import EmptyCompletionError, LLMClient
from hackhub.ai.prompts.builder import ENHANCE_SYSTEM_PROMPT, VARIANT_INSTRUCTIONS
from hackhub.core.config import settings
from hackhub.models import BuilderPromptMetadata, BuilderPromptResult, Event, get_datetime_utc

logger = logging.getLogger(__name__)

PromptVariant = Literal["full-scaffold", "backend-first", "frontend-first"]

BLOCK_SEPARATOR = "\n\n---\n\n"


def _format_list(items: list[str] | str | None) -> str:
    if not items:
        return "Not specified"
    if isinstance(items, str):
        return items
    return ", ".join(items)


def build_context_block(idea: GeneratedIdea, inputs: IdeaInputs, event: Event) -> str:
    return f"""# Project: {idea.name}

## Context

You are helping a hackathon team build a project. Here is the full context:

**Project Name:** {idea.name}
**Tagline:** {idea.tagline}

**Problem Statement:**
{idea.problem_statement}

**Solution:**
{idea.solution}

**Event Theme:** {event.theme or "Open"}
**Hackathon Duration:** {inputs.time_commitment} hours
**Complexity Target:** {inputs.complexity_preference}
**Team Size:** {inputs.team_size} developers
**Skill Levels:** {_format_list(inputs.skill_levels) if inputs.skill_levels else "Mixed"}"""


def build_tech_block(idea: GeneratedIdea, inputs: IdeaInputs) -> str:
    stack = idea.tech_stack
    block = f"""## Technical Requirements

### Tech Stack

- **Frontend:** {_format_list(stack.frontend)}
- **Backend:** {_format_list(stack.backend)}
- **Database:** {_format_list(stack.database)}
- **APIs & Services:** {_format_list(stack.apis)}
- **Deployment:** {_format_list(stack.deployment)}"""

    if inputs.preferred_languages:
        block += f"\n\n**Languages the team knows:** {', '.join(inputs.preferred_languages)}"
    if inputs.preferred_frameworks:
        block += f"\n**Frameworks the team prefers:** {', '.join(inputs.preferred_frameworks)}"

    block += """

### Architecture

Based on the tech stack and team size, use this architecture:

- Monorepo with clear separation between frontend and backend
- RESTful API with structured JSON responses
- Environment-based configuration (.env files)
- Git-ready with .gitignore for the stack

### Database Schema

Design the database schema for all core entities described in the solution. Include:

- All collections/tables needed
- Field types and validation rules
- Indexes for query performance
- Relationships between entities

### API Endpoints

Scaffold API routes covering:

- CRUD operations for each core entity
- Authentication endpoints (if applicable)
- Any third-party API integrations mentioned in the tech stack"""
    return block


def build_plan_block(idea: GeneratedIdea, inputs: IdeaInputs) -> str:
    lines = [
        "## Implementation Plan",
        "",
        f"The team has **{inputs.time_commitment} hours** total. Here is the phased plan:",
    ]
    for number, phase in enumerate(idea.timeline, start=1):
        lines.append("")
        lines.append(f"### Phase {number}: {phase.phase} ({phase.hours} hours)")
        lines.extend(f"- {task}" for task in phase.tasks)
    return "\n".join(lines)


def build_constraints_block(idea: GeneratedIdea, event: Event) -> str:
    block = f"""## Priorities for Judging

This project targets the **{_format_list(idea.prize_categories) if idea.prize_categories else "General"}** prize category.

**Key differentiator:** {idea.differentiator or "See solution description above."}

**Difficulty level:** {idea.difficulty}/5

Focus demo effort on:
1. The core functionality that demonstrates the problem-solution fit
2. Visual polish on the primary user flow
3. A compelling 2-minute walkthrough narrative"""
    if event.rules:
        block += f"\n\n**Event Rules to Follow:**\n{event.rules}"
    if event.judging_criteria:
        block += f"\n\n**Judging Criteria:** {', '.join(event.judging_criteria)}"
    return block


def build_prompt(idea: GeneratedIdea, inputs: IdeaInputs, event: Event, variant: PromptVariant) -> str:
    return BLOCK_SEPARATOR.join(
        [
            build_context_block(idea, inputs, event),
            build_tech_block(idea, inputs),
            build_plan_block(idea, inputs),
            build_constraints_block(idea, event),
            VARIANT_INSTRUCTIONS[variant],
        ]
    )


def estimate_tokens(prompt: str) -> int:
    # Roughly four characters per token for English text
    return math.ceil(len(prompt) / 4)


async def enhance_prompt(prompt: str, llm: LLMClient | None = None) -> str | None:
    """Rewrite ``prompt`` with the enhancement model. None when the model returns nothing."""
    client = llm or LLMClient(model_name=settings.MODEL_ENHANCE)
    try:
        return await client.generate_text(ENHANCE_SYSTEM_PROMPT, prompt, temperature=0.4)
    except EmptyCompletionError:
        logger.warning("Enhancement returned no content, keeping the base prompt")
        return None


async def generate_builder_prompt(
    *,
    idea_id: uuid.UUID,
    idea: GeneratedIdea,
    inputs: IdeaInputs,
    event: Event,
    variant: PromptVariant = "full-scaffold",
    enhance: bool = False,
    llm: LLMClient | None = None,
) -> BuilderPromptResult:
    prompt = build_prompt(idea, inputs, event, variant)
    enhanced = False
    if enhance:
        logger.info("Enhancing %s builder prompt for idea %s", variant, idea_id)
        rewritten = await enhance_prompt(prompt, llm)
        if rewritten:
            prompt, enhanced = rewritten, True

    return BuilderPromptResult(
        prompt=prompt,
        variant=variant,
        enhanced=enhanced,
        token_estimate=estimate_tokens(prompt),
        metadata=BuilderPromptMetadata(
            idea_id=idea_id,
            idea_name=idea.name,
            event_name=event.name,
            generated_at=get_datetime_utc(),
        ),
    )
