import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from hackhub.ai.artifacts import GeneratedIdea, IdeaInputs, TechStack, TimelinePhase
from hackhub.ai.builder_prompt import (
    BLOCK_SEPARATOR,
    build_prompt,
    estimate_tokens,
    generate_builder_prompt,
)
from hackhub.ai.llm_client import LLMClient
from hackhub.models import Event


def make_event(**overrides) -> Event:
    data = {
        "name": "Spring Hack",
        "description": "A weekend of building things together.",
        "theme": "Developer tools",
        "start_date": datetime(2026, 5, 1, tzinfo=timezone.utc),
        "end_date": datetime(2026, 5, 3, tzinfo=timezone.utc),
        "registration_deadline": datetime(2026, 4, 28, tzinfo=timezone.utc),
        "location": "Dublin",
        "capacity": 100,
    }
    data.update(overrides)
    return Event(**data)


IDEA = GeneratedIdea(
    name="TaskPilot",
    tagline="Your backlog, triaged",
    problem_statement="Teams drown in tickets.",
    solution="An assistant that groups and ranks tickets.",
    tech_stack=TechStack(frontend=["Next.js"], backend=["FastAPI"], database=["MongoDB Atlas"]),
    timeline=[
        TimelinePhase(phase="Setup", hours="2", tasks=["Create repo", "Configure CI"]),
        TimelinePhase(phase="Core", hours="10", tasks=["Ticket import"]),
    ],
    difficulty=4,
    prize_categories=["Best use of AI"],
)
INPUTS = IdeaInputs(team_size=3, time_commitment=36, preferred_languages=["Python", "TypeScript"])


def test_prompt_has_five_blocks():
    prompt = build_prompt(IDEA, INPUTS, make_event(), "full-scaffold")

    blocks = prompt.split(BLOCK_SEPARATOR)
    assert len(blocks) == 5
    assert blocks[0].startswith("# Project: TaskPilot")
    assert "**Hackathon Duration:** 36 hours" in blocks[0]
    assert "**Languages the team knows:** Python, TypeScript" in blocks[1]
    assert "### Phase 2: Core (10 hours)" in blocks[2]
    assert "**Difficulty level:** 4/5" in blocks[3]
    assert blocks[4].startswith("## Output Instructions")


def test_variants_change_only_the_instructions():
    event = make_event()
    full = build_prompt(IDEA, INPUTS, event, "full-scaffold").split(BLOCK_SEPARATOR)
    backend = build_prompt(IDEA, INPUTS, event, "backend-first").split(BLOCK_SEPARATOR)

    assert full[:4] == backend[:4]
    assert full[4] != backend[4]


def test_event_rules_and_criteria_are_included():
    prompt = build_prompt(
        IDEA,
        INPUTS,
        make_event(rules="Open source only", judging_criteria=["Impact", "Polish"]),
        "frontend-first",
    )

    assert "**Event Rules to Follow:**\nOpen source only" in prompt
    assert "**Judging Criteria:** Impact, Polish" in prompt


def test_unspecified_stack_entries():
    idea = IDEA.model_copy(update={"tech_stack": TechStack()})

    prompt = build_prompt(idea, IdeaInputs(), make_event(), "full-scaffold")

    assert "- **Frontend:** Not specified" in prompt
    assert "**Skill Levels:** Mixed" in prompt


def test_estimate_tokens_rounds_up():
    assert estimate_tokens("") == 0
    assert estimate_tokens("abcd") == 1
    assert estimate_tokens("abcde") == 2


@pytest.mark.asyncio
async def test_generate_builder_prompt_enhanced():
    llm = MagicMock()
    llm.generate_text = AsyncMock(return_value="# Enhanced\n\nQuick Wins")
    idea_id = uuid.uuid4()

    result = await generate_builder_prompt(
        idea_id=idea_id,
        idea=IDEA,
        inputs=INPUTS,
        event=make_event(),
        variant="backend-first",
        enhance=True,
        llm=llm,
    )

    assert result.prompt == "# Enhanced\n\nQuick Wins"
    assert result.enhanced is True
    assert result.variant == "backend-first"
    assert result.token_estimate == estimate_tokens(result.prompt)
    assert result.metadata.idea_id == idea_id
    assert result.metadata.event_name == "Spring Hack"
    sent_prompt = llm.generate_text.call_args.args[1]
    assert sent_prompt.startswith("# Project: TaskPilot")


@pytest.mark.asyncio
async def test_generate_builder_prompt_plain_skips_llm():
    llm = MagicMock()
    llm.generate_text = AsyncMock()

    result = await generate_builder_prompt(
        idea_id=uuid.uuid4(), idea=IDEA, inputs=INPUTS, event=make_event(), llm=llm
    )

    assert result.enhanced is False
    assert result.variant == "full-scaffold"
    llm.generate_text.assert_not_called()


@pytest.mark.asyncio
async def test_empty_enhancement_keeps_base_prompt():
    message = MagicMock()
    message.content = ""
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    openai_client = AsyncMock()
    openai_client.chat = MagicMock()
    openai_client.chat.completions.create = AsyncMock(return_value=response)
    event = make_event()

    with patch("hackhub.ai.llm_client.AsyncOpenAI", return_value=openai_client):
        with patch("hackhub.ai.llm_client.settings.LLM_API_KEY", "dummy_key"):
            result = await generate_builder_prompt(
                idea_id=uuid.uuid4(),
                idea=IDEA,
                inputs=INPUTS,
                event=event,
                enhance=True,
                llm=LLMClient(model_name="gpt-4o-mini"),
            )

    assert result.enhanced is False
    assert result.prompt == build_prompt(IDEA, INPUTS, event, "full-scaffold")
    openai_client.chat.completions.create.assert_awaited_once()
