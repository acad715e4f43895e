from hackhub.ai.artifacts import GeneratedIdeas, IdeaRequest
from hackhub.ai.base import BaseAgent
from hackhub.ai.prompts.ideas import IDEA_SYSTEM_PROMPT, build_idea_prompt


class IdeaAgent(BaseAgent[IdeaRequest, GeneratedIdeas]):
    """
    Brainstorms hackathon project ideas from the event context and what the
    team said about its skills, preferences and time budget.
    """

    async def run(self, input_data: IdeaRequest) -> GeneratedIdeas:
        result = await self.llm.generate_structured(
            system_prompt=IDEA_SYSTEM_PROMPT,
            user_prompt=build_idea_prompt(
                event_theme=input_data.event_theme,
                event_categories=input_data.event_categories,
                inputs=input_data.inputs.model_dump(),
                count=input_data.count,
            ),
            response_schema=GeneratedIdeas,
        )
        if not result.ideas:
            raise ValueError("IdeaAgent returned no ideas.")
        return GeneratedIdeas(ideas=result.ideas[: input_data.count])
